"""
Scenario extraction from a directory tree of Gherkin feature files.

Only two line shapes matter: tag lines (``@word`` tokens) and scenario
lines (``Scenario: <title>``). Everything else is ignored.
"""

import re
from pathlib import Path
from typing import Iterator, List, Union

from railsync.core.types import ScenarioRecord
from railsync.monitoring.logger import get_logger

logger = get_logger(__name__)

SCENARIO_PATTERN = re.compile(r"^\s*Scenario:\s*(.+)$")
TAG_PATTERN = re.compile(r"@(\w+)")


def parse_lines(lines: List[str], source: Union[Path, None] = None) -> Iterator[ScenarioRecord]:
    """Yield a record per scenario line, carrying the tags collected above it."""
    pending_tags: List[str] = []

    for number, line in enumerate(lines, start=1):
        if line.strip().startswith("@"):
            pending_tags.extend(f"@{name}" for name in TAG_PATTERN.findall(line))
            continue

        match = SCENARIO_PATTERN.match(line)
        if match:
            yield ScenarioRecord(
                title=match.group(1).strip(),
                tags=pending_tags,
                source=source,
                line=number,
            )
            pending_tags = []


class ScenarioCorpusScanner:
    """
    Lazy, restartable scan of every scenario under a corpus root.

    Each iteration walks the tree again, so a scanner can be reused after
    the corpus has been rewritten.
    """

    def __init__(
        self,
        root: Union[str, Path],
        pattern: str = "*.feature",
        encoding: str = "utf-8-sig",
    ) -> None:
        self.root = Path(root)
        self.pattern = pattern
        self.encoding = encoding

    def __iter__(self) -> Iterator[ScenarioRecord]:
        return self.scan()

    def documents(self) -> List[Path]:
        """Return the matching documents in a stable order."""
        if not self.root.exists():
            logger.warning(f"Corpus root does not exist: {self.root}")
            return []
        if self.root.is_file():
            return [self.root]
        return sorted(path for path in self.root.rglob(self.pattern) if path.is_file())

    def scan(self) -> Iterator[ScenarioRecord]:
        """Yield scenarios from every document, skipping unreadable ones."""
        for path in self.documents():
            yield from self.scan_file(path)

    def scan_file(self, path: Path) -> Iterator[ScenarioRecord]:
        """Yield the scenarios of one document; a bad file yields nothing."""
        logger.debug(f"Processing feature file: {path}")
        try:
            text = path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                f"Skipping unreadable feature file {path}: {exc}",
                extra={"source": str(path)},
            )
            return
        yield from parse_lines(text.splitlines(), source=path)
