"""Write case-id tags produced by a synchronization pass back into feature files."""

import os
import shutil
import tempfile
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from railsync.core.tags import has_known_case_id
from railsync.core.types import SyncAction
from railsync.corpus.scanner import SCENARIO_PATTERN, TAG_PATTERN
from railsync.monitoring.logger import get_logger

logger = get_logger(__name__)

NEWLINE = "\n"
BOM = "\ufeff"


def _split_ending(line: str) -> tuple[str, str]:
    body = line.rstrip("\r\n")
    return body, line[len(body):]


class CaseTagWriter:
    """Appends ``@C<id>`` tags to the scenarios named by sync actions."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def apply(self, actions: Iterable[SyncAction]) -> int:
        """
        Apply every action to its source document.

        Args:
            actions: Actions from a SyncReport

        Returns:
            Number of tags written
        """
        by_source: Dict[Path, List[SyncAction]] = defaultdict(list)
        for action in actions:
            if action.scenario.source is None:
                logger.warning(
                    f"No source document for '{action.scenario.title}'; add {action.tag} manually"
                )
                continue
            by_source[action.scenario.source].append(action)

        written = 0
        for source, source_actions in by_source.items():
            written += self.apply_to_file(source, source_actions)
        return written

    def apply_to_file(self, path: Path, actions: List[SyncAction]) -> int:
        try:
            with open(path, encoding=self.encoding, newline="") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.error(f"Cannot rewrite {path}: {exc}")
            return 0

        # A leading BOM is kept on write but must not hide first-line tags.
        bom = BOM if text.startswith(BOM) else ""
        lines = text[len(bom):].splitlines(keepends=True)

        located = []
        for action in actions:
            index = self._locate(lines, action)
            if index is None:
                logger.warning(
                    f"Scenario '{action.scenario.title}' not found in {path}; add {action.tag} manually"
                )
                continue
            located.append((index, action))

        # Bottom-up so inserted lines do not shift pending indexes.
        written = 0
        for index, action in sorted(located, key=lambda item: item[0], reverse=True):
            if self._insert_tag(lines, index, action.tag):
                written += 1
                logger.info(f"Tagged '{action.scenario.title}' with {action.tag} in {path}")

        if written:
            self._write_atomic(path, bom + "".join(lines))
        return written

    @staticmethod
    def _locate(lines: List[str], action: SyncAction) -> Optional[int]:
        title = action.scenario.title
        hint = action.scenario.line
        if hint is not None and 0 < hint <= len(lines):
            match = SCENARIO_PATTERN.match(lines[hint - 1].rstrip("\r\n"))
            if match and match.group(1).strip() == title:
                return hint - 1
        for index, line in enumerate(lines):
            match = SCENARIO_PATTERN.match(line.rstrip("\r\n"))
            if match and match.group(1).strip() == title:
                return index
        return None

    @staticmethod
    def _insert_tag(lines: List[str], scenario_index: int, tag: str) -> bool:
        existing: List[str] = []
        cursor = scenario_index - 1
        while cursor >= 0 and lines[cursor].strip().startswith("@"):
            existing.extend(f"@{name}" for name in TAG_PATTERN.findall(lines[cursor]))
            cursor -= 1
        if has_known_case_id(existing):
            return False

        above = scenario_index - 1
        if above > cursor:
            body, ending = _split_ending(lines[above])
            lines[above] = f"{body.rstrip()} {tag}{ending or NEWLINE}"
        else:
            scenario_body, ending = _split_ending(lines[scenario_index])
            indent = scenario_body[: len(scenario_body) - len(scenario_body.lstrip())]
            lines.insert(scenario_index, f"{indent}{tag}{ending or NEWLINE}")
        return True

    def _write_atomic(self, path: Path, content: str) -> None:
        fd, temp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as handle:
                handle.write(content)
            shutil.copymode(path, temp_name)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
