"""
Corpus module exports.
"""

from railsync.corpus.scanner import ScenarioCorpusScanner, parse_lines
from railsync.corpus.tag_writer import CaseTagWriter

__all__ = [
    "ScenarioCorpusScanner",
    "parse_lines",
    "CaseTagWriter",
]
