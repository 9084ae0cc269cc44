"""Case-id marker tags embedded in scenario tag lists (``@C<id>``)."""

import re
from typing import Iterable, Optional

CASE_TAG_PREFIX = "@C"
CASE_TAG_PATTERN = re.compile(r"^@C(\d+)$")


def has_known_case_id(tags: Iterable[str]) -> bool:
    """Return True if any tag is a case-id marker."""
    return extract_case_id(tags) is not None


def extract_case_id(tags: Iterable[str]) -> Optional[int]:
    """Return the id of the first case-id marker, or None."""
    for tag in tags:
        match = CASE_TAG_PATTERN.match(tag.strip())
        if match:
            return int(match.group(1))
    return None


def format_case_id_tag(case_id: int) -> str:
    """Render the marker tag for a remote case id."""
    if case_id < 1:
        raise ValueError(f"Invalid case id: {case_id}")
    return f"{CASE_TAG_PREFIX}{case_id}"
