"""
Redaction of credentials in log output.

The TestRail API key travels in every request; it must never reach a log
line, whether through an exception message, a repr of request headers or a
settings dump.
"""

import logging
import re
from copy import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Pattern, Set

PLACEHOLDER = "[REDACTED]"


@dataclass
class RedactionPattern:
    """Pattern whose matches are replaced in log text."""

    name: str
    pattern: Pattern[str]
    keep_group: int = 0  # leading group kept verbatim (e.g. the "Basic " prefix)

    def apply(self, text: str) -> str:
        if self.keep_group:
            return self.pattern.sub(lambda m: m.group(self.keep_group) + PLACEHOLDER, text)
        return self.pattern.sub(PLACEHOLDER, text)


DEFAULT_PATTERNS: List[RedactionPattern] = [
    RedactionPattern(
        name="basic_auth_header",
        pattern=re.compile(r"(Basic\s+)[A-Za-z0-9+/=]+", re.IGNORECASE),
        keep_group=1,
    ),
    RedactionPattern(
        name="bearer_token",
        pattern=re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE),
        keep_group=1,
    ),
    RedactionPattern(
        name="api_key_assignment",
        pattern=re.compile(
            r"((?:api[_-]?key|password)\s*[:=]\s*[\"']?)[^\"'\s,}]+", re.IGNORECASE
        ),
        keep_group=1,
    ),
]


@dataclass
class SecretRedactor:
    """Replaces known secrets and credential-shaped text with a placeholder."""

    secrets: Set[str] = field(default_factory=set)
    patterns: List[RedactionPattern] = field(default_factory=lambda: list(DEFAULT_PATTERNS))

    def add_secret(self, secret: str) -> None:
        # Very short values would mangle ordinary words.
        if secret and len(secret) >= 4:
            self.secrets.add(secret)

    def add_secrets(self, secrets: Iterable[str]) -> None:
        for secret in secrets:
            self.add_secret(secret)

    def redact(self, text: str) -> str:
        for secret in sorted(self.secrets, key=len, reverse=True):
            text = text.replace(secret, PLACEHOLDER)
        for redaction in self.patterns:
            text = redaction.apply(text)
        return text

    def redact_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.redact(value)
        if isinstance(value, dict):
            return {key: self.redact_value(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(self.redact_value(item) for item in value)
        return value

    def redact_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {key: self.redact_value(value) for key, value in data.items()}

    def redact_record(self, record: logging.LogRecord) -> logging.LogRecord:
        """Return a copy of the record with its rendered message redacted."""
        redacted = copy(record)
        redacted.msg = self.redact(record.getMessage())
        redacted.args = None
        return redacted
