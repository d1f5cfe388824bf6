"""Credential redaction shared by every error and logging path."""

from collections.abc import Iterable
from typing import Any
from urllib.parse import quote, quote_plus

REDACTED = "***"


class Redactor:
    """Replace known secret values with a placeholder."""

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        variants: set[str] = set()
        for secret in secrets:
            if not secret:
                continue
            variants.update({secret, quote(secret, safe=""), quote_plus(secret)})
        # Longest first so an encoded form is not partially replaced by a shorter one
        self._variants = sorted(variants, key=len, reverse=True)

    def redact(self, text: str) -> str:
        for variant in self._variants:
            if variant in text:
                text = text.replace(variant, REDACTED)
        return text

    def redact_value(self, value: Any) -> Any:
        """Redact strings nested anywhere inside JSON-like data."""
        if isinstance(value, str):
            return self.redact(value)
        if isinstance(value, dict):
            return {self.redact_value(k): self.redact_value(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self.redact_value(item) for item in value]
        return value


def mask(value: str) -> str:
    """Short preview of a secret for status output."""
    if len(value) <= 10:
        return REDACTED
    return value[:6] + "..." + value[-4:]
