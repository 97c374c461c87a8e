from __future__ import annotations

import re
from typing import Any

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: Any) -> str:
    """Collapse whitespace runs to one space, trim, and lowercase.

    "WALMART   Store" and "walmart store" normalize to the same token, so
    formatting noise in bank descriptions never causes a false negative.
    """
    if text is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(text)).strip().lower()


def condition_text(value: Any) -> str:
    """Render a condition value as text (numbers without a trailing ``.0``)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def split_tokens(value: str, separator: str = "||") -> list[str]:
    """Split an inline OR group (``"coffee || cafe"``) into trimmed, non-empty tokens."""
    return [token.strip() for token in (value or "").split(separator) if token.strip()]
