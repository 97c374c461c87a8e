from __future__ import annotations

import logging
import re
from typing import Sequence

from ..normalize import normalize_text, split_tokens

logger = logging.getLogger(__name__)


def check_value(actual: str, expected: str, operator: str) -> bool:
    """Apply one string operator to one value/token pair.

    Both sides are normalized; an empty expected token never matches. Regex
    patterns run case-insensitively against the raw text, and a malformed
    pattern evaluates to False.
    """
    norm_actual = normalize_text(actual)
    norm_expected = normalize_text(expected)
    if not norm_expected:
        return False

    if operator == "contains":
        return norm_expected in norm_actual
    if operator == "does_not_contain":
        return norm_expected not in norm_actual
    if operator == "equals":
        return norm_actual == norm_expected
    if operator == "starts_with":
        return norm_actual.startswith(norm_expected)
    if operator == "ends_with":
        return norm_actual.endswith(norm_expected)
    if operator == "regex_match":
        try:
            return re.search(expected.strip(), actual or "", re.IGNORECASE) is not None
        except re.error as exc:
            logger.debug("Invalid regex_match pattern %r: %s", expected, exc)
            return False
    return False


def match_tokens(
    candidates: Sequence[str],
    expected: str,
    operator: str,
    *,
    separator: str = "||",
) -> bool:
    """Check an inline OR group (``"coffee||cafe"``) against candidate texts.

    - one token: any candidate satisfying the operator matches
    - ``does_not_contain`` with several tokens: every token must be absent from
      every candidate
    - any other operator with several tokens: any token matching any candidate
    """
    tokens = split_tokens(expected, separator)
    if len(tokens) <= 1:
        return any(check_value(text, expected, operator) for text in candidates)
    if operator == "does_not_contain":
        return all(check_value(text, token, operator) for token in tokens for text in candidates)
    return any(check_value(text, token, operator) for token in tokens for text in candidates)
