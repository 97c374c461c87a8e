from __future__ import annotations

from typing import Any, Mapping, Optional

from ..context import MatchContext
from ..evaluator import FieldEvaluator
from ..models import MetadataCondition, Transaction
from ..normalize import condition_text
from ..registry import register_evaluator
from .string_checks import match_tokens


def lookup_metadata(metadata: Optional[Mapping[str, Any]], key: Optional[str]) -> Any:
    """Resolve a metadata key case-insensitively; None when absent."""
    if not metadata or not key:
        return None
    if key in metadata:
        return metadata[key]
    wanted = key.strip().casefold()
    for candidate, value in metadata.items():
        if str(candidate).strip().casefold() == wanted:
            return value
    return None


@register_evaluator
class MetadataEvaluator(FieldEvaluator):
    field = "metadata"
    condition_model = MetadataCondition

    def evaluate(self, record: Transaction, condition: MetadataCondition, ctx: MatchContext) -> bool:
        resolved = lookup_metadata(record.metadata, condition.metadata_key)
        if condition.operator == "exists":
            return resolved is not None and condition_text(resolved).strip() != ""

        actual = "" if resolved is None else condition_text(resolved)
        return match_tokens(
            [actual],
            condition_text(condition.value),
            condition.operator,
            separator=ctx.config.token_separator,
        )
