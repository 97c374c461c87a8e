from __future__ import annotations

from ..context import MatchContext
from ..evaluator import FieldEvaluator
from ..models import DescriptionCondition, Transaction
from ..normalize import condition_text
from ..registry import register_evaluator
from .string_checks import match_tokens


def description_candidates(record: Transaction) -> list[str]:
    """Current description plus the bank's original text when it differs."""
    current = record.description or ""
    original = record.original_description
    if not original or original == current:
        return [current]
    return [current, original]


@register_evaluator
class DescriptionEvaluator(FieldEvaluator):
    field = "description"
    condition_model = DescriptionCondition

    def evaluate(self, record: Transaction, condition: DescriptionCondition, ctx: MatchContext) -> bool:
        return match_tokens(
            description_candidates(record),
            condition_text(condition.value),
            condition.operator,
            separator=ctx.config.token_separator,
        )
