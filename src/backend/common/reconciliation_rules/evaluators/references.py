"""Counterparty and location conditions.

Both fields only support ``equals`` (normalized exact id match). Any other
operator evaluates to False; stored rules rely on that.
"""

from __future__ import annotations

from ..context import MatchContext
from ..evaluator import FieldEvaluator
from ..models import CounterpartyCondition, LocationCondition, Transaction
from ..normalize import condition_text, normalize_text
from ..registry import register_evaluator


class _ReferenceEvaluator(FieldEvaluator):
    record_attr: str

    def evaluate(self, record: Transaction, condition, ctx: MatchContext) -> bool:
        if condition.operator != "equals":
            return False
        actual = getattr(record, self.record_attr, None)
        return normalize_text(actual) == normalize_text(condition_text(condition.value))


@register_evaluator
class CounterpartyEvaluator(_ReferenceEvaluator):
    field = "counterpartyId"
    record_attr = "counterparty_id"
    condition_model = CounterpartyCondition


@register_evaluator
class LocationEvaluator(_ReferenceEvaluator):
    field = "locationId"
    record_attr = "location_id"
    condition_model = LocationCondition
