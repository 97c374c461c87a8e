from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..context import MatchContext
from ..evaluator import FieldEvaluator
from ..models import AmountCondition, Transaction
from ..registry import register_evaluator

logger = logging.getLogger(__name__)


def parse_amount(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


@register_evaluator
class AmountEvaluator(FieldEvaluator):
    field = "amount"
    condition_model = AmountCondition

    def evaluate(self, record: Transaction, condition: AmountCondition, ctx: MatchContext) -> bool:
        expected = parse_amount(condition.value)
        if expected is None:
            logger.debug("Non-numeric amount condition value %r never matches", condition.value)
            return False

        # Direction (debit/credit) is carried by the sign; rules compare magnitudes.
        actual = abs(record.amount or Decimal("0"))
        expected = abs(expected)
        if condition.operator == "equals":
            return abs(actual - expected) < ctx.config.amount_tolerance
        if condition.operator == "greater_than":
            return actual > expected
        if condition.operator == "less_than":
            return actual < expected
        return False
