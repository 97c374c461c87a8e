from __future__ import annotations

from ..context import MatchContext
from ..evaluator import FieldEvaluator
from ..models import AccountCondition, Transaction
from ..normalize import condition_text, normalize_text
from ..registry import register_evaluator
from .string_checks import check_value


@register_evaluator
class AccountEvaluator(FieldEvaluator):
    field = "accountId"
    condition_model = AccountCondition

    def evaluate(self, record: Transaction, condition: AccountCondition, ctx: MatchContext) -> bool:
        expected = condition_text(condition.value)
        if condition.operator == "equals":
            return normalize_text(record.account_id) == normalize_text(expected)
        # Every other operator tests the account's display name, not its id.
        return check_value(ctx.get_account_name(record.account_id), expected, condition.operator)
