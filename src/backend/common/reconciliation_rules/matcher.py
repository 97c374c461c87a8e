from __future__ import annotations

from typing import Any, Optional

from . import evaluators as _builtin_evaluators  # noqa: F401
from .config import RuleEngineConfig
from .context import MatchContext, build_context
from .loader import as_transaction, coerce_rule
from .models import (
    ReconciliationRule,
    RuleLogic,
    Transaction,
    UnsupportedCondition,
    parse_condition,
)
from .registry import registry


def evaluate_in_context(record: Transaction, condition: Any, ctx: MatchContext) -> bool:
    # A missing condition is a no-op guard; rules never carry one (fieldless
    # conditions are dropped when the rule is loaded).
    if condition is None:
        return True
    if isinstance(condition, UnsupportedCondition):
        return False
    evaluator = registry.resolve(condition.field)
    if evaluator is None:
        return False
    return evaluator.evaluate(record, condition, ctx)


def matches_in_context(record: Transaction, rule: ReconciliationRule, ctx: MatchContext) -> bool:
    """Fold the rule's conditions strictly left to right.

    The combinator on condition i merges condition i+1 into the running result,
    so ``[A(OR), B(AND), C]`` is ``((A or B) and C)``. There is no precedence.
    ``and``/``or`` short-circuit, which is safe because evaluation is pure.
    """
    if not rule.id or not rule.conditions:
        return False

    conditions = rule.conditions
    result = evaluate_in_context(record, conditions[0], ctx)
    for current, following in zip(conditions, conditions[1:]):
        if current.next_logic == RuleLogic.AND:
            result = result and evaluate_in_context(record, following, ctx)
        else:
            result = result or evaluate_in_context(record, following, ctx)
    return result


def evaluate_condition(
    record: Any,
    condition: Any,
    accounts: Any = None,
    *,
    config: Optional[RuleEngineConfig] = None,
) -> bool:
    """Evaluate one condition (model or stored mapping) against one record."""
    if isinstance(condition, dict):
        condition = parse_condition(condition)
    return evaluate_in_context(as_transaction(record), condition, build_context(accounts, config))


def matches_rule(
    record: Any,
    rule: Any,
    accounts: Any = None,
    *,
    config: Optional[RuleEngineConfig] = None,
) -> bool:
    """True when the rule's conditions match the record. Unreadable rules never match."""
    parsed = coerce_rule(rule)
    if parsed is None:
        return False
    return matches_in_context(as_transaction(record), parsed, build_context(accounts, config))
