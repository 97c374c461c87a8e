from __future__ import annotations

from typing import Any, Optional, Sequence

from .config import RuleEngineConfig
from .context import MatchContext, build_context
from .loader import as_transaction, coerce_rules
from .matcher import matches_in_context
from .models import ReconciliationRule, Transaction
from .mutations import apply_rule, with_original_description


def apply_rules(
    records: Sequence[Any],
    rules: Sequence[Any],
    accounts: Any = None,
    *,
    config: Optional[RuleEngineConfig] = None,
) -> Sequence[Any]:
    """Run every rule, in the caller's order, over freshly imported records.

    Returns new Transaction values; inputs are never modified. With no usable
    rules the input sequence is returned unchanged.
    """
    active = [rule for rule in coerce_rules(rules) if rule.id]
    if not active:
        return records

    ctx = build_context(accounts, config)
    return [
        apply_rule_chain(as_transaction(record), active, ctx)
        for record in records
        if record is not None
    ]


def apply_rule_chain(
    record: Transaction,
    rules: Sequence[ReconciliationRule],
    ctx: MatchContext,
) -> Transaction:
    current = with_original_description(record)
    matched: list[str] = []
    for rule in rules:
        # Later rules see the result of earlier ones (e.g. a rewritten description).
        if not matches_in_context(current, rule, ctx):
            continue
        matched.append(rule.id)
        current = apply_rule(current, rule)

    if matched:
        current = current.model_copy(
            update={"applied_rule_id": matched[0], "applied_rule_ids": matched}
        )
    return current
