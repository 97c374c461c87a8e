from __future__ import annotations

from typing import Any, Iterable, Optional

from .config import RuleEngineConfig
from .context import MatchContext, build_context
from .loader import as_transaction, coerce_rule
from .matcher import matches_in_context
from .models import ReconciliationRule, RuleMatchPreview, Transaction
from .mutations import FIELD_SETTERS, MergePolicy, apply_rule, with_original_description


def find_matching_transactions(
    records: Iterable[Any],
    rule: Any,
    accounts: Any = None,
    *,
    config: Optional[RuleEngineConfig] = None,
) -> list[RuleMatchPreview]:
    """Preview what a single rule would change on already-saved transactions.

    Only pairs where the rule would visibly alter the transaction are returned;
    a match that changes nothing is left out. Nothing is written anywhere.
    """
    parsed = coerce_rule(rule)
    if parsed is None or not parsed.id:
        return []
    return preview_rule(records, parsed, build_context(accounts, config))


def preview_rule(
    records: Iterable[Any],
    rule: ReconciliationRule,
    ctx: MatchContext,
) -> list[RuleMatchPreview]:
    pairs: list[RuleMatchPreview] = []
    for raw in records or ():
        if raw is None:
            continue
        original = as_transaction(raw)
        if not matches_in_context(original, rule, ctx):
            continue
        updated = apply_rule(with_original_description(original), rule, FIELD_SETTERS)
        changed = changed_fields(original, updated)
        if changed:
            pairs.append(RuleMatchPreview(original=original, updated=updated, changed_fields=changed))
    return pairs


def changed_fields(original: Transaction, updated: Transaction) -> list[str]:
    """Names of rule-settable fields that differ; tags count only when the set grew."""
    changed: list[str] = []
    for setter in FIELD_SETTERS:
        before = getattr(original, setter.target)
        after = getattr(updated, setter.target)
        if setter.policy == MergePolicy.ACCUMULATE:
            if len(set(after or [])) > len(set(before or [])):
                changed.append(setter.target)
        elif after != before:
            changed.append(setter.target)
    return changed
