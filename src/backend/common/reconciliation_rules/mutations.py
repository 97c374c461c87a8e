"""How a matching rule's setters fold into a transaction.

Each target field declares a merge policy, so the outcome of a rule chain is
visible here rather than implied by call order:

- ``overwrite``: the last matching rule that sets the field wins
- ``accumulate``: values are unioned across every matching rule, never removed
- ``sticky_true``: once any matching rule sets the flag it stays set
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

from .models import ReconciliationRule, Transaction


class MergePolicy(str, Enum):
    OVERWRITE = "overwrite"
    ACCUMULATE = "accumulate"
    STICKY_TRUE = "sticky_true"


@dataclass(frozen=True)
class RuleSetter:
    target: str
    policy: MergePolicy
    read: Callable[[ReconciliationRule], Any]


RULE_SETTERS: tuple[RuleSetter, ...] = (
    RuleSetter("category_id", MergePolicy.OVERWRITE, lambda r: r.set_category_id),
    RuleSetter("counterparty_id", MergePolicy.OVERWRITE, lambda r: r.counterparty_target),
    RuleSetter("location_id", MergePolicy.OVERWRITE, lambda r: r.set_location_id),
    RuleSetter("user_id", MergePolicy.OVERWRITE, lambda r: r.set_user_id),
    RuleSetter("type_id", MergePolicy.OVERWRITE, lambda r: r.set_transaction_type_id),
    RuleSetter("description", MergePolicy.OVERWRITE, lambda r: r.set_description),
    RuleSetter("tag_ids", MergePolicy.ACCUMULATE, lambda r: r.assign_tag_ids),
    RuleSetter("is_ignored", MergePolicy.STICKY_TRUE, lambda r: r.skip_import),
)

# Setters that edit a transaction's data (everything except the import-skip flag).
FIELD_SETTERS: tuple[RuleSetter, ...] = tuple(
    setter for setter in RULE_SETTERS if setter.policy != MergePolicy.STICKY_TRUE
)


def merge_value(policy: MergePolicy, current: Any, incoming: Any) -> Any:
    if policy == MergePolicy.OVERWRITE:
        return incoming
    if policy == MergePolicy.ACCUMULATE:
        return list(dict.fromkeys([*(current or []), *(item for item in incoming if item)]))
    if policy == MergePolicy.STICKY_TRUE:
        return True if (current or incoming) else current
    raise ValueError(f"Unknown merge policy: {policy!r}")


def rule_updates(
    record: Transaction,
    rule: ReconciliationRule,
    setters: Iterable[RuleSetter] = RULE_SETTERS,
) -> dict[str, Any]:
    """Field updates a matching rule contributes on top of ``record``.

    Unset (empty) setters contribute nothing.
    """
    updates: dict[str, Any] = {}
    for setter in setters:
        incoming = setter.read(rule)
        if not incoming:
            continue
        updates[setter.target] = merge_value(setter.policy, getattr(record, setter.target), incoming)
    return updates


def apply_rule(
    record: Transaction,
    rule: ReconciliationRule,
    setters: Iterable[RuleSetter] = RULE_SETTERS,
) -> Transaction:
    """Return a new transaction with the rule's setters merged in."""
    updates = rule_updates(record, rule, setters)
    if not updates:
        return record
    return record.model_copy(update=updates)


def with_original_description(record: Transaction) -> Transaction:
    """Capture the bank's text once, before any rule rewrites the description."""
    if record.original_description:
        return record
    return record.model_copy(update={"original_description": record.description})
