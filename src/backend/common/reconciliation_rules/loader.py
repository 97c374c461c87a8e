from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from .models import Account, ReconciliationRule, Transaction

logger = logging.getLogger(__name__)


class RuleDataError(ValueError):
    pass


def load_rule(data: Any, *, strict: bool = False) -> Optional[ReconciliationRule]:
    """
    Build a ReconciliationRule from a stored payload.

    Tolerant by default: an unreadable rule is logged and returned as None so that
    one bad rule never aborts an import. With ``strict=True`` it raises RuleDataError.
    """
    if isinstance(data, ReconciliationRule):
        return data
    if data is None:
        if strict:
            raise RuleDataError("Rule payload is empty.")
        return None
    try:
        return ReconciliationRule.model_validate(data)
    except ValidationError as exc:
        if strict:
            raise RuleDataError(f"Invalid rule payload: {exc}") from exc
        rule_id = data.get("id") if isinstance(data, dict) else None
        logger.warning("Skipping unreadable rule %r: %s", rule_id, exc)
        return None


def coerce_rule(data: Any) -> Optional[ReconciliationRule]:
    return load_rule(data, strict=False)


def coerce_rules(rules: Optional[Iterable[Any]]) -> list[ReconciliationRule]:
    """Tolerantly load many rules, keeping array order and dropping unreadable ones."""
    out: list[ReconciliationRule] = []
    for raw in rules or ():
        rule = coerce_rule(raw)
        if rule is not None:
            out.append(rule)
    return out


def as_transaction(record: Any) -> Transaction:
    if isinstance(record, Transaction):
        return record
    return Transaction.model_validate(record)


def as_account(account: Any) -> Account:
    if isinstance(account, Account):
        return account
    return Account.model_validate(account)


def _load_json(path: Path):
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def _items(payload: Any, key: str) -> list[Any]:
    # Accept either a bare list or an object wrapping it ({"rules": [...]}).
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get(key), list):
        return payload[key]
    raise RuleDataError(f"Expected a JSON list or an object with a '{key}' list.")


def load_rules_file(path: Path) -> list[ReconciliationRule]:
    return coerce_rules(_items(_load_json(path), "rules"))


def load_transactions_file(path: Path) -> list[Transaction]:
    return [as_transaction(item) for item in _items(_load_json(path), "transactions") if item is not None]


def load_accounts_file(path: Optional[Path]) -> list[Account]:
    if path is None:
        return []
    return [as_account(item) for item in _items(_load_json(path), "accounts") if item is not None]
