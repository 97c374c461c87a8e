import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from decimal import Decimal

import pytest

from common.reconciliation_rules.models import Account, ReconciliationRule, Transaction


@pytest.fixture
def accounts() -> list[Account]:
    return [
        Account(id="acct-chk", name="Chase Checking"),
        Account(id="acct-amex", name="Amex Platinum"),
    ]


@pytest.fixture
def make_transaction():
    def _make(
        *,
        description: str = "",
        amount="0",
        original_description=None,
        **fields,
    ) -> Transaction:
        return Transaction(
            id=fields.pop("id", "tx-1"),
            description=description,
            original_description=original_description,
            amount=Decimal(str(amount)),
            **fields,
        )

    return _make


@pytest.fixture
def make_condition():
    def _make(field: str, operator: str, value="", **extra) -> dict:
        return {"field": field, "operator": operator, "value": value, **extra}

    return _make


@pytest.fixture
def make_rule():
    def _make(*conditions, rule_id: str = "rule-1", **setters) -> ReconciliationRule:
        return ReconciliationRule.model_validate(
            {"id": rule_id, "name": rule_id, "conditions": list(conditions), **setters}
        )

    return _make
