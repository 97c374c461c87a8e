from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from .applicator import apply_rules
from .config import RuleEngineConfig
from .context import build_context
from .loader import coerce_rule, coerce_rules
from .models import RuleApplyReport, RulePreviewReport, Transaction
from .rematch import preview_rule

logger = logging.getLogger(__name__)


class RulesRunner:
    def __init__(
        self,
        rules: Optional[Iterable[Any]] = None,
        *,
        accounts: Any = None,
        config: Optional[RuleEngineConfig] = None,
    ):
        self._rules = coerce_rules(rules)
        self._ctx = build_context(accounts, config)

    @property
    def rules(self):
        return list(self._rules)

    def apply(self, records: Iterable[Any]) -> RuleApplyReport:
        records = [r for r in records if r is not None]
        applied = apply_rules(records, self._rules, self._ctx)
        transactions = [r if isinstance(r, Transaction) else Transaction.model_validate(r) for r in applied]

        totals: dict[str, int] = {}
        ignored = 0
        for tx in transactions:
            for rule_id in tx.applied_rule_ids or ():
                totals[rule_id] = totals.get(rule_id, 0) + 1
            if tx.is_ignored:
                ignored += 1

        logger.info(
            "Applied %d rule(s) to %d transaction(s): %d matched, %d marked ignored",
            len(self._rules),
            len(transactions),
            sum(1 for tx in transactions if tx.applied_rule_ids),
            ignored,
        )
        return RuleApplyReport(
            run_id=str(uuid.uuid4()),
            generated_at=datetime.now(timezone.utc),
            transactions=transactions,
            totals=totals,
            ignored_count=ignored,
        )

    def preview(self, records: Iterable[Any], rule: Any) -> RulePreviewReport:
        """Rematch one rule (not necessarily one of this runner's rules) against saved transactions."""
        records = [r for r in records if r is not None]
        parsed = coerce_rule(rule)
        matches = preview_rule(records, parsed, self._ctx) if parsed is not None and parsed.id else []
        logger.info(
            "Rule %r would change %d of %d transaction(s)",
            parsed.id if parsed is not None else None,
            len(matches),
            len(records),
        )
        return RulePreviewReport(
            run_id=str(uuid.uuid4()),
            generated_at=datetime.now(timezone.utc),
            rule_id=parsed.id if parsed is not None else "",
            scanned_count=len(records),
            matches=matches,
        )

    def preview_by_id(self, records: Iterable[Any], rule_id: str) -> RulePreviewReport:
        for rule in self._rules:
            if rule.id == rule_id:
                return self.preview(records, rule)
        raise KeyError(rule_id)
