from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .config import DEFAULT_CONFIG, RuleEngineConfig
from .models import Account


@dataclass(frozen=True)
class MatchContext:
    accounts: tuple[Account, ...] = ()
    config: RuleEngineConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    def get_account_name(self, account_id: Optional[str]) -> str:
        if not account_id:
            return ""
        for acct in self.accounts:
            if acct.id == account_id:
                return acct.name or ""
        return ""


def build_context(
    accounts: Any = None,
    config: Optional[RuleEngineConfig] = None,
) -> MatchContext:
    """Build a MatchContext from account models or plain mappings.

    An existing MatchContext is returned as-is (``config`` then overrides its config).
    """
    if isinstance(accounts, MatchContext):
        if config is None:
            return accounts
        return MatchContext(accounts=accounts.accounts, config=config)
    return MatchContext(accounts=_as_accounts(accounts or ()), config=config or DEFAULT_CONFIG)


def _as_accounts(accounts: Iterable[Any]) -> tuple[Account, ...]:
    out: list[Account] = []
    for acct in accounts:
        if acct is None:
            continue
        out.append(acct if isinstance(acct, Account) else Account.model_validate(acct))
    return tuple(out)
