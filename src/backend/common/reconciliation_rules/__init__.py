"""Reconciliation rule engine.

Pure domain logic over plain data:
- conditions are evaluated per field and folded left to right per rule
- bulk apply runs every rule over newly imported transactions
- rematch previews one rule against saved transactions as (original, updated) pairs
No persistence, HTTP, or UI concerns live here.
"""

from .applicator import apply_rules
from .config import RuleEngineConfig, get_engine_config
from .context import MatchContext, build_context
from .loader import RuleDataError, coerce_rule, coerce_rules, load_rule
from .matcher import evaluate_condition, matches_rule
from .models import (
    Account,
    ReconciliationRule,
    RuleApplyReport,
    RuleLogic,
    RuleMatchPreview,
    RulePreviewReport,
    Transaction,
)
from .mutations import MergePolicy
from .normalize import normalize_text
from .rematch import find_matching_transactions
from .runner import RulesRunner

# Import built-in evaluators so they self-register with the global registry.
from . import evaluators as _builtin_evaluators  # noqa: F401
