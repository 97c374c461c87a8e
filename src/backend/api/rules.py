from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from common.reconciliation_rules.catalog import catalog_document
from common.reconciliation_rules.config import get_engine_config
from common.reconciliation_rules.models import Account, Transaction
from common.reconciliation_rules.runner import RulesRunner


router = APIRouter(prefix="/rules", tags=["rules"])


class ApplyRulesRequest(BaseModel):
    transactions: List[Transaction] = Field(default_factory=list)
    # Rules stay raw so one malformed rule is skipped instead of rejecting the request.
    rules: List[Dict[str, Any]] = Field(default_factory=list)
    accounts: List[Account] = Field(default_factory=list)


class PreviewRuleRequest(BaseModel):
    transactions: List[Transaction] = Field(default_factory=list)
    rule: Optional[Dict[str, Any]] = None
    accounts: List[Account] = Field(default_factory=list)


def _runner(rules: List[Dict[str, Any]], accounts: List[Account]) -> RulesRunner:
    try:
        config = get_engine_config()
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return RulesRunner(rules, accounts=accounts, config=config)


@router.post("/apply")
def apply_rules_endpoint(request: ApplyRulesRequest):
    report = _runner(request.rules, request.accounts).apply(request.transactions)
    return report.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.post("/preview")
def preview_rule_endpoint(request: PreviewRuleRequest):
    if not request.rule:
        raise HTTPException(status_code=400, detail="A rule is required for preview.")
    report = _runner([], request.accounts).preview(request.transactions, request.rule)
    return report.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("/catalog")
def rules_catalog():
    return catalog_document()
