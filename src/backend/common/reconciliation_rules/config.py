from __future__ import annotations

import os
from decimal import Decimal

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator


load_dotenv()


class RuleEngineConfig(BaseModel):
    # Two amounts "equal" when their absolute values differ by strictly less than this.
    amount_tolerance: Decimal = Decimal("0.01")
    # Separator for inline alternatives inside a string condition value ("coffee||cafe").
    token_separator: str = "||"

    @field_validator("amount_tolerance")
    @classmethod
    def _non_negative_tolerance(cls, value: Decimal) -> Decimal:
        if not value.is_finite() or value < 0:
            raise ValueError("amount_tolerance must be a finite, non-negative number")
        return value

    @field_validator("token_separator")
    @classmethod
    def _non_empty_separator(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("token_separator must not be blank")
        return value


DEFAULT_CONFIG = RuleEngineConfig()


def get_engine_config() -> RuleEngineConfig:
    """
    Load rule engine configuration from environment variables.

    Reads (all optional):
      RULE_ENGINE_AMOUNT_TOLERANCE, RULE_ENGINE_TOKEN_SEPARATOR
    """
    raw: dict[str, str] = {}
    tolerance = os.getenv("RULE_ENGINE_AMOUNT_TOLERANCE", "").strip()
    if tolerance:
        raw["amount_tolerance"] = tolerance
    separator = os.getenv("RULE_ENGINE_TOKEN_SEPARATOR", "")
    if separator:
        raw["token_separator"] = separator
    try:
        return RuleEngineConfig.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid rule engine configuration in environment: {exc}") from exc
