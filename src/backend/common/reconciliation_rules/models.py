from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class RuleLogic(str, Enum):
    AND = "AND"
    OR = "OR"


StringOperator = Literal[
    "contains",
    "does_not_contain",
    "equals",
    "starts_with",
    "ends_with",
    "regex_match",
]
MetadataOperator = Literal[
    "contains",
    "does_not_contain",
    "equals",
    "starts_with",
    "ends_with",
    "regex_match",
    "exists",
]
AmountOperator = Literal["equals", "greater_than", "less_than"]
# counterpartyId/locationId only ever supported exact matching; widening this would
# change which stored rules match which stored transactions.
ReferenceOperator = Literal["equals"]

ConditionValue = Optional[Union[str, int, float]]


class _EngineModel(BaseModel):
    """Base for engine data: accepts the app's camelCase JSON and snake_case names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        coerce_numbers_to_str=True,
    )


def _coerce_logic(value: Any) -> RuleLogic:
    # Anything other than an explicit AND folds as OR; a missing combinator means AND.
    if value is None or value == "":
        return RuleLogic.AND
    if isinstance(value, RuleLogic):
        return value
    return RuleLogic.AND if value == RuleLogic.AND.value else RuleLogic.OR


def _coerce_label(value: Any) -> str:
    # Ids and labels are never evaluated; null or odd values read as text.
    return "" if value is None else str(value)


class _ConditionBase(_EngineModel):
    id: str = ""
    value: ConditionValue = ""
    next_logic: RuleLogic = RuleLogic.AND

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, value: Any) -> str:
        return _coerce_label(value)

    @field_validator("next_logic", mode="before")
    @classmethod
    def _next_logic(cls, value: Any) -> RuleLogic:
        return _coerce_logic(value)


class DescriptionCondition(_ConditionBase):
    field: Literal["description"] = "description"
    operator: StringOperator


class MetadataCondition(_ConditionBase):
    field: Literal["metadata"] = "metadata"
    operator: MetadataOperator
    # Missing key resolves to an absent value rather than failing validation.
    metadata_key: Optional[str] = None


class AmountCondition(_ConditionBase):
    field: Literal["amount"] = "amount"
    operator: AmountOperator


class AccountCondition(_ConditionBase):
    field: Literal["accountId"] = "accountId"
    operator: StringOperator


class CounterpartyCondition(_ConditionBase):
    field: Literal["counterpartyId"] = "counterpartyId"
    operator: ReferenceOperator


class LocationCondition(_ConditionBase):
    field: Literal["locationId"] = "locationId"
    operator: ReferenceOperator


class UnsupportedCondition(_EngineModel):
    """A stored condition whose field/operator pair the engine cannot evaluate.

    It stays in the condition chain (so the fold keeps its shape) and always
    evaluates to False.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    field: str
    operator: str = ""
    value: Any = None
    metadata_key: Any = None
    next_logic: RuleLogic = RuleLogic.AND

    @field_validator("next_logic", mode="before")
    @classmethod
    def _next_logic(cls, value: Any) -> RuleLogic:
        return _coerce_logic(value)

    @field_validator("id", "field", "operator", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _coerce_label(value)

    @classmethod
    def placeholder(cls, raw: Dict[str, Any]) -> "UnsupportedCondition":
        """Keep only what the fold needs from a condition nothing else could read."""
        return cls(
            field=_coerce_label(raw.get("field")),
            next_logic=_coerce_logic(raw.get("nextLogic", raw.get("next_logic"))),
        )


RuleCondition = Annotated[
    Union[
        DescriptionCondition,
        MetadataCondition,
        AmountCondition,
        AccountCondition,
        CounterpartyCondition,
        LocationCondition,
    ],
    Field(discriminator="field"),
]
# Parsing goes through RuleCondition; stored lists hold already-built instances.
AnyCondition = Union[
    DescriptionCondition,
    MetadataCondition,
    AmountCondition,
    AccountCondition,
    CounterpartyCondition,
    LocationCondition,
    UnsupportedCondition,
]

_CONDITION_ADAPTER: TypeAdapter = TypeAdapter(RuleCondition)
_TYPED_CONDITIONS = (
    DescriptionCondition,
    MetadataCondition,
    AmountCondition,
    AccountCondition,
    CounterpartyCondition,
    LocationCondition,
)


def parse_condition(raw: Any) -> Optional[AnyCondition]:
    """Parse one stored condition.

    Returns None for a condition without a field (it is excluded from the rule),
    the typed condition when it reads cleanly, and an UnsupportedCondition for
    anything else that names a field.
    """
    if isinstance(raw, _TYPED_CONDITIONS + (UnsupportedCondition,)):
        return raw
    if not isinstance(raw, dict):
        logger.debug("Dropping non-mapping condition %r", raw)
        return None
    if not raw.get("field"):
        logger.debug("Dropping condition without a field: %r", raw)
        return None
    try:
        return _CONDITION_ADAPTER.validate_python(raw)
    except ValidationError:
        pass
    try:
        condition = UnsupportedCondition.model_validate(raw)
    except ValidationError:
        logger.debug("Keeping unreadable condition as a never-matching placeholder: %r", raw)
        return UnsupportedCondition.placeholder(raw)
    logger.debug(
        "Keeping condition %r as unsupported (field=%s operator=%s); it never matches.",
        condition.id,
        condition.field,
        condition.operator,
    )
    return condition


def _upgrade_legacy_conditions(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    # Rules saved before condition lists existed carried flat match fields.
    logic = data.get("matchLogic", data.get("match_logic")) or RuleLogic.AND.value
    legacy = (
        ("description", "contains", data.get("descriptionContains", data.get("description_contains"))),
        ("accountId", "equals", data.get("accountId", data.get("account_id"))),
        ("amount", "equals", data.get("amountEquals", data.get("amount_equals"))),
    )
    return [
        {"field": field, "operator": operator, "value": value, "nextLogic": logic}
        for field, operator, value in legacy
        if value is not None and value != ""
    ]


class ReconciliationRule(_EngineModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = ""
    # Informational grouping only; never evaluated.
    scope: str = ""
    conditions: List[AnyCondition] = Field(default_factory=list)

    set_category_id: Optional[str] = None
    set_payee_id: Optional[str] = None
    set_counterparty_id: Optional[str] = None
    set_location_id: Optional[str] = None
    set_user_id: Optional[str] = None
    set_transaction_type_id: Optional[str] = None
    set_description: Optional[str] = None
    assign_tag_ids: List[str] = Field(default_factory=list)
    skip_import: bool = False

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("conditions"):
            upgraded = _upgrade_legacy_conditions(data)
            if upgraded:
                data = {**data, "conditions": upgraded}
        return data

    @field_validator("id", "name", "scope", mode="before")
    @classmethod
    def _label(cls, value: Any) -> str:
        return _coerce_label(value)

    @field_validator("conditions", mode="before")
    @classmethod
    def _parse_conditions(cls, value: Any) -> List[Any]:
        if not value:
            return []
        if not isinstance(value, (list, tuple)):
            logger.debug("Ignoring non-list conditions payload: %r", value)
            return []
        parsed = (parse_condition(item) for item in value)
        return [cond for cond in parsed if cond is not None]

    @field_validator("assign_tag_ids", mode="before")
    @classmethod
    def _tag_ids(cls, value: Any) -> List[str]:
        if not value:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple, set)):
            raise ValueError("assignTagIds must be a list of tag ids")
        return [str(tag) for tag in value if tag]

    @field_validator("skip_import", mode="before")
    @classmethod
    def _skip_import(cls, value: Any) -> bool:
        return bool(value)

    @property
    def counterparty_target(self) -> Optional[str]:
        """setCounterpartyId wins over the legacy setPayeeId synonym."""
        return self.set_counterparty_id or self.set_payee_id or None


class Account(_EngineModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""


class Transaction(_EngineModel):
    """A raw (just imported) or persisted transaction.

    Unknown keys (date, notes, sourceFilename, ...) are carried through untouched.
    """

    model_config = ConfigDict(extra="allow")

    id: str = ""
    description: str = ""
    # Bank-provided text; set once and never overwritten by rule mutations.
    original_description: Optional[str] = None
    amount: Decimal = Decimal("0")
    account_id: Optional[str] = None
    counterparty_id: Optional[str] = None
    location_id: Optional[str] = None
    user_id: Optional[str] = None
    category_id: Optional[str] = None
    type_id: Optional[str] = None
    tag_ids: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None

    is_ignored: Optional[bool] = None
    applied_rule_id: Optional[str] = None
    applied_rule_ids: Optional[List[str]] = None

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Any:
        return Decimal("0") if value is None or value == "" else value

    @field_validator("tag_ids", "applied_rule_ids", mode="before")
    @classmethod
    def _id_list(cls, value: Any) -> Optional[List[str]]:
        # Tags behave as a set; null and empty ids carry nothing.
        if value is None:
            return None
        if isinstance(value, str):
            return [value] if value else []
        if not isinstance(value, (list, tuple, set)):
            return []
        return [str(item) for item in value if item]


class RuleMatchPreview(_EngineModel):
    original: Transaction
    updated: Transaction
    changed_fields: List[str] = Field(default_factory=list)


class RuleApplyReport(_EngineModel):
    run_id: str
    generated_at: datetime
    transactions: List[Transaction] = Field(default_factory=list)
    # rule id -> number of transactions it matched
    totals: Dict[str, int] = Field(default_factory=dict)
    ignored_count: int = 0


class RulePreviewReport(_EngineModel):
    run_id: str
    generated_at: datetime
    rule_id: str
    scanned_count: int = 0
    matches: List[RuleMatchPreview] = Field(default_factory=list)
