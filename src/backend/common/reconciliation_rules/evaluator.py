from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple, Type, get_args

from pydantic import BaseModel

from .context import MatchContext
from .models import Transaction


class FieldEvaluator(ABC):
    field: str
    condition_model: Type[BaseModel]

    def __init__(self):
        if not getattr(self, "field", None):
            raise ValueError("FieldEvaluator must define field")

    @classmethod
    def legal_operators(cls) -> Tuple[str, ...]:
        """Operators the condition model accepts, in declaration order."""
        return tuple(get_args(cls.condition_model.model_fields["operator"].annotation))

    @classmethod
    def describe(cls) -> Dict[str, Any]:
        model = cls.condition_model
        return {
            "field": cls.field,
            "operators": list(cls.legal_operators()),
            "requires_metadata_key": "metadata_key" in model.model_fields,
            "module": cls.__module__,
            "class_name": cls.__name__,
            "condition_model": model.__name__,
            "condition_schema": model.model_json_schema(by_alias=True),
        }

    @abstractmethod
    def evaluate(self, record: Transaction, condition, ctx: MatchContext) -> bool:  # pragma: no cover
        raise NotImplementedError
