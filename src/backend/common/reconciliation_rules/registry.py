from __future__ import annotations

from typing import Dict, Iterable, Optional, Type

from .evaluator import FieldEvaluator


class EvaluatorRegistry:
    def __init__(self):
        self._evaluators: Dict[str, Type[FieldEvaluator]] = {}
        self._instances: Dict[str, FieldEvaluator] = {}

    def register(self, evaluator_cls: Type[FieldEvaluator]) -> None:
        field = getattr(evaluator_cls, "field", None)
        if not field:
            raise ValueError("Evaluator class missing field")
        if field in self._evaluators:
            raise ValueError(f"Duplicate evaluator registered for field: {field}")
        self._evaluators[field] = evaluator_cls

    def create_all(self) -> list[FieldEvaluator]:
        return [cls() for cls in self._evaluators.values()]

    def get(self, field: str) -> Type[FieldEvaluator]:
        return self._evaluators[field]

    def resolve(self, field: str) -> Optional[FieldEvaluator]:
        """Return the shared evaluator instance for a field, or None if unknown."""
        instance = self._instances.get(field)
        if instance is None:
            evaluator_cls = self._evaluators.get(field)
            if evaluator_cls is None:
                return None
            instance = self._instances[field] = evaluator_cls()
        return instance

    def ids(self) -> Iterable[str]:
        return self._evaluators.keys()


registry = EvaluatorRegistry()


def register_evaluator(evaluator_cls: Type[FieldEvaluator]) -> Type[FieldEvaluator]:
    registry.register(evaluator_cls)
    return evaluator_cls
