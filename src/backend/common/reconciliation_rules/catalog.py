from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .models import RuleLogic
from .registry import registry

# Built-in evaluators register on import.
from . import evaluators as _builtin_evaluators  # noqa: F401


class OperatorCatalogEntry(BaseModel):
    field: str
    operators: List[str] = Field(default_factory=list)
    requires_metadata_key: bool = False

    module: str
    class_name: str

    condition_model: str
    condition_schema: Dict[str, Any]


def build_catalog() -> List[OperatorCatalogEntry]:
    """Fields a rule condition can test and the operators each one accepts."""
    entries = [OperatorCatalogEntry(**registry.get(field).describe()) for field in registry.ids()]
    return sorted(entries, key=lambda entry: entry.field)


def catalog_document() -> Dict[str, Any]:
    """The catalog plus the combinators a rule builder offers between conditions."""
    return {
        "combinators": [logic.value for logic in RuleLogic],
        "fields": [entry.model_dump() for entry in build_catalog()],
    }


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="List rule condition fields and their operators.")
    parser.add_argument("--format", choices=("yaml", "json"), default="yaml")
    args = parser.parse_args(argv)

    document = catalog_document()
    if args.format == "json":
        print(json.dumps(document, indent=2, sort_keys=True))
        return

    import yaml

    print(yaml.safe_dump(document, sort_keys=True))


if __name__ == "__main__":
    main()
