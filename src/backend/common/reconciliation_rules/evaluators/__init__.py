from .account import AccountEvaluator
from .amount import AmountEvaluator
from .description import DescriptionEvaluator
from .metadata import MetadataEvaluator
from .references import CounterpartyEvaluator, LocationEvaluator

__all__ = [
    "DescriptionEvaluator",
    "MetadataEvaluator",
    "AmountEvaluator",
    "AccountEvaluator",
    "CounterpartyEvaluator",
    "LocationEvaluator",
]
