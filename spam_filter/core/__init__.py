"""Core engine and boundary decoding."""

from spam_filter.core.filter_engine import FilterEngine, RegisteredFilter
from spam_filter.core.transaction_parser import TransactionParser

__all__ = [
    "FilterEngine",
    "RegisteredFilter",
    "TransactionParser",
]
