"""Data models for the spam filter."""

from spam_filter.models.config import FilterConfig
from spam_filter.models.detection import CallbackResult, DetectionResult, FilterVerdict
from spam_filter.models.transaction import (
    MalformedTransactionError,
    Transaction,
    TransactionInput,
    TransactionOutput,
)

__all__ = [
    "FilterConfig",
    "CallbackResult",
    "DetectionResult",
    "FilterVerdict",
    "MalformedTransactionError",
    "Transaction",
    "TransactionInput",
    "TransactionOutput",
]
