"""
Bitcoin UTXO Spam Filter

Mempool policy aid that scores Bitcoin transactions for data-embedding spam
patterns (fake-pubkey P2WSH multisig and chained OP_RETURN outputs) and
returns an accept/reject verdict against a configurable threshold.
"""

__version__ = "1.0.0"
__author__ = "Bitcoin Spam Filter Team"
__description__ = "Structural spam detection and scoring engine for Bitcoin transactions"

from spam_filter.core.filter_engine import FilterEngine
from spam_filter.core.transaction_parser import TransactionParser
from spam_filter.detectors.p2wsh_detector import P2WSHFakeMultisigDetector
from spam_filter.detectors.opreturn_detector import ChainedOpReturnDetector
from spam_filter.models.config import FilterConfig
from spam_filter.models.detection import CallbackResult, DetectionResult, FilterVerdict
from spam_filter.models.transaction import (
    MalformedTransactionError,
    Transaction,
    TransactionInput,
    TransactionOutput,
)

__all__ = [
    "FilterEngine",
    "TransactionParser",
    "P2WSHFakeMultisigDetector",
    "ChainedOpReturnDetector",
    "FilterConfig",
    "CallbackResult",
    "DetectionResult",
    "FilterVerdict",
    "MalformedTransactionError",
    "Transaction",
    "TransactionInput",
    "TransactionOutput",
]
