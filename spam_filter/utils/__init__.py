"""Utility functions and helpers."""

from spam_filter.utils.logging import setup_logging, get_logger
from spam_filter.utils.bitcoin import get_script_type, btc_to_satoshi
from spam_filter.utils.script_decoder import (
    extract_pushed_data,
    extract_op_return_payload,
    extract_multisig_pubkeys,
    extract_witness_script,
    is_checkmultisig_script,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_script_type",
    "btc_to_satoshi",
    "extract_pushed_data",
    "extract_op_return_payload",
    "extract_multisig_pubkeys",
    "extract_witness_script",
    "is_checkmultisig_script",
]
