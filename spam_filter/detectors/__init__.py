"""Structural spam pattern detectors."""

from spam_filter.detectors.p2wsh_detector import P2WSHFakeMultisigDetector, is_likely_fake_pubkey
from spam_filter.detectors.opreturn_detector import ChainedOpReturnDetector

__all__ = [
    "P2WSHFakeMultisigDetector",
    "ChainedOpReturnDetector",
    "is_likely_fake_pubkey",
]
