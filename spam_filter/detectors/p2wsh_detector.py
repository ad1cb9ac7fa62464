"""P2WSH fake multisig detection."""

from dataclasses import dataclass
from typing import Any, Dict
import structlog

from spam_filter.models.detection import DetectionResult
from spam_filter.models.transaction import Transaction
from spam_filter.utils.script_decoder import (
    COMPRESSED_PUBKEY_SIZE,
    extract_multisig_pubkeys,
    extract_witness_script,
    is_checkmultisig_script,
)

logger = structlog.get_logger(__name__)

DETECTOR_NAME = "p2wsh_fake_multisig"

MIN_WITNESS_ITEMS = 3
COMPRESSED_PUBKEY_PREFIXES = (0x02, 0x03)

# Fake pubkey heuristics (over the 32 bytes after the prefix)
MAX_CONSECUTIVE_ZEROS = 4
MAX_ZERO_BYTES = 10
MAX_REPEATING_RUNS = 2
REPEATING_RUN_LENGTH = 4

# Per-input suspicion rules
RATIO_RULE_MIN_PUBKEYS = 3
FAKE_RATIO_THRESHOLD = 0.5
MAX_LEGITIMATE_PUBKEYS = 10


@dataclass(frozen=True)
class WitnessScriptAnalysis:
    """Pubkey authenticity analysis of one witness script."""
    is_suspicious: bool
    pubkey_count: int
    fake_pubkey_count: int
    has_checkmultisig: bool
    script_size: int
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_suspicious': self.is_suspicious,
            'pubkey_count': self.pubkey_count,
            'fake_pubkey_count': self.fake_pubkey_count,
            'has_checkmultisig': self.has_checkmultisig,
            'script_size': self.script_size,
        }


def is_likely_fake_pubkey(pubkey: bytes) -> bool:
    """
    Heuristically decide whether a compressed pubkey is embedded data.
    
    Real keys are uniformly random x-coordinates; long zero runs, many zero
    bytes or repeated 4-byte runs mark data dressed up as a key.
    """
    if len(pubkey) != COMPRESSED_PUBKEY_SIZE:
        return False
    if pubkey[0] not in COMPRESSED_PUBKEY_PREFIXES:
        return False
    
    data = pubkey[1:]
    
    zero_count = 0
    consecutive_zeros = 0
    max_consecutive_zeros = 0
    
    for byte in data:
        if byte == 0:
            zero_count += 1
            consecutive_zeros += 1
            max_consecutive_zeros = max(max_consecutive_zeros, consecutive_zeros)
        else:
            consecutive_zeros = 0
    
    if max_consecutive_zeros > MAX_CONSECUTIVE_ZEROS or zero_count > MAX_ZERO_BYTES:
        return True
    
    repeating_runs = 0
    for i in range(len(data) - REPEATING_RUN_LENGTH + 1):
        window = data[i:i + REPEATING_RUN_LENGTH]
        if window.count(window[0]) == REPEATING_RUN_LENGTH:
            repeating_runs += 1
    
    return repeating_runs > MAX_REPEATING_RUNS


def analyze_witness_script(script: bytes) -> WitnessScriptAnalysis:
    """Extract the multisig pubkeys of a witness script and score them."""
    has_checkmultisig = is_checkmultisig_script(script)
    if not has_checkmultisig:
        return WitnessScriptAnalysis(
            is_suspicious=False,
            pubkey_count=0,
            fake_pubkey_count=0,
            has_checkmultisig=False,
            script_size=len(script)
        )
    
    pubkeys = extract_multisig_pubkeys(script)
    pubkey_count = len(pubkeys)
    fake_pubkey_count = sum(1 for pubkey in pubkeys if is_likely_fake_pubkey(pubkey))
    
    # Two independent triggers: mostly-fake keys beyond 3, or more than 10 keys
    ratio_rule = (pubkey_count > RATIO_RULE_MIN_PUBKEYS and
                  fake_pubkey_count > pubkey_count * FAKE_RATIO_THRESHOLD)
    count_rule = pubkey_count > MAX_LEGITIMATE_PUBKEYS
    
    return WitnessScriptAnalysis(
        is_suspicious=ratio_rule or count_rule,
        pubkey_count=pubkey_count,
        fake_pubkey_count=fake_pubkey_count,
        has_checkmultisig=True,
        script_size=len(script)
    )


class P2WSHFakeMultisigDetector:
    """Detects P2WSH CHECKMULTISIG witness scripts stuffed with fake pubkeys."""
    
    name = DETECTOR_NAME
    
    @staticmethod
    def detect(tx: Transaction) -> DetectionResult:
        """
        Score a transaction's inputs for fake-pubkey multisig witness scripts.
        
        Args:
            tx: Decoded transaction
            
        Returns:
            DetectionResult with confidence = 100 * suspicious / P2WSH inputs
        """
        suspicious_count = 0
        total_p2wsh = 0
        suspicious_inputs = []
        
        for input_index, tx_input in enumerate(tx.inputs):
            if tx_input.witness_item_count < MIN_WITNESS_ITEMS:
                continue
            
            witness_script = extract_witness_script(tx_input.witness_stack)
            if witness_script is None or not is_checkmultisig_script(witness_script):
                continue
            
            total_p2wsh += 1
            analysis = analyze_witness_script(witness_script)
            
            if analysis.is_suspicious:
                suspicious_count += 1
                entry = {
                    'input_index': input_index,
                    'previous_txid': tx_input.previous_txid,
                    'previous_index': tx_input.previous_index,
                }
                entry.update(analysis.to_dict())
                suspicious_inputs.append(entry)
                
                logger.debug("Suspicious P2WSH witness script",
                             txid=tx.txid,
                             input_index=input_index,
                             pubkey_count=analysis.pubkey_count,
                             fake_pubkey_count=analysis.fake_pubkey_count)
        
        if suspicious_count == 0:
            return DetectionResult.not_detected(
                reason='No suspicious P2WSH patterns found',
                source=DETECTOR_NAME
            )
        
        confidence = (100 * suspicious_count) // total_p2wsh
        
        return DetectionResult(
            detected=True,
            confidence=confidence,
            reason=(f"Detected {suspicious_count} suspicious P2WSH CHECKMULTISIG "
                    f"patterns with fake pubkeys"),
            details={
                'suspicious_inputs': suspicious_inputs,
                'suspicious_count': suspicious_count,
                'total_p2wsh_inputs': total_p2wsh,
            },
            source=DETECTOR_NAME
        )
