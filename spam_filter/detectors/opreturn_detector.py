"""Chained OP_RETURN detection."""

from typing import Any, Dict
import structlog

from spam_filter.models.detection import DetectionResult
from spam_filter.models.transaction import Transaction
from spam_filter.utils.script_decoder import extract_op_return_payload

logger = structlog.get_logger(__name__)

DETECTOR_NAME = "chained_op_return"

# Knotwork/444 chunk header: magic(2) chunk_index(1) total_chunks(1)
KNOTWORK_MAGIC = b"\x01\xbc"
CHUNK_HEADER_SIZE = 4

CONTINUATION_MAX_VALUE_SATS = 15000
CONTINUATION_MIN_OUTPUTS = 2
STANDARD_OP_RETURN_SIZE = 80

MAGIC_PREFIX_CONFIDENCE = 95
CONTINUATION_CONFIDENCE = 60
OVERSIZE_CONFIDENCE = 40


def has_magic_prefix(payload: bytes) -> bool:
    return payload[:len(KNOTWORK_MAGIC)] == KNOTWORK_MAGIC


def is_continuation_value(value_satoshis: int) -> bool:
    return 0 < value_satoshis < CONTINUATION_MAX_VALUE_SATS


class ChainedOpReturnDetector:
    """Detects data chunked across OP_RETURN outputs of chained transactions."""
    
    name = DETECTOR_NAME
    
    @staticmethod
    def detect(tx: Transaction) -> DetectionResult:
        """
        Score a transaction's OP_RETURN outputs.
        
        Priority: magic prefix (95) > continuation output (60) > oversize
        payload (40).
        """
        op_return_outputs = tx.op_return_outputs
        
        if not op_return_outputs:
            return DetectionResult.not_detected(
                reason='No OP_RETURN outputs found',
                source=DETECTOR_NAME
            )
        
        details: Dict[str, Any] = {'op_return_count': len(op_return_outputs)}
        magic_found = False
        largest_payload = 0
        
        for output in op_return_outputs:
            payload = extract_op_return_payload(output.script_pubkey)
            if payload is None:
                continue
            
            largest_payload = max(largest_payload, len(payload))
            
            if has_magic_prefix(payload):
                if 'chunk_index' not in details and len(payload) >= CHUNK_HEADER_SIZE:
                    details['chunk_index'] = payload[2]
                    details['total_chunks'] = payload[3]
                magic_found = True
        
        has_continuation = len(tx.outputs) >= CONTINUATION_MIN_OUTPUTS and any(
            is_continuation_value(out.value_satoshis) for out in tx.outputs
        )
        
        details['largest_payload_size'] = largest_payload
        details['magic_prefix'] = magic_found
        details['has_continuation_output'] = has_continuation
        
        logger.debug("OP_RETURN outputs analyzed",
                     txid=tx.txid,
                     op_return_count=len(op_return_outputs),
                     magic_prefix=magic_found,
                     has_continuation_output=has_continuation,
                     largest_payload_size=largest_payload)
        
        if magic_found:
            return DetectionResult(
                detected=True,
                confidence=MAGIC_PREFIX_CONFIDENCE,
                reason='Detected knotwork magic prefix (0x01bc) in OP_RETURN data',
                details=details,
                source=DETECTOR_NAME
            )
        
        if has_continuation:
            return DetectionResult(
                detected=True,
                confidence=CONTINUATION_CONFIDENCE,
                reason='Detected chained OP_RETURN pattern with continuation output',
                details=details,
                source=DETECTOR_NAME
            )
        
        if largest_payload > STANDARD_OP_RETURN_SIZE:
            return DetectionResult(
                detected=True,
                confidence=OVERSIZE_CONFIDENCE,
                reason=f"OP_RETURN data exceeds standard size ({largest_payload} bytes)",
                details=details,
                source=DETECTOR_NAME
            )
        
        return DetectionResult.not_detected(
            reason='No suspicious OP_RETURN patterns detected',
            source=DETECTOR_NAME,
            details=details
        )
