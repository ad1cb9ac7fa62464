"""Detection and verdict data models."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of a single detector (or scoring callback) run."""
    detected: bool
    confidence: float  # 0-100 scale
    reason: str
    details: Optional[Dict[str, Any]] = None
    source: Optional[str] = None
    
    @classmethod
    def not_detected(cls, reason: str, source: Optional[str] = None,
                     details: Optional[Dict[str, Any]] = None) -> "DetectionResult":
        return cls(detected=False, confidence=0, reason=reason, details=details, source=source)
    
    def to_dict(self) -> Dict[str, Any]:
        result = {
            'detected': self.detected,
            'confidence': self.confidence,
            'reason': self.reason,
            'source': self.source,
        }
        if self.details is not None:
            result['details'] = self.details
        return result


@dataclass(frozen=True)
class FilterVerdict:
    """Final accept/reject decision for a transaction."""
    accept: bool
    score: float
    detections: Tuple[DetectionResult, ...]
    message: str
    notes: Tuple[str, ...] = ()
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'accept': self.accept,
            'score': self.score,
            'message': self.message,
            'detections': [d.to_dict() for d in self.detections],
            'notes': list(self.notes),
        }


@dataclass(frozen=True)
class CallbackResult:
    """Value returned by an externally registered scoring callback."""
    accept: bool
    score: float = 0.0
    message: str = ""
