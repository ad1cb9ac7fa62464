"""Composite spam filter engine."""

import math
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Union
import structlog

from spam_filter.detectors.opreturn_detector import ChainedOpReturnDetector
from spam_filter.detectors.p2wsh_detector import P2WSHFakeMultisigDetector
from spam_filter.models.config import FilterConfig
from spam_filter.models.detection import CallbackResult, DetectionResult, FilterVerdict
from spam_filter.models.transaction import MalformedTransactionError, Transaction

logger = structlog.get_logger(__name__)

ScoringCallback = Callable[[Transaction], Union[CallbackResult, Mapping]]

MAX_CONFIDENCE = 100.0


class RegisteredFilter(NamedTuple):
    """A scoring callback and the name it reports under."""
    name: str
    callback: ScoringCallback


def _coerce_callback_result(result: Any) -> CallbackResult:
    """
    Normalize a callback's return value to a CallbackResult.
    
    Raises:
        TypeError: if the value or its score is not usable
    """
    if isinstance(result, CallbackResult):
        accept, score, message = result.accept, result.score, result.message
    elif isinstance(result, Mapping):
        accept = result['accept']
        score = result.get('score', 0.0)
        message = result.get('message', '')
    else:
        raise TypeError(f"Scoring callback returned {type(result).__name__}, expected CallbackResult")
    
    if isinstance(score, bool) or not isinstance(score, (int, float)) or math.isnan(score):
        raise TypeError(f"Scoring callback returned invalid score {score!r}")
    
    return CallbackResult(accept=bool(accept), score=float(score), message=str(message))


def _validate_shape(tx: Any) -> None:
    """Fail fast on values that are not transactions."""
    for attribute in ('inputs', 'outputs'):
        value = getattr(tx, attribute, None)
        if value is None:
            raise MalformedTransactionError(f"Transaction is missing its {attribute}")
        if not isinstance(value, (list, tuple)):
            raise MalformedTransactionError(
                f"Transaction {attribute} must be a sequence, got {type(value).__name__}"
            )


class FilterEngine:
    """Runs the spam detectors and registered callbacks and applies the threshold."""
    
    def __init__(self, config: Optional[FilterConfig] = None):
        self.config = config if config is not None else FilterConfig()
        self.logger = logger.bind(component="filter_engine")
        
        # Replaced, never mutated, on registration
        self._filters: Tuple[RegisteredFilter, ...] = ()
        
        self.logger.info("Filter engine initialized",
                         threshold=self.config.threshold,
                         detectors=self.config.get_enabled_detectors())
    
    @property
    def filters(self) -> Tuple[RegisteredFilter, ...]:
        return self._filters
    
    def add_filter(self, callback: ScoringCallback, name: Optional[str] = None) -> None:
        """
        Register an external scoring callback.
        
        Args:
            callback: Callable receiving the transaction and returning a
                CallbackResult (or mapping with accept/score/message)
            name: Name reported in detections; defaults to the callback's
                ``name`` attribute or function name
        """
        if not callable(callback):
            raise TypeError("Scoring callback must be callable")
        
        if name is None:
            name = getattr(callback, 'name', None) or getattr(callback, '__name__', None) \
                or type(callback).__name__
        
        self._filters = self._filters + (RegisteredFilter(name=name, callback=callback),)
        self.logger.debug("Scoring callback registered", name=name, total=len(self._filters))
    
    def evaluate_transaction(self, tx: Transaction) -> FilterVerdict:
        """
        Evaluate a transaction against all enabled detectors and callbacks.
        
        Args:
            tx: Decoded transaction
            
        Returns:
            FilterVerdict with accept = total score < threshold
        """
        _validate_shape(tx)
        
        detections: List[DetectionResult] = []
        notes: List[str] = []
        total_score = 0
        
        # Step 1: P2WSH fake multisig
        if self.config.enable_p2wsh_detection:
            p2wsh_result = P2WSHFakeMultisigDetector.detect(tx)
            if p2wsh_result.detected:
                detections.append(p2wsh_result)
                total_score += p2wsh_result.confidence
        
        # Step 2: chained OP_RETURN
        if self.config.enable_opreturn_detection:
            opreturn_result = ChainedOpReturnDetector.detect(tx)
            if opreturn_result.detected:
                detections.append(opreturn_result)
                total_score += opreturn_result.confidence
        
        # Step 3: external callbacks
        for registered in self._filters:
            try:
                result = _coerce_callback_result(registered.callback(tx))
            except Exception as e:
                self.logger.warning("Scoring callback failed",
                                    name=registered.name,
                                    txid=getattr(tx, 'txid', None),
                                    error=str(e))
                notes.append(f"Filter '{registered.name}' failed: {e}")
                continue
            
            if not result.accept:
                score = max(result.score, 0.0)
                detections.append(DetectionResult(
                    detected=True,
                    confidence=min(score, MAX_CONFIDENCE),
                    reason=result.message,
                    details={'score': score},
                    source=registered.name
                ))
                total_score += score
        
        # Step 4: decision
        threshold = self.config.threshold
        accept = total_score < threshold
        
        if accept:
            message = f"Transaction accepted: spam score {total_score:.2f} below threshold {threshold:g}"
        else:
            message = f"Transaction rejected: spam score {total_score:.2f} reaches threshold {threshold:g}"
        
        verdict = FilterVerdict(
            accept=accept,
            score=total_score,
            detections=tuple(detections),
            message=message,
            notes=tuple(notes)
        )
        
        self.logger.info("Transaction evaluated",
                         txid=getattr(tx, 'txid', None),
                         score=total_score,
                         accept=accept,
                         detections=len(detections))
        
        return verdict
    
    def get_statistics(self) -> Dict[str, Any]:
        """Get engine configuration and registered callback count."""
        return {
            'config': self.config.to_summary(),
            'enabled_detectors': self.config.get_enabled_detectors(),
            'custom_filters': len(self._filters),
            'custom_filter_names': [f.name for f in self._filters],
        }
