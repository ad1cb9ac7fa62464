"""Built-in scoring callbacks based on witness stack size."""

from spam_filter.filters.base import CustomFilter
from spam_filter.models.detection import CallbackResult
from spam_filter.models.transaction import Transaction


class HighWitnessFilter(CustomFilter):
    """Rejects transactions with any input carrying too many witness items."""
    
    name = "high_witness"
    
    def __init__(self, max_items: int = 10, score: float = 60.0):
        self.max_items = max_items
        self.score = score
    
    def evaluate(self, tx: Transaction) -> CallbackResult:
        suspicious_inputs = sum(
            1 for tx_input in tx.inputs if tx_input.witness_item_count > self.max_items
        )
        
        if suspicious_inputs == 0:
            return CallbackResult(accept=True, score=0.0, message='Normal witness data')
        
        return CallbackResult(
            accept=False,
            score=self.score,
            message=(f"Detected {suspicious_inputs} inputs with excessive witness data "
                     f"(>{self.max_items} items)")
        )


class LargeWitnessRatioFilter(CustomFilter):
    """Scores the share of inputs with large witness stacks; rejects above 50%."""
    
    name = "large_witness_ratio"
    
    def __init__(self, max_items: int = 5, reject_above: float = 50.0):
        self.max_items = max_items
        self.reject_above = reject_above
    
    def evaluate(self, tx: Transaction) -> CallbackResult:
        if not tx.inputs:
            return CallbackResult(accept=True, score=0.0, message='No inputs')
        
        suspicious_inputs = sum(
            1 for tx_input in tx.inputs if tx_input.witness_item_count > self.max_items
        )
        score = suspicious_inputs / len(tx.inputs) * 100
        
        if score > self.reject_above:
            return CallbackResult(
                accept=False,
                score=score,
                message=(f"Detected {suspicious_inputs}/{len(tx.inputs)} inputs "
                         f"with large witness data")
            )
        
        return CallbackResult(accept=True, score=score, message='No suspicious patterns detected')
