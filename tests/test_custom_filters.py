"""Unit tests for the bundled scoring callbacks."""

from spam_filter.core.filter_engine import FilterEngine
from spam_filter.filters import CustomFilter, HighWitnessFilter, LargeWitnessRatioFilter
from spam_filter.models.config import FilterConfig
from spam_filter.models.detection import CallbackResult

from builders import make_tx, plain_input


def witness_input(items: int, index: int = 0):
    return plain_input(index=index, witness_stack=[b"\x01"] * items)


class TestHighWitnessFilter:
    """Tests for HighWitnessFilter."""
    
    def test_accepts_normal_witness(self, normal_tx):
        result = HighWitnessFilter()(normal_tx)
        
        assert result.accept is True
        assert result.score == 0
    
    def test_rejects_excessive_witness(self):
        tx = make_tx(inputs=[witness_input(11), witness_input(2, 1)])
        
        result = HighWitnessFilter()(tx)
        
        assert result.accept is False
        assert result.score == 60
        assert "1 inputs" in result.message
    
    def test_limit_is_exclusive(self):
        tx = make_tx(inputs=[witness_input(10)])
        
        assert HighWitnessFilter(max_items=10)(tx).accept is True


class TestLargeWitnessRatioFilter:
    """Tests for LargeWitnessRatioFilter."""
    
    def test_majority_large_witness_rejected(self):
        tx = make_tx(inputs=[witness_input(6), witness_input(8, 1), witness_input(2, 2)])
        
        result = LargeWitnessRatioFilter()(tx)
        
        assert result.accept is False
        assert round(result.score, 2) == 66.67
    
    def test_half_large_witness_accepted(self):
        tx = make_tx(inputs=[witness_input(6), witness_input(2, 1)])
        
        result = LargeWitnessRatioFilter()(tx)
        
        assert result.accept is True
        assert result.score == 50
    
    def test_no_inputs(self):
        assert LargeWitnessRatioFilter()(make_tx(inputs=[])).accept is True


class TestCustomFilterRegistration:
    """Tests for registering CustomFilter subclasses with the engine."""
    
    def test_subclass_name_used(self):
        class AlwaysReject(CustomFilter):
            name = "always_reject"
            
            def evaluate(self, tx):
                return CallbackResult(accept=False, score=25, message="rejected by policy")
        
        engine = FilterEngine(FilterConfig())
        engine.add_filter(AlwaysReject())
        
        verdict = engine.evaluate_transaction(make_tx())
        
        assert verdict.detections[0].source == "always_reject"
        assert verdict.score == 25
    
    def test_high_witness_filter_pushes_over_threshold(self):
        engine = FilterEngine(FilterConfig(threshold=50))
        engine.add_filter(HighWitnessFilter())
        
        verdict = engine.evaluate_transaction(make_tx(inputs=[witness_input(12)]))
        
        assert verdict.accept is False
        assert verdict.detections[0].source == "high_witness"
