"""Unit tests for the chained OP_RETURN detector."""

import pytest

from spam_filter.detectors.opreturn_detector import ChainedOpReturnDetector
from spam_filter.models.transaction import TransactionOutput

from builders import make_tx, op_return_output, op_return_script, p2wpkh_output


class TestChainedOpReturnDetector:
    """Tests for OP_RETURN scoring and its priority order."""
    
    def test_no_op_return_outputs(self, normal_tx):
        result = ChainedOpReturnDetector.detect(normal_tx)
        
        assert result.detected is False
        assert result.confidence == 0
    
    def test_empty_outputs_tolerated(self):
        result = ChainedOpReturnDetector.detect(make_tx(outputs=[]))
        
        assert result.detected is False
        assert result.confidence == 0
    
    def test_magic_prefix_scores_95(self):
        tx = make_tx(outputs=[TransactionOutput(
            value_satoshis=0,
            script_pubkey=bytes.fromhex("6a0401bc000a"),
            script_type="nulldata"
        )])
        
        result = ChainedOpReturnDetector.detect(tx)
        
        assert result.detected is True
        assert result.confidence == 95
        assert result.details['magic_prefix'] is True
        assert result.details['chunk_index'] == 0
        assert result.details['total_chunks'] == 10
    
    def test_magic_prefix_without_chunk_header(self):
        """Two-byte payloads still match, without chunk info."""
        tx = make_tx(outputs=[op_return_output(b"\x01\xbc")])
        
        result = ChainedOpReturnDetector.detect(tx)
        
        assert result.confidence == 95
        assert 'chunk_index' not in result.details
    
    def test_magic_prefix_beats_continuation(self, opreturn_chain_tx):
        result = ChainedOpReturnDetector.detect(opreturn_chain_tx)
        
        assert result.confidence == 95
        assert result.details['has_continuation_output'] is True
        assert result.details['chunk_index'] == 0
        assert result.details['total_chunks'] == 1
    
    def test_oversize_payload_scores_40(self):
        """A standalone 100-byte payload without magic or continuation."""
        tx = make_tx(outputs=[op_return_output(b"\xee" * 100), p2wpkh_output(50000)])
        
        result = ChainedOpReturnDetector.detect(tx)
        
        assert result.detected is True
        assert result.confidence == 40
        assert result.details['largest_payload_size'] == 100
    
    def test_standard_size_payload_not_detected(self):
        """Exactly 80 bytes is within the standard limit."""
        tx = make_tx(outputs=[op_return_output(b"\xee" * 80), p2wpkh_output(50000)])
        
        result = ChainedOpReturnDetector.detect(tx)
        
        assert result.detected is False
        assert result.confidence == 0
    
    def test_continuation_overrides_oversize(self):
        tx = make_tx(outputs=[op_return_output(b"\xee" * 100), p2wpkh_output(5000)])
        
        result = ChainedOpReturnDetector.detect(tx)
        
        assert result.detected is True
        assert result.confidence == 60
    
    def test_continuation_with_small_payload(self):
        tx = make_tx(outputs=[op_return_output(b"hello"), p2wpkh_output(5000)])
        
        assert ChainedOpReturnDetector.detect(tx).confidence == 60
    
    @pytest.mark.parametrize("value", [0, 15000, 15001])
    def test_continuation_bounds_are_exclusive(self, value):
        tx = make_tx(outputs=[op_return_output(b"hello"), p2wpkh_output(value)])
        
        result = ChainedOpReturnDetector.detect(tx)
        
        assert result.detected is False
    
    @pytest.mark.parametrize("value", [1, 14999])
    def test_continuation_inner_bounds(self, value):
        tx = make_tx(outputs=[op_return_output(b"hello"), p2wpkh_output(value)])
        
        assert ChainedOpReturnDetector.detect(tx).confidence == 60
    
    def test_lone_op_return_with_value_is_not_continuation(self):
        """A continuation needs a second output next to the OP_RETURN."""
        tx = make_tx(outputs=[op_return_output(b"hello", value=5000)])
        
        result = ChainedOpReturnDetector.detect(tx)
        
        assert result.detected is False
        assert result.confidence == 0
        assert result.details['has_continuation_output'] is False
    
    def test_valued_op_return_plus_second_output_is_continuation(self):
        tx = make_tx(outputs=[op_return_output(b"hello", value=5000), p2wpkh_output(100000)])
        
        assert ChainedOpReturnDetector.detect(tx).confidence == 60
    
    def test_untagged_output_sniffed(self):
        """Outputs with no script type are recognised by their first byte."""
        tx = make_tx(outputs=[op_return_output(b"\x01\xbc\x02\x03", script_type=None)])
        
        assert ChainedOpReturnDetector.detect(tx).confidence == 95
    
    def test_other_tag_with_op_return_script_sniffed(self):
        tx = make_tx(outputs=[TransactionOutput(
            value_satoshis=0,
            script_pubkey=op_return_script(b"\x01\xbc"),
            script_type="nonstandard"
        )])
        
        assert ChainedOpReturnDetector.detect(tx).confidence == 95
    
    def test_largest_payload_across_outputs(self):
        tx = make_tx(outputs=[
            op_return_output(b"\x01" * 10),
            op_return_output(b"\x02" * 120),
            op_return_output(b"\x03" * 40),
        ])
        
        result = ChainedOpReturnDetector.detect(tx)
        
        assert result.confidence == 40
        assert result.details['largest_payload_size'] == 120
        assert result.details['op_return_count'] == 3
    
    def test_magic_on_any_output(self):
        tx = make_tx(outputs=[
            op_return_output(b"plain"),
            op_return_output(bytes.fromhex("01bc0305") + b"chunk"),
        ])
        
        result = ChainedOpReturnDetector.detect(tx)
        
        assert result.confidence == 95
        assert result.details['chunk_index'] == 3
        assert result.details['total_chunks'] == 5
