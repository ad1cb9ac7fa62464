"""Transaction data models consumed by the detectors."""

from dataclasses import dataclass
from typing import List, Optional

OP_RETURN_TYPES = ("OP_RETURN", "nulldata", "op_return")


class MalformedTransactionError(ValueError):
    """Transaction value does not have the shape the engine requires."""
    pass


@dataclass(frozen=True)
class TransactionInput:
    """Transaction input with its (optional) witness stack."""
    previous_txid: str
    previous_index: int
    witness_stack: Optional[List[bytes]] = None
    
    # Pass-through bookkeeping
    script_sig: bytes = b""
    sequence: int = 0xffffffff
    
    @property
    def witness_item_count(self) -> int:
        return len(self.witness_stack) if self.witness_stack else 0


@dataclass(frozen=True)
class TransactionOutput:
    """Transaction output."""
    value_satoshis: int
    script_pubkey: bytes
    script_type: Optional[str] = None
    
    @property
    def is_op_return(self) -> bool:
        """True for outputs tagged as OP_RETURN or whose script starts with 0x6a."""
        if self.script_type in OP_RETURN_TYPES:
            return True
        return len(self.script_pubkey) > 0 and self.script_pubkey[0] == 0x6a


@dataclass(frozen=True)
class Transaction:
    """Decoded transaction as delivered by the boundary decoders."""
    inputs: List[TransactionInput]
    outputs: List[TransactionOutput]
    
    # Opaque to the detectors
    txid: Optional[str] = None
    version: int = 2
    locktime: int = 0
    size: int = 0
    vsize: int = 0
    weight: int = 0
    
    @property
    def has_witness(self) -> bool:
        return any(inp.witness_stack for inp in self.inputs)
    
    @property
    def op_return_outputs(self) -> List[TransactionOutput]:
        return [out for out in self.outputs if out.is_op_return]
