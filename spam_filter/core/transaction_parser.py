"""Transaction decoding at the engine boundary."""

import json
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union
import structlog
from bitcoin.core import CTransaction, b2lx
from bitcoin.core.serialize import SerializationError

from spam_filter.models.transaction import (
    MalformedTransactionError,
    Transaction,
    TransactionInput,
    TransactionOutput,
)
from spam_filter.utils.bitcoin import btc_to_satoshi, get_script_type

logger = structlog.get_logger(__name__)

COINBASE_TXID = "00" * 32
COINBASE_INDEX = 0xffffffff
WITNESS_SCALE_FACTOR = 4


def _compact_size_len(n: int) -> int:
    """Serialized length of a CompactSize integer."""
    if n < 0xfd:
        return 1
    if n <= 0xffff:
        return 3
    if n <= 0xffffffff:
        return 5
    return 9


def _witness_section_size(witness_stacks: List[List[bytes]]) -> int:
    """Bytes taken by the marker, flag and witness data of a segwit transaction."""
    size = 2
    for stack in witness_stacks:
        size += _compact_size_len(len(stack))
        for item in stack:
            size += _compact_size_len(len(item)) + len(item)
    return size


def _hex_to_bytes(value: Any, field_name: str) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise MalformedTransactionError(f"{field_name} must be a hex string")
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise MalformedTransactionError(f"{field_name} is not valid hex: {e}")


class TransactionParser:
    """Decode raw hex or Bitcoin Core JSON into Transaction values."""
    
    @staticmethod
    def parse_hex(raw_hex: str) -> Transaction:
        """
        Decode a serialized transaction (legacy or segwit).
        
        Raises:
            MalformedTransactionError: if the hex or the serialization is invalid
        """
        raw = _hex_to_bytes(raw_hex.strip(), "raw transaction")
        if not raw:
            raise MalformedTransactionError("raw transaction is empty")
        
        try:
            ctx = CTransaction.deserialize(raw)
        except (SerializationError, ValueError) as e:
            raise MalformedTransactionError(f"Could not deserialize transaction: {e}")
        
        witness_stacks = []
        for index in range(len(ctx.vin)):
            if index < len(ctx.wit.vtxinwit):
                witness_stacks.append([bytes(item) for item in ctx.wit.vtxinwit[index].scriptWitness.stack])
            else:
                witness_stacks.append([])
        
        inputs = [
            TransactionInput(
                previous_txid=b2lx(txin.prevout.hash),
                previous_index=txin.prevout.n,
                witness_stack=witness_stacks[index] or None,
                script_sig=bytes(txin.scriptSig),
                sequence=txin.nSequence
            )
            for index, txin in enumerate(ctx.vin)
        ]
        
        outputs = []
        for txout in ctx.vout:
            script_pubkey = bytes(txout.scriptPubKey)
            outputs.append(TransactionOutput(
                value_satoshis=txout.nValue,
                script_pubkey=script_pubkey,
                script_type=get_script_type(script_pubkey)
            ))
        
        # weight = base size * 3 + total size
        total_size = len(raw)
        if any(witness_stacks):
            base_size = total_size - _witness_section_size(witness_stacks)
        else:
            base_size = total_size
        weight = base_size * (WITNESS_SCALE_FACTOR - 1) + total_size
        
        tx = Transaction(
            inputs=inputs,
            outputs=outputs,
            txid=b2lx(ctx.GetTxid()),
            version=ctx.nVersion,
            locktime=ctx.nLockTime,
            size=total_size,
            vsize=(weight + WITNESS_SCALE_FACTOR - 1) // WITNESS_SCALE_FACTOR,
            weight=weight
        )
        
        logger.debug("Parsed raw transaction",
                     txid=tx.txid,
                     inputs=len(inputs),
                     outputs=len(outputs),
                     weight=weight)
        
        return tx
    
    @staticmethod
    def parse_json(tx_json: Dict[str, Any]) -> Transaction:
        """
        Decode Bitcoin Core verbose transaction JSON.
        
        Args:
            tx_json: Result of getrawtransaction(txid, true) or decoderawtransaction
            
        Raises:
            MalformedTransactionError: if vin/vout are missing or malformed
        """
        if not isinstance(tx_json, Mapping):
            raise MalformedTransactionError("Transaction JSON must be an object")
        
        vin = tx_json.get('vin')
        vout = tx_json.get('vout')
        if not isinstance(vin, list):
            raise MalformedTransactionError("Transaction JSON is missing 'vin'")
        if not isinstance(vout, list):
            raise MalformedTransactionError("Transaction JSON is missing 'vout'")
        
        inputs = [TransactionParser._parse_vin(entry) for entry in vin]
        outputs = [TransactionParser._parse_vout(entry) for entry in vout]
        
        return Transaction(
            inputs=inputs,
            outputs=outputs,
            txid=tx_json.get('txid') or tx_json.get('hash'),
            version=tx_json.get('version', 2),
            locktime=tx_json.get('locktime', 0),
            size=tx_json.get('size', 0),
            vsize=tx_json.get('vsize', 0),
            weight=tx_json.get('weight', 0)
        )
    
    @staticmethod
    def parse(value: Union[str, Dict[str, Any]]) -> Transaction:
        """Decode a JSON object, JSON text or raw hex transaction."""
        if isinstance(value, Mapping):
            return TransactionParser.parse_json(value)
        
        text = value.strip()
        if text.startswith('{'):
            try:
                tx_json = json.loads(text)
            except json.JSONDecodeError as e:
                raise MalformedTransactionError(f"Invalid transaction JSON: {e}")
            return TransactionParser.parse_json(tx_json)
        
        return TransactionParser.parse_hex(text)
    
    @staticmethod
    def _parse_vin(vin_data: Any) -> TransactionInput:
        if not isinstance(vin_data, Mapping):
            raise MalformedTransactionError("Transaction input must be an object")
        
        witness = vin_data.get('txinwitness')
        witness_stack: Optional[List[bytes]] = None
        if witness:
            witness_stack = [_hex_to_bytes(item, "txinwitness item") for item in witness]
        
        # Coinbase transaction
        if 'coinbase' in vin_data:
            return TransactionInput(
                previous_txid=COINBASE_TXID,
                previous_index=COINBASE_INDEX,
                witness_stack=witness_stack,
                script_sig=_hex_to_bytes(vin_data.get('coinbase'), "coinbase"),
                sequence=vin_data.get('sequence', 0xffffffff)
            )
        
        if 'txid' not in vin_data or 'vout' not in vin_data:
            raise MalformedTransactionError("Transaction input is missing 'txid' or 'vout'")
        
        script_sig = vin_data.get('scriptSig') or {}
        return TransactionInput(
            previous_txid=vin_data['txid'],
            previous_index=vin_data['vout'],
            witness_stack=witness_stack,
            script_sig=_hex_to_bytes(script_sig.get('hex'), "scriptSig"),
            sequence=vin_data.get('sequence', 0xffffffff)
        )
    
    @staticmethod
    def _parse_vout(vout_data: Any) -> TransactionOutput:
        if not isinstance(vout_data, Mapping):
            raise MalformedTransactionError("Transaction output must be an object")
        
        try:
            value_btc = Decimal(str(vout_data.get('value', 0)))
        except InvalidOperation:
            raise MalformedTransactionError(f"Invalid output value: {vout_data.get('value')!r}")
        
        if value_btc < 0:
            raise MalformedTransactionError(f"Negative output value: {value_btc}")
        
        script_pub_key = vout_data.get('scriptPubKey') or {}
        return TransactionOutput(
            value_satoshis=btc_to_satoshi(value_btc),
            script_pubkey=_hex_to_bytes(script_pub_key.get('hex', ''), "scriptPubKey"),
            script_type=script_pub_key.get('type')
        )
