"""Bitcoin Script decoding for spam pattern analysis.

Every function here is total over arbitrary byte input: truncated or
malformed scripts yield ``None`` / empty results, never an exception.
"""

import struct
from typing import List, Optional, Tuple

# Opcodes
OP_0 = 0x00
OP_PUSHDATA1 = 0x4c
OP_PUSHDATA2 = 0x4d
OP_PUSHDATA4 = 0x4e
OP_1 = 0x51
OP_16 = 0x60
OP_RETURN = 0x6a
OP_CHECKMULTISIG = 0xae

MAX_DIRECT_PUSH = 0x4b  # 75 bytes
PUSH_33_BYTES = 0x21
COMPRESSED_PUBKEY_SIZE = 33


def extract_pushed_data(script: bytes, offset: int) -> Tuple[Optional[bytes], int]:
    """
    Decode the push opcode at ``offset``.
    
    Args:
        script: Raw script bytes
        offset: Position of the push opcode
        
    Returns:
        Tuple of (data, next_offset). ``data`` is None when the byte at
        ``offset`` is not a push opcode or the declared length runs past the
        end of the script; ``next_offset`` is then ``offset`` unchanged.
    """
    if offset < 0 or offset >= len(script):
        return None, offset
    
    opcode = script[offset]
    i = offset + 1
    
    # direct push (1-75 bytes)
    if 1 <= opcode <= MAX_DIRECT_PUSH:
        length = opcode
    
    elif opcode == OP_PUSHDATA1:
        if i + 1 > len(script):
            return None, offset
        length = script[i]
        i += 1
    
    elif opcode == OP_PUSHDATA2:
        if i + 2 > len(script):
            return None, offset
        length = struct.unpack('<H', script[i:i + 2])[0]
        i += 2
    
    elif opcode == OP_PUSHDATA4:
        if i + 4 > len(script):
            return None, offset
        length = struct.unpack('<I', script[i:i + 4])[0]
        i += 4
    
    else:
        return None, offset
    
    end = i + length
    if end > len(script):
        return None, offset
    
    return bytes(script[i:end]), end


def extract_op_return_payload(script_pubkey: bytes) -> Optional[bytes]:
    """
    Get the data carried by an OP_RETURN output.
    
    Returns None unless the script starts with OP_RETURN. A bare OP_RETURN,
    or one followed by anything other than a complete push, carries an
    empty payload.
    """
    if len(script_pubkey) == 0 or script_pubkey[0] != OP_RETURN:
        return None
    
    data, _ = extract_pushed_data(script_pubkey, 1)
    if data is None:
        return b""
    return data


def extract_multisig_pubkeys(witness_script: bytes) -> List[bytes]:
    """
    Collect the 33-byte pubkey candidates of an m-of-n CHECKMULTISIG script.
    
    Walks from offset 1 (past the leading OP_m) until OP_CHECKMULTISIG or
    the end of the script. A 0x21 push that would run past the end stops
    the walk.
    """
    pubkeys = []
    i = 1
    
    while i < len(witness_script):
        opcode = witness_script[i]
        
        if opcode == OP_CHECKMULTISIG:
            break
        
        if opcode == PUSH_33_BYTES:
            end = i + 1 + COMPRESSED_PUBKEY_SIZE
            if end > len(witness_script):
                break
            pubkeys.append(bytes(witness_script[i + 1:end]))
            i = end
        
        # OP_1 .. OP_16 carry no data
        elif OP_1 <= opcode <= OP_16:
            i += 1
        
        else:
            i += 1
    
    return pubkeys


def is_checkmultisig_script(script: bytes) -> bool:
    """Check whether a script ends in OP_CHECKMULTISIG."""
    return len(script) > 0 and script[-1] == OP_CHECKMULTISIG


def extract_witness_script(witness_stack: Optional[List[bytes]]) -> Optional[bytes]:
    """The witness script of a P2WSH spend is the last witness item."""
    if not witness_stack:
        return None
    return witness_stack[-1]
