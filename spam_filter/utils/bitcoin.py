"""Bitcoin value and output-script helpers."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from spam_filter.utils.script_decoder import OP_0, OP_1, OP_16, OP_CHECKMULTISIG, OP_RETURN

SATOSHIS_PER_BTC = Decimal('100000000')

OP_DUP = 0x76
OP_HASH160 = 0xa9
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_CHECKSIG = 0xac


def btc_to_satoshi(btc: Decimal) -> int:
    """Convert a BTC amount (as reported by Bitcoin Core) to satoshis."""
    return int((Decimal(btc) * SATOSHIS_PER_BTC).to_integral_value(rounding=ROUND_HALF_UP))


def _is_hash_template(script: bytes, prefix: bytes, hash_size: int, suffix: bytes = b"") -> bool:
    return (len(script) == len(prefix) + 1 + hash_size + len(suffix)
            and script.startswith(prefix + bytes([hash_size]))
            and script.endswith(suffix))


def get_script_type(script_pubkey: Optional[bytes]) -> str:
    """
    Classify a scriptPubKey by its standard template.

    Returns one of EMPTY, OP_RETURN, P2PKH, P2SH, P2WPKH, P2WSH, P2TR,
    P2PK, MULTISIG or NON_STANDARD.
    """
    if not script_pubkey:
        return "EMPTY"

    if script_pubkey[0] == OP_RETURN:
        return "OP_RETURN"

    if _is_hash_template(script_pubkey, bytes([OP_DUP, OP_HASH160]), 20,
                         bytes([OP_EQUALVERIFY, OP_CHECKSIG])):
        return "P2PKH"
    if _is_hash_template(script_pubkey, bytes([OP_HASH160]), 20, bytes([OP_EQUAL])):
        return "P2SH"
    if _is_hash_template(script_pubkey, bytes([OP_0]), 20):
        return "P2WPKH"
    if _is_hash_template(script_pubkey, bytes([OP_0]), 32):
        return "P2WSH"
    if _is_hash_template(script_pubkey, bytes([OP_1]), 32):
        return "P2TR"

    # <33 or 65 byte pubkey> OP_CHECKSIG
    if len(script_pubkey) in (35, 67) and script_pubkey[0] == len(script_pubkey) - 2 \
            and script_pubkey[-1] == OP_CHECKSIG:
        return "P2PK"

    if (len(script_pubkey) > 3
            and OP_1 <= script_pubkey[0] <= OP_16
            and script_pubkey[-1] == OP_CHECKMULTISIG):
        return "MULTISIG"

    return "NON_STANDARD"
