"""Pytest configuration and fixtures for spam filter tests."""

import pytest

from spam_filter.core.filter_engine import FilterEngine
from spam_filter.models.config import FilterConfig

from builders import (
    make_tx,
    op_return_output,
    p2wpkh_output,
    p2wsh_spam_tx,
    plain_input,
)


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep SPAMFILTER_* variables from the host out of the tests."""
    import os
    for key in list(os.environ):
        if key.upper().startswith("SPAMFILTER_"):
            monkeypatch.delenv(key)


@pytest.fixture
def config():
    """Default test configuration."""
    return FilterConfig(threshold=80)


@pytest.fixture
def engine(config):
    """Filter engine instance."""
    return FilterEngine(config)


# ============================================================================
# SAMPLE TRANSACTION FIXTURES
# ============================================================================

@pytest.fixture
def normal_tx():
    """Ordinary P2WPKH payment with change."""
    return make_tx(
        inputs=[plain_input(witness_stack=[b"\x30" * 71, b"\x02" * 33])],
        outputs=[p2wpkh_output(50000), p2wpkh_output(120000)],
        txid="normal"
    )


@pytest.fixture
def p2wsh_spam():
    """Single input spending a 1-of-12 multisig of zero-filled pubkeys."""
    return p2wsh_spam_tx(12)


@pytest.fixture
def opreturn_chain_tx():
    """Chunked OP_RETURN with magic prefix plus a continuation output."""
    return make_tx(
        outputs=[
            op_return_output(bytes.fromhex("01bc0001") + b"Hello World!"),
            p2wpkh_output(9000),
            p2wpkh_output(1000000),
        ],
        txid="opreturn-chain"
    )
