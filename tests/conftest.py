"""
Pytest configuration and fixtures for OracleBridge tests.
"""

import os
import sys
import tempfile

import pytest

# Add repository root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from oraclebridge.core import dual_hash
from oraclebridge.anchor.hash import tally_leaf
from oraclebridge.anchor.merkle import build_merkle_tree
from oraclebridge.bridge.board import Bridge
from oraclebridge.bridge.collaborators import (
    InMemoryHeaderStore,
    InMemoryPayloadStore,
    InMemoryWallet,
    LocalChain,
    StaticReporterACL,
)
from oraclebridge.query.lifecycle import Variant

# gas_price 10 * REPORT_GAS 4 = price floor 40
REPORT_GAS = 4
GAS_PRICE = 10


@pytest.fixture
def sample_payload():
    """Sample request bytecode."""
    return b"\x0a\x1f\x12\x1d\x08\x01\x12\x19https://api.example/price"


@pytest.fixture
def sample_result():
    """Sample result bytes."""
    return b"\x1b\x00\x00\x00\x00\x00\x98\x96\x80"


@pytest.fixture
def wallet():
    return InMemoryWallet()


@pytest.fixture
def chain():
    return LocalChain(block_number=100)


@pytest.fixture
def headers():
    return InMemoryHeaderStore()


@pytest.fixture
def payloads():
    return InMemoryPayloadStore()


@pytest.fixture
def direct_bridge(wallet, chain, payloads):
    """Direct-report bridge with one authorized reporter."""
    return Bridge(
        wallet,
        acl=StaticReporterACL({"reporter"}),
        payload_store=payloads,
        chain=chain,
        report_result_gas=REPORT_GAS,
    )


@pytest.fixture
def claim_bridge(wallet, chain, headers, payloads):
    """Claim-based bridge backed by an in-memory header store."""
    return Bridge(
        wallet,
        header_store=headers,
        payload_store=payloads,
        chain=chain,
        variant=Variant.CLAIM_BASED,
        report_result_gas=REPORT_GAS,
    )


@pytest.fixture
def external_block(headers):
    """
    Record an external block that includes the given request ids and
    the tallies of the given results. Returns the two trees.
    """
    def record(block_ref: str, query_ids: list, results: dict) -> tuple:
        request_leaves = [dual_hash(f"unrelated-request-{i}") for i in range(3)] + list(query_ids)
        tally_leaves = [tally_leaf(qid, result) for qid, result in results.items()]
        tally_leaves += [dual_hash(f"unrelated-tally-{i}") for i in range(2)]
        request_tree = build_merkle_tree(request_leaves)
        tally_tree = build_merkle_tree(tally_leaves)
        headers.record_block(block_ref, request_tree["root"], tally_tree["root"])
        return request_tree, tally_tree

    return record


@pytest.fixture
def temp_ledger():
    """Create temporary ledger file."""
    fd, path = tempfile.mkstemp(suffix=".jsonl")
    os.close(fd)
    yield path
    if os.path.exists(path):
        os.unlink(path)
