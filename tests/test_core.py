"""
Tests for core module.

Receipt: test_core_receipt
Gate: t24h
"""

import json
import time

import pytest

from oraclebridge.core import (
    dual_hash,
    emit_receipt,
    merkle,
    StopRule,
    BridgeError,
    WrongStatus,
    TamperedRequest,
    InsufficientValue,
    stoprule_hash_mismatch,
    stoprule_wrong_status,
    stoprule_insufficient_value,
)
from oraclebridge.constants import TENANT_ID
from oraclebridge.query.lifecycle import QueryStatus


class TestDualHash:
    """Tests for dual_hash function."""

    def test_dual_hash_string(self):
        """Test dual_hash with string input."""
        result = dual_hash("test")
        parts = result.split(":")
        assert len(parts) == 2
        assert len(parts[0]) == 64  # SHA256 hex length
        assert len(parts[1]) == 64  # BLAKE3 hex length

    def test_dual_hash_str_and_bytes_agree(self):
        assert dual_hash("test") == dual_hash(b"test")

    def test_dual_hash_different_inputs(self):
        assert dual_hash("test1") != dual_hash("test2")

    def test_dual_hash_latency(self):
        """SLO: dual_hash_latency <= 10ms."""
        t0 = time.time()
        for _ in range(100):
            dual_hash("test data for latency check")
        elapsed = (time.time() - t0) * 1000 / 100
        assert elapsed <= 10, f"Latency {elapsed}ms > 10ms SLO"


class TestEmitReceipt:
    """Tests for emit_receipt function."""

    def test_emit_receipt_basic(self, capsys):
        receipt = emit_receipt("test", {"tenant_id": TENANT_ID, "data": "value"})

        assert receipt["receipt_type"] == "test"
        assert receipt["tenant_id"] == TENANT_ID
        assert "ts" in receipt and receipt["ts"].endswith("Z")
        assert ":" in receipt["payload_hash"]

    def test_emit_receipt_json_valid(self, capsys):
        emit_receipt("test", {"tenant_id": TENANT_ID})
        captured = capsys.readouterr()
        receipt = json.loads(captured.out.strip())
        assert receipt["receipt_type"] == "test"

    def test_emit_receipt_serializes_bytes_and_enums(self, capsys):
        emit_receipt("test", {"raw": b"\x01\x02", "status": QueryStatus.POSTED})
        receipt = json.loads(capsys.readouterr().out.strip())
        assert receipt["raw"] == "0102"
        assert receipt["status"] == "posted"


class TestMerkle:
    """Tests for merkle function over JSON items."""

    def test_merkle_empty(self):
        assert merkle([]) == dual_hash(b"empty")

    def test_merkle_deterministic(self):
        items = [{"a": 1}, {"b": 2}]
        assert merkle(items) == merkle(items)

    def test_merkle_order_matters(self):
        assert merkle([{"a": 1}, {"b": 2}]) != merkle([{"b": 2}, {"a": 1}])


class TestStopRule:
    """Tests for the rejection taxonomy."""

    def test_bridge_errors_are_stoprules(self):
        assert issubclass(BridgeError, StopRule)
        assert issubclass(WrongStatus, BridgeError)

    def test_stoprule_hash_mismatch(self, capsys):
        with pytest.raises(TamperedRequest) as excinfo:
            stoprule_hash_mismatch("expected", "actual", query_id=7)
        assert "Hash mismatch" in str(excinfo.value)

        anomaly = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert anomaly["receipt_type"] == "anomaly"
        assert anomaly["metric"] == "tampered_request"
        assert anomaly["action"] == "reject"

    def test_stoprule_wrong_status_carries_expected_and_actual(self):
        with pytest.raises(WrongStatus) as excinfo:
            stoprule_wrong_status(3, (QueryStatus.POSTED,), QueryStatus.REPORTED)
        assert excinfo.value.expected == (QueryStatus.POSTED,)
        assert excinfo.value.actual == QueryStatus.REPORTED

    def test_stoprule_insufficient_value(self):
        with pytest.raises(InsufficientValue) as excinfo:
            stoprule_insufficient_value(None, 5, 40)
        assert "below price floor 40" in str(excinfo.value)

    def test_rejection_carries_its_anomaly_receipt(self):
        with pytest.raises(InsufficientValue) as excinfo:
            stoprule_insufficient_value(4, 5, 40)
        receipt = excinfo.value.receipt
        assert receipt["receipt_type"] == "anomaly"
        assert receipt["query_id"] == 4
        assert receipt["floor"] == 40
        assert excinfo.value.ledgered is False
