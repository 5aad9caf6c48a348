"""
OracleBridge Core Module - receipts, hashing and the rejection taxonomy.
Every other file imports this.

Receipt: oraclebridge_core
SLO: dual_hash_latency <= 10ms
Gate: t2h
"""

import hashlib
import json
from datetime import datetime, timezone

import blake3

from oraclebridge.constants import TENANT_ID

# ═══════════════════════════════════════════════════════════════════
# CORE FUNCTIONS
# ═══════════════════════════════════════════════════════════════════

def dual_hash(data: bytes | str) -> str:
    """
    SHA256:BLAKE3 format.
    Pure function. Every hash in the bridge is a dual hash.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    sha = hashlib.sha256(data).hexdigest()
    b3 = blake3.blake3(data).hexdigest()
    return f"{sha}:{b3}"


def _json_default(value):
    if isinstance(value, bytes):
        return value.hex()
    if hasattr(value, "value"):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def emit_receipt(receipt_type: str, data: dict) -> dict:
    """
    Creates receipt with ts, tenant_id, payload_hash.
    Prints JSON to stdout. Every state change calls this.
    """
    receipt = {
        "receipt_type": receipt_type,
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "tenant_id": data.get("tenant_id", TENANT_ID),
        "payload_hash": dual_hash(json.dumps(data, sort_keys=True, default=_json_default)),
        **data
    }
    print(json.dumps(receipt, default=_json_default), flush=True)
    return receipt


def merkle(items: list) -> str:
    """
    Compute Merkle root over JSON items using dual_hash.
    Odd levels duplicate their last node.
    """
    if not items:
        return dual_hash(b"empty")
    hashes = [dual_hash(json.dumps(i, sort_keys=True, default=_json_default)) for i in items]
    while len(hashes) > 1:
        if len(hashes) % 2:
            hashes.append(hashes[-1])
        hashes = [dual_hash(hashes[i] + hashes[i + 1])
                  for i in range(0, len(hashes), 2)]
    return hashes[0]


# ═══════════════════════════════════════════════════════════════════
# STOPRULES
# ═══════════════════════════════════════════════════════════════════

class StopRule(Exception):
    """Raised when stoprule triggers. Never catch silently."""
    pass


class BridgeError(StopRule):
    """Rejected bridge operation. No state was mutated."""
    code = "bridge_error"
    receipt = None  # anomaly receipt emitted for this rejection
    ledgered = False


class InsufficientValue(BridgeError):
    code = "insufficient_value"


class WrongStatus(BridgeError):
    code = "wrong_status"

    def __init__(self, message: str, expected=None, actual=None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InvalidProof(BridgeError):
    code = "invalid_proof"


class Unauthorized(BridgeError):
    code = "unauthorized"


class NotFound(BridgeError):
    code = "not_found"


class TamperedRequest(BridgeError):
    code = "tampered_request"


class AlreadyReleased(BridgeError):
    code = "already_released"


class UnknownBlock(BridgeError):
    code = "unknown_block"


class InvalidInput(BridgeError):
    code = "invalid_input"


class ReentrantCall(BridgeError):
    code = "reentrant_call"


def _reject(error: BridgeError, details: dict) -> None:
    """Emit anomaly receipt for a rejected operation, attach it, then raise."""
    error.receipt = emit_receipt("anomaly", {
        "tenant_id": TENANT_ID,
        "metric": error.code,
        "baseline": 0,
        "delta": -1,
        "classification": "violation",
        "action": "reject",
        **details
    })
    raise error


def stoprule_hash_mismatch(expected: str, actual: str, query_id=None) -> None:
    """Emit anomaly and reject on request integrity mismatch."""
    _reject(
        TamperedRequest(f"Hash mismatch: expected {expected}, got {actual}"),
        {"query_id": query_id, "expected": expected, "actual": actual}
    )


def stoprule_wrong_status(query_id, expected, actual) -> None:
    """Emit anomaly and reject on lifecycle guard mismatch."""
    expected_names = [s.value for s in expected]
    _reject(
        WrongStatus(
            f"Query {query_id}: expected status {'|'.join(expected_names)}, got {actual.value}",
            expected=tuple(expected),
            actual=actual,
        ),
        {"query_id": query_id, "expected": expected_names, "actual": actual.value}
    )


def stoprule_insufficient_value(query_id, value: int, floor: int) -> None:
    """Emit anomaly and reject when escrow would sit below the price floor."""
    _reject(
        InsufficientValue(f"Reward {value} below price floor {floor}"),
        {"query_id": query_id, "value": value, "floor": floor}
    )


def stoprule_invalid_proof(query_id, reason: str) -> None:
    """Emit anomaly and reject on failed merkle verification."""
    _reject(
        InvalidProof(f"Invalid proof for query {query_id}: {reason}"),
        {"query_id": query_id, "reason": reason}
    )


def stoprule_unauthorized(query_id, caller: str, role: str) -> None:
    """Emit anomaly and reject when the caller lacks the required role."""
    _reject(
        Unauthorized(f"{caller} is not {role} for query {query_id}"),
        {"query_id": query_id, "caller": caller, "role": role}
    )


def stoprule_not_found(query_id) -> None:
    """Emit anomaly and reject on unknown identifier."""
    _reject(NotFound(f"Unknown query {query_id}"), {"query_id": query_id})


def stoprule_already_released(query_id) -> None:
    """Emit anomaly and reject a second release of the same reward."""
    _reject(
        AlreadyReleased(f"Reward for query {query_id} already released"),
        {"query_id": query_id}
    )


def stoprule_invalid_input(query_id, reason: str) -> None:
    """Emit anomaly and reject malformed operation input."""
    _reject(InvalidInput(reason), {"query_id": query_id, "reason": reason})


def stoprule_reentrant_call(query_id) -> None:
    """Emit anomaly and reject re-entry on an identifier that is in flight."""
    _reject(
        ReentrantCall(f"Query {query_id} has an operation in flight"),
        {"query_id": query_id}
    )


def stoprule_unknown_block(block_ref: str) -> None:
    """Emit anomaly and reject when the header store lacks the block."""
    _reject(UnknownBlock(f"Unknown block {block_ref}"), {"block_ref": block_ref})
