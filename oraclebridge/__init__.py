"""
OracleBridge v1 - Cross-chain oracle request board

Posts opaque requests with an escrowed reward, accepts merkle-proven or
authorized results back, and pays each reward exactly once.
"""

from oraclebridge.core import (
    dual_hash,
    emit_receipt,
    merkle,
    StopRule,
    BridgeError,
)
from oraclebridge.constants import TENANT_ID
from oraclebridge.bridge.board import Bridge
from oraclebridge.query.lifecycle import QueryStatus, Variant

__version__ = "1.0.0"
__all__ = [
    "dual_hash", "emit_receipt", "merkle", "StopRule", "BridgeError", "TENANT_ID",
    "Bridge", "QueryStatus", "Variant",
]
