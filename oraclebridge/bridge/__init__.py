"""
OracleBridge Bridge Modules - The externally callable surface.

Purpose:
    - board: Bridge facade (post, upgrade, claim, report, delete, reads)
    - collaborators: external interfaces and in-memory implementations

Receipt: bridge_receipt
Gate: t24h
"""

from oraclebridge.bridge.board import Bridge
from oraclebridge.bridge.collaborators import (
    HeaderStore,
    Wallet,
    ReporterACL,
    PayloadStore,
    Eligibility,
    HostChain,
    InMemoryHeaderStore,
    InMemoryWallet,
    StaticReporterACL,
    InMemoryPayloadStore,
    AcceptAllEligibility,
    AllowlistEligibility,
    LocalChain
)

__all__ = [
    # board
    "Bridge",
    # interfaces
    "HeaderStore", "Wallet", "ReporterACL", "PayloadStore", "Eligibility", "HostChain",
    # in-memory
    "InMemoryHeaderStore", "InMemoryWallet", "StaticReporterACL", "InMemoryPayloadStore",
    "AcceptAllEligibility", "AllowlistEligibility", "LocalChain",
]
