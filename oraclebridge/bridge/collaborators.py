"""
Bridge Collaborators Module

Purpose: Interfaces the bridge consumes, plus in-memory implementations
         for tests, the CLI demo and local simulation

    - HeaderStore: merkle roots of external-network blocks
    - Wallet: value transfer, performed last in every paying operation
    - ReporterACL: who may report results (direct-report variant)
    - PayloadStore: bytecode behind a request reference
    - Eligibility: claim eligibility proofs (claim-based variant)
    - HostChain: block height and timestamp of the host chain

In production, these would be replaced by real implementations.

Receipt: none
Gate: t24h
"""

from typing import Callable, Protocol, runtime_checkable

from oraclebridge.core import stoprule_invalid_input, stoprule_unknown_block


# ═══════════════════════════════════════════════════════════════════
# INTERFACES
# ═══════════════════════════════════════════════════════════════════

@runtime_checkable
class HeaderStore(Protocol):
    def get_requests_root(self, block_ref: str) -> str: ...

    def get_tallies_root(self, block_ref: str) -> str: ...


@runtime_checkable
class Wallet(Protocol):
    def transfer(self, recipient: str, amount: int) -> None: ...


@runtime_checkable
class ReporterACL(Protocol):
    def is_authorized_reporter(self, identity: str) -> bool: ...


@runtime_checkable
class PayloadStore(Protocol):
    def fetch_bytecode(self, reference: str) -> bytes: ...


@runtime_checkable
class Eligibility(Protocol):
    def verify(self, claimant: str, proof, query_ids: list) -> bool: ...


@runtime_checkable
class HostChain(Protocol):
    def block_number(self) -> int: ...

    def timestamp(self) -> int: ...


# ═══════════════════════════════════════════════════════════════════
# IN-MEMORY IMPLEMENTATIONS
# ═══════════════════════════════════════════════════════════════════

class InMemoryHeaderStore:
    """Roots recorded by hand, keyed by external block reference."""

    def __init__(self):
        self._blocks: dict = {}

    def record_block(self, block_ref: str, requests_root: str, tallies_root: str) -> None:
        self._blocks[block_ref] = (requests_root, tallies_root)

    def _roots(self, block_ref: str) -> tuple:
        if block_ref not in self._blocks:
            stoprule_unknown_block(block_ref)
        return self._blocks[block_ref]

    def get_requests_root(self, block_ref: str) -> str:
        return self._roots(block_ref)[0]

    def get_tallies_root(self, block_ref: str) -> str:
        return self._roots(block_ref)[1]


class InMemoryWallet:
    """
    Records every payout.

    A hook registered for a recipient runs inside transfer, the way a
    recipient contract's fallback runs inside a native value transfer.
    """

    def __init__(self):
        self.balances: dict = {}
        self.transfers: list = []
        self.hooks: dict = {}

    def on_transfer(self, recipient: str, hook: Callable[[str, int], None]) -> None:
        self.hooks[recipient] = hook

    def transfer(self, recipient: str, amount: int) -> None:
        hook = self.hooks.get(recipient)
        if hook is not None:
            hook(recipient, amount)
        self.balances[recipient] = self.balances.get(recipient, 0) + amount
        self.transfers.append((recipient, amount))

    def balance_of(self, identity: str) -> int:
        return self.balances.get(identity, 0)


class StaticReporterACL:
    def __init__(self, reporters=()):
        self.reporters = set(reporters)

    def is_authorized_reporter(self, identity: str) -> bool:
        return identity in self.reporters


class InMemoryPayloadStore:
    """Bytecode by reference. put() on an existing reference replaces it."""

    def __init__(self):
        self._payloads: dict = {}

    def put(self, reference: str, bytecode: bytes) -> str:
        self._payloads[reference] = bytes(bytecode)
        return reference

    def fetch_bytecode(self, reference: str) -> bytes:
        if reference not in self._payloads:
            stoprule_invalid_input(None, f"payload reference {reference} does not resolve")
        return self._payloads[reference]


class AcceptAllEligibility:
    """Every claimant is eligible. Offers no sybil resistance."""

    def verify(self, claimant: str, proof, query_ids: list) -> bool:
        return True


class AllowlistEligibility:
    """Eligible claimants are listed up front; the proof is ignored."""

    def __init__(self, claimants=()):
        self.claimants = set(claimants)

    def verify(self, claimant: str, proof, query_ids: list) -> bool:
        return claimant in self.claimants


class LocalChain:
    """Host chain clock advanced by hand."""

    def __init__(self, block_number: int = 1, timestamp: int = 1_600_000_000, block_time: int = 15):
        self._block_number = block_number
        self._timestamp = timestamp
        self.block_time = block_time

    def block_number(self) -> int:
        return self._block_number

    def timestamp(self) -> int:
        return self._timestamp

    def advance(self, blocks: int = 1) -> int:
        self._block_number += blocks
        self._timestamp += blocks * self.block_time
        return self._block_number
