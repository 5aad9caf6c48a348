"""
Query Data Model

Purpose: Request, Response and the Query record that ties them together

A Query's lifecycle status is never stored; it is derived from which of
its parts are populated (see query.lifecycle).

Receipt: none (data only)
Gate: t8h
"""

import copy
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Request:
    """What the requester asked for and what it is willing to pay per unit of work."""
    requester: str
    payload_hash: str                   # Integrity hash of the bytecode at post time
    gas_price: int
    bytecode: Optional[bytes] = None    # Inline payload
    payload_ref: Optional[str] = None   # Or a reference into the payload store

    def to_dict(self) -> dict:
        return {
            "requester": self.requester,
            "payload_hash": self.payload_hash,
            "gas_price": self.gas_price,
            "bytecode": self.bytecode.hex() if self.bytecode is not None else None,
            "payload_ref": self.payload_ref,
        }


@dataclass(frozen=True)
class Response:
    """Result recorded by the resolving party."""
    reporter: str
    result: bytes
    proof_ref: str      # External transaction hash or proven tally leaf
    timestamp: int      # Epoch the result was solved at

    def to_dict(self) -> dict:
        return {
            "reporter": self.reporter,
            "result": self.result.hex(),
            "proof_ref": self.proof_ref,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Response':
        return cls(
            reporter=data["reporter"],
            result=bytes.fromhex(data["result"]),
            proof_ref=data["proof_ref"],
            timestamp=data["timestamp"],
        )


@dataclass(frozen=True)
class Claim:
    """A resolver's reservation of the right to relay a query."""
    claimant: str
    epoch: int

    def expired(self, current_epoch: int, expiration_epochs: int) -> bool:
        return current_epoch - self.epoch > expiration_epochs


@dataclass(frozen=True)
class Inclusion:
    """Proof that the request reached a block of the external network."""
    inclusion_hash: str
    block_ref: str


@dataclass
class Query:
    """One data request tracked end to end. Parts fill in order, never overwritten."""
    query_id: object
    request: Request
    claim: Optional[Claim] = None
    inclusion: Optional[Inclusion] = None
    response: Optional[Response] = None

    def snapshot(self) -> 'Query':
        """Independent copy for rollback and for handing out to readers."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        return {
            "query_id": self.query_id,
            "request": self.request.to_dict(),
            "claim": {"claimant": self.claim.claimant, "epoch": self.claim.epoch}
            if self.claim else None,
            "inclusion": {"inclusion_hash": self.inclusion.inclusion_hash,
                          "block_ref": self.inclusion.block_ref}
            if self.inclusion else None,
            "response": self.response.to_dict() if self.response else None,
        }
