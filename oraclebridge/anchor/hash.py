"""
Payload Hash Module

Purpose: Integrity hashes for request payloads and merkle leaves

Receipt: hash_receipt
Gate: t16h
"""

from oraclebridge.core import dual_hash


def hash_payload(bytecode: bytes) -> str:
    """
    Integrity hash of a request payload.

    In the claim-based variant this is also the query identifier.

    Args:
        bytecode: Raw request payload bytes

    Returns:
        Dual hash of the payload
    """
    return dual_hash(bytes(bytecode))


def request_leaf(query_id: str) -> str:
    """Leaf proven against an external block's requests root."""
    return query_id


def tally_leaf(inclusion_hash: str, result: bytes) -> str:
    """Leaf proven against an external block's tallies root."""
    return dual_hash(inclusion_hash + bytes(result).hex())


def short_hash(hash_str: str, length: int = 12) -> str:
    """SHA256 half of a dual hash, truncated for display."""
    return hash_str.split(":")[0][:length]
