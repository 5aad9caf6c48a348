"""
Verification Module

Purpose: Request integrity and merkle inclusion checks that reject
         the enclosing operation on failure

Receipt: verification_receipt
Gate: t16h
"""

from oraclebridge.core import (
    emit_receipt,
    stoprule_hash_mismatch,
    stoprule_invalid_proof,
)
from oraclebridge.constants import MAX_MERKLE_DEPTH, TENANT_ID
from oraclebridge.anchor.hash import hash_payload
from oraclebridge.anchor.merkle import MerkleProof, verify


def verify_integrity(
    bytecode: bytes,
    expected_hash: str,
    query_id=None,
    halt_on_mismatch: bool = True
) -> bool:
    """
    Verify a request payload still matches the hash recorded at post time.

    Args:
        bytecode: Payload bytes as currently held by the payload store
        expected_hash: Integrity hash recorded when the query was posted
        query_id: Query the payload belongs to (for receipts)
        halt_on_mismatch: If True, reject with TamperedRequest on mismatch

    Returns:
        True if verified
    """
    computed = hash_payload(bytecode)
    verified = computed == expected_hash

    emit_receipt("integrity_verification", {
        "tenant_id": TENANT_ID,
        "query_id": query_id,
        "expected": expected_hash,
        "computed": computed,
        "verified": verified
    })

    if not verified and halt_on_mismatch:
        stoprule_hash_mismatch(expected_hash, computed, query_id)

    return verified


def verify_inclusion(
    proof: MerkleProof,
    root: str,
    leaf: str,
    query_id=None,
    max_depth: int = MAX_MERKLE_DEPTH
) -> bool:
    """
    Check a merkle inclusion proof, rejecting with InvalidProof on failure.

    Paths longer than max_depth are refused before any hashing.

    Args:
        proof: Sibling path and leaf index
        root: Root recorded by the header store
        leaf: Leaf being proven
        query_id: Query the proof is for (for receipts)
        max_depth: Longest acceptable path

    Returns:
        True (failures raise)
    """
    if not isinstance(proof, MerkleProof):
        stoprule_invalid_proof(query_id, "merkle proof required")
    if len(proof.path) > max_depth:
        stoprule_invalid_proof(query_id, f"path length {len(proof.path)} exceeds {max_depth}")
    if proof.index < 0 or proof.index >= 2 ** len(proof.path):
        stoprule_invalid_proof(query_id, f"index {proof.index} out of range")

    verified = verify(proof.path, root, proof.index, leaf)

    emit_receipt("proof_verification", {
        "tenant_id": TENANT_ID,
        "query_id": query_id,
        "leaf": leaf,
        "expected_root": root,
        "path_length": len(proof.path),
        "verified": verified
    })

    if not verified:
        stoprule_invalid_proof(query_id, "root mismatch")

    return True
