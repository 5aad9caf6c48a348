"""
OracleBridge Anchor Modules - Cryptographic integrity and verification.

Purpose:
    - hash: payload integrity hashes and proof leaves
    - merkle: Merkle proof verifier, tree builder and proof generator
    - verify: integrity and inclusion checks that reject on failure

Receipt: anchor_receipt
Gate: t16h
"""

from oraclebridge.anchor.hash import hash_payload, request_leaf, tally_leaf, short_hash
from oraclebridge.anchor.merkle import (
    MerkleProof,
    PAD_NODE,
    merkle_parent,
    verify,
    build_merkle_tree,
    compute_merkle_root,
    get_merkle_proof
)
from oraclebridge.anchor.verify import verify_integrity, verify_inclusion

__all__ = [
    # hash
    "hash_payload", "request_leaf", "tally_leaf", "short_hash",
    # merkle
    "MerkleProof", "PAD_NODE", "merkle_parent", "verify",
    "build_merkle_tree", "compute_merkle_root", "get_merkle_proof",
    # verify
    "verify_integrity", "verify_inclusion",
]
