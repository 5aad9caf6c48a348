"""
Merkle Tree Module

Purpose: Merkle inclusion proofs for external-network requests and tallies

Leaves are dual hashes. A parent is dual_hash(left + right); odd levels
are padded with PAD_NODE. Position along a path is carried by the bits
of the leaf index, least-significant first: 0 means the running hash is
the left child, 1 means it is the right child.

Receipt: merkle_receipt
Gate: t16h
"""

from dataclasses import dataclass, field

from oraclebridge.core import dual_hash, emit_receipt
from oraclebridge.constants import TENANT_ID

PAD_NODE = dual_hash(b"")


@dataclass(frozen=True)
class MerkleProof:
    """Sibling path plus the leaf index that orders it."""
    path: tuple = field(default_factory=tuple)
    index: int = 0

    def to_dict(self) -> dict:
        return {"path": list(self.path), "index": self.index}

    @classmethod
    def from_dict(cls, data: dict) -> 'MerkleProof':
        return cls(path=tuple(data.get("path", [])), index=int(data.get("index", 0)))


def merkle_parent(left: str, right: str) -> str:
    """Hash two sibling nodes into their parent."""
    return dual_hash(left + right)


def verify(path, root: str, index: int, leaf: str) -> bool:
    """
    Recompute a root from a leaf and its sibling path.

    Pure function. A path that does not match the tree, an index that
    does not match the path, or an overlong path all yield False.

    Args:
        path: Ordered sibling hashes, leaf level first
        root: Expected root
        index: Leaf position; its bits pick left/right at each level
        leaf: Leaf hash

    Returns:
        True if the recomputed root equals root
    """
    current = leaf
    for sibling in path:
        if index & 1:
            current = merkle_parent(sibling, current)
        else:
            current = merkle_parent(current, sibling)
        index >>= 1
    return current == root


def build_merkle_tree(leaves: list[str]) -> dict:
    """
    Build complete Merkle tree with all levels.

    Args:
        leaves: Leaf hashes, in tree order

    Returns:
        Tree structure with all levels
    """
    if not leaves:
        return {
            "root": dual_hash(b"empty"),
            "levels": [],
            "leaves": 0
        }

    hashes = list(leaves)
    levels = [hashes.copy()]

    while len(hashes) > 1:
        if len(hashes) % 2:
            hashes.append(PAD_NODE)
        hashes = [merkle_parent(hashes[i], hashes[i + 1])
                  for i in range(0, len(hashes), 2)]
        levels.append(hashes.copy())

    tree = {
        "root": hashes[0],
        "levels": levels,
        "leaves": len(leaves)
    }

    emit_receipt("merkle_root", {
        "tenant_id": TENANT_ID,
        "leaves": len(leaves),
        "levels": len(levels),
        "root": tree["root"]
    })

    return tree


def compute_merkle_root(leaves: list[str]) -> str:
    """Root of the tree over leaves."""
    return build_merkle_tree(leaves)["root"]


def get_merkle_proof(tree: dict, index: int) -> MerkleProof:
    """
    Get Merkle proof for the leaf at index.

    Args:
        tree: Merkle tree from build_merkle_tree
        index: Index of leaf to prove

    Returns:
        MerkleProof whose path verifies against tree["root"]
    """
    levels = tree.get("levels", [])
    if not levels or index < 0 or index >= tree.get("leaves", 0):
        return MerkleProof(path=(), index=index)

    path = []
    current_index = index

    for level in levels[:-1]:
        sibling_index = current_index ^ 1
        path.append(level[sibling_index] if sibling_index < len(level) else PAD_NODE)
        current_index //= 2

    emit_receipt("merkle_proof", {
        "tenant_id": TENANT_ID,
        "index": index,
        "proof_length": len(path),
        "root": tree.get("root")
    })

    return MerkleProof(path=tuple(path), index=index)
