#!/usr/bin/env python3
"""
OracleBridge CLI - Cross-chain oracle request board

Usage:
    python cli.py --test                      # Emit test receipt
    python cli.py --status                    # System status
    python cli.py --demo direct               # Full lifecycle, authorized reporter
    python cli.py --demo claim                # Full lifecycle, claim + merkle proofs
    python cli.py --prove a b c d --index 2   # Merkle path for one item
    python cli.py --summary receipts.jsonl    # Totals over a receipt ledger

Receipt: oraclebridge_cli
Gate: t2h
"""

import argparse
import sys

# Add repository root to path for imports
sys.path.insert(0, ".")

from oraclebridge import __version__
from oraclebridge.core import dual_hash, emit_receipt
from oraclebridge.constants import TENANT_ID
from oraclebridge.anchor.hash import short_hash, tally_leaf
from oraclebridge.anchor.merkle import build_merkle_tree, get_merkle_proof, verify
from oraclebridge.bridge.board import Bridge
from oraclebridge.bridge.collaborators import (
    InMemoryHeaderStore,
    InMemoryWallet,
    LocalChain,
    StaticReporterACL,
)
from oraclebridge.ledger.query import summarize_bridge_activity
from oraclebridge.ledger.store import LedgerStore
from oraclebridge.query.lifecycle import Variant

DEMO_REQUEST = b"\x0a\x1f\x12\x1d\x08\x01\x12\x19https://api.example/price"
DEMO_RESULT = b"\x1b\x00\x00\x00\x00\x00\x98\x96\x80"


def test_receipt() -> dict:
    """Emit a test receipt to verify system is working."""
    return emit_receipt("test", {
        "tenant_id": TENANT_ID,
        "message": "OracleBridge v1 operational",
        "variants": [v.value for v in Variant]
    })


def status() -> dict:
    """Emit system status receipt."""
    return emit_receipt("status", {
        "tenant_id": TENANT_ID,
        "version": __version__,
        "gate": "t2h",
        "core_functions": {
            "dual_hash": True,
            "emit_receipt": True,
            "merkle": True
        },
        "modules": {
            "anchor": ["hash", "merkle", "verify"],
            "escrow": ["ledger", "pricing"],
            "query": ["models", "store", "lifecycle"],
            "bridge": ["board", "collaborators"],
            "ledger": ["store", "query"]
        }
    })


def demo_direct(ledger: LedgerStore | None = None) -> dict:
    """Post, top up, report and delete one query with an authorized reporter."""
    wallet = InMemoryWallet()
    bridge = Bridge(
        wallet,
        acl=StaticReporterACL({"reporter"}),
        chain=LocalChain(),
        ledger=ledger,
    )

    gas_price = 1
    floor = bridge.estimate_reward(gas_price)
    query_id = bridge.post("requester", DEMO_REQUEST, gas_price, floor)
    bridge.upgrade_reward("requester", query_id, floor // 10, gas_price)
    bridge.chain.advance(4)
    paid = bridge.report_result("reporter", query_id, dual_hash(b"demo-tx"), DEMO_RESULT)
    response = bridge.delete_query("requester", query_id)

    return emit_receipt("demo", {
        "tenant_id": TENANT_ID,
        "variant": Variant.DIRECT_REPORT.value,
        "query_id": query_id,
        "paid": paid,
        "reporter_balance": wallet.balance_of("reporter"),
        "result": response.result.hex()
    })


def demo_claim(ledger: LedgerStore | None = None) -> dict:
    """Post, claim, prove inclusion, prove tally and delete one query."""
    wallet = InMemoryWallet()
    headers = InMemoryHeaderStore()
    bridge = Bridge(
        wallet,
        header_store=headers,
        chain=LocalChain(),
        variant=Variant.CLAIM_BASED,
        ledger=ledger,
    )

    gas_price = 1
    floor = bridge.estimate_reward(gas_price)
    query_id = bridge.post("requester", DEMO_REQUEST, gas_price, floor * 2, result_reward=floor)
    bridge.claim("relayer", [query_id])

    # External block carrying the request and its tally among others
    request_leaves = [dual_hash(f"other-request-{i}") for i in range(3)] + [query_id]
    leaf = tally_leaf(query_id, DEMO_RESULT)
    tally_leaves = [leaf] + [dual_hash(f"other-tally-{i}") for i in range(4)]
    request_tree = build_merkle_tree(request_leaves)
    tally_tree = build_merkle_tree(tally_leaves)
    headers.record_block("block-1", request_tree["root"], tally_tree["root"])

    bridge.chain.advance(2)
    inclusion_paid = bridge.report_inclusion(
        "relayer", query_id, get_merkle_proof(request_tree, 3), "block-1"
    )
    result_paid = bridge.report_result(
        "reporter", query_id, leaf, DEMO_RESULT,
        proof=get_merkle_proof(tally_tree, 0), block_ref="block-1"
    )
    bridge.delete_query("requester", query_id)

    return emit_receipt("demo", {
        "tenant_id": TENANT_ID,
        "variant": Variant.CLAIM_BASED.value,
        "query_id": short_hash(query_id),
        "inclusion_paid": inclusion_paid,
        "result_paid": result_paid,
        "relayer_balance": wallet.balance_of("relayer"),
        "reporter_balance": wallet.balance_of("reporter")
    })


def prove(items: list[str], index: int) -> dict:
    """Build a tree over items and print the merkle path for one of them."""
    leaves = [dual_hash(item) for item in items]
    tree = build_merkle_tree(leaves)
    proof = get_merkle_proof(tree, index)
    verified = 0 <= index < len(leaves) and verify(proof.path, tree["root"], index, leaves[index])

    return emit_receipt("merkle_path", {
        "tenant_id": TENANT_ID,
        "root": tree["root"],
        "leaf": leaves[index] if 0 <= index < len(leaves) else None,
        **proof.to_dict(),
        "verified": verified
    })


def main():
    parser = argparse.ArgumentParser(
        description="OracleBridge - Cross-chain oracle request board",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python cli.py --test                     # Verify system is working
    python cli.py --demo claim               # Walk the claim-based lifecycle
    python cli.py --demo direct --ledger receipts.jsonl
    python cli.py --prove a b c --index 1    # Merkle path for "b"
        """
    )

    parser.add_argument("--test", action="store_true",
                        help="Emit test receipt to verify system")
    parser.add_argument("--status", action="store_true",
                        help="Show system status")
    parser.add_argument("--demo", choices=["direct", "claim"],
                        help="Run a full query lifecycle against in-memory collaborators")
    parser.add_argument("--ledger", type=str, metavar="PATH",
                        help="Append demo receipts to a ledger file")
    parser.add_argument("--prove", nargs="+", metavar="ITEM",
                        help="Items to build a merkle tree over")
    parser.add_argument("--index", type=int, default=0,
                        help="Item to prove (with --prove)")
    parser.add_argument("--summary", type=str, metavar="PATH",
                        help="Summarize bridge activity in a ledger file")

    args = parser.parse_args()

    if args.test:
        test_receipt()
    elif args.status:
        status()
    elif args.demo:
        ledger = LedgerStore(args.ledger) if args.ledger else None
        if args.demo == "direct":
            demo_direct(ledger)
        else:
            demo_claim(ledger)
    elif args.prove:
        prove(args.prove, args.index)
    elif args.summary:
        summarize_bridge_activity(args.summary)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
