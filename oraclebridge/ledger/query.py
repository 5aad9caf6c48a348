"""
Ledger Query Module

Purpose: Index bridge receipts by type, query and requester

Receipt: ledger_query_receipt
Gate: t24h
"""

from oraclebridge.core import emit_receipt
from oraclebridge.constants import DEFAULT_LEDGER_PATH, TENANT_ID
from oraclebridge.ledger.store import LedgerStore


def _emit_query(query_type: str, filter_value, total: int, matching: int) -> None:
    emit_receipt("ledger_query", {
        "tenant_id": TENANT_ID,
        "query_type": query_type,
        "filter": filter_value,
        "total_receipts": total,
        "matching_receipts": matching
    })


def query_by_type(
    receipt_type: str,
    path: str = DEFAULT_LEDGER_PATH
) -> list[dict]:
    """
    Query receipts by type.

    Args:
        receipt_type: Receipt type to filter
        path: Ledger file path

    Returns:
        Matching receipts
    """
    all_receipts = LedgerStore(path).read_all()
    matching = [r for r in all_receipts if r.get("receipt_type") == receipt_type]
    _emit_query("by_type", receipt_type, len(all_receipts), len(matching))
    return matching


def query_by_query_id(query_id, path: str = DEFAULT_LEDGER_PATH) -> list[dict]:
    """
    Lifecycle of one query as recorded in the ledger, oldest first.

    Receipts carrying a query_ids list match when the id is listed.
    """
    all_receipts = LedgerStore(path).read_all()
    matching = [
        r for r in all_receipts
        if r.get("query_id") == query_id or query_id in r.get("query_ids", [])
    ]
    _emit_query("by_query_id", query_id, len(all_receipts), len(matching))
    return matching


def query_by_requester(requester: str, path: str = DEFAULT_LEDGER_PATH) -> list[dict]:
    """Receipts concerning queries posted by requester."""
    all_receipts = LedgerStore(path).read_all()
    matching = [r for r in all_receipts if r.get("requester") == requester]
    _emit_query("by_requester", requester, len(all_receipts), len(matching))
    return matching


def summarize_bridge_activity(path: str = DEFAULT_LEDGER_PATH) -> dict:
    """
    Totals over the bridge receipts in a ledger.

    Returns:
        Counts per receipt type, total escrowed (posts plus top-ups),
        total paid out, how many queries were posted and resolved, and
        how many operations were rejected
    """
    receipts = LedgerStore(path).read_all()

    by_type = {}
    escrowed = 0
    released = 0
    for r in receipts:
        rt = r.get("receipt_type", "unknown")
        by_type[rt] = by_type.get(rt, 0) + 1
        if rt == "post_query":
            escrowed += r.get("reward", 0)
        elif rt == "upgrade_reward":
            escrowed += r.get("value", 0)
        elif rt in ("report_inclusion", "report_result"):
            released += r.get("reward", 0)

    summary = {
        "receipt_count": len(receipts),
        "by_type": by_type,
        "queries_posted": by_type.get("post_query", 0),
        "queries_resolved": by_type.get("report_result", 0),
        "queries_deleted": by_type.get("delete_query", 0),
        "rejections": by_type.get("anomaly", 0),
        "total_escrowed": escrowed,
        "total_released": released,
        "outstanding": escrowed - released
    }

    emit_receipt("bridge_activity", {
        "tenant_id": TENANT_ID,
        **summary
    })

    return summary
