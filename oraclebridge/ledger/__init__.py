"""
OracleBridge Ledger Modules - Append-only receipt log.

Purpose:
    - store: LedgerStore (append-only JSONL, rolled back with its operation)
    - query: receipt queries and activity summary

Receipt: ledger_receipt
Gate: t24h
"""

from oraclebridge.ledger.store import LedgerStore
from oraclebridge.ledger.query import (
    query_by_type,
    query_by_query_id,
    query_by_requester,
    summarize_bridge_activity
)

__all__ = [
    # store
    "LedgerStore",
    # query
    "query_by_type", "query_by_query_id", "query_by_requester",
    "summarize_bridge_activity",
]
