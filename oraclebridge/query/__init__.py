"""
OracleBridge Query Modules - Query records and their lifecycle.

Purpose:
    - models: Request, Response, Claim, Inclusion, Query
    - store: QueryStore (id -> Query arena)
    - lifecycle: statuses, variants, transition table, guards

Receipt: query_receipt
Gate: t24h
"""

from oraclebridge.query.models import Request, Response, Claim, Inclusion, Query
from oraclebridge.query.store import QueryStore
from oraclebridge.query.lifecycle import (
    QueryStatus,
    Variant,
    Operation,
    TRANSITIONS,
    derive_status,
    transition
)

__all__ = [
    # models
    "Request", "Response", "Claim", "Inclusion", "Query",
    # store
    "QueryStore",
    # lifecycle
    "QueryStatus", "Variant", "Operation", "TRANSITIONS",
    "derive_status", "transition",
]
