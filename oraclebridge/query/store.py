"""
Query Store Module

Purpose: Single source of truth mapping query identifiers to Query records

The store enforces the data invariants (parts fill once, in order; ids are
never handed out twice). Which transition is legal when is decided by
query.lifecycle before the store is touched.

Receipt: none (bridge emits on its behalf)
Gate: t24h
"""

import dataclasses

from oraclebridge.core import stoprule_not_found, stoprule_wrong_status
from oraclebridge.query.lifecycle import QueryStatus, derive_status
from oraclebridge.query.models import Query, Request


class QueryStore:
    """
    In-memory arena of Query records.

    Sequence identifiers start at 1 and only grow, so an identifier at
    or below the last one issued but absent from the arena was removed.
    """

    def __init__(self):
        self._queries: dict = {}
        self._last_sequence_id = 0

    def next_sequence_id(self) -> int:
        """Identifier the next allocate_sequence_id call will return."""
        return self._last_sequence_id + 1

    def allocate_sequence_id(self) -> int:
        self._last_sequence_id += 1
        return self._last_sequence_id

    def was_issued(self, query_id) -> bool:
        return isinstance(query_id, int) and 0 < query_id <= self._last_sequence_id

    def status(self, query_id) -> QueryStatus:
        """Current lifecycle status, including REMOVED for deleted sequence ids."""
        query = self._queries.get(query_id)
        if query is None and self.was_issued(query_id):
            return QueryStatus.REMOVED
        return derive_status(query)

    def create(self, query_id, request: Request) -> Query:
        if query_id in self._queries:
            stoprule_wrong_status(query_id, (QueryStatus.UNKNOWN,), self.status(query_id))
        query = Query(query_id=query_id, request=request)
        self._queries[query_id] = query
        return query

    def get(self, query_id) -> Query:
        query = self._queries.get(query_id)
        if query is None:
            stoprule_not_found(query_id)
        return query

    def update(self, query_id, **fields) -> Query:
        """
        Populate parts of a query.

        claim may be replaced (an expired claim is taken over); inclusion
        and response are written once; request is only ever revised.

        Args:
            query_id: Query to update
            **fields: Any of request, claim, inclusion, response

        Returns:
            Updated query
        """
        query = self.get(query_id)
        for name in fields:
            if name not in ("request", "claim", "inclusion", "response"):
                raise TypeError(f"Unknown query field: {name}")
        for name in ("inclusion", "response"):
            if fields.get(name) is not None and getattr(query, name) is not None:
                stoprule_wrong_status(query_id, (QueryStatus.POSTED,), self.status(query_id))

        for name, value in fields.items():
            setattr(query, name, value)
        return query

    def revise_gas_price(self, query_id, gas_price: int) -> Query:
        query = self.get(query_id)
        return self.update(query_id, request=dataclasses.replace(query.request, gas_price=gas_price))

    def remove(self, query_id) -> Query:
        """Delete a query and all of its parts at once. Returns the removed record."""
        query = self.get(query_id)
        del self._queries[query_id]
        return query

    def snapshot(self, query_id) -> Query | None:
        query = self._queries.get(query_id)
        return query.snapshot() if query is not None else None

    def restore(self, query_id, snapshot: Query | None) -> None:
        """Put a query back exactly as snapshot captured it (None means absent)."""
        if snapshot is None:
            self._queries.pop(query_id, None)
        else:
            self._queries[query_id] = snapshot
