"""
Tests for the query store and data model.

Receipt: test_query_store_receipt
Gate: t24h
"""

import pytest

from oraclebridge.core import NotFound, WrongStatus
from oraclebridge.query.lifecycle import QueryStatus
from oraclebridge.query.models import Claim, Inclusion, Query, Request, Response
from oraclebridge.query.store import QueryStore


def make_request(requester="requester", gas_price=10):
    return Request(requester=requester, payload_hash="h", gas_price=gas_price, bytecode=b"\x01")


def make_response(reporter="reporter"):
    return Response(reporter=reporter, result=b"\x2a", proof_ref="tx-1", timestamp=1_600_000_000)


class TestSequenceIds:
    """Tests for sequence identifier allocation."""

    def test_ids_start_at_one(self):
        store = QueryStore()
        assert store.next_sequence_id() == 1
        assert store.allocate_sequence_id() == 1
        assert store.allocate_sequence_id() == 2
        assert store.next_sequence_id() == 3

    def test_never_issued_is_unknown(self):
        store = QueryStore()
        store.allocate_sequence_id()
        assert store.status(2) == QueryStatus.UNKNOWN
        assert store.status(0) == QueryStatus.UNKNOWN

    def test_issued_but_absent_is_removed(self):
        store = QueryStore()
        query_id = store.allocate_sequence_id()
        store.create(query_id, make_request())
        store.remove(query_id)
        assert store.status(query_id) == QueryStatus.REMOVED

    def test_content_ids_are_never_removed(self):
        store = QueryStore()
        store.create("sha:blake", make_request())
        store.remove("sha:blake")
        assert store.status("sha:blake") == QueryStatus.UNKNOWN


class TestRecords:
    """Tests for create / get / update / remove."""

    def test_create_and_get(self):
        store = QueryStore()
        store.create(1, make_request())
        assert store.get(1).request.requester == "requester"
        assert store.status(1) == QueryStatus.POSTED

    def test_create_twice_rejected(self):
        store = QueryStore()
        store.create(1, make_request())
        with pytest.raises(WrongStatus):
            store.create(1, make_request("other"))
        assert store.get(1).request.requester == "requester"

    def test_get_missing_raises_not_found(self):
        with pytest.raises(NotFound):
            QueryStore().get(7)

    def test_status_follows_parts(self):
        store = QueryStore()
        store.create("q", make_request())
        store.update("q", claim=Claim("relayer", 100))
        assert store.status("q") == QueryStatus.CLAIMED
        store.update("q", inclusion=Inclusion("q", "block-1"))
        assert store.status("q") == QueryStatus.INCLUDED
        store.update("q", response=make_response())
        assert store.status("q") == QueryStatus.REPORTED

    def test_response_written_once(self):
        store = QueryStore()
        store.create(1, make_request())
        store.update(1, response=make_response())
        with pytest.raises(WrongStatus):
            store.update(1, response=make_response("someone-else"))
        assert store.get(1).response.reporter == "reporter"

    def test_unknown_field_rejected_before_writing(self):
        store = QueryStore()
        store.create(1, make_request())
        with pytest.raises(TypeError):
            store.update(1, response=make_response(), history=[])
        assert store.get(1).response is None

    def test_revise_gas_price(self):
        store = QueryStore()
        store.create(1, make_request(gas_price=10))
        store.revise_gas_price(1, 20)
        assert store.get(1).request.gas_price == 20
        assert store.get(1).request.requester == "requester"

    def test_remove_clears_all_parts(self):
        store = QueryStore()
        store.create(1, make_request())
        store.update(1, response=make_response())
        removed = store.remove(1)
        assert removed.response.reporter == "reporter"
        assert store.status(1) == QueryStatus.UNKNOWN
        with pytest.raises(NotFound):
            store.get(1)


class TestSnapshots:
    """Tests for rollback snapshots."""

    def test_snapshot_is_independent(self):
        store = QueryStore()
        store.create(1, make_request())
        snapshot = store.snapshot(1)
        store.update(1, response=make_response())
        assert snapshot.response is None

    def test_restore_puts_record_back(self):
        store = QueryStore()
        store.create(1, make_request())
        snapshot = store.snapshot(1)
        store.update(1, response=make_response())
        store.restore(1, snapshot)
        assert store.status(1) == QueryStatus.POSTED

    def test_restore_none_removes(self):
        store = QueryStore()
        snapshot = store.snapshot("q")
        store.create("q", make_request())
        store.restore("q", snapshot)
        assert store.status("q") == QueryStatus.UNKNOWN


class TestModels:
    """Tests for the frozen record types."""

    def test_claim_expiry_is_strict(self):
        claim = Claim("relayer", 100)
        assert not claim.expired(113, 13)
        assert claim.expired(114, 13)

    def test_response_dict_round_trip(self):
        response = make_response()
        assert Response.from_dict(response.to_dict()) == response

    def test_query_to_dict(self):
        query = Query(query_id=1, request=make_request())
        data = query.to_dict()
        assert data["request"]["bytecode"] == "01"
        assert data["claim"] is None
        assert data["response"] is None
