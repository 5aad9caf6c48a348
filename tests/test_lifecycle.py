"""
Tests for lifecycle transitions and guards.

Receipt: test_lifecycle_receipt
Gate: t24h
"""

import pytest

from oraclebridge.core import InvalidInput, Unauthorized, WrongStatus
from oraclebridge.bridge.collaborators import (
    AcceptAllEligibility,
    AllowlistEligibility,
    StaticReporterACL,
)
from oraclebridge.query.lifecycle import (
    Operation,
    QueryStatus,
    TRANSITIONS,
    Variant,
    derive_status,
    require_claim_window,
    require_eligible,
    require_payload,
    require_reporter,
    require_requester,
    require_result,
    transition,
)
from oraclebridge.query.models import Claim, Query, Request


def make_query(claim=None):
    request = Request(requester="requester", payload_hash="h", gas_price=1, bytecode=b"\x01")
    return Query(query_id="q", request=request, claim=claim)


class TestTransitions:
    """Tests for the transition table."""

    def test_direct_report_happy_path(self):
        status = QueryStatus.UNKNOWN
        for operation in (Operation.POST, Operation.REPORT_RESULT, Operation.DELETE):
            status = transition(Variant.DIRECT_REPORT, operation, 1, status)
        assert status == QueryStatus.REMOVED

    def test_claim_based_happy_path(self):
        status = QueryStatus.UNKNOWN
        for operation in (Operation.POST, Operation.CLAIM, Operation.REPORT_INCLUSION,
                          Operation.REPORT_RESULT, Operation.DELETE):
            status = transition(Variant.CLAIM_BASED, operation, "q", status)
        assert status == QueryStatus.REMOVED

    def test_upgrade_keeps_status(self):
        assert transition(Variant.CLAIM_BASED, Operation.UPGRADE_REWARD, "q",
                          QueryStatus.INCLUDED) == QueryStatus.INCLUDED

    def test_report_before_post_rejected(self):
        with pytest.raises(WrongStatus) as excinfo:
            transition(Variant.DIRECT_REPORT, Operation.REPORT_RESULT, 1, QueryStatus.UNKNOWN)
        assert excinfo.value.expected == (QueryStatus.POSTED,)
        assert excinfo.value.actual == QueryStatus.UNKNOWN

    def test_second_report_rejected(self):
        with pytest.raises(WrongStatus):
            transition(Variant.DIRECT_REPORT, Operation.REPORT_RESULT, 1, QueryStatus.REPORTED)

    def test_claim_based_result_needs_inclusion(self):
        with pytest.raises(WrongStatus):
            transition(Variant.CLAIM_BASED, Operation.REPORT_RESULT, "q", QueryStatus.CLAIMED)

    def test_upgrade_after_report_rejected(self):
        for variant in Variant:
            with pytest.raises(WrongStatus):
                transition(variant, Operation.UPGRADE_REWARD, 1, QueryStatus.REPORTED)

    def test_removed_query_rejects_everything(self):
        for operation in TRANSITIONS[Variant.DIRECT_REPORT]:
            with pytest.raises(WrongStatus):
                transition(Variant.DIRECT_REPORT, operation, 1, QueryStatus.REMOVED)

    def test_claim_unavailable_in_direct_report(self):
        with pytest.raises(InvalidInput):
            transition(Variant.DIRECT_REPORT, Operation.CLAIM, 1, QueryStatus.POSTED)

    def test_derive_status_of_missing_query(self):
        assert derive_status(None) == QueryStatus.UNKNOWN


class TestGuards:
    """Tests for precondition guards."""

    def test_requester_guard(self):
        query = make_query()
        require_requester(query, "requester")
        with pytest.raises(Unauthorized):
            require_requester(query, "stranger")

    def test_reporter_guard(self):
        acl = StaticReporterACL({"reporter"})
        require_reporter(acl, "reporter", 1)
        with pytest.raises(Unauthorized):
            require_reporter(acl, "stranger", 1)

    def test_eligibility_guard(self):
        require_eligible(AcceptAllEligibility(), "anyone", None, ["q"])
        with pytest.raises(Unauthorized):
            require_eligible(AllowlistEligibility({"relayer"}), "anyone", None, ["q"])

    def test_claim_window_open_for_unclaimed(self):
        require_claim_window(make_query(), 100, 13)

    def test_claim_window_closed_while_claim_live(self):
        query = make_query(Claim("relayer", 100))
        with pytest.raises(WrongStatus):
            require_claim_window(query, 113, 13)

    def test_claim_window_reopens_after_expiry(self):
        require_claim_window(make_query(Claim("relayer", 100)), 114, 13)

    def test_payload_guard(self):
        with pytest.raises(InvalidInput):
            require_payload(b"")

    def test_zero_proof_reference_rejected(self):
        with pytest.raises(InvalidInput):
            require_result("", b"\x01")
        with pytest.raises(InvalidInput):
            require_result("0000", b"\x01")
        with pytest.raises(InvalidInput):
            require_result("0000:0000", b"\x01")

    def test_empty_result_rejected(self):
        with pytest.raises(InvalidInput):
            require_result("tx-1", b"")

    def test_valid_result_accepted(self):
        require_result("tx-1", b"\x01")
