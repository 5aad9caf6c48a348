"""
Query Lifecycle Module

Purpose: Which operation is legal in which status, and where it leads

Two lifecycle shapes share one table:
    DIRECT_REPORT:  unknown -> posted -> reported -> removed
    CLAIM_BASED:    unknown -> posted -> claimed -> included -> reported -> removed

Guards are plain precondition functions. Each one either returns or
rejects through a stoprule before the caller has mutated anything.

Receipt: none (guards reject through core stoprules)
Gate: t24h
"""

from enum import Enum

from oraclebridge.core import (
    stoprule_invalid_input,
    stoprule_unauthorized,
    stoprule_wrong_status,
)


class QueryStatus(Enum):
    UNKNOWN = "unknown"
    POSTED = "posted"
    CLAIMED = "claimed"
    INCLUDED = "included"
    REPORTED = "reported"
    REMOVED = "removed"


class Variant(Enum):
    """Lifecycle shape of a bridge instance."""
    DIRECT_REPORT = "direct_report"
    CLAIM_BASED = "claim_based"


class Operation(Enum):
    POST = "post"
    UPGRADE_REWARD = "upgrade_reward"
    CLAIM = "claim"
    REPORT_INCLUSION = "report_inclusion"
    REPORT_RESULT = "report_result"
    DELETE = "delete"


# (required statuses, resulting status); None keeps the current status
TRANSITIONS = {
    Variant.DIRECT_REPORT: {
        Operation.POST: ((QueryStatus.UNKNOWN,), QueryStatus.POSTED),
        Operation.UPGRADE_REWARD: ((QueryStatus.POSTED,), None),
        Operation.REPORT_RESULT: ((QueryStatus.POSTED,), QueryStatus.REPORTED),
        Operation.DELETE: ((QueryStatus.REPORTED,), QueryStatus.REMOVED),
    },
    Variant.CLAIM_BASED: {
        Operation.POST: ((QueryStatus.UNKNOWN,), QueryStatus.POSTED),
        Operation.UPGRADE_REWARD: (
            (QueryStatus.POSTED, QueryStatus.CLAIMED, QueryStatus.INCLUDED), None
        ),
        # Re-claiming a claimed query additionally needs the old claim expired
        Operation.CLAIM: ((QueryStatus.POSTED, QueryStatus.CLAIMED), QueryStatus.CLAIMED),
        Operation.REPORT_INCLUSION: ((QueryStatus.CLAIMED,), QueryStatus.INCLUDED),
        Operation.REPORT_RESULT: ((QueryStatus.INCLUDED,), QueryStatus.REPORTED),
        Operation.DELETE: ((QueryStatus.REPORTED,), QueryStatus.REMOVED),
    },
}


def derive_status(query) -> QueryStatus:
    """Status of a stored query, read off its populated parts."""
    if query is None:
        return QueryStatus.UNKNOWN
    if query.response is not None:
        return QueryStatus.REPORTED
    if query.inclusion is not None:
        return QueryStatus.INCLUDED
    if query.claim is not None:
        return QueryStatus.CLAIMED
    return QueryStatus.POSTED


def transition(variant: Variant, operation: Operation, query_id, actual: QueryStatus) -> QueryStatus:
    """
    Check operation is legal from actual and return the status it leads to.

    Args:
        variant: Lifecycle shape of the bridge
        operation: Operation being attempted
        query_id: Target query (for receipts)
        actual: Current status of the query

    Returns:
        Status after the operation
    """
    table = TRANSITIONS[variant]
    if operation not in table:
        stoprule_invalid_input(query_id, f"{operation.value} is not available in {variant.value} mode")

    required, resulting = table[operation]
    if actual not in required:
        stoprule_wrong_status(query_id, required, actual)

    return actual if resulting is None else resulting


# ═══════════════════════════════════════════════════════════════════
# GUARDS
# ═══════════════════════════════════════════════════════════════════

def require_requester(query, caller: str) -> None:
    if query.request.requester != caller:
        stoprule_unauthorized(query.query_id, caller, "requester")


def require_reporter(acl, caller: str, query_id=None) -> None:
    if not acl.is_authorized_reporter(caller):
        stoprule_unauthorized(query_id, caller, "authorized reporter")


def require_eligible(eligibility, claimant: str, proof, query_ids: list) -> None:
    if not eligibility.verify(claimant, proof, query_ids):
        stoprule_unauthorized(None, claimant, "eligible claimant")


def require_claim_window(query, current_epoch: int, expiration_epochs: int) -> None:
    """A query can be claimed if unclaimed or if its claim has expired."""
    if query.claim is not None and not query.claim.expired(current_epoch, expiration_epochs):
        stoprule_wrong_status(query.query_id, (QueryStatus.POSTED,), QueryStatus.CLAIMED)


def require_payload(bytecode, query_id=None) -> None:
    if not bytecode:
        stoprule_invalid_input(query_id, "empty request payload")


def require_result(proof_ref: str, result: bytes, query_id=None) -> None:
    if not proof_ref or not proof_ref.strip("0:"):
        stoprule_invalid_input(query_id, "proof reference cannot be zero")
    if not result:
        stoprule_invalid_input(query_id, "result cannot be empty")
