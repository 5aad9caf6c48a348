"""
Escrow Ledger Module

Purpose: Reward balances attached to queries, released exactly once

A query's escrow is split into tranches. The direct-report variant only
uses the RESULT tranche; the claim-based variant also holds an INCLUSION
tranche paid to the claimant once the request is proven included.
A released tranche is removed from the account, so a second release
finds nothing to pay and is rejected.

Receipt: escrow_deposit_receipt, escrow_release_receipt
Gate: t24h
"""

from enum import Enum

from oraclebridge.core import (
    emit_receipt,
    stoprule_already_released,
    stoprule_insufficient_value,
    stoprule_invalid_input,
)
from oraclebridge.constants import TENANT_ID


class Tranche(Enum):
    """Portion of a query's reward, unlocked by a different transition."""
    INCLUSION = "inclusion"
    RESULT = "result"


class EscrowLedger:
    """
    Per-query reward balances.

    The value transfer happens last in every release; if it raises, the
    consumed balance is put back before the error propagates.
    """

    def __init__(self, wallet):
        """
        Initialize escrow ledger.

        Args:
            wallet: Value transfer collaborator exposing transfer(recipient, amount)
        """
        self.wallet = wallet
        self._accounts: dict = {}

    def balance(self, query_id, tranche: Tranche | None = None) -> int:
        """Current unreleased reward of a query (one tranche or all)."""
        account = self._accounts.get(query_id, {})
        if tranche is not None:
            return account.get(tranche, 0)
        return sum(account.values())

    def is_released(self, query_id, tranche: Tranche = Tranche.RESULT) -> bool:
        return tranche not in self._accounts.get(query_id, {})

    def deposit(self, query_id, amounts: dict, floor: int = 0) -> int:
        """
        Add value to one or more tranches of a query's escrow.

        All amounts are validated before any balance changes.

        Args:
            query_id: Query the value is attached to
            amounts: Tranche -> amount
            floor: Minimum total balance required after the deposit

        Returns:
            New total balance
        """
        for tranche, amount in amounts.items():
            if amount < 0:
                stoprule_invalid_input(query_id, f"negative {tranche.value} amount {amount}")

        new_total = self.balance(query_id) + sum(amounts.values())
        if new_total < floor:
            stoprule_insufficient_value(query_id, new_total, floor)

        account = self._accounts.setdefault(query_id, {})
        for tranche, amount in amounts.items():
            account[tranche] = account.get(tranche, 0) + amount

        emit_receipt("escrow_deposit", {
            "tenant_id": TENANT_ID,
            "query_id": query_id,
            "amounts": {t.value: a for t, a in amounts.items()},
            "balance": new_total,
            "floor": floor
        })

        return new_total

    def escrow(self, query_id, amount: int, floor: int = 0,
               tranche: Tranche = Tranche.RESULT) -> int:
        """Add amount to a single tranche. See deposit."""
        return self.deposit(query_id, {tranche: amount}, floor)

    def _consume(self, query_id, tranche: Tranche) -> int:
        account = self._accounts.get(query_id)
        if account is None or tranche not in account:
            stoprule_already_released(query_id)
        amount = account.pop(tranche)
        if not account:
            del self._accounts[query_id]
        return amount

    def _restore(self, query_id, tranche: Tranche, amount: int) -> None:
        self._accounts.setdefault(query_id, {})[tranche] = amount

    def release(self, query_id, recipient: str,
                tranche: Tranche = Tranche.RESULT) -> int:
        """
        Pay a tranche's full balance to recipient.

        Must be the last effect of the calling operation.

        Args:
            query_id: Query whose reward is paid
            recipient: Identity receiving the value
            tranche: Which portion of the reward to pay

        Returns:
            Amount paid
        """
        amount = self._consume(query_id, tranche)
        try:
            self.wallet.transfer(recipient, amount)
        except Exception:
            self._restore(query_id, tranche, amount)
            raise

        emit_receipt("escrow_release", {
            "tenant_id": TENANT_ID,
            "query_id": query_id,
            "tranche": tranche.value,
            "recipient": recipient,
            "amount": amount
        })

        return amount

    def release_many(self, query_ids: list, recipient: str,
                     tranche: Tranche = Tranche.RESULT) -> int:
        """
        Pay the same tranche of several queries in one transfer.

        Every query must still hold the tranche; otherwise nothing is paid.

        Returns:
            Total amount paid
        """
        for query_id in query_ids:
            if self.is_released(query_id, tranche):
                stoprule_already_released(query_id)

        consumed = [(query_id, self._consume(query_id, tranche)) for query_id in query_ids]
        total = sum(amount for _, amount in consumed)
        try:
            self.wallet.transfer(recipient, total)
        except Exception:
            for query_id, amount in consumed:
                self._restore(query_id, tranche, amount)
            raise

        emit_receipt("escrow_release", {
            "tenant_id": TENANT_ID,
            "query_ids": list(query_ids),
            "tranche": tranche.value,
            "recipient": recipient,
            "amount": total
        })

        return total

    def forget(self, query_id) -> int:
        """Drop whatever is left of a query's account. Returns the dropped amount."""
        return sum(self._accounts.pop(query_id, {}).values())
