"""
Bridge Board Module

Purpose: Externally callable surface of the oracle bridge

Every state-changing operation follows the same order:
    1. guards (status, caller role, proofs, integrity), no mutation yet
    2. query store writes
    3. success receipt, appended to the ledger when one is attached
    4. escrow release, the value transfer being the very last effect
If anything after the guards raises, the escrow, the store and the ledger
are put back and the error propagates. A rejected operation leaves only
its anomaly receipt.

Receipt: post_query, upgrade_reward, claim_query, report_inclusion,
         report_result, batch_report_error, delete_query
SLO: one receipt per state change
Gate: t24h
"""

import threading
from contextlib import contextmanager, nullcontext

from oraclebridge.core import (
    BridgeError,
    emit_receipt,
    stoprule_insufficient_value,
    stoprule_invalid_input,
    stoprule_invalid_proof,
    stoprule_reentrant_call,
    stoprule_wrong_status,
)
from oraclebridge.constants import (
    CLAIM_EXPIRATION_EPOCHS,
    ESTIMATED_REPORT_RESULT_GAS,
    MAX_MERKLE_DEPTH,
    TENANT_ID,
)
from oraclebridge.anchor.hash import hash_payload, request_leaf, tally_leaf
from oraclebridge.anchor.verify import verify_inclusion, verify_integrity
from oraclebridge.bridge.collaborators import AcceptAllEligibility, LocalChain
from oraclebridge.escrow.ledger import EscrowLedger, Tranche
from oraclebridge.escrow.pricing import estimate_reward, revised_gas_price
from oraclebridge.query.lifecycle import (
    Operation,
    QueryStatus,
    Variant,
    require_claim_window,
    require_eligible,
    require_payload,
    require_reporter,
    require_requester,
    require_result,
    transition,
)
from oraclebridge.query.models import Claim, Inclusion, Request, Response
from oraclebridge.query.store import QueryStore


class Bridge:
    """
    Oracle request board for one host chain.

    Args:
        wallet: Value transfer collaborator
        header_store: Merkle roots of external blocks (claim-based variant)
        acl: Authorized reporters (direct-report variant)
        payload_store: Resolves payload references
        eligibility: Claim eligibility check (claim-based variant)
        chain: Host chain clock
        variant: Lifecycle shape
        ledger: Optional LedgerStore that success receipts and rejections
            are appended to
    """

    def __init__(
        self,
        wallet,
        header_store=None,
        acl=None,
        payload_store=None,
        eligibility=None,
        chain=None,
        variant: Variant = Variant.DIRECT_REPORT,
        ledger=None,
        report_result_gas: int = ESTIMATED_REPORT_RESULT_GAS,
        claim_expiration_epochs: int = CLAIM_EXPIRATION_EPOCHS,
        max_merkle_depth: int = MAX_MERKLE_DEPTH,
    ):
        self.variant = variant
        self.header_store = header_store
        self.acl = acl
        self.payload_store = payload_store
        self.eligibility = eligibility or AcceptAllEligibility()
        self.chain = chain or LocalChain()
        self.ledger = ledger
        self.report_result_gas = report_result_gas
        self.claim_expiration_epochs = claim_expiration_epochs
        self.max_merkle_depth = max_merkle_depth

        self.store = QueryStore()
        self.escrow = EscrowLedger(wallet)

        self._lock = threading.RLock()
        self._in_flight: set = set()

        if variant is Variant.DIRECT_REPORT and acl is None:
            raise ValueError("direct_report bridge needs a reporter ACL")
        if variant is Variant.CLAIM_BASED and header_store is None:
            raise ValueError("claim_based bridge needs a header store")

    # ═══════════════════════════════════════════════════════════════
    # PLUMBING
    # ═══════════════════════════════════════════════════════════════

    def _emit(self, receipt_type: str, data: dict) -> dict:
        receipt = emit_receipt(receipt_type, {"tenant_id": TENANT_ID, "variant": self.variant.value, **data})
        if self.ledger is not None:
            self.ledger.append(receipt)
        return receipt

    @contextmanager
    def _exclusive(self, *query_ids):
        """
        Serialize against other threads, refuse re-entry on the same ids,
        and record the anomaly receipt of a rejection in the ledger.
        """
        with self._lock:
            try:
                with self._in_flight_ids(*query_ids):
                    yield
            except BridgeError as error:
                if self.ledger is not None and error.receipt is not None and not error.ledgered:
                    error.ledgered = True
                    self.ledger.append(error.receipt)
                raise

    @contextmanager
    def _in_flight_ids(self, *query_ids):
        for query_id in query_ids:
            if query_id in self._in_flight:
                stoprule_reentrant_call(query_id)
        self._in_flight.update(query_ids)
        try:
            yield
        finally:
            self._in_flight.difference_update(query_ids)

    @contextmanager
    def _atomic(self, *query_ids):
        """Restore the given query records and ledger if anything below raises."""
        snapshots = {query_id: self.store.snapshot(query_id) for query_id in query_ids}
        ledger = self.ledger.transaction() if self.ledger is not None else nullcontext()
        try:
            with ledger:
                yield
        except Exception:
            for query_id, snapshot in snapshots.items():
                self.store.restore(query_id, snapshot)
            raise

    def _status(self, query_id) -> QueryStatus:
        return self.store.status(query_id)

    def _resolve_payload(self, payload) -> tuple:
        """Inline bytes or a payload-store reference -> (bytecode, reference)."""
        if isinstance(payload, (bytes, bytearray)):
            return bytes(payload), None
        if isinstance(payload, str) and payload:
            if self.payload_store is None:
                stoprule_invalid_input(None, "payload references need a payload store")
            return self.payload_store.fetch_bytecode(payload), payload
        stoprule_invalid_input(None, "request payload must be bytes or a payload reference")

    def _checked_bytecode(self, query) -> bytes:
        """Request bytecode, re-hashed against the post-time hash when held by reference."""
        request = query.request
        if request.payload_ref is None:
            return request.bytecode
        bytecode = self.payload_store.fetch_bytecode(request.payload_ref)
        verify_integrity(bytecode, request.payload_hash, query.query_id)
        return bytecode

    # ═══════════════════════════════════════════════════════════════
    # PRICING / IDENTIFIERS
    # ═══════════════════════════════════════════════════════════════

    def estimate_reward(self, gas_price: int) -> int:
        """Price floor at gas_price."""
        return estimate_reward(gas_price, self.report_result_gas)

    def next_query_id(self) -> int:
        """Identifier the next post will receive (direct-report variant)."""
        return self.store.next_sequence_id()

    @staticmethod
    def payload_query_id(bytecode: bytes) -> str:
        """Identifier a payload is posted under (claim-based variant)."""
        return hash_payload(bytecode)

    # ═══════════════════════════════════════════════════════════════
    # STATE-CHANGING OPERATIONS
    # ═══════════════════════════════════════════════════════════════

    def post(self, requester: str, payload, gas_price: int, value: int,
             result_reward: int | None = None):
        """
        Post a request and escrow its reward.

        Args:
            requester: Posting identity
            payload: Request bytecode, or a reference into the payload store
            gas_price: Price per unit of work the requester offers
            value: Reward attached to the request
            result_reward: Claim-based variant only; part of value reserved
                for the result reporter, the rest goes to the claimant on
                inclusion. Defaults to all of value.

        Returns:
            New query identifier
        """
        with self._exclusive():
            bytecode, payload_ref = self._resolve_payload(payload)
            require_payload(bytecode)
            if gas_price < 0:
                stoprule_invalid_input(None, f"negative gas price {gas_price}")

            floor = self.estimate_reward(gas_price)
            if value < floor:
                stoprule_insufficient_value(None, value, floor)

            payload_hash = hash_payload(bytecode)
            if self.variant is Variant.CLAIM_BASED:
                query_id = payload_hash
                if result_reward is None:
                    result_reward = value
                if result_reward < 0 or result_reward > value:
                    stoprule_invalid_input(
                        query_id, f"result reward {result_reward} outside 0..{value}"
                    )
                tranches = {Tranche.INCLUSION: value - result_reward, Tranche.RESULT: result_reward}
            else:
                if result_reward is not None:
                    stoprule_invalid_input(None, "result_reward is only available in claim_based mode")
                query_id = self.store.next_sequence_id()
                tranches = {Tranche.RESULT: value}

            transition(self.variant, Operation.POST, query_id, self._status(query_id))

            with self._atomic(query_id):
                self.store.create(query_id, Request(
                    requester=requester,
                    payload_hash=payload_hash,
                    gas_price=gas_price,
                    bytecode=bytecode if payload_ref is None else None,
                    payload_ref=payload_ref,
                ))
                self._emit("post_query", {
                    "requester": requester,
                    "query_id": query_id,
                    "gas_price": gas_price,
                    "reward": value,
                    "payload_hash": payload_hash,
                    "payload_ref": payload_ref
                })
                self.escrow.deposit(query_id, tranches, floor)

            if self.variant is Variant.DIRECT_REPORT:
                self.store.allocate_sequence_id()
            return query_id

    def upgrade_reward(self, caller: str, query_id, value: int, gas_price: int | None = None) -> int:
        """
        Top up an unresolved query's reward.

        A higher gas_price than the recorded one raises the price floor,
        and the new total must cover it.

        Returns:
            New reward balance
        """
        with self._exclusive(query_id):
            transition(self.variant, Operation.UPGRADE_REWARD, query_id, self._status(query_id))
            query = self.store.get(query_id)

            new_gas_price = query.request.gas_price
            if gas_price is not None:
                new_gas_price = revised_gas_price(new_gas_price, gas_price)
            floor = self.estimate_reward(new_gas_price)

            if value < 0:
                stoprule_invalid_input(query_id, f"negative top-up {value}")
            balance = self.escrow.balance(query_id) + value
            if balance < floor:
                stoprule_insufficient_value(query_id, balance, floor)

            with self._atomic(query_id):
                if new_gas_price != query.request.gas_price:
                    self.store.revise_gas_price(query_id, new_gas_price)
                self._emit("upgrade_reward", {
                    "requester": query.request.requester,
                    "caller": caller,
                    "query_id": query_id,
                    "value": value,
                    "gas_price": new_gas_price,
                    "reward": balance
                })
                return self.escrow.escrow(query_id, value, floor, Tranche.RESULT)

    def claim(self, claimant: str, query_ids: list, eligibility_proof=None) -> list:
        """
        Reserve the right to relay a batch of queries (claim-based variant).

        All or nothing: if any query cannot be claimed, none is.

        Returns:
            Claimed identifiers, deduplicated, in order
        """
        ids = list(dict.fromkeys(query_ids))

        with self._exclusive(*ids):
            if not ids:
                stoprule_invalid_input(None, "empty claim batch")
            require_eligible(self.eligibility, claimant, eligibility_proof, ids)
            epoch = self.chain.block_number()

            for query_id in ids:
                transition(self.variant, Operation.CLAIM, query_id, self._status(query_id))
                require_claim_window(self.store.get(query_id), epoch, self.claim_expiration_epochs)

            claim = Claim(claimant=claimant, epoch=epoch)
            with self._atomic(*ids):
                for query_id in ids:
                    query = self.store.update(query_id, claim=claim)
                    self._emit("claim_query", {
                        "requester": query.request.requester,
                        "query_id": query_id,
                        "claimant": claimant,
                        "epoch": epoch
                    })
            return ids

    def report_inclusion(self, caller: str, query_id, proof, block_ref: str) -> int:
        """
        Prove the request reached an external block (claim-based variant).

        Pays the inclusion tranche to the claimant.

        Args:
            caller: Submitting identity
            query_id: Claimed query
            proof: MerkleProof of the request leaf
            block_ref: External block whose requests root the proof targets

        Returns:
            Amount paid to the claimant
        """
        with self._exclusive(query_id):
            transition(self.variant, Operation.REPORT_INCLUSION, query_id, self._status(query_id))
            query = self.store.get(query_id)
            self._checked_bytecode(query)

            leaf = request_leaf(query_id)
            root = self.header_store.get_requests_root(block_ref)
            verify_inclusion(proof, root, leaf, query_id, self.max_merkle_depth)

            claimant = query.claim.claimant
            with self._atomic(query_id):
                self.store.update(query_id, inclusion=Inclusion(inclusion_hash=leaf, block_ref=block_ref))
                self._emit("report_inclusion", {
                    "requester": query.request.requester,
                    "query_id": query_id,
                    "caller": caller,
                    "claimant": claimant,
                    "block_ref": block_ref,
                    "inclusion_hash": leaf,
                    "reward": self.escrow.balance(query_id, Tranche.INCLUSION)
                })
                return self.escrow.release(query_id, claimant, Tranche.INCLUSION)

    def _require_result_proof(self, query, proof_ref: str, result: bytes, proof, block_ref) -> None:
        """Claim-based variant: proof_ref must be the tally leaf, proven in block_ref."""
        if proof is None or block_ref is None:
            stoprule_invalid_proof(query.query_id, "tally proof and block reference required")
        expected_leaf = tally_leaf(query.inclusion.inclusion_hash, result)
        if proof_ref != expected_leaf:
            stoprule_invalid_proof(query.query_id, "proof reference is not the tally leaf")
        root = self.header_store.get_tallies_root(block_ref)
        verify_inclusion(proof, root, expected_leaf, query.query_id, self.max_merkle_depth)

    def report_result(self, reporter: str, query_id, proof_ref: str, result: bytes,
                      epoch: int | None = None, proof=None, block_ref: str | None = None) -> int:
        """
        Record a query's result and pay its remaining reward to the reporter.

        Direct-report variant: reporter must be authorized.
        Claim-based variant: proof_ref is the tally leaf, proven by proof
        against the tallies root of block_ref.

        Args:
            reporter: Reporting identity, paid the reward
            query_id: Query being resolved
            proof_ref: External transaction hash / tally leaf
            result: Opaque result bytes
            epoch: When the result was solved; defaults to the host chain time
            proof: MerkleProof (claim-based variant)
            block_ref: External block reference (claim-based variant)

        Returns:
            Amount paid
        """
        with self._exclusive(query_id):
            if self.variant is Variant.DIRECT_REPORT:
                require_reporter(self.acl, reporter, query_id)
            transition(self.variant, Operation.REPORT_RESULT, query_id, self._status(query_id))
            require_result(proof_ref, result, query_id)

            query = self.store.get(query_id)
            self._checked_bytecode(query)
            if self.variant is Variant.CLAIM_BASED:
                self._require_result_proof(query, proof_ref, bytes(result), proof, block_ref)

            response = Response(
                reporter=reporter,
                result=bytes(result),
                proof_ref=proof_ref,
                timestamp=epoch if epoch is not None else self.chain.timestamp(),
            )
            with self._atomic(query_id):
                self.store.update(query_id, response=response)
                self._emit("report_result", {
                    "requester": query.request.requester,
                    "query_id": query_id,
                    "reporter": reporter,
                    "proof_ref": proof_ref,
                    "timestamp": response.timestamp,
                    "reward": self.escrow.balance(query_id, Tranche.RESULT)
                })
                return self.escrow.release(query_id, reporter, Tranche.RESULT)

    def report_result_batch(self, reporter: str, entries: list, verbose: bool = False) -> int:
        """
        Resolve several queries, paying all their rewards in one transfer
        (direct-report variant).

        Entries that fail their guards are skipped; with verbose, each skip
        emits a batch_report_error receipt.

        Args:
            reporter: Authorized reporter, paid the total reward
            entries: (query_id, epoch, proof_ref, result) tuples
            verbose: Emit a receipt for every skipped entry

        Returns:
            Total amount paid
        """
        with self._exclusive():
            if self.variant is not Variant.DIRECT_REPORT:
                stoprule_invalid_input(None, "batch reporting is only available in direct_report mode")
            require_reporter(self.acl, reporter)

            accepted = []
            accepted_ids = set()
            for query_id, epoch, proof_ref, result in entries:
                try:
                    if query_id in self._in_flight:
                        stoprule_reentrant_call(query_id)
                    transition(self.variant, Operation.REPORT_RESULT, query_id, self._status(query_id))
                    if query_id in accepted_ids:
                        stoprule_wrong_status(query_id, (QueryStatus.POSTED,), QueryStatus.REPORTED)
                    require_result(proof_ref, result, query_id)
                    self._checked_bytecode(self.store.get(query_id))
                except BridgeError as error:
                    if verbose:
                        self._emit("batch_report_error", {
                            "query_id": query_id,
                            "reporter": reporter,
                            "code": error.code,
                            "reason": str(error)
                        })
                    continue
                accepted_ids.add(query_id)
                accepted.append((query_id, Response(
                    reporter=reporter,
                    result=bytes(result),
                    proof_ref=proof_ref,
                    timestamp=epoch if epoch is not None else self.chain.timestamp(),
                )))

            if not accepted:
                return 0

            ids = [query_id for query_id, _ in accepted]
            with self._in_flight_ids(*ids), self._atomic(*ids):
                for query_id, response in accepted:
                    query = self.store.update(query_id, response=response)
                    self._emit("report_result", {
                        "requester": query.request.requester,
                        "query_id": query_id,
                        "reporter": reporter,
                        "proof_ref": response.proof_ref,
                        "timestamp": response.timestamp,
                        "reward": self.escrow.balance(query_id, Tranche.RESULT)
                    })
                return self.escrow.release_many(ids, reporter, Tranche.RESULT)

    def delete_query(self, caller: str, query_id) -> Response:
        """
        Erase a reported query on behalf of its requester.

        Returns:
            Copy of the final response
        """
        with self._exclusive(query_id):
            transition(self.variant, Operation.DELETE, query_id, self._status(query_id))
            query = self.store.get(query_id)
            require_requester(query, caller)

            response = query.snapshot().response
            with self._atomic(query_id):
                self.store.remove(query_id)
                self._emit("delete_query", {
                    "requester": caller,
                    "query_id": query_id,
                    "proof_ref": response.proof_ref
                })
            self.escrow.forget(query_id)
            return response

    # ═══════════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════════

    def get_query_status(self, query_id) -> QueryStatus:
        with self._lock:
            return self._status(query_id)

    def get_query(self, query_id):
        """Independent copy of the full query record."""
        with self._lock:
            return self.store.get(query_id).snapshot()

    def read_request(self, query_id) -> dict:
        with self._lock:
            query = self.store.get(query_id)
            self._checked_bytecode(query)
            return {
                **query.request.to_dict(),
                "reward": self.escrow.balance(query_id)
            }

    def read_request_bytecode(self, query_id) -> bytes:
        with self._lock:
            return self._checked_bytecode(self.store.get(query_id))

    def read_request_gas_price(self, query_id) -> int:
        with self._lock:
            return self.store.get(query_id).request.gas_price

    def read_request_reward(self, query_id) -> int:
        with self._lock:
            self.store.get(query_id)
            return self.escrow.balance(query_id)

    def read_claim(self, query_id) -> Claim | None:
        with self._lock:
            return self.store.get(query_id).claim

    def read_inclusion_hash(self, query_id) -> str | None:
        with self._lock:
            inclusion = self.store.get(query_id).inclusion
            return inclusion.inclusion_hash if inclusion else None

    def read_response(self, query_id) -> Response:
        with self._lock:
            query = self.store.get(query_id)
            if query.response is None:
                stoprule_wrong_status(query_id, (QueryStatus.REPORTED,), self._status(query_id))
            return query.response

    def read_response_reporter(self, query_id) -> str:
        return self.read_response(query_id).reporter

    def read_response_result(self, query_id) -> bytes:
        return self.read_response(query_id).result

    def read_response_proof_ref(self, query_id) -> str:
        return self.read_response(query_id).proof_ref

    def read_response_timestamp(self, query_id) -> int:
        return self.read_response(query_id).timestamp
