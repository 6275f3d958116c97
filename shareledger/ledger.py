"""
ledger.py - Stateful Share Ledger

ShareLedger is the central state manager. The operation modules are pure:
they read a LedgerView and return a PendingTransaction. ShareLedger is the
only place that applies one, and it does so atomically.

Key responsibilities:
    - Implements LedgerView for the operation modules
    - Exposes the public operations (listing, admission, toggle, acquisition,
      distribution, claim) and the read-only lookups
    - Validates every transaction against wallet balances and record staleness
      before touching anything, then applies moves and record changes
    - Serializes operations so no call observes another's partial effects
    - Always logs - every applied transaction is kept in the audit trail
"""

from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
import threading

from .core import (
    # Types
    Asset, Shareholder, Move, PendingTransaction, Transaction,
    ExecuteResult, ValueTransfer,
    # Constants
    ESCROW_WALLET, FAMILY_ASSET, FAMILY_PENDING, SHARE_SCALE, SYSTEM_WALLET,
    COUNTER_KEY,
    # Exceptions
    LedgerError, InsufficientFunds, StaleRecord,
    # Helpers
    asset_key, index_key, pending_key, shareholder_key, share_holdings,
)
from .store import LedgerStore
from .wallets import WalletBook
from .ownership import compute_admission, compute_listing, compute_toggle
from .acquisition import compute_acquisition
from .distribution import DistributionPlan, compute_income_distribution
from .claims import compute_claim


class ShareLedger:
    """
    Fractional ownership ledger with atomic operations and an audit trail.

    Thread Safety:
        Public operations hold a re-entrant lock for their whole read-compute-
        apply cycle, so concurrent callers are serialized.

    Example:
        ledger = ShareLedger("main")
        ledger.fund("alice", 2_000_000)
        asset_id = ledger.create_listing("alice", "12 Harbour Row", 1_000_000, 100)
        ledger.admit_coinvestor("alice", asset_id, "bob", 300, "co-investor")
        ledger.acquire("alice", asset_id)
        ledger.fund("tenant_agent", 50_000)
        ledger.distribute_income("tenant_agent", asset_id, "tenant", 50_000)
        ledger.claim("bob", asset_id)   # 13500
    """

    def __init__(
        self,
        name: str,
        initial_time: Optional[datetime] = None,
        verbose: bool = True,
        test_mode: bool = False,
        store: Optional[LedgerStore] = None,
        transfers: Optional[ValueTransfer] = None,
    ):
        """
        Create a ledger.

        Args:
            name: Ledger identifier
            initial_time: Starting logical time (default: 1970-01-01)
            verbose: Print applied and rejected transactions (default: True)
            test_mode: Allow set_balance() shortcuts on the default wallet book
            store: Record store (default: a fresh in-memory LedgerStore)
            transfers: Value transfer capability (default: a fresh WalletBook)
        """
        self.name = name
        self.verbose = verbose
        self._test_mode = test_mode
        self._current_time: datetime = initial_time or datetime(1970, 1, 1)
        self.store = store if store is not None else LedgerStore()
        self.transfers = transfers if transfers is not None else WalletBook(
            verbose=verbose, test_mode=test_mode
        )
        self.transaction_log: List[Transaction] = []
        self._next_sequence: int = 0
        self._lock = threading.RLock()

    # ========================================================================
    # LedgerView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    @property
    def current_time(self) -> datetime:
        """Current logical time of the ledger."""
        return self._current_time

    def get_asset(self, asset_id: int) -> Optional[Asset]:
        return self.store.get(asset_key(asset_id))

    def get_shareholder(self, asset_id: int, actor: str) -> Optional[Shareholder]:
        return self.store.get(shareholder_key(asset_id, actor))

    def get_pending(self, asset_id: int, actor: str) -> Optional[int]:
        return self.store.get(pending_key(asset_id, actor))

    def get_shareholder_index(self, asset_id: int) -> Tuple[str, ...]:
        return self.store.get(index_key(asset_id), ())

    def get_next_id(self) -> int:
        return self.store.get(COUNTER_KEY)

    def get_balance(self, actor: str) -> int:
        return self.transfers.balance_of(actor)

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    def asset_exists(self, asset_id: int) -> bool:
        return asset_key(asset_id) in self.store

    def get_total_assets(self) -> int:
        """Number of successful listings."""
        return self.get_next_id() - 1

    def list_assets(self) -> List[int]:
        return sorted(k.asset_id for k in self.store.keys(FAMILY_ASSET))

    def get_holdings(self, asset_id: int) -> Dict[str, int]:
        """Share per actor in shareholder index order."""
        return share_holdings(self, asset_id)

    def total_shares(self, asset_id: int) -> int:
        return sum(self.get_holdings(asset_id).values())

    # ========================================================================
    # TIME AND FUNDING
    # ========================================================================

    def advance_time(self, new_time: datetime) -> None:
        """
        Advance the ledger's logical clock. Time can only move forward.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    def fund(self, actor: str, amount: int) -> None:
        """
        Issue value to an actor on the default wallet book.

        Raises:
            LedgerError: If the ledger was given an external transfer capability
        """
        if not isinstance(self.transfers, WalletBook):
            raise LedgerError("fund() needs the built-in WalletBook; fund the external wallet directly")
        self.transfers.fund(actor, amount)

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    def create_listing(self, caller: str, address: str, purchase_cost: int, fee_rate_bp: int) -> int:
        """List a new asset with the caller as primary holder. Returns the new asset id."""
        with self._lock:
            return self._submit(compute_listing(self, caller, address, purchase_cost, fee_rate_bp))

    def admit_coinvestor(
        self, caller: str, asset_id: int, coinvestor: str, requested_share: int, label: str
    ) -> None:
        """Move requested_share from the primary holder to a new co-investor."""
        with self._lock:
            self._submit(compute_admission(self, caller, asset_id, coinvestor, requested_share, label))

    def toggle_listing(self, caller: str, asset_id: int) -> bool:
        """Flip the asset's listed flag. Returns the new value."""
        with self._lock:
            return self._submit(compute_toggle(self, caller, asset_id))

    def acquire(self, caller: str, asset_id: int) -> None:
        """Pay the purchase cost to the primary holder and mark the asset acquired."""
        with self._lock:
            self._submit(compute_acquisition(self, caller, asset_id))

    def distribute_income(self, caller: str, asset_id: int, payer: str, amount: int) -> DistributionPlan:
        """Split an income payment into the primary-holder fee and pending credits."""
        with self._lock:
            return self._submit(compute_income_distribution(self, caller, asset_id, payer, amount))

    def claim(self, caller: str, asset_id: int) -> int:
        """Withdraw the caller's pending balance. Returns the amount paid."""
        with self._lock:
            return self._submit(compute_claim(self, caller, asset_id))

    # ========================================================================
    # TRANSACTION EXECUTION (Mutating)
    # ========================================================================

    def execute(self, pending: PendingTransaction) -> ExecuteResult:
        """
        Execute a prebuilt PendingTransaction atomically.

        Returns:
            ExecuteResult.APPLIED if successful
            ExecuteResult.REJECTED if validation failed (nothing was changed)
        """
        with self._lock:
            try:
                self._submit(pending)
            except LedgerError:
                return ExecuteResult.REJECTED
            return ExecuteResult.APPLIED

    def _submit(self, pending: PendingTransaction) -> Any:
        """
        Validate and apply a transaction, returning its result value.

        Raises:
            InsufficientFunds: A move would take a wallet below zero
            StaleRecord: A record changed since the transaction was built
            LedgerError: The transfer capability or the store commit failed after
                         validation; applied moves are reversed first
        """
        if pending.is_empty():
            return pending.result

        error = self._validate_pending(pending)
        if error is not None:
            if self.verbose:
                print(f"✗ REJECTED {pending.origin}: {error}")
            raise error

        self._execute_moves(pending.moves)
        try:
            self.store.commit(pending.record_changes)
        except LedgerError:
            self._reverse_moves(pending.moves)
            if self.verbose:
                print(f"✗ REJECTED {pending.origin}: record commit failed, moves reversed")
            raise

        sequence = self._next_sequence
        self._next_sequence += 1
        tx = Transaction(
            moves=pending.moves,
            record_changes=pending.record_changes,
            origin=pending.origin,
            timestamp=pending.timestamp,
            exec_id=self._generate_exec_id(sequence),
            ledger_name=self.name,
            execution_time=self._current_time,
            sequence_number=sequence,
        )
        self.transaction_log.append(tx)

        if self.verbose:
            self._print_tx_result(tx)
        return pending.result

    def _validate_pending(self, pending: PendingTransaction) -> Optional[LedgerError]:
        """
        Check a transaction without applying it.

        Moves are simulated in order against running balances, the way the
        transfer capability will see them. The system wallet is exempt.
        """
        if pending.timestamp > self._current_time:
            return LedgerError("future timestamp")

        running: Dict[str, int] = {}
        for move in pending.moves:
            if move.source not in running:
                running[move.source] = self.transfers.balance_of(move.source)
            if move.dest not in running:
                running[move.dest] = self.transfers.balance_of(move.dest)
            if move.source != SYSTEM_WALLET and running[move.source] < move.quantity:
                return InsufficientFunds(
                    f"{move.source} has {running[move.source]}, needs {move.quantity}"
                )
            running[move.source] -= move.quantity
            running[move.dest] += move.quantity

        stale = self.store.find_stale(pending.record_changes)
        if stale is not None:
            return StaleRecord(f"{stale.key!r} changed since the transaction was built")
        return None

    def _execute_moves(self, moves: Tuple[Move, ...]) -> None:
        """
        Apply moves in order.

        If the transfer capability fails part-way, moves already applied are
        reversed before the error propagates.
        """
        applied: List[Move] = []
        for move in moves:
            try:
                self.transfers.transfer(move.quantity, move.source, move.dest)
            except LedgerError as e:
                self._reverse_moves(applied)
                raise LedgerError(f"transfer failed after validation: {move!r}: {e}") from e
            applied.append(move)

    def _reverse_moves(self, moves: Sequence[Move]) -> None:
        """Undo applied moves, last first."""
        for done in reversed(moves):
            self.transfers.transfer(done.quantity, done.dest, done.source)

    def _generate_exec_id(self, sequence: int) -> str:
        """
        Format: exec:{ledger_name}:{sequence:012d}:{timestamp_micros}
        """
        micros = int(self._current_time.timestamp() * 1_000_000)
        return f"exec:{self.name}:{sequence:012d}:{micros}"

    def _print_tx_result(self, tx: Transaction) -> None:
        print(f"✓ APPLIED {tx.exec_id} {tx.origin}")
        for move in tx.moves:
            print(f"    {move.quantity}: {move.source} → {move.dest}")
        for change in tx.record_changes:
            print(f"    {change!r}")

    # ========================================================================
    # INVARIANT CHECKS
    # ========================================================================

    def verify_share_conservation(self) -> Dict[str, Any]:
        """
        Verify that every asset's shares sum to SHARE_SCALE.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every asset is conserved
            - 'totals': Dict[int, int] - Sum of shares per asset
            - 'discrepancies': List[Dict] - asset_id, expected, actual per violation
        """
        totals = {}
        discrepancies = []
        for asset_id in self.list_assets():
            total = self.total_shares(asset_id)
            totals[asset_id] = total
            if total != SHARE_SCALE:
                discrepancies.append({
                    'asset_id': asset_id,
                    'expected': SHARE_SCALE,
                    'actual': total,
                })
        return {
            'valid': not discrepancies,
            'totals': totals,
            'discrepancies': discrepancies,
        }

    def pending_total(self) -> int:
        return sum(self.store.get(k) for k in self.store.keys(FAMILY_PENDING))

    def verify_escrow(self) -> Dict[str, Any]:
        """
        Verify that escrow holds enough value to pay every pending balance.

        The surplus is rounding dust left by distributions.

        Returns:
            Dict with keys 'valid', 'escrow_balance', 'pending_total', 'unallocated'
        """
        escrow = self.transfers.balance_of(ESCROW_WALLET)
        pending = self.pending_total()
        return {
            'valid': escrow >= pending,
            'escrow_balance': escrow,
            'pending_total': pending,
            'unallocated': escrow - pending,
        }

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> ShareLedger:
        """
        Create an independent copy of this ledger.

        Cloned state includes the record store, the wallet book (when it
        supports clone()), the transaction log, the current time and
        configuration. The lock is not shared.

        Raises:
            LedgerError: If the transfer capability cannot be cloned
        """
        clone_transfers = getattr(self.transfers, "clone", None)
        if clone_transfers is None:
            raise LedgerError("transfer capability does not support clone()")
        cloned = ShareLedger(
            name=self.name,
            initial_time=self._current_time,
            verbose=self.verbose,
            test_mode=self._test_mode,
            store=self.store.clone(),
            transfers=clone_transfers(),
        )
        cloned.transaction_log = list(self.transaction_log)
        cloned._next_sequence = self._next_sequence
        return cloned
