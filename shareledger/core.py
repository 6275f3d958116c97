"""
Core types and pure functions for the fractional share ledger.

This module provides the foundational data structures and protocols:
1. Protocols: LedgerView for read-only ledger access, ValueTransfer for moving value
2. Immutable records: Asset, Shareholder, RecordKey
3. Immutable transaction types: Move, RecordChange, PendingTransaction, Transaction
4. Exceptions: LedgerError and the domain-specific error types
5. Validation helpers shared by the operation modules

All functions in this module are pure and operate on read-only views.
No function can mutate ledger state directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Protocol, Tuple, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Total ownership of one asset, in thousandths.
SHARE_SCALE = 1000

# Denominator for fee rates expressed in basis points (1000 bp = 100%).
FEE_SCALE = 1000

# Fee rate cap: 20% of FEE_SCALE.
MAX_FEE_RATE_BP = 200

# Capacity of the per-asset shareholder index.
MAX_SHAREHOLDERS = 50

# Storage bound on the asset location string.
MAX_ADDRESS_LENGTH = 100

# Label carried by the primary holder's shareholder record.
PRIMARY_LABEL = "primary"

# Neutral pass-through account used for acquisition and distribution transfers.
ESCROW_WALLET = "escrow"

# Reserved wallet for issuance. Exempt from balance validation.
SYSTEM_WALLET = "system"

RESERVED_WALLETS = frozenset({ESCROW_WALLET, SYSTEM_WALLET})

# Record families held by the ledger store.
FAMILY_ASSET = "asset"
FAMILY_SHAREHOLDER = "shareholder"
FAMILY_PENDING = "pending"
FAMILY_INDEX = "index"
FAMILY_COUNTER = "counter"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class AccessDenied(LedgerError):
    """Raised when the caller is not the asset's primary holder."""
    pass


class PropertyMissing(LedgerError):
    """Raised when an asset id is unknown."""
    pass


class InvalidInput(LedgerError):
    """Raised when a stated precondition is violated (bad amount, empty string, wrong state)."""
    pass


class AlreadyAcquired(LedgerError):
    """Raised on acquisition-gated operations once an asset has been acquired."""
    pass


class InsufficientFunds(LedgerError):
    """Raised when a transfer would take a wallet below zero."""
    pass


class NoDividends(LedgerError):
    """Raised when a claim finds no pending balance."""
    pass


class StaleRecord(LedgerError):
    """Raised when a record changed between the read and the commit of a transaction."""
    pass


# ============================================================================
# RECORDS
# ============================================================================

@dataclass(frozen=True, slots=True)
class RecordKey:
    """
    Structural key addressing one record in the ledger store.

    Attributes:
        family: Record family (asset, shareholder, pending, index, counter)
        asset_id: Asset the record belongs to (0 for the counter)
        actor: Actor identifier for per-holder families, None otherwise
    """
    family: str
    asset_id: int = 0
    actor: Optional[str] = None

    def __repr__(self) -> str:
        if self.actor is None:
            return f"{self.family}[{self.asset_id}]"
        return f"{self.family}[{self.asset_id}, {self.actor}]"


COUNTER_KEY = RecordKey(FAMILY_COUNTER)


def asset_key(asset_id: int) -> RecordKey:
    return RecordKey(FAMILY_ASSET, asset_id)


def shareholder_key(asset_id: int, actor: str) -> RecordKey:
    return RecordKey(FAMILY_SHAREHOLDER, asset_id, actor)


def pending_key(asset_id: int, actor: str) -> RecordKey:
    return RecordKey(FAMILY_PENDING, asset_id, actor)


def index_key(asset_id: int) -> RecordKey:
    return RecordKey(FAMILY_INDEX, asset_id)


@dataclass(frozen=True, slots=True)
class Asset:
    """
    A listed property.

    Attributes:
        asset_id: Sequential identifier, starting at 1.
        address: Human-readable location.
        primary_holder: Actor who created the listing.
        purchase_cost: Value paid to the primary holder on acquisition.
        fee_rate_bp: Primary-holder fee on income, in basis points of FEE_SCALE.
        acquired: Set once, irreversibly, by acquisition.
        listed: Toggled freely by the primary holder; gates income distribution.
    """
    asset_id: int
    address: str
    primary_holder: str
    purchase_cost: int
    fee_rate_bp: int
    acquired: bool = False
    listed: bool = True


@dataclass(frozen=True, slots=True)
class Shareholder:
    """A holder's stake in one asset, in thousandths of SHARE_SCALE."""
    share: int
    label: str


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to ledger state.

    Operation modules accept a LedgerView to declare read-only intent and
    return a PendingTransaction describing what should change. The ShareLedger
    implements this protocol; tests use FakeView.
    """

    @property
    def current_time(self) -> datetime:
        """Return the current logical time of the ledger."""
        ...

    def get_asset(self, asset_id: int) -> Optional[Asset]:
        ...

    def get_shareholder(self, asset_id: int, actor: str) -> Optional[Shareholder]:
        ...

    def get_pending(self, asset_id: int, actor: str) -> Optional[int]:
        """Return the pending balance record, or None if none was ever credited."""
        ...

    def get_shareholder_index(self, asset_id: int) -> Tuple[str, ...]:
        """Return the ordered actors that have held a share (empty if unknown asset)."""
        ...

    def get_next_id(self) -> int:
        ...

    def get_balance(self, actor: str) -> int:
        """Return the actor's available value (0 if never seen)."""
        ...


@runtime_checkable
class ValueTransfer(Protocol):
    """
    Capability to move value between actors.

    transfer() either applies fully or raises InsufficientFunds without
    changing any balance.
    """

    def balance_of(self, actor: str) -> int:
        ...

    def transfer(self, amount: int, source: str, dest: str) -> None:
        ...


# ============================================================================
# ENUMS
# ============================================================================

class ExecuteResult(Enum):
    """
    Outcome of a transaction execution attempt.

    APPLIED: Transaction was validated and applied to the ledger.
    REJECTED: Transaction failed validation (insufficient funds or stale records).
    """
    APPLIED = "applied"
    REJECTED = "rejected"


# ============================================================================
# TRANSACTION TYPES
# ============================================================================

@dataclass(frozen=True, slots=True)
class TransactionOrigin:
    """
    Immutable record of the operation that produced a transaction.

    Attributes:
        operation: Operation name (e.g. "create_listing", "claim")
        caller: Actor that invoked the operation
        asset_id: Asset the operation targeted, if any
    """
    operation: str
    caller: str
    asset_id: Optional[int] = None

    def __repr__(self) -> str:
        if self.asset_id is None:
            return f"Origin({self.operation}:{self.caller})"
        return f"Origin({self.operation}:{self.caller}, asset={self.asset_id})"


@dataclass(frozen=True, slots=True)
class Move:
    """
    A single transfer of value between two actors.

    Attributes:
        quantity: Amount to transfer, a positive integer in the smallest value unit.
        source: Actor debited.
        dest: Actor credited.
        reference: Identifier of the step generating this move.
    """
    quantity: int
    source: str
    dest: str
    reference: str

    def __post_init__(self):
        if not self.source or not self.source.strip():
            raise ValueError("Move source cannot be empty")
        if not self.dest or not self.dest.strip():
            raise ValueError("Move dest cannot be empty")
        if not self.reference or not self.reference.strip():
            raise ValueError("Move reference cannot be empty")
        if not is_amount(self.quantity):
            raise ValueError(f"Move quantity must be int, got {type(self.quantity)}")
        if self.quantity <= 0:
            raise ValueError(f"Move quantity must be positive, got {self.quantity}")
        if self.source == self.dest:
            raise ValueError("Source and dest must be different")

    def __repr__(self) -> str:
        return f"Move({self.quantity}: {self.source}→{self.dest})"


@dataclass(frozen=True, slots=True)
class RecordChange:
    """
    Record of a store write, with the value it expects to replace.

    old_value is compared against the store at commit time; a mismatch means
    another transaction wrote the key after this one read it.
    """
    key: RecordKey
    old_value: Any
    new_value: Any

    def __repr__(self) -> str:
        return f"{self.key!r}: {self.old_value!r} → {self.new_value!r}"


@dataclass(frozen=True, slots=True)
class PendingTransaction:
    """
    A transaction description before execution - represents INTENT.

    Moves are applied in order before record changes, so a transaction that
    pays out value only zeroes the backing record after the payment succeeded.

    Attributes:
        moves: Ordered value transfers
        record_changes: Store writes
        origin: Who/what created this transaction and why
        timestamp: Logical time at which the intent was built
        result: Value handed back to the caller once applied (new id, claimed amount)
    """
    moves: Tuple[Move, ...]
    record_changes: Tuple[RecordChange, ...]
    origin: TransactionOrigin
    timestamp: datetime
    result: Any = None

    def is_empty(self) -> bool:
        return not self.moves and not self.record_changes

    def __repr__(self) -> str:
        return (f"PendingTransaction({len(self.moves)} moves, "
                f"{len(self.record_changes)} changes, {self.origin})")


def build_transaction(
    view: LedgerView,
    origin: TransactionOrigin,
    moves: Optional[list] = None,
    record_changes: Optional[list] = None,
    result: Any = None,
) -> PendingTransaction:
    """
    Build a PendingTransaction stamped with the view's current time.

    This is the standard way operation modules create transactions.
    """
    return PendingTransaction(
        moves=tuple(moves or ()),
        record_changes=tuple(record_changes or ()),
        origin=origin,
        timestamp=view.current_time,
        result=result,
    )


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    An executed, immutable record of ledger state changes - represents FACT.

    Attributes:
        moves: Value transfers that were applied
        record_changes: Store writes that were committed
        origin: Operation that produced this transaction
        timestamp: When the PendingTransaction was built
        exec_id: Unique execution identifier (ledger + sequence + time)
        ledger_name: Name of the ledger that executed this
        execution_time: When this was executed and logged
        sequence_number: Monotonic sequence within the ledger
        asset_ids: Assets touched by the record changes (auto-populated)
    """
    moves: Tuple[Move, ...]
    record_changes: Tuple[RecordChange, ...]
    origin: TransactionOrigin
    timestamp: datetime
    exec_id: str
    ledger_name: str
    execution_time: datetime
    sequence_number: int
    asset_ids: FrozenSet[int] = None

    def __post_init__(self):
        if not self.moves and not self.record_changes:
            raise ValueError("Transaction must have moves or record_changes")
        if self.asset_ids is None:
            object.__setattr__(
                self, 'asset_ids',
                frozenset(rc.key.asset_id for rc in self.record_changes if rc.key.asset_id)
            )

    def __repr__(self) -> str:
        return (f"Transaction({self.exec_id}, {self.origin}, "
                f"{len(self.moves)} moves, {len(self.record_changes)} changes)")


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def is_amount(value: Any) -> bool:
    """True for plain integers (bool is excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)


def require_actor(actor: Any, what: str = "actor") -> str:
    if not isinstance(actor, str) or not actor.strip():
        raise InvalidInput(f"{what} must be a non-empty string")
    return actor


def require_asset(view: LedgerView, asset_id: int) -> Asset:
    """Fetch an asset or raise PropertyMissing."""
    asset = view.get_asset(asset_id) if is_amount(asset_id) else None
    if asset is None:
        raise PropertyMissing(f"Asset {asset_id!r} does not exist")
    return asset


def require_primary_holder(asset: Asset, caller: str) -> None:
    if caller != asset.primary_holder:
        raise AccessDenied(
            f"{caller} is not the primary holder of asset {asset.asset_id}"
        )


def pending_or_zero(view: LedgerView, asset_id: int, actor: str) -> int:
    """Pending balance for (asset, actor), treating an absent record as zero."""
    pending = view.get_pending(asset_id, actor)
    return 0 if pending is None else pending


def share_holdings(view: LedgerView, asset_id: int) -> Dict[str, int]:
    """
    Current share per actor, in shareholder index order.

    Index entries without a share record are skipped.
    """
    result: Dict[str, int] = {}
    for actor in view.get_shareholder_index(asset_id):
        record = view.get_shareholder(asset_id, actor)
        if record is not None:
            result[actor] = record.share
    return result
