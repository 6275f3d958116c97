"""
shareledger - Fractional Property Share Ledger

Records fractional shares (thousandths) in listed properties and splits
rental income among shareholders in proportion to their share, net of a
primary-holder fee.

Usage:
    from shareledger import ShareLedger

    ledger = ShareLedger("main", verbose=False)
    ledger.fund("alice", 1_000_000)

    # alice lists a property and becomes primary holder with 1000/1000
    asset_id = ledger.create_listing("alice", "12 Harbour Row", 1_000_000, 100)

    # bob takes 300/1000 out of alice's share before acquisition
    ledger.admit_coinvestor("alice", asset_id, "bob", 300, "co-investor")
    ledger.acquire("alice", asset_id)

    # income: 10% fee to alice, the rest credited 700/300
    ledger.fund("agent", 50_000)
    ledger.distribute_income("agent", asset_id, "tenant", 50_000)

    ledger.claim("bob", asset_id)   # 13500
"""

# Core types
from .core import (
    LedgerView,
    ValueTransfer,
    Asset,
    Shareholder,
    RecordKey,
    Move,
    RecordChange,
    PendingTransaction,
    Transaction,
    TransactionOrigin,
    ExecuteResult,
    build_transaction,
    LedgerError,
    AccessDenied,
    PropertyMissing,
    InvalidInput,
    AlreadyAcquired,
    InsufficientFunds,
    NoDividends,
    StaleRecord,
    SHARE_SCALE,
    FEE_SCALE,
    MAX_FEE_RATE_BP,
    MAX_SHAREHOLDERS,
    MAX_ADDRESS_LENGTH,
    PRIMARY_LABEL,
    ESCROW_WALLET,
    SYSTEM_WALLET,
)

# Collaborators
from .store import LedgerStore
from .wallets import WalletBook

# Ledger
from .ledger import ShareLedger

# Operations
from .ownership import (
    compute_listing,
    compute_admission,
    compute_toggle,
    validate_listing_terms,
)
from .acquisition import compute_acquisition
from .distribution import (
    DistributionPlan,
    HolderCut,
    compute_fee,
    compute_cuts,
    plan_distribution,
    compute_income_distribution,
)
from .claims import compute_claim

__all__ = [
    # Core
    'LedgerView', 'ValueTransfer', 'Asset', 'Shareholder', 'RecordKey',
    'Move', 'RecordChange', 'PendingTransaction', 'Transaction',
    'TransactionOrigin', 'ExecuteResult', 'build_transaction',
    # Exceptions
    'LedgerError', 'AccessDenied', 'PropertyMissing', 'InvalidInput',
    'AlreadyAcquired', 'InsufficientFunds', 'NoDividends', 'StaleRecord',
    # Constants
    'SHARE_SCALE', 'FEE_SCALE', 'MAX_FEE_RATE_BP', 'MAX_SHAREHOLDERS',
    'MAX_ADDRESS_LENGTH', 'PRIMARY_LABEL', 'ESCROW_WALLET', 'SYSTEM_WALLET',
    # Collaborators
    'LedgerStore', 'WalletBook',
    # Ledger
    'ShareLedger',
    # Operations
    'compute_listing', 'compute_admission', 'compute_toggle', 'validate_listing_terms',
    'compute_acquisition',
    'DistributionPlan', 'HolderCut', 'compute_fee', 'compute_cuts',
    'plan_distribution', 'compute_income_distribution',
    'compute_claim',
]
