"""
acquisition.py - Listed to Acquired Transition

compute_acquisition() builds the purchase transaction:
    1. Move purchase_cost from the caller to escrow
    2. Mark the asset acquired
    3. Move purchase_cost from escrow to the primary holder

Both moves and the flag change are one PendingTransaction, so the caller is
debited, the primary holder credited, and the asset acquired together or not
at all. Escrow nets to zero.
"""

from __future__ import annotations
from dataclasses import replace

from .core import (
    LedgerView, Move, PendingTransaction, RecordChange, TransactionOrigin,
    AlreadyAcquired, InsufficientFunds, InvalidInput,
    ESCROW_WALLET, RESERVED_WALLETS,
    asset_key, build_transaction, require_actor, require_asset,
)


def compute_acquisition(view: LedgerView, caller: str, asset_id: int) -> PendingTransaction:
    """
    Build the transaction that acquires a listed asset.

    Raises:
        PropertyMissing: Unknown asset
        AlreadyAcquired: Asset was acquired before
        InvalidInput: Asset is not listed, or caller is a reserved wallet
        InsufficientFunds: Caller's balance is below the purchase cost
    """
    require_actor(caller, "caller")
    if caller in RESERVED_WALLETS:
        raise InvalidInput(f"{caller} is a reserved wallet")
    asset = require_asset(view, asset_id)
    if asset.acquired:
        raise AlreadyAcquired(f"Asset {asset_id} is already acquired")
    if not asset.listed:
        raise InvalidInput(f"Asset {asset_id} is not listed")

    available = view.get_balance(caller)
    if available < asset.purchase_cost:
        raise InsufficientFunds(
            f"{caller} has {available}, purchase of asset {asset_id} costs {asset.purchase_cost}"
        )

    moves = [
        Move(asset.purchase_cost, caller, ESCROW_WALLET, f"acquire_{asset_id}_pay_in"),
        Move(asset.purchase_cost, ESCROW_WALLET, asset.primary_holder, f"acquire_{asset_id}_pay_out"),
    ]
    return build_transaction(
        view,
        TransactionOrigin("acquire", caller, asset_id),
        moves=moves,
        record_changes=[
            RecordChange(asset_key(asset_id), asset, replace(asset, acquired=True)),
        ],
    )
