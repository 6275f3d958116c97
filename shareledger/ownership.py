"""
ownership.py - Listing, Co-investor Admission and Listing Toggle

Pure functions that read a LedgerView and return the PendingTransaction for:
1. compute_listing() - create an asset with the caller as primary holder
2. compute_admission() - move share from the primary holder to a new co-investor
3. compute_toggle() - flip the asset's listed flag

Share invariant: for every asset the shares of all holders sum to SHARE_SCALE.
Listing creates exactly SHARE_SCALE on the primary holder and admission only
moves share between two records, so the sum never changes after listing.
"""

from __future__ import annotations
from dataclasses import replace

from .core import (
    LedgerView, PendingTransaction, RecordChange, TransactionOrigin,
    Asset, Shareholder,
    AlreadyAcquired, InvalidInput,
    COUNTER_KEY, MAX_ADDRESS_LENGTH, MAX_FEE_RATE_BP, MAX_SHAREHOLDERS,
    PRIMARY_LABEL, RESERVED_WALLETS, SHARE_SCALE,
    asset_key, index_key, shareholder_key,
    build_transaction, is_amount, require_actor, require_asset,
    require_primary_holder,
)


def validate_listing_terms(address: str, purchase_cost: int, fee_rate_bp: int) -> None:
    """
    Raises:
        InvalidInput: If any listing term is out of range
    """
    if not isinstance(address, str) or not address.strip():
        raise InvalidInput("address cannot be empty")
    if len(address) > MAX_ADDRESS_LENGTH:
        raise InvalidInput(f"address exceeds {MAX_ADDRESS_LENGTH} characters")
    if not is_amount(purchase_cost) or purchase_cost <= 0:
        raise InvalidInput(f"purchase_cost must be a positive int, got {purchase_cost!r}")
    if not is_amount(fee_rate_bp) or not 0 <= fee_rate_bp <= MAX_FEE_RATE_BP:
        raise InvalidInput(
            f"fee_rate_bp must be an int in [0, {MAX_FEE_RATE_BP}], got {fee_rate_bp!r}"
        )


def compute_listing(
    view: LedgerView,
    caller: str,
    address: str,
    purchase_cost: int,
    fee_rate_bp: int,
) -> PendingTransaction:
    """
    Build the transaction that lists a new asset.

    The asset takes the next id; the caller becomes primary holder with the
    full SHARE_SCALE and is the sole entry of the shareholder index.

    Returns:
        PendingTransaction whose result is the new asset id

    Raises:
        InvalidInput: On an empty caller or invalid listing terms
    """
    require_actor(caller, "caller")
    if caller in RESERVED_WALLETS:
        raise InvalidInput(f"{caller} is a reserved wallet")
    validate_listing_terms(address, purchase_cost, fee_rate_bp)

    asset_id = view.get_next_id()
    asset = Asset(
        asset_id=asset_id,
        address=address,
        primary_holder=caller,
        purchase_cost=purchase_cost,
        fee_rate_bp=fee_rate_bp,
        acquired=False,
        listed=True,
    )
    changes = [
        RecordChange(COUNTER_KEY, asset_id, asset_id + 1),
        RecordChange(asset_key(asset_id), None, asset),
        RecordChange(
            shareholder_key(asset_id, caller), None,
            Shareholder(share=SHARE_SCALE, label=PRIMARY_LABEL),
        ),
        RecordChange(index_key(asset_id), None, (caller,)),
    ]
    return build_transaction(
        view,
        TransactionOrigin("create_listing", caller, asset_id),
        record_changes=changes,
        result=asset_id,
    )


def compute_admission(
    view: LedgerView,
    caller: str,
    asset_id: int,
    coinvestor: str,
    requested_share: int,
    label: str,
) -> PendingTransaction:
    """
    Build the transaction that admits a co-investor.

    Debits requested_share from the primary holder's record, creates the
    co-investor's record with (requested_share, label), and appends the
    co-investor to the shareholder index.

    Raises:
        PropertyMissing: Unknown asset
        AccessDenied: Caller is not the primary holder
        AlreadyAcquired: Shares are frozen once the asset is acquired
        InvalidInput: Self-admission, reserved or duplicate co-investor, empty
                      label, share out of range, or index at capacity
    """
    asset = require_asset(view, asset_id)
    require_primary_holder(asset, caller)
    if asset.acquired:
        raise AlreadyAcquired(f"Asset {asset_id} is acquired; shares are frozen")

    require_actor(coinvestor, "coinvestor")
    if coinvestor == caller:
        raise InvalidInput("primary holder cannot admit itself")
    if coinvestor in RESERVED_WALLETS:
        raise InvalidInput(f"{coinvestor} is a reserved wallet")
    if not isinstance(label, str) or not label.strip():
        raise InvalidInput("label cannot be empty")

    primary = view.get_shareholder(asset_id, caller)
    primary_share = primary.share if primary is not None else 0
    if not is_amount(requested_share) or not 0 < requested_share <= primary_share:
        raise InvalidInput(
            f"requested_share must be in (0, {primary_share}], got {requested_share!r}"
        )

    index = view.get_shareholder_index(asset_id)
    if coinvestor in index or view.get_shareholder(asset_id, coinvestor) is not None:
        raise InvalidInput(f"{coinvestor} already holds a share in asset {asset_id}")
    if len(index) >= MAX_SHAREHOLDERS:
        raise InvalidInput(f"Asset {asset_id} already has {MAX_SHAREHOLDERS} shareholders")

    changes = [
        RecordChange(
            shareholder_key(asset_id, caller), primary,
            replace(primary, share=primary_share - requested_share),
        ),
        RecordChange(
            shareholder_key(asset_id, coinvestor), None,
            Shareholder(share=requested_share, label=label),
        ),
        RecordChange(index_key(asset_id), index, index + (coinvestor,)),
    ]
    return build_transaction(
        view,
        TransactionOrigin("admit_coinvestor", caller, asset_id),
        record_changes=changes,
    )


def compute_toggle(view: LedgerView, caller: str, asset_id: int) -> PendingTransaction:
    """
    Build the transaction that flips the asset's listed flag.

    Raises:
        PropertyMissing: Unknown asset
        AccessDenied: Caller is not the primary holder
    """
    asset = require_asset(view, asset_id)
    require_primary_holder(asset, caller)
    return build_transaction(
        view,
        TransactionOrigin("toggle_listing", caller, asset_id),
        record_changes=[
            RecordChange(asset_key(asset_id), asset, replace(asset, listed=not asset.listed)),
        ],
        result=not asset.listed,
    )
