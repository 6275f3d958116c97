"""
claims.py - Pending Balance Withdrawal

compute_claim() pays a holder's whole pending balance out of escrow and resets
the record to zero. The payout move runs before the record change, so a
failed transfer leaves the balance claimable; a successful one is followed by
the zeroing commit, which was validated before any value moved.
"""

from __future__ import annotations

from .core import (
    LedgerView, Move, PendingTransaction, RecordChange, TransactionOrigin,
    NoDividends,
    ESCROW_WALLET,
    build_transaction, pending_key, pending_or_zero, require_actor,
)


def compute_claim(view: LedgerView, caller: str, asset_id: int) -> PendingTransaction:
    """
    Build the transaction that withdraws the caller's pending balance.

    Returns:
        PendingTransaction whose result is the claimed amount

    Raises:
        NoDividends: No pending balance, or a zero one, for (asset_id, caller)
    """
    require_actor(caller, "caller")
    accumulated = pending_or_zero(view, asset_id, caller)
    if accumulated <= 0:
        raise NoDividends(f"{caller} has nothing to claim on asset {asset_id}")

    return build_transaction(
        view,
        TransactionOrigin("claim", caller, asset_id),
        moves=[Move(accumulated, ESCROW_WALLET, caller, f"claim_{asset_id}")],
        record_changes=[RecordChange(pending_key(asset_id, caller), accumulated, 0)],
        result=accumulated,
    )
