"""
distribution.py - Rental Income Distribution

=== DISTRIBUTION MODEL ===

An income payment of `amount` for an acquired, listed asset is split as:

    fee  = floor(amount * fee_rate_bp / FEE_SCALE)   -> transferred to the primary holder
    net  = amount - fee
    cut  = floor(net * share / SHARE_SCALE)          -> credited to each holder's pending balance

Holders are visited in shareholder index order (primary holder first, then
co-investors in admission order). Each cut is the exact floor of the holder's
proportional amount, so Σ cuts ≤ net. The residual

    dust = net - Σ cuts

stays in escrow and is not attributed to anyone. Cuts are ledger credits
only; value leaves escrow when a holder claims.

Example (amount=50000, fee_rate_bp=100, shares {primary: 700, co: 300}):
    fee = 5000, net = 45000
    primary cut = 31500, co cut = 13500, dust = 0

Example (amount=7, fee_rate_bp=0, shares {A: 333, B: 333, C: 334}):
    cuts 2, 2, 2, dust = 1

=== PURE FUNCTIONS ===

    compute_fee(amount, fee_rate_bp) -> int
    compute_cuts(net, holdings) -> [HolderCut, ...]
    plan_distribution(amount, fee_rate_bp, holdings) -> DistributionPlan

These take plain values and need no ledger. compute_income_distribution()
connects them to a LedgerView and builds the PendingTransaction.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Mapping, Tuple

from .core import (
    LedgerView, Move, PendingTransaction, RecordChange, TransactionOrigin,
    InsufficientFunds, InvalidInput,
    ESCROW_WALLET, FEE_SCALE, RESERVED_WALLETS, SHARE_SCALE,
    build_transaction, is_amount, pending_key, pending_or_zero, require_actor,
    require_asset, share_holdings,
)


@dataclass(frozen=True, slots=True)
class HolderCut:
    """One holder's credit from a distribution."""
    actor: str
    share: int
    amount: int


@dataclass(frozen=True, slots=True)
class DistributionPlan:
    """
    Complete split of one income payment.

    Attributes:
        amount: Income paid in
        fee: Primary-holder fee, transferred immediately
        net: amount - fee, the pool split by share
        cuts: Per-holder credits, in index order
    """
    amount: int
    fee: int
    net: int
    cuts: Tuple[HolderCut, ...]

    @property
    def allocated(self) -> int:
        return sum(c.amount for c in self.cuts)

    @property
    def dust(self) -> int:
        """Rounding residual left unallocated in escrow."""
        return self.net - self.allocated


# =============================================================================
# PURE FUNCTIONS
# =============================================================================

def compute_fee(amount: int, fee_rate_bp: int) -> int:
    """Primary-holder fee, floored."""
    return amount * fee_rate_bp // FEE_SCALE


def compute_cuts(net: int, holdings: Mapping[str, int]) -> List[HolderCut]:
    """
    Floor-proportional cut for every holder, in mapping order.

    Invariants:
        - Each cut is floor(net * share / SHARE_SCALE)
        - Σ cuts ≤ net whenever Σ shares ≤ SHARE_SCALE
    """
    return [
        HolderCut(actor=actor, share=share, amount=net * share // SHARE_SCALE)
        for actor, share in holdings.items()
    ]


def plan_distribution(
    amount: int,
    fee_rate_bp: int,
    holdings: Mapping[str, int],
) -> DistributionPlan:
    fee = compute_fee(amount, fee_rate_bp)
    net = amount - fee
    return DistributionPlan(
        amount=amount,
        fee=fee,
        net=net,
        cuts=tuple(compute_cuts(net, holdings)),
    )


# =============================================================================
# ORCHESTRATOR - Connects the pure functions to LedgerView
# =============================================================================

def compute_income_distribution(
    view: LedgerView,
    caller: str,
    asset_id: int,
    payer: str,
    amount: int,
) -> PendingTransaction:
    """
    Build the transaction that distributes one income payment.

    Moves: caller -> escrow (amount), then escrow -> primary holder (fee) when
    the fee is non-zero. Record changes: one pending-balance increment per
    holder with a non-zero cut. The PendingTransaction's result is the
    DistributionPlan.

    Raises:
        PropertyMissing: Unknown asset
        InvalidInput: Asset not both listed and acquired, non-positive amount,
                      or payer empty or equal to the caller
        InsufficientFunds: Caller's balance is below amount
    """
    require_actor(caller, "caller")
    if caller in RESERVED_WALLETS:
        raise InvalidInput(f"{caller} is a reserved wallet")
    asset = require_asset(view, asset_id)
    if not (asset.listed and asset.acquired):
        raise InvalidInput(
            f"Asset {asset_id} must be listed and acquired to distribute income "
            f"(listed={asset.listed}, acquired={asset.acquired})"
        )
    if not is_amount(amount) or amount <= 0:
        raise InvalidInput(f"amount must be a positive int, got {amount!r}")
    require_actor(payer, "payer")
    if payer == caller:
        raise InvalidInput("payer must differ from the caller")

    available = view.get_balance(caller)
    if available < amount:
        raise InsufficientFunds(f"{caller} has {available}, needs {amount}")

    plan = plan_distribution(amount, asset.fee_rate_bp, share_holdings(view, asset_id))

    moves = [Move(amount, caller, ESCROW_WALLET, f"income_{asset_id}_from_{payer}")]
    if plan.fee > 0:
        moves.append(Move(plan.fee, ESCROW_WALLET, asset.primary_holder, f"income_{asset_id}_fee"))

    changes = []
    for cut in plan.cuts:
        if cut.amount == 0:
            continue
        current = view.get_pending(asset_id, cut.actor)
        credited = pending_or_zero(view, asset_id, cut.actor) + cut.amount
        changes.append(RecordChange(pending_key(asset_id, cut.actor), current, credited))

    return build_transaction(
        view,
        TransactionOrigin("distribute_income", caller, asset_id),
        moves=moves,
        record_changes=changes,
        result=plan,
    )
