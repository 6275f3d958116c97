#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Fractional Property Shares Step by Step

Walks through the life of one property: listing, co-investor admission,
acquisition, rental income and claims. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Ownership     - Listing, admitting a co-investor, unlisting
  4-5:  Acquisition   - Paying the purchase cost, freezing the share table
  6-7:  Income        - The fee, pro-rata cuts, dust left in escrow
  8-9:  Claims        - Pulling pending balances, conservation proof

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
from datetime import datetime
import sys

from shareledger import (
    ShareLedger, LedgerError, AlreadyAcquired, NoDividends,
    ESCROW_WALLET, SHARE_SCALE, FEE_SCALE,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    start_time: datetime = datetime(2025, 1, 1, 9, 0, 0)

    address: str = "Unit 4, 88 Quay Street"
    purchase_cost: int = 1_000_000
    fee_rate_bp: int = 100            # 100/1000 = 10%

    coinvestor_share: int = 300       # thousandths
    rent: int = 50_000
    odd_rent: int = 1_001             # leaves dust after the split


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def show_holdings(ledger: ShareLedger, asset_id: int):
    for actor, share in ledger.get_holdings(asset_id).items():
        pending = ledger.get_pending(asset_id, actor) or 0
        print(f"  {actor:<12} share={share:>5}/{SHARE_SCALE}  pending={pending:>8}")


# ============================================================================
# PHASE 1: OWNERSHIP (Steps 1-3)
# ============================================================================

def step_01_listing():
    step_header(1, "Listing a Property",
        "The lister becomes primary holder with the whole share.")

    ledger = ShareLedger("tutorial", initial_time=CONFIG.start_time, verbose=True)
    ledger.fund("alice", CONFIG.purchase_cost)
    ledger.fund("agent", CONFIG.rent + CONFIG.odd_rent)

    print(f'>>> ledger.create_listing("alice", "{CONFIG.address}", '
          f'{CONFIG.purchase_cost}, {CONFIG.fee_rate_bp})')
    asset_id = ledger.create_listing("alice", CONFIG.address, CONFIG.purchase_cost,
                                     CONFIG.fee_rate_bp)

    section_header("Asset")
    print(f"  {ledger.get_asset(asset_id)}")
    show_holdings(ledger, asset_id)
    return ledger, asset_id


def step_02_admission(ledger: ShareLedger, asset_id: int):
    step_header(2, "Admitting a Co-investor",
        "Share is carved out of the primary holder's, never minted.")

    ledger.admit_coinvestor("alice", asset_id, "bob", CONFIG.coinvestor_share, "co-investor")
    show_holdings(ledger, asset_id)
    print(f"\n  Total: {ledger.total_shares(asset_id)}/{SHARE_SCALE}")

    section_header("Rejected: bob is not the primary holder")
    try:
        ledger.admit_coinvestor("bob", asset_id, "carol", 10, "co-investor")
    except LedgerError as e:
        print(f"  {type(e).__name__}: {e}")
    return ledger


def step_03_toggle(ledger: ShareLedger, asset_id: int):
    step_header(3, "Unlisting and Relisting",
        "Only the primary holder can flip the listed flag.")

    print(f"  listed -> {ledger.toggle_listing('alice', asset_id)}")
    print(f"  listed -> {ledger.toggle_listing('alice', asset_id)}")
    return ledger


# ============================================================================
# PHASE 2: ACQUISITION (Steps 4-5)
# ============================================================================

def step_04_acquire(ledger: ShareLedger, asset_id: int):
    step_header(4, "Acquisition",
        "The purchase cost flows through escrow to the primary holder.")

    before = ledger.get_balance("alice")
    ledger.acquire("alice", asset_id)
    print(f"  acquired:      {ledger.get_asset(asset_id).acquired}")
    print(f"  alice balance: {before} -> {ledger.get_balance('alice')}")
    return ledger


def step_05_frozen(ledger: ShareLedger, asset_id: int):
    step_header(5, "Frozen Share Table",
        "After acquisition no co-investor can be admitted.")

    try:
        ledger.admit_coinvestor("alice", asset_id, "carol", 10, "co-investor")
    except AlreadyAcquired as e:
        print(f"  AlreadyAcquired: {e}")
    return ledger


# ============================================================================
# PHASE 3: INCOME (Steps 6-7)
# ============================================================================

def step_06_income(ledger: ShareLedger, asset_id: int):
    step_header(6, "Distributing Rent",
        "Fee goes to the primary holder, the rest is credited pro-rata.")

    plan = ledger.distribute_income("agent", asset_id, "tenant", CONFIG.rent)
    print(f"  amount={plan.amount}  fee={plan.fee} ({CONFIG.fee_rate_bp}/{FEE_SCALE})  "
          f"net={plan.net}")
    for cut in plan.cuts:
        print(f"  {cut.actor:<12} {cut.share:>5} -> {cut.amount}")
    show_holdings(ledger, asset_id)
    return ledger


def step_07_dust(ledger: ShareLedger, asset_id: int):
    step_header(7, "Rounding Dust",
        "Floor division leaves a remainder that stays in escrow.")

    plan = ledger.distribute_income("agent", asset_id, "tenant", CONFIG.odd_rent)
    print(f"  net={plan.net}  allocated={plan.allocated}  dust={plan.dust}")
    print(f"  {ledger.verify_escrow()}")
    return ledger


# ============================================================================
# PHASE 4: CLAIMS (Steps 8-9)
# ============================================================================

def step_08_claims(ledger: ShareLedger, asset_id: int):
    step_header(8, "Claiming",
        "Each holder pulls their own pending balance out of escrow.")

    for actor in ledger.get_shareholder_index(asset_id):
        paid = ledger.claim(actor, asset_id)
        print(f"  {actor:<12} claimed {paid:>8}  balance={ledger.get_balance(actor)}")

    try:
        ledger.claim("bob", asset_id)
    except NoDividends as e:
        print(f"\n  NoDividends: {e}")
    return ledger


def step_09_conservation(ledger: ShareLedger, asset_id: int):
    step_header(9, "Conservation Proof",
        "Shares sum to the scale and value sums to zero.")

    print(f"  shares: {ledger.verify_share_conservation()}")
    print(f"  value:  {ledger.transfers.verify_conservation()}")
    print(f"  escrow: {ledger.get_balance(ESCROW_WALLET)} (dust only)")
    print(f"  log:    {len(ledger.transaction_log)} transactions")
    for tx in ledger.transaction_log:
        print(f"    {tx.exec_id}  {tx.origin.operation}")


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       SHARE LEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)
    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")
    wait_for_enter()

    ledger, asset_id = step_01_listing()
    wait_for_enter()
    for step in (step_02_admission, step_03_toggle, step_04_acquire, step_05_frozen,
                 step_06_income, step_07_dust, step_08_claims):
        ledger = step(ledger, asset_id)
        wait_for_enter()
    step_09_conservation(ledger, asset_id)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - See shareledger/distribution.py for the income split
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
