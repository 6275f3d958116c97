"""
conftest.py - Shared pytest fixtures for ShareLedger tests

Provides common fixtures used across unit, functional and conformance tests:
- Empty and funded ledgers
- A listed asset with a co-investor
- An acquired asset ready for income distribution
"""

import pytest
from datetime import datetime

from shareledger import ShareLedger


PRIMARY = "alice"
COINVESTOR = "bob"
BUYER = "carol"
AGENT = "agent"
TENANT = "tenant"

PURCHASE_COST = 1_000_000
FEE_RATE_BP = 100


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def snapshot(ledger: ShareLedger, asset_id: int) -> dict:
    """Everything an operation on asset_id could change, for no-mutation checks."""
    index = ledger.get_shareholder_index(asset_id)
    return {
        'asset': ledger.get_asset(asset_id),
        'index': index,
        'holders': {a: ledger.get_shareholder(asset_id, a) for a in index},
        'pending': {a: ledger.get_pending(asset_id, a) for a in index},
        'balances': {w: b for w, b in ledger.transfers.balances.items() if b},
        'next_id': ledger.get_next_id(),
        'log_length': len(ledger.transaction_log),
    }


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def ledger():
    """Empty ledger with quiet output."""
    return ShareLedger("test", initial_time=datetime(2025, 1, 1), verbose=False, test_mode=True)


@pytest.fixture
def funded_ledger(ledger):
    """Ledger where the buyer can afford the purchase and the agent can pay income."""
    ledger.fund(BUYER, 2 * PURCHASE_COST)
    ledger.fund(AGENT, 1_000_000)
    return ledger


@pytest.fixture
def listed(funded_ledger):
    """(ledger, asset_id) for a listed asset held 700/300 by alice and bob."""
    asset_id = funded_ledger.create_listing(PRIMARY, "12 Harbour Row", PURCHASE_COST, FEE_RATE_BP)
    funded_ledger.admit_coinvestor(PRIMARY, asset_id, COINVESTOR, 300, "co-investor")
    return funded_ledger, asset_id


@pytest.fixture
def acquired(listed):
    """(ledger, asset_id) for the listed asset after carol acquired it."""
    ledger, asset_id = listed
    ledger.acquire(BUYER, asset_id)
    return ledger, asset_id
