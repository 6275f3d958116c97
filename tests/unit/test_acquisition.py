"""
Tests for the listed -> acquired transition.

Acquisition is one transaction: the caller pays escrow, escrow pays the
primary holder, and the asset is marked acquired. Escrow nets to zero.
"""
import pytest

from shareledger import (
    compute_acquisition,
    AlreadyAcquired, InsufficientFunds, InvalidInput, PropertyMissing,
    ESCROW_WALLET,
)
from tests.fake_view import FakeView, listed_asset, sole_holder
from tests.conftest import BUYER, PRIMARY, PURCHASE_COST, snapshot


class TestComputeAcquisition:

    def _view(self, balance=5000, **kwargs):
        return FakeView(
            assets={1: listed_asset(cost=5000, **kwargs)},
            holders={1: sole_holder()},
            balances={"carol": balance},
        )

    def test_two_hop_moves(self):
        pending = compute_acquisition(self._view(), "carol", 1)
        pay_in, pay_out = pending.moves
        assert (pay_in.quantity, pay_in.source, pay_in.dest) == (5000, "carol", ESCROW_WALLET)
        assert (pay_out.quantity, pay_out.source, pay_out.dest) == (5000, ESCROW_WALLET, "alice")
        (change,) = pending.record_changes
        assert change.old_value.acquired is False
        assert change.new_value.acquired is True

    def test_missing_asset(self):
        with pytest.raises(PropertyMissing):
            compute_acquisition(FakeView(balances={"carol": 10}), "carol", 1)

    def test_already_acquired(self):
        with pytest.raises(AlreadyAcquired):
            compute_acquisition(self._view(acquired=True), "carol", 1)

    def test_already_acquired_wins_over_unlisted(self):
        with pytest.raises(AlreadyAcquired):
            compute_acquisition(self._view(acquired=True, listed=False), "carol", 1)

    def test_unlisted(self):
        with pytest.raises(InvalidInput, match="not listed"):
            compute_acquisition(self._view(listed=False), "carol", 1)

    def test_insufficient_funds(self):
        with pytest.raises(InsufficientFunds):
            compute_acquisition(self._view(balance=4999), "carol", 1)

    def test_reserved_caller(self):
        with pytest.raises(InvalidInput, match="reserved"):
            compute_acquisition(self._view(), ESCROW_WALLET, 1)


class TestAcquire:

    def test_buyer_pays_primary(self, listed):
        ledger, asset_id = listed
        buyer_before = ledger.get_balance(BUYER)
        ledger.acquire(BUYER, asset_id)
        assert ledger.get_asset(asset_id).acquired
        assert ledger.get_balance(BUYER) == buyer_before - PURCHASE_COST
        assert ledger.get_balance(PRIMARY) == PURCHASE_COST
        assert ledger.get_balance(ESCROW_WALLET) == 0

    def test_shares_frozen_but_unchanged(self, listed):
        ledger, asset_id = listed
        holdings = ledger.get_holdings(asset_id)
        ledger.acquire(BUYER, asset_id)
        assert ledger.get_holdings(asset_id) == holdings

    def test_primary_can_acquire_own_listing(self, ledger):
        ledger.fund("alice", 100)
        asset_id = ledger.create_listing("alice", "1 Main St", 100, 0)
        ledger.acquire("alice", asset_id)
        assert ledger.get_asset(asset_id).acquired
        assert ledger.get_balance("alice") == 100

    def test_insufficient_funds_leaves_asset_unacquired(self, ledger):
        ledger.fund("carol", PURCHASE_COST - 1)
        asset_id = ledger.create_listing("alice", "1 Main St", PURCHASE_COST, 100)
        before = snapshot(ledger, asset_id)
        with pytest.raises(InsufficientFunds):
            ledger.acquire("carol", asset_id)
        assert ledger.get_asset(asset_id).acquired is False
        assert snapshot(ledger, asset_id) == before

    def test_second_acquisition_fails(self, acquired):
        ledger, asset_id = acquired
        before = snapshot(ledger, asset_id)
        with pytest.raises(AlreadyAcquired):
            ledger.acquire(BUYER, asset_id)
        assert snapshot(ledger, asset_id) == before

    def test_unlisted_cannot_be_acquired(self, listed):
        ledger, asset_id = listed
        ledger.toggle_listing(PRIMARY, asset_id)
        with pytest.raises(InvalidInput):
            ledger.acquire(BUYER, asset_id)
        assert not ledger.get_asset(asset_id).acquired
