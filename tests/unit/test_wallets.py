"""
test_wallets.py - Unit tests for the WalletBook value transfer

The system wallet is exempt from balance validation and is the only source
of new value, so the sum of all balances stays zero.
"""

import pytest

from shareledger import (
    WalletBook, ValueTransfer, InsufficientFunds, LedgerError,
    SYSTEM_WALLET, ESCROW_WALLET,
)


class TestProtocol:

    def test_wallet_book_is_value_transfer(self):
        assert isinstance(WalletBook(), ValueTransfer)

    def test_reserved_wallets_registered(self):
        wallets = WalletBook()
        assert SYSTEM_WALLET in wallets.registered_wallets
        assert ESCROW_WALLET in wallets.registered_wallets


class TestTransfer:

    def test_fund_and_transfer(self):
        wallets = WalletBook()
        wallets.fund("alice", 1000)
        wallets.transfer(250, "alice", "bob")
        assert wallets.balance_of("alice") == 750
        assert wallets.balance_of("bob") == 250
        assert wallets.balance_of(SYSTEM_WALLET) == -1000

    def test_insufficient_funds_changes_nothing(self):
        wallets = WalletBook()
        wallets.fund("alice", 100)
        with pytest.raises(InsufficientFunds):
            wallets.transfer(101, "alice", "bob")
        assert wallets.balance_of("alice") == 100
        assert wallets.balance_of("bob") == 0

    def test_exact_balance_allowed(self):
        wallets = WalletBook()
        wallets.fund("alice", 100)
        wallets.transfer(100, "alice", "bob")
        assert wallets.balance_of("alice") == 0

    def test_zero_transfer_is_noop(self):
        wallets = WalletBook()
        wallets.transfer(0, "alice", "bob")
        assert "alice" not in wallets.registered_wallets

    @pytest.mark.parametrize("amount", [-1, 2.5, True])
    def test_bad_amount(self, amount):
        with pytest.raises(ValueError):
            WalletBook().transfer(amount, SYSTEM_WALLET, "alice")

    def test_destination_registered_on_first_use(self):
        wallets = WalletBook()
        wallets.fund("alice", 5)
        assert "alice" in wallets.registered_wallets
        assert wallets.balance_of("alice") == 5

    def test_unknown_wallet_reads_zero(self):
        wallets = WalletBook()
        assert wallets.balance_of("ghost") == 0
        assert "ghost" not in wallets.registered_wallets


class TestTestMode:

    def test_set_balance_requires_test_mode(self):
        with pytest.raises(LedgerError, match="disabled in production"):
            WalletBook().set_balance("alice", 10)

    def test_set_balance_in_test_mode(self):
        wallets = WalletBook(test_mode=True)
        wallets.set_balance("alice", 10)
        assert wallets.balance_of("alice") == 10


class TestConservation:

    def test_conserved_after_transfers(self):
        wallets = WalletBook()
        wallets.fund("alice", 1000)
        wallets.fund("bob", 500)
        wallets.transfer(300, "alice", ESCROW_WALLET)
        wallets.transfer(120, ESCROW_WALLET, "bob")
        result = wallets.verify_conservation()
        assert result['valid']
        assert result['total_supply'] == 0

    def test_set_balance_breaks_conservation(self):
        wallets = WalletBook(test_mode=True)
        wallets.set_balance("alice", 10)
        result = wallets.verify_conservation()
        assert not result['valid']
        assert result['total_supply'] == 10

    def test_clone_is_independent(self):
        wallets = WalletBook()
        wallets.fund("alice", 10)
        cloned = wallets.clone()
        cloned.transfer(10, "alice", "bob")
        assert wallets.balance_of("alice") == 10
        assert cloned.balance_of("bob") == 10

    def test_verbose_prints(self, capsys):
        wallets = WalletBook(verbose=True)
        wallets.fund("alice", 10)
        out = capsys.readouterr().out
        assert "alice" in out
        assert "10" in out
