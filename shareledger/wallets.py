"""
wallets.py - Reference Value Transfer

WalletBook keeps an integer balance per actor and implements the ValueTransfer
protocol the ledger consumes. It is double-entry: every transfer debits one
wallet and credits another by the same amount, and new value only enters via
the system wallet, so the sum of all balances is always zero.

Key responsibilities:
    - Rejects any transfer that would take a non-system wallet below zero
    - Registers destination wallets on first use
    - Provides conservation checks for tests and audits
"""

from __future__ import annotations
from collections import defaultdict
from typing import Any, Dict, Set

from .core import (
    ESCROW_WALLET, SYSTEM_WALLET,
    InsufficientFunds, LedgerError,
    is_amount,
)


class WalletBook:
    """
    In-memory value transfer between actors.

    Example:
        wallets = WalletBook()
        wallets.fund("alice", 1000)
        wallets.transfer(250, "alice", "bob")
        wallets.balance_of("bob")   # 250
    """

    def __init__(self, verbose: bool = False, test_mode: bool = False):
        """
        Args:
            verbose: Print wallet registrations and fundings
            test_mode: Allow set_balance() calls that bypass double-entry
        """
        self.verbose = verbose
        self._test_mode = test_mode
        self.balances: Dict[str, int] = defaultdict(int)
        self.registered_wallets: Set[str] = {SYSTEM_WALLET, ESCROW_WALLET}

    # ========================================================================
    # ValueTransfer PROTOCOL
    # ========================================================================

    def balance_of(self, actor: str) -> int:
        """Available value of an actor; 0 for wallets never seen."""
        return self.balances.get(actor, 0)

    def transfer(self, amount: int, source: str, dest: str) -> None:
        """
        Move amount from source to dest.

        Raises:
            ValueError: If amount is not a non-negative int
            InsufficientFunds: If source would fall below zero (system wallet exempt)
        """
        if not is_amount(amount) or amount < 0:
            raise ValueError(f"transfer amount must be a non-negative int, got {amount!r}")
        if amount == 0:
            return
        if source != SYSTEM_WALLET and self.balances.get(source, 0) < amount:
            raise InsufficientFunds(
                f"{source} has {self.balances.get(source, 0)}, needs {amount}"
            )
        self._ensure_registered(source)
        self._ensure_registered(dest)
        self.balances[source] -= amount
        self.balances[dest] += amount

    # ========================================================================
    # REGISTRATION AND FUNDING
    # ========================================================================

    def _ensure_registered(self, wallet_id: str) -> None:
        if wallet_id not in self.registered_wallets:
            self.registered_wallets.add(wallet_id)
            if self.verbose:
                print(f"📝 Registered wallet: {wallet_id}")

    def fund(self, actor: str, amount: int) -> None:
        """Issue value to an actor from the system wallet."""
        self.transfer(amount, SYSTEM_WALLET, actor)
        if self.verbose:
            print(f"💰 Funded {actor}: {amount}")

    def set_balance(self, wallet_id: str, amount: int) -> None:
        """
        Set a wallet's balance directly.

        WARNING: Bypasses double-entry accounting and breaks verify_conservation().
        Only available in test mode.

        Raises:
            LedgerError: If called when test_mode is False
        """
        if not self._test_mode:
            raise LedgerError(
                "set_balance() is disabled in production mode. "
                "Use fund() or transfer() to modify balances. "
                "Set test_mode=True when creating the WalletBook for testing."
            )
        if not is_amount(amount):
            raise ValueError(f"balance must be int, got {type(amount)}")
        self._ensure_registered(wallet_id)
        self.balances[wallet_id] = amount

    # ========================================================================
    # CONSERVATION
    # ========================================================================

    def total_supply(self) -> int:
        """Sum of all balances, in sorted wallet order."""
        return sum(self.balances.get(w, 0) for w in sorted(self.registered_wallets))

    def verify_conservation(self) -> Dict[str, Any]:
        """
        Verify the double-entry invariants.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every invariant holds
            - 'total_supply': int - Sum of all balances (0 when conserved)
            - 'negative_wallets': Dict[str, int] - Non-system wallets below zero
        """
        total = self.total_supply()
        negative = {
            w: b for w, b in sorted(self.balances.items())
            if w != SYSTEM_WALLET and b < 0
        }
        return {
            'valid': total == 0 and not negative,
            'total_supply': total,
            'negative_wallets': negative,
        }

    def clone(self) -> WalletBook:
        cloned = WalletBook(verbose=self.verbose, test_mode=self._test_mode)
        cloned.balances = defaultdict(int, self.balances)
        cloned.registered_wallets = set(self.registered_wallets)
        return cloned
