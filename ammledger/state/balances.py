"""
Fungible-token balance ledger.

Implements TokenLedger[AccountId, AssetId] -> Amount with atomic
transfer / mint / burn primitives.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Tuple

from ..errors import InvalidAmount


# Type aliases
AccountId = str  # holder / principal identifier
AssetId = str  # fungible asset identifier ("token-a", "lp-token:1", ...)
Amount = int  # Non-negative integer

# Unsigned 128-bit ceiling of the source ledger.
MAX_AMOUNT = (1 << 128) - 1


def require_amount(value: Any, *, name: str) -> Amount:
    """
    Validate an unsigned amount.

    Raises:
        TypeError: If value is not an int (bools are rejected)
        InvalidAmount: If value is negative or exceeds MAX_AMOUNT
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative: {value}")
    if value > MAX_AMOUNT:
        raise InvalidAmount(f"{name} exceeds u128: {value}")
    return int(value)


class TokenLedgerError(Exception):
    """Base class for token ledger failures."""


class InsufficientBalance(TokenLedgerError):
    def __init__(self, account: AccountId, asset: AssetId, balance: Amount, requested: Amount) -> None:
        self.account = account
        self.asset = asset
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient {asset} balance for {account}: {balance} < {requested}"
        )


class TokenLedger:
    """
    Balance table mapping (account, asset) -> amount.

    Each primitive is atomic: it either applies in full or raises and leaves
    every balance untouched. Zero balances are omitted to keep the table sparse.
    Do not rely on dict iteration order; callers sort keys at hashing
    boundaries (see `ammledger/state/state_root.py`).
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[AccountId, AssetId], Amount] = {}
        self._supply: Dict[AssetId, Amount] = {}
        self._lock = threading.RLock()

    def get(self, account: AccountId, asset: AssetId) -> Amount:
        """Get balance for (account, asset). Returns 0 if not found."""
        with self._lock:
            return self._balances.get((account, asset), 0)

    def total_supply(self, asset: AssetId) -> Amount:
        with self._lock:
            return self._supply.get(asset, 0)

    def _set(self, account: AccountId, asset: AssetId, amount: Amount) -> None:
        if amount == 0:
            self._balances.pop((account, asset), None)
        else:
            self._balances[(account, asset)] = amount

    def transfer(self, asset: AssetId, amount: Amount, sender: AccountId, recipient: AccountId) -> None:
        """
        Move `amount` of `asset` from `sender` to `recipient`.

        Raises:
            InvalidAmount: If amount is not positive
            InsufficientBalance: If sender holds less than amount
        """
        amount = require_amount(amount, name="amount")
        if amount == 0:
            raise InvalidAmount("transfer amount must be positive")
        with self._lock:
            current = self._balances.get((sender, asset), 0)
            if current < amount:
                raise InsufficientBalance(sender, asset, current, amount)
            if sender == recipient:
                return
            credited = self._balances.get((recipient, asset), 0) + amount
            if credited > MAX_AMOUNT:
                raise InvalidAmount(f"balance of {recipient} would exceed u128")
            self._set(sender, asset, current - amount)
            self._set(recipient, asset, credited)

    def mint(self, asset: AssetId, amount: Amount, recipient: AccountId) -> None:
        """Create `amount` new units of `asset` for `recipient`."""
        amount = require_amount(amount, name="amount")
        if amount == 0:
            raise InvalidAmount("mint amount must be positive")
        with self._lock:
            supply = self._supply.get(asset, 0) + amount
            if supply > MAX_AMOUNT:
                raise InvalidAmount(f"total supply of {asset} would exceed u128")
            self._set(recipient, asset, self._balances.get((recipient, asset), 0) + amount)
            self._supply[asset] = supply

    def burn(self, asset: AssetId, amount: Amount, holder: AccountId) -> None:
        """Destroy `amount` units of `asset` held by `holder`."""
        amount = require_amount(amount, name="amount")
        if amount == 0:
            raise InvalidAmount("burn amount must be positive")
        with self._lock:
            current = self._balances.get((holder, asset), 0)
            if current < amount:
                raise InsufficientBalance(holder, asset, current, amount)
            self._set(holder, asset, current - amount)
            remaining = self._supply.get(asset, 0) - amount
            if remaining:
                self._supply[asset] = remaining
            else:
                self._supply.pop(asset, None)

    def get_all_balances(self) -> Dict[Tuple[AccountId, AssetId], Amount]:
        """
        Get all balances as a dictionary.

        Returns:
            Dictionary mapping (account, asset) -> amount
        """
        with self._lock:
            return dict(self._balances)

    def get_balances_for_asset(self, asset: AssetId) -> Dict[AccountId, Amount]:
        with self._lock:
            return {acct: amount for (acct, a), amount in self._balances.items() if a == asset}

    def verify_supply(self) -> bool:
        """
        Verify that per-asset balances sum to the tracked total supply.

        Returns:
            True if every asset's balances add up to its supply
        """
        with self._lock:
            sums: Dict[AssetId, Amount] = {}
            for (_acct, asset), amount in self._balances.items():
                if amount < 0:
                    return False
                sums[asset] = sums.get(asset, 0) + amount
            return sums == {a: s for a, s in self._supply.items() if s}

    def __repr__(self) -> str:
        return f"TokenLedger({len(self._balances)} entries)"
