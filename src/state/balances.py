"""
Multi-asset token ledger with deterministic ordering.

Implements Ledger[Account, AssetAddress] -> Amount for the in-memory
collaborators (treasury, minter, auction payouts).
"""

from typing import Dict, Tuple

from ..core.range_bound.errors import InvalidParamsError


# Type aliases
Account = str  # address-like identifier
AssetAddress = str
Amount = int  # Non-negative integer (arbitrary precision)

Snapshot = Tuple[Tuple[Tuple[Account, AssetAddress], Amount], ...]


class TokenLedger:
    """
    Deterministic balance table mapping (account, asset) -> amount.

    Zero balances are dropped so `snapshot()` output only depends on the
    non-zero holdings, sorted by key.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Account, AssetAddress], Amount] = {}

    def balance_of(self, account: Account, asset: AssetAddress) -> Amount:
        """Balance for (account, asset). Returns 0 if not found."""
        return self._balances.get((account, asset), 0)

    def _set(self, account: Account, asset: AssetAddress, amount: Amount) -> None:
        if amount < 0:
            raise InvalidParamsError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((account, asset), None)
        else:
            self._balances[(account, asset)] = amount

    def mint(self, account: Account, asset: AssetAddress, amount: Amount) -> None:
        if amount < 0:
            raise InvalidParamsError(f"Mint amount must be non-negative: {amount}")
        self._set(account, asset, self.balance_of(account, asset) + amount)

    def burn(self, account: Account, asset: AssetAddress, amount: Amount) -> None:
        """
        Remove *amount* from (account, asset).

        Raises:
            InvalidParamsError: If amount is negative or exceeds the balance
        """
        if amount < 0:
            raise InvalidParamsError(f"Burn amount must be non-negative: {amount}")
        current = self.balance_of(account, asset)
        if amount > current:
            raise InvalidParamsError(
                f"Insufficient balance: {account} holds {current} of {asset}, needs {amount}"
            )
        self._set(account, asset, current - amount)

    def transfer(self, sender: Account, recipient: Account, asset: AssetAddress, amount: Amount) -> None:
        self.burn(sender, asset, amount)
        self.mint(recipient, asset, amount)

    def total_supply(self, asset: AssetAddress) -> Amount:
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def snapshot(self) -> Snapshot:
        return tuple(sorted(self._balances.items()))

    def restore(self, snapshot: Snapshot) -> None:
        self._balances = dict(snapshot)

    def __repr__(self) -> str:
        return f"TokenLedger({len(self._balances)} entries)"
