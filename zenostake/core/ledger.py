"""
Per-account staked balances with a pool-wide total.

Implements StakeLedger[Account] -> Amount. This is pure bookkeeping: it never
moves the underlying asset. The owning reward model checkpoints before calling
it and the engine moves the asset afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from .errors import InsufficientBalance, ZeroAmount
from .fixed_point import checked_add, checked_sub

# Type aliases
Account = str
Amount = int  # Non-negative integer (arbitrary precision, bounded by MAX_UINT)


@dataclass(frozen=True)
class StakeLedger:
    """
    Immutable ledger mapping account -> staked amount.

    Notes:
    - Every update returns a new ledger; the original is never mutated, so a
      rejected operation leaves the caller's ledger untouched.
    - Accounts are created on first stake and kept at zero balance afterwards.
    """

    balances: Mapping[Account, Amount] = field(default_factory=dict)
    total_staked: Amount = 0

    def balance_of(self, account: Account) -> Amount:
        """Get staked balance for account. Returns 0 if never seen."""
        return self.balances.get(account, 0)

    def accounts(self) -> tuple[Account, ...]:
        """All accounts that ever staked, in sorted order."""
        return tuple(sorted(self.balances))

    def stake(self, account: Account, amount: Amount) -> StakeLedger:
        """
        Credit `amount` to `account` and to the pool total.

        Raises:
            ZeroAmount: If amount is zero
            ValueError: If amount is negative
        """
        require_positive(amount)
        balances: Dict[Account, Amount] = dict(self.balances)
        balances[account] = checked_add(balances.get(account, 0), amount)
        return StakeLedger(balances=balances, total_staked=checked_add(self.total_staked, amount))

    def unstake(self, account: Account, amount: Amount) -> StakeLedger:
        """
        Debit `amount` from `account` and from the pool total.

        Raises:
            ZeroAmount: If amount is zero
            InsufficientBalance: If amount exceeds the staked balance
        """
        require_positive(amount)
        current = self.balance_of(account)
        if amount > current:
            raise InsufficientBalance(f"Insufficient balance: {amount} > {current}")
        balances: Dict[Account, Amount] = dict(self.balances)
        balances[account] = current - amount
        return StakeLedger(balances=balances, total_staked=checked_sub(self.total_staked, amount))

    def verify_conservation(self) -> bool:
        """True iff total_staked equals the literal sum of balances."""
        return self.total_staked == sum(self.balances.values())

    def verify_non_negative(self) -> bool:
        return self.total_staked >= 0 and all(v >= 0 for v in self.balances.values())

    def __repr__(self) -> str:
        return f"StakeLedger({len(self.balances)} accounts, total_staked={self.total_staked})"


def require_positive(amount: Amount, what: str = "Amount", zero_error: type[ZeroAmount] = ZeroAmount) -> None:
    """Reject non-int, negative and zero amounts (zero is never a silent no-op).

    `zero_error` lets a caller raise a more specific `ZeroAmount` subclass.
    """
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"{what} must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"{what} must be non-negative: {amount}")
    if amount == 0:
        raise zero_error(f"{what} must be greater than 0")
