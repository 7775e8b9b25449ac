"""
Share vault kernel: deposits become proportional ownership shares.

    shares_minted   = amount * total_shares / vault_assets        (1:1 when empty)
    assets_returned = share_amount * vault_assets / total_shares

`vault_assets` is the balance the asset gateway reports for the vault holder.
It is always the balance BEFORE the operation's own transfer; the shell reads it
before pulling or pushing anything. Computing the ratio after the pull would
dilute the depositor's own deposit into it.

Yield donated directly to the vault holder raises assets-per-share for every
holder without minting anything.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from .errors import InsufficientShares, ZeroAmount, ZeroShares
from .fixed_point import checked_add, checked_sub, mul_div
from .invariants import VAULT_INVARIANTS, check_all
from .kernel import raise_on_rejection, run_step
from .ledger import Account, require_positive
from .types import Action, ActionParams, Asset, Direction, Effect, Event, StepResult, Transfer


@dataclass(frozen=True)
class VaultState:
    """Share vault state. Asset holdings live with the gateway, not here."""

    shares: Mapping[Account, int] = field(default_factory=dict)
    total_shares: int = 0

    def __post_init__(self) -> None:
        if self.total_shares < 0:
            raise ValueError("total_shares must be non-negative")


def init_vault_state() -> VaultState:
    return VaultState()


# -- Reads -------------------------------------------------------------------

def shares_of(state: VaultState, account: Account) -> int:
    return state.shares.get(account, 0)


def convert_to_shares(state: VaultState, amount: int, vault_assets: int) -> int:
    """Shares a deposit of `amount` would mint against `vault_assets`."""
    if state.total_shares == 0 or vault_assets == 0:
        return amount
    return mul_div(amount, state.total_shares, vault_assets)


def convert_to_assets(state: VaultState, share_amount: int, vault_assets: int) -> int:
    """Assets `share_amount` shares would redeem against `vault_assets`."""
    if state.total_shares == 0:
        return 0
    return mul_div(share_amount, vault_assets, state.total_shares)


# -- Transitions -------------------------------------------------------------

def enter(state: VaultState, account: Account, amount: int, vault_assets: int) -> tuple[VaultState, int]:
    """Mint shares for a deposit of `amount`.

    Raises:
        ZeroAmount: amount is zero, or too small to mint a single share.
    """
    require_positive(amount)
    minted = convert_to_shares(state, amount, vault_assets)
    if minted == 0:
        raise ZeroAmount(f"Deposit of {amount} mints no shares")
    shares = dict(state.shares)
    shares[account] = checked_add(shares.get(account, 0), minted)
    return replace(state, shares=shares, total_shares=checked_add(state.total_shares, minted)), minted


def leave(state: VaultState, account: Account, share_amount: int, vault_assets: int) -> tuple[VaultState, int]:
    """Burn `share_amount` shares and return the assets owed for them.

    Raises:
        ZeroShares: share_amount is zero (an `InsufficientShares` and a `ZeroAmount`).
        InsufficientShares: more shares than the account holds.
        ZeroAmount: the burn redeems no assets.
    """
    require_positive(share_amount, "Share amount", ZeroShares)
    held = shares_of(state, account)
    if share_amount > held:
        raise InsufficientShares(f"Burn amount exceeds balance: {share_amount} > {held}")
    returned = convert_to_assets(state, share_amount, vault_assets)
    if returned == 0:
        raise ZeroAmount(f"Burning {share_amount} shares redeems no assets")
    shares = dict(state.shares)
    shares[account] = held - share_amount
    return replace(state, shares=shares, total_shares=checked_sub(state.total_shares, share_amount)), returned


# -- Dispatch ----------------------------------------------------------------

def _op_enter(state: VaultState, params: ActionParams) -> tuple[VaultState, Effect]:
    new_state, minted = enter(state, params.account, params.amount, params.pool_balance)
    return new_state, Effect(
        event=Event.ENTERED,
        account=params.account,
        amount=params.amount,
        shares=minted,
        transfers=(Transfer(Direction.IN, Asset.STAKING, params.account, params.amount),),
    )


def _op_leave(state: VaultState, params: ActionParams) -> tuple[VaultState, Effect]:
    new_state, returned = leave(state, params.account, params.amount, params.pool_balance)
    return new_state, Effect(
        event=Event.LEFT,
        account=params.account,
        amount=returned,
        shares=params.amount,
        transfers=(Transfer(Direction.OUT, Asset.STAKING, params.account, returned),),
    )


_DISPATCH = {
    Action.ENTER: _op_enter,
    Action.LEAVE: _op_leave,
}


def _check(pre: VaultState, post: VaultState) -> list[str]:
    return check_all(VAULT_INVARIANTS, pre, post)


def step(state: VaultState, params: ActionParams, *, check_invariants: bool = True) -> StepResult[VaultState]:
    """Execute one vault action. `params.pool_balance` is the pre-transfer vault balance."""
    return run_step(_DISPATCH, state, params, invariants=_check if check_invariants else None)


def step_or_raise(
    state: VaultState, params: ActionParams, *, check_invariants: bool = True
) -> StepResult[VaultState]:
    return raise_on_rejection(step(state, params, check_invariants=check_invariants))
