"""
Lump-sum reward index kernel.

An admin injects a reward amount at an arbitrary moment and the index is bumped
once, proportionally to the stake present at that moment:

    reward_index += amount * 1e18 / total_staked

Each account carries a snapshot of the index from its last checkpoint, so
settlement is O(1):

    pending = staked_balance * (reward_index - snapshot) / 1e18

This is a pure state machine intended for the functional core:
- Inputs are integers (already read from the shell's collaborators).
- Outputs are (next_state, effect) or a taxonomy error.
- Transfers are described in the effect; the shell performs them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from .errors import NoRewardsToClaim, NoStakers
from .fixed_point import FixedPoint, checked_add
from .invariants import INDEX_INVARIANTS, check_all
from .kernel import run_step, raise_on_rejection
from .ledger import Account, StakeLedger, require_positive
from .types import Action, ActionParams, Asset, Direction, Effect, Event, StepResult, Transfer


@dataclass(frozen=True)
class IndexState:
    """Lump-sum model state."""

    ledger: StakeLedger = field(default_factory=StakeLedger)
    reward_index: FixedPoint = FixedPoint()
    reward_snapshot: Mapping[Account, FixedPoint] = field(default_factory=dict)
    earned_unclaimed: Mapping[Account, int] = field(default_factory=dict)
    total_funded: int = 0
    total_claimed: int = 0


def init_index_state() -> IndexState:
    return IndexState()


# -- Reads -------------------------------------------------------------------

def _pending(state: IndexState, account: Account) -> int:
    snapshot = state.reward_snapshot.get(account, FixedPoint.zero())
    return (state.reward_index - snapshot).scale(state.ledger.balance_of(account))


def calculate_earned(state: IndexState, account: Account) -> int:
    """Settled-but-unclaimed plus not-yet-checkpointed reward. No side effects."""
    return state.earned_unclaimed.get(account, 0) + _pending(state, account)


def compute_rewards(state: IndexState, account: Account) -> int:
    """Alias read of ``calculate_earned``."""
    return calculate_earned(state, account)


# -- Transitions -------------------------------------------------------------

def checkpoint(state: IndexState, account: Account) -> IndexState:
    """Settle pending reward for `account` and move its snapshot to the index.

    Idempotent: a second call with no index movement settles nothing.
    """
    earned = dict(state.earned_unclaimed)
    earned[account] = checked_add(earned.get(account, 0), _pending(state, account))
    snapshots = dict(state.reward_snapshot)
    snapshots[account] = state.reward_index
    return replace(state, reward_snapshot=snapshots, earned_unclaimed=earned)


def adjust_reward_index(state: IndexState, amount: int) -> IndexState:
    """Distribute `amount` over everyone staked right now.

    Raises:
        ZeroAmount: amount is zero.
        NoStakers: nothing is staked, so there is no principal to apportion against.
    """
    require_positive(amount)
    if state.ledger.total_staked == 0:
        raise NoStakers("Cannot distribute rewards with no stakers")
    delta = FixedPoint.from_ratio(amount, state.ledger.total_staked)
    return replace(
        state,
        reward_index=state.reward_index + delta,
        total_funded=checked_add(state.total_funded, amount),
    )


def stake(state: IndexState, account: Account, amount: int) -> IndexState:
    require_positive(amount)
    state = checkpoint(state, account)
    return replace(state, ledger=state.ledger.stake(account, amount))


def unstake(state: IndexState, account: Account, amount: int) -> IndexState:
    require_positive(amount)
    state = checkpoint(state, account)
    return replace(state, ledger=state.ledger.unstake(account, amount))


def claim_reward(state: IndexState, account: Account) -> tuple[IndexState, int]:
    """Checkpoint, then zero the account's unclaimed reward.

    Returns the new state and the exact amount the shell must transfer out.
    """
    state = checkpoint(state, account)
    amount = state.earned_unclaimed.get(account, 0)
    if amount == 0:
        raise NoRewardsToClaim("No rewards to claim")
    earned = dict(state.earned_unclaimed)
    earned[account] = 0
    state = replace(
        state,
        earned_unclaimed=earned,
        total_claimed=checked_add(state.total_claimed, amount),
    )
    return state, amount


# -- Dispatch ----------------------------------------------------------------

def _op_stake(state: IndexState, params: ActionParams) -> tuple[IndexState, Effect]:
    new_state = stake(state, params.account, params.amount)
    return new_state, Effect(
        event=Event.STAKED,
        account=params.account,
        amount=params.amount,
        transfers=(Transfer(Direction.IN, Asset.STAKING, params.account, params.amount),),
    )


def _op_unstake(state: IndexState, params: ActionParams) -> tuple[IndexState, Effect]:
    new_state = unstake(state, params.account, params.amount)
    return new_state, Effect(
        event=Event.UNSTAKED,
        account=params.account,
        amount=params.amount,
        transfers=(Transfer(Direction.OUT, Asset.STAKING, params.account, params.amount),),
    )


def _op_fund(state: IndexState, params: ActionParams) -> tuple[IndexState, Effect]:
    # `params.account` is the funder the reward asset is pulled from.
    new_state = adjust_reward_index(state, params.amount)
    return new_state, Effect(
        event=Event.REWARD_INDEX_ADJUSTED,
        account=params.account,
        amount=params.amount,
        transfers=(Transfer(Direction.IN, Asset.REWARD, params.account, params.amount),),
    )


def _op_claim(state: IndexState, params: ActionParams) -> tuple[IndexState, Effect]:
    new_state, amount = claim_reward(state, params.account)
    return new_state, Effect(
        event=Event.REWARD_PAID,
        account=params.account,
        amount=amount,
        transfers=(Transfer(Direction.OUT, Asset.REWARD, params.account, amount),),
    )


_DISPATCH = {
    Action.STAKE: _op_stake,
    Action.UNSTAKE: _op_unstake,
    Action.FUND: _op_fund,
    Action.CLAIM: _op_claim,
}


def _check(pre: IndexState, post: IndexState) -> list[str]:
    return check_all(INDEX_INVARIANTS, pre, post)


def step(state: IndexState, params: ActionParams, *, check_invariants: bool = True) -> StepResult[IndexState]:
    """Execute one lump-sum action against the given state."""
    return run_step(_DISPATCH, state, params, invariants=_check if check_invariants else None)


def step_or_raise(
    state: IndexState, params: ActionParams, *, check_invariants: bool = True
) -> StepResult[IndexState]:
    """Like ``step()`` but raises the rejecting ``StakingError``."""
    return raise_on_rejection(step(state, params, check_invariants=check_invariants))
