"""
Continuous reward schedule kernel.

Reward flows at `reward_rate` units per second between the last funding and
`reward_end_time`. The per-token accumulator advances lazily:

    reward_per_token = stored + rate * (min(now, end) - last_update) * 1e18 / total_staked

and each account settles against its own `reward_per_token_paid` snapshot.

Funding merges into an active period: the unspent remainder of the running
period is folded into the new amount and re-spread over the new duration.

The clock is an imperative-shell concern: every function takes `now` as a
plain int, so the kernel itself is deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from .errors import InsufficientBalance, NoRewardsToClaim, Unauthorized
from .fixed_point import FixedPoint, checked_add, checked_mul
from .invariants import SCHEDULE_INVARIANTS, check_all
from .kernel import raise_on_rejection, run_step
from .ledger import Account, StakeLedger, require_positive
from .types import Action, ActionParams, Asset, Direction, Effect, Event, StepResult, Transfer


@dataclass(frozen=True)
class ScheduleState:
    """Continuous model state."""

    ledger: StakeLedger = field(default_factory=StakeLedger)
    reward_rate: int = 0
    reward_duration: int = 0
    reward_end_time: int = 0
    last_update_time: int = 0
    reward_per_token_stored: FixedPoint = FixedPoint()
    reward_per_token_paid: Mapping[Account, FixedPoint] = field(default_factory=dict)
    rewards: Mapping[Account, int] = field(default_factory=dict)
    total_funded: int = 0
    total_claimed: int = 0

    def __post_init__(self) -> None:
        if self.reward_rate < 0:
            raise ValueError("reward_rate must be non-negative")
        if self.reward_duration < 0:
            raise ValueError("reward_duration must be non-negative")
        if self.last_update_time < 0 or self.reward_end_time < 0:
            raise ValueError("timestamps must be non-negative")


def init_schedule_state() -> ScheduleState:
    return ScheduleState()


# -- Reads -------------------------------------------------------------------

def last_time_reward_applicable(state: ScheduleState, now: int) -> int:
    return min(now, state.reward_end_time)


def reward_per_token(state: ScheduleState, now: int) -> FixedPoint:
    """Accumulator value at `now`. With nothing staked nothing accrues."""
    if state.ledger.total_staked == 0:
        return state.reward_per_token_stored
    elapsed = max(last_time_reward_applicable(state, now) - state.last_update_time, 0)
    emitted = checked_mul(state.reward_rate, elapsed)
    return state.reward_per_token_stored + FixedPoint.from_ratio(emitted, state.ledger.total_staked)


def calculate_earned(state: ScheduleState, account: Account, now: int) -> int:
    """Settled plus accruing reward for `account` at `now`. No side effects."""
    paid = state.reward_per_token_paid.get(account, FixedPoint.zero())
    accruing = (reward_per_token(state, now) - paid).scale(state.ledger.balance_of(account))
    return state.rewards.get(account, 0) + accruing


def reward_for_duration(state: ScheduleState) -> int:
    """Total emission of the current period at the current rate."""
    return state.reward_rate * state.reward_duration


# -- Transitions -------------------------------------------------------------

def update_reward(state: ScheduleState, now: int, account: Optional[Account] = None) -> ScheduleState:
    """Global checkpoint, plus a per-account checkpoint when `account` is given."""
    stored = reward_per_token(state, now)
    state = replace(
        state,
        reward_per_token_stored=stored,
        last_update_time=last_time_reward_applicable(state, now),
    )
    if account is None:
        return state

    rewards = dict(state.rewards)
    rewards[account] = calculate_earned(state, account, now)
    paid = dict(state.reward_per_token_paid)
    paid[account] = stored
    return replace(state, rewards=rewards, reward_per_token_paid=paid)


def stake_tokens(state: ScheduleState, account: Account, amount: int, now: int) -> ScheduleState:
    require_positive(amount)
    state = update_reward(state, now, account)
    return replace(state, ledger=state.ledger.stake(account, amount))


def withdraw_tokens(state: ScheduleState, account: Account, amount: int, now: int) -> ScheduleState:
    require_positive(amount)
    state = update_reward(state, now, account)
    return replace(state, ledger=state.ledger.unstake(account, amount))


def claim_rewards(state: ScheduleState, account: Account, now: int) -> tuple[ScheduleState, int]:
    """Checkpoint, then zero the account's settled reward.

    Returns the new state and the exact amount the shell must transfer out.
    """
    state = update_reward(state, now, account)
    amount = state.rewards.get(account, 0)
    if amount == 0:
        raise NoRewardsToClaim("No rewards to claim")
    rewards = dict(state.rewards)
    rewards[account] = 0
    state = replace(state, rewards=rewards, total_claimed=checked_add(state.total_claimed, amount))
    return state, amount


def notify_reward_distribution(
    state: ScheduleState,
    amount: int,
    duration: int,
    now: int,
    *,
    reward_balance: int,
    auth_ok: bool,
) -> ScheduleState:
    """Start a reward period, or merge into the running one.

    If the previous period has elapsed the new rate is ``amount / duration``.
    Otherwise the unspent ``rate * (end - now)`` is added to `amount` first.
    Either way the period restarts at `now` and ends at ``now + duration``.

    Raises:
        Unauthorized: caller is not the owner.
        ZeroAmount: amount or duration is zero.
        InsufficientBalance: the pool holds less reward asset than `amount`.
    """
    if not auth_ok:
        raise Unauthorized("Unauthorized access")
    require_positive(amount)
    require_positive(duration, "Duration")
    if reward_balance < amount:
        raise InsufficientBalance(f"Insufficient balance: {reward_balance} < {amount}")

    state = update_reward(state, now)
    if now >= state.reward_end_time:
        rate = amount // duration
    else:
        remaining = checked_mul(state.reward_rate, state.reward_end_time - now)
        rate = checked_add(amount, remaining) // duration

    return replace(
        state,
        reward_rate=rate,
        reward_duration=duration,
        reward_end_time=checked_add(now, duration),
        last_update_time=now,
        total_funded=checked_add(state.total_funded, amount),
    )


# -- Dispatch ----------------------------------------------------------------

def _op_stake(state: ScheduleState, params: ActionParams) -> tuple[ScheduleState, Effect]:
    new_state = stake_tokens(state, params.account, params.amount, params.now)
    return new_state, Effect(
        event=Event.STAKED,
        account=params.account,
        amount=params.amount,
        transfers=(Transfer(Direction.IN, Asset.STAKING, params.account, params.amount),),
    )


def _op_unstake(state: ScheduleState, params: ActionParams) -> tuple[ScheduleState, Effect]:
    new_state = withdraw_tokens(state, params.account, params.amount, params.now)
    return new_state, Effect(
        event=Event.UNSTAKED,
        account=params.account,
        amount=params.amount,
        transfers=(Transfer(Direction.OUT, Asset.STAKING, params.account, params.amount),),
    )


def _op_fund(state: ScheduleState, params: ActionParams) -> tuple[ScheduleState, Effect]:
    # Funding only re-derives the rate; the reward asset is already held by the pool.
    new_state = notify_reward_distribution(
        state,
        params.amount,
        params.duration,
        params.now,
        reward_balance=params.pool_balance,
        auth_ok=params.auth_ok,
    )
    return new_state, Effect(event=Event.REWARD_NOTIFIED, account=params.account, amount=params.amount)


def _op_claim(state: ScheduleState, params: ActionParams) -> tuple[ScheduleState, Effect]:
    new_state, amount = claim_rewards(state, params.account, params.now)
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


def _check(pre: ScheduleState, post: ScheduleState) -> list[str]:
    return check_all(SCHEDULE_INVARIANTS, pre, post)


def step(
    state: ScheduleState, params: ActionParams, *, check_invariants: bool = True
) -> StepResult[ScheduleState]:
    """Execute one continuous-schedule action against the given state."""
    return run_step(_DISPATCH, state, params, invariants=_check if check_invariants else None)


def step_or_raise(
    state: ScheduleState, params: ActionParams, *, check_invariants: bool = True
) -> StepResult[ScheduleState]:
    return raise_on_rejection(step(state, params, check_invariants=check_invariants))
