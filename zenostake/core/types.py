"""Data types shared by the staking kernels.

All types are frozen dataclasses (immutable).

Units/conventions:
- amounts are integer asset units (no decimals at this layer),
- `now` / `duration` are integer seconds from the injected clock,
- per-unit accumulators are `FixedPoint` values scaled by 1e18.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Generic, Optional, TypeVar

from .errors import StakingError

S = TypeVar("S")


@unique
class Action(Enum):
    """One member per kernel operation."""
    STAKE = "stake"
    UNSTAKE = "unstake"
    CLAIM = "claim"
    FUND = "fund"
    ENTER = "enter"
    LEAVE = "leave"


@unique
class Event(Enum):
    """One member per emitted event type."""
    STAKED = "Staked"
    UNSTAKED = "Unstaked"
    REWARD_PAID = "RewardPaid"
    REWARD_INDEX_ADJUSTED = "RewardIndexAdjusted"
    REWARD_NOTIFIED = "RewardNotified"
    ENTERED = "Entered"
    LEFT = "Left"


@unique
class Direction(Enum):
    IN = "in"    # asset pulled from an account into the pool
    OUT = "out"  # asset pushed from the pool to an account


@unique
class Asset(Enum):
    STAKING = "staking"
    REWARD = "reward"


@dataclass(frozen=True)
class Transfer:
    """An asset movement the shell must perform through a gateway."""

    direction: Direction
    asset: Asset
    account: str
    amount: int


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields default to 0/False/""."""

    action: Action
    account: str = ""
    amount: int = 0            # stake / unstake / fund / enter / leave (shares)
    now: int = 0               # continuous model: clock reading for the step
    duration: int = 0          # continuous fund
    pool_balance: int = 0      # continuous fund: reward asset held; vault: assets held
    auth_ok: bool = False      # continuous fund


@dataclass(frozen=True)
class Effect:
    """Post-state observables emitted after a successful step."""

    event: Event
    account: str = ""
    amount: int = 0            # asset amount moved, or reward credited to the index
    shares: int = 0            # vault: shares minted / burned
    transfers: tuple[Transfer, ...] = ()


@dataclass(frozen=True)
class StepResult(Generic[S]):
    """Result of a single kernel step."""

    accepted: bool
    state: Optional[S] = None
    effect: Optional[Effect] = None
    rejection: Optional[str] = None
    error: Optional[StakingError] = None
