"""
Core staking kernels (functional core).

Three reward models over one stake ledger:
- `reward_index`: lump-sum funding bumps a per-token index,
- `reward_schedule`: funding sets a per-second rate over a period,
- `share_vault`: deposits mint proportional shares.
"""

from .errors import (
    ArithmeticOverflow,
    GatewayTransferFailed,
    InsufficientBalance,
    InsufficientShares,
    InvariantViolation,
    NoRewardsToClaim,
    NoStakers,
    ReentrantCall,
    StakingError,
    Unauthorized,
    UnfundedDeposit,
    ZeroAmount,
    ZeroShares,
)
from .fixed_point import PRECISION, PRECISION_EXPONENT, FixedPoint
from .ledger import StakeLedger
from .reward_index import IndexState, init_index_state
from .reward_schedule import ScheduleState, init_schedule_state
from .share_vault import VaultState, init_vault_state
from .types import Action, ActionParams, Asset, Direction, Effect, Event, StepResult, Transfer

__all__ = [
    "ArithmeticOverflow",
    "GatewayTransferFailed",
    "InsufficientBalance",
    "InsufficientShares",
    "InvariantViolation",
    "NoRewardsToClaim",
    "NoStakers",
    "ReentrantCall",
    "StakingError",
    "Unauthorized",
    "UnfundedDeposit",
    "ZeroAmount",
    "ZeroShares",
    "PRECISION",
    "PRECISION_EXPONENT",
    "FixedPoint",
    "StakeLedger",
    "IndexState",
    "init_index_state",
    "ScheduleState",
    "init_schedule_state",
    "VaultState",
    "init_vault_state",
    "Action",
    "ActionParams",
    "Asset",
    "Direction",
    "Effect",
    "Event",
    "StepResult",
    "Transfer",
]
