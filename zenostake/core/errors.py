"""Exception types for the staking kernels and engines.

Kernels raise these directly. ``step()`` in ``kernel.py`` turns them into a
rejected ``StepResult`` (``rejection`` is the ``code``), and ``step_or_raise()``
re-raises the original instance for callers that prefer exceptions.
"""

from __future__ import annotations


class StakingError(Exception):
    """Base class; ``code`` is the stable, user-visible rejection reason."""

    code = "staking_error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.code
        super().__init__(self.message)


class ZeroAmount(StakingError):
    """Raised when an amount (or duration) that must be positive is zero."""

    code = "zero_amount"


class InsufficientBalance(StakingError):
    """Raised on a stake, share or asset shortfall."""

    code = "insufficient_balance"


class InsufficientShares(InsufficientBalance):
    """Raised when burning more vault shares than an account holds."""

    code = "insufficient_shares"


class ZeroShares(InsufficientShares, ZeroAmount):
    """Raised when burning zero vault shares; both a burn shortfall and a zero amount."""

    code = "insufficient_shares"


class NoRewardsToClaim(StakingError):
    code = "no_rewards_to_claim"


class NoStakers(StakingError):
    """Raised when lump-sum funding arrives while nothing is staked."""

    code = "no_stakers"


class Unauthorized(StakingError):
    code = "unauthorized"


class GatewayTransferFailed(StakingError):
    """Raised when the asset gateway reports a failed transfer."""

    code = "gateway_transfer_failed"


class ReentrantCall(StakingError):
    """Raised when a gateway re-enters the engine while a deposit is being pulled."""

    code = "reentrant_call"


class UnfundedDeposit(GatewayTransferFailed, ZeroAmount):
    """Raised when a zero deposit comes from a holder with no asset at all."""

    code = "gateway_transfer_failed"


class ArithmeticOverflow(StakingError):
    """Raised when a checked operation leaves the ``[0, MAX_UINT]`` domain."""

    code = "arithmetic_overflow"


class InvariantViolation(StakingError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
