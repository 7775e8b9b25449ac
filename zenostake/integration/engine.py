"""
Transactional engines (imperative shell) around the staking kernels.

Each engine owns one immutable kernel state plus its collaborators (asset
gateways, clock, access control) and runs every public operation as a single
all-or-nothing transaction:

1. Read the clock and gateway balances the kernel needs.
2. Run the kernel step (checks + new state + described transfers).
3. Pull inbound transfers. Nothing is committed yet, so a failed pull leaves
   the engine untouched.
4. Commit the new state.
5. Push outbound transfers. Rewards and redeemed assets were already zeroed or
   burned in step 4, so a gateway that re-enters the engine here sees the
   settled state and cannot claim twice. A failed push restores the
   pre-operation state.

Re-entering the engine while a deposit is being pulled (step 3) is rejected
with ``ReentrantCall``: the new state is not committed at that point.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, Mapping, Optional, TypeVar

from ..config import EngineConfig
from ..core import reward_index, reward_schedule, share_vault
from ..core.errors import GatewayTransferFailed, ReentrantCall, StakingError, UnfundedDeposit
from ..core.fixed_point import FixedPoint
from ..core.reward_index import IndexState
from ..core.reward_schedule import ScheduleState
from ..core.share_vault import VaultState
from ..core.types import Action, ActionParams, Asset, Direction, Effect, StepResult, Transfer
from .access import AccessControl
from .clock import Clock
from .gateway import AssetGateway

logger = logging.getLogger(__name__)

S = TypeVar("S")
KernelStep = Callable[..., StepResult[S]]


class _TransactionalEngine(Generic[S]):
    """Shared transaction protocol; subclasses expose the public operations."""

    def __init__(
        self,
        state: S,
        kernel_step: KernelStep,
        gateways: Mapping[Asset, AssetGateway],
        config: EngineConfig,
    ) -> None:
        self._state = state
        self._kernel_step = kernel_step
        self._gateways = dict(gateways)
        self._pulling = False
        self.config = config
        self.events: list[Effect] = []

    @property
    def state(self) -> S:
        return self._state

    def _execute(self, params: ActionParams) -> Effect:
        if self._pulling:
            raise ReentrantCall(f"{params.action.value} re-entered while a deposit is being pulled")

        pre = self._state
        try:
            result = self._kernel_step(pre, params, check_invariants=self.config.check_invariants)
        except StakingError as exc:
            logger.warning("%s rejected account=%s amount=%d: %s", params.action.value, params.account, params.amount, exc.code)
            raise
        effect = result.effect

        inbound = [t for t in effect.transfers if t.direction is Direction.IN]
        outbound = [t for t in effect.transfers if t.direction is Direction.OUT]

        self._pulling = True
        try:
            for transfer in inbound:
                self._move(transfer)
        finally:
            self._pulling = False

        self._state = result.state
        try:
            for transfer in outbound:
                self._move(transfer)
        except GatewayTransferFailed:
            self._state = pre
            raise

        self.events.append(effect)
        logger.info(
            "%s account=%s amount=%d shares=%d",
            effect.event.value, effect.account, effect.amount, effect.shares,
        )
        return effect

    def _move(self, transfer: Transfer) -> None:
        gateway = self._gateways[transfer.asset]
        if transfer.direction is Direction.IN:
            ok = gateway.transfer_in(transfer.account, transfer.amount)
        else:
            ok = gateway.transfer_out(transfer.account, transfer.amount)
        if not ok:
            logger.error(
                "gateway %s transfer %s failed account=%s amount=%d",
                transfer.asset.value, transfer.direction.value, transfer.account, transfer.amount,
            )
            raise GatewayTransferFailed(
                f"{transfer.asset.value} transfer {transfer.direction.value} of {transfer.amount} "
                f"for {transfer.account} failed"
            )


class LumpSumStakingEngine(_TransactionalEngine[IndexState]):
    """Stake ledger + lump-sum reward index."""

    def __init__(
        self,
        staking_gateway: AssetGateway,
        reward_gateway: AssetGateway,
        *,
        config: Optional[EngineConfig] = None,
        state: Optional[IndexState] = None,
    ) -> None:
        super().__init__(
            state if state is not None else reward_index.init_index_state(),
            reward_index.step_or_raise,
            {Asset.STAKING: staking_gateway, Asset.REWARD: reward_gateway},
            config or EngineConfig(),
        )

    def stake(self, account: str, amount: int) -> Effect:
        return self._execute(ActionParams(action=Action.STAKE, account=account, amount=amount))

    def unstake(self, account: str, amount: int) -> Effect:
        return self._execute(ActionParams(action=Action.UNSTAKE, account=account, amount=amount))

    def fund_lump_sum(self, amount: int, funder: str) -> Effect:
        """Pull `amount` reward asset from `funder` and credit it to current stakers."""
        return self._execute(ActionParams(action=Action.FUND, account=funder, amount=amount))

    def claim_reward(self, account: str) -> Effect:
        return self._execute(ActionParams(action=Action.CLAIM, account=account))

    # Reads

    def calculate_earned(self, account: str) -> int:
        return reward_index.calculate_earned(self._state, account)

    def compute_rewards(self, account: str) -> int:
        return reward_index.compute_rewards(self._state, account)

    def staked_balance(self, account: str) -> int:
        return self._state.ledger.balance_of(account)

    def earned_unclaimed(self, account: str) -> int:
        return self._state.earned_unclaimed.get(account, 0)

    @property
    def total_staked(self) -> int:
        return self._state.ledger.total_staked

    @property
    def reward_index(self) -> FixedPoint:
        return self._state.reward_index

    adjust_reward_index = fund_lump_sum


class ContinuousStakingEngine(_TransactionalEngine[ScheduleState]):
    """Stake ledger + time-based reward schedule."""

    def __init__(
        self,
        staking_gateway: AssetGateway,
        reward_gateway: AssetGateway,
        clock: Clock,
        access: AccessControl,
        *,
        config: Optional[EngineConfig] = None,
        state: Optional[ScheduleState] = None,
    ) -> None:
        super().__init__(
            state if state is not None else reward_schedule.init_schedule_state(),
            reward_schedule.step_or_raise,
            {Asset.STAKING: staking_gateway, Asset.REWARD: reward_gateway},
            config or EngineConfig(),
        )
        self.clock = clock
        self.access = access

    def stake(self, account: str, amount: int) -> Effect:
        return self._execute(
            ActionParams(action=Action.STAKE, account=account, amount=amount, now=self.clock.now())
        )

    def unstake(self, account: str, amount: int) -> Effect:
        return self._execute(
            ActionParams(action=Action.UNSTAKE, account=account, amount=amount, now=self.clock.now())
        )

    def fund_continuous(self, amount: int, *, caller: str, duration: Optional[int] = None) -> Effect:
        """Start or top up a reward period. The pool must already hold `amount` reward asset."""
        if duration is None:
            duration = self.config.default_reward_duration
        return self._execute(
            ActionParams(
                action=Action.FUND,
                account=caller,
                amount=amount,
                duration=duration,
                now=self.clock.now(),
                pool_balance=self._gateways[Asset.REWARD].pool_balance(),
                auth_ok=self.access.is_owner(caller),
            )
        )

    def claim_reward(self, account: str) -> Effect:
        return self._execute(ActionParams(action=Action.CLAIM, account=account, now=self.clock.now()))

    # Reads

    def calculate_earned(self, account: str) -> int:
        return reward_schedule.calculate_earned(self._state, account, self.clock.now())

    def reward_per_token(self) -> FixedPoint:
        return reward_schedule.reward_per_token(self._state, self.clock.now())

    def reward_for_duration(self) -> int:
        return reward_schedule.reward_for_duration(self._state)

    def staked_balance(self, account: str) -> int:
        return self._state.ledger.balance_of(account)

    @property
    def total_staked(self) -> int:
        return self._state.ledger.total_staked

    @property
    def reward_rate(self) -> int:
        return self._state.reward_rate

    @property
    def reward_end_time(self) -> int:
        return self._state.reward_end_time

    @property
    def last_update_time(self) -> int:
        return self._state.last_update_time

    stake_tokens = stake
    withdraw_tokens = unstake
    claim_rewards = claim_reward

    def notify_reward_distribution(self, amount: int, duration: Optional[int], caller: str) -> Effect:
        """Positional ``(amount, duration, caller)`` form of `fund_continuous`; ``None`` duration uses the default."""
        return self.fund_continuous(amount, caller=caller, duration=duration)


class ShareVaultEngine(_TransactionalEngine[VaultState]):
    """Deposits in, proportional shares out."""

    def __init__(
        self,
        gateway: AssetGateway,
        *,
        config: Optional[EngineConfig] = None,
        state: Optional[VaultState] = None,
    ) -> None:
        super().__init__(
            state if state is not None else share_vault.init_vault_state(),
            share_vault.step_or_raise,
            {Asset.STAKING: gateway},
            config or EngineConfig(),
        )

    def enter(self, account: str, amount: int) -> Effect:
        """Deposit `amount`; ``effect.shares`` is the number of shares minted.

        A zero deposit from a holder with no asset fails as the transfer would,
        with ``UnfundedDeposit`` (also a ``ZeroAmount``).
        """
        if amount == 0 and self._gateways[Asset.STAKING].balance_of(account) == 0:
            logger.warning("enter rejected account=%s amount=0: %s", account, UnfundedDeposit.code)
            raise UnfundedDeposit(f"{account} holds no asset to deposit")
        return self._execute(
            ActionParams(action=Action.ENTER, account=account, amount=amount, pool_balance=self.total_assets())
        )

    def leave(self, account: str, share_amount: int) -> Effect:
        """Burn `share_amount`; ``effect.amount`` is the asset amount returned."""
        return self._execute(
            ActionParams(action=Action.LEAVE, account=account, amount=share_amount, pool_balance=self.total_assets())
        )

    # Reads

    def total_assets(self) -> int:
        return self._gateways[Asset.STAKING].pool_balance()

    def preview_enter(self, amount: int) -> int:
        return share_vault.convert_to_shares(self._state, amount, self.total_assets())

    def preview_leave(self, share_amount: int) -> int:
        return share_vault.convert_to_assets(self._state, share_amount, self.total_assets())

    def shares_of(self, account: str) -> int:
        return share_vault.shares_of(self._state, account)

    @property
    def total_shares(self) -> int:
        return self._state.total_shares
