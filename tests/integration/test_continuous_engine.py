from __future__ import annotations

import pytest

from zenostake.config import EngineConfig
from zenostake.core.errors import (
    InsufficientBalance,
    NoRewardsToClaim,
    ReentrantCall,
    Unauthorized,
    ZeroAmount,
)
from zenostake.core.types import Event
from zenostake.integration import (
    ContinuousStakingEngine,
    InMemoryToken,
    ManualClock,
    SingleOwner,
    TokenGateway,
)

E18 = 10**18
DAY = 86_400
POOL = EngineConfig().pool_address
TOLERANCE = E18 // 10_000


def _rig(start: int = 1_000, config: EngineConfig | None = None):
    staking_token = InMemoryToken("STK")
    reward_token = InMemoryToken("RWD")
    for holder in ("alice", "bob"):
        staking_token.mint(holder, 1_000 * E18)
    reward_token.mint(POOL, 1_000 * E18)
    clock = ManualClock(start=start)
    staking_gw = TokenGateway(staking_token, POOL)
    reward_gw = TokenGateway(reward_token, POOL)
    engine = ContinuousStakingEngine(staking_gw, reward_gw, clock, SingleOwner("owner"), config=config)
    return engine, clock, staking_token, reward_token, staking_gw, reward_gw


def _setup(start: int = 1_000, config: EngineConfig | None = None):
    engine, clock, staking_token, reward_token, _, _ = _rig(start, config)
    return engine, clock, staking_token, reward_token


def test_fund_uses_default_duration() -> None:
    engine, clock, _, _ = _setup()
    effect = engine.fund_continuous(1_000 * E18, caller="owner")

    assert effect.event == Event.REWARD_NOTIFIED
    assert engine.reward_rate == 1_000 * E18 // DAY
    assert engine.reward_end_time == clock.now() + DAY
    assert engine.last_update_time == clock.now()
    assert engine.reward_for_duration() == engine.reward_rate * DAY


def test_fund_duration_from_config() -> None:
    engine, clock, _, _ = _setup(config=EngineConfig(default_reward_duration=3_600))
    engine.fund_continuous(360_000, caller="owner")
    assert engine.reward_rate == 100
    assert engine.reward_end_time == clock.now() + 3_600


def test_fund_explicit_duration() -> None:
    engine, clock, _, _ = _setup()
    engine.fund_continuous(1_000, caller="owner", duration=10)
    assert engine.reward_rate == 100
    assert engine.reward_end_time == clock.now() + 10


def test_fund_requires_owner() -> None:
    engine, _, _, _ = _setup()
    with pytest.raises(Unauthorized):
        engine.fund_continuous(1_000 * E18, caller="mallory")
    assert engine.reward_rate == 0


def test_fund_requires_pool_balance() -> None:
    engine, _, _, _ = _setup()
    with pytest.raises(InsufficientBalance):
        engine.fund_continuous(2_000 * E18, caller="owner")


def test_fund_zero_duration() -> None:
    engine, _, _, _ = _setup()
    with pytest.raises(ZeroAmount):
        engine.fund_continuous(1_000, caller="owner", duration=0)


def test_rewards_accrue_with_clock_and_pay_out() -> None:
    engine, clock, stk, rwd = _setup()
    engine.stake_tokens("alice", 100 * E18)
    engine.fund_continuous(1_000 * E18, caller="owner")
    assert stk.balance_of(POOL) == 100 * E18

    clock.advance(DAY // 2)
    assert abs(engine.calculate_earned("alice") - 500 * E18) <= TOLERANCE

    clock.advance(DAY // 2)
    earned = engine.calculate_earned("alice")
    assert abs(earned - 1_000 * E18) <= TOLERANCE

    effect = engine.claim_rewards("alice")
    assert effect.amount == earned
    assert rwd.balance_of("alice") == earned
    assert engine.calculate_earned("alice") == 0


def test_reward_per_token_flat_without_stakers() -> None:
    engine, clock, _, _ = _setup()
    engine.fund_continuous(1_000 * E18, caller="owner")
    before = engine.reward_per_token()
    clock.advance(DAY // 4)
    assert engine.reward_per_token() == before


def test_top_up_merges_remaining_emission() -> None:
    engine, clock, _, rwd = _setup(start=0)
    rwd.mint(POOL, 2_000 * E18)
    engine.fund_continuous(1_000 * E18, caller="owner")
    clock.set(DAY)
    engine.fund_continuous(1_000 * E18, caller="owner")
    engine.fund_continuous(2_000 * E18, caller="owner")

    assert engine.reward_rate == 3_000 * E18 // DAY
    assert engine.reward_end_time == 2 * DAY


def test_withdraw_returns_stake() -> None:
    engine, clock, stk, _ = _setup()
    engine.stake("alice", 100 * E18)
    clock.advance(10)
    engine.withdraw_tokens("alice", 100 * E18)
    assert engine.total_staked == 0
    assert stk.balance_of("alice") == 1_000 * E18
    assert engine.staked_balance("alice") == 0


def test_reentrant_claim_during_payout_gets_nothing() -> None:
    engine, clock, _, rwd, _, reward_gw = _rig()
    nested: list[Exception] = []

    def reenter(direction: str, account: str, amount: int) -> None:
        if direction == "out":
            try:
                engine.claim_reward(account)
            except NoRewardsToClaim as exc:
                nested.append(exc)

    engine.stake("alice", 100 * E18)
    engine.fund_continuous(1_000 * E18, caller="owner")
    clock.advance(DAY)
    earned = engine.calculate_earned("alice")
    reward_gw.on_transfer = reenter
    engine.claim_reward("alice")

    assert len(nested) == 1
    assert rwd.balance_of("alice") == earned


def test_reentrant_stake_during_deposit_rejected() -> None:
    engine, _, stk, _, staking_gw, _ = _rig()
    nested: list[Exception] = []

    def reenter(direction: str, account: str, amount: int) -> None:
        if direction == "in":
            try:
                engine.stake(account, amount)
            except ReentrantCall as exc:
                nested.append(exc)

    staking_gw.on_transfer = reenter
    engine.stake("alice", 100 * E18)

    assert len(nested) == 1
    assert engine.total_staked == 100 * E18
    assert stk.balance_of(POOL) == 100 * E18


def test_notify_takes_amount_duration_caller() -> None:
    engine, clock, _, _ = _setup()
    engine.notify_reward_distribution(1_000, 10, "owner")
    assert engine.reward_rate == 100
    assert engine.reward_end_time == clock.now() + 10


def test_fund_reads_balance_at_gateway_holder() -> None:
    staking_token = InMemoryToken("STK")
    reward_token = InMemoryToken("RWD")
    staking_token.mint("alice", 100)
    reward_token.mint("rewards-pool", 1_000)
    clock = ManualClock(start=0)
    engine = ContinuousStakingEngine(
        TokenGateway(staking_token, "stakes-pool"),
        TokenGateway(reward_token, "rewards-pool"),
        clock,
        SingleOwner("owner"),
    )
    engine.stake("alice", 100)
    engine.fund_continuous(1_000, caller="owner", duration=10)
    clock.advance(10)

    assert engine.claim_reward("alice").amount == 1_000
    assert reward_token.balance_of("alice") == 1_000
    assert staking_token.balance_of("stakes-pool") == 100


def test_reward_for_duration_after_mid_period_stake() -> None:
    engine, clock, _, _ = _setup()
    engine.fund_continuous(1_000 * E18, caller="owner")
    clock.advance(DAY // 2)
    engine.stake("alice", 100 * E18)

    assert engine.last_update_time == clock.now()
    assert engine.reward_for_duration() == engine.reward_rate * DAY
