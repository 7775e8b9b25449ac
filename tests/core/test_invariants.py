"""Tests for zenostake/core/invariants.py: invariant checkers and registries."""

from dataclasses import replace

from zenostake.core import reward_index as ri
from zenostake.core import reward_schedule as rs
from zenostake.core import share_vault as sv
from zenostake.core.fixed_point import FixedPoint
from zenostake.core.invariants import (
    INDEX_INVARIANTS,
    SCHEDULE_INVARIANTS,
    VAULT_INVARIANTS,
    check_all,
)
from zenostake.core.ledger import StakeLedger


class TestInitialStatesPass:
    def test_index(self):
        s = ri.init_index_state()
        assert check_all(INDEX_INVARIANTS, s, s) == []

    def test_schedule(self):
        s = rs.init_schedule_state()
        assert check_all(SCHEDULE_INVARIANTS, s, s) == []

    def test_vault(self):
        s = sv.init_vault_state()
        assert check_all(VAULT_INVARIANTS, s, s) == []


class TestLedgerInvariants:
    def test_total_mismatch(self):
        s = ri.init_index_state()
        bad = replace(s, ledger=StakeLedger(balances={"alice": 3}, total_staked=4))
        assert "inv_total_staked_matches_sum" in check_all(INDEX_INVARIANTS, s, bad)

    def test_negative_stake(self):
        s = rs.init_schedule_state()
        bad = replace(s, ledger=StakeLedger(balances={"alice": -1, "bob": 1}, total_staked=0))
        assert "inv_stake_non_negative" in check_all(SCHEDULE_INVARIANTS, s, bad)


class TestIndexInvariants:
    def test_index_decrease(self):
        pre = replace(ri.init_index_state(), reward_index=FixedPoint(5))
        post = replace(pre, reward_index=FixedPoint(4))
        assert "inv_reward_index_monotone" in check_all(INDEX_INVARIANTS, pre, post)

    def test_snapshot_ahead(self):
        s = replace(ri.init_index_state(), reward_index=FixedPoint(5), reward_snapshot={"alice": FixedPoint(6)})
        assert "inv_snapshot_not_ahead" in check_all(INDEX_INVARIANTS, s, s)

    def test_negative_earned(self):
        s = replace(ri.init_index_state(), earned_unclaimed={"alice": -1})
        assert "inv_earned_non_negative" in check_all(INDEX_INVARIANTS, s, s)


class TestScheduleInvariants:
    def test_accumulator_decrease(self):
        pre = replace(rs.init_schedule_state(), reward_per_token_stored=FixedPoint(9))
        post = replace(pre, reward_per_token_stored=FixedPoint(8))
        assert "inv_reward_per_token_monotone" in check_all(SCHEDULE_INVARIANTS, pre, post)

    def test_paid_ahead(self):
        s = replace(rs.init_schedule_state(), reward_per_token_paid={"alice": FixedPoint(1)})
        assert "inv_paid_not_ahead" in check_all(SCHEDULE_INVARIANTS, s, s)

    def test_negative_rewards(self):
        s = replace(rs.init_schedule_state(), rewards={"alice": -3})
        assert "inv_rewards_non_negative" in check_all(SCHEDULE_INVARIANTS, s, s)

    def test_last_update_after_end(self):
        s = replace(rs.init_schedule_state(), last_update_time=10, reward_end_time=5)
        assert "inv_last_update_not_after_end" in check_all(SCHEDULE_INVARIANTS, s, s)


class TestVaultInvariants:
    def test_share_sum_mismatch(self):
        s = sv.VaultState(shares={"alice": 2}, total_shares=3)
        assert "inv_total_shares_matches_sum" in check_all(VAULT_INVARIANTS, s, s)

    def test_negative_shares(self):
        s = sv.VaultState(shares={"alice": -2, "bob": 2}, total_shares=0)
        violations = check_all(VAULT_INVARIANTS, s, s)
        assert violations == ["inv_shares_non_negative"]
