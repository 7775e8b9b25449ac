"""Invariant checkers for the staking kernels.

Each function takes the (pre, post) state pair of one step and returns True
when the invariant holds. Most only look at the post-state; the accumulator
checks compare both sides. ``check_all(registry, pre, post)`` returns the list
of violated invariant IDs (empty = all pass).

The checkers read state attributes only, so this module does not import the
kernels that use it.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

Check = Callable[[Any, Any], bool]


# -- Ledger ------------------------------------------------------------------

def inv_total_staked_matches_sum(pre: Any, post: Any) -> bool:
    return post.ledger.verify_conservation()


def inv_stake_non_negative(pre: Any, post: Any) -> bool:
    return post.ledger.verify_non_negative()


# -- Lump-sum index ----------------------------------------------------------

def inv_reward_index_monotone(pre: Any, post: Any) -> bool:
    return post.reward_index >= pre.reward_index


def inv_snapshot_not_ahead(pre: Any, post: Any) -> bool:
    return all(snap <= post.reward_index for snap in post.reward_snapshot.values())


def inv_earned_non_negative(pre: Any, post: Any) -> bool:
    return all(v >= 0 for v in post.earned_unclaimed.values())


# -- Continuous schedule -----------------------------------------------------

def inv_reward_per_token_monotone(pre: Any, post: Any) -> bool:
    return post.reward_per_token_stored >= pre.reward_per_token_stored


def inv_paid_not_ahead(pre: Any, post: Any) -> bool:
    return all(paid <= post.reward_per_token_stored for paid in post.reward_per_token_paid.values())


def inv_rewards_non_negative(pre: Any, post: Any) -> bool:
    return all(v >= 0 for v in post.rewards.values())


def inv_last_update_not_after_end(pre: Any, post: Any) -> bool:
    return post.last_update_time <= post.reward_end_time


# -- Share vault -------------------------------------------------------------

def inv_total_shares_matches_sum(pre: Any, post: Any) -> bool:
    return post.total_shares == sum(post.shares.values())


def inv_shares_non_negative(pre: Any, post: Any) -> bool:
    return post.total_shares >= 0 and all(v >= 0 for v in post.shares.values())


# ---------------------------------------------------------------------------
# Registries + check_all
# ---------------------------------------------------------------------------

_LEDGER_INVARIANTS: dict[str, Check] = {
    "inv_total_staked_matches_sum": inv_total_staked_matches_sum,
    "inv_stake_non_negative": inv_stake_non_negative,
}

INDEX_INVARIANTS: dict[str, Check] = {
    **_LEDGER_INVARIANTS,
    "inv_reward_index_monotone": inv_reward_index_monotone,
    "inv_snapshot_not_ahead": inv_snapshot_not_ahead,
    "inv_earned_non_negative": inv_earned_non_negative,
}

SCHEDULE_INVARIANTS: dict[str, Check] = {
    **_LEDGER_INVARIANTS,
    "inv_reward_per_token_monotone": inv_reward_per_token_monotone,
    "inv_paid_not_ahead": inv_paid_not_ahead,
    "inv_rewards_non_negative": inv_rewards_non_negative,
    "inv_last_update_not_after_end": inv_last_update_not_after_end,
}

VAULT_INVARIANTS: dict[str, Check] = {
    "inv_total_shares_matches_sum": inv_total_shares_matches_sum,
    "inv_shares_non_negative": inv_shares_non_negative,
}


def check_all(registry: Mapping[str, Check], pre: Any, post: Any) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in registry.items()
        if not check_fn(pre, post)
    ]
