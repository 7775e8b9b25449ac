#!/usr/bin/env python3

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from zenostake.config import EngineConfig, configure_logging, load_config
from zenostake.core.errors import StakingError
from zenostake.integration import (
    ContinuousStakingEngine,
    InMemoryToken,
    LumpSumStakingEngine,
    ManualClock,
    ShareVaultEngine,
    SingleOwner,
    TokenGateway,
)

E18 = 10**18
OWNER = "owner"
ALICE = "alice"
BOB = "bob"


def _deploy_tokens(pool: str) -> tuple[InMemoryToken, InMemoryToken, TokenGateway, TokenGateway]:
    staking_token = InMemoryToken("STK")
    reward_token = InMemoryToken("REWARD")
    for holder in (OWNER, ALICE, BOB):
        staking_token.mint(holder, 1_000 * E18)
        reward_token.mint(holder, 1_000 * E18)
    return staking_token, reward_token, TokenGateway(staking_token, pool), TokenGateway(reward_token, pool)


def run_lump_sum(config: EngineConfig) -> int:
    _stk, _rwd, staking_gw, reward_gw = _deploy_tokens(config.pool_address)
    engine = LumpSumStakingEngine(staking_gw, reward_gw, config=config)

    engine.stake(ALICE, 100 * E18)
    engine.stake(BOB, 300 * E18)
    engine.fund_lump_sum(400 * E18, funder=OWNER)
    print(f"[lump-sum] index={engine.reward_index!r}")
    for who in (ALICE, BOB):
        print(f"[lump-sum] {who} earned={engine.calculate_earned(who)}")
    paid = engine.claim_reward(ALICE).amount
    print(f"[lump-sum] alice claimed={paid}")
    return 0


def run_continuous(config: EngineConfig) -> int:
    _stk, reward_token, staking_gw, reward_gw = _deploy_tokens(config.pool_address)
    clock = ManualClock(start=0)
    engine = ContinuousStakingEngine(staking_gw, reward_gw, clock, SingleOwner(OWNER), config=config)

    reward_token.transfer(OWNER, config.pool_address, 1_000 * E18)
    engine.stake(ALICE, 100 * E18)
    engine.fund_continuous(1_000 * E18, caller=OWNER)
    print(f"[continuous] rate={engine.reward_rate}/s end={engine.reward_end_time}")

    clock.advance(config.default_reward_duration // 2)
    print(f"[continuous] t={clock.now()} alice earned={engine.calculate_earned(ALICE)}")
    clock.advance(config.default_reward_duration // 2)
    print(f"[continuous] t={clock.now()} alice earned={engine.calculate_earned(ALICE)}")
    paid = engine.claim_reward(ALICE).amount
    print(f"[continuous] alice claimed={paid}")
    return 0


def run_vault(config: EngineConfig) -> int:
    staking_token = InMemoryToken("STK")
    for holder in (ALICE, BOB):
        staking_token.mint(holder, 1_000 * E18)
    engine = ShareVaultEngine(TokenGateway(staking_token, config.vault_address), config=config)

    a = engine.enter(ALICE, 10 * E18).shares
    b = engine.enter(BOB, 20 * E18).shares
    print(f"[vault] alice shares={a} bob shares={b} assets={engine.total_assets()}")
    returned = engine.leave(ALICE, a).amount
    print(f"[vault] alice redeemed={returned}")
    return 0


SCENARIOS = {
    "lump-sum": run_lump_sum,
    "continuous": run_continuous,
    "vault": run_vault,
}


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Run an offline staking scenario against in-memory tokens.")
    ap.add_argument("scenario", choices=sorted(SCENARIOS) + ["all"], nargs="?", default="all")
    ap.add_argument("--config", type=Path, default=None, help="YAML EngineConfig file")
    args = ap.parse_args(argv)

    config = load_config(args.config) if args.config is not None else EngineConfig()
    configure_logging(config)

    names = sorted(SCENARIOS) if args.scenario == "all" else [args.scenario]
    for name in names:
        try:
            rc = SCENARIOS[name](config)
        except StakingError as exc:
            print(f"[offline-demo] FAIL ({name}): {exc.code}: {exc}")
            return 1
        if rc != 0:
            return rc
    print("[offline-demo] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
