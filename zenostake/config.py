"""
Engine configuration.

`EngineConfig` is a frozen dataclass validated on construction. It can be
built directly, from a plain mapping, or from a YAML file:

    default_reward_duration: 86400
    pool_address: staking-pool
    vault_address: share-vault
    check_invariants: true
    log_level: INFO

Unknown keys are rejected (fail-closed) so a typo never silently falls back to
a default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class EngineConfig:
    # Period length used when a continuous funding call omits `duration` (24h).
    default_reward_duration: int = 86_400

    # Holder addresses tools bind their gateways to. Engines read balances
    # through the gateway itself, never through these.
    pool_address: str = "staking-pool"
    vault_address: str = "share-vault"

    # Evaluate the invariant registry on every post-state (reject on violation).
    check_invariants: bool = True

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        d = self.default_reward_duration
        if not isinstance(d, int) or isinstance(d, bool) or d <= 0:
            raise ValueError(f"default_reward_duration must be a positive int: {d!r}")
        for name in ("pool_address", "vault_address"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"{name} must be a non-empty string")
        if not isinstance(self.check_invariants, bool):
            raise ValueError("check_invariants must be a bool")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}: {self.log_level!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EngineConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown config keys: {', '.join(unknown)}")
        return cls(**dict(data))


def load_config(path: str | Path) -> EngineConfig:
    """Load an `EngineConfig` from a YAML file. An empty file yields defaults."""
    p = Path(path)
    obj = yaml.safe_load(p.read_text(encoding="utf-8"))
    if obj is None:
        obj = {}
    if not isinstance(obj, dict):
        raise ValueError(f"config root must be a mapping: {p}")
    config = EngineConfig.from_mapping(obj)
    logger.debug("loaded engine config from %s: %s", p, config)
    return config


def configure_logging(config: EngineConfig) -> None:
    """Apply `config.log_level` to the package logger (scripts and tools)."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("zenostake").setLevel(config.log_level.upper())
