"""
zenostake: integer-only staking reward accounting.

- `zenostake.core`: pure kernels (stake ledger, lump-sum index, continuous
  schedule, share vault) returning ``(next_state, effect)``.
- `zenostake.integration`: transactional engines wiring the kernels to an
  asset gateway, a clock and access control.
"""

from .config import EngineConfig, load_config
from .integration import ContinuousStakingEngine, LumpSumStakingEngine, ShareVaultEngine

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "load_config",
    "ContinuousStakingEngine",
    "LumpSumStakingEngine",
    "ShareVaultEngine",
]
