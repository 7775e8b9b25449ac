"""
Imperative shell: collaborators (gateway, clock, access control) and the
transactional engines that drive the core kernels through them.
"""

from .access import AccessControl, SingleOwner
from .clock import Clock, ManualClock, SystemClock
from .engine import ContinuousStakingEngine, LumpSumStakingEngine, ShareVaultEngine
from .gateway import AssetGateway, InMemoryToken, TokenGateway

__all__ = [
    "AccessControl",
    "SingleOwner",
    "Clock",
    "ManualClock",
    "SystemClock",
    "ContinuousStakingEngine",
    "LumpSumStakingEngine",
    "ShareVaultEngine",
    "AssetGateway",
    "InMemoryToken",
    "TokenGateway",
]
