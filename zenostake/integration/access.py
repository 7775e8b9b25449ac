"""Access-control capability consulted by owner-gated funding."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AccessControl(Protocol):
    def is_owner(self, caller: str) -> bool: ...


class SingleOwner:
    """One fixed owner address."""

    def __init__(self, owner: str) -> None:
        if not owner:
            raise ValueError("owner must be non-empty")
        self.owner = owner

    def is_owner(self, caller: str) -> bool:
        return caller == self.owner
