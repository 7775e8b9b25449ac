"""
Asset gateway capability and an in-memory token backend.

Engines depend only on the narrow `AssetGateway` protocol:

    transfer_in(source, amount) -> bool       pull from `source` into the pool
    transfer_out(destination, amount) -> bool push from the pool to `destination`
    balance_of(holder) -> int
    pool_balance() -> int                     balance held by the pool itself

A `False` result means the transfer did not happen; the engine aborts the whole
operation. Gateways are synchronous and may call back into the engine.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class AssetGateway(Protocol):
    def transfer_in(self, source: str, amount: int) -> bool: ...

    def transfer_out(self, destination: str, amount: int) -> bool: ...

    def balance_of(self, holder: str) -> int: ...

    def pool_balance(self) -> int: ...


class InMemoryToken:
    """
    Fungible token ledger mapping holder -> amount (ERC20-mock style).

    Notes:
    - Balances are always non-negative; a transfer that would overdraw fails
      and returns False without touching either side.
    - Zero-amount transfers fail, so a zero deposit from an empty holder reads
      as an insufficient balance, as with a real token.
    """

    def __init__(self, symbol: str = "STK") -> None:
        self.symbol = symbol
        self._balances: Dict[str, int] = {}
        self.total_supply = 0

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def mint(self, holder: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        self._balances[holder] = self.balance_of(holder) + amount
        self.total_supply += amount

    def transfer(self, source: str, destination: str, amount: int) -> bool:
        if amount <= 0:
            return False
        available = self.balance_of(source)
        if amount > available:
            logger.debug("%s transfer %s -> %s failed: %d > %d", self.symbol, source, destination, amount, available)
            return False
        self._balances[source] = available - amount
        self._balances[destination] = self.balance_of(destination) + amount
        return True

    def __repr__(self) -> str:
        return f"InMemoryToken({self.symbol}, {len(self._balances)} holders)"


class TokenGateway:
    """`AssetGateway` binding a token to the pool's holder address.

    `on_transfer` is an optional hook invoked after every successful transfer
    with ``(direction, account, amount)``; tests use it to re-enter the engine.
    """

    def __init__(
        self,
        token: InMemoryToken,
        pool_address: str,
        *,
        on_transfer: Optional[Callable[[str, str, int], None]] = None,
    ) -> None:
        self.token = token
        self.pool_address = pool_address
        self.on_transfer = on_transfer

    def transfer_in(self, source: str, amount: int) -> bool:
        ok = self.token.transfer(source, self.pool_address, amount)
        if ok and self.on_transfer is not None:
            self.on_transfer("in", source, amount)
        return ok

    def transfer_out(self, destination: str, amount: int) -> bool:
        ok = self.token.transfer(self.pool_address, destination, amount)
        if ok and self.on_transfer is not None:
            self.on_transfer("out", destination, amount)
        return ok

    def balance_of(self, holder: str) -> int:
        return self.token.balance_of(holder)

    def pool_balance(self) -> int:
        return self.token.balance_of(self.pool_address)
