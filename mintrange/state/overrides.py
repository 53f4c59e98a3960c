"""
mintrange.state.overrides — explicit balances and manually minted supply.

An override replaces the implicit default balance of one (id, address) pair.
Overrides are written by real transfers, manual mints and administrative
re-initialization; they are never deleted and the `initialized` flag never
goes back to False.
"""

from __future__ import annotations

from typing import Optional

from ..types.ranges import Override
from .journal import Journal


class OverrideLedger:
    OVERRIDE = "override"
    MANUAL = "manual"

    def __init__(self, journal: Journal) -> None:
        self._j = journal

    # overrides ------------------------------------------------------------

    def get(self, token_id: int, address: bytes) -> Optional[Override]:
        return self._j.get((self.OVERRIDE, token_id, address))

    def is_initialized(self, token_id: int, address: bytes) -> bool:
        ov = self.get(token_id, address)
        return ov is not None and ov.initialized

    def materialize(self, token_id: int, address: bytes, balance: int) -> Override:
        if balance < 0:
            raise ValueError("balance must be non-negative")
        ov = Override(token_id=token_id, address=address, balance=balance, initialized=True)
        self._j.set((self.OVERRIDE, token_id, address), ov)
        return ov

    # manual supply --------------------------------------------------------

    def manual_supply(self, token_id: int) -> int:
        return self._j.get((self.MANUAL, token_id), 0)

    def is_manual(self, token_id: int) -> bool:
        return self._j.has((self.MANUAL, token_id))

    def add_manual_supply(self, token_id: int, amount: int) -> int:
        total = self.manual_supply(token_id) + amount
        self._j.set((self.MANUAL, token_id), total)
        return total


__all__ = ["OverrideLedger"]
