"""
mintrange.types.ranges — range partition records and balance overrides.

All records are immutable; the state layer stores them as-is in the journal, so
a value read from an overlay can never be mutated behind the journal's back.

Addresses are raw `bytes`. The all-zero address is reserved as the mint source
and may never be configured as a holder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

ZERO_ADDRESS = b"\x00" * 20

Address = bytes


def is_zero_address(addr: bytes) -> bool:
    return not any(addr)


def hex_addr(addr: bytes) -> str:
    return "0x" + addr.hex()


@dataclass(frozen=True)
class HolderRangeEntry:
    """
    Holders active from `start_id` until the next entry's start.

    Slot 0 is the treasury: its per-id amount is drawn from the supply range
    active at the same id, and `amounts[0]` is kept only for shape. Every other
    slot `k` receives the fixed `amounts[k]` per id.
    """

    start_id: int
    holders: Tuple[bytes, ...]
    amounts: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "holders", tuple(bytes(h) for h in self.holders))
        object.__setattr__(self, "amounts", tuple(int(a) for a in self.amounts))

    def slot_of(self, address: bytes) -> Optional[int]:
        try:
            return self.holders.index(address)
        except ValueError:
            return None

    def with_start(self, start_id: int) -> "HolderRangeEntry":
        return HolderRangeEntry(start_id=start_id, holders=self.holders, amounts=self.amounts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_id": self.start_id,
            "holders": [hex_addr(h) for h in self.holders],
            "amounts": list(self.amounts),
        }


@dataclass(frozen=True)
class SupplyRangeEntry:
    """Treasury supply bounds active from `start_id` (inclusive)."""

    start_id: int
    min_supply: int
    max_supply: int

    def with_start(self, start_id: int) -> "SupplyRangeEntry":
        return SupplyRangeEntry(start_id=start_id, min_supply=self.min_supply, max_supply=self.max_supply)

    def bounds(self) -> Tuple[int, int]:
        return self.min_supply, self.max_supply

    def to_dict(self) -> Dict[str, Any]:
        return {"start_id": self.start_id, "min_supply": self.min_supply, "max_supply": self.max_supply}


@dataclass(frozen=True)
class MintedRangeSnapshot:
    """
    Record of one range mint: the id span plus the holder and supply entries that
    were active when it was minted. `excluded` holds ids inside the span that had
    already been minted manually and therefore carry no implicit defaults.
    """

    start_id: int
    end_id: int
    holder_entry: HolderRangeEntry
    supply_entry: SupplyRangeEntry
    excluded: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "excluded", tuple(sorted(set(self.excluded))))

    def covers(self, token_id: int) -> bool:
        return self.start_id <= token_id <= self.end_id and token_id not in self.excluded

    def minted_ids(self) -> Tuple[int, ...]:
        skip = set(self.excluded)
        return tuple(i for i in range(self.start_id, self.end_id + 1) if i not in skip)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_id": self.start_id,
            "end_id": self.end_id,
            "holder_entry": self.holder_entry.to_dict(),
            "supply_entry": self.supply_entry.to_dict(),
            "excluded": list(self.excluded),
        }


@dataclass(frozen=True)
class Override:
    """An explicit (materialized) balance. Once written it is never removed."""

    token_id: int
    address: bytes
    balance: int
    initialized: bool = True


__all__ = [
    "ZERO_ADDRESS",
    "Address",
    "is_zero_address",
    "hex_addr",
    "HolderRangeEntry",
    "SupplyRangeEntry",
    "MintedRangeSnapshot",
    "Override",
]
