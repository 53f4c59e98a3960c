"""
mintrange.runtime.supply — per-id default amounts.

The treasury (slot 0) receives a pseudo-random amount in the supply range's
`[min, max]`, derived purely from (seed, id): SHA3-256 of a domain tag, the
seed and the 32-byte big-endian id, reduced modulo the span. Every other slot
receives its configured fixed amount. Re-deriving the same id always yields
the same amount.
"""

from __future__ import annotations

import hashlib
from typing import Tuple

from ..types.ranges import HolderRangeEntry, SupplyRangeEntry

SUPPLY_DOMAIN = b"mintrange/supply/v1"


def derive_supply(token_id: int, supply: SupplyRangeEntry, seed: bytes) -> int:
    span = supply.max_supply - supply.min_supply + 1
    if span == 1:
        return supply.min_supply
    h = hashlib.sha3_256(SUPPLY_DOMAIN + seed + token_id.to_bytes(32, "big")).digest()
    return supply.min_supply + int.from_bytes(h, "big") % span


def slot_amount(
    token_id: int,
    slot: int,
    holders: HolderRangeEntry,
    supply: SupplyRangeEntry,
    seed: bytes,
) -> int:
    if slot == 0:
        return derive_supply(token_id, supply, seed)
    return holders.amounts[slot]


def distribution(
    token_id: int, holders: HolderRangeEntry, supply: SupplyRangeEntry, seed: bytes
) -> Tuple[int, ...]:
    """Default amount per holder slot for one id."""
    return tuple(slot_amount(token_id, k, holders, supply, seed) for k in range(len(holders.holders)))


__all__ = ["SUPPLY_DOMAIN", "derive_supply", "slot_amount", "distribution"]
