"""
mintrange.runtime.balances — two-tier balance resolution.

balance_of(address, id):
  1. an override for (id, address), if one was ever written;
  2. otherwise the implicit default: the amount of `address`'s slot in the
     *current* holder range for `id`, sized by the snapshot taken when `id`
     was minted;
  3. otherwise 0 (unminted, manually minted or not a holder).

Reads never raise for well-formed arguments.
"""

from __future__ import annotations

from typing import Optional, Tuple

from ..errors import ConfigurationError
from ..state.ledger import LedgerState
from ..types.ranges import MintedRangeSnapshot
from .supply import distribution, slot_amount


def default_slot_amount(state: LedgerState, snap: MintedRangeSnapshot, token_id: int, slot: int) -> int:
    if slot >= len(snap.holder_entry.holders):
        raise ConfigurationError(
            "holder slot outside the minted distribution", data={"token_id": token_id, "slot": slot}
        )
    return slot_amount(token_id, slot, snap.holder_entry, snap.supply_entry, state.seed)


def default_holders(state: LedgerState, token_id: int) -> Tuple[bytes, ...]:
    return state.partitions.active_holder_range(token_id).holders


def default_balance(state: LedgerState, address: bytes, token_id: int) -> int:
    if token_id > state.last_minted:
        return 0
    snap = state.snapshots.covering(token_id)
    if snap is None:
        return 0
    holders = default_holders(state, token_id)
    try:
        slot = holders.index(address)
    except ValueError:
        return 0
    return default_slot_amount(state, snap, token_id, slot)


def balance_of(state: LedgerState, address: bytes, token_id: int) -> int:
    ov = state.overrides.get(token_id, address)
    if ov is not None:
        return ov.balance
    return default_balance(state, address, token_id)


def default_total_supply(state: LedgerState, token_id: int) -> int:
    snap: Optional[MintedRangeSnapshot] = state.snapshots.covering(token_id)
    if snap is None:
        return 0
    return sum(distribution(token_id, snap.holder_entry, snap.supply_entry, state.seed))


def total_supply(state: LedgerState, token_id: int) -> int:
    return default_total_supply(state, token_id) + state.overrides.manual_supply(token_id)


def exists(state: LedgerState, token_id: int) -> bool:
    return total_supply(state, token_id) > 0


def materialize(state: LedgerState, token_id: int, address: bytes, balance: int):
    """Write an explicit balance; the pair stays initialized forever."""
    return state.overrides.materialize(token_id, address, balance)


__all__ = [
    "default_slot_amount",
    "default_holders",
    "default_balance",
    "balance_of",
    "default_total_supply",
    "total_supply",
    "exists",
    "materialize",
]
