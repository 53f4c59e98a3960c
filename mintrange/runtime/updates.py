"""
mintrange.runtime.updates — retroactive initial-holder updates and the lock.

While paused, the owner may replace the whole holder partition. For every
already-minted id whose holder slots change, the batch must say how each
changed slot is settled:

* implicit move: `from` is the current default holder of the slot and `to`
  takes the slot over in the new partition; both pairs are uninitialized and
  the amount is the full slot default. Nothing is written: installing the new
  partition moves the default.
* explicit move: the id is listed in both `ids[i]` and `initialize[i]`; both
  pairs are materialized with the amount moved between them.
* freeze: the id is only listed in `initialize[i]`; both pairs are
  materialized at their current balance, so the partition change cannot
  touch them.

Every changed slot must be settled by exactly one implicit move, or have both
its old and new holder pairs explicit once the batch is applied. That keeps
every id's total supply unchanged.

Ids at or below the lock watermark can never change again, and a one-way
switch disables updates altogether.
"""

from __future__ import annotations

import bisect
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from ..errors import (AddressMismatch, AlreadyLocked, InsufficientBalance, InvalidPartition,
                      LockedRange, MalformedBatch, NotAMember, UnknownId, UnmintedTokens,
                      UpdatesDisabled)
from ..state.ledger import LedgerState
from ..state.partitions import validate_holders
from ..types.events import InitialHoldersLocked, InitialHoldersRangeUpdateDisabled, TransferBatch
from ..types.inputs import UpdateInitialHolderRangesInput
from ..types.ranges import HolderRangeEntry, MintedRangeSnapshot, is_zero_address
from .balances import balance_of, default_slot_amount
from .checksum import update_checksum

log = logging.getLogger(__name__)

Pair = Tuple[int, bytes]


@dataclass(frozen=True)
class UpdatePlan:
    input: UpdateInitialHolderRangesInput
    checksum: bytes

    @property
    def checksum_hex(self) -> str:
        return "0x" + self.checksum.hex()


@dataclass
class VerifiedUpdate:
    """Outcome of validation: what commit has to write."""

    batch: UpdateInitialHolderRangesInput
    new_entries: List[HolderRangeEntry]
    materializations: List[Tuple[int, bytes, int]] = field(default_factory=list)
    implicit_moves: int = 0
    checksum: bytes = b""


@dataclass(frozen=True)
class _SlotChange:
    token_id: int
    snapshot: MintedRangeSnapshot
    old: HolderRangeEntry
    new: HolderRangeEntry
    slots: Tuple[int, ...]


# ------------------------------- partition ---------------------------------


def _is_int(v: object) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _active(entries: Sequence[HolderRangeEntry], starts: Sequence[int], token_id: int) -> HolderRangeEntry:
    return entries[bisect.bisect_right(starts, token_id) - 1]


def build_partition(
    state: LedgerState,
    new_holders: Sequence[Sequence[bytes]],
    breakpoints: Sequence[int],
) -> List[HolderRangeEntry]:
    """Validate a replacement partition and turn it into holder entries."""
    if len(breakpoints) == 0:
        raise InvalidPartition("at least one holder range is required")
    if len(new_holders) != len(breakpoints):
        raise InvalidPartition(
            "one holder list per range start is required",
            data={"holders": len(new_holders), "ranges": len(breakpoints)},
        )
    if not all(_is_int(b) for b in breakpoints):
        raise InvalidPartition("range starts must be integers")
    if breakpoints[0] != 0:
        raise InvalidPartition("first range must start at 0", data={"start": breakpoints[0]})
    for prev, cur in zip(breakpoints, breakpoints[1:]):
        if cur <= prev:
            raise InvalidPartition("range starts must be strictly increasing", data={"start": cur})
    next_id = state.last_minted + 1
    if breakpoints[-1] > next_id:
        raise InvalidPartition(
            "range starts may not lie beyond the next mintable id",
            data={"start": breakpoints[-1], "next_id": next_id},
        )

    old = state.partitions.holders.entries()
    old_starts = [e.start_id for e in old]
    entries: List[HolderRangeEntry] = []
    for j, (start, holders) in enumerate(zip(breakpoints, new_holders)):
        last = j == len(breakpoints) - 1
        template = _active(old, old_starts, max(start, next_id) if last else start)
        if len(holders) != len(template.holders):
            raise InvalidPartition(
                "holder count must match the range it replaces",
                data={"start": start, "expected": len(template.holders), "got": len(holders)},
            )
        validate_holders(holders, template.amounts)
        entries.append(HolderRangeEntry(start, tuple(holders), template.amounts))

    # every segment, up to and including the next mintable id, keeps its holder count
    starts = list(breakpoints)
    for a in sorted(set(old_starts) | set(starts)):
        if a > next_id:
            continue
        if len(_active(old, old_starts, a).holders) != len(_active(entries, starts, a).holders):
            raise InvalidPartition("holder count must match the range it replaces", data={"start": a})
    return entries


def _slot_changes(state: LedgerState, new_entries: List[HolderRangeEntry]) -> Iterator[_SlotChange]:
    """
    Minted ids with implicit defaults whose holder slots change, in id order.
    Raises LockedRange if a change reaches an id at or below the lock.
    """
    old = state.partitions.holders.entries()
    old_starts = [e.start_id for e in old]
    new_starts = [e.start_id for e in new_entries]
    lo, hi = state.config.first_range_id, state.last_minted
    lock = state.lock_watermark

    points = sorted(set(old_starts) | set(new_starts) | {lo})
    for idx, a in enumerate(points):
        b = points[idx + 1] - 1 if idx + 1 < len(points) else hi
        a, b = max(a, lo), min(b, hi)
        if a > b:
            continue
        o = _active(old, old_starts, a)
        n = _active(new_entries, new_starts, a)
        slots = tuple(k for k in range(len(o.holders)) if o.holders[k] != n.holders[k])
        if not slots:
            continue
        if lock and a <= lock:
            raise LockedRange(
                "holder change reaches a locked id", token_id=a, watermark=lock
            )
        for token_id in range(a, b + 1):
            snap = state.snapshots.covering(token_id)
            if snap is not None:
                yield _SlotChange(token_id, snap, o, n, slots)


def _require_enabled(state: LedgerState) -> None:
    if state.updates_disabled:
        raise UpdatesDisabled()


def _checksum(state: LedgerState, batch: UpdateInitialHolderRangesInput) -> bytes:
    return update_checksum(
        batch,
        revision=state.revision,
        last_minted=state.last_minted,
        lock_watermark=state.lock_watermark,
        current_breakpoints=state.partitions.holders.breakpoints(),
    )


# ------------------------------- generator ---------------------------------


def plan_update(
    state: LedgerState,
    new_holders: Sequence[Sequence[bytes]],
    new_range: Optional[Sequence[int]] = None,
) -> UpdatePlan:
    """
    Build the complete batch that re-points every holder range to
    `new_holders`. Ids whose changed slots touch an initialized pair are
    frozen; all others move implicitly.
    """
    _require_enabled(state)
    if new_range is None:
        new_range = state.partitions.holders.breakpoints()
        if len(new_holders) != len(new_range):
            raise InvalidPartition(
                "one holder list per existing range is required",
                data={"holders": len(new_holders), "ranges": len(new_range)},
            )
    holders = tuple(tuple(bytes(h) for h in hs) for hs in new_holders)
    entries = build_partition(state, holders, tuple(new_range))

    groups: "OrderedDict[Tuple[bytes, bytes], Dict[str, List[int]]]" = OrderedDict()
    for ch in _slot_changes(state, entries):
        pairs = [(ch.old.holders[k], ch.new.holders[k]) for k in ch.slots]
        frozen = any(
            state.overrides.is_initialized(ch.token_id, f) or state.overrides.is_initialized(ch.token_id, t)
            for f, t in pairs
        )
        for k, (f, t) in zip(ch.slots, pairs):
            g = groups.setdefault((f, t), {"ids": [], "amounts": [], "initialize": []})
            if frozen:
                g["initialize"].append(ch.token_id)
            else:
                g["ids"].append(ch.token_id)
                g["amounts"].append(default_slot_amount(state, ch.snapshot, ch.token_id, k))

    batch = UpdateInitialHolderRangesInput(
        from_addresses=tuple(f for f, _ in groups),
        to_addresses=tuple(t for _, t in groups),
        ids=tuple(tuple(g["ids"]) for g in groups.values()),
        amounts=tuple(tuple(g["amounts"]) for g in groups.values()),
        initialize=tuple(tuple(g["initialize"]) for g in groups.values()),
        new_initial_holders=holders,
        new_initial_holders_range=tuple(new_range),
    )
    plan = UpdatePlan(input=batch, checksum=_checksum(state, batch))
    log.debug(
        "holder update planned",
        extra={"groups": len(groups), "checksum": plan.checksum_hex},
    )
    return plan


# ------------------------------- validation --------------------------------


def _check_shape(batch: UpdateInitialHolderRangesInput) -> None:
    if not isinstance(batch, UpdateInitialHolderRangesInput):
        raise MalformedBatch("expected an UpdateInitialHolderRangesInput")
    n = len(batch.from_addresses)
    for name in ("to_addresses", "ids", "amounts", "initialize"):
        if len(getattr(batch, name)) != n:
            raise MalformedBatch(
                f"{name} length does not match from_addresses",
                data={"from_addresses": n, name: len(getattr(batch, name))},
            )
    for i, f, t, ids, amounts, init in batch.groups():
        for addr in (f, t):
            if not isinstance(addr, (bytes, bytearray)) or is_zero_address(addr):
                raise MalformedBatch("group addresses must be non-zero bytes", index=i)
        if f == t:
            raise MalformedBatch("from and to must differ", index=i)
        if len(ids) != len(amounts):
            raise MalformedBatch("ids and amounts length mismatch", index=i)
        for v in (*ids, *amounts, *init):
            if not _is_int(v) or v < 0:
                raise MalformedBatch("ids and amounts must be non-negative integers", index=i)


def verify_update(state: LedgerState, batch: UpdateInitialHolderRangesInput) -> VerifiedUpdate:
    """Run every check of a retroactive update without writing anything."""
    _require_enabled(state)
    _check_shape(batch)
    new_entries = build_partition(
        state, batch.new_initial_holders, batch.new_initial_holders_range
    )

    lock, last = state.lock_watermark, state.last_minted
    for i, _f, _t, ids, _amounts, init in batch.groups():
        for token_id in (*ids, *init):
            if lock and token_id <= lock:
                raise LockedRange(token_id=token_id, watermark=lock)
            if token_id > last:
                raise UnknownId(token_id=token_id, data={"index": i})

    changes: Dict[int, _SlotChange] = {ch.token_id: ch for ch in _slot_changes(state, new_entries)}
    new_starts = [e.start_id for e in new_entries]
    overrides = state.overrides

    explicit: Set[Pair] = set()
    sim: "OrderedDict[Pair, int]" = OrderedDict()
    implicit: Dict[Tuple[int, int], int] = {}

    def current(pair: Pair) -> int:
        if pair not in sim:
            sim[pair] = balance_of(state, pair[1], pair[0])
        return sim[pair]

    for i, f, t, ids, amounts, init in batch.groups():
        f, t = bytes(f), bytes(t)
        init_set = set(init)
        for token_id, amount in zip(ids, amounts):
            if token_id in init_set:
                have = current((token_id, f))
                if have < amount:
                    raise InsufficientBalance(token_id=token_id, address=f, balance=have, amount=amount)
                sim[(token_id, f)] = have - amount
                sim[(token_id, t)] = current((token_id, t)) + amount
                continue

            snap = state.snapshots.covering(token_id)
            old = state.partitions.active_holder_range(token_id)
            k = old.slot_of(f)
            if snap is None or k is None or overrides.is_initialized(token_id, f):
                raise AddressMismatch("from is not the default holder", token_id=token_id, address=f)
            new = _active(new_entries, new_starts, token_id)
            if new.slot_of(t) is None:
                raise NotAMember(token_id=token_id, address=t)
            if new.holders[k] != t:
                raise AddressMismatch("to does not take over the holder slot", token_id=token_id, address=t)
            if overrides.is_initialized(token_id, t):
                raise AddressMismatch("to is already initialized", token_id=token_id, address=t)
            have = balance_of(state, f, token_id)
            if have < amount:
                raise InsufficientBalance(token_id=token_id, address=f, balance=have, amount=amount)
            if amount != default_slot_amount(state, snap, token_id, k):
                raise MalformedBatch(
                    "implicit moves carry the full default amount", index=i, token_id=token_id
                )
            if (token_id, k) in implicit:
                raise MalformedBatch("holder slot moved twice", index=i, token_id=token_id)
            implicit[(token_id, k)] = i

        for token_id in init:
            explicit.add((token_id, f))
            explicit.add((token_id, t))
            current((token_id, f))
            current((token_id, t))

    for ch in changes.values():
        for k in ch.slots:
            f, t = ch.old.holders[k], ch.new.holders[k]
            fp, tp = (ch.token_id, f), (ch.token_id, t)
            if (ch.token_id, k) in implicit:
                if fp in explicit or tp in explicit:
                    raise MalformedBatch(
                        "implicit move conflicts with an initialized pair", token_id=ch.token_id
                    )
                continue
            f_done = fp in explicit or overrides.is_initialized(*fp)
            t_done = tp in explicit or overrides.is_initialized(*tp)
            if not (f_done and t_done):
                raise MalformedBatch(
                    "holder change is not settled by the batch",
                    token_id=ch.token_id,
                    data={"slot": k},
                )

    return VerifiedUpdate(
        batch=batch,
        new_entries=new_entries,
        materializations=[(tid, addr, bal) for (tid, addr), bal in sim.items() if (tid, addr) in explicit],
        implicit_moves=len(implicit),
        checksum=_checksum(state, batch),
    )


def commit_update(state: LedgerState, verified: VerifiedUpdate, operator: bytes) -> List[TransferBatch]:
    for token_id, addr, balance in verified.materializations:
        state.overrides.materialize(token_id, addr, balance)
    state.partitions.holders.replace_all(verified.new_entries)
    events = [
        TransferBatch(operator, bytes(f), bytes(t), ids, amounts)
        for _i, f, t, ids, amounts, _init in verified.batch.groups()
        if ids
    ]
    log.info(
        "initial holders updated",
        extra={
            "ranges": len(verified.new_entries),
            "implicit_moves": verified.implicit_moves,
            "materialized": len(verified.materializations),
        },
    )
    return events


# --------------------------------- lock ------------------------------------


def lock_initial_holders(state: LedgerState, watermark: int) -> InitialHoldersLocked:
    if not _is_int(watermark) or watermark < 0:
        raise MalformedBatch("watermark must be a non-negative integer")
    if watermark > state.last_minted:
        raise UnmintedTokens(watermark=watermark, last_minted=state.last_minted)
    if watermark <= state.lock_watermark:
        raise AlreadyLocked(watermark=watermark, current=state.lock_watermark)
    state.lock_watermark = watermark
    return InitialHoldersLocked(watermark)


def disable_updates(state: LedgerState, account: bytes) -> Optional[InitialHoldersRangeUpdateDisabled]:
    if state.updates_disabled:
        return None
    state.updates_disabled = True
    return InitialHoldersRangeUpdateDisabled(account)


__all__ = [
    "UpdatePlan",
    "VerifiedUpdate",
    "build_partition",
    "plan_update",
    "verify_update",
    "commit_update",
    "lock_initial_holders",
    "disable_updates",
]
