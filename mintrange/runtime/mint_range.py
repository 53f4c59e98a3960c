"""
mintrange.runtime.mint_range — plan, verify and commit range mints.

A range mint covers the `count` ids after the last minted one. Planning is a
pure view that returns the complete distribution plus a checksum; committing
re-derives the plan from current state and refuses anything that differs, so
a plan computed before a configuration change cannot be minted.

Committing writes a single snapshot and advances the last-minted id; no
per-(id, holder) record is written. One TransferBatch from the zero address is
emitted per holder slot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..errors import InvalidCount, MalformedBatch, StaleInput
from ..state.ledger import LedgerState
from ..types.events import TransferBatch
from ..types.inputs import MintRangeInput
from ..types.ranges import ZERO_ADDRESS, HolderRangeEntry, MintedRangeSnapshot, SupplyRangeEntry
from .checksum import mint_checksum
from .supply import slot_amount

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintPlan:
    input: MintRangeInput
    checksum: bytes
    holder_entry: HolderRangeEntry
    supply_entry: SupplyRangeEntry
    excluded: tuple

    @property
    def checksum_hex(self) -> str:
        return "0x" + self.checksum.hex()


def _check_count(count: object, limit: int) -> int:
    if not isinstance(count, int) or isinstance(count, bool) or count <= 0:
        raise InvalidCount(count=count)
    if count > limit:
        raise InvalidCount(f"count exceeds the per-mint limit of {limit}", count=count)
    return count


def plan_mint_range(state: LedgerState, count: int) -> MintPlan:
    count = _check_count(count, state.config.max_mint_count)
    start = state.last_minted + 1
    end = start + count - 1
    holders = state.partitions.active_holder_range(start)
    supply = state.partitions.active_supply_range(start)

    ids: List[int] = []
    excluded: List[int] = []
    for token_id in range(start, end + 1):
        if state.overrides.is_manual(token_id):
            excluded.append(token_id)
        else:
            ids.append(token_id)

    amounts = tuple(
        tuple(slot_amount(i, k, holders, supply, state.seed) for i in ids)
        for k in range(len(holders.holders))
    )
    mint_input = MintRangeInput(
        start_id=start, end_id=end, ids=tuple(ids), holders=holders.holders, amounts=amounts
    )
    plan = MintPlan(
        input=mint_input,
        checksum=mint_checksum(mint_input, holders, supply),
        holder_entry=holders,
        supply_entry=supply,
        excluded=tuple(excluded),
    )
    log.debug(
        "mint range planned",
        extra={"start_id": start, "end_id": end, "skipped": len(excluded), "checksum": plan.checksum_hex},
    )
    return plan


def _check_shape(mint_input: MintRangeInput) -> None:
    if len(mint_input.amounts) != len(mint_input.holders):
        raise MalformedBatch(
            "one amounts row per holder is required",
            data={"holders": len(mint_input.holders), "rows": len(mint_input.amounts)},
        )
    for k, row in enumerate(mint_input.amounts):
        if len(row) != len(mint_input.ids):
            raise MalformedBatch("amounts row length must match ids", index=k)


def verify_mint_range(
    state: LedgerState, mint_input: MintRangeInput, checksum: Optional[bytes] = None
) -> MintPlan:
    """Re-derive the plan for the input's span and require an exact match."""
    if not isinstance(mint_input, MintRangeInput):
        raise MalformedBatch("expected a MintRangeInput")
    _check_shape(mint_input)
    expected_start = state.last_minted + 1
    if mint_input.start_id != expected_start:
        raise StaleInput(
            "input does not start after the last minted id",
            data={"start_id": mint_input.start_id, "expected": expected_start},
        )
    plan = plan_mint_range(state, mint_input.count)
    if plan.input != mint_input:
        raise StaleInput("input does not match the current mint plan")
    if checksum is not None and bytes(checksum) != plan.checksum:
        raise StaleInput(
            "checksum does not match the current mint plan", data={"expected": plan.checksum_hex}
        )
    return plan


def commit_mint_range(state: LedgerState, plan: MintPlan, operator: bytes) -> List[TransferBatch]:
    mint_input = plan.input
    state.snapshots.append(MintedRangeSnapshot(
        start_id=mint_input.start_id,
        end_id=mint_input.end_id,
        holder_entry=plan.holder_entry,
        supply_entry=plan.supply_entry,
        excluded=plan.excluded,
    ))
    state.last_minted = mint_input.end_id
    if not mint_input.ids:
        return []
    return [
        TransferBatch(operator, ZERO_ADDRESS, holder, mint_input.ids, mint_input.amounts[k])
        for k, holder in enumerate(mint_input.holders)
    ]


__all__ = ["MintPlan", "plan_mint_range", "verify_mint_range", "commit_mint_range"]
