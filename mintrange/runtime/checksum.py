"""
mintrange.runtime.checksum — canonical digests of mint and update inputs.

Inputs are encoded with canonical CBOR (deterministic map ordering, shortest
integer forms) and hashed with SHA3-256 under a per-purpose domain tag. The
digest binds both the input and the state it was planned against, so a plan
goes stale when that state changes.
"""

from __future__ import annotations

import hashlib
from typing import Any

import cbor2

from ..types.inputs import MintRangeInput, UpdateInitialHolderRangesInput
from ..types.ranges import HolderRangeEntry, SupplyRangeEntry

MINT_DOMAIN = b"mintrange/mint-range/v1"
UPDATE_DOMAIN = b"mintrange/update-holders/v1"


def canonical_bytes(obj: Any) -> bytes:
    return cbor2.dumps(obj, canonical=True)


def digest(domain: bytes, obj: Any) -> bytes:
    return hashlib.sha3_256(domain + canonical_bytes(obj)).digest()


def mint_checksum(
    mint_input: MintRangeInput, holders: HolderRangeEntry, supply: SupplyRangeEntry
) -> bytes:
    return digest(MINT_DOMAIN, {
        "input": mint_input.to_canonical(),
        "holder_range": [holders.start_id, list(holders.holders), list(holders.amounts)],
        "supply_range": [supply.start_id, supply.min_supply, supply.max_supply],
    })


def update_checksum(
    batch: UpdateInitialHolderRangesInput,
    *,
    revision: int,
    last_minted: int,
    lock_watermark: int,
    current_breakpoints: list,
) -> bytes:
    return digest(UPDATE_DOMAIN, {
        "input": batch.to_canonical(),
        "revision": revision,
        "last_minted": last_minted,
        "lock": lock_watermark,
        "breakpoints": list(current_breakpoints),
    })


__all__ = ["MINT_DOMAIN", "UPDATE_DOMAIN", "canonical_bytes", "digest", "mint_checksum", "update_checksum"]
