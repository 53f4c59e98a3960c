"""Shared addresses and small drivers for the ledger tests."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence, Tuple

from mintrange.runtime.token import MintRangeToken

OWNER = b"\x01" * 20
TREASURY = b"\x77" * 20
VAULT = b"\x42" * 20
ALICE = b"\xaa" * 20
BOB = b"\xbb" * 20
CAROL = b"\xcc" * 20
DAVE = b"\xdd" * 20
STRANGER = b"\xee" * 20


def mint(token: MintRangeToken, count: int):
    plan = token.plan_mint_range(count)
    token.mint_range_safe(OWNER, plan.input, plan.checksum)
    return plan


def update(
    token: MintRangeToken,
    new_holders: Sequence[Sequence[bytes]],
    new_range: Optional[Sequence[int]] = None,
):
    """Pause if needed, plan and apply a holder update; leaves the ledger paused."""
    if not token.paused():
        token.pause(OWNER)
    plan = token.get_update_initial_holder_ranges_input(new_holders, new_range)
    token.update_initial_holder_ranges_safe(OWNER, plan.input, plan.checksum)
    return plan


def snapshot_balances(
    token: MintRangeToken, addresses: Iterable[bytes], ids: Iterable[int]
) -> Dict[Tuple[int, bytes], int]:
    ids = list(ids)
    return {(i, a): token.balance_of(a, i) for a in addresses for i in ids}


def supply_by_id(token: MintRangeToken, addresses: Iterable[bytes], ids: Iterable[int]) -> Dict[int, int]:
    addresses = list(addresses)
    return {i: sum(token.balance_of(a, i) for a in addresses) for i in ids}
