"""
mintrange.runtime.transfers — manual mints and holder-initiated transfers.

Both are collaborators of the override ledger: every pair they touch is
materialized at its resulting balance, which freezes it against later
retroactive re-pointing of initial holders.
"""

from __future__ import annotations

from typing import List, Sequence, Union

from ..errors import InsufficientBalance, MalformedBatch
from ..state.ledger import LedgerState
from ..types.events import TransferBatch, TransferSingle
from ..types.ranges import ZERO_ADDRESS
from .balances import balance_of, materialize

TransferEvent = Union[TransferSingle, TransferBatch]


def _check_batch(ids: Sequence[int], amounts: Sequence[int]) -> None:
    if len(ids) != len(amounts):
        raise MalformedBatch(
            "ids and amounts length mismatch", data={"ids": len(ids), "amounts": len(amounts)}
        )
    for i, (token_id, amount) in enumerate(zip(ids, amounts)):
        if not isinstance(token_id, int) or isinstance(token_id, bool) or token_id < 0:
            raise MalformedBatch("token ids must be non-negative integers", index=i)
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise MalformedBatch("amounts must be non-negative integers", index=i)


def _event(operator: bytes, from_: bytes, to: bytes, ids: Sequence[int],
           amounts: Sequence[int], single: bool) -> TransferEvent:
    if single:
        return TransferSingle(operator, from_, to, ids[0], amounts[0])
    return TransferBatch(operator, from_, to, tuple(ids), tuple(amounts))


def apply_mint(
    state: LedgerState,
    operator: bytes,
    to: bytes,
    ids: Sequence[int],
    amounts: Sequence[int],
    *,
    single: bool = False,
) -> TransferEvent:
    """Mint outside of any range. The ids become manually minted."""
    _check_batch(ids, amounts)
    for token_id, amount in zip(ids, amounts):
        materialize(state, token_id, to, balance_of(state, to, token_id) + amount)
        state.overrides.add_manual_supply(token_id, amount)
    return _event(operator, ZERO_ADDRESS, to, ids, amounts, single)


def apply_transfer(
    state: LedgerState,
    operator: bytes,
    from_: bytes,
    to: bytes,
    ids: Sequence[int],
    amounts: Sequence[int],
    *,
    single: bool = False,
) -> TransferEvent:
    _check_batch(ids, amounts)
    for token_id, amount in zip(ids, amounts):
        have = balance_of(state, from_, token_id)
        if have < amount:
            raise InsufficientBalance(token_id=token_id, address=from_, balance=have, amount=amount)
        materialize(state, token_id, from_, have - amount)
        materialize(state, token_id, to, balance_of(state, to, token_id) + amount)
    return _event(operator, from_, to, ids, amounts, single)


def balances_of(state: LedgerState, addresses: Sequence[bytes], ids: Sequence[int]) -> List[int]:
    if len(addresses) != len(ids):
        raise MalformedBatch(
            "addresses and ids length mismatch", data={"addresses": len(addresses), "ids": len(ids)}
        )
    return [balance_of(state, a, i) for a, i in zip(addresses, ids)]


__all__ = ["apply_mint", "apply_transfer", "balances_of"]
