"""
mintrange.types.events — events emitted by committed ledger transactions.

Transfer events follow multi-token conventions: a mint has `from_` equal to the
zero address; a retroactive re-pointing is reported as a transfer between the
old and the new initial holder. Indexers can rebuild every balance from the
transfer events alone (see `mintrange.state.events.replay_balances`).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Iterator, Tuple, Type

from .ranges import hex_addr


def _h2b(h: str) -> bytes:
    if h.startswith(("0x", "0X")):
        h = h[2:]
    return bytes.fromhex(h)


@dataclass(frozen=True)
class LedgerEvent:
    name: ClassVar[str] = "LedgerEvent"

    def involves(self, address: bytes) -> bool:
        for f in fields(self):
            if getattr(self, f.name) == address:
                return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"event": self.name}
        for f in fields(self):
            v = getattr(self, f.name)
            if isinstance(v, bytes):
                v = hex_addr(v)
            elif isinstance(v, tuple):
                v = list(v)
            out[f.name] = v
        return out


@dataclass(frozen=True)
class TransferSingle(LedgerEvent):
    name: ClassVar[str] = "TransferSingle"

    operator: bytes
    from_: bytes
    to: bytes
    token_id: int
    amount: int

    def transfers(self) -> Iterator[Tuple[int, int]]:
        yield self.token_id, self.amount


@dataclass(frozen=True)
class TransferBatch(LedgerEvent):
    name: ClassVar[str] = "TransferBatch"

    operator: bytes
    from_: bytes
    to: bytes
    token_ids: Tuple[int, ...]
    amounts: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "token_ids", tuple(self.token_ids))
        object.__setattr__(self, "amounts", tuple(self.amounts))

    def transfers(self) -> Iterator[Tuple[int, int]]:
        return iter(zip(self.token_ids, self.amounts))


@dataclass(frozen=True)
class ApprovalForAll(LedgerEvent):
    name: ClassVar[str] = "ApprovalForAll"

    account: bytes
    operator: bytes
    approved: bool


@dataclass(frozen=True)
class Paused(LedgerEvent):
    name: ClassVar[str] = "Paused"

    account: bytes


@dataclass(frozen=True)
class Unpaused(LedgerEvent):
    name: ClassVar[str] = "Unpaused"

    account: bytes


@dataclass(frozen=True)
class OwnershipTransferred(LedgerEvent):
    name: ClassVar[str] = "OwnershipTransferred"

    previous_owner: bytes
    new_owner: bytes


@dataclass(frozen=True)
class InitialHoldersLocked(LedgerEvent):
    name: ClassVar[str] = "InitialHoldersLocked"

    watermark: int


@dataclass(frozen=True)
class InitialHoldersRangeUpdateDisabled(LedgerEvent):
    name: ClassVar[str] = "InitialHoldersRangeUpdateDisabled"

    account: bytes


EVENT_TYPES: Dict[str, Type[LedgerEvent]] = {
    cls.name: cls
    for cls in (
        TransferSingle,
        TransferBatch,
        ApprovalForAll,
        Paused,
        Unpaused,
        OwnershipTransferred,
        InitialHoldersLocked,
        InitialHoldersRangeUpdateDisabled,
    )
}


def event_from_dict(obj: Dict[str, Any]) -> LedgerEvent:
    """Inverse of `LedgerEvent.to_dict()`."""
    try:
        cls = EVENT_TYPES[obj["event"]]
    except KeyError:
        raise ValueError(f"unknown event: {obj.get('event')!r}") from None
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        v = obj[f.name]
        if f.type in ("bytes",):
            v = _h2b(v)
        elif isinstance(v, list):
            v = tuple(v)
        kwargs[f.name] = v
    return cls(**kwargs)


__all__ = [
    "LedgerEvent",
    "TransferSingle",
    "TransferBatch",
    "ApprovalForAll",
    "Paused",
    "Unpaused",
    "OwnershipTransferred",
    "InitialHoldersLocked",
    "InitialHoldersRangeUpdateDisabled",
    "EVENT_TYPES",
    "event_from_dict",
]
