"""
mintrange.state.partitions — append-only holder and supply range partitions.

A partition is an ordered list of entries with strictly increasing `start_id`;
the first entry always starts at id 0. The entry active for an id is the one
with the greatest `start_id <= id` (`bisect` over the start ids).

Entries that no range-minted id falls under yet are *pending*: configuring
again overwrites the pending entry in place (last writer before a mint wins).
Once an id is minted under an entry it is history, and the next configuration
call appends a new breakpoint at `last_minted + 1`.
"""

from __future__ import annotations

import bisect
import logging
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from ..errors import ConfigurationError, InvalidAddress
from ..types.ranges import HolderRangeEntry, SupplyRangeEntry, is_zero_address
from .journal import Journal

log = logging.getLogger(__name__)

E = TypeVar("E", HolderRangeEntry, SupplyRangeEntry)


# -------------------------------- validation --------------------------------


def validate_holders(holders: Sequence[bytes], amounts: Sequence[int]) -> None:
    """
    Holder lists must be non-empty, unique, free of the zero address and paired
    one-to-one with positive amounts (slot 0 may carry 0: it is sized by the
    supply range).
    """
    if isinstance(holders, (bytes, bytearray)) or len(holders) == 0:
        raise ConfigurationError("holders must be a non-empty list", field_name="holders")
    if len(holders) != len(amounts):
        raise ConfigurationError(
            "holders and amounts must have the same length",
            field_name="amounts",
            data={"holders": len(holders), "amounts": len(amounts)},
        )
    for h in holders:
        if not isinstance(h, (bytes, bytearray)):
            raise InvalidAddress("holder must be bytes", address=h)
        if is_zero_address(h):
            raise ConfigurationError("zero address is not a valid holder", field_name="holders")
    if len(set(bytes(h) for h in holders)) != len(holders):
        raise ConfigurationError("holders must be unique", field_name="holders")
    for k, a in enumerate(amounts):
        if not isinstance(a, int) or isinstance(a, bool) or a < 0 or (k > 0 and a == 0):
            raise ConfigurationError(
                "holder amounts must be positive integers", field_name="amounts", data={"slot": k}
            )


def validate_supply(min_supply: int, max_supply: int) -> None:
    for v in (min_supply, max_supply):
        if not isinstance(v, int) or isinstance(v, bool):
            raise ConfigurationError("supply bounds must be integers", field_name="supply")
    if not 0 < min_supply <= max_supply:
        raise ConfigurationError(
            "supply bounds must satisfy 0 < min <= max",
            field_name="supply",
            data={"min": min_supply, "max": max_supply},
        )


# -------------------------------- partition ---------------------------------


class RangePartition(Generic[E]):
    """One partition stored under `namespace` in the journal."""

    def __init__(self, journal: Journal, namespace: str) -> None:
        self._j = journal
        self._ns = namespace

    def __len__(self) -> int:
        return self._j.get((self._ns, "len"), 0)

    def entry(self, index: int) -> E:
        if not 0 <= index < len(self):
            raise IndexError(index)
        return self._j.get((self._ns, index))

    def entries(self) -> List[E]:
        return [self.entry(i) for i in range(len(self))]

    def breakpoints(self) -> List[int]:
        return [e.start_id for e in self.entries()]

    def index_at(self, token_id: int) -> int:
        found = bisect.bisect_right(self.breakpoints(), token_id) - 1
        if found < 0:
            raise ConfigurationError(
                f"no {self._ns} entry covers id {token_id}", data={"token_id": token_id}
            )
        return found

    def active_at(self, token_id: int) -> E:
        return self.entry(self.index_at(token_id))

    def last(self) -> Optional[E]:
        n = len(self)
        return self.entry(n - 1) if n else None

    # writes ---------------------------------------------------------------

    def append(self, entry: E) -> None:
        prev = self.last()
        if prev is None and entry.start_id != 0:
            raise ConfigurationError(f"first {self._ns} entry must start at 0")
        if prev is not None and entry.start_id <= prev.start_id:
            raise ConfigurationError(
                f"{self._ns} breakpoints must be strictly increasing",
                data={"previous": prev.start_id, "start_id": entry.start_id},
            )
        n = len(self)
        self._j.set((self._ns, n), entry)
        self._j.set((self._ns, "len"), n + 1)

    def replace_last(self, entry: E) -> None:
        n = len(self)
        if n == 0:
            raise ConfigurationError(f"{self._ns} partition is empty")
        self._j.set((self._ns, n - 1), entry)

    def replace_all(self, entries: Sequence[E]) -> None:
        old = len(self)
        for i, e in enumerate(entries):
            self._j.set((self._ns, i), e)
        for i in range(len(entries), old):
            self._j.delete((self._ns, i))
        self._j.set((self._ns, "len"), len(entries))


# ------------------------------ partition store -----------------------------


class RangePartitionStore:
    """
    Holder and supply partitions plus the staging rule shared by both.
    """

    HOLDERS = "holder_ranges"
    SUPPLY = "supply_ranges"

    def __init__(self, journal: Journal, *, first_range_id: int = 1) -> None:
        self.holders: RangePartition[HolderRangeEntry] = RangePartition(journal, self.HOLDERS)
        self.supply: RangePartition[SupplyRangeEntry] = RangePartition(journal, self.SUPPLY)
        self.first_range_id = first_range_id

    def initialize(
        self,
        holders: Sequence[bytes],
        amounts: Sequence[int],
        min_supply: int,
        max_supply: int,
    ) -> None:
        """Write the forced first entries at id 0."""
        if len(self.holders) or len(self.supply):
            raise ConfigurationError("range partitions are already initialized")
        validate_holders(holders, amounts)
        validate_supply(min_supply, max_supply)
        self.holders.append(HolderRangeEntry(0, tuple(holders), tuple(amounts)))
        self.supply.append(SupplyRangeEntry(0, min_supply, max_supply))

    def is_pending(self, entry: Union[HolderRangeEntry, SupplyRangeEntry], last_minted: int) -> bool:
        return max(entry.start_id, self.first_range_id) > last_minted

    def active_holder_range(self, token_id: int) -> HolderRangeEntry:
        return self.holders.active_at(token_id)

    def active_supply_range(self, token_id: int) -> SupplyRangeEntry:
        return self.supply.active_at(token_id)

    def append_holder_range(
        self, holders: Sequence[bytes], amounts: Sequence[int], *, last_minted: int
    ) -> HolderRangeEntry:
        validate_holders(holders, amounts)
        return self._stage(
            self.holders,
            lambda start: HolderRangeEntry(start, tuple(holders), tuple(amounts)),
            last_minted,
        )

    def append_supply_range(
        self, min_supply: int, max_supply: int, *, last_minted: int
    ) -> SupplyRangeEntry:
        validate_supply(min_supply, max_supply)
        return self._stage(
            self.supply,
            lambda start: SupplyRangeEntry(start, min_supply, max_supply),
            last_minted,
        )

    def _stage(self, partition: RangePartition, make: Callable[[int], E], last_minted: int) -> E:
        last = partition.last()
        if last is not None and self.is_pending(last, last_minted):
            entry = make(last.start_id)
            partition.replace_last(entry)
            log.debug("pending range entry overwritten", extra={"start_id": entry.start_id})
        else:
            entry = make(last_minted + 1)
            partition.append(entry)
            log.debug("range entry appended", extra={"start_id": entry.start_id})
        return entry

    # views ----------------------------------------------------------------

    def holder_ranges(self) -> Tuple[List[int], List[Tuple[bytes, ...]]]:
        entries = self.holders.entries()
        return [e.start_id for e in entries], [e.holders for e in entries]

    def supply_ranges(self) -> Tuple[List[int], List[Tuple[int, int]]]:
        entries = self.supply.entries()
        return [e.start_id for e in entries], [e.bounds() for e in entries]


__all__ = [
    "RangePartition",
    "RangePartitionStore",
    "validate_holders",
    "validate_supply",
]
