"""
mintrange.types.inputs — call inputs for range minting and retroactive updates.

Both inputs are plain immutable records. Sequences passed in as lists are
normalized to tuples on construction so inputs can be hashed, compared and
encoded canonically for checksums.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from .ranges import hex_addr


def _flat(values: Sequence[Any]) -> Tuple[Any, ...]:
    # Element types are left alone; verification rejects non-integer ids.
    return tuple(values)


def _nested(values: Sequence[Sequence[Any]]) -> Tuple[Tuple[Any, ...], ...]:
    return tuple(tuple(v) for v in values)


@dataclass(frozen=True)
class MintRangeInput:
    """
    The full distribution of one range mint.

    `ids` lists the ids that will carry implicit defaults (manually minted ids in
    `[start_id, end_id]` are left out); `amounts[k][i]` is what `holders[k]`
    receives of `ids[i]`.
    """

    start_id: int
    end_id: int
    ids: Tuple[int, ...]
    holders: Tuple[bytes, ...]
    amounts: Tuple[Tuple[int, ...], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", _flat(self.ids))
        object.__setattr__(self, "holders", tuple(self.holders))
        object.__setattr__(self, "amounts", _nested(self.amounts))

    @property
    def count(self) -> int:
        return self.end_id - self.start_id + 1

    def to_canonical(self) -> Dict[str, Any]:
        return {
            "start": self.start_id,
            "end": self.end_id,
            "ids": list(self.ids),
            "holders": list(self.holders),
            "amounts": [list(a) for a in self.amounts],
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_id": self.start_id,
            "end_id": self.end_id,
            "ids": list(self.ids),
            "holders": [hex_addr(h) for h in self.holders],
            "amounts": [list(a) for a in self.amounts],
        }


@dataclass(frozen=True)
class UpdateInitialHolderRangesInput:
    """
    A retroactive re-pointing of initial holders.

    Group `i` moves `ids[i]` (with `amounts[i]`) from `from_addresses[i]` to
    `to_addresses[i]`. Ids that are also listed in `initialize[i]` are explicit
    moves; ids only listed in `initialize[i]` freeze both pairs at their current
    balance. `new_initial_holders[j]` becomes active from the absolute id
    `new_initial_holders_range[j]`; the first breakpoint must be 0.
    """

    from_addresses: Tuple[bytes, ...]
    to_addresses: Tuple[bytes, ...]
    ids: Tuple[Tuple[int, ...], ...]
    amounts: Tuple[Tuple[int, ...], ...]
    initialize: Tuple[Tuple[int, ...], ...]
    new_initial_holders: Tuple[Tuple[bytes, ...], ...]
    new_initial_holders_range: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "from_addresses", tuple(self.from_addresses))
        object.__setattr__(self, "to_addresses", tuple(self.to_addresses))
        object.__setattr__(self, "ids", _nested(self.ids))
        object.__setattr__(self, "amounts", _nested(self.amounts))
        object.__setattr__(self, "initialize", _nested(self.initialize))
        object.__setattr__(self, "new_initial_holders", _nested(self.new_initial_holders))
        object.__setattr__(self, "new_initial_holders_range", _flat(self.new_initial_holders_range))

    def groups(self):
        """Iterate `(index, from, to, ids, amounts, initialize)` per group."""
        return zip(
            range(len(self.from_addresses)),
            self.from_addresses,
            self.to_addresses,
            self.ids,
            self.amounts,
            self.initialize,
        )

    def to_canonical(self) -> Dict[str, Any]:
        return {
            "from": list(self.from_addresses),
            "to": list(self.to_addresses),
            "ids": [list(x) for x in self.ids],
            "amounts": [list(x) for x in self.amounts],
            "initialize": [list(x) for x in self.initialize],
            "holders": [list(x) for x in self.new_initial_holders],
            "range": list(self.new_initial_holders_range),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_addresses": [hex_addr(a) for a in self.from_addresses],
            "to_addresses": [hex_addr(a) for a in self.to_addresses],
            "ids": [list(x) for x in self.ids],
            "amounts": [list(x) for x in self.amounts],
            "initialize": [list(x) for x in self.initialize],
            "new_initial_holders": [[hex_addr(a) for a in hs] for hs in self.new_initial_holders],
            "new_initial_holders_range": list(self.new_initial_holders_range),
        }


__all__ = ["MintRangeInput", "UpdateInitialHolderRangesInput"]
