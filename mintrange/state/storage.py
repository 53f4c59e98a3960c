"""
mintrange.state.storage — the base key/value store under the journal.

A minimal, deterministic mapping from namespaced tuple keys to immutable
Python values (ints, bools, bytes, tuples and frozen records). The journal
stages writes on top of it and only touches it on a successful commit.

Key layout used by the ledger
-----------------------------
    ("meta", name)                 scalar ledger fields (owner, phase, ...)
    (<partition>, "len")           number of entries in a range partition
    (<partition>, index)           one HolderRangeEntry / SupplyRangeEntry
    ("snapshots", "len" | index)   minted-range snapshots
    ("override", token_id, addr)   materialized balances
    ("manual", token_id)           manually minted supply per id
    ("approval", owner, operator)  operator approvals

Typical usage
-------------
    store = StateStore()
    store.set(("meta", "owner"), b"...")
    store.get(("meta", "owner"))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterator, MutableMapping, Optional, Tuple

Key = Tuple[Hashable, ...]


def _check_key(key: Any) -> Key:
    if not isinstance(key, tuple) or not key:
        raise TypeError("state keys must be non-empty tuples")
    return key


@dataclass
class StateStore:
    """
    A flat key/value store.

    Parameters
    ----------
    backend :
        Optional external mapping to store state. If not provided, an internal
        dict is used.
    """
    backend: Optional[MutableMapping[Key, Any]] = None

    _store: MutableMapping[Key, Any] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._store = self.backend if self.backend is not None else {}

    # ------------------------------ core ops --------------------------------

    def get(self, key: Key, default: Any = None) -> Any:
        return self._store.get(_check_key(key), default)

    def has(self, key: Key) -> bool:
        return _check_key(key) in self._store

    def set(self, key: Key, value: Any) -> None:
        if value is None:
            raise ValueError("None is not storable; use delete()")
        self._store[_check_key(key)] = value

    def delete(self, key: Key) -> bool:
        """Delete `key`. Returns True if it existed."""
        return self._store.pop(_check_key(key), None) is not None

    # ------------------------------ iteration -------------------------------

    def items(self, prefix: Tuple[Hashable, ...] = ()) -> Iterator[Tuple[Key, Any]]:
        """Iterate (key, value) pairs whose key starts with `prefix`."""
        n = len(prefix)
        for k, v in list(self._store.items()):
            if k[:n] == prefix:
                yield k, v

    def __len__(self) -> int:
        return len(self._store)

    def export(self) -> Dict[Key, Any]:
        """Shallow copy of the whole store (values are immutable)."""
        return dict(self._store)


__all__ = ["StateStore", "Key"]
