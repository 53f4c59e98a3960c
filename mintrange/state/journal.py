"""
mintrange.state.journal — journaling writes, checkpoints, revert/commit.

A deterministic, in-memory write journal layered over a `StateStore`. It
supports nested checkpoints via a stack of overlays. Writes go to the top
overlay; reads consult overlays from top → base. `commit()` merges the top
overlay into the next layer (or into the base store if it is the last layer).
`revert()` discards the top overlay.

Every public ledger mutation runs inside `atomic()`, which is what makes
multi-step operations (a range mint, a retroactive update with hundreds of
moves) all-or-nothing.

Intended usage
--------------
    j = Journal(StateStore())
    with j.atomic():
        j.set(("meta", "last_minted"), 30)
        j.set(("override", 5, addr), Override(...))
    # on exception inside the block nothing reaches the store
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Hashable, Iterator, List, Tuple

from .storage import Key, StateStore

_DELETED = object()


class Journal:
    """
    A copy-on-write write journal with nested checkpoints.

    API highlights
    --------------
    - begin() / commit() / revert() / depth()
    - commit_to(marker) / revert_to(marker)
    - atomic() context manager
    - get(), set(), delete(), has(), items(prefix)
    """

    def __init__(self, store: StateStore) -> None:
        self._base = store
        self._layers: List[Dict[Key, Any]] = []

    @property
    def store(self) -> StateStore:
        return self._base

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open overlays (0 when nothing is staged)."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the depth *before* it (a marker)."""
        self._layers.append({})
        return len(self._layers) - 1

    def commit(self) -> None:
        """Merge the top overlay into its parent, or into the base store."""
        if not self._layers:
            raise RuntimeError("commit() without begin()")
        top = self._layers.pop()
        if self._layers:
            self._layers[-1].update(top)
            return
        for k, v in top.items():
            if v is _DELETED:
                self._base.delete(k)
            else:
                self._base.set(k, v)

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise RuntimeError("revert() without begin()")
        self._layers.pop()

    def commit_to(self, marker: int) -> None:
        if marker < 0:
            raise ValueError("marker must be >= 0")
        while len(self._layers) > marker:
            self.commit()

    def revert_to(self, marker: int) -> None:
        if marker < 0:
            raise ValueError("marker must be >= 0")
        while len(self._layers) > marker:
            self.revert()

    @contextmanager
    def atomic(self) -> Iterator["Journal"]:
        """
        Run the block in a fresh checkpoint. Commits on normal exit; reverts every
        overlay opened since entry if the block raises.
        """
        marker = self.begin()
        try:
            yield self
        except BaseException:
            self.revert_to(marker)
            raise
        self.commit_to(marker)

    # --------------------------------------------------------------------- #
    # Key/value API
    # --------------------------------------------------------------------- #

    def get(self, key: Key, default: Any = None) -> Any:
        for layer in reversed(self._layers):
            if key in layer:
                v = layer[key]
                return default if v is _DELETED else v
        return self._base.get(key, default)

    def has(self, key: Key) -> bool:
        return self.get(key, _DELETED) is not _DELETED

    def set(self, key: Key, value: Any) -> None:
        if value is None:
            raise ValueError("None is not storable; use delete()")
        if not self._layers:
            raise RuntimeError("writes require an open checkpoint")
        self._layers[-1][key] = value

    def delete(self, key: Key) -> None:
        if not self._layers:
            raise RuntimeError("writes require an open checkpoint")
        self._layers[-1][key] = _DELETED

    def items(self, prefix: Tuple[Hashable, ...] = ()) -> Iterator[Tuple[Key, Any]]:
        """Visible (key, value) pairs under `prefix`, overlays applied. Stable order."""
        n = len(prefix)
        visible: Dict[Key, Any] = dict(self._base.items(prefix))
        for layer in self._layers:
            for k, v in layer.items():
                if k[:n] != prefix:
                    continue
                if v is _DELETED:
                    visible.pop(k, None)
                else:
                    visible[k] = v
        for k in sorted(visible, key=repr):
            yield k, visible[k]

    # --------------------------------------------------------------------- #
    # Debug/Introspection
    # --------------------------------------------------------------------- #

    def pending_keys(self) -> int:
        """Total number of staged entries across overlays."""
        return sum(len(layer) for layer in self._layers)


__all__ = ["Journal"]
