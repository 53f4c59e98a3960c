"""
mintrange.state.snapshots — append-only log of minted ranges.

Each range mint records the span it covered together with the holder and
supply entries that were active at the time. Balances of those ids are always
recomputed from the snapshot, so later configuration never rewrites history.
"""

from __future__ import annotations

import bisect
from typing import List, Optional

from ..errors import ConfigurationError
from ..types.ranges import MintedRangeSnapshot
from .journal import Journal


class SnapshotLog:
    NAMESPACE = "snapshots"

    def __init__(self, journal: Journal) -> None:
        self._j = journal

    def __len__(self) -> int:
        return self._j.get((self.NAMESPACE, "len"), 0)

    def get(self, index: int) -> MintedRangeSnapshot:
        if not 0 <= index < len(self):
            raise IndexError(index)
        return self._j.get((self.NAMESPACE, index))

    def all(self) -> List[MintedRangeSnapshot]:
        return [self.get(i) for i in range(len(self))]

    def append(self, snapshot: MintedRangeSnapshot) -> None:
        n = len(self)
        if n:
            prev = self.get(n - 1)
            if snapshot.start_id != prev.end_id + 1:
                raise ConfigurationError(
                    "minted ranges must be contiguous",
                    data={"previous_end": prev.end_id, "start_id": snapshot.start_id},
                )
        if snapshot.end_id < snapshot.start_id:
            raise ConfigurationError("minted range must not be empty")
        self._j.set((self.NAMESPACE, n), snapshot)
        self._j.set((self.NAMESPACE, "len"), n + 1)

    def find(self, token_id: int) -> Optional[MintedRangeSnapshot]:
        """Snapshot whose span contains `token_id` (excluded ids included)."""
        snaps = self.all()
        i = bisect.bisect_right([s.start_id for s in snaps], token_id) - 1
        if i < 0 or token_id > snaps[i].end_id:
            return None
        return snaps[i]

    def covering(self, token_id: int) -> Optional[MintedRangeSnapshot]:
        """Snapshot that gives `token_id` implicit defaults, if any."""
        snap = self.find(token_id)
        if snap is None or not snap.covers(token_id):
            return None
        return snap


__all__ = ["SnapshotLog"]
