"""
mintrange.state.ledger — typed view over the journaled ledger state.

`LedgerState` bundles the partitions, snapshot log and override ledger with the
scalar fields every operation consults (last minted id, lock watermark, phase,
owner, approvals). All reads and writes go through the journal, so whatever a
runtime routine does inside `Journal.atomic()` is discarded on failure.
"""

from __future__ import annotations

from typing import Any

from ..config import LedgerConfig
from .journal import Journal
from .overrides import OverrideLedger
from .partitions import RangePartitionStore
from .snapshots import SnapshotLog


class LedgerState:
    K_LAST_MINTED = ("meta", "last_minted")
    K_LOCK = ("meta", "lock_watermark")
    K_UPDATES_DISABLED = ("meta", "updates_disabled")
    K_PHASE = ("meta", "phase")
    K_OWNER = ("meta", "owner")
    K_REVISION = ("meta", "revision")
    APPROVAL = "approval"

    def __init__(self, journal: Journal, config: LedgerConfig) -> None:
        self.journal = journal
        self.config = config
        self.partitions = RangePartitionStore(journal, first_range_id=config.first_range_id)
        self.snapshots = SnapshotLog(journal)
        self.overrides = OverrideLedger(journal)

    @property
    def seed(self) -> bytes:
        return self.config.supply_seed

    def _get(self, key, default: Any) -> Any:
        return self.journal.get(key, default)

    # scalar fields --------------------------------------------------------

    @property
    def last_minted(self) -> int:
        return self._get(self.K_LAST_MINTED, self.config.first_range_id - 1)

    @last_minted.setter
    def last_minted(self, value: int) -> None:
        self.journal.set(self.K_LAST_MINTED, value)

    @property
    def lock_watermark(self) -> int:
        return self._get(self.K_LOCK, 0)

    @lock_watermark.setter
    def lock_watermark(self, value: int) -> None:
        self.journal.set(self.K_LOCK, value)

    @property
    def updates_disabled(self) -> bool:
        return self._get(self.K_UPDATES_DISABLED, False)

    @updates_disabled.setter
    def updates_disabled(self, value: bool) -> None:
        self.journal.set(self.K_UPDATES_DISABLED, bool(value))

    @property
    def phase(self) -> str:
        return self._get(self.K_PHASE, "live")

    @phase.setter
    def phase(self, value: str) -> None:
        self.journal.set(self.K_PHASE, value)

    @property
    def owner(self) -> bytes:
        return self._get(self.K_OWNER, b"")

    @owner.setter
    def owner(self, value: bytes) -> None:
        self.journal.set(self.K_OWNER, value)

    @property
    def revision(self) -> int:
        return self._get(self.K_REVISION, 0)

    def bump_revision(self) -> int:
        rev = self.revision + 1
        self.journal.set(self.K_REVISION, rev)
        return rev

    # approvals ------------------------------------------------------------

    def is_approved_for_all(self, account: bytes, operator: bytes) -> bool:
        return self._get((self.APPROVAL, account, operator), False)

    def set_approval(self, account: bytes, operator: bytes, approved: bool) -> None:
        self.journal.set((self.APPROVAL, account, operator), bool(approved))


__all__ = ["LedgerState"]
