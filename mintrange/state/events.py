"""
mintrange.state.events — pluggable event sinks and transfer replay.

Events are appended only after the transaction that produced them has
committed, in emission order. Three backends are provided:

- InMemoryEventSink: fast, test/dev friendly; keeps all records in RAM.
- JsonlEventSink: append-only JSONL file; durable and simple to operate.
- NullEventSink: drops everything.

`replay_balances` rebuilds every (id, address) balance from transfer events
alone; it must agree with `MintRangeToken.balance_of` for every pair.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from ..types.events import LedgerEvent, TransferBatch, TransferSingle, event_from_dict
from ..types.ranges import is_zero_address

log = logging.getLogger(__name__)


# =============================================================================
# Public data model
# =============================================================================


@dataclass(frozen=True)
class EventRecord:
    """
    An event with its position in the ledger history.

    tx_index  : 0-based index of the committed transaction.
    log_index : 0-based index of the event inside that transaction.
    """

    tx_index: int
    log_index: int
    event: LedgerEvent

    @property
    def name(self) -> str:
        return self.event.name


# =============================================================================
# Sink interface
# =============================================================================


@runtime_checkable
class EventSink(Protocol):
    def append(self, event: LedgerEvent, *, tx_index: int, log_index: int) -> EventRecord:
        """Append a single event with its position. Returns the stored record."""

    def get_logs(
        self,
        *,
        name: Optional[str] = None,
        address: Optional[bytes] = None,
        from_tx: Optional[int] = None,
        to_tx: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Iterable[EventRecord]:
        """Iterate matching records in ascending (tx, log) order."""

    def flush(self) -> None:
        """Force persistence, if applicable."""

    def close(self) -> None:
        """Release resources (files, buffers)."""


def _record_matches(
    rec: EventRecord,
    name: Optional[str],
    address: Optional[bytes],
    from_tx: Optional[int],
    to_tx: Optional[int],
) -> bool:
    if from_tx is not None and rec.tx_index < from_tx:
        return False
    if to_tx is not None and rec.tx_index > to_tx:
        return False
    if name is not None and rec.name != name:
        return False
    if address is not None and not rec.event.involves(address):
        return False
    return True


def _limited(it: Iterable[EventRecord], limit: Optional[int]) -> Iterable[EventRecord]:
    n = 0
    for rec in it:
        if limit is not None and n >= limit:
            return
        yield rec
        n += 1


# =============================================================================
# In-memory sink
# =============================================================================


class InMemoryEventSink(EventSink):
    """A simple, thread-safe in-memory sink for tests and local tooling."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: List[EventRecord] = []

    def append(self, event: LedgerEvent, *, tx_index: int, log_index: int) -> EventRecord:
        rec = EventRecord(tx_index=tx_index, log_index=log_index, event=event)
        with self._lock:
            self._records.append(rec)
        return rec

    def get_logs(
        self,
        *,
        name: Optional[str] = None,
        address: Optional[bytes] = None,
        from_tx: Optional[int] = None,
        to_tx: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Iterable[EventRecord]:
        with self._lock:
            snapshot = list(self._records)
        return list(_limited(
            (r for r in snapshot if _record_matches(r, name, address, from_tx, to_tx)), limit
        ))

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> None:
        return

    def close(self) -> None:
        with self._lock:
            self._records.clear()


# =============================================================================
# JSONL sink (durable)
# =============================================================================


class JsonlEventSink(EventSink):
    """
    Append-only JSONL sink. Each line is one record:

        {"tx": 3, "log": 0, "event": {"event": "TransferBatch", "operator": "0x…", ...}}
    """

    def __init__(self, path: str) -> None:
        self._path = str(path)
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        self._fh = open(self._path, "a+", encoding="utf-8", buffering=1)
        self._lock = threading.RLock()

    @staticmethod
    def _encode(rec: EventRecord) -> str:
        obj = {"tx": rec.tx_index, "log": rec.log_index, "event": rec.event.to_dict()}
        return json.dumps(obj, separators=(",", ":"))

    @staticmethod
    def _decode(line: str) -> EventRecord:
        obj = json.loads(line)
        return EventRecord(
            tx_index=int(obj["tx"]), log_index=int(obj["log"]), event=event_from_dict(obj["event"])
        )

    def append(self, event: LedgerEvent, *, tx_index: int, log_index: int) -> EventRecord:
        rec = EventRecord(tx_index=tx_index, log_index=log_index, event=event)
        line = self._encode(rec)
        with self._lock:
            self._fh.write(line + "\n")
        return rec

    def get_logs(
        self,
        *,
        name: Optional[str] = None,
        address: Optional[bytes] = None,
        from_tx: Optional[int] = None,
        to_tx: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Iterable[EventRecord]:
        out: List[EventRecord] = []
        with self._lock:
            self._fh.flush()
            self._fh.seek(0)
            for line in self._fh:
                if not line.strip():
                    continue
                try:
                    rec = self._decode(line)
                except (ValueError, KeyError) as e:
                    log.warning("Skipping malformed event line: %s (%r)", line[:120], e)
                    continue
                if _record_matches(rec, name, address, from_tx, to_tx):
                    out.append(rec)
                    if limit is not None and len(out) >= limit:
                        break
        return out

    def flush(self) -> None:
        with self._lock:
            self._fh.flush()
            os.fsync(self._fh.fileno())

    def close(self) -> None:
        with self._lock:
            if not self._fh.closed:
                self._fh.flush()
                self._fh.close()


# =============================================================================
# Null sink
# =============================================================================


class NullEventSink(EventSink):
    """A sink that drops everything."""

    def append(self, event: LedgerEvent, *, tx_index: int, log_index: int) -> EventRecord:
        return EventRecord(tx_index=tx_index, log_index=log_index, event=event)

    def get_logs(self, **_filters) -> Iterable[EventRecord]:
        return []

    def flush(self) -> None:
        return

    def close(self) -> None:
        return


# =============================================================================
# Replay
# =============================================================================


def replay_balances(records: Iterable[EventRecord]) -> Dict[Tuple[int, bytes], int]:
    """
    Rebuild balances from transfer events. Mints come from the zero address;
    every other transfer debits `from_` and credits `to`. Pairs that end at
    zero are kept so callers can tell "touched" from "never seen".
    """
    balances: Dict[Tuple[int, bytes], int] = defaultdict(int)
    for rec in records:
        ev = rec.event
        if not isinstance(ev, (TransferSingle, TransferBatch)):
            continue
        for token_id, amount in ev.transfers():
            if not is_zero_address(ev.from_):
                balances[(token_id, ev.from_)] -= amount
            if not is_zero_address(ev.to):
                balances[(token_id, ev.to)] += amount
    return dict(balances)


__all__ = [
    "EventRecord",
    "EventSink",
    "InMemoryEventSink",
    "JsonlEventSink",
    "NullEventSink",
    "replay_balances",
]
