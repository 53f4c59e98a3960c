"""
mintrange.state — journaled state layer (store, journal, partitions, overrides, events).

To keep import-time overhead low, the common symbols are lazily re-exported from
their submodules on first access.

Submodules:
- storage:     flat key/value base store
- journal:     journaling writes, checkpoints, revert/commit
- partitions:  holder and supply range partitions
- snapshots:   append-only minted-range log
- overrides:   materialized balances and manual supply
- ledger:      typed view bundling all of the above
- events:      event sink backends and transfer replay
"""

from __future__ import annotations

from importlib import import_module as _imp
from typing import Any, Dict, Tuple

_exports: Dict[str, Tuple[str, str]] = {
    "StateStore": ("storage", "StateStore"),
    "Journal": ("journal", "Journal"),
    "RangePartition": ("partitions", "RangePartition"),
    "RangePartitionStore": ("partitions", "RangePartitionStore"),
    "SnapshotLog": ("snapshots", "SnapshotLog"),
    "OverrideLedger": ("overrides", "OverrideLedger"),
    "LedgerState": ("ledger", "LedgerState"),
    "EventSink": ("events", "EventSink"),
    "InMemoryEventSink": ("events", "InMemoryEventSink"),
    "JsonlEventSink": ("events", "JsonlEventSink"),
    "NullEventSink": ("events", "NullEventSink"),
    "replay_balances": ("events", "replay_balances"),
}

__all__ = tuple(_exports.keys())


def __getattr__(name: str) -> Any:
    if name in _exports:
        submod, symbol = _exports[name]
        mod = _imp(f"{__name__}.{submod}")
        return getattr(mod, symbol)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
