"""
mintrange — range-compressed, lazily materialized multi-token ledger.

Large contiguous id ranges are minted to a small set of initial holders in one
state transition; per-(id, holder) balances are only written when they diverge
from the configured default. Initial holders of already-minted ids can later be
re-pointed retroactively while the ledger is paused, up to a lock watermark.

The common symbols are lazily re-exported from their submodules on first access.
"""

from __future__ import annotations

from importlib import import_module as _imp
from typing import Any, Dict, Tuple

from .version import __version__

# Map of public attributes → (submodule, symbol)
_exports: Dict[str, Tuple[str, str]] = {
    "MintRangeToken": ("runtime.token", "MintRangeToken"),
    "LedgerConfig": ("config", "LedgerConfig"),
    "load_config": ("config", "load_config"),
    "get_config": ("config", "get_config"),
    "LedgerError": ("errors", "LedgerError"),
    "MintRangeInput": ("types.inputs", "MintRangeInput"),
    "UpdateInitialHolderRangesInput": ("types.inputs", "UpdateInitialHolderRangesInput"),
    "ZERO_ADDRESS": ("types.ranges", "ZERO_ADDRESS"),
    "InMemoryEventSink": ("state.events", "InMemoryEventSink"),
    "JsonlEventSink": ("state.events", "JsonlEventSink"),
    "replay_balances": ("state.events", "replay_balances"),
    "token_slug_from_token_id": ("utils.dates", "token_slug_from_token_id"),
}

__all__ = tuple(["__version__", *_exports.keys()])


def __getattr__(name: str) -> Any:
    if name in _exports:
        submod, symbol = _exports[name]
        mod = _imp(f"{__name__}.{submod}")
        return getattr(mod, symbol)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list:  # pragma: no cover
    return sorted(list(globals().keys()) + list(__all__))
