"""
mintrange.runtime.phase — the Live/Paused lifecycle and its single guard.

Every mutating operation names itself with an `Operation` and calls
`require_phase` before touching state. Admin work on already-minted history
(retroactive updates) is only possible while paused; everything that moves
tokens forward (minting, transfers, locking) only while live.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet

from ..errors import NotPaused, Paused


class Phase(str, Enum):
    LIVE = "live"
    PAUSED = "paused"


class Operation(str, Enum):
    CONFIGURE = "configure"
    MINT_RANGE = "mint_range"
    MINT = "mint"
    TRANSFER = "transfer"
    APPROVE = "approve"
    LOCK = "lock"
    DISABLE_UPDATES = "disable_updates"
    PAUSE = "pause"
    UNPAUSE = "unpause"
    UPDATE_HOLDERS = "update_holders"
    PLAN_UPDATE = "plan_update"
    TRANSFER_OWNERSHIP = "transfer_ownership"


_LIVE_ONLY = frozenset({
    Operation.CONFIGURE,
    Operation.MINT_RANGE,
    Operation.MINT,
    Operation.TRANSFER,
    Operation.APPROVE,
    Operation.LOCK,
    Operation.DISABLE_UPDATES,
    Operation.PAUSE,
})

_PAUSED_ONLY = frozenset({
    Operation.UPDATE_HOLDERS,
    Operation.PLAN_UPDATE,
    Operation.UNPAUSE,
})

ALLOWED: Dict[Phase, FrozenSet[Operation]] = {
    Phase.LIVE: _LIVE_ONLY | {Operation.TRANSFER_OWNERSHIP},
    Phase.PAUSED: _PAUSED_ONLY | {Operation.TRANSFER_OWNERSHIP},
}


def require_phase(phase: Phase, op: Operation) -> None:
    """Raise `Paused` / `NotPaused` unless `op` is allowed in `phase`."""
    phase = Phase(phase)
    if op in ALLOWED[phase]:
        return
    if phase is Phase.PAUSED:
        raise Paused(operation=op.value)
    raise NotPaused(operation=op.value)


def transition(phase: Phase, op: Operation) -> Phase:
    """Phase after a successful `op`."""
    require_phase(phase, op)
    if op is Operation.PAUSE:
        return Phase.PAUSED
    if op is Operation.UNPAUSE:
        return Phase.LIVE
    return Phase(phase)


__all__ = ["Phase", "Operation", "ALLOWED", "require_phase", "transition"]
