"""
mintrange.runtime.access — owner gate and operator checks.
"""

from __future__ import annotations

from ..errors import InvalidAddress, Unauthorized
from ..types.ranges import is_zero_address
from .phase import Operation

OWNER_OPERATIONS = frozenset({
    Operation.CONFIGURE,
    Operation.MINT_RANGE,
    Operation.MINT,
    Operation.LOCK,
    Operation.DISABLE_UPDATES,
    Operation.PAUSE,
    Operation.UNPAUSE,
    Operation.UPDATE_HOLDERS,
    Operation.TRANSFER_OWNERSHIP,
})


def require_address(addr: object, *, what: str = "address") -> bytes:
    if not isinstance(addr, (bytes, bytearray)) or len(addr) == 0:
        raise InvalidAddress(f"{what} must be non-empty bytes", address=addr)
    if is_zero_address(addr):
        raise InvalidAddress(f"{what} must not be the zero address", address=bytes(addr))
    return bytes(addr)


def require_owner(owner: bytes, caller: bytes) -> None:
    if not isinstance(caller, (bytes, bytearray)) or bytes(caller) != owner:
        raise Unauthorized(caller=caller if isinstance(caller, (bytes, bytearray)) else None)


def require_operator(account: bytes, caller: bytes, approved: bool) -> None:
    """`caller` may move `account`'s tokens if it is `account` or an approved operator."""
    if caller != account and not approved:
        raise Unauthorized("caller is not owner nor approved", caller=caller)


__all__ = ["OWNER_OPERATIONS", "require_address", "require_owner", "require_operator"]
