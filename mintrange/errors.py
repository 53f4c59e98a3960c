"""
mintrange.errors — typed ledger exceptions.

Every rejected operation raises one of the classes below *before* any state is
changed; the journal guarantees that a failing transaction leaves no trace.
Errors carry a stable machine code so that callers (CLI, tests, RPC shims) can
branch on them without string matching.

Hierarchy
---------
LedgerError (base)
 ├─ InvalidCount        : mint plan requested for a non-positive / oversized count
 ├─ StaleInput          : mint or update input no longer matches current state
 ├─ ConfigurationError  : malformed holder / supply range entry or config value
 ├─ Paused / NotPaused  : phase guard violations
 ├─ Unauthorized        : caller is not the owner (or approved operator)
 ├─ InvalidAddress      : zero or non-bytes address where a holder is required
 ├─ MalformedBatch      : batch shape or conservation violation
 ├─ InvalidPartition    : bad breakpoints in a retroactive update
 ├─ LockedRange         : update touches ids at or below the lock watermark
 ├─ AddressMismatch     : `from` is not the default holder / `to` slot mismatch
 ├─ NotAMember          : `to` is not in the new holder entry
 ├─ InsufficientBalance : debit exceeds the current balance
 ├─ UnknownId           : id was never minted
 ├─ UpdatesDisabled     : retroactive updates permanently switched off
 ├─ UnmintedTokens      : lock watermark beyond the last minted id
 ├─ AlreadyLocked       : lock watermark would not increase
 └─ InvalidDate         : calendar date cannot be mapped to a token id
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LedgerError(Exception):
    """
    Base ledger error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'STALE_INPUT').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "ledger error"
    code: str = "LEDGER_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for logs and CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _merge(data: Optional[Dict[str, Any]], **fields: Any) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = {}
    if data:
        d.update(data)
    for k, v in fields.items():
        if v is None:
            continue
        d.setdefault(k, ("0x" + v.hex()) if isinstance(v, (bytes, bytearray)) else v)
    return d or None


class InvalidCount(LedgerError):
    def __init__(self, message: str = "count must be a positive integer", *,
                 count: Any = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_COUNT",
                         data=_merge(data, count=count if isinstance(count, int) or count is None
                                     else repr(count)))


class StaleInput(LedgerError):
    """
    The supplied mint/update input was computed against a state that has since
    changed (configuration appended, tokens minted, balances touched).
    """
    def __init__(self, message: str = "input is stale", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="STALE_INPUT", data=data)


class ConfigurationError(LedgerError):
    def __init__(self, message: str = "invalid configuration", *,
                 field_name: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="CONFIGURATION",
                         data=_merge(data, field=field_name))


class Paused(LedgerError):
    def __init__(self, message: str = "ledger is paused", *,
                 operation: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="PAUSED", data=_merge(data, operation=operation))


class NotPaused(LedgerError):
    def __init__(self, message: str = "ledger is not paused", *,
                 operation: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="NOT_PAUSED", data=_merge(data, operation=operation))


class Unauthorized(LedgerError):
    def __init__(self, message: str = "caller is not the owner", *,
                 caller: Optional[bytes] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNAUTHORIZED", data=_merge(data, caller=caller))


class InvalidAddress(LedgerError):
    def __init__(self, message: str = "invalid address", *,
                 address: Any = None, data: Optional[Dict[str, Any]] = None):
        addr = address if isinstance(address, (bytes, bytearray)) or address is None else repr(address)
        super().__init__(message=message, code="INVALID_ADDRESS", data=_merge(data, address=addr))


class MalformedBatch(LedgerError):
    def __init__(self, message: str = "malformed batch", *,
                 index: Optional[int] = None, token_id: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="MALFORMED_BATCH",
                         data=_merge(data, index=index, token_id=token_id))


class InvalidPartition(LedgerError):
    def __init__(self, message: str = "invalid holder partition", *,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_PARTITION", data=data)


class LockedRange(LedgerError):
    def __init__(self, message: str = "token id is locked", *,
                 token_id: Optional[int] = None, watermark: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="LOCKED_RANGE",
                         data=_merge(data, token_id=token_id, watermark=watermark))


class AddressMismatch(LedgerError):
    def __init__(self, message: str = "address does not match the default holder", *,
                 token_id: Optional[int] = None, address: Optional[bytes] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="ADDRESS_MISMATCH",
                         data=_merge(data, token_id=token_id, address=address))


class NotAMember(LedgerError):
    def __init__(self, message: str = "address is not a new initial holder", *,
                 token_id: Optional[int] = None, address: Optional[bytes] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="NOT_A_MEMBER",
                         data=_merge(data, token_id=token_id, address=address))


class InsufficientBalance(LedgerError):
    def __init__(self, message: str = "insufficient balance", *,
                 token_id: Optional[int] = None, address: Optional[bytes] = None,
                 balance: Optional[int] = None, amount: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INSUFFICIENT_BALANCE",
                         data=_merge(data, token_id=token_id, address=address,
                                     balance=balance, amount=amount))


class UnknownId(LedgerError):
    def __init__(self, message: str = "token id was not minted", *,
                 token_id: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNKNOWN_ID", data=_merge(data, token_id=token_id))


class UpdatesDisabled(LedgerError):
    def __init__(self, message: str = "initial holder range updates are permanently disabled", *,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UPDATES_DISABLED", data=data)


class UnmintedTokens(LedgerError):
    def __init__(self, message: str = "cannot lock unminted tokens", *,
                 watermark: Optional[int] = None, last_minted: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNMINTED_TOKENS",
                         data=_merge(data, watermark=watermark, last_minted=last_minted))


class AlreadyLocked(LedgerError):
    def __init__(self, message: str = "token ids already locked", *,
                 watermark: Optional[int] = None, current: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="ALREADY_LOCKED",
                         data=_merge(data, watermark=watermark, current=current))


class InvalidDate(LedgerError):
    def __init__(self, message: str = "invalid date", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_DATE", data=data)


# -------- helper utilities --------------------------------------------------


def error_to_dict(err: BaseException) -> Dict[str, Any]:
    """
    Map any exception to a JSON-safe payload. Ledger errors keep their code;
    anything else is reported as INTERNAL with its type name.
    """
    if isinstance(err, LedgerError):
        return {"ok": False, "error": err.to_dict()}
    return {"ok": False, "error": {"code": "INTERNAL", "message": f"{type(err).__name__}: {err}"}}


__all__ = [
    "LedgerError",
    "InvalidCount",
    "StaleInput",
    "ConfigurationError",
    "Paused",
    "NotPaused",
    "Unauthorized",
    "InvalidAddress",
    "MalformedBatch",
    "InvalidPartition",
    "LockedRange",
    "AddressMismatch",
    "NotAMember",
    "InsufficientBalance",
    "UnknownId",
    "UpdatesDisabled",
    "UnmintedTokens",
    "AlreadyLocked",
    "InvalidDate",
    "error_to_dict",
]
