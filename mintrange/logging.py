"""
mintrange.logging
-----------------

Log setup for applications embedding the ledger (the `mintrange-plan` CLI
among them). Library modules only call `logging.getLogger(__name__)` and pass
structured fields through `extra=`; this module decides how those records look.

- `configure()` installs one console handler (JSON lines or a one-line text
  form) and optionally a JSON file handler.
- `trace_scope()` binds a trace id plus transaction fields (operation, caller,
  revision) in a `contextvars` context that every formatted record picks up.

    with trace_scope(operation="mint_range", caller=owner):
        log.info("range minted", extra={"start_id": 1, "end_id": 30})
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import os
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("_LOG_CONTEXT", default={})

# Rendered in this order by the text formatter.
CONTEXT_KEYS = ("trace_id", "operation", "caller", "revision")

_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_COLORS = {
    logging.DEBUG: "\x1b[90m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[1m\x1b[35m",
}
_RESET = "\x1b[0m"


def _jsonable(v: Any) -> Any:
    """Addresses and checksums are bytes; render them as 0x-hex."""
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _jsonable(x) for k, x in v.items()}
    return v


def context() -> Dict[str, Any]:
    return dict(_LOG_CONTEXT.get())


def bind(**fields: Any) -> None:
    cur = context()
    cur.update({k: _jsonable(v) for k, v in fields.items()})
    _LOG_CONTEXT.set(cur)


def clear_context() -> None:
    _LOG_CONTEXT.set({})


@contextmanager
def trace_scope(trace_id: Optional[str] = None, **fields: Any) -> Iterator[str]:
    """Bind a trace id and `fields` until the block exits; the outer context is restored."""
    token = _LOG_CONTEXT.set(context())
    tid = trace_id or uuid.uuid4().hex[:12]
    try:
        bind(trace_id=tid, **fields)
        yield tid
    finally:
        _LOG_CONTEXT.reset(token)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _jsonable(v)
        for k, v in vars(record).items()
        if k not in _STANDARD_ATTRS and not k.startswith("_")
    }


def _timestamp(record: logging.LogRecord) -> str:
    ts = _dt.datetime.fromtimestamp(record.created, _dt.timezone.utc)
    return ts.isoformat(timespec="milliseconds")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(context())
        for k, v in _extras(record).items():
            payload.setdefault(k, v)
        if record.exc_info:
            payload["err"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return json.dumps(payload, separators=(",", ":"), default=str)


class TextFormatter(logging.Formatter):
    """
    One line per record:

      2025-01-05T12:34:56.789+00:00 | INFO  | mintrange.runtime.token | operation=mint_range | revision=3 | transaction committed
    """

    def __init__(self, color: bool = False):
        super().__init__()
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        ctx = context()
        parts = [_timestamp(record), f"{record.levelname:<5}", record.name]
        if self._color:
            parts[1] = f"{_COLORS.get(record.levelno, '')}{parts[1]}{_RESET}"
        fields = [f"{k}={ctx[k]}" for k in CONTEXT_KEYS if k in ctx and k != "trace_id"]
        fields += [f"{k}={v}" for k, v in _extras(record).items()]
        if fields:
            parts.append(" ".join(fields))
        parts.append(record.getMessage())
        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _is_tty(stream: io.TextIOBase) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure(
    *,
    json: Optional[bool] = None,
    level: Union[str, int] = "INFO",
    stream: io.TextIOBase = sys.stderr,
    file_path: Optional[Union[Path, str]] = None,
) -> None:
    """
    Replace the root logger's handlers.

    `json=None` picks the format from MINTRANGE_LOG_FORMAT (json|text), falling
    back to text on a terminal and JSON otherwise. A `file_path` adds a JSON
    file handler at the same level.
    """
    if json is None:
        env = os.environ.get("MINTRANGE_LOG_FORMAT", "").strip().lower()
        json = env == "json" if env in ("json", "text") else not _is_tty(stream)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler(stream)
    color = _is_tty(stream) and os.environ.get("NO_COLOR") is None
    console.setFormatter(JSONFormatter() if json else TextFormatter(color=color))
    root.addHandler(console)

    if file_path:
        p = Path(file_path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(p, encoding="utf-8")
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)


__all__ = [
    "configure",
    "JSONFormatter",
    "TextFormatter",
    "bind",
    "clear_context",
    "context",
    "trace_scope",
]
