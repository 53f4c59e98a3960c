"""
mintrange.config — runtime configuration for the range ledger.

This module centralizes knobs for:
  • Supply derivation (seed for the per-id treasury amount)
  • Id layout (first range-mintable id, claim token id, calendar anchor)
  • Defaults used when a holder or supply range is configured without amounts
  • Limits (largest range a single mint plan may cover)
  • Event persistence (optional JSONL event log)

Configuration may be provided via environment variables. Safe defaults are chosen so a
local run works out of the box.

Environment variables (all optional):
  MINTRANGE_SUPPLY_SEED            -> seed string mixed into supply derivation
  MINTRANGE_FIRST_RANGE_ID         -> integer (default: 1)
  MINTRANGE_CLAIM_TOKEN_ID         -> integer (default: 0)
  MINTRANGE_PROJECT_START          -> ISO date of token id `first_range_id` (default: 2022-09-01)
  MINTRANGE_DEFAULT_HOLDER_AMOUNT  -> integer amount for non-treasury slots (default: 1)
  MINTRANGE_DEFAULT_SUPPLY         -> "min,max" treasury supply bounds (default: "1,1")
  MINTRANGE_MAX_MINT_COUNT         -> integer (default: 10000)
  MINTRANGE_EVENT_LOG              -> path to a JSONL event log (default: unset, in-memory)

Programmatic usage:
    from mintrange.config import get_config
    cfg = get_config()
    cfg.max_mint_count
"""

from __future__ import annotations

import datetime as _dt
import os
from dataclasses import asdict, dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError

# ----------------------------- helpers -------------------------------------


def _int_value(raw: Any, *, name: str, minimum: int = 0) -> int:
    try:
        if isinstance(raw, bool):
            raise TypeError("bool is not an integer")
        value = int(str(raw).strip()) if not isinstance(raw, int) else raw
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer", field_name=name) from None
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}", field_name=name)
    return value


def _date_value(raw: Any, *, name: str) -> _dt.date:
    if isinstance(raw, _dt.date):
        return raw
    try:
        return _dt.date.fromisoformat(str(raw).strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an ISO date (YYYY-MM-DD)", field_name=name) from None


def _supply_value(raw: Any, *, name: str) -> Tuple[int, int]:
    """
    Parse supply bounds:
      "5,10", (5, 10), [5, 10] -> (5, 10)
    """
    if isinstance(raw, str):
        parts = [p for p in raw.replace(" ", "").split(",") if p]
    else:
        try:
            parts = list(raw)
        except TypeError:
            raise ConfigurationError(f"{name} must be 'min,max'", field_name=name) from None
    if len(parts) != 2:
        raise ConfigurationError(f"{name} needs exactly two values", field_name=name)
    lo = _int_value(parts[0], name=name, minimum=1)
    hi = _int_value(parts[1], name=name, minimum=1)
    if lo > hi:
        raise ConfigurationError(f"{name} min must be <= max", field_name=name)
    return lo, hi


# ------------------------------ dataclasses ---------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    supply_seed: bytes = b"mintrange/daily-supply"
    first_range_id: int = 1
    claim_token_id: int = 0
    project_start: _dt.date = _dt.date(2022, 9, 1)
    default_holder_amount: int = 1
    default_supply: Tuple[int, int] = (1, 1)
    max_mint_count: int = 10_000
    event_log_path: Optional[Path] = None

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        d["supply_seed"] = self.supply_seed.decode("utf-8", "replace")
        d["project_start"] = self.project_start.isoformat()
        d["default_supply"] = list(self.default_supply)
        d["event_log_path"] = str(self.event_log_path) if self.event_log_path else None
        return d

    def with_overrides(self, **fields: Any) -> "LedgerConfig":
        return _validate(replace(self, **fields))


# ------------------------------ loader --------------------------------------


def _validate(cfg: LedgerConfig) -> LedgerConfig:
    if not cfg.supply_seed:
        raise ConfigurationError("supply_seed must not be empty", field_name="supply_seed")
    if cfg.first_range_id < 1:
        raise ConfigurationError("first_range_id must be >= 1", field_name="first_range_id")
    if cfg.first_range_id <= cfg.claim_token_id:
        raise ConfigurationError(
            "claim_token_id must precede the first range id", field_name="claim_token_id"
        )
    if cfg.default_holder_amount < 1:
        raise ConfigurationError(
            "default_holder_amount must be >= 1", field_name="default_holder_amount"
        )
    if cfg.max_mint_count < 1:
        raise ConfigurationError("max_mint_count must be >= 1", field_name="max_mint_count")
    return cfg


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Union[str, int, bytes, Path, Tuple[int, int]]]] = None,
) -> LedgerConfig:
    """
    Build a LedgerConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides; keys are LedgerConfig field names and
          take precedence over the environment.
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})
    unknown = set(overrides) - set(LedgerConfig.__dataclass_fields__)
    if unknown:
        raise ConfigurationError(f"unknown config fields: {sorted(unknown)}")

    def pick(field_name: str, var: str, default: Any) -> Any:
        if field_name in overrides:
            return overrides[field_name]
        return env.get(var, default)

    seed = pick("supply_seed", "MINTRANGE_SUPPLY_SEED", LedgerConfig.supply_seed)
    if isinstance(seed, str):
        seed = seed.encode("utf-8")

    event_log = pick("event_log_path", "MINTRANGE_EVENT_LOG", None)

    cfg = LedgerConfig(
        supply_seed=bytes(seed),
        first_range_id=_int_value(
            pick("first_range_id", "MINTRANGE_FIRST_RANGE_ID", 1), name="first_range_id"
        ),
        claim_token_id=_int_value(
            pick("claim_token_id", "MINTRANGE_CLAIM_TOKEN_ID", 0), name="claim_token_id"
        ),
        project_start=_date_value(
            pick("project_start", "MINTRANGE_PROJECT_START", "2022-09-01"), name="project_start"
        ),
        default_holder_amount=_int_value(
            pick("default_holder_amount", "MINTRANGE_DEFAULT_HOLDER_AMOUNT", 1),
            name="default_holder_amount",
        ),
        default_supply=_supply_value(
            pick("default_supply", "MINTRANGE_DEFAULT_SUPPLY", "1,1"), name="default_supply"
        ),
        max_mint_count=_int_value(
            pick("max_mint_count", "MINTRANGE_MAX_MINT_COUNT", 10_000), name="max_mint_count"
        ),
        event_log_path=Path(event_log).expanduser() if event_log else None,
    )
    return _validate(cfg)


@lru_cache(maxsize=1)
def get_config() -> LedgerConfig:
    """
    Cached global config. Suitable for application bootstraps and module-level consumers.
    """
    return load_config()


# ----------------------------- pretty-print ---------------------------------


def summary(cfg: Optional[LedgerConfig] = None) -> str:
    """
    Return a human-friendly one-line summary of the most important ledger knobs.
    """
    cfg = cfg or get_config()
    lo, hi = cfg.default_supply
    return (
        "mintrange{"
        f"first_id={cfg.first_range_id}, claim_id={cfg.claim_token_id}, "
        f"start={cfg.project_start.isoformat()}, supply=[{lo},{hi}], "
        f"holder_amount={cfg.default_holder_amount}, max_mint={cfg.max_mint_count}, "
        f"events={cfg.event_log_path or 'memory'}"
        "}"
    )


__all__ = [
    "LedgerConfig",
    "load_config",
    "get_config",
    "summary",
]
