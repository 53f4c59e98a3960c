"""
mintrange.utils.dates — token id <-> calendar day.

One range id is issued per day: `config.first_range_id` is
`config.project_start` (2022-09-01 by default) and every following id is the
next day. The claim token has no date and is rendered as "CLAIM-<id>".

    >>> token_slug_from_token_id(1)
    '20220901-1'
    >>> token_id_from_date(2024, 2, 6)
    524
"""

from __future__ import annotations

import datetime as _dt
from typing import Optional

from ..config import LedgerConfig, get_config
from ..errors import InvalidDate


def _cfg(config: Optional[LedgerConfig]) -> LedgerConfig:
    return config or get_config()


def token_date(token_id: int, *, config: Optional[LedgerConfig] = None) -> _dt.date:
    cfg = _cfg(config)
    if not isinstance(token_id, int) or token_id < cfg.first_range_id:
        raise InvalidDate("token id has no calendar date", data={"token_id": token_id})
    return cfg.project_start + _dt.timedelta(days=token_id - cfg.first_range_id)


def token_slug_from_token_id(token_id: int, *, config: Optional[LedgerConfig] = None) -> str:
    cfg = _cfg(config)
    if token_id == cfg.claim_token_id:
        return f"CLAIM-{token_id}"
    return f"{token_date(token_id, config=cfg):%Y%m%d}-{token_id}"


def token_id_from_date(year: int, month: int, day: int, *, config: Optional[LedgerConfig] = None) -> int:
    cfg = _cfg(config)
    try:
        d = _dt.date(year, month, day)
    except (TypeError, ValueError):
        raise InvalidDate("invalid date", data={"year": year, "month": month, "day": day}) from None
    if d < cfg.project_start:
        raise InvalidDate(
            f"project started {cfg.project_start.isoformat()}", data={"date": d.isoformat()}
        )
    return (d - cfg.project_start).days + cfg.first_range_id


def token_slug_from_date(year: int, month: int, day: int, *, config: Optional[LedgerConfig] = None) -> str:
    return token_slug_from_token_id(token_id_from_date(year, month, day, config=config), config=config)


__all__ = ["token_date", "token_slug_from_token_id", "token_id_from_date", "token_slug_from_date"]
