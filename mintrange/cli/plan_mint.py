#!/usr/bin/env python3
"""
mintrange.cli.plan_mint — preview the next range mint for a ledger configuration.

This CLI:
  1) Loads a JSON ledger description (owner, holders, amounts, supply)
  2) Builds an in-memory ledger and optionally pre-mints `--skip` ids
  3) Plans the next `--count` ids and prints ids, date slugs, per-holder
     amounts and the plan checksum

Usage:
    python -m mintrange.cli.plan_mint --config ledger.json --count 30

Config file:
    {
      "owner":   "0x…",
      "holders": ["0x…treasury", "0x…vault"],
      "amounts": [0, 1],            (optional)
      "supply":  [5, 10]            (optional)
    }

Options:
    --skip       Mint this many ids first (preview a later range).
    --json       Print the full plan as JSON instead of a table.
    --log-level  Logging level for stderr (default: WARNING).
    --log-file   Also write JSON log lines to this file.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .. import logging as mlog
from ..config import load_config
from ..errors import LedgerError, error_to_dict
from ..runtime.token import MintRangeToken
from ..state.events import NullEventSink
from ..version import __version__, git_describe


def eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def _h2b(value: str) -> bytes:
    if not isinstance(value, str):
        raise ValueError(f"expected hex string, got {value!r}")
    if value.startswith(("0x", "0X")):
        value = value[2:]
    return bytes.fromhex(value)


def _load_ledger(path: Path) -> Dict[str, Any]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("config must be a JSON object")
    return {
        "owner": _h2b(raw["owner"]),
        "holders": [_h2b(h) for h in raw["holders"]],
        "amounts": raw.get("amounts"),
        "supply": tuple(raw["supply"]) if raw.get("supply") else None,
    }


def build_plan(ledger: Dict[str, Any], count: int, skip: int = 0) -> Dict[str, Any]:
    with MintRangeToken(
        ledger["owner"],
        ledger["holders"],
        holder_amounts=ledger.get("amounts"),
        initial_supply=ledger.get("supply"),
        config=load_config(),
        sink=NullEventSink(),
    ) as token:
        if skip:
            pre = token.plan_mint_range(skip)
            token.mint_range_safe(ledger["owner"], pre.input, pre.checksum)
        plan = token.plan_mint_range(count)
        out = plan.input.to_dict()
        out["slugs"] = [token.token_slug(i) for i in plan.input.ids]
    out["checksum"] = plan.checksum_hex
    return out


def _parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Preview the next range mint of a ledger configuration.")
    p.add_argument("--config", required=True, type=Path, help="Path to the ledger JSON description")
    p.add_argument("--count", required=True, type=int, help="Number of ids to plan")
    p.add_argument("--skip", type=int, default=0, help="Mint this many ids before planning")
    p.add_argument("--json", action="store_true", help="Print the full plan as JSON")
    p.add_argument("--log-level", default="WARNING", help="stderr log level")
    p.add_argument("--log-file", type=Path, default=None, help="Also write JSON logs to this file")
    p.add_argument("--version", action="version", version=f"mintrange {__version__} ({git_describe()})")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    ns = _parse_args(sys.argv[1:] if argv is None else argv)
    mlog.configure(json=False, level=ns.log_level, file_path=ns.log_file)

    if not ns.config.exists():
        eprint(f"[plan_mint] Config file not found: {ns.config}")
        return 2
    try:
        ledger = _load_ledger(ns.config)
    except (ValueError, KeyError, TypeError) as exc:
        eprint(f"[plan_mint] Invalid config: {exc}")
        return 2

    try:
        plan = build_plan(ledger, ns.count, ns.skip)
    except LedgerError as exc:
        print(json.dumps(error_to_dict(exc)))
        return 1

    if ns.json:
        print(json.dumps(plan, indent=2))
        return 0

    print(f"ids {plan['start_id']}..{plan['end_id']}  checksum {plan['checksum']}")
    for holder, row in zip(plan["holders"], plan["amounts"]):
        print(f"  {holder}  total={sum(row)}")
    for i, slug in enumerate(plan["slugs"]):
        amounts = " ".join(str(row[i]) for row in plan["amounts"])
        print(f"  {slug:<20} {amounts}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
