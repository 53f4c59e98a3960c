from __future__ import annotations

import datetime as dt
import re
from pathlib import Path

import pytest

from mintrange.config import LedgerConfig, load_config, summary
from mintrange.errors import ConfigurationError


def test_defaults() -> None:
    cfg = load_config(env={})
    assert cfg == LedgerConfig()
    assert cfg.first_range_id == 1
    assert cfg.project_start == dt.date(2022, 9, 1)
    assert cfg.event_log_path is None
    assert "first_id=1" in summary(cfg)


def test_environment_values() -> None:
    cfg = load_config(env={
        "MINTRANGE_SUPPLY_SEED": "other",
        "MINTRANGE_DEFAULT_SUPPLY": "5, 10",
        "MINTRANGE_MAX_MINT_COUNT": "50",
        "MINTRANGE_PROJECT_START": "2023-01-01",
        "MINTRANGE_EVENT_LOG": "/tmp/mintrange/events.jsonl",
    })
    assert cfg.supply_seed == b"other"
    assert cfg.default_supply == (5, 10)
    assert cfg.max_mint_count == 50
    assert cfg.project_start == dt.date(2023, 1, 1)
    assert cfg.event_log_path == Path("/tmp/mintrange/events.jsonl")
    assert cfg.to_dict()["default_supply"] == [5, 10]


def test_overrides_win_over_environment() -> None:
    cfg = load_config(env={"MINTRANGE_MAX_MINT_COUNT": "50"}, overrides={"max_mint_count": 7})
    assert cfg.max_mint_count == 7


@pytest.mark.parametrize(
    "env",
    [
        {"MINTRANGE_MAX_MINT_COUNT": "many"},
        {"MINTRANGE_MAX_MINT_COUNT": "0"},
        {"MINTRANGE_DEFAULT_SUPPLY": "10,5"},
        {"MINTRANGE_DEFAULT_SUPPLY": "3"},
        {"MINTRANGE_PROJECT_START": "yesterday"},
        {"MINTRANGE_FIRST_RANGE_ID": "0"},
        {"MINTRANGE_CLAIM_TOKEN_ID": "1"},
        {"MINTRANGE_SUPPLY_SEED": ""},
    ],
)
def test_rejects_bad_values(env) -> None:
    with pytest.raises(ConfigurationError):
        load_config(env=env)


def test_rejects_unknown_override() -> None:
    with pytest.raises(ConfigurationError):
        load_config(env={}, overrides={"colour": "blue"})


def test_lazy_package_exports() -> None:
    import mintrange
    from mintrange import state
    from mintrange.runtime.token import MintRangeToken
    from mintrange.state.journal import Journal

    assert mintrange.MintRangeToken is MintRangeToken
    assert state.Journal is Journal
    assert mintrange.__version__
    with pytest.raises(AttributeError):
        mintrange.not_a_symbol


def test_supported_pythons_match_the_nox_matrix() -> None:
    root = Path(__file__).resolve().parents[2]
    if not (root / "pyproject.toml").exists() or not (root / "noxfile.py").exists():
        pytest.skip("not running from a source checkout")
    floor = re.search(r'requires-python = ">=([0-9.]+)"', (root / "pyproject.toml").read_text())
    matrix = re.search(r"TEST_PYTHONS = \[([^\]]*)\]", (root / "noxfile.py").read_text())
    versions = re.findall(r'"([0-9.]+)"', matrix.group(1))
    assert versions[0] == floor.group(1)
