from __future__ import annotations

import json
import logging

import pytest

from mintrange.cli import plan_mint
from mintrange.tests.util import ALICE, OWNER, TREASURY


def _write(tmp_path, **body):
    path = tmp_path / "ledger.json"
    doc = {"owner": "0x" + OWNER.hex(), "holders": ["0x" + TREASURY.hex(), "0x" + ALICE.hex()]}
    doc.update(body)
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("MINTRANGE_EVENT_LOG", "MINTRANGE_MAX_MINT_COUNT", "MINTRANGE_DEFAULT_SUPPLY"):
        monkeypatch.delenv(var, raising=False)


def test_json_plan(tmp_path, capsys) -> None:
    path = _write(tmp_path, supply=[2, 4])
    assert plan_mint.main(["--config", str(path), "--count", "3", "--skip", "2", "--json"]) == 0

    plan = json.loads(capsys.readouterr().out)
    assert plan["ids"] == [3, 4, 5]
    assert plan["slugs"] == ["20220903-3", "20220904-4", "20220905-5"]
    assert all(2 <= a <= 4 for a in plan["amounts"][0])
    assert plan["amounts"][1] == [1, 1, 1]
    assert plan["checksum"].startswith("0x")


def test_table_output(tmp_path, capsys) -> None:
    path = _write(tmp_path)
    assert plan_mint.main(["--config", str(path), "--count", "2"]) == 0
    out = capsys.readouterr().out
    assert "ids 1..2" in out
    assert "20220902-2" in out


def test_missing_and_invalid_files(tmp_path, capsys) -> None:
    assert plan_mint.main(["--config", str(tmp_path / "nope.json"), "--count", "1"]) == 2
    bad = tmp_path / "bad.json"
    bad.write_text("[]", encoding="utf-8")
    assert plan_mint.main(["--config", str(bad), "--count", "1"]) == 2


def test_ledger_errors_are_reported_as_json(tmp_path, capsys) -> None:
    path = _write(tmp_path)
    assert plan_mint.main(["--config", str(path), "--count", "0"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is False
    assert payload["error"]["code"] == "INVALID_COUNT"


def test_log_file_receives_json_records(tmp_path, capsys) -> None:
    path = _write(tmp_path)
    log_file = tmp_path / "logs" / "plan.jsonl"
    try:
        code = plan_mint.main(
            ["--config", str(path), "--count", "1", "--skip", "2", "--log-level", "info", "--log-file", str(log_file)]
        )
    finally:
        for h in list(logging.getLogger().handlers):
            logging.getLogger().removeHandler(h)
            h.close()
    assert code == 0

    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    committed = [r for r in records if r["msg"] == "transaction committed"]
    assert committed and committed[0]["operation"] == "mint_range"
