"""
CLI tests driven through click's CliRunner against a temporary data dir.
"""

import json

import pytest
from click.testing import CliRunner

from clearhouse.cli.main import cli
from clearhouse.crypto import item_id


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    data_dir = str(tmp_path / "data")

    def _invoke(*args):
        return runner.invoke(cli, ["--data-dir", data_dir, *args])

    return _invoke


def test_full_round(invoke):
    assert invoke("start").exit_code == 0

    result = invoke("list", "lamp", "--as", "seller", "--reserve", "3")
    assert result.exit_code == 0
    key = item_id("lamp")
    assert key in result.output

    assert invoke("bid", key, "--as", "loser", "--amount", "4").exit_code == 0
    assert invoke("bid", key, "--as", "winner", "--amount", "8").exit_code == 0

    result = invoke("bids")
    assert "winner: 8" in result.output

    result = invoke("clear")
    assert result.exit_code == 0
    assert "winner wins 'lamp'" in result.output
    assert "seller: 8 (payout)" in result.output
    assert "loser: 4 (leftover)" in result.output

    result = invoke("winnings", "winner")
    assert "lamp" in result.output


def test_rejections_exit_nonzero(invoke):
    result = invoke("list", "lamp", "--as", "seller")
    assert result.exit_code == 1
    assert "closed" in result.output

    invoke("start")
    result = invoke("start")
    assert result.exit_code == 1
    assert "already opened" in result.output

    invoke("list", "lamp", "--as", "seller", "--reserve", "5")
    result = invoke("bid", item_id("lamp"), "--as", "seller", "--amount", "9")
    assert result.exit_code == 1
    assert "own items" in result.output

    result = invoke("bid", item_id("lamp"), "--as", "bob", "--amount", "4")
    assert result.exit_code == 1
    assert "reserve" in result.output


def test_withdraw(invoke):
    invoke("start")
    invoke("list", "lamp", "--as", "seller")
    result = invoke("withdraw", item_id("lamp"), "--as", "seller")
    assert result.exit_code == 0
    assert "Withdrew 'lamp'" in result.output


def test_stats(invoke):
    invoke("start")
    result = invoke("stats")
    assert result.exit_code == 0
    assert "round_open: True" in result.output
    assert "round_number: 1" in result.output


def test_run_script(invoke, tmp_path):
    key = item_id("lamp")
    script = tmp_path / "round.json"
    script.write_text(json.dumps([
        {"method": "start_round", "caller": "operator"},
        {"method": "list_item", "caller": "seller", "content": "lamp"},
        {"method": "place_bid", "caller": "bob", "item_id": key, "amount": 5},
        {"method": "clear_round", "caller": "operator"},
    ]))

    result = invoke("run", str(script))

    assert result.exit_code == 0
    lines = [json.loads(line) for line in result.output.splitlines() if line.startswith("{")]
    assert [line["method"] for line in lines] == [
        "start_round", "list_item", "place_bid", "clear_round",
    ]
    assert lines[-1]["total_transferred"] == 5


def test_run_script_stops_on_error(invoke, tmp_path):
    script = tmp_path / "bad.json"
    script.write_text(json.dumps([
        {"method": "list_item", "caller": "seller", "content": "lamp"},
        {"method": "start_round", "caller": "operator"},
    ]))

    result = invoke("run", str(script))

    assert result.exit_code == 1
    lines = [json.loads(line) for line in result.output.splitlines() if line.startswith("{")]
    assert lines == [{"index": 0, "error": "ROUND_CLOSED", "message": "Auction is closed. Try again later"}]


def test_demo(runner):
    result = runner.invoke(cli, ["demo"])
    assert result.exit_code == 0
    assert "Demo complete" in result.output
    assert "['vintage lamp', 'oak table']" in result.output


def test_log_file(runner, tmp_path, monkeypatch):
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("CLEARHOUSE_LOG_DIR", str(log_dir))

    result = runner.invoke(cli, [
        "--data-dir", str(tmp_path / "data"), "--log-file", "--debug", "start",
    ])
    runner.invoke(cli, ["--data-dir", str(tmp_path / "data"), "stats"])

    assert result.exit_code == 0
    assert "Round 1 opened" in (log_dir / "clearhouse.log").read_text()
