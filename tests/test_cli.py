"""CLI commands end to end with a fixed config directory."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from predamm.cli import app as app_module
from predamm.cli.app import app

REPO_CONFIG = str(Path(__file__).resolve().parent.parent / "config")

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    # keep structlog's global config untouched by the root callback
    monkeypatch.setattr(app_module, "configure_logging", lambda settings: None)


def invoke(*args):
    return runner.invoke(app, ["-C", REPO_CONFIG, *args])


def test_quote_buy():
    result = invoke("quote", "buy", "--yes", "100", "--no", "100", "--amount", "50")
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["shares"] == pytest.approx(250 / 3)
    assert out["prob_before"] == pytest.approx(0.5)
    assert out["prob_after"] == pytest.approx(9 / 13)
    assert out["new_pool"]["NO"] == pytest.approx(150)


def test_quote_buy_rejects_bad_outcome():
    result = invoke("quote", "buy", "--yes", "100", "--no", "100", "--amount", "5", "--outcome", "MAYBE")
    assert result.exit_code == 1


def test_quote_sell_charges_fees_on_profit():
    result = invoke(
        "quote", "sell", "--yes", "50", "--no", "200", "--shares", "100", "--stake", "40"
    )
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["profit"] > 0
    assert out["creator_fee"] == pytest.approx(out["profit"] * 0.04)
    assert out["net_payout"] == pytest.approx(out["sale_value"] - out["profit"] * 0.05)


def test_liquidity_add_and_remove():
    result = invoke("liquidity", "add", "--yes", "100", "--no", "100", "--amount", "10")
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["new_pool"] == {"YES": 110.0, "NO": 110.0}
    assert out["liquidity_delta"] == pytest.approx(10)

    result = invoke("liquidity", "remove", "--yes", "100", "--no", "100", "--liquidity", "500")
    assert result.exit_code == 1


def test_multi_buy_from_snapshot(tmp_path):
    snapshot = tmp_path / "snap.json"
    snapshot.write_text(
        json.dumps(
            {
                "answers": [
                    {"id": "a", "text": "A", "index": 0, "pool": {"YES": 100, "NO": 25}},
                    {"id": "b", "text": "B", "index": 1, "pool": {"YES": 70, "NO": 30}},
                    {"id": "c", "text": "C", "index": 2, "pool": {"YES": 50, "NO": 50}},
                ],
                "orders": [
                    {
                        "id": "o1",
                        "user_id": "maker",
                        "answer_id": "a",
                        "outcome": "NO",
                        "limit_price": 0.25,
                        "order_amount": 15,
                    }
                ],
                "balances": {"maker": 100},
            }
        )
    )
    result = invoke("multi", "buy", "-f", str(snapshot), "--amount", "20", "--answer", "a", "--answer", "b")
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["total_spent"] == pytest.approx(20)
    assert out["unfunded_orders"] == []
    yes_legs = [f["answer_id"] for f in out["fills"] if f["outcome"] == "YES"]
    assert yes_legs == ["a", "b"]
    assert abs(out["probability_sum"] - 1) < 1e-9
    assert out["fills"][0]["takers"][0]["order_id"] == "o1"


def test_multi_buy_bad_snapshot(tmp_path):
    snapshot = tmp_path / "snap.json"
    snapshot.write_text("{not json")
    result = invoke("multi", "buy", "-f", str(snapshot), "--amount", "5", "--answer", "a")
    assert result.exit_code == 1


def test_profit_user(tmp_path):
    snapshot = tmp_path / "snap.json"
    snapshot.write_text(
        json.dumps(
            {
                "contracts": [
                    {
                        "id": "c1",
                        "slug": "c1",
                        "market": {"outcome_type": "BINARY", "pool": {"YES": 50, "NO": 50}},
                        "resolution": {"kind": "BINARY", "outcome": "YES"},
                    }
                ],
                "bets": [
                    {"id": "1", "contract_id": "c1", "user_id": "u1", "outcome": "YES", "amount": 10, "shares": 25}
                ],
            }
        )
    )
    result = invoke("profit", "user", "u1", "-f", str(snapshot))
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["total"] == pytest.approx(15)
    assert out["by_contract"] == {"c1": 15}
