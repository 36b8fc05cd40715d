"""
tests/test_cli.py
CLI smoke tests — main(argv) against stores under tmp_path.
Every invocation passes --config so the working directory is never read.
"""

import json

import pytest

from sayitanyway.cli import build_parser, main
from sayitanyway.config import CONFIG_FILENAME


def _run(tmp_path, *argv, backend="json"):
    store_path = tmp_path / ("data.db" if backend == "sqlite" else "data")
    return main([
        "--config", str(tmp_path),
        "--backend", backend,
        "--store", str(store_path),
        *argv,
    ])


def test_command_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


class TestScreen:
    def test_flagged_text(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path), "screen", "I want to kill myself"]) == 0
        out = capsys.readouterr().out
        assert "FLAGGED" in out
        assert "HIGH RISK" in out
        assert "988" in out

    def test_benign_text(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path), "screen", "Happy birthday, I love you"]) == 0
        assert "Not flagged" in capsys.readouterr().out


class TestLedgerCommands:
    def test_time_shows_default_balance(self, tmp_path, capsys):
        assert _run(tmp_path, "time") == 0
        out = capsys.readouterr().out
        assert "5m" in out
        assert "Free Monthly" in out

    def test_deduct_persists(self, tmp_path, capsys):
        assert _run(tmp_path, "deduct", "90") == 0
        assert "Deducted 1m 30s" in capsys.readouterr().out
        assert _run(tmp_path, "time") == 0
        assert "3m 30s" in capsys.readouterr().out

    def test_deduct_insufficient(self, tmp_path, capsys):
        assert _run(tmp_path, "deduct", "1000") == 1
        assert "Not enough recording time" in capsys.readouterr().out

    def test_buy_extra(self, tmp_path, capsys):
        assert _run(tmp_path, "buy-extra") == 0
        assert "60m" in capsys.readouterr().out

    def test_sqlite_backend(self, tmp_path, capsys):
        assert _run(tmp_path, "deduct", "60", backend="sqlite") == 0
        assert (tmp_path / "data.db").exists()
        capsys.readouterr()
        assert _run(tmp_path, "time", backend="sqlite") == 0
        assert "4m" in capsys.readouterr().out


class TestSubscriptionCommands:
    def test_unlock_and_status(self, tmp_path, capsys):
        assert _run(tmp_path, "unlock", "dev123") == 0
        assert "unlocked" in capsys.readouterr().out
        assert _run(tmp_path, "status") == 0
        assert "Subscriber (Unlocked)" in capsys.readouterr().out

    def test_invalid_code(self, tmp_path, capsys):
        assert _run(tmp_path, "unlock", "nope") == 1
        assert "Invalid access code" in capsys.readouterr().out

    def test_billing_disabled_in_config(self, tmp_path, capsys):
        (tmp_path / CONFIG_FILENAME).write_text(
            json.dumps({"billing_available": False}), encoding="utf-8",
        )
        assert _run(tmp_path, "buy-extra") == 1
        assert "Billing unavailable" in capsys.readouterr().out


def test_unknown_backend_in_config_falls_back_to_json(tmp_path, capsys):
    (tmp_path / CONFIG_FILENAME).write_text(
        json.dumps({"store_backend": "redis"}), encoding="utf-8",
    )
    assert main(["--config", str(tmp_path), "--store", str(tmp_path / "data"), "time"]) == 0
    assert "5m" in capsys.readouterr().out
    assert (tmp_path / "data" / "recording_time.json").exists()
