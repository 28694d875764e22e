"""Tests for CLI module."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from bitcoin_accounting import cli
from bitcoin_accounting.cli import (
    cmd_init,
    cmd_version,
    create_container,
    get_default_db_path,
    main,
)
from bitcoin_accounting.domain.lots import Lot
from bitcoin_accounting.exceptions import LotConservationViolation


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep log lines out of the command output under test."""
    monkeypatch.setattr(cli, "configure_logging", lambda: None)
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))
    yield
    structlog.reset_defaults()


def write_json(path: Path, data) -> str:
    path.write_text(json.dumps(data))
    return str(path)


@pytest.fixture
def db_path(tmp_path) -> Path:
    path = tmp_path / "ledger.db"
    assert main(["-d", str(path), "init"]) == 0
    assert main(["-d", str(path), "rates", "add", "2021-01-01", "10000"]) == 0
    assert main(["-d", str(path), "rates", "add", "2021-06-01", "30000"]) == 0
    return path


@pytest.fixture
def buy_file(tmp_path) -> str:
    return write_json(
        tmp_path / "buy.json",
        {
            "txid": "buy",
            "timestamp": "2021-01-01T12:00:00+00:00",
            "outputs": [{"amount": 100_000_000, "recipient": "treasury"}],
        },
    )


@pytest.fixture
def sell_file(tmp_path) -> str:
    return write_json(
        tmp_path / "sell.json",
        [
            {
                "txid": "sell",
                "timestamp": "2021-06-01T12:00:00+00:00",
                "inputs": ["buy:0"],
                "outputs": [],
            }
        ],
    )


class TestGetDefaultDbPath:
    def test_returns_path_in_home_directory(self):
        result = get_default_db_path()

        assert isinstance(result, Path)
        assert ".bitcoin_accounting" in str(result)
        assert result.name == "ledger.db"


class TestCreateContainer:
    def test_uses_given_database_path(self, tmp_path):
        db_path = tmp_path / "nested" / "ledger.db"

        container = create_container(db_path)
        container.database
        container.close()

        assert db_path.exists()


class TestCmdInit:
    def test_creates_new_database(self, tmp_path, capsys):
        db_path = tmp_path / "test.db"

        class Args:
            database = str(db_path)
            force = False

        result = cmd_init(Args())

        assert result == 0
        assert db_path.exists()
        assert "Initialized database" in capsys.readouterr().out

    def test_refuses_to_overwrite_existing_without_force(self, tmp_path, capsys):
        db_path = tmp_path / "test.db"
        db_path.touch()

        class Args:
            database = str(db_path)
            force = False

        result = cmd_init(Args())

        assert result == 1
        assert "already exists" in capsys.readouterr().out

    def test_overwrites_existing_with_force(self, tmp_path, capsys):
        db_path = tmp_path / "test.db"
        db_path.write_text("old data")

        class Args:
            database = str(db_path)
            force = True

        result = cmd_init(Args())

        assert result == 0
        assert "Initialized database" in capsys.readouterr().out


class TestCmdVersion:
    def test_prints_version(self, capsys):
        class Args:
            pass

        assert cmd_version(Args()) == 0
        assert "Bitcoin Accounting v0.1.0" in capsys.readouterr().out


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_missing_database(self, tmp_path, capsys):
        result = main(["-d", str(tmp_path / "missing.db"), "balance"])

        assert result == 1
        assert "No database found" in capsys.readouterr().out


class TestWorkflow:
    def test_rates_list(self, db_path, capsys):
        capsys.readouterr()

        assert main(["-d", str(db_path), "rates", "list"]) == 0

        out = capsys.readouterr().out
        assert "2021-01-01" in out
        assert "30000" in out

    def test_invalid_rate_is_reported(self, db_path, capsys):
        capsys.readouterr()

        assert main(["-d", str(db_path), "rates", "add", "2021-01-02", "-5"]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_acquire_then_sell(self, db_path, buy_file, sell_file, capsys):
        assert main(["-d", str(db_path), "acquire", buy_file]) == 0
        assert "Acquired 1 BTC in buy" in capsys.readouterr().out

        assert main(["-d", str(db_path), "apply", sell_file]) == 0
        assert "realized gain/loss 20000 USD" in capsys.readouterr().out

        assert main(["-d", str(db_path), "balance"]) == 0
        assert "(0 sats)" in capsys.readouterr().out

        assert main(
            ["-d", str(db_path), "gains", "--start-date", "2021-01-01", "--end-date", "2021-12-31"]
        ) == 0
        out = capsys.readouterr().out
        assert "Disposals: 1" in out
        assert "Net realized gain/loss: 20000 USD" in out

    def test_double_spend_is_rejected(self, db_path, buy_file, sell_file, capsys):
        main(["-d", str(db_path), "acquire", buy_file])
        main(["-d", str(db_path), "apply", sell_file])
        capsys.readouterr()

        assert main(["-d", str(db_path), "apply", sell_file]) == 1
        assert "Outpoint already spent: buy:0" in capsys.readouterr().out

    def test_select(self, db_path, buy_file, capsys):
        main(["-d", str(db_path), "acquire", buy_file])
        capsys.readouterr()

        assert main(["-d", str(db_path), "select", "50000000", "--policy", "lifo"]) == 0
        assert capsys.readouterr().out.strip() == "buy:0"

    def test_select_more_than_held(self, db_path, buy_file, capsys):
        main(["-d", str(db_path), "acquire", buy_file])
        capsys.readouterr()

        assert main(["-d", str(db_path), "select", "200000000"]) == 1
        assert "Insufficient inputs" in capsys.readouterr().out

    def test_report_to_stdout_and_file(self, db_path, buy_file, sell_file, tmp_path, capsys):
        main(["-d", str(db_path), "acquire", buy_file])
        main(["-d", str(db_path), "apply", sell_file])
        capsys.readouterr()
        dates = ["--start-date", "2021-01-01", "--end-date", "2021-12-31"]

        assert main(["-d", str(db_path), "report", *dates]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["totals"]["net_realized_gain_loss"] == "20000"

        output = tmp_path / "report.csv"
        assert main(
            ["-d", str(db_path), "report", *dates, "--format", "csv", "-o", str(output)]
        ) == 0
        assert output.read_text().startswith("id,")

    def test_report_with_invalid_range(self, db_path, capsys):
        capsys.readouterr()

        result = main(
            ["-d", str(db_path), "report", "--start-date", "2021-12-31", "--end-date", "2021-01-01"]
        )

        assert result == 1
        assert "Invalid date range" in capsys.readouterr().out

    def test_lot_conservation_violation_reaches_the_caller(
        self, db_path, buy_file, sell_file, monkeypatch
    ):
        main(["-d", str(db_path), "acquire", buy_file])

        def broken_consume(self, amount):
            raise LotConservationViolation(self.id, self.remaining, amount, 1)

        monkeypatch.setattr(Lot, "consume", broken_consume)

        with pytest.raises(LotConservationViolation):
            main(["-d", str(db_path), "apply", sell_file])
