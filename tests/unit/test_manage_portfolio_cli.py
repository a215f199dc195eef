"""Tests for the manage_portfolio command-line interface."""

import importlib.util
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from src.data.storage.holdings_store import HoldingsStore
from src.portfolio.base import Holding
from src.utils.config import DB_PATH_ENV_VAR
from src.utils.exceptions import StorageError

SCRIPT_PATH = Path(__file__).parent.parent.parent / "scripts" / "manage_portfolio.py"


@pytest.fixture
def cli_module(monkeypatch: pytest.MonkeyPatch):
    """Load the script as a module with a wide console."""
    monkeypatch.setenv("COLUMNS", "200")
    monkeypatch.delenv(DB_PATH_ENV_VAR, raising=False)
    spec = importlib.util.spec_from_file_location("manage_portfolio", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "portfolio.db"


@pytest.fixture
def config_path(tmp_path: Path, db_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.dump(
            {
                "logging": {"level": "WARNING"},
                "storage": {"db_path": str(db_path)},
            }
        )
    )
    return path


@pytest.fixture
def run(cli_module, config_path: Path):
    runner = CliRunner()

    def invoke(*args, **kwargs):
        return runner.invoke(cli_module.cli, ["--config", str(config_path), *args], **kwargs)

    return invoke


def stored(db_path: Path):
    store = HoldingsStore(db_path)
    holdings = store.load()
    store.close()
    return holdings


def seed(db_path: Path, holdings) -> None:
    store = HoldingsStore(db_path)
    store.save(holdings)
    store.close()


class TestHoldingCommands:
    """Test cases for list, add, edit and delete."""

    def test_list_empty(self, run) -> None:
        result = run("list")

        assert result.exit_code == 0
        assert "No holdings yet" in result.output

    def test_add_and_list(self, run, db_path: Path) -> None:
        result = run(
            "add", "Infosys", "INFY", "-q", "10", "-b", "1450", "-c", "1520",
            "--sector", "Indian Equities",
        )

        assert result.exit_code == 0, result.output
        assert "Saved" in result.output
        holdings = stored(db_path)
        assert len(holdings) == 1
        assert holdings[0].quantity == 10.0

        listed = run("list")
        assert listed.exit_code == 0
        assert "INFY" in listed.output
        assert holdings[0].id[:8] in listed.output

    def test_add_merges(self, run, db_path: Path) -> None:
        args = ["-b", "100", "-c", "120", "--sector", "Indian Equities"]
        run("add", "Infosys", "INFY", "-q", "10", *args)
        run("add", "Infosys", "INFY", "-q", "10", "-b", "200", "-c", "130",
            "--sector", "Indian Equities")

        holdings = stored(db_path)
        assert len(holdings) == 1
        assert holdings[0].quantity == 20.0
        assert holdings[0].avg_buy_price == pytest.approx(150.0)

    def test_add_unknown_sector(self, run, db_path: Path) -> None:
        result = run("add", "Tower", "TWR", "-q", "1", "--sector", "Real Estate")

        assert result.exit_code == 2
        assert "Real Estate" in result.output
        assert stored(db_path) == []

    def test_add_blank_ticker(self, run) -> None:
        result = run("add", "Apple", " ", "-q", "1", "--sector", "US Tech Stocks")

        assert result.exit_code == 1
        assert "Missing required fields" in result.output

    def test_edit_keeps_omitted_values(self, run, db_path: Path) -> None:
        holding = Holding("Apple", "AAPL", 5, 150.0, 180.0, "US Tech Stocks")
        seed(db_path, [holding])

        result = run("edit", holding.id[:8], "-c", "210", "--sector", "US ETF")

        assert result.exit_code == 0, result.output
        edited = stored(db_path)[0]
        assert edited.quantity == 5.0
        assert edited.avg_buy_price == 150.0
        assert edited.current_price == 210.0
        assert edited.sector == "US Tech Stocks"

    def test_edit_unknown_id(self, run) -> None:
        result = run("edit", "deadbeef", "-q", "1")

        assert result.exit_code == 1
        assert "No holding matches" in result.output

    def test_ambiguous_prefix(self, run, db_path: Path) -> None:
        seed(
            db_path,
            [
                Holding("A", "A", 1, 1.0, 1.0, "Crypto", id="abc-1"),
                Holding("B", "B", 1, 1.0, 1.0, "Crypto", id="abc-2"),
            ],
        )

        result = run("delete", "abc", "--yes")

        assert result.exit_code == 1
        assert "ambiguous" in result.output

    def test_delete(self, run, db_path: Path) -> None:
        holding = Holding("Bitcoin", "BTC", 1, 30000.0, 40000.0, "Crypto")
        seed(db_path, [holding])

        result = run("delete", holding.id, "--yes")

        assert result.exit_code == 0
        assert "Deleted" in result.output
        assert stored(db_path) == []

    def test_delete_storage_failure(
        self, run, db_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        holding = Holding("Bitcoin", "BTC", 1, 30000.0, 40000.0, "Crypto")
        seed(db_path, [holding])

        def failing_save(self, holdings):
            raise StorageError("Failed to save holdings: disk I/O error")

        monkeypatch.setattr(HoldingsStore, "save", failing_save)

        result = run("delete", holding.id, "--yes")

        assert result.exit_code == 1
        assert "Error: Failed to save holdings: disk I/O error" in result.output
        assert not isinstance(result.exception, StorageError)
        monkeypatch.undo()
        assert stored(db_path) == [holding]

    def test_delete_declined(self, run, db_path: Path) -> None:
        holding = Holding("Bitcoin", "BTC", 1, 30000.0, 40000.0, "Crypto")
        seed(db_path, [holding])

        result = run("delete", holding.id, input="n\n")

        assert result.exit_code == 1
        assert stored(db_path) == [holding]


class TestAnalysisCommands:
    """Test cases for summary, rebalance, sector and targets."""

    @pytest.fixture
    def balanced(self, db_path: Path) -> None:
        seed(
            db_path,
            [
                Holding("Gold ETF", "GLD", 1, 2000.0, 2000.0, "Gold and Silver"),
                Holding("Infosys", "INFY", 1, 2000.0, 2000.0, "Indian Equities"),
                Holding("TCS", "TCS", 1, 2000.0, 2000.0, "Indian Equities"),
                Holding("Apple", "AAPL", 1, 1500.0, 1500.0, "US Tech Stocks"),
                Holding("Vanguard S&P", "VOO", 1, 500.0, 500.0, "US ETF"),
                Holding("Bitcoin", "BTC", 1, 1000.0, 1000.0, "Crypto"),
                Holding("Savings", "CASH", 1, 1000.0, 1000.0, "Business/Cash"),
            ],
        )

    def test_summary_empty(self, run) -> None:
        result = run("summary")

        assert result.exit_code == 0
        assert "Total Invested" in result.output
        assert "Gold and Silver" in result.output

    def test_summary_shows_status(self, run, db_path: Path) -> None:
        seed(db_path, [Holding("Infosys", "INFY", 1, 8000.0, 8000.0, "Indian Equities")])

        result = run("summary")

        assert result.exit_code == 0
        assert "Overweight" in result.output
        assert "Underweight" in result.output

    def test_rebalance_balanced(self, run, balanced) -> None:
        result = run("rebalance")

        assert result.exit_code == 0
        assert "Portfolio is within target allocation." in result.output

    def test_rebalance_prints_messages(self, run, db_path: Path) -> None:
        seed(
            db_path,
            [
                Holding("Infosys", "INFY", 1, 8000.0, 8000.0, "Indian Equities"),
                Holding("Apple", "AAPL", 1, 2000.0, 2000.0, "US Tech Stocks"),
            ],
        )

        result = run("rebalance")

        assert result.exit_code == 0
        assert "Indian Equities is 40.00% above target" in result.output
        assert "Add 2000.00 to Gold and Silver" in result.output
        assert "Infosys (INFY) exceeds 30% of portfolio" in result.output

    def test_sector_detail(self, run, balanced) -> None:
        result = run("sector", "Indian Equities")

        assert result.exit_code == 0
        assert "Target: 40.00%" in result.output
        assert "Infosys (INFY)" in result.output
        assert "TCS (TCS)" in result.output

    def test_sector_unknown(self, run) -> None:
        result = run("sector", "Real Estate")

        assert result.exit_code == 1
        assert "Error: Unknown sector: Real Estate" in result.output
        assert "'Unknown sector" not in result.output

    def test_targets(self, run) -> None:
        result = run("targets")

        assert result.exit_code == 0
        assert "Business/Cash" in result.output
        assert "40" in result.output
