"""CLI tests for commands that need no network."""

import pytest
import structlog
from typer.testing import CliRunner

from tokenimpact.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    # The root callback configures structlog against the runner's captured stderr
    yield
    structlog.reset_defaults()


def test_symbols_lists_catalog():
    result = runner.invoke(app, ["symbols", "--quote", "usd", "--search", "btc"])
    assert result.exit_code == 0
    assert "BTC-USD " in result.stdout
    assert "coinbase kraken" in result.stdout
    assert "Total: 1 symbols" in result.stdout


def test_quote_rejects_bad_quantity():
    result = runner.invoke(app, ["quote", "BTC-USD", "--side", "BUY", "--quantity=-3"])
    assert result.exit_code == 2


def test_quote_rejects_unknown_venue():
    result = runner.invoke(app, ["quote", "BTC-USD", "--quantity", "1", "--venue", "ftx"])
    assert result.exit_code == 2
