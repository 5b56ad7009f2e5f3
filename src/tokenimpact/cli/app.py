"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from tokenimpact.config import get_settings
from tokenimpact.config.settings import configure_logging

app = typer.Typer(
    name="tokenimpact",
    help="Token Impact - compare trade execution cost across Binance, Coinbase and Kraken orderbooks.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from tokenimpact.cli import api_cmd, health, quote, symbols  # noqa: E402

app.command("quote")(quote.quote)
app.command("symbols")(symbols.symbols)
app.command("health")(health.health)
app.add_typer(api_cmd.app, name="api")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
