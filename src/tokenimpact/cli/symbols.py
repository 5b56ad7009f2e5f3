"""Symbols command: browse the symbol catalog."""

from __future__ import annotations

import typer

from tokenimpact.symbols.catalog import (
    filter_by_quote,
    filter_by_search,
    filter_by_venue,
    get_symbol_catalog,
)
from tokenimpact.venues import CLIENT_CLASSES


def symbols(
    quote: str | None = typer.Option(None, "--quote", help="Quote currency, e.g. USD"),
    venue: str | None = typer.Option(None, "--venue", "-v", help="Only symbols listed on this venue"),
    search: str | None = typer.Option(None, "--search", help="Match base, quote or symbol"),
    limit: int = typer.Option(100, "--limit", "-n", min=1, max=500, help="Max rows"),
) -> None:
    """List catalog symbols and where each is listed."""
    rows = get_symbol_catalog()
    if quote:
        rows = filter_by_quote(rows, quote.upper())
    if venue:
        rows = filter_by_venue(rows, venue.lower())
    if search:
        rows = filter_by_search(rows, search)
    for info in rows[:limit]:
        listed = " ".join(v for v in CLIENT_CLASSES if info.listed_on(v))
        typer.echo(f"  {info.symbol:<12} {listed}")
    typer.echo(f"Total: {len(rows)} symbols")
