"""Quote command: price a trade across venues."""

from __future__ import annotations

import asyncio
import json

import typer
from pydantic import ValidationError

from tokenimpact.api.schemas import QuoteRequest, QuoteResponseOut, format_validation_errors
from tokenimpact.models import QuoteResponse, VenueQuote
from tokenimpact.quotes import fetch_quote, format_number
from tokenimpact.venues import create_aggregator


def _format_row(q: VenueQuote, best: str | None) -> str:
    if q.impact is None:
        return f"  {q.venue:<9} {q.status:<11} {q.error or ''}"
    r = q.impact
    flags = []
    if not r.fillable:
        flags.append(f"short {format_number(r.shortfall)}")
    if q.stale:
        flags.append("stale")
    if q.venue == best:
        flags.append("best")
    vol = f"{format_number(r.volume_pct)}%" if r.volume_pct is not None else "n/a"
    line = (
        f"  {q.venue:<9} {q.status:<11} avg={format_number(r.avg_fill_price)}"
        f"  cost={format_number(r.total_cost)}  impact={format_number(r.price_impact, 3)}%"
        f"  depth={r.depth_consumed}  vol24h={vol}"
    )
    if flags:
        line += f"  [{', '.join(flags)}]"
    return line


def _print_table(resp: QuoteResponse) -> None:
    typer.echo(f"{resp.symbol}  {resp.side}  {resp.quantity}")
    for q in resp.results:
        typer.echo(_format_row(q, resp.best))
    typer.echo(f"Best: {resp.best or 'none'}")


def quote(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Canonical symbol, e.g. BTC-USD"),
    side: str = typer.Option("BUY", "--side", "-s", help="BUY or SELL"),
    quantity: str = typer.Option(..., "--quantity", "-q", help="Base asset quantity"),
    venue: list[str] | None = typer.Option(None, "--venue", "-v", help="Restrict to venue (repeatable)"),
    as_json: bool = typer.Option(False, "--json", help="Print the API JSON body"),
) -> None:
    """Fetch live depth from every venue and quote the execution cost."""
    settings = ctx.obj["settings"]
    try:
        req = QuoteRequest.model_validate(
            {
                "symbol": symbol.upper(),
                "side": side.upper(),
                "quantity": quantity,
                "venues": [v.lower() for v in venue] if venue else None,
            }
        )
    except ValidationError as e:
        typer.echo(format_validation_errors(e), err=True)
        raise typer.Exit(2)

    async def _run() -> QuoteResponse:
        aggregator = create_aggregator(settings)
        try:
            return await fetch_quote(
                aggregator,
                req.symbol,
                req.side,
                req.quantity,
                venues=req.venues,
                stale_after_sec=settings.stale_after_sec,
            )
        finally:
            await aggregator.aclose()

    resp = asyncio.run(_run())
    if as_json:
        typer.echo(json.dumps(QuoteResponseOut.from_quote(resp).to_content(), indent=2))
    else:
        _print_table(resp)
    if resp.results and resp.ok_count == 0:
        raise typer.Exit(1)
