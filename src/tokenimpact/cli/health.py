"""Health command: ping every venue."""

from __future__ import annotations

import asyncio

import typer

from tokenimpact.venues import create_clients
from tokenimpact.venues.health import HealthReport, check_health


def health(ctx: typer.Context) -> None:
    """Ping each venue and report latency; exits 1 when every venue is offline."""
    settings = ctx.obj["settings"]

    async def _run() -> HealthReport:
        clients = create_clients(settings, settings.enabled_venues)
        try:
            return await check_health(clients, settings.degraded_threshold_ms)
        finally:
            for c in clients:
                await c.aclose()

    report = asyncio.run(_run())
    for venue, h in report.venues.items():
        typer.echo(f"  {venue:<9} {h.status:<9} {h.latency}ms")
    typer.echo(f"Overall: {report.status}")
    if report.status == "offline":
        raise typer.Exit(1)
