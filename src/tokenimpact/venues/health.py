"""Venue health - ping each venue concurrently and grade latency."""

from __future__ import annotations

import asyncio
import time
from typing import Literal, Sequence

import structlog
from pydantic import BaseModel

from tokenimpact.venues.base import VenueClient
from tokenimpact.venues.exceptions import VenueError

log = structlog.get_logger(__name__)

DEGRADED_THRESHOLD_MS = 500

HealthStatus = Literal["ok", "degraded", "offline"]


class VenueHealth(BaseModel):
    status: HealthStatus
    latency: int  # ms


class HealthReport(BaseModel):
    status: HealthStatus
    venues: dict[str, VenueHealth]
    timestamp: int


async def ping_venue(client: VenueClient, degraded_threshold_ms: int = DEGRADED_THRESHOLD_MS) -> VenueHealth:
    start = time.perf_counter()
    try:
        await client.ping()
    except VenueError as e:
        latency = round((time.perf_counter() - start) * 1000)
        log.warning("venue_ping_failed", venue=client.venue_id, error=str(e), latency_ms=latency)
        return VenueHealth(status="offline", latency=latency)
    latency = round((time.perf_counter() - start) * 1000)
    return VenueHealth(status="degraded" if latency > degraded_threshold_ms else "ok", latency=latency)


def overall_status(venues: dict[str, VenueHealth]) -> HealthStatus:
    """offline if every venue is offline; degraded if any is offline or slow; else ok."""
    statuses = [v.status for v in venues.values()]
    if not statuses or all(s == "offline" for s in statuses):
        return "offline"
    if any(s != "ok" for s in statuses):
        return "degraded"
    return "ok"


async def check_health(
    clients: Sequence[VenueClient], degraded_threshold_ms: int = DEGRADED_THRESHOLD_MS
) -> HealthReport:
    results = await asyncio.gather(*(ping_venue(c, degraded_threshold_ms) for c in clients))
    venues = {c.venue_id: h for c, h in zip(clients, results)}
    return HealthReport(status=overall_status(venues), venues=venues, timestamp=int(time.time() * 1000))
