"""FastAPI service - quote, symbol catalog and venue health endpoints."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import structlog
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tokenimpact.api.schemas import (
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    QuoteRequest,
    QuoteResponseOut,
    SymbolsRequest,
    SymbolsResponse,
    format_validation_errors,
)
from tokenimpact.config import Settings, get_settings
from tokenimpact.quotes import fetch_quote
from tokenimpact.symbols.catalog import (
    filter_by_quote,
    filter_by_search,
    filter_by_venue,
    get_symbol_catalog,
)
from tokenimpact.venues import VenueAggregator, create_aggregator
from tokenimpact.venues.health import check_health

log = structlog.get_logger(__name__)

# Set by run_api() so the lifespan loads the same config as the CLI.
_config_profile: str | None = None
_config_dir: Path | None = None

NO_STORE = {"Cache-Control": "no-store"}

router = APIRouter()


def _error_json(
    code: str, message: str, status_code: int = 400, details: dict[str, Any] | None = None
) -> JSONResponse:
    """Return consistent error JSON: { error: { code, message, details } }."""
    body = ErrorResponse(error={"code": code, "message": message, "details": details})
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=NO_STORE,
    )


def _validation_error(exc: ValidationError) -> JSONResponse:
    issues = exc.errors(include_url=False, include_context=False)
    return _error_json(ErrorCode.VALIDATION, format_validation_errors(exc), details={"issues": issues})


def _cached_catalog(app: FastAPI, max_age_sec: int) -> tuple[list, bool]:
    """Catalog from the in-process cache, refreshed after max_age_sec."""
    now = time.monotonic()
    entry = getattr(app.state, "symbols_cache", None)
    if entry is not None and now - entry[1] < max_age_sec:
        return entry[0], True
    catalog = get_symbol_catalog()
    app.state.symbols_cache = (catalog, now)
    return catalog, False


@router.get(
    "/quote",
    response_model=QuoteResponseOut,
    responses={
        400: {"description": "Invalid request parameters", "model": ErrorResponse},
        500: {"description": "Every venue failed", "model": ErrorResponse},
    },
)
async def quote(
    request: Request,
    symbol: str | None = Query(None, description="Canonical symbol, e.g. BTC-USD"),
    side: str | None = Query(None, description="BUY or SELL"),
    quantity: str | None = Query(None, description="Base asset quantity as a decimal string"),
    venues: str | None = Query(None, description="Comma-separated venue ids (default: all)"),
):
    """Quote execution cost for quantity of symbol on every venue and pick the best."""
    try:
        req = QuoteRequest.model_validate(
            {"symbol": symbol, "side": side, "quantity": quantity, "venues": venues}
        )
    except ValidationError as e:
        return _validation_error(e)

    aggregator: VenueAggregator = request.app.state.aggregator
    settings: Settings = request.app.state.settings
    resp = await fetch_quote(
        aggregator,
        req.symbol,
        req.side,
        req.quantity,
        venues=req.venues,
        stale_after_sec=settings.stale_after_sec,
    )

    if resp.results and resp.ok_count == 0:
        errors = "; ".join(f"{q.venue}: {q.error}" for q in resp.results)
        log.warning("quote_all_venues_failed", symbol=req.symbol, errors=errors)
        return _error_json(
            ErrorCode.EXCHANGE_ERROR,
            "All venues failed to respond",
            status_code=500,
            details={"errors": errors},
        )

    return JSONResponse(
        content=QuoteResponseOut.from_quote(resp).to_content(),
        headers=NO_STORE,
    )


@router.get(
    "/symbols",
    response_model=SymbolsResponse,
    responses={400: {"description": "Invalid request parameters", "model": ErrorResponse}},
)
async def symbols(
    request: Request,
    quote: str | None = Query(None, description="Quote currency, e.g. USD"),
    venue: str | None = Query(None, description="Only symbols listed on this venue"),
    search: str | None = Query(None, description="Case-insensitive match on base, quote or symbol"),
    limit: str | None = Query(None, description="Max results (default 100, max 500)"),
):
    """Symbol catalog with venue availability, filtered and limited."""
    try:
        req = SymbolsRequest.model_validate(
            {"quote": quote, "venue": venue, "search": search, "limit": limit}
        )
    except ValidationError as e:
        return _validation_error(e)

    settings: Settings = request.app.state.settings
    catalog, cached = _cached_catalog(request.app, settings.symbols_cache_sec)
    filtered = catalog
    if req.quote:
        filtered = filter_by_quote(filtered, req.quote)
    if req.venue:
        filtered = filter_by_venue(filtered, req.venue)
    if req.search:
        filtered = filter_by_search(filtered, req.search)

    body = SymbolsResponse(
        symbols=filtered[: req.limit],
        total=len(filtered),
        cached=cached,
        timestamp=int(time.time() * 1000),
    )
    return JSONResponse(
        content=body.model_dump(),
        headers={"Cache-Control": f"public, max-age={settings.symbols_cache_sec}"},
    )


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    """Ping every venue and grade latency."""
    aggregator: VenueAggregator = request.app.state.aggregator
    settings: Settings = request.app.state.settings
    report = await check_health(aggregator.clients, settings.degraded_threshold_ms)
    return JSONResponse(content=report.model_dump(), headers=NO_STORE)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = [f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}" for err in exc.errors()]
    return _error_json(ErrorCode.VALIDATION, "; ".join(parts))


def create_app(
    aggregator: VenueAggregator | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the API app. An injected aggregator is used as-is and left open on
    shutdown; otherwise one is built from settings and closed with the app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings or get_settings(_config_profile, _config_dir)
        owned = aggregator is None
        app.state.aggregator = aggregator or create_aggregator(app.state.settings)
        log.info("api_started", venues=app.state.aggregator.venues)
        yield
        if owned:
            await app.state.aggregator.aclose()

    app = FastAPI(title="Token Impact API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"], allow_headers=["*"])
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.include_router(router)
    return app


app = create_app()


def run_api(
    host: str = "127.0.0.1",
    port: int = 8000,
    profile: str | None = None,
    config_dir: Path | None = None,
) -> None:
    global _config_profile, _config_dir
    _config_profile = profile
    _config_dir = config_dir
    import uvicorn

    uvicorn.run("tokenimpact.api.main:app", host=host, port=port, reload=False)
