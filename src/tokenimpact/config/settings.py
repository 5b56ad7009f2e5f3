"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import sys
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

_DEFAULT_BASE_URLS = {
    "binance": "https://api.binance.com",
    "coinbase": "https://api.exchange.coinbase.com",
    "kraken": "https://api.kraken.com",
}


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir() -> Path:
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = config_dir or _find_config_dir()
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        venues: dict[str, Any] | None = None,
        aggregator: dict[str, Any] | None = None,
        quotes: dict[str, Any] | None = None,
        health: dict[str, Any] | None = None,
        api: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.venues = venues or {}
        self.aggregator = aggregator or {}
        self.quotes = quotes or {}
        self.health = health or {}
        self.api = api or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            venues=raw.get("venues"),
            aggregator=raw.get("aggregator"),
            quotes=raw.get("quotes"),
            health=raw.get("health"),
            api=raw.get("api"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    def venue_base_url(self, venue: str) -> str:
        section = self.venues.get(venue) or {}
        return section.get("base_url", _DEFAULT_BASE_URLS.get(venue, ""))

    @property
    def enabled_venues(self) -> list[str]:
        return list(self.venues.get("enabled") or _DEFAULT_BASE_URLS)

    @property
    def request_timeout_sec(self) -> float:
        return float(self.venues.get("request_timeout_sec", 5.0))

    @property
    def max_retries(self) -> int:
        return int(self.venues.get("max_retries", 3))

    @property
    def retry_base_delay_sec(self) -> float:
        return float(self.venues.get("retry_base_delay_sec", 1.0))

    @property
    def depth_limit(self) -> int:
        return int(self.venues.get("depth_limit", 500))

    @property
    def kraken_min_interval_sec(self) -> float:
        section = self.venues.get("kraken") or {}
        return float(section.get("min_request_interval_sec", 1.1))

    @property
    def venue_timeout_sec(self) -> float:
        return float(self.aggregator.get("venue_timeout_sec", 5.0))

    @property
    def stale_after_sec(self) -> float:
        return float(self.quotes.get("stale_after_sec", 5.0))

    @property
    def degraded_threshold_ms(self) -> int:
        return int(self.health.get("degraded_threshold_ms", 500))

    @property
    def api_host(self) -> str:
        return self.api.get("host", "127.0.0.1")

    @property
    def api_port(self) -> int:
        return int(self.api.get("port", 8000))

    @property
    def symbols_cache_sec(self) -> int:
        return int(self.api.get("symbols_cache_sec", 3600))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
