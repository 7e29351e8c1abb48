"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationMissing

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RpcConfig:
    endpoints: tuple[str, ...] = ()
    timeout: int = 30


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 0
    cors_allow_origin: str = "*"


@dataclass(frozen=True)
class PricingConfig:
    reference_symbol: str = "DUSD"
    base_symbol: str = "DFI"
    first_bid_premium: Decimal = Decimal("1.05")
    min_bid_increment: Decimal = Decimal("1.01")
    max_price_haircut: Decimal = Decimal("0.99")
    display_places: int = 8


@dataclass(frozen=True)
class FilterConfig:
    min_margin: Decimal = Decimal("0")
    min_diff: Decimal | None = None
    max_starting_bid: Decimal | None = None


@dataclass(frozen=True)
class AuctionsConfig:
    cool_down_ms: int = 0
    explorer_url: str = "https://defiscan.live"
    filters: FilterConfig = field(default_factory=FilterConfig)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    directory: str = ""


@dataclass(frozen=True)
class AppConfig:
    rpc: RpcConfig = field(default_factory=RpcConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    auctions: AuctionsConfig = field(default_factory=AuctionsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Used when no config.yaml is present: every deployment-specific value
# comes from the environment.
DEFAULT_RAW: dict[str, Any] = {
    "rpc": {"endpoints": ["${CLIENT_ENDPOINT_URL}"]},
    "server": {"port": "${PORT}"},
    "auctions": {"cool_down_ms": "${COOL_DOWN}"},
    "logging": {"directory": "logs"},
}

# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required(raw: dict[str, Any], key: str, setting: str) -> Any:
    value = raw.get(key)
    if _is_blank(value):
        raise ConfigurationMissing(setting)
    return value


def _as_int(value: Any, setting: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise ValueError(f"{setting} must be an integer, got {value!r}") from e


def _as_decimal(value: Any, setting: str) -> Decimal:
    # str() first so YAML floats never pass through binary rounding twice
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"{setting} must be a decimal number, got {value!r}") from e


def _as_optional_decimal(value: Any, setting: str) -> Decimal | None:
    if _is_blank(value):
        return None
    return _as_decimal(value, setting)


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_rpc(raw: dict[str, Any]) -> RpcConfig:
    endpoints = tuple(e for e in raw.get("endpoints", []) if not _is_blank(e))
    if not endpoints:
        raise ConfigurationMissing("rpc.endpoints (CLIENT_ENDPOINT_URL)")
    return RpcConfig(
        endpoints=endpoints,
        timeout=_as_int(raw.get("timeout", 30), "rpc.timeout"),
    )


def _build_server(raw: dict[str, Any]) -> ServerConfig:
    port = _as_int(_required(raw, "port", "server.port (PORT)"), "server.port")
    return ServerConfig(
        host=raw.get("host", "0.0.0.0"),
        port=port,
        cors_allow_origin=raw.get("cors_allow_origin", "*") or "",
    )


def _build_pricing(raw: dict[str, Any]) -> PricingConfig:
    return PricingConfig(
        reference_symbol=raw.get("reference_symbol", "DUSD"),
        base_symbol=raw.get("base_symbol", "DFI"),
        first_bid_premium=_as_decimal(
            raw.get("first_bid_premium", "1.05"), "pricing.first_bid_premium"
        ),
        min_bid_increment=_as_decimal(
            raw.get("min_bid_increment", "1.01"), "pricing.min_bid_increment"
        ),
        max_price_haircut=_as_decimal(
            raw.get("max_price_haircut", "0.99"), "pricing.max_price_haircut"
        ),
        display_places=_as_int(raw.get("display_places", 8), "pricing.display_places"),
    )


def _build_filters(raw: dict[str, Any]) -> FilterConfig:
    return FilterConfig(
        min_margin=_as_decimal(raw.get("min_margin", "0"), "filters.min_margin"),
        min_diff=_as_optional_decimal(raw.get("min_diff"), "filters.min_diff"),
        max_starting_bid=_as_optional_decimal(
            raw.get("max_starting_bid"), "filters.max_starting_bid"
        ),
    )


def _build_auctions(raw: dict[str, Any]) -> AuctionsConfig:
    cool_down = _required(raw, "cool_down_ms", "auctions.cool_down_ms (COOL_DOWN)")
    return AuctionsConfig(
        cool_down_ms=_as_int(cool_down, "auctions.cool_down_ms"),
        explorer_url=raw.get("explorer_url", "https://defiscan.live"),
        filters=_build_filters(raw.get("filters") or {}),
    )


def _build_logging(raw: dict[str, Any]) -> LoggingConfig:
    return LoggingConfig(
        level=raw.get("level", "INFO"),
        directory=raw.get("directory") or "",
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root; when that file does not exist the built-in
            environment-only defaults are used instead.

    Raises:
        ConfigurationMissing: a required setting is absent or empty.
        FileNotFoundError: an explicitly given ``config_path`` does not exist.
    """
    load_dotenv()

    if config_path is None:
        default_path = Path(__file__).resolve().parent.parent / "config.yaml"
        if default_path.exists():
            config_path = default_path

    if config_path is None:
        raw: dict[str, Any] = DEFAULT_RAW
        source = "environment"
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        source = str(config_path)

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        rpc=_build_rpc(raw.get("rpc") or {}),
        server=_build_server(raw.get("server") or {}),
        pricing=_build_pricing(raw.get("pricing") or {}),
        auctions=_build_auctions(raw.get("auctions") or {}),
        logging=_build_logging(raw.get("logging") or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", source)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not 0 < cfg.server.port < 65536:
        raise ValueError(f"server.port out of range: {cfg.server.port}")
    if cfg.auctions.cool_down_ms < 0:
        raise ValueError("auctions.cool_down_ms must not be negative")
    if cfg.auctions.filters.min_margin < 0:
        raise ValueError("filters.min_margin must not be negative")
    if cfg.pricing.reference_symbol == cfg.pricing.base_symbol:
        raise ValueError("pricing.reference_symbol and pricing.base_symbol must differ")
    if cfg.pricing.display_places < 0:
        raise ValueError("pricing.display_places must not be negative")
