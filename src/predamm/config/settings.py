"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from predamm.multi.arbitrage import AmmLimits
from predamm.pricing.fees import FeeSchedule
from predamm.settlement.league import RankingPolicy, SeasonWindow

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


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


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = _find_config_dir(config_dir)
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
    """Application settings from TOML config.

    The engine never reads these directly; callers turn them into the value
    objects (fee schedule, AMM limits, ranking policy) each call takes.
    """

    def __init__(
        self,
        *,
        fees: dict[str, Any] | None = None,
        amm: dict[str, Any] | None = None,
        league: dict[str, Any] | None = None,
        numeric: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.fees = fees or {}
        self.amm = amm or {}
        self.league = league or {}
        self.numeric = numeric or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            fees=raw.get("fees"),
            amm=raw.get("amm"),
            league=raw.get("league"),
            numeric=raw.get("numeric"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def fee_schedule(self) -> FeeSchedule:
        return FeeSchedule(
            creator_fee=float(self.fees.get("creator_fee", 0.04)),
            platform_fee=float(self.fees.get("platform_fee", 0.01)),
            purchase_fee=float(self.fees.get("purchase_fee", 0.0)),
        )

    @property
    def amm_limits(self) -> AmmLimits:
        return AmmLimits(max_probability=float(self.amm.get("max_probability", 0.99)))

    @property
    def excluded_contract_slugs(self) -> list[str]:
        return list(self.league.get("excluded_contract_slugs") or [])

    @property
    def excluded_contract_ids(self) -> list[str]:
        return list(self.league.get("excluded_contract_ids") or [])

    @property
    def season(self) -> SeasonWindow | None:
        start = self.league.get("season_start_ms")
        end = self.league.get("season_end_ms")
        if start is None or end is None:
            return None
        return SeasonWindow(start=int(start), end=int(end))

    @property
    def ranking_policy(self) -> RankingPolicy:
        return RankingPolicy(
            excluded_slugs=frozenset(self.excluded_contract_slugs),
            excluded_ids=frozenset(self.excluded_contract_ids),
            season=self.season,
        )

    @property
    def numeric_bucket_count(self) -> int:
        return int(self.numeric.get("bucket_count", 10))

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
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
