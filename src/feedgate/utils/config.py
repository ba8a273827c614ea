"""Configuration utilities.

Strict, explicit configuration dataclasses for the reader, the exchange
calendar, the locator and logging.

Conventions:
- Session times are exchange-local ``"HH:MM"`` strings so configs round-trip
  through YAML unchanged.
- Defaults match US equities: regular 09:30-16:00, extended 04:00-20:00.
- The extended window is expected to contain the regular window, but this is
  only warned about; it is the caller's responsibility.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple, Union

from feedgate.data.calendar import CalendarWindow, parse_time_of_day
from feedgate.data.reader import RelearnPolicy
from feedgate.locator import LocatorConfig
from feedgate.utils.io import load_yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReaderConfig:
    """Feed reader settings."""

    # Schema field copied into Record.value (exact, case-sensitive)
    value_column: str = "Close"

    delimiter: str = ","

    # What a second header line does: "reject" raises, "ignore" keeps the first
    on_relearn: RelearnPolicy = "reject"

    # Bar length in days; Record.end_time = timestamp + period
    period_days: float = 1.0


@dataclass(frozen=True)
class CalendarConfig:
    """Exchange session windows and holiday source."""

    regular_open: str = "09:30"
    regular_close: str = "16:00"
    extended_open: str = "04:00"
    extended_close: str = "20:00"

    # Exchange-local zone used to convert tz-aware instants; None keeps wall time
    timezone: Optional[str] = "America/New_York"

    # Explicit closure dates (YYYY-MM-DD)
    holidays: Tuple[str, ...] = ()

    # Add pandas' US federal holidays in [holiday_start, holiday_end]
    use_federal_holidays: bool = False
    holiday_start: str = "2000-01-01"
    holiday_end: str = "2030-12-31"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    fmt: Optional[str] = None


@dataclass(frozen=True)
class FeedGateConfig:
    """Top-level configuration container."""

    reader: ReaderConfig = field(default_factory=ReaderConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    locator: LocatorConfig = field(default_factory=LocatorConfig)
    log: LoggingConfig = field(default_factory=LoggingConfig)

    # Which check the ingest gate applies: trading day only, or a session
    gate_session: Literal["day", "regular", "extended"] = "day"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FeedGateConfig":
        """Build a config from a (possibly partial) nested dict."""

        base = deep_update(cls().to_dict(), d or {})
        unknown = set(base) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        cal = dict(base["calendar"])
        cal["holidays"] = tuple(str(h) for h in cal.get("holidays") or ())
        for key in ("regular_open", "regular_close", "extended_open", "extended_close"):
            if isinstance(cal[key], int) and not isinstance(cal[key], bool):
                cal[key] = parse_time_of_day(cal[key]).strftime("%H:%M")
        return cls(
            reader=ReaderConfig(**base["reader"]),
            calendar=CalendarConfig(**cal),
            locator=LocatorConfig(**base["locator"]),
            log=LoggingConfig(**base["log"]),
            gate_session=base["gate_session"],
        )


def deep_update(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively update nested dictionaries."""

    out = dict(base)
    for k, v in updates.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_update(out[k], v)
        else:
            out[k] = v
    return out


def validate_config(cfg: FeedGateConfig) -> None:
    """Sanity checks; raises ValueError on the first violation."""

    if not cfg.reader.delimiter:
        raise ValueError("delimiter must be non-empty")
    if not cfg.reader.value_column.strip():
        raise ValueError("value_column must be non-empty")
    if cfg.reader.on_relearn not in ("reject", "ignore"):
        raise ValueError("on_relearn must be in {'reject','ignore'}")
    if cfg.reader.period_days <= 0:
        raise ValueError("period_days must be positive")
    if cfg.gate_session not in ("day", "regular", "extended"):
        raise ValueError("gate_session must be in {'day','regular','extended'}")

    c = cfg.calendar
    window = CalendarWindow(
        regular_open=parse_time_of_day(c.regular_open),
        regular_close=parse_time_of_day(c.regular_close),
        extended_open=parse_time_of_day(c.extended_open),
        extended_close=parse_time_of_day(c.extended_close),
    )
    if window.regular_open >= window.regular_close:
        raise ValueError("regular_open must be before regular_close")
    if window.extended_open >= window.extended_close:
        raise ValueError("extended_open must be before extended_close")
    if not window.extended_contains_regular():
        logger.warning("extended session %s-%s does not contain regular session %s-%s",
                       c.extended_open, c.extended_close, c.regular_open, c.regular_close)


def load_config(path: Optional[Union[str, Path]] = None) -> FeedGateConfig:
    """Load and validate a YAML config; ``None`` returns the defaults."""

    cfg = FeedGateConfig() if path is None else FeedGateConfig.from_dict(load_yaml(path))
    validate_config(cfg)
    return cfg


__all__ = [
    "FeedGateConfig",
    "ReaderConfig",
    "CalendarConfig",
    "LocatorConfig",
    "LoggingConfig",
    "RelearnPolicy",
    "deep_update",
    "validate_config",
    "load_config",
]
