"""Exchange calendar.

Classifies instants against the regular and extended trading sessions and
dates against weekends and an exchange holiday set. Defaults follow US
equities: regular 09:30-16:00, extended 04:00-20:00, exchange-local time,
252 trading days per year.

Holidays are consumed as an opaque :class:`HolidaySet`. For a practical
default we build one from pandas' ``USFederalHolidayCalendar``, which is close
to the NYSE schedule; any other provider can pass its own dates.

Session windows are half-open: an instant exactly at the open is inside the
session, one exactly at the close is not. Session queries look at the weekday
and time-of-day only; holiday membership is checked by :meth:`is_trading_day`.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Optional

import pandas as pd
from pandas.tseries.holiday import AbstractHolidayCalendar, USFederalHolidayCalendar

from feedgate.errors import ParseError

TRADING_DAYS_PER_YEAR = 252

SESSION_CLOSED = "CLOSED"
SESSION_PRE_MARKET = "PRE-MARKET"
SESSION_REGULAR = "REGULAR"
SESSION_AFTER_HOURS = "AFTER-HOURS"


def parse_time_of_day(value: str | int | dt.time) -> dt.time:
    """Parse ``"HH:MM"`` or ``"HH:MM:SS"`` into a ``datetime.time``.

    An int is taken as minutes since midnight. YAML 1.1 loaders read an
    unquoted ``16:00`` as the sexagesimal integer 960, so both spellings give
    the same time.
    """
    if isinstance(value, dt.time):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value < 24 * 60:
            raise ValueError(f"invalid time of day {value!r}; minutes must be in [0, 1440)")
        return dt.time(value // 60, value % 60)
    text = str(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return dt.datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"invalid time of day {value!r}; expected HH:MM")


def to_timestamp(value: Any, *, tz: Optional[str] = None) -> pd.Timestamp:
    """Convert an instant to a tz-naive exchange-local Timestamp.

    tz-aware inputs are converted to ``tz`` (when given) before the zone is
    dropped; tz-naive inputs are assumed to already be exchange-local.
    """

    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"invalid instant {value!r}: {e}") from e
    if ts is pd.NaT:
        raise ParseError(f"invalid instant {value!r}")
    if ts.tz is not None:
        ts = ts.tz_convert(tz) if tz else ts
        ts = ts.tz_localize(None)
    return ts


def to_date(value: Any, *, tz: Optional[str] = None) -> dt.date:
    return to_timestamp(value, tz=tz).date()


@dataclass
class CalendarWindow:
    """Regular and extended session bounds (exchange-local time of day).

    Mutable so an owner can reconfigure it before first use; it must not be
    changed while other threads query the calendar.
    """

    regular_open: dt.time = dt.time(9, 30)
    regular_close: dt.time = dt.time(16, 0)
    extended_open: dt.time = dt.time(4, 0)
    extended_close: dt.time = dt.time(20, 0)

    def extended_contains_regular(self) -> bool:
        return self.extended_open <= self.regular_open and self.regular_close <= self.extended_close


class HolidaySet:
    """Read-only set of full-closure dates."""

    __slots__ = ("_dates",)

    def __init__(self, dates: Iterable[Any] = ()) -> None:
        self._dates = frozenset(to_date(d) for d in dates)

    @classmethod
    def from_dates(cls, dates: Iterable[Any]) -> "HolidaySet":
        return cls(dates)

    @classmethod
    def from_pandas_calendar(
        cls,
        start: str | pd.Timestamp,
        end: str | pd.Timestamp,
        calendar: Optional[AbstractHolidayCalendar] = None,
    ) -> "HolidaySet":
        """Holidays between start and end (inclusive) from a pandas calendar."""
        start_ts = pd.Timestamp(start).normalize()
        end_ts = pd.Timestamp(end).normalize()
        if end_ts < start_ts:
            raise ValueError("end must be >= start")
        cal = calendar if calendar is not None else USFederalHolidayCalendar()
        return cls(cal.holidays(start=start_ts, end=end_ts))

    def __contains__(self, value: object) -> bool:
        if isinstance(value, dt.date) and not isinstance(value, dt.datetime):
            return value in self._dates
        return to_date(value) in self._dates

    def __iter__(self) -> Iterator[dt.date]:
        return iter(sorted(self._dates))

    def __len__(self) -> int:
        return len(self._dates)

    def __repr__(self) -> str:
        return f"HolidaySet(n={len(self._dates)})"


class ExchangeCalendar:
    """Trading-session and trading-day classification.

    Once the window is configured every query is a pure function of
    ``(instant, window, holidays)``, so a configured calendar can be shared
    between threads.
    """

    trading_days_per_year = TRADING_DAYS_PER_YEAR

    def __init__(
        self,
        window: Optional[CalendarWindow] = None,
        holidays: Optional[HolidaySet | Iterable[Any]] = None,
        *,
        tz: Optional[str] = None,
    ) -> None:
        self.window = window if window is not None else CalendarWindow()
        if holidays is None:
            holidays = HolidaySet()
        elif not isinstance(holidays, HolidaySet):
            holidays = HolidaySet(holidays)
        self.holidays = holidays
        self.tz = tz

    @classmethod
    def from_config(cls, cfg: Any) -> "ExchangeCalendar":
        """Build a calendar from a :class:`feedgate.utils.config.CalendarConfig`."""
        window = CalendarWindow(
            regular_open=parse_time_of_day(cfg.regular_open),
            regular_close=parse_time_of_day(cfg.regular_close),
            extended_open=parse_time_of_day(cfg.extended_open),
            extended_close=parse_time_of_day(cfg.extended_close),
        )
        dates = list(cfg.holidays)
        if cfg.use_federal_holidays:
            dates.extend(HolidaySet.from_pandas_calendar(cfg.holiday_start, cfg.holiday_end))
        return cls(window, HolidaySet(dates), tz=cfg.timezone)

    def _ts(self, instant: Any) -> pd.Timestamp:
        return to_timestamp(instant, tz=self.tz)

    @staticmethod
    def _in_window(ts: pd.Timestamp, open_: dt.time, close: dt.time) -> bool:
        if ts.weekday() >= 5:
            return False
        tod = ts.time()
        return open_ <= tod < close

    def is_regular_session_open(self, instant: Any) -> bool:
        ts = self._ts(instant)
        return self._in_window(ts, self.window.regular_open, self.window.regular_close)

    def is_extended_session_open(self, instant: Any) -> bool:
        ts = self._ts(instant)
        return self._in_window(ts, self.window.extended_open, self.window.extended_close)

    def is_open_now(self, clock: Optional[Callable[[], Any]] = None, *, extended: bool = False) -> bool:
        """Session check at the current instant.

        ``clock`` returns the instant to check; by default the wall clock, read
        as UTC when ``tz`` is set and as local time otherwise. Like the other
        session checks, holidays are not consulted.
        """
        if clock is None:
            now = pd.Timestamp.now(tz="UTC") if self.tz else pd.Timestamp.now()
        else:
            now = clock()
        if extended:
            return self.is_extended_session_open(now)
        return self.is_regular_session_open(now)

    def is_trading_day(self, date: Any) -> bool:
        d = self._ts(date).date()
        return d.weekday() < 5 and d not in self.holidays

    def session_of(self, instant: Any) -> str:
        """Name the session an instant falls in (weekends are CLOSED)."""
        ts = self._ts(instant)
        if self.is_regular_session_open(ts):
            return SESSION_REGULAR
        if not self.is_extended_session_open(ts):
            return SESSION_CLOSED
        if ts.time() < self.window.regular_open:
            return SESSION_PRE_MARKET
        return SESSION_AFTER_HOURS

    def align_to_session_open(self, date: Any) -> pd.Timestamp:
        """Date portion of ``date`` at the regular open (no trading-day check)."""
        return pd.Timestamp.combine(self._ts(date).date(), self.window.regular_open)

    def align_to_session_close(self, date: Any) -> pd.Timestamp:
        """Date portion of ``date`` at the regular close (no trading-day check)."""
        return pd.Timestamp.combine(self._ts(date).date(), self.window.regular_close)

    def __repr__(self) -> str:
        w = self.window
        return (
            f"ExchangeCalendar(regular={w.regular_open:%H:%M}-{w.regular_close:%H:%M}, "
            f"extended={w.extended_open:%H:%M}-{w.extended_close:%H:%M}, holidays={len(self.holidays)})"
        )


__all__ = [
    "TRADING_DAYS_PER_YEAR",
    "SESSION_CLOSED",
    "SESSION_PRE_MARKET",
    "SESSION_REGULAR",
    "SESSION_AFTER_HOURS",
    "CalendarWindow",
    "HolidaySet",
    "ExchangeCalendar",
    "parse_time_of_day",
    "to_timestamp",
    "to_date",
]
