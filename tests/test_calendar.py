"""Tests for the exchange calendar: session windows, trading days, alignment."""

from __future__ import annotations

import datetime as dt

import pandas as pd
import pytest

from feedgate.data.calendar import (
    TRADING_DAYS_PER_YEAR,
    CalendarWindow,
    ExchangeCalendar,
    HolidaySet,
    parse_time_of_day,
)
from feedgate.errors import ParseError
from feedgate.utils.config import CalendarConfig

# 2020-01-08 is a Wednesday with no US holiday.
WED = "2020-01-08"


def test_regular_session_bounds_are_half_open() -> None:
    cal = ExchangeCalendar()
    assert cal.is_regular_session_open(f"{WED} 09:30:00") is True
    assert cal.is_regular_session_open(f"{WED} 16:00:00") is False
    assert cal.is_regular_session_open(f"{WED} 09:29:59") is False
    assert cal.is_regular_session_open(pd.Timestamp(f"{WED} 15:59:59.999999")) is True
    assert cal.is_regular_session_open(dt.datetime(2020, 1, 8, 12, 0)) is True


def test_extended_session_bounds_are_half_open() -> None:
    cal = ExchangeCalendar()
    assert cal.is_extended_session_open(f"{WED} 04:00:00") is True
    assert cal.is_extended_session_open(f"{WED} 20:00:00") is False
    assert cal.is_extended_session_open(f"{WED} 03:59:59") is False
    assert cal.is_extended_session_open(f"{WED} 19:59:59") is True


def test_sessions_closed_on_weekends() -> None:
    cal = ExchangeCalendar()
    for day in ("2020-01-04", "2020-01-05"):
        assert cal.is_regular_session_open(f"{day} 10:00") is False
        assert cal.is_extended_session_open(f"{day} 10:00") is False


def test_session_queries_ignore_holidays() -> None:
    cal = ExchangeCalendar(holidays=[WED])
    assert cal.is_trading_day(WED) is False
    assert cal.is_regular_session_open(f"{WED} 10:00") is True


def test_is_trading_day_weekends_and_holidays() -> None:
    holidays = HolidaySet.from_dates(["2020-01-01", "2020-01-20"])
    cal = ExchangeCalendar(holidays=holidays)

    for d in pd.date_range("2020-01-01", "2020-02-29", freq="D"):
        expected = d.weekday() < 5 and d.date() not in {dt.date(2020, 1, 1), dt.date(2020, 1, 20)}
        assert cal.is_trading_day(d) is expected, d


def test_is_trading_day_ignores_time_of_day() -> None:
    cal = ExchangeCalendar()
    assert cal.is_trading_day(f"{WED} 23:59") is True
    assert cal.is_trading_day(dt.date(2020, 1, 8)) is True


def test_alignment_uses_regular_window_without_trading_day_check() -> None:
    cal = ExchangeCalendar(holidays=[WED])
    assert cal.align_to_session_open(f"{WED} 17:45") == pd.Timestamp(f"{WED} 09:30")
    assert cal.align_to_session_close(dt.date(2020, 1, 8)) == pd.Timestamp(f"{WED} 16:00")
    # Saturday still aligns; callers check is_trading_day separately
    assert cal.align_to_session_open("2020-01-04") == pd.Timestamp("2020-01-04 09:30")


def test_trading_days_per_year_constant() -> None:
    assert TRADING_DAYS_PER_YEAR == 252
    assert ExchangeCalendar().trading_days_per_year == 252


def test_reconfigured_window_is_used() -> None:
    cal = ExchangeCalendar()
    cal.window.regular_close = dt.time(13, 0)
    assert cal.is_regular_session_open(f"{WED} 12:59") is True
    assert cal.is_regular_session_open(f"{WED} 13:00") is False
    assert cal.align_to_session_close(WED) == pd.Timestamp(f"{WED} 13:00")


def test_window_containment_is_not_enforced() -> None:
    window = CalendarWindow(extended_open=dt.time(10, 0), extended_close=dt.time(15, 0))
    assert window.extended_contains_regular() is False
    cal = ExchangeCalendar(window)
    assert cal.is_regular_session_open(f"{WED} 09:45") is True
    assert cal.is_extended_session_open(f"{WED} 09:45") is False
    assert CalendarWindow().extended_contains_regular() is True


@pytest.mark.parametrize(
    "clock, expected",
    [
        ("03:00", "CLOSED"),
        ("04:00", "PRE-MARKET"),
        ("09:29", "PRE-MARKET"),
        ("09:30", "REGULAR"),
        ("15:59", "REGULAR"),
        ("16:00", "AFTER-HOURS"),
        ("19:59", "AFTER-HOURS"),
        ("20:00", "CLOSED"),
    ],
)
def test_session_of(clock: str, expected: str) -> None:
    cal = ExchangeCalendar()
    assert cal.session_of(f"{WED} {clock}") == expected


def test_session_of_weekend_is_closed() -> None:
    assert ExchangeCalendar().session_of("2020-01-04 10:00") == "CLOSED"


def test_is_open_now_uses_injected_clock() -> None:
    cal = ExchangeCalendar(tz="America/New_York")
    pre_market = pd.Timestamp(f"{WED} 13:00", tz="UTC")  # 08:00 EST
    assert cal.is_open_now(lambda: pre_market) is False
    assert cal.is_open_now(lambda: pre_market, extended=True) is True
    assert cal.is_open_now(lambda: pd.Timestamp(f"{WED} 15:00", tz="UTC")) is True
    assert cal.is_open_now(lambda: "2020-01-04 12:00") is False


def test_is_open_now_reads_wall_clock() -> None:
    cal = ExchangeCalendar(tz="America/New_York")
    before = cal.is_regular_session_open(pd.Timestamp.now(tz="UTC"))
    result = cal.is_open_now()
    after = cal.is_regular_session_open(pd.Timestamp.now(tz="UTC"))
    assert isinstance(result, bool)
    if before == after:
        assert result == before


def test_tz_aware_instants_convert_to_exchange_time() -> None:
    cal = ExchangeCalendar(tz="America/New_York")
    # 14:30 UTC is 09:30 EST in January
    assert cal.is_regular_session_open(pd.Timestamp(f"{WED} 14:30", tz="UTC")) is True
    assert cal.is_regular_session_open(pd.Timestamp(f"{WED} 14:29", tz="UTC")) is False
    # tz-naive instants are already exchange-local
    assert cal.is_regular_session_open(f"{WED} 09:30") is True


@pytest.mark.parametrize("bad", ["not-a-date", "2020-13-45 10:00"])
def test_malformed_instant_raises_parse_error(bad: str) -> None:
    cal = ExchangeCalendar()
    with pytest.raises(ParseError):
        cal.is_regular_session_open(bad)
    with pytest.raises(ParseError):
        cal.is_trading_day(bad)
    with pytest.raises(ParseError):
        cal.align_to_session_open(bad)


def test_holiday_set_from_pandas_calendar() -> None:
    hs = HolidaySet.from_pandas_calendar("2020-01-01", "2020-12-31")
    assert dt.date(2020, 1, 1) in hs
    assert "2020-01-20" in hs
    assert pd.Timestamp("2020-12-25 10:00") in hs
    assert dt.date(2020, 1, 8) not in hs
    assert all(d.year == 2020 for d in hs)

    with pytest.raises(ValueError):
        HolidaySet.from_pandas_calendar("2020-12-31", "2020-01-01")


def test_calendar_from_config() -> None:
    cfg = CalendarConfig(
        regular_open="10:00",
        regular_close="15:00",
        holidays=(WED,),
        use_federal_holidays=True,
        holiday_start="2020-01-01",
        holiday_end="2020-12-31",
    )
    cal = ExchangeCalendar.from_config(cfg)
    assert cal.window.regular_open == dt.time(10, 0)
    assert cal.window.extended_close == dt.time(20, 0)
    assert cal.tz == "America/New_York"
    assert cal.is_trading_day(WED) is False
    assert cal.is_trading_day("2020-12-25") is False
    assert cal.is_trading_day("2020-01-09") is True
    assert cal.is_regular_session_open("2020-01-09 09:45") is False


def test_parse_time_of_day() -> None:
    assert parse_time_of_day("09:30") == dt.time(9, 30)
    assert parse_time_of_day("16:00:30") == dt.time(16, 0, 30)
    assert parse_time_of_day(dt.time(4, 0)) == dt.time(4, 0)
    with pytest.raises(ValueError):
        parse_time_of_day("25:00")


def test_parse_time_of_day_minutes_since_midnight() -> None:
    assert parse_time_of_day(960) == dt.time(16, 0)
    assert parse_time_of_day(0) == dt.time(0, 0)
    assert parse_time_of_day(1439) == dt.time(23, 59)
    for bad in (1440, -1, True):
        with pytest.raises(ValueError):
            parse_time_of_day(bad)
