"""Data subpackage.

This package contains:
- the schema-learning feed reader (Schema, Record, SchemaRecordReader)
- the exchange calendar (session windows, holidays, trading days)
- file/line loaders and record -> DataFrame conversion
- session gating of parsed records
"""

from .calendar import (
    SESSION_AFTER_HOURS,
    SESSION_CLOSED,
    SESSION_PRE_MARKET,
    SESSION_REGULAR,
    TRADING_DAYS_PER_YEAR,
    CalendarWindow,
    ExchangeCalendar,
    HolidaySet,
    parse_time_of_day,
    to_date,
    to_timestamp,
)
from .loaders import iter_lines, read_feed, read_feed_lines, records_to_frame, validate_daily_index
from .reader import DATE_FORMAT, Record, Schema, SchemaRecordReader, parse_date_token, parse_value_token
from .validation import GateReport, gate_records, is_record_in_session

__all__ = [
    # calendar
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
    # reader
    "DATE_FORMAT",
    "Schema",
    "Record",
    "SchemaRecordReader",
    "parse_date_token",
    "parse_value_token",
    # loaders
    "iter_lines",
    "read_feed_lines",
    "read_feed",
    "records_to_frame",
    "validate_daily_index",
    # gate
    "GateReport",
    "gate_records",
    "is_record_in_session",
]
