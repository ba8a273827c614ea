"""feedgate.data.validation

Session gating for parsed records.

Each record's timestamp is checked against an :class:`ExchangeCalendar`
before it reaches downstream consumers:

- ``"day"``: the timestamp falls on a trading day (weekday, not a holiday).
- ``"regular"`` / ``"extended"``: trading day and the session is open at the
  timestamp itself.

Daily feeds carry midnight timestamps and would never pass a session check,
so ``"day"`` is the usual mode for them. Kept records preserve input order.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Literal, Tuple

from feedgate.data.calendar import ExchangeCalendar
from feedgate.data.reader import Record

__all__ = ["GateMode", "GateReport", "gate_records", "is_record_in_session"]

logger = logging.getLogger(__name__)

GateMode = Literal["day", "regular", "extended"]


@dataclass(frozen=True)
class GateReport:
    ok: bool
    mode: str
    n_records: int
    n_kept: int
    n_rejected: int
    rejected_dates: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def is_record_in_session(record: Record, calendar: ExchangeCalendar, *, session: GateMode = "day") -> bool:
    ts = record.timestamp
    if not calendar.is_trading_day(ts):
        return False
    if session == "day":
        return True
    if session == "regular":
        return calendar.is_regular_session_open(ts)
    if session == "extended":
        return calendar.is_extended_session_open(ts)
    raise ValueError(f"session must be 'day', 'regular' or 'extended', got {session!r}")


def gate_records(
    records: Iterable[Record],
    calendar: ExchangeCalendar,
    *,
    session: GateMode = "day",
) -> Tuple[List[Record], GateReport]:
    """Split records into kept (in session) and rejected.

    Returns:
        (kept_records, report)
    """

    if session not in ("day", "regular", "extended"):
        raise ValueError(f"session must be 'day', 'regular' or 'extended', got {session!r}")

    kept: List[Record] = []
    rejected: List[str] = []
    n = 0
    for rec in records:
        n += 1
        if is_record_in_session(rec, calendar, session=session):
            kept.append(rec)
        else:
            rejected.append(rec.timestamp.isoformat())

    report = GateReport(
        ok=not rejected,
        mode=session,
        n_records=n,
        n_kept=len(kept),
        n_rejected=len(rejected),
        rejected_dates=tuple(rejected),
    )
    logger.info("session gate (%s): kept %d of %d records", session, report.n_kept, report.n_records)
    return kept, report
