"""feedgate.data.loaders

Feed ingestion from files and line iterables.

This module does not hardcode a vendor format. The column layout comes from
each feed's own header through :class:`~feedgate.data.reader.SchemaRecordReader`;
these helpers only move lines in and records out:

- :func:`iter_lines` streams a text file line by line.
- :func:`read_feed_lines` runs a reader over lines with a caller-chosen error
  policy (raise on the first bad line, or log and skip it).
- :func:`records_to_frame` turns records into a DataFrame indexed by
  timestamp, in input order. Nothing is sorted or deduplicated here; use
  :func:`validate_daily_index` when a strictly increasing index is required.

A missing value column (:class:`MissingFieldError`) always propagates: it is a
configuration problem for the whole stream, not a bad line.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Literal, Optional, Sequence

import pandas as pd

from feedgate.data.reader import Record, SchemaRecordReader
from feedgate.errors import ParseError, SchemaMismatchError

__all__ = [
    "iter_lines",
    "read_feed_lines",
    "read_feed",
    "records_to_frame",
    "validate_daily_index",
]

logger = logging.getLogger(__name__)

OnError = Literal["raise", "skip"]


def iter_lines(path: str | Path) -> Iterator[str]:
    """Yield the lines of a UTF-8 text file without line terminators.

    Undecodable bytes become U+FFFD, which no date or number token accepts, so
    a corrupt line fails as a ParseError under the caller's error policy
    instead of aborting the whole file.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8-sig", errors="replace", newline="") as f:
        for line in f:
            yield line.rstrip("\r\n")


def read_feed_lines(
    lines: Iterable[str],
    reader: SchemaRecordReader,
    *,
    on_error: OnError = "raise",
) -> List[Record]:
    """Parse a header line followed by data lines.

    Args:
        lines: header first, then data lines.
        reader: a fresh reader dedicated to this stream.
        on_error: ``"raise"`` propagates the first ParseError/SchemaMismatchError;
            ``"skip"`` logs it and continues with the next line.

    Returns:
        records in input order.
    """

    if on_error not in ("raise", "skip"):
        raise ValueError(f"on_error must be 'raise' or 'skip', got {on_error!r}")

    out: List[Record] = []
    n_skipped = 0
    for lineno, line in enumerate(lines, start=1):
        if not reader.is_schema_learned:
            reader.learn_schema(line)
            continue
        if not line.strip():
            # blank separator or trailing newline
            continue
        try:
            out.append(reader.parse_line(line))
        except (ParseError, SchemaMismatchError) as e:
            if on_error == "raise":
                raise
            n_skipped += 1
            logger.warning("skipping line %d of %r: %s", lineno, reader.symbol or "<feed>", e)

    if n_skipped:
        logger.info("%r: parsed %d records, skipped %d lines", reader.symbol or "<feed>", len(out), n_skipped)
    return out


def read_feed(
    path: str | Path,
    reader: Optional[SchemaRecordReader] = None,
    *,
    on_error: OnError = "raise",
) -> List[Record]:
    """Read a feed file; the symbol defaults to the file stem."""

    path = Path(path)
    if reader is None:
        reader = SchemaRecordReader(symbol=path.stem)
    return read_feed_lines(iter_lines(path), reader, on_error=on_error)


def records_to_frame(records: Sequence[Record]) -> pd.DataFrame:
    """Records -> DataFrame indexed by timestamp, one column per value field.

    Adds ``value`` (the canonical value) and ``symbol`` columns. Input order is
    kept. All records must share one schema.
    """

    if not records:
        return pd.DataFrame(columns=["value", "symbol"], index=pd.DatetimeIndex([], name="timestamp"))

    schema = records[0].schema
    if any(r.schema is not schema for r in records):
        raise ValueError("records come from different schemas")

    df = pd.DataFrame(
        [r.values for r in records],
        columns=list(schema.value_names),
        index=pd.DatetimeIndex([r.timestamp for r in records], name=schema.time_field),
    )
    df["value"] = [r.value for r in records]
    df["symbol"] = [r.symbol for r in records]
    return df


def validate_daily_index(df: pd.DataFrame, *, name: str = "data") -> None:
    """Validate daily time index invariants.

    Requirements:
      - monotonic increasing
      - no duplicates
      - timezone-naive

    Raises:
        ValueError on violation.
    """

    if not isinstance(df.index, pd.DatetimeIndex):
        raise ValueError(f"{name}: expected DatetimeIndex, got {type(df.index)}")

    if df.index.tz is not None:
        raise ValueError(f"{name}: expected timezone-naive dates")

    if not df.index.is_monotonic_increasing:
        raise ValueError(f"{name}: index not monotonic increasing")

    if df.index.has_duplicates:
        dups = df.index[df.index.duplicated()].unique()
        raise ValueError(f"{name}: duplicate timestamps found (e.g. {dups[:5].tolist()})")
