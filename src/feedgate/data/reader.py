"""feedgate.data.reader

Schema-discovering line reader for delimited time-series feeds.

Feeds are plain delimited text whose column layout is not known in advance:

    Date,Open,High,Low,Close,Volume
    2020-01-02,100.0,105.0,99.0,104.5,1000

The first line is learned once as the :class:`Schema`; every later line is
parsed against it into an immutable :class:`Record`. Column 0 is always the
``YYYY-MM-DD`` date; columns 1..N are decimal numbers assigned positionally.
One column (``"Close"`` by default) is copied into ``Record.value``.

A reader owns exactly one stream and is not safe to share between callers.
Nothing is sorted, deduplicated or buffered beyond the learned schema.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Literal, Optional, Tuple

import numpy as np
import pandas as pd

from feedgate.errors import (
    MissingFieldError,
    ParseError,
    SchemaAlreadyLearnedError,
    SchemaMismatchError,
    SchemaNotLearnedError,
)

__all__ = [
    "DATE_FORMAT",
    "RelearnPolicy",
    "Schema",
    "Record",
    "SchemaRecordReader",
    "parse_date_token",
    "parse_value_token",
]

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_DECIMAL_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")

RelearnPolicy = Literal["reject", "ignore"]


def parse_date_token(token: str) -> pd.Timestamp:
    """Parse a ``YYYY-MM-DD`` token into a normalized tz-naive Timestamp."""

    if not _DATE_RE.fullmatch(token):
        raise ParseError(f"date token {token!r} does not match YYYY-MM-DD")
    try:
        return pd.to_datetime(token, format=DATE_FORMAT).normalize()
    except ValueError as e:
        raise ParseError(f"invalid date {token!r}: {e}") from e


def parse_value_token(token: str, *, column: str = "") -> float:
    """Parse an ASCII decimal token (optional sign and exponent).

    Surrounding whitespace, digit separators, non-ASCII digits and NaN/inf
    spellings are rejected.
    """

    if not _DECIMAL_RE.fullmatch(token):
        raise ParseError(f"column {column!r}: {token!r} is not a decimal number")
    v = float(token)
    if not np.isfinite(v):
        raise ParseError(f"column {column!r}: {token!r} is not a finite number")
    return v


@dataclass(frozen=True)
class Schema:
    """Ordered field names learned from a header line.

    ``names[0]`` is the timestamp field; the remaining names label the value
    columns of every :class:`Record` parsed against this schema.
    """

    names: Tuple[str, ...]
    _index: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        names = tuple(str(n).strip() for n in self.names)
        if not names or not names[0]:
            raise ParseError("header line has no columns")
        object.__setattr__(self, "names", names)
        index: Dict[str, int] = {}
        for i, n in enumerate(names):
            # first occurrence wins on duplicated header names
            index.setdefault(n, i)
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_header(cls, line: str, *, delimiter: str = ",") -> "Schema":
        text = line.rstrip("\r\n")
        if not text.strip():
            raise ParseError("empty header line")
        return cls(tuple(text.split(delimiter)))

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    @property
    def time_field(self) -> str:
        return self.names[0]

    @property
    def value_names(self) -> Tuple[str, ...]:
        return self.names[1:]

    def index_of(self, name: str) -> int:
        """Column index of ``name`` (exact, case-sensitive, trimmed match)."""
        try:
            return self._index[name.strip()]
        except KeyError:
            raise MissingFieldError(name, self.names) from None


@dataclass(frozen=True)
class Record:
    """One parsed data line.

    ``values[i]`` belongs to ``schema.names[i + 1]``; the timestamp column is
    not stored again as a value.
    """

    schema: Schema
    timestamp: pd.Timestamp
    values: Tuple[float, ...]
    value: float
    symbol: str = ""
    period: pd.Timedelta = pd.Timedelta(days=1)

    @property
    def end_time(self) -> pd.Timestamp:
        return self.timestamp + self.period

    def __getitem__(self, name: str) -> float:
        idx = self.schema.index_of(name)
        if idx == 0:
            raise KeyError(f"{name!r} is the timestamp field")
        return self.values[idx - 1]

    def get(self, name: str, default: Optional[float] = None) -> Optional[float]:
        try:
            return self[name]
        except KeyError:
            return default

    def fields(self) -> Tuple[Tuple[str, float], ...]:
        return tuple(zip(self.schema.value_names, self.values))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {self.schema.time_field: self.timestamp}
        out.update(self.fields())
        out["value"] = self.value
        out["symbol"] = self.symbol
        return out


class SchemaRecordReader:
    """Learns a schema from the first line of a stream and parses the rest.

    Args:
        value_column: schema field copied into ``Record.value``.
        symbol: feed symbol stamped onto every record.
        delimiter: column separator.
        on_relearn: ``"reject"`` raises on a second header, ``"ignore"`` keeps
            the first schema.
        period: bar length, used for ``Record.end_time``.
    """

    def __init__(
        self,
        value_column: str = "Close",
        *,
        symbol: str = "",
        delimiter: str = ",",
        on_relearn: RelearnPolicy = "reject",
        period: pd.Timedelta | str = pd.Timedelta(days=1),
    ) -> None:
        if not delimiter:
            raise ValueError("delimiter must be a non-empty string")
        if on_relearn not in ("reject", "ignore"):
            raise ValueError(f"on_relearn must be 'reject' or 'ignore', got {on_relearn!r}")
        self.value_column = value_column.strip()
        self.symbol = symbol
        self.delimiter = delimiter
        self.on_relearn = on_relearn
        self.period = pd.Timedelta(period)

        self._schema: Optional[Schema] = None
        self._value_index: Optional[int] = None
        self._config_error: Optional[MissingFieldError] = None

    @classmethod
    def from_config(cls, cfg: Any, *, symbol: str = "") -> "SchemaRecordReader":
        """Build a reader from a :class:`feedgate.utils.config.ReaderConfig`."""
        return cls(
            cfg.value_column,
            symbol=symbol,
            delimiter=cfg.delimiter,
            on_relearn=cfg.on_relearn,
            period=pd.Timedelta(days=cfg.period_days),
        )

    @property
    def schema(self) -> Optional[Schema]:
        return self._schema

    @property
    def is_schema_learned(self) -> bool:
        return self._schema is not None

    @property
    def value_index(self) -> Optional[int]:
        return self._value_index

    def learn_schema(self, header_line: str) -> Schema:
        """Capture the schema from a header line and resolve the value column.

        Raises:
            SchemaAlreadyLearnedError: second call with ``on_relearn="reject"``.
            MissingFieldError: value column absent from the header. The error
                is remembered and re-raised by every later ``parse_line``.
        """

        if self._schema is not None:
            if self.on_relearn == "reject":
                logger.warning("refusing to relearn schema for %r", self.symbol or "<feed>")
                raise SchemaAlreadyLearnedError(
                    f"schema already learned as {list(self._schema.names)}"
                )
            logger.debug("ignoring repeated header for %r", self.symbol or "<feed>")
            return self._schema

        schema = Schema.from_header(header_line, delimiter=self.delimiter)
        self._schema = schema
        try:
            idx = schema.index_of(self.value_column)
            if idx == 0:
                raise MissingFieldError(self.value_column, schema.value_names)
        except MissingFieldError as e:
            self._config_error = e
            logger.error("value column %r missing from feed %r", self.value_column, self.symbol)
            raise
        self._value_index = idx
        logger.info(
            "learned schema for %r: %d fields, value column %r at %d",
            self.symbol or "<feed>",
            len(schema),
            self.value_column,
            idx,
        )
        return schema

    def parse_line(self, line: str) -> Record:
        """Parse one data line against the learned schema."""

        if self._config_error is not None:
            raise self._config_error
        schema = self._schema
        if schema is None or self._value_index is None:
            raise SchemaNotLearnedError("learn_schema must be called before parse_line")

        text = line.rstrip("\r\n")
        if not text.strip():
            raise ParseError("empty line")

        tokens = text.split(self.delimiter)
        if len(tokens) != len(schema):
            raise SchemaMismatchError(len(schema), len(tokens), text)

        ts = parse_date_token(tokens[0])
        values = tuple(
            parse_value_token(tok, column=name)
            for tok, name in zip(tokens[1:], schema.value_names)
        )
        return Record(
            schema=schema,
            timestamp=ts,
            values=values,
            value=values[self._value_index - 1],
            symbol=self.symbol,
            period=self.period,
        )

    def feed(self, line: str) -> Optional[Record]:
        """Learn the schema on the first call, parse a Record afterwards."""
        if self._schema is None:
            self.learn_schema(line)
            return None
        return self.parse_line(line)

    def read(self, lines: Iterable[str]) -> Iterator[Record]:
        """Yield Records from a header line followed by data lines.

        A single trailing empty line (from a final newline) is tolerated; any
        other blank line raises :class:`ParseError`.
        """

        pending: Optional[str] = None
        for line in lines:
            if pending is not None:
                rec = self.feed(pending)
                if rec is not None:
                    yield rec
            pending = line
        if pending is not None and (pending.strip() or self._schema is None):
            rec = self.feed(pending)
            if rec is not None:
                yield rec

    def __repr__(self) -> str:
        names = list(self._schema.names) if self._schema is not None else None
        return f"SchemaRecordReader(value_column={self.value_column!r}, symbol={self.symbol!r}, schema={names})"
