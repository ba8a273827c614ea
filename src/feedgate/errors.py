"""feedgate.errors

Exception hierarchy for feed parsing.

Every error derives from :class:`FeedGateError` and from the matching
builtin (``ValueError``, ``KeyError`` or ``RuntimeError``), so callers
that already catch builtins keep working.
"""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "FeedGateError",
    "ParseError",
    "SchemaMismatchError",
    "MissingFieldError",
    "SchemaAlreadyLearnedError",
    "SchemaNotLearnedError",
]


class FeedGateError(Exception):
    """Base class for all feedgate errors."""


class ParseError(FeedGateError, ValueError):
    """A line, token or date could not be parsed.

    Recoverable per line: the caller decides whether to skip or abort.
    """


class SchemaMismatchError(FeedGateError, ValueError):
    """A data line has a different number of tokens than the learned schema."""

    def __init__(self, expected: int, actual: int, line: str = "") -> None:
        self.expected = expected
        self.actual = actual
        self.line = line
        super().__init__(f"expected {expected} tokens, got {actual}: {line!r}")


class MissingFieldError(FeedGateError, KeyError):
    """The configured value column is absent from the learned schema.

    This is a configuration error; ingestion of the stream should stop.
    """

    def __init__(self, field: str, available: Sequence[str] = ()) -> None:
        self.field = field
        self.available = tuple(available)
        super().__init__(field)

    def __str__(self) -> str:
        return f"value column {self.field!r} not in schema {list(self.available)}"


class SchemaAlreadyLearnedError(FeedGateError, RuntimeError):
    """learn_schema was called twice on a reader that rejects relearning."""


class SchemaNotLearnedError(FeedGateError, RuntimeError):
    """parse_line was called before learn_schema."""
