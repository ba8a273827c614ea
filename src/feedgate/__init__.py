"""Feed ingestion and exchange-calendar gating (feedgate).

Reads delimited time-series feeds whose column layout is learned from the
feed's own header, and checks timestamps against a trading calendar with
regular/extended sessions, weekends and holidays.

The package is organized into submodules:
- feedgate.data: schema-learning reader, exchange calendar, loaders, session gate
- feedgate.locator: dataset URL construction with an explicit auth config
- feedgate.errors: exception hierarchy
- feedgate.utils: config dataclasses, YAML/JSON/CSV IO, logging setup

Most users will interact via scripts/ingest_feed.py.
"""

from .utils.config import FeedGateConfig

__all__ = ["FeedGateConfig"]
