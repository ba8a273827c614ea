"""feedgate.locator

Retrieval URL construction for dataset feeds.

The auth token is held by an explicit, immutable :class:`LocatorConfig`
rather than process-wide state, so independent consumers can hold different
tokens at the same time. Tokens are passed through verbatim; their format is
the provider's concern.

The query string layout is fixed by the upstream provider:

    https://<host>/api/v1/datasets/<SYMBOL>.csv?sort_order=asc&exclude_headers=false&auth_token=<TOKEN>
"""

from __future__ import annotations

from dataclasses import dataclass, replace

__all__ = ["DEFAULT_HOST", "LocatorConfig", "FeedLocator", "build_source_url"]

DEFAULT_HOST = "www.quandl.com"


@dataclass(frozen=True)
class LocatorConfig:
    """Provider host and auth token."""

    host: str = DEFAULT_HOST
    auth_token: str = ""

    # Flipped by with_auth_token; an explicitly empty token still counts as set
    is_auth_token_set: bool = False

    def with_auth_token(self, token: str) -> "LocatorConfig":
        return replace(self, auth_token=token, is_auth_token_set=True)


def build_source_url(symbol: str, config: LocatorConfig) -> str:
    """Dataset CSV URL for ``symbol``, headers included, ascending order."""

    if not symbol:
        raise ValueError("symbol must be non-empty")
    host = config.host.strip().rstrip("/")
    return (
        f"https://{host}/api/v1/datasets/{symbol}.csv"
        f"?sort_order=asc&exclude_headers=false&auth_token={config.auth_token}"
    )


class FeedLocator:
    """Builds source URLs for one provider configuration."""

    def __init__(self, config: LocatorConfig | None = None) -> None:
        self.config = config if config is not None else LocatorConfig()

    @property
    def is_auth_token_set(self) -> bool:
        return self.config.is_auth_token_set

    def source(self, symbol: str) -> str:
        return build_source_url(symbol, self.config)
