"""Composition root for the listing cache, fetchers and aggregate view."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from fincompare.backend.settings import Settings

from .aggregate_loader import AggregateLoader
from .cache_service import CacheStore
from .remote_store import RemoteStore, SupabaseRestClient, UnconfiguredRemoteStore
from .source_fetcher import LISTING_SOURCES, ListingSource, SourceFetcher


@dataclass(frozen=True)
class ListingsContext:
    """Session-scoped collaborators shared by the listing endpoints."""

    cache: CacheStore
    aggregate: AggregateLoader

    def fetcher(self, key: str) -> SourceFetcher[Any]:
        """Return the fetcher for ``key`` (hyphens and underscores are equivalent)."""

        return self.aggregate.fetchers[key.strip().lower().replace("-", "_")]


def build_remote_store(settings: Settings) -> RemoteStore:
    if not settings.supabase_url:
        return UnconfiguredRemoteStore()
    return SupabaseRestClient(
        settings.supabase_url,
        settings.supabase_key,
        timeout=settings.fetch_timeout_seconds,
    )


def build_listings_context(
    settings: Settings,
    *,
    remote: RemoteStore | None = None,
    clock: Callable[[], datetime] | None = None,
    sources: Sequence[ListingSource[Any]] = LISTING_SOURCES,
) -> ListingsContext:
    """Create a fresh cache and one fetcher per source."""

    cache = CacheStore(validity_seconds=settings.cache_ttl_seconds, clock=clock)
    remote_store = remote if remote is not None else build_remote_store(settings)
    fetchers = [
        SourceFetcher(
            source,
            remote=remote_store,
            cache=cache,
            timeout=settings.fetch_timeout_seconds,
        )
        for source in sources
    ]
    return ListingsContext(cache=cache, aggregate=AggregateLoader(fetchers))


__all__ = ["ListingsContext", "build_listings_context", "build_remote_store"]
