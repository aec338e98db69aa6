"""Combine the listing fetchers into a single loading/error/freshness view."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from .source_fetcher import FetchState, SourceFetcher

_LOGGER = logging.getLogger(__name__)


class AggregateLoader:
    """Expose the combined state of several independent sources.

    ``loading`` and ``error`` are true when any source is loading or failed;
    ``last_updated`` is the most recent successful load across sources. A
    failing source never blocks or rolls back the others.
    """

    def __init__(self, fetchers: Iterable[SourceFetcher[Any]]) -> None:
        self._fetchers: dict[str, SourceFetcher[Any]] = {}
        for fetcher in fetchers:
            if fetcher.key in self._fetchers:
                raise ValueError(f"Duplicate listing source '{fetcher.key}'")
            self._fetchers[fetcher.key] = fetcher

    @property
    def fetchers(self) -> Mapping[str, SourceFetcher[Any]]:
        return self._fetchers

    @property
    def states(self) -> dict[str, FetchState[Any]]:
        return {key: fetcher.state for key, fetcher in self._fetchers.items()}

    @property
    def loading(self) -> bool:
        return any(state.loading for state in self.states.values())

    @property
    def errors(self) -> dict[str, str]:
        """Error messages keyed by the source that produced them."""

        return {
            key: state.error for key, state in self.states.items() if state.error is not None
        }

    @property
    def error(self) -> bool:
        return bool(self.errors)

    @property
    def last_updated(self) -> datetime | None:
        timestamps = [
            state.last_updated
            for state in self.states.values()
            if state.last_updated is not None
        ]
        return max(timestamps) if timestamps else None

    async def _load(self, force_refresh: bool) -> dict[str, FetchState[Any]]:
        results = await asyncio.gather(
            *(fetcher.load(force_refresh=force_refresh) for fetcher in self._fetchers.values())
        )
        if any(result.error for result in results):
            _LOGGER.warning("Listing sources failed: %s", ", ".join(sorted(self.errors)))
        return dict(zip(self._fetchers, results))

    async def load_all(self) -> dict[str, FetchState[Any]]:
        """Load every source, serving cached data where it is still valid."""

        return await self._load(force_refresh=False)

    async def refresh_all(self) -> dict[str, FetchState[Any]]:
        """Force every source to bypass its cache and refetch concurrently."""

        return await self._load(force_refresh=True)

    def snapshot(self) -> dict[str, Any]:
        last_updated = self.last_updated
        return {
            "sources": {key: state.as_dict() for key, state in self.states.items()},
            "loading": self.loading,
            "error": self.error,
            "errors": self.errors,
            "lastUpdated": last_updated.isoformat() if last_updated else None,
        }


__all__ = ["AggregateLoader"]
