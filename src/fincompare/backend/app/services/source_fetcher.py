"""Cached loading of a single remote listing table."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Generic, Sequence

from pydantic import ValidationError

from fincompare.backend.app.models import (
    CryptoBroker,
    FixedDeposit,
    MoneyMarketFund,
    StockBroker,
)
from fincompare.backend.app.models.records import RecordT

from .cache_service import CacheStore
from .remote_store import RemoteFetchError, RemoteStore

_LOGGER = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 10.0


@dataclass(frozen=True)
class ListingSource(Generic[RecordT]):
    """How one entity type is queried, ordered and mapped."""

    key: str
    table: str
    order_by: str
    ascending: bool
    record_type: type[RecordT]

    @property
    def label(self) -> str:
        return self.key.replace("_", " ")

    def map_rows(self, rows: Sequence[Any]) -> tuple[RecordT, ...]:
        return self.record_type.from_rows(rows)


FIXED_DEPOSITS = ListingSource(
    key="fixed_deposits",
    table="fixed_deposits",
    order_by="interest_rate",
    ascending=False,
    record_type=FixedDeposit,
)
MONEY_MARKET_FUNDS = ListingSource(
    key="money_market_funds",
    table="money_market_funds",
    order_by="current_yield",
    ascending=False,
    record_type=MoneyMarketFund,
)
STOCK_BROKERS = ListingSource(
    key="stock_brokers",
    table="stock_brokers",
    order_by="commission_rate",
    ascending=True,
    record_type=StockBroker,
)
CRYPTO_BROKERS = ListingSource(
    key="crypto_brokers",
    table="crypto_brokers",
    order_by="trading_fee",
    ascending=True,
    record_type=CryptoBroker,
)

LISTING_SOURCES: tuple[ListingSource[Any], ...] = (
    FIXED_DEPOSITS,
    MONEY_MARKET_FUNDS,
    STOCK_BROKERS,
    CRYPTO_BROKERS,
)


@dataclass(frozen=True)
class FetchState(Generic[RecordT]):
    """Observable state of one source."""

    data: tuple[RecordT, ...] | None = None
    error: str | None = None
    loading: bool = False
    last_updated: datetime | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "data": None if self.data is None else [record.to_payload() for record in self.data],
            "error": self.error,
            "loading": self.loading,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }


def _describe_validation_error(source: ListingSource[Any], error: ValidationError) -> str:
    first = error.errors()[0] if error.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    detail = f"{location}: {message}" if location else message
    return f"Unexpected {source.label} row shape ({detail})"


class SourceFetcher(Generic[RecordT]):
    """Read-through cache in front of one remote table.

    Every remote query is tagged with a generation number. When a newer load
    starts before an older one resolves, the older response is dropped instead
    of overwriting the cache or the published state.
    """

    def __init__(
        self,
        source: ListingSource[RecordT],
        *,
        remote: RemoteStore,
        cache: CacheStore,
        timeout: float | None = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive when provided")

        self._source = source
        self._remote = remote
        self._cache = cache
        self._timeout = timeout
        self._state: FetchState[RecordT] = FetchState()
        self._generation = 0

    @property
    def source(self) -> ListingSource[RecordT]:
        return self._source

    @property
    def key(self) -> str:
        return self._source.key

    @property
    def state(self) -> FetchState[RecordT]:
        return self._state

    async def _query(self) -> list[Any]:
        request = self._remote.query(
            self._source.table, self._source.order_by, self._source.ascending
        )
        if self._timeout is None:
            return await request
        return await asyncio.wait_for(request, timeout=self._timeout)

    async def load(self, force_refresh: bool = False) -> FetchState[RecordT]:
        """Return cached records or fetch them from the remote store."""

        if force_refresh:
            self._cache.invalidate(self.key)

        cached = self._cache.get_entry(self.key)
        if cached is not None:
            self._state = FetchState(data=cached.value, last_updated=cached.stored_at)
            return self._state

        self._generation += 1
        generation = self._generation
        self._state = replace(self._state, loading=True, error=None)

        try:
            rows = await self._query()
            records = self._source.map_rows(rows)
        except RemoteFetchError as exc:
            result = self._failed(str(exc) or f"Failed to fetch {self._source.label}")
        except ValidationError as exc:
            result = self._failed(_describe_validation_error(self._source, exc))
        except asyncio.TimeoutError:
            result = self._failed(
                f"Timed out fetching {self._source.label} after {self._timeout:g}s"
            )
        except Exception as exc:
            result = self._failed(
                str(exc) or f"Failed to fetch {self._source.label}", unexpected=True
            )
        else:
            result = None

        if generation != self._generation:
            _LOGGER.info("Discarding superseded response for %s", self.key)
            return self._state

        if result is None:
            entry = self._cache.set(self.key, records)
            result = FetchState(data=records, last_updated=entry.stored_at)
            _LOGGER.debug("Fetched %d %s rows", len(records), self.key)

        self._state = result
        return result

    def _failed(self, message: str, *, unexpected: bool = False) -> FetchState[RecordT]:
        """Failed state; ``last_updated`` still marks the last good fetch."""

        if unexpected:
            _LOGGER.exception("Unexpected error fetching %s: %s", self.key, message)
        else:
            _LOGGER.error("Error fetching %s: %s", self.key, message)
        return FetchState(error=message, last_updated=self._state.last_updated)

    async def refresh(self) -> FetchState[RecordT]:
        return await self.load(force_refresh=True)


__all__ = [
    "CRYPTO_BROKERS",
    "DEFAULT_FETCH_TIMEOUT",
    "FIXED_DEPOSITS",
    "FetchState",
    "LISTING_SOURCES",
    "ListingSource",
    "MONEY_MARKET_FUNDS",
    "STOCK_BROKERS",
    "SourceFetcher",
]
