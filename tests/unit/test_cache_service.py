from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from fincompare.backend.app.services.cache_service import CacheStore


def test_entries_are_served_inside_the_validity_window(clock) -> None:
    cache = CacheStore(validity_seconds=300, clock=clock)
    entry = cache.set("fixed_deposits", ("maybank",))

    clock.advance(timedelta(seconds=299))

    assert cache.get("fixed_deposits") == ("maybank",)
    assert cache.get_entry("fixed_deposits") is entry
    assert "fixed_deposits" in cache


def test_entries_expire_at_the_validity_boundary(clock) -> None:
    cache = CacheStore(validity_seconds=300, clock=clock)
    cache.set("fixed_deposits", ("maybank",))

    clock.advance(timedelta(seconds=300))

    assert cache.get("fixed_deposits") is None
    assert "fixed_deposits" not in cache
    # Lazy expiry keeps the stale entry until it is purged.
    assert len(cache) == 1


def test_set_overwrites_and_restamps(clock) -> None:
    cache = CacheStore(validity_seconds=60, clock=clock)
    cache.set("stock_brokers", ("old",))
    clock.advance(timedelta(seconds=50))

    entry = cache.set("stock_brokers", ("new",))
    clock.advance(timedelta(seconds=50))

    assert entry.stored_at == clock() - timedelta(seconds=50)
    assert cache.get("stock_brokers") == ("new",)


def test_invalidate_single_key(clock) -> None:
    cache = CacheStore(clock=clock)
    cache.set("fixed_deposits", 1)
    cache.set("crypto_brokers", 2)

    cache.invalidate("fixed_deposits")

    assert cache.get("fixed_deposits") is None
    assert cache.get("crypto_brokers") == 2


def test_invalidate_everything(clock) -> None:
    cache = CacheStore(clock=clock)
    cache.set("fixed_deposits", 1)
    cache.set("crypto_brokers", 2)

    cache.invalidate()

    assert len(cache) == 0


def test_invalidating_missing_key_is_a_no_op(clock) -> None:
    cache = CacheStore(clock=clock)

    cache.invalidate("unknown")

    assert len(cache) == 0


def test_purge_expired_removes_only_stale_entries(clock) -> None:
    cache = CacheStore(validity_seconds=60, clock=clock)
    cache.set("fixed_deposits", 1)
    clock.advance(timedelta(seconds=45))
    cache.set("crypto_brokers", 2)
    clock.advance(timedelta(seconds=30))

    assert cache.purge_expired() == 1
    assert len(cache) == 1
    assert cache.get("crypto_brokers") == 2


def test_status_describes_each_entry(clock) -> None:
    cache = CacheStore(validity_seconds=60, clock=clock)
    cache.set("fixed_deposits", 1)
    clock.advance(timedelta(seconds=90))

    (status,) = cache.status()

    assert status["key"] == "fixed_deposits"
    assert status["age_seconds"] == 90
    assert status["expired"] is True
    assert status["stored_at"] == "2025-03-01T09:00:00+00:00"


def test_validity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        CacheStore(validity_seconds=0)


def test_concurrent_writes_keep_every_key(clock) -> None:
    cache = CacheStore(clock=clock)

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(lambda index: cache.set(f"key-{index}", index), range(200)))

    assert len(cache) == 200
    assert cache.get("key-199") == 199
