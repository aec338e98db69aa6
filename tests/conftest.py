"""Test configuration utilities and shared fixtures."""

import sys
from collections import defaultdict, deque
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from fincompare.backend.app import create_app  # noqa: E402
from fincompare.backend.app.services.remote_store import RemoteFetchError  # noqa: E402
from fincompare.backend.settings import Settings  # noqa: E402

SAMPLE_ROWS: dict[str, list[dict[str, object]]] = {
    "fixed_deposits": [
        {
            "id": 1,
            "bank": "Maybank",
            "product_name": "Maybank Fixed Deposit-i",
            "interest_rate": 3.85,
            "tenure": "12M",
            "min_deposit": 1000,
            "is_islamic": True,
            "features": ["Shariah-compliant", "Auto-renewal option"],
            "terms": "Early withdrawal penalties apply.",
            "affiliate_url": "https://maybank.com/fd",
            "created_at": "2025-01-02T00:00:00+00:00",
            "updated_at": "2025-01-03T00:00:00+00:00",
        },
        {
            "id": 2,
            "bank": "CIMB",
            "product_name": "CIMB eFD",
            "interest_rate": 4.1,
            "tenure": "6M",
            "min_deposit": 500,
            "is_islamic": False,
            "features": ["Online placement"],
            "terms": "Placement via app only.",
            "affiliate_url": "https://cimb.com/efd",
            "created_at": "2025-01-02T00:00:00+00:00",
            "updated_at": "2025-01-03T00:00:00+00:00",
        },
    ],
    "money_market_funds": [
        {
            "id": 10,
            "provider": "Versa",
            "fund_name": "Versa Cash",
            "current_yield": 3.6,
            "management_fee": 0.45,
            "min_investment": 100,
            "liquidity": "T+1",
            "is_shariah": False,
            "risk_level": "Low",
            "fund_size": "RM 500M",
        },
    ],
    "stock_brokers": [
        {
            "id": 20,
            "broker_name": "Rakuten Trade",
            "commission_rate": 0.1,
            "min_deposit": 0,
            "is_beginner_friendly": True,
            "is_licensed": True,
            "features": ["Low fees"],
            "commission_structure": "RM 7 minimum",
            "platform_fee": 0,
            "affiliate_url": "https://rakutentrade.my",
        },
    ],
    "crypto_brokers": [
        {
            "id": 30,
            "broker_name": "Luno",
            "trading_fee": 0.6,
            "min_deposit": 10,
            "is_beginner_friendly": True,
            "is_licensed": True,
            "features": ["Local exchange"],
            "supported_coins": 12,
            "withdrawal_fee": "Free",
            "affiliate_url": "https://luno.com",
        },
    ],
}


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def advance(self, delta: timedelta) -> None:
        self.current += delta

    def __call__(self) -> datetime:
        return self.current


class FakeRemoteStore:
    """In-memory stand-in for the hosted table store.

    Queued responses (rows or an exception, optionally behind an
    ``asyncio.Event`` gate) are served first; otherwise the table rows are
    returned in the requested order.
    """

    def __init__(self, tables: dict[str, list[dict[str, object]]] | None = None) -> None:
        source = SAMPLE_ROWS if tables is None else tables
        self.tables = {name: [dict(row) for row in rows] for name, rows in source.items()}
        self.failures: dict[str, str] = {}
        self.calls: list[tuple[str, str, bool]] = []
        self._queued: dict[str, deque] = defaultdict(deque)

    def queue(self, table: str, result, gate=None) -> None:
        self._queued[table].append((result, gate))

    def call_count(self, table: str) -> int:
        return sum(1 for call in self.calls if call[0] == table)

    async def query(self, table: str, order_by: str, ascending: bool):
        self.calls.append((table, order_by, ascending))

        if self._queued[table]:
            result, gate = self._queued[table].popleft()
            if gate is not None:
                await gate.wait()
            if isinstance(result, Exception):
                raise result
            return result

        if table in self.failures:
            raise RemoteFetchError(self.failures[table])
        rows = self.tables.get(table, [])
        return sorted(rows, key=lambda row: row[order_by], reverse=not ascending)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture()
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture()
def settings() -> Settings:
    return Settings(allowed_origins=frozenset({"https://app.fincompare.test"}))


@pytest.fixture()
def app(settings: Settings, remote: FakeRemoteStore, clock: FakeClock) -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app(settings=settings, remote_store=remote, clock=clock)
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()
