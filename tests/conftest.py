"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator
from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from cashflow_gateway.api.dependencies import get_now, get_sheets_client, get_weekly_model_client
from cashflow_gateway.api.main import create_app
from cashflow_gateway.domain.models import HistoricalStats, TransactionRecord
from cashflow_gateway.infrastructure.database.models import Base
from cashflow_gateway.infrastructure.database.session import get_db

# Monday; every window and anchor in the tests is relative to this
FIXED_NOW = datetime(2026, 3, 16, 12, 0, tzinfo=timezone.utc)
TODAY = FIXED_NOW.date()

# In-memory test database shared across threads
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_record() -> Callable[..., TransactionRecord]:
    """Factory for sales/purchase records dated relative to TODAY"""
    counter = {"n": 0}

    def _make(days_ago: int, amount, country: str = "Peru", currency: str | None = None, category: str = "VENTA"):
        counter["n"] += 1
        return TransactionRecord(
            record_id=f"rec-{counter['n']}",
            date=TODAY - timedelta(days=days_ago),
            amount=amount,
            country=country,
            category=category,
            currency=currency,
        )

    return _make


@pytest.fixture
def flat_stats() -> HistoricalStats:
    """Steady 100/day inflows and 50/day outflows over 30 days"""
    return HistoricalStats(
        total_inflows=3000.0,
        total_outflows=1500.0,
        avg_daily_inflows=100.0,
        avg_daily_outflows=50.0,
        trend=0.0,
        volatility=0.0,
        window_days=30,
    )


@pytest.fixture
def sheets_client() -> AsyncMock:
    """Spreadsheet client returning no records unless a test sets them"""
    client = AsyncMock()
    client.get_records.return_value = ([], [])
    return client


@pytest.fixture
def weekly_client() -> AsyncMock:
    """Weekly model client with the optional source unavailable"""
    client = AsyncMock()
    client.get_weekly_data.return_value = None
    return client


@pytest.fixture
def app(db: Session, sheets_client: AsyncMock, weekly_client: AsyncMock) -> FastAPI:
    """FastAPI app wired to the test database, fake clients and a fixed clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    app.dependency_overrides[get_sheets_client] = lambda: sheets_client
    app.dependency_overrides[get_weekly_model_client] = lambda: weekly_client
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create FastAPI test client"""
    return TestClient(app)
