"""Shared fixtures for the wealth tracker tests."""
from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from wealth_tracker.models import Asset, Lot, PortfolioSnapshot
from wealth_tracker.services.transactions import TransactionRecorder, default_snapshot

T0 = datetime(2023, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


def days_after(days: float) -> datetime:
    return T0 + timedelta(days=days)


@pytest.fixture
def recorder():
    """Recorder with predictable transaction ids"""
    ids = count(1)
    return TransactionRecorder(id_factory=lambda: f"tx-{next(ids)}")


@pytest.fixture
def snapshot():
    """Default assets with VGS priced at 10 and A200 at 50"""
    base = default_snapshot()
    assets = tuple(
        Asset(
            ticker=a.ticker,
            name=a.name,
            target_weight=a.target_weight,
            price={"VGS": 10.0, "A200": 50.0}.get(a.ticker, 0.0),
        )
        for a in base.assets
    )
    return PortfolioSnapshot(assets=assets)


@pytest.fixture
def two_lots():
    return [
        Lot(quantity=2, unit_price=100.0, acquisition_date=datetime(2020, 1, 1, tzinfo=timezone.utc)),
        Lot(quantity=3, unit_price=200.0, acquisition_date=datetime(2021, 1, 1, tzinfo=timezone.utc)),
    ]
