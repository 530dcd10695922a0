from __future__ import annotations

from datetime import datetime, timezone
from typing import List

import pytest
from fastapi.testclient import TestClient

from bookstock.catalog.cache import SnapshotCache
from bookstock.catalog.router import get_snapshot_cache
from bookstock.catalog.schemas import Record, Snapshot

HEADER = "순번,ISBN,제목,저자,출판사,정가,재고"
FETCHED_AT = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def make_record(i: int, **overrides) -> Record:
    values = {
        "id": str(i),
        "isbn": f"97889{i:08d}",
        "title": f"Title {i}",
        "author": f"Author {i}",
        "publisher": "Minumsa",
        "price": "15,000",
        "stock": "3",
    }
    values.update(overrides)
    return Record(**values)


def make_snapshot(records: List[Record], fetched_at: datetime = FETCHED_AT) -> Snapshot:
    return Snapshot(records=tuple(records), fetched_at=fetched_at)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingLoader:
    """Loader returning queued snapshots (or raising queued errors) in order."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls = 0

    def __call__(self) -> Snapshot:
        self.calls += 1
        result = self.results[0] if len(self.results) == 1 else self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def inventory() -> List[Record]:
    return [
        make_record(1, title="채식주의자", author="한강", publisher="창비", stock="12"),
        make_record(2, title="Pachinko", author="Lee, Min Jin", publisher="Grand Central", stock="0"),
        make_record(3, title="소년이 온다", author="한강", publisher="창비", stock="품절"),
        make_record(4, title="The Vegetarian", author="Han Kang", publisher="Hogarth", stock="1,204"),
        make_record(5, title="Please Look After Mom", author="Kim, J.", publisher="Knopf", stock="5"),
    ]


@pytest.fixture
def api(inventory, clock):
    """TestClient whose cache is fed from the in-memory inventory."""
    from bookstock.main import app

    loader = CountingLoader(make_snapshot(inventory))
    cache = SnapshotCache(loader, clock=clock, spawn=lambda fn, name: fn())
    app.dependency_overrides[get_snapshot_cache] = lambda: cache
    with TestClient(app) as client:
        client.loader = loader
        client.cache = cache
        yield client
    app.dependency_overrides.clear()
