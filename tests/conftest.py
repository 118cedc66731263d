"""Shared fixtures: a fresh sqlite database per test."""
from datetime import datetime

import pytest

from tracker.db import connect, ensure_schema
from tracker.services.batches import Batch
from tracker.utils import iso_utc


@pytest.fixture
def conn(tmp_path):
    """Connection to an empty, migrated database in a temp directory."""
    c = connect(tmp_path / "test.db")
    ensure_schema(c)
    yield c
    c.close()


@pytest.fixture
def noon_today():
    return datetime.now().replace(hour=12, minute=0, second=0, microsecond=0)


@pytest.fixture
def make_batch():
    """Build an in-memory Batch created at a local (naive) datetime."""
    counter = {"id": 0}

    def _make(created, *, sku_id=1, sku_code="ABC", sku_name="Widget", batch_number="001", pieces=10):
        counter["id"] += 1
        return Batch(
            id=counter["id"],
            sku_id=sku_id,
            sku_code=sku_code,
            sku_name=sku_name,
            batch_number=batch_number,
            pieces=pieces,
            production_date=created.date().isoformat(),
            created_at=iso_utc(created),
        )

    return _make
