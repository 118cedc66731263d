"""
Tests for the batch ledger: validation and per-SKU, per-day numbering.
"""
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from tracker.db import q, x
from tracker.errors import ValidationError
from tracker.services.batches import (
    add_batch,
    format_batch_number,
    get_batch,
    list_batches,
    next_batch_number,
    peek_next_batch_number,
    production_totals,
    validate_pieces,
)
from tracker.services.skus import add_sku
from tracker.utils import iso_utc


@pytest.fixture
def sku(conn):
    return add_sku(conn, code="ABC", name="Widget")


def _count(conn):
    return int(q(conn, "SELECT COUNT(*) AS n FROM batches")[0]["n"])


def _insert_raw(conn, sku_id, number, when):
    x(
        conn,
        """
        INSERT INTO batches (sku_id, batch_number, pieces, production_date, created_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (sku_id, number, 10, when.date().isoformat(), iso_utc(when)),
    )


class TestNumbering:
    @pytest.mark.parametrize(
        "n,expected",
        [(1, "001"), (9, "009"), (10, "010"), (999, "999"), (1000, "1000"), (12345, "12345")],
    )
    def test_format(self, n, expected):
        assert format_batch_number(n) == expected

    def test_next_number_is_max_plus_one(self):
        assert next_batch_number([]) == "001"
        assert next_batch_number(["001", "002", "005"]) == "006"
        assert next_batch_number(["009"]) == "010"
        assert next_batch_number(["999"]) == "1000"

    def test_first_batch_of_day_is_001(self, conn, sku):
        batch = add_batch(conn, sku_id=sku.id, pieces=50)
        assert batch.batch_number == "001"
        assert batch.sku_code == "ABC"
        assert batch.sku_name == "Widget"

    def test_sequence_within_day(self, conn, sku, noon_today):
        numbers = [add_batch(conn, sku_id=sku.id, pieces=5, now=noon_today).batch_number for _ in range(3)]
        assert numbers == ["001", "002", "003"]

    def test_gap_uses_max_not_count(self, conn, sku, noon_today):
        for n in ("001", "002", "005"):
            _insert_raw(conn, sku.id, n, noon_today)

        batch = add_batch(conn, sku_id=sku.id, pieces=5, now=noon_today)
        assert batch.batch_number == "006"

    def test_resets_on_new_day(self, conn, sku, noon_today):
        yesterday = noon_today - timedelta(days=1)
        for n in ("001", "002", "003", "004"):
            _insert_raw(conn, sku.id, n, yesterday)

        batch = add_batch(conn, sku_id=sku.id, pieces=5, now=noon_today)
        assert batch.batch_number == "001"

    def test_scoped_per_sku(self, conn, sku, noon_today):
        other = add_sku(conn, code="XYZ", name="Gadget")
        add_batch(conn, sku_id=sku.id, pieces=5, now=noon_today)
        add_batch(conn, sku_id=sku.id, pieces=5, now=noon_today)

        assert add_batch(conn, sku_id=other.id, pieces=5, now=noon_today).batch_number == "001"

    def test_peek_does_not_reserve(self, conn, sku, noon_today):
        assert peek_next_batch_number(conn, sku.id, now=noon_today) == "001"
        assert peek_next_batch_number(conn, sku.id, now=noon_today) == "001"
        add_batch(conn, sku_id=sku.id, pieces=5, now=noon_today)
        assert peek_next_batch_number(conn, sku.id, now=noon_today) == "002"

    def test_duplicate_number_blocked_by_schema(self, conn, sku, noon_today):
        _insert_raw(conn, sku.id, "001", noon_today)
        with pytest.raises(sqlite3.IntegrityError):
            _insert_raw(conn, sku.id, "001", noon_today)


class TestValidation:
    @pytest.mark.parametrize("pieces", [0, -5, 10001, "", "  ", "abc", "1.5", "-3", None, 2.5, True, "²", "5²", "9" * 5000])
    def test_invalid_pieces_rejected_without_mutation(self, conn, sku, pieces):
        with pytest.raises(ValidationError) as exc:
            add_batch(conn, sku_id=sku.id, pieces=pieces)

        assert exc.value.field == "pieces"
        assert _count(conn) == 0

    def test_maximum_accepted(self, conn, sku):
        batch = add_batch(conn, sku_id=sku.id, pieces=10000)
        assert batch.pieces == 10000
        assert _count(conn) == 1

    def test_numeric_string_accepted(self):
        assert validate_pieces(" 250 ") == 250

    def test_custom_maximum(self):
        with pytest.raises(ValidationError):
            validate_pieces(51, max_pieces=50)

    def test_unknown_sku_rejected(self, conn):
        with pytest.raises(ValidationError) as exc:
            add_batch(conn, sku_id=42, pieces=10)

        assert exc.value.field == "sku_id"
        assert _count(conn) == 0


class TestQueries:
    def test_list_newest_first_and_get(self, conn, sku, noon_today):
        first = add_batch(conn, sku_id=sku.id, pieces=5, now=noon_today - timedelta(hours=2), created_by="Sam")
        second = add_batch(conn, sku_id=sku.id, pieces=7, now=noon_today)

        assert [b.id for b in list_batches(conn)] == [second.id, first.id]
        assert [b.id for b in list_batches(conn, sku_id=sku.id)] == [second.id, first.id]
        assert get_batch(conn, first.id) == first
        assert get_batch(conn, first.id).created_by == "Sam"

    def test_production_totals(self, conn, sku, noon_today):
        add_batch(conn, sku_id=sku.id, pieces=50, now=noon_today)
        add_batch(conn, sku_id=sku.id, pieces=30, now=noon_today - timedelta(days=2))

        totals = production_totals(list_batches(conn), now=noon_today)
        assert totals == {"total_pieces": 80, "today_pieces": 50}


def test_concurrent_adds_get_distinct_numbers(conn, sku, noon_today):
    def _add(_):
        return add_batch(conn, sku_id=sku.id, pieces=1, now=noon_today).batch_number

    with ThreadPoolExecutor(max_workers=8) as pool:
        numbers = list(pool.map(_add, range(24)))

    assert sorted(numbers) == [format_batch_number(i) for i in range(1, 25)]
