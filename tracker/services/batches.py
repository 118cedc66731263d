from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Union

from tracker.config import MAX_PIECES_PER_BATCH
from tracker.db import q, transaction, x
from tracker.errors import ValidationError
from tracker.services.skus import get_sku
from tracker.utils import clean_text, iso_utc, local_day, now_local, parse_ts

logger = logging.getLogger(__name__)

BATCH_NUMBER_WIDTH = 3


@dataclass(frozen=True)
class Batch:
    id: int
    sku_id: int
    sku_code: str
    sku_name: str
    batch_number: str
    pieces: int
    production_date: str
    created_at: str
    created_by: Optional[str] = None

    @property
    def created(self) -> datetime:
        return parse_ts(self.created_at)

    @property
    def created_local(self) -> datetime:
        return self.created.astimezone()


_BATCH_SELECT = """
    SELECT b.*, s.code AS sku_code, s.name AS sku_name
    FROM batches b
    JOIN skus s ON s.id = b.sku_id
"""


def _row_to_batch(r: sqlite3.Row) -> Batch:
    return Batch(
        id=int(r["id"]),
        sku_id=int(r["sku_id"]),
        sku_code=str(r["sku_code"]),
        sku_name=str(r["sku_name"]),
        batch_number=str(r["batch_number"]),
        pieces=int(r["pieces"]),
        production_date=str(r["production_date"]),
        created_at=str(r["created_at"]),
        created_by=r["created_by"],
    )


def validate_pieces(value: Union[int, str, None], *, max_pieces: int = MAX_PIECES_PER_BATCH) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Number of pieces is required", field="pieces")
    if isinstance(value, bool):
        raise ValidationError("Please enter a valid positive number", field="pieces")

    if isinstance(value, str):
        s = value.strip()
        if not s.isdecimal():
            raise ValidationError("Please enter a valid positive number", field="pieces")
        try:
            pieces = int(s)
        except ValueError:
            raise ValidationError("Please enter a valid positive number", field="pieces") from None
    elif isinstance(value, int):
        pieces = value
    elif isinstance(value, float) and value.is_integer():
        pieces = int(value)
    else:
        raise ValidationError("Please enter a valid positive number", field="pieces")

    if pieces <= 0:
        raise ValidationError("Please enter a valid positive number", field="pieces")
    if pieces > max_pieces:
        raise ValidationError(f"Number of pieces cannot exceed {max_pieces:,} per batch", field="pieces")
    return pieces


def format_batch_number(n: int) -> str:
    # 9 -> "009"; 1000 stays "1000"
    return f"{int(n):0{BATCH_NUMBER_WIDTH}d}"


def next_batch_number(existing: Iterable[str]) -> str:
    """max + 1 over the existing numbers of the scope; "001" when there are none."""
    numbers = [int(n) for n in existing]
    if not numbers:
        return format_batch_number(1)
    return format_batch_number(max(numbers) + 1)


def _numbers_for_day(conn, sku_id: int, production_date: str) -> list[str]:
    rows = q(
        conn,
        "SELECT batch_number FROM batches WHERE sku_id=? AND production_date=?",
        (int(sku_id), production_date),
    )
    return [str(r["batch_number"]) for r in rows]


def peek_next_batch_number(conn, sku_id: int, *, now: Optional[datetime] = None) -> str:
    """Preview only. The number is assigned for real inside add_batch()."""
    day = local_day(now_local(now)).isoformat()
    return next_batch_number(_numbers_for_day(conn, sku_id, day))


def add_batch(
    conn,
    *,
    sku_id: int,
    pieces: Union[int, str],
    created_by: Optional[str] = None,
    now: Optional[datetime] = None,
    max_pieces: int = MAX_PIECES_PER_BATCH,
) -> Batch:
    """
    Record a production batch for a SKU.

    The batch number is scoped per SKU per local calendar day: "001" for the
    first batch of the day, otherwise the day's highest number plus one.
    Numbering and insert run in one serialized transaction.
    """
    try:
        pieces_n = validate_pieces(pieces, max_pieces=max_pieces)
    except ValidationError as e:
        logger.info("Batch rejected (pieces): %s", e)
        raise

    sku = get_sku(conn, sku_id) if sku_id is not None else None
    if sku is None:
        logger.info("Batch rejected (sku_id): %r not found", sku_id)
        raise ValidationError("Please select a valid SKU", field="sku_id")

    ts = now_local(now)
    production_date = local_day(ts).isoformat()
    created_at = iso_utc(ts)
    operator = clean_text(created_by)

    with transaction(conn):
        batch_number = next_batch_number(_numbers_for_day(conn, sku.id, production_date))
        batch_id = x(
            conn,
            """
            INSERT INTO batches (sku_id, batch_number, pieces, production_date, created_at, created_by)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (sku.id, batch_number, pieces_n, production_date, created_at, operator),
        )

    logger.info("Batch %s for %s added (%s pcs)", batch_number, sku.code, pieces_n)
    return Batch(
        id=int(batch_id),
        sku_id=sku.id,
        sku_code=sku.code,
        sku_name=sku.name,
        batch_number=batch_number,
        pieces=pieces_n,
        production_date=production_date,
        created_at=created_at,
        created_by=operator,
    )


def list_batches(conn, *, sku_id: Optional[int] = None) -> list[Batch]:
    if sku_id is None:
        rows = q(conn, _BATCH_SELECT + " ORDER BY b.created_at DESC, b.id DESC")
    else:
        rows = q(conn, _BATCH_SELECT + " WHERE b.sku_id=? ORDER BY b.created_at DESC, b.id DESC", (int(sku_id),))
    return [_row_to_batch(r) for r in rows]


def get_batch(conn, batch_id: int) -> Optional[Batch]:
    rows = q(conn, _BATCH_SELECT + " WHERE b.id=?", (int(batch_id),))
    return _row_to_batch(rows[0]) if rows else None


def production_totals(batches: Iterable[Batch], *, now: Optional[datetime] = None) -> dict:
    today = local_day(now_local(now))
    total = 0
    today_total = 0
    for b in batches:
        total += b.pieces
        if local_day(b.created) == today:
            today_total += b.pieces
    return {"total_pieces": total, "today_pieces": today_total}
