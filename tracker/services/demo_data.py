from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Optional

from tracker.db import ensure_schema, q, transaction, x
from tracker.services.batches import add_batch
from tracker.services.skus import add_sku, list_skus, sku_exists

DEFAULT_SKUS = [
    ("BLT-M8", "Hex Bolt M8", "Zinc plated, 40mm"),
    ("NUT-M8", "Hex Nut M8", None),
    ("WSH-08", "Flat Washer 8mm", "Stainless steel"),
    ("BRK-L2", "L-Bracket 2in", None),
]


def upsert_reference_data(conn, *, created_by: Optional[str] = "demo") -> None:
    ensure_schema(conn)
    for code, name, desc in DEFAULT_SKUS:
        if not sku_exists(conn, code):
            add_sku(conn, code=code, name=name, description=desc, created_by=created_by)


def wipe_all(conn) -> None:
    # Keep schema, delete data (order matters for FKs).
    with transaction(conn):
        for t in ["batches", "skus"]:
            x(conn, f"DELETE FROM {t};")


def load_demo_data(conn, *, seed: int = 7, days: int = 10, now: Optional[datetime] = None) -> int:
    """Create demo SKUs plus a few batches per SKU per day. Returns batches created."""
    rng = random.Random(seed)
    upsert_reference_data(conn)

    base = now or datetime.now()
    created = 0
    for offset in range(days - 1, -1, -1):
        day = base - timedelta(days=offset)
        for sku in list_skus(conn, newest_first=False):
            for shift in range(rng.randint(0, 3)):
                ts = day.replace(hour=6 + shift * 4, minute=rng.randint(0, 59), second=0, microsecond=0)
                if ts > base:
                    continue
                add_batch(conn, sku_id=sku.id, pieces=rng.randint(50, 2500), created_by="demo", now=ts)
                created += 1
    return created


def table_counts(conn) -> list[dict]:
    rows = q(
        conn,
        """
        SELECT 'skus' AS table_name, COUNT(*) AS n FROM skus
        UNION ALL SELECT 'batches', COUNT(*) FROM batches
        """,
    )
    return [dict(r) for r in rows]
