from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

from tracker.db import q, transaction, x
from tracker.errors import ValidationError
from tracker.utils import clean_text, iso_now

logger = logging.getLogger(__name__)

MIN_CODE_LENGTH = 2


@dataclass(frozen=True)
class SKU:
    id: int
    code: str
    name: str
    description: Optional[str]
    created_at: str
    created_by: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.code} - {self.name}"


def _row_to_sku(r: sqlite3.Row) -> SKU:
    return SKU(
        id=int(r["id"]),
        code=str(r["code"]),
        name=str(r["name"]),
        description=r["description"],
        created_at=str(r["created_at"]),
        created_by=r["created_by"],
    )


def normalize_code(code: Optional[str]) -> str:
    return (clean_text(code) or "").upper()


def validate_sku_input(code: Optional[str], name: Optional[str]) -> dict[str, str]:
    """Field -> message for every problem in the SKU form (empty when valid)."""
    errors: dict[str, str] = {}

    c = clean_text(code)
    if not c:
        errors["code"] = "SKU code is required"
    elif len(c) < MIN_CODE_LENGTH:
        errors["code"] = f"SKU code must be at least {MIN_CODE_LENGTH} characters"

    if not clean_text(name):
        errors["name"] = "SKU name is required"

    return errors


def sku_exists(conn, code: str) -> bool:
    rows = q(conn, "SELECT 1 FROM skus WHERE code = ? COLLATE NOCASE LIMIT 1", (normalize_code(code),))
    return bool(rows)


def get_sku(conn, sku_id: int) -> Optional[SKU]:
    rows = q(conn, "SELECT * FROM skus WHERE id=?", (int(sku_id),))
    return _row_to_sku(rows[0]) if rows else None


def list_skus(conn, *, newest_first: bool = True) -> list[SKU]:
    order = "DESC" if newest_first else "ASC"
    rows = q(conn, f"SELECT * FROM skus ORDER BY created_at {order}, id {order}")
    return [_row_to_sku(r) for r in rows]


def count_skus(conn) -> int:
    return int(q(conn, "SELECT COUNT(*) AS n FROM skus")[0]["n"])


def add_sku(
    conn,
    *,
    code: str,
    name: str,
    description: Optional[str] = None,
    created_by: Optional[str] = None,
) -> SKU:
    """
    Register a new SKU.

    Code and name are trimmed and the code is uppercased. Raises
    ValidationError (registry untouched) for missing/short fields or when a
    SKU with the same code exists in any letter case.
    """
    errors = validate_sku_input(code, name)
    if errors:
        field, message = next(iter(errors.items()))
        logger.info("SKU rejected (%s): %s", field, message)
        raise ValidationError(message, field=field)

    code_n = normalize_code(code)
    name_n = clean_text(name)
    desc_n = clean_text(description)
    created_at = iso_now()

    with transaction(conn):
        if sku_exists(conn, code_n):
            logger.info("SKU rejected (code): %s already exists", code_n)
            raise ValidationError("SKU code already exists", field="code")

        sku_id = x(
            conn,
            """
            INSERT INTO skus (code, name, description, created_at, created_by)
            VALUES (?, ?, ?, ?, ?)
            """,
            (code_n, name_n, desc_n, created_at, clean_text(created_by)),
        )

    logger.info("SKU %s added (id=%s)", code_n, sku_id)
    return SKU(
        id=int(sku_id),
        code=code_n,
        name=str(name_n),
        description=desc_n,
        created_at=created_at,
        created_by=clean_text(created_by),
    )
