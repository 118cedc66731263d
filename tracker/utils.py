from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def now_local(now: Optional[datetime] = None) -> datetime:
    # Naive datetimes are taken as local time.
    return (now or datetime.now()).astimezone()


def iso_utc(ts: datetime) -> str:
    # Use UTC ISO timestamps for consistency.
    return ts.astimezone(timezone.utc).replace(microsecond=0).isoformat()


def iso_now() -> str:
    return iso_utc(datetime.now(timezone.utc))


def parse_ts(value: str) -> datetime:
    ts = datetime.fromisoformat(str(value))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def local_day(ts: datetime) -> date:
    return ts.astimezone().date()


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s if s else None
