"""
Filtering and summary statistics over recorded batches.

Everything here is a pure function of a batch list and a HistoryFilter; the
ledger is never touched. Used by the history page (newest first) and the
admin report (chronological).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

import pandas as pd

from tracker.services.batches import Batch
from tracker.utils import local_day, now_local


class DateWindow(str, Enum):
    ALL = "all"
    TODAY = "today"
    LAST_7_DAYS = "week"
    LAST_30_DAYS = "month"

    @property
    def label(self) -> str:
        return _WINDOW_LABELS[self]


_WINDOW_LABELS = {
    DateWindow.ALL: "All Time",
    DateWindow.TODAY: "Today",
    DateWindow.LAST_7_DAYS: "Last 7 Days",
    DateWindow.LAST_30_DAYS: "Last 30 Days",
}

_WINDOW_DAYS = {
    DateWindow.LAST_7_DAYS: 7,
    DateWindow.LAST_30_DAYS: 30,
}


@dataclass(frozen=True)
class HistoryFilter:
    search: str = ""
    sku_id: Optional[int] = None
    window: DateWindow = DateWindow.ALL
    on_date: Optional[date] = None


@dataclass(frozen=True)
class HistorySummary:
    total_batches: int
    total_pieces: int
    unique_skus: int


def _matches_search(b: Batch, needle: str) -> bool:
    return (
        needle in b.sku_code.lower()
        or needle in b.sku_name.lower()
        or needle in b.batch_number.lower()
    )


def _in_window(b: Batch, window: DateWindow, now: datetime) -> bool:
    if window is DateWindow.ALL:
        return True
    if window is DateWindow.TODAY:
        return local_day(b.created) == now.date()
    return b.created >= now - timedelta(days=_WINDOW_DAYS[window])


def filter_batches(
    batches: Iterable[Batch],
    flt: HistoryFilter,
    *,
    now: Optional[datetime] = None,
    newest_first: bool = True,
) -> list[Batch]:
    ref = now_local(now)
    needle = flt.search.strip().lower()
    window = DateWindow(flt.window)

    out = []
    for b in batches:
        if needle and not _matches_search(b, needle):
            continue
        if flt.sku_id is not None and b.sku_id != int(flt.sku_id):
            continue
        if not _in_window(b, window, ref):
            continue
        if flt.on_date is not None and local_day(b.created) != flt.on_date:
            continue
        out.append(b)

    out.sort(key=lambda b: (b.created, b.id), reverse=newest_first)
    return out


def summarize(batches: Iterable[Batch]) -> HistorySummary:
    items = list(batches)
    return HistorySummary(
        total_batches=len(items),
        total_pieces=sum(b.pieces for b in items),
        unique_skus=len({b.sku_id for b in items}),
    )


def batches_to_frame(batches: Iterable[Batch]) -> pd.DataFrame:
    rows = [
        {
            "Batch Number": b.batch_number,
            "SKU Code": b.sku_code,
            "Product Name": b.sku_name,
            "Pieces": b.pieces,
            "Date": b.created_local.strftime("%Y-%m-%d"),
            "Time": b.created_local.strftime("%H:%M:%S"),
            "Recorded By": b.created_by or "",
        }
        for b in batches
    ]
    columns = ["Batch Number", "SKU Code", "Product Name", "Pieces", "Date", "Time", "Recorded By"]
    return pd.DataFrame(rows, columns=columns)
