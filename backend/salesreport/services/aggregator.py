"""Aggregation engine: statistics, price histogram and category breakdown.

All three are computed in the database over one month window of one store
snapshot, and all three return well-defined zero/empty results for an empty
window.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import case, func, select

from ..models import Transaction
from ..schemas import BarChartBucket, PieChartSlice, StatisticsSchema
from .month_window import MonthWindow
from .store import Snapshot, TransactionStore, window_clauses


# ── Price buckets ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PriceBucket:
    label: str
    upper: Optional[float]   # inclusive; None = open-ended


# Buckets are right-closed: (prev.upper, upper]. Every integer price lands in
# the bucket its label names (100 → "0-100", 101 → "101-200"), and fractional
# prices between labels (100.5) fall into the next bucket rather than a gap.
# Anything at or below 100, negatives included, goes to the first bucket.
PRICE_BUCKETS: list[PriceBucket] = [
    PriceBucket("0-100", 100),
    PriceBucket("101-200", 200),
    PriceBucket("201-300", 300),
    PriceBucket("301-400", 400),
    PriceBucket("401-500", 500),
    PriceBucket("501-600", 600),
    PriceBucket("601-700", 700),
    PriceBucket("701-800", 800),
    PriceBucket("801-900", 900),
    PriceBucket("901-above", None),
]


def bucket_index(price: float) -> int:
    """Index into PRICE_BUCKETS for ``price``; mirrors the SQL expression below."""
    for index, bucket in enumerate(PRICE_BUCKETS):
        if bucket.upper is None or price <= bucket.upper:
            return index
    return len(PRICE_BUCKETS) - 1


def _bucket_expression():
    return case(
        *[
            (Transaction.price <= bucket.upper, index)
            for index, bucket in enumerate(PRICE_BUCKETS)
            if bucket.upper is not None
        ],
        else_=len(PRICE_BUCKETS) - 1,
    )


async def _resolve(store: TransactionStore, snapshot: Optional[Snapshot]) -> Snapshot:
    return snapshot if snapshot is not None else await store.snapshot()


# ── Statistics ────────────────────────────────────────────────────────────────


async def get_statistics(
    store: TransactionStore, window: MonthWindow, snapshot: Optional[Snapshot] = None
) -> StatisticsSchema:
    """Total sale amount plus sold / not-sold counts for the window."""
    snapshot = await _resolve(store, snapshot)
    is_sold = Transaction.sold == True  # noqa: E712
    stmt = select(
        func.coalesce(func.sum(Transaction.price), 0.0),
        func.coalesce(func.sum(case((is_sold, 1), else_=0)), 0),
        func.coalesce(func.sum(case((is_sold, 0), else_=1)), 0),
    ).where(*window_clauses(snapshot, window))

    total, sold, not_sold = await store.fetch_one(stmt, snapshot)
    return StatisticsSchema(
        total_sale_amount=round(float(total), 2),
        total_sold_items=int(sold),
        total_not_sold_items=int(not_sold),
    )


# ── Histogram ─────────────────────────────────────────────────────────────────


async def get_price_histogram(
    store: TransactionStore, window: MonthWindow, snapshot: Optional[Snapshot] = None
) -> list[BarChartBucket]:
    """Record count per price bucket; all ten buckets, in order, zeros included."""
    snapshot = await _resolve(store, snapshot)
    bucket = _bucket_expression().label("bucket")
    stmt = (
        select(bucket, func.count())
        .where(*window_clauses(snapshot, window))
        .group_by(bucket)
    )

    counts = {int(index): int(count) for index, count in await store.fetch_all(stmt, snapshot)}
    return [
        BarChartBucket(label=b.label, count=counts.get(index, 0))
        for index, b in enumerate(PRICE_BUCKETS)
    ]


# ── Category breakdown ────────────────────────────────────────────────────────


async def get_category_breakdown(
    store: TransactionStore, window: MonthWindow, snapshot: Optional[Snapshot] = None
) -> list[PieChartSlice]:
    """Record count per distinct category (exact string match), largest first."""
    snapshot = await _resolve(store, snapshot)
    tx_count = func.count().label("tx_count")
    stmt = (
        select(Transaction.category, tx_count)
        .where(*window_clauses(snapshot, window))
        .group_by(Transaction.category)
        .order_by(tx_count.desc(), Transaction.category.asc())
    )

    return [
        PieChartSlice(category=category, count=int(n))
        for category, n in await store.fetch_all(stmt, snapshot)
    ]
