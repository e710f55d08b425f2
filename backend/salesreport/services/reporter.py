"""Reporting service: paginated search and the combined monthly report."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..models import Transaction
from ..schemas import CombinedReport, TransactionSchema
from .aggregator import get_category_breakdown, get_price_histogram, get_statistics
from .month_window import MonthWindow
from .search import SearchQuery
from .store import Snapshot, TransactionStore

logger = logging.getLogger(__name__)


@dataclass
class TransactionPage:
    items: list[TransactionSchema]
    total: int
    page: int
    per_page: int


def _tx_to_schema(t: Transaction) -> TransactionSchema:
    return TransactionSchema(
        id=t.id,
        title=t.title,
        description=t.description,
        price=t.price,
        category=t.category,
        sold=t.sold,
        date_of_sale=t.date_of_sale,
        image=t.image,
    )


# ── Search ────────────────────────────────────────────────────────────────────


async def search_transactions(
    store: TransactionStore, query: SearchQuery, snapshot: Optional[Snapshot] = None
) -> TransactionPage:
    """One page of window records matching the search term, in seed order."""
    if snapshot is None:
        snapshot = await store.snapshot()
    predicate = query.predicate

    rows, total = await asyncio.gather(
        store.scan(snapshot, query.window, predicate, offset=query.offset, limit=query.per_page),
        store.count(snapshot, query.window, predicate),
    )
    return TransactionPage(
        items=[_tx_to_schema(t) for t in rows],
        total=total,
        page=query.page,
        per_page=query.per_page,
    )


async def list_window_transactions(
    store: TransactionStore, window: MonthWindow, snapshot: Optional[Snapshot] = None
) -> list[TransactionSchema]:
    if snapshot is None:
        snapshot = await store.snapshot()
    return [_tx_to_schema(t) for t in await store.scan(snapshot, window)]


# ── Combined report ───────────────────────────────────────────────────────────


async def get_combined_report(store: TransactionStore, window: MonthWindow) -> CombinedReport:
    """Raw window records plus all three aggregations, from one snapshot.

    The four parts run concurrently on separate sessions; if any of them
    fails the whole report fails.
    """
    snapshot = await store.snapshot()
    logger.debug("Combined report for %04d-%02d, generation %s", window.year, window.month, snapshot.generation)

    tasks = [
        asyncio.ensure_future(part)
        for part in (
            list_window_transactions(store, window, snapshot),
            get_statistics(store, window, snapshot),
            get_price_histogram(store, window, snapshot),
            get_category_breakdown(store, window, snapshot),
        )
    ]
    try:
        transactions, statistics, bar_chart, pie_chart = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return CombinedReport(
        transactions=transactions,
        statistics=statistics,
        bar_chart=bar_chart,
        pie_chart=pie_chart,
    )
