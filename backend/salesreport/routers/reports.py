"""Reports router — monthly statistics, price histogram, category breakdown, combined view."""

from fastapi import APIRouter, Depends, Query

from ..config import Settings
from ..database import get_settings, get_store
from ..schemas import BarChartBucket, CombinedReport, PieChartSlice, StatisticsSchema
from ..services.aggregator import get_category_breakdown, get_price_histogram, get_statistics
from ..services.month_window import MonthWindow, resolve_month
from ..services.reporter import get_combined_report
from ..services.store import TransactionStore

router = APIRouter(prefix="/api", tags=["reports"])


def month_window(
    month: str = Query(..., description="Month 1-12 or month name (e.g. 3, 03, March)"),
    settings: Settings = Depends(get_settings),
) -> MonthWindow:
    return resolve_month(month, settings.reference_year)


@router.get("/statistics", response_model=StatisticsSchema, summary="Sale totals for one month")
async def statistics(
    window: MonthWindow = Depends(month_window),
    store: TransactionStore = Depends(get_store),
):
    return await get_statistics(store, window)


@router.get("/bar-chart", response_model=list[BarChartBucket], summary="Price-range histogram for one month")
async def bar_chart(
    window: MonthWindow = Depends(month_window),
    store: TransactionStore = Depends(get_store),
):
    return await get_price_histogram(store, window)


@router.get("/pie-chart", response_model=list[PieChartSlice], summary="Item count per category for one month")
async def pie_chart(
    window: MonthWindow = Depends(month_window),
    store: TransactionStore = Depends(get_store),
):
    return await get_category_breakdown(store, window)


@router.get("/combined", response_model=CombinedReport, summary="Transactions plus all three aggregations")
async def combined(
    window: MonthWindow = Depends(month_window),
    store: TransactionStore = Depends(get_store),
):
    return await get_combined_report(store, window)
