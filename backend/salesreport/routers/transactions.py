from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..database import get_store
from ..schemas import TransactionSchema
from ..services.month_window import MonthWindow
from ..services.reporter import search_transactions
from ..services.search import DEFAULT_PAGE, DEFAULT_PER_PAGE, build_search
from ..services.store import TransactionStore
from .reports import month_window

router = APIRouter(prefix="/api", tags=["transactions"])


@router.get("/transactions", response_model=list[TransactionSchema], summary="Search and page one month's transactions")
async def list_transactions(
    response: Response,
    window: MonthWindow = Depends(month_window),
    search: Optional[str] = Query(default=None, description="Substring of title, description or price"),
    page: int = Query(default=DEFAULT_PAGE),
    per_page: int = Query(default=DEFAULT_PER_PAGE, alias="perPage"),
    store: TransactionStore = Depends(get_store),
):
    query = build_search(window, search, page, per_page)
    result = await search_transactions(store, query)
    response.headers["X-Total-Count"] = str(result.total)
    return result.items
