"""Search filter builder: free-text term + month window + pagination."""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Text, cast, func, or_

from ..database import CASEFOLD_FUNCTION
from ..errors import InvalidArgument
from ..models import Transaction
from .month_window import MonthWindow

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10

_LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches as a literal substring."""
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def _contains(column, term: str):
    folded = getattr(func, CASEFOLD_FUNCTION)(column)
    return folded.like(f"%{escape_like(term.casefold())}%", escape=_LIKE_ESCAPE)


def price_text_matches(term: str):
    """Case-insensitive substring match on the price rendered as text.

    "10" matches 100 and 1005; the database's REAL→TEXT rendering keeps a
    trailing ".0" on whole numbers, so "100.0" matches 100 as well.
    """
    return _contains(cast(Transaction.price, Text), term)


def search_predicate(term: Optional[str]):
    """Title OR description OR price-text match; None when the term is blank."""
    if term is None or not term.strip():
        return None
    return or_(
        _contains(Transaction.title, term),
        _contains(Transaction.description, term),
        price_text_matches(term),
    )


def _positive_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise InvalidArgument(f"{name} must be >= 1, got {value}")
    return value


@dataclass(frozen=True)
class SearchQuery:
    window: MonthWindow
    search: str
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def predicate(self):
        return search_predicate(self.search)


def build_search(
    window: MonthWindow,
    search: Optional[str] = None,
    page: int = DEFAULT_PAGE,
    per_page: int = DEFAULT_PER_PAGE,
) -> SearchQuery:
    return SearchQuery(
        window=window,
        search="" if search is None or not search.strip() else search,
        page=_positive_int(page, "page"),
        per_page=_positive_int(per_page, "perPage"),
    )
