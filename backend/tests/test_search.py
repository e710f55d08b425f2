import pytest

from conftest import MARCH_IDS, make_record
from salesreport.errors import InvalidArgument
from salesreport.services.month_window import resolve_month
from salesreport.services.reporter import search_transactions
from salesreport.services.search import build_search, escape_like, price_text_matches, search_predicate

MARCH = resolve_month(3, 2021)


def _ids(run_with_store, records, **kwargs):
    query = build_search(MARCH, **kwargs)

    async def _search(store):
        page = await search_transactions(store, query)
        return [t.id for t in page.items]

    return run_with_store(_search, records)


class TestBuildSearch:
    def test_defaults(self):
        query = build_search(MARCH)
        assert query.page == 1
        assert query.per_page == 10
        assert query.offset == 0
        assert query.predicate is None

    def test_offset(self):
        assert build_search(MARCH, page=3, per_page=20).offset == 40

    @pytest.mark.parametrize("page,per_page", [(0, 10), (-1, 10), (1, 0), (1, -5), (True, 10)])
    def test_non_positive_paging_raises(self, page, per_page):
        with pytest.raises(InvalidArgument):
            build_search(MARCH, page=page, per_page=per_page)

    def test_blank_search_has_no_predicate(self):
        assert search_predicate("   ") is None
        assert build_search(MARCH, search="  ").search == ""

    def test_search_term_not_trimmed(self):
        assert build_search(MARCH, search=" bag").search == " bag"


class TestEscapeLike:
    def test_wildcards_escaped(self):
        assert escape_like("50%_off") == "50\\%\\_off"

    def test_backslash_escaped(self):
        assert escape_like("a\\b") == "a\\\\b"

    def test_plain_text_untouched(self):
        assert escape_like("laptop") == "laptop"


class TestSearchAgainstStore:
    def test_no_search_returns_whole_window_in_seed_order(self, run_with_store, sample_records):
        assert _ids(run_with_store, sample_records, per_page=50) == MARCH_IDS

    def test_case_insensitive(self, run_with_store, sample_records):
        upper = _ids(run_with_store, sample_records, search="LAPTOP")
        lower = _ids(run_with_store, sample_records, search="laptop")
        assert upper == lower == ["1", "2"]

    def test_matches_description(self, run_with_store, sample_records):
        assert _ids(run_with_store, sample_records, search="Plated") == ["5"]

    def test_partial_numeric_matches_price_text(self, run_with_store, sample_records):
        # 1005, 100 and 101 contain "10"; 99, 25.5, 200 and 12.5 do not.
        assert _ids(run_with_store, sample_records, search="10") == ["1", "2", "5"]

    def test_fractional_price(self, run_with_store, sample_records):
        assert _ids(run_with_store, sample_records, search="25.5") == ["4"]

    def test_wildcard_is_literal(self, run_with_store, sample_records):
        assert _ids(run_with_store, sample_records, search="%") == ["4"]
        assert _ids(run_with_store, sample_records, search="_") == []

    def test_out_of_window_records_excluded(self, run_with_store, sample_records):
        # "Laptop Stand" is April; "Old Stock" is March of another year.
        assert "6" not in _ids(run_with_store, sample_records, search="laptop")
        assert _ids(run_with_store, sample_records, search="clearance") == []

    def test_price_predicate_alone(self, run_with_store, sample_records):
        async def _scan(store):
            snapshot = await store.snapshot()
            return [t.id for t in await store.scan(snapshot, MARCH, price_text_matches("100"))]

        assert run_with_store(_scan, sample_records) == ["1", "2"]


    def test_case_insensitive_beyond_ascii(self, run_with_store):
        records = [
            make_record(1, 10, title="Café Crème"),
            make_record(2, 20, title="Straße Map"),
            make_record(3, 30, title="ΣΟΦΙΑ Poster"),
        ]
        assert _ids(run_with_store, records, search="CAFÉ") == ["1"]
        assert _ids(run_with_store, records, search="crème") == ["1"]
        assert _ids(run_with_store, records, search="STRASSE") == ["2"]
        assert _ids(run_with_store, records, search="σοφια") == ["3"]

    def test_term_is_searched_as_given(self, run_with_store):
        records = [
            make_record(1, 10, title="Handbag"),
            make_record(2, 20, title="Canvas bag"),
        ]
        assert _ids(run_with_store, records, search=" bag") == ["2"]
        assert _ids(run_with_store, records, search="bag") == ["1", "2"]


class TestPagination:
    def test_pages_concatenate_to_full_result(self, run_with_store, sample_records):
        async def _pages(store):
            pages = []
            for page in range(1, 5):
                result = await search_transactions(store, build_search(MARCH, page=page, per_page=3))
                pages.append([t.id for t in result.items])
            return pages

        pages = run_with_store(_pages, sample_records)
        assert pages == [["1", "2", "3"], ["4", "5", "7"], ["9"], []]
        flat = [tx_id for page in pages for tx_id in page]
        assert flat == MARCH_IDS
        assert len(set(flat)) == len(flat)

    def test_total_counts_all_matches(self, run_with_store, sample_records):
        async def _page(store):
            return await search_transactions(store, build_search(MARCH, search="10", per_page=1))

        result = run_with_store(_page, sample_records)
        assert result.total == 3
        assert [t.id for t in result.items] == ["1"]

    def test_page_past_end_is_empty(self, run_with_store, sample_records):
        assert _ids(run_with_store, sample_records, page=10, per_page=5) == []
