import asyncio
import copy

import pytest

from salesreport.database import create_engine_for, create_tables, make_session_factory
from salesreport.schemas import TransactionSchema
from salesreport.services.store import TransactionStore

SEED_URL = "https://seed.test/product_transaction.json"

# Ids 1-5, 7 and 9 fall in March 2021; 9 is 2021-04-01 local time but
# 2021-03-31 in UTC. 6 and 8 are April, 10 is March of another year.
SAMPLE_ROWS = [
    {"id": 1, "title": "Gaming Laptop", "description": "fast", "price": 1005,
     "category": "electronics", "sold": True, "dateOfSale": "2021-03-02T10:00:00Z"},
    {"id": 2, "title": "Laptop Bag", "description": "fits 15 inch", "price": 100,
     "category": "accessories", "sold": False, "dateOfSale": "2021-03-05T08:30:00Z"},
    {"id": 3, "title": "Cotton Shirt", "description": "casual wear", "price": 99,
     "category": "clothing", "sold": True, "dateOfSale": "2021-03-01T00:00:00Z"},
    {"id": 4, "title": "Wireless Mouse", "description": "fully wireless, 50% off", "price": 25.5,
     "category": "electronics", "sold": False, "dateOfSale": "2021-03-15T12:00:00Z"},
    {"id": 5, "title": "Necklace", "description": "gold plated", "price": 101,
     "category": "jewelery", "sold": True, "dateOfSale": "2021-03-20T18:45:00Z"},
    {"id": 6, "title": "Laptop Stand", "description": "aluminium", "price": 999,
     "category": "accessories", "sold": True, "dateOfSale": "2021-04-02T09:00:00Z"},
    {"id": 7, "title": "Desk Lamp", "description": "LED, warm light", "price": 200,
     "category": "home", "sold": False, "dateOfSale": "2021-03-31T23:30:00Z"},
    {"id": 8, "title": "Desk Chair", "description": "ergonomic", "price": 300,
     "category": "home", "sold": True, "dateOfSale": "2021-04-01T00:00:00Z"},
    {"id": 9, "title": "Phone Case", "description": "slim fit", "price": 12.5,
     "category": "accessories", "sold": True, "dateOfSale": "2021-04-01T02:00:00+05:30"},
    {"id": 10, "title": "Old Stock", "description": "clearance", "price": 50,
     "category": "clothing", "sold": False, "dateOfSale": "2022-03-10T10:00:00Z"},
]

MARCH_IDS = ["1", "2", "3", "4", "5", "7", "9"]


def make_records(rows) -> list[TransactionSchema]:
    return [TransactionSchema.model_validate(row) for row in rows]


def make_record(tx_id, price, *, sold=True, category="A", month=3, title=None, description=""):
    return TransactionSchema.model_validate({
        "id": tx_id,
        "title": title or f"Item {tx_id}",
        "description": description,
        "price": price,
        "category": category,
        "sold": sold,
        "dateOfSale": f"2021-{month:02d}-10T12:00:00Z",
    })


@pytest.fixture
def sample_rows():
    return copy.deepcopy(SAMPLE_ROWS)


@pytest.fixture
def sample_records():
    return make_records(SAMPLE_ROWS)


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'sales.db'}"


@pytest.fixture
def run_with_store(db_url):
    """Run ``fn(store)`` against the test database in a fresh event loop.

    ``records`` (if given) are seeded first. The schema persists across calls
    within one test, so successive calls see each other's writes.
    """

    def _run(fn, records=None, create_schema=True):
        async def _main():
            engine = create_engine_for(db_url)
            try:
                if create_schema:
                    await create_tables(engine)
                store = TransactionStore(make_session_factory(engine))
                if records is not None:
                    await store.replace_all(records, SEED_URL)
                return await fn(store)
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run
