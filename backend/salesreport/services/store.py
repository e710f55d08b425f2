"""Transaction store: snapshot-pinned range scans, counts and wholesale replace.

Every seed is written as a new *generation* of rows; the ``active_generation``
setting points at the live one. Readers resolve a ``Snapshot`` once and filter
on its generation, so a reseed that commits mid-request can never mix old and
new rows into one answer. A reseed prunes every generation older than the
one it replaces; a read whose pinned generation is gone by the time it
finishes fails with StoreFailure instead of returning an empty answer.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timezone
from typing import Any, AsyncIterator, Optional

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..errors import StoreFailure
from ..models import SeedRun, Setting, Transaction
from ..schemas import TransactionSchema
from .month_window import MonthWindow

logger = logging.getLogger(__name__)

ACTIVE_GENERATION_KEY = "active_generation"


@dataclass(frozen=True)
class Snapshot:
    generation: Optional[int]

    @property
    def is_empty(self) -> bool:
        return self.generation is None


def window_clauses(snapshot: Snapshot, window: MonthWindow) -> list:
    """WHERE clauses selecting one snapshot's rows inside a month window."""
    return [
        Transaction.generation == snapshot.generation,
        Transaction.date_of_sale >= window.start,
        Transaction.date_of_sale < window.end,
    ]


def _to_row(generation: int, position: int, record: TransactionSchema) -> dict:
    return {
        "generation": generation,
        "id": record.id,
        "position": position,
        "title": record.title,
        "description": record.description,
        "price": record.price,
        "category": record.category,
        "sold": record.sold,
        "date_of_sale": record.date_of_sale.astimezone(timezone.utc).replace(tzinfo=None),
        "image": record.image,
    }


class TransactionStore:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session; any SQLAlchemy error inside surfaces as StoreFailure."""
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            cause = getattr(exc, "orig", None) or exc
            raise StoreFailure(f"Store operation failed: {cause}") from exc

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def snapshot(self) -> Snapshot:
        async with self.session() as session:
            return Snapshot(await _active_generation(session))

    async def dataset_info(self) -> Optional[SeedRun]:
        """The seed run currently served, or None before the first seed."""
        async with self.session() as session:
            generation = await _active_generation(session)
            if generation is None:
                return None
            return await session.get(SeedRun, generation)

    async def scan(
        self,
        snapshot: Snapshot,
        window: MonthWindow,
        where: Optional[Any] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        stmt = (
            select(Transaction)
            .where(*window_clauses(snapshot, window))
            .order_by(Transaction.position, Transaction.id)
        )
        if where is not None:
            stmt = stmt.where(where)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self.session() as session:
            rows = list((await session.scalars(stmt)).all())
            await _ensure_retained(session, snapshot)
            return rows

    async def count(self, snapshot: Snapshot, window: MonthWindow, where: Optional[Any] = None) -> int:
        stmt = select(func.count()).select_from(Transaction).where(*window_clauses(snapshot, window))
        if where is not None:
            stmt = stmt.where(where)
        async with self.session() as session:
            total = (await session.scalar(stmt)) or 0
            await _ensure_retained(session, snapshot)
            return total

    async def fetch_all(self, stmt, snapshot: Optional[Snapshot] = None) -> list:
        """Run an arbitrary (aggregate) select and return its rows.

        With ``snapshot`` given, fails if that generation was pruned meanwhile.
        """
        async with self.session() as session:
            rows = list((await session.execute(stmt)).all())
            if snapshot is not None:
                await _ensure_retained(session, snapshot)
            return rows

    async def fetch_one(self, stmt, snapshot: Optional[Snapshot] = None):
        async with self.session() as session:
            row = (await session.execute(stmt)).one()
            if snapshot is not None:
                await _ensure_retained(session, snapshot)
            return row

    # ── Writes ────────────────────────────────────────────────────────────────

    async def replace_all(self, records: list[TransactionSchema], source_url: str) -> SeedRun:
        """Swap in ``records`` as the whole dataset, in one database transaction.

        The generation being replaced is kept until the next seed so requests
        already pinned to it can finish; anything older is deleted.
        """
        async with self.session() as session:
            async with session.begin():
                previous = await _active_generation(session)

                run = SeedRun(source_url=source_url, record_count=len(records))
                session.add(run)
                await session.flush()

                if records:
                    await session.execute(
                        insert(Transaction),
                        [_to_row(run.id, position, record) for position, record in enumerate(records)],
                    )

                setting = await session.get(Setting, ACTIVE_GENERATION_KEY)
                if setting:
                    setting.value = str(run.id)
                else:
                    session.add(Setting(key=ACTIVE_GENERATION_KEY, value=str(run.id)))

                keep = [run.id] if previous is None else [run.id, previous]
                await session.execute(
                    delete(Transaction)
                    .where(Transaction.generation.not_in(keep))
                    .execution_options(synchronize_session=False)
                )
                await session.execute(
                    delete(SeedRun)
                    .where(SeedRun.id.not_in(keep))
                    .execution_options(synchronize_session=False)
                )

        logger.info(
            "Dataset replaced: generation %s (%d records, previous=%s)",
            run.id, len(records), previous,
        )
        return run


async def _active_generation(session: AsyncSession) -> Optional[int]:
    setting = await session.get(Setting, ACTIVE_GENERATION_KEY)
    if setting is None or not setting.value:
        return None
    return int(setting.value)


async def _ensure_retained(session: AsyncSession, snapshot: Snapshot) -> None:
    # Called after the read: generation ids only grow and a pruned one never
    # comes back, so a seed run still present means the rows were there too.
    if snapshot.is_empty:
        return
    if await session.get(SeedRun, snapshot.generation) is None:
        raise StoreFailure(
            f"Dataset generation {snapshot.generation} was replaced while the request was reading it"
        )
