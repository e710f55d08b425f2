import logging
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
from fastapi import Request
from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .config import Settings

if TYPE_CHECKING:
    from .services.store import TransactionStore

logger = logging.getLogger(__name__)

Base = declarative_base()

ALEMBIC_DIR = Path(__file__).resolve().parent.parent / "alembic"

# SQL name of the Unicode case-folding function registered on SQLite connections.
CASEFOLD_FUNCTION = "py_casefold"


# ── URLs ──────────────────────────────────────────────────────────────────────


def async_database_url(url: str) -> URL:
    """sqlite:///x.db → sqlite+aiosqlite:///x.db; explicit drivers pass through."""
    parsed = make_url(url)
    if parsed.drivername == "sqlite":
        parsed = parsed.set(drivername="sqlite+aiosqlite")
    return parsed


def sync_database_url(url: str) -> URL:
    """Inverse of async_database_url, for Alembic and schema inspection."""
    parsed = make_url(url)
    if parsed.drivername == "sqlite+aiosqlite":
        parsed = parsed.set(drivername="sqlite")
    return parsed


# ── Engine ────────────────────────────────────────────────────────────────────


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def _configure_sqlite(dbapi_connection, _connection_record) -> None:
    # Readers keep working while a reseed holds the write lock.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()
    # SQLite's own lower() and LIKE only fold ASCII.
    dbapi_connection.create_function(CASEFOLD_FUNCTION, 1, _casefold)


def create_engine_for(url: str) -> AsyncEngine:
    engine = create_async_engine(async_database_url(url))
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _configure_sqlite)
    return engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table directly from the ORM metadata (tests, scratch DBs)."""
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Migrations ────────────────────────────────────────────────────────────────


def migrate_database(url: str) -> None:
    """Bring the schema at ``url`` to the Alembic head revision.

    Brand-new databases (no ``transactions`` table) are built with
    ``create_all`` and stamped to head; existing ones run ``upgrade head``.
    Blocking — call it from a worker thread inside the event loop.
    """
    from alembic import command
    from alembic.config import Config

    from . import models  # noqa: F401

    db_url = sync_database_url(url)
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    alembic_cfg.set_main_option(
        "sqlalchemy.url", db_url.render_as_string(hide_password=False).replace("%", "%%")
    )

    engine = create_engine(db_url)
    try:
        is_new_db = "transactions" not in inspect(engine).get_table_names()
        if is_new_db:
            Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()

    if is_new_db:
        logger.info("Created schema for new database; stamping Alembic head")
        command.stamp(alembic_cfg, "head")
        return

    command.upgrade(alembic_cfg, "head")


# ── Request dependencies ──────────────────────────────────────────────────────


def get_store(request: Request) -> "TransactionStore":
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client
