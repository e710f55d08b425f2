import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .database import create_engine_for, get_store, make_session_factory, migrate_database
from .errors import ReportError
from .routers import initialize, reports, transactions
from .schemas import DatasetInfo, HealthResponse
from .services.store import TransactionStore

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ───────────────────────────────────────────────────────────────
    settings: Settings = app.state.settings
    await asyncio.to_thread(migrate_database, settings.database_url)

    engine = create_engine_for(settings.database_url)
    app.state.store = TransactionStore(make_session_factory(engine))
    app.state.http_client = httpx.AsyncClient(
        timeout=settings.seed_timeout,
        transport=app.state.seed_transport,
        follow_redirects=True,
    )
    logger.info("Sales report service ready (reference year %d)", settings.reference_year)

    yield
    # ── Shutdown ──────────────────────────────────────────────────────────────
    await app.state.http_client.aclose()
    await engine.dispose()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = err["loc"][-1] if err.get("loc") else "request"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts) or "Invalid request"


def create_app(
    settings: Optional[Settings] = None,
    seed_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the API. ``seed_transport`` replaces the network for the seed fetch."""
    settings = settings or load_settings()
    logging.getLogger("salesreport").setLevel(settings.log_level)

    app = FastAPI(
        title="Sales Report Service",
        description="Monthly sales statistics, price histogram and category breakdown over a seeded dataset.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.seed_transport = seed_transport

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count"],
    )

    @app.exception_handler(ReportError)
    async def report_error_handler(_request: Request, exc: ReportError):
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_request: Request, exc: Exception):
        logger.exception("Unhandled error")
        return JSONResponse(status_code=500, content={"error": str(exc) or type(exc).__name__})

    app.include_router(initialize.router)
    app.include_router(transactions.router)
    app.include_router(reports.router)

    @app.get("/health", response_model=HealthResponse, tags=["meta"])
    async def health(request: Request):
        run = await get_store(request).dataset_info()
        dataset = (
            DatasetInfo(generation=run.id, record_count=run.record_count, seeded_at=run.created_at)
            if run
            else DatasetInfo()
        )
        return HealthResponse(status="ok", version=VERSION, dataset=dataset)

    return app


app = create_app()
