import httpx
from fastapi import APIRouter, Depends

from ..config import Settings
from ..database import get_http_client, get_settings, get_store
from ..schemas import InitializeResponse
from ..services.seeder import initialize_database
from ..services.store import TransactionStore

router = APIRouter(prefix="/api", tags=["seed"])


@router.get("/initialize", response_model=InitializeResponse, summary="Replace all data with the remote seed dataset")
async def initialize(
    store: TransactionStore = Depends(get_store),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
):
    await initialize_database(store, client, settings.seed_source_url)
    return {"message": "Database initialized with seed data"}
