"""Seed loader — fetch the remote dataset, validate it whole, swap it in."""

import logging
from collections import Counter
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from ..errors import UpstreamFetchFailure
from ..models import SeedRun
from ..schemas import TransactionSchema
from .store import TransactionStore

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[TransactionSchema])


async def fetch_seed_data(client: httpx.AsyncClient, source_url: str) -> Any:
    """GET the seed document and decode its JSON body."""
    try:
        response = await client.get(source_url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise UpstreamFetchFailure(
            f"Seed source returned HTTP {exc.response.status_code}"
        ) from exc
    except httpx.HTTPError as exc:
        raise UpstreamFetchFailure(f"Seed source unreachable: {exc}") from exc

    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamFetchFailure("Seed source did not return valid JSON") from exc


def parse_seed_payload(payload: Any) -> list[TransactionSchema]:
    """Validate the decoded payload as a non-empty batch of unique transactions.

    Any bad record rejects the whole batch.
    """
    if not isinstance(payload, list):
        raise UpstreamFetchFailure("Seed payload must be a JSON array of transactions")
    if not payload:
        raise UpstreamFetchFailure("Seed payload is empty")

    try:
        records = _RECORDS.validate_python(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise UpstreamFetchFailure(
            f"Malformed seed record at [{location}]: {first['msg']} "
            f"({exc.error_count()} error(s) in batch)"
        ) from exc

    duplicates = sorted(tx_id for tx_id, n in Counter(r.id for r in records).items() if n > 1)
    if duplicates:
        raise UpstreamFetchFailure(f"Duplicate transaction ids in seed payload: {', '.join(duplicates[:5])}")
    return records


async def initialize_database(
    store: TransactionStore, client: httpx.AsyncClient, source_url: str
) -> SeedRun:
    """Replace the store's contents with the dataset at ``source_url``.

    Fetch and validation happen before the store is touched, and the swap is a
    single transaction, so a failure at any step leaves the previous dataset
    serving. No retries.
    """
    logger.info("Seeding transactions from %s", source_url)
    try:
        records = parse_seed_payload(await fetch_seed_data(client, source_url))
    except UpstreamFetchFailure as exc:
        logger.warning("Seed aborted, store untouched: %s", exc.message)
        raise

    run = await store.replace_all(records, source_url)
    logger.info("Seeded %d transactions (generation %s)", run.record_count, run.id)
    return run
