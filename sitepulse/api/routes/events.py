# ==============================================================================
# Event Ingestion Route
# ==============================================================================
"""
POST /api/v1/events - batch ingestion from the browser collector.

navigator.sendBeacon() may deliver the body without a JSON Content-Type, so
the raw body is decoded as JSON regardless of the header.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from sitepulse.api.deps import get_ingestion_validator
from sitepulse.core import IngestionError, IngestionValidator, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/events")
async def ingest_events(
    request: Request,
    validator: IngestionValidator = Depends(get_ingestion_validator),
):
    body = await request.body()
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise IngestionError("Invalid request: body must be valid JSON") from e

    try:
        await run_in_threadpool(validator.ingest, payload)
    except StoreError as e:
        logger.error("Error ingesting events: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to ingest events"})

    return {"status": "ok"}
