# ==============================================================================
# Session Route
# ==============================================================================
"""POST /api/v1/session - issue a server-side session id."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sitepulse.api.deps import get_session_tracker
from sitepulse.core import SessionTracker, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


class SessionRequest(BaseModel):
    # Optional here so a missing field is reported by the tracker as a 400
    site_id: Optional[str] = None
    path: Optional[str] = None


@router.post("/session")
def create_session(
    payload: SessionRequest = Body(...),
    tracker: SessionTracker = Depends(get_session_tracker),
):
    try:
        grant = tracker.create(payload.site_id or "", payload.path or "")
    except StoreError as e:
        logger.error("Error creating session: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to create session"})
    return grant.model_dump()
