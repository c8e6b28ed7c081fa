# ==============================================================================
# Health Route
# ==============================================================================
"""GET /health - connectivity of the event store and the session store."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from sitepulse.api.deps import get_event_repository, get_session_repository
from sitepulse.base import EventRepository, SessionRepository

router = APIRouter()


@router.get("/health")
def health(
    events: EventRepository = Depends(get_event_repository),
    sessions: SessionRepository = Depends(get_session_repository),
):
    store_ok = events.ping()
    sessions_ok = sessions.ping()
    healthy = store_ok and sessions_ok
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "degraded",
            "store": store_ok,
            "sessions": sessions_ok,
        },
    )
