# ==============================================================================
# Analytics Routes
# ==============================================================================
"""
GET /api/v1/analytics/overview and /api/v1/analytics/pages.

Both take site_id plus optional from/to bounds (inclusive epoch seconds) and
require a bearer token.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from sitepulse.api.auth import require_caller
from sitepulse.api.deps import get_aggregation_engine
from sitepulse.core import AggregationEngine, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/overview")
def overview(
    site_id: Optional[str] = Query(None),
    start: Optional[int] = Query(None, alias="from"),
    end: Optional[int] = Query(None, alias="to"),
    caller: str = Depends(require_caller),
    engine: AggregationEngine = Depends(get_aggregation_engine),
):
    logger.debug("Overview for site=%s requested by %s", site_id, caller)
    try:
        metrics = engine.overview(site_id or "", start, end)
    except StoreError as e:
        logger.error("Error fetching overview analytics: %s", e)
        return JSONResponse(
            status_code=500, content={"error": "Failed to fetch overview analytics"}
        )
    return metrics.model_dump()


@router.get("/pages")
def pages(
    site_id: Optional[str] = Query(None),
    start: Optional[int] = Query(None, alias="from"),
    end: Optional[int] = Query(None, alias="to"),
    caller: str = Depends(require_caller),
    engine: AggregationEngine = Depends(get_aggregation_engine),
):
    logger.debug("Page stats for site=%s requested by %s", site_id, caller)
    try:
        stats = engine.pages(site_id or "", start, end)
    except StoreError as e:
        logger.error("Error fetching page analytics: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch page analytics"})
    return [page.model_dump() for page in stats]
