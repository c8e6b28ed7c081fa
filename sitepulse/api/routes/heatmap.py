# ==============================================================================
# Heatmap Routes
# ==============================================================================
"""
GET /api/v1/heatmap/clicks and /api/v1/heatmap/scroll.

Both need site_id and path; from/to are optional. No matching events is a
normal, empty result.
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


@router.get("/clicks")
def click_heatmap(
    site_id: Optional[str] = Query(None),
    path: Optional[str] = Query(None),
    start: Optional[int] = Query(None, alias="from"),
    end: Optional[int] = Query(None, alias="to"),
    caller: str = Depends(require_caller),
    engine: AggregationEngine = Depends(get_aggregation_engine),
):
    try:
        points = engine.click_heatmap(site_id or "", path or "", start, end)
    except StoreError as e:
        logger.error("Error fetching click heatmap: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch click heatmap"})
    return {"points": [point.model_dump() for point in points]}


@router.get("/scroll")
def scroll_heatmap(
    site_id: Optional[str] = Query(None),
    path: Optional[str] = Query(None),
    start: Optional[int] = Query(None, alias="from"),
    end: Optional[int] = Query(None, alias="to"),
    caller: str = Depends(require_caller),
    engine: AggregationEngine = Depends(get_aggregation_engine),
):
    try:
        depth = engine.scroll_depth(site_id or "", path or "", start, end)
    except StoreError as e:
        logger.error("Error fetching scroll heatmap: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch scroll heatmap"})
    return {"depth": [row.model_dump() for row in depth]}
