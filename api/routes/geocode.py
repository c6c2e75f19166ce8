import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_fetcher
from api.schemas import GeocodeResult
from data.fetcher import EnvironmentDataFetcher
from utils.exceptions import UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/geocode", response_model=List[GeocodeResult])
def geocode(
    q: Optional[str] = Query(None, description="Free-text place search"),
    fetcher: EnvironmentDataFetcher = Depends(get_fetcher),
):
    """Place suggestions from TomTom fuzzy search, falling back to PositionStack"""
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Missing query")

    try:
        suggestions = fetcher.search_tomtom(q)
    except UpstreamError as e:
        logger.warning("✗ TomTom fuzzy search error: %s", e)
        suggestions = []

    suggestions = [s for s in suggestions if s["lat"] is not None and s["lon"] is not None]
    if suggestions:
        return suggestions

    logger.info("TomTom found no results for %r, trying PositionStack", q)
    try:
        fallback = fetcher.search_positionstack(q)
    except UpstreamError as e:
        logger.warning("✗ PositionStack error: %s", e)
        raise HTTPException(status_code=500, detail="Geocoding failed")

    fallback = [s for s in fallback if s["lat"] is not None and s["lon"] is not None]
    if not fallback:
        raise HTTPException(status_code=404, detail="Location not found")
    return fallback
