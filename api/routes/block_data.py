import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_aggregator
from api.schemas import EnvironmentSnapshot
from data.aggregator import SnapshotAggregator
from utils.helpers import parse_coordinate, validate_coordinates

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/block-data", response_model=EnvironmentSnapshot)
def get_block_data(
    lat: Optional[str] = Query(None, description="Latitude"),
    lon: Optional[str] = Query(None, description="Longitude"),
    aggregator: SnapshotAggregator = Depends(get_aggregator),
):
    """Environmental snapshot (air quality, traffic, buildings, greenery) for one point"""
    lat_value = parse_coordinate(lat)
    lon_value = parse_coordinate(lon)
    if lat_value is None or lon_value is None:
        raise HTTPException(status_code=400, detail="Missing coordinates")
    if not validate_coordinates(lat_value, lon_value):
        raise HTTPException(status_code=400, detail="Coordinates out of range")

    try:
        snapshot = aggregator.aggregate(lat_value, lon_value)
    except Exception as e:
        logger.exception("Block data error for (%s, %s): %s", lat_value, lon_value, e)
        raise HTTPException(status_code=500, detail="Failed to fetch environmental data")

    logger.info("🚀 Snapshot for (%s, %s): %s", lat_value, lon_value, snapshot.model_dump(by_alias=True))
    return snapshot
