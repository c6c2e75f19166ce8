"""
Snapshot Aggregator
Fans out to the air-quality, traffic and area providers concurrently and merges
whatever came back into a fully populated EnvironmentSnapshot
"""

import logging
from concurrent.futures import Executor, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from api.schemas import EnvironmentSnapshot
from config.settings import settings
from data.fetcher import EnvironmentDataFetcher
from utils import constants as C
from utils.helpers import capitalize_first, format_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """Result of one provider lookup: either a value or the error that replaced it"""
    source: str
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def settle_all(executor: Executor, calls: Dict[str, Callable[[], Any]], timeout: float) -> Dict[str, Outcome]:
    """
    Run every call concurrently and wait for all of them to settle

    Never short-circuits on the first failure. Calls still running after
    `timeout` seconds are cancelled and reported as timed out.
    """
    futures = {name: executor.submit(call) for name, call in calls.items()}
    wait(futures.values(), timeout=timeout)

    outcomes = {}
    for name, future in futures.items():
        if not future.done():
            future.cancel()
            outcomes[name] = Outcome(name, error=TimeoutError(f"{name} lookup timed out after {timeout}s"))
            continue
        error = future.exception()
        if error is not None:
            outcomes[name] = Outcome(name, error=error)
        else:
            outcomes[name] = Outcome(name, value=future.result())
    return outcomes


# ==================== Label Derivation ====================

def classify_traffic(current_speed: float, free_flow_speed: float) -> str:
    """Label road flow by the ratio of current to free-flow speed, embedding the speed"""
    ratio = current_speed / free_flow_speed
    speed = format_number(current_speed)
    for upper_bound, label in C.TRAFFIC_TIERS:
        if ratio < upper_bound:
            return f"{label} ({speed} km/h)"
    return f"{C.TRAFFIC_CLEAR_LABEL} ({speed} km/h)"


def estimate_traffic(aqi: float) -> str:
    """Guess traffic from air quality when no flow reading is available"""
    if aqi > C.TRAFFIC_ESTIMATE_AQI_THRESHOLD:
        return C.TRAFFIC_ESTIMATE_HEAVY
    return C.TRAFFIC_ESTIMATE_CLEAR


def classify_building_density(building_count: int) -> str:
    if building_count > C.HIGH_DENSITY_THRESHOLD:
        return C.DENSITY_HIGH
    elif building_count > C.MEDIUM_DENSITY_THRESHOLD:
        return C.DENSITY_MEDIUM
    return C.DENSITY_LOW


def _layer(feature: Dict) -> Optional[str]:
    properties = feature.get("properties") or {}
    return (properties.get("tilequery") or {}).get("layer")


def _feature_class(feature: Dict) -> Optional[str]:
    return (feature.get("properties") or {}).get("class")


def summarize_area(features: List[Dict]) -> Dict[str, Any]:
    """
    Derive building count, area type and greenery from tilequery features

    Args:
        features: GeoJSON features tagged with properties.tilequery.layer

    Returns:
        Dict with building_count, building_density, area_type, tree_count, tree_density
    """
    building_count = sum(1 for f in features if _layer(f) == C.BUILDING_LAYER)

    landuse = next((f for f in features if _layer(f) == C.LANDUSE_LAYER), None)
    if landuse is not None and _feature_class(landuse):
        area_type = capitalize_first(_feature_class(landuse))
    elif building_count > C.URBAN_BUILDING_THRESHOLD:
        area_type = C.AREA_URBAN
    else:
        area_type = C.AREA_RESIDENTIAL

    has_nature = any(
        _feature_class(f) in C.NATURE_CLASSES or _layer(f) == C.NATURAL_LABEL_LAYER
        for f in features
    )

    if has_nature:
        tree_count, tree_density = C.TREES_NATURE
    elif area_type == C.AREA_RESIDENTIAL:
        tree_count, tree_density = C.TREES_RESIDENTIAL
    else:
        tree_count, tree_density = C.TREES_SPARSE

    return {
        "building_count": building_count,
        "building_density": classify_building_density(building_count),
        "area_type": area_type,
        "tree_count": tree_count,
        "tree_density": tree_density,
    }


def default_area() -> Dict[str, Any]:
    tree_count, tree_density = C.TREES_UNKNOWN
    return {
        "building_count": 0,
        "building_density": C.DENSITY_LOW,
        "area_type": C.AREA_SUBURBAN,
        "tree_count": tree_count,
        "tree_density": tree_density,
    }


# ==================== Aggregator ====================

class SnapshotAggregator:
    """Builds an EnvironmentSnapshot for a coordinate, tolerating any provider failing"""

    def __init__(self, fetcher: EnvironmentDataFetcher, executor: Executor, timeout: float = None):
        self.fetcher = fetcher
        self.executor = executor
        self.timeout = timeout or settings.AGGREGATE_TIMEOUT_SECONDS

    def aggregate(self, lat: float, lon: float) -> EnvironmentSnapshot:
        # Each branch parses its own reply so a malformed body fails only that branch
        outcomes = settle_all(
            self.executor,
            {
                "air_quality": lambda: self._air_quality(lat, lon),
                "traffic": lambda: self._traffic_label(lat, lon),
                "area": lambda: summarize_area(self.fetcher.fetch_area_features(lat, lon)),
            },
            self.timeout,
        )

        for outcome in outcomes.values():
            if not outcome.ok:
                logger.warning("✗ %s lookup failed for (%s, %s): %s", outcome.source, lat, lon, outcome.error)

        aqi, pm25 = outcomes["air_quality"].value if outcomes["air_quality"].ok else (0, 0)
        traffic = outcomes["traffic"].value if outcomes["traffic"].ok else estimate_traffic(aqi)
        area = outcomes["area"].value if outcomes["area"].ok else default_area()

        return EnvironmentSnapshot(aqi=aqi, pm25=pm25, traffic=traffic, **area)

    def _air_quality(self, lat: float, lon: float) -> Tuple[float, float]:
        reading = self.fetcher.fetch_air_quality(lat, lon)
        aqi, pm25 = reading["aqi"], reading["pm25"]
        for value in (aqi, pm25):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"non-numeric air quality reading {value!r}")
        return aqi, pm25

    def _traffic_label(self, lat: float, lon: float) -> str:
        flow = self.fetcher.fetch_traffic_flow(lat, lon)
        return classify_traffic(flow["current_speed"], flow["free_flow_speed"])
