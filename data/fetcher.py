"""
Environment Data Fetcher
Thin clients for every external provider the API talks to
Sources: Open-Meteo (air quality + history), TomTom (traffic + search),
Mapbox Tilequery (buildings / land use), PositionStack (geocode fallback)
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from config.settings import settings
from utils.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def _as_number(source: str, value):
    """Missing readings count as 0; anything that is not a number is a bad reply"""
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UpstreamError(source, f"expected a number, got {value!r}")
    return value


def _as_dict(source: str, value) -> Dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise UpstreamError(source, "unexpected response shape")
    return value


def _as_dict_list(source: str, value) -> List[Dict]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise UpstreamError(source, "unexpected response shape")
    return value


class EnvironmentDataFetcher:
    """Fetcher for environmental data from multiple providers, sharing one pooled session"""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = None):
        # API Keys
        self.tomtom_key = settings.TOMTOM_API_KEY
        self.mapbox_token = settings.MAPBOX_ACCESS_TOKEN
        self.positionstack_key = settings.POSITIONSTACK_API_KEY

        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.session = session or self._build_session()

        self._log_status()

    @staticmethod
    def _build_session() -> requests.Session:
        session = requests.Session()
        adapter = HTTPAdapter(pool_connections=10, pool_maxsize=settings.MAX_WORKERS * 2)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        session.headers.update({"User-Agent": f"EcoBlocks/{settings.API_VERSION}"})
        return session

    def _log_status(self):
        """Log which providers are usable"""
        logger.info(
            "Environment fetcher initialized | TomTom: %s | Mapbox: %s | PositionStack: %s | Open-Meteo: yes",
            "yes" if self.tomtom_key else "no",
            "yes" if self.mapbox_token else "no",
            "yes" if self.positionstack_key else "no",
        )

    def _get_json(self, source: str, url: str, params: Dict = None, timeout: float = None):
        """GET a JSON document, converting every failure into UpstreamError"""
        try:
            response = self.session.get(url, params=params, timeout=timeout or self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise UpstreamError(source, f"HTTP {status}") from e
        except requests.exceptions.RequestException as e:
            raise UpstreamError(source, str(e)) from e
        except ValueError as e:
            raise UpstreamError(source, f"invalid JSON: {e}") from e

    # ==================== Open-Meteo ====================

    def fetch_air_quality(self, lat: float, lon: float) -> Dict[str, float]:
        """Fetch current US AQI and PM2.5 from Open-Meteo (no API key needed)"""
        params = {
            "latitude": lat,
            "longitude": lon,
            "current": "us_aqi,pm2_5",
        }
        data = self._get_json("Open-Meteo", settings.OPENMETEO_AQ_URL, params)

        current = data.get("current") if isinstance(data, dict) else None
        if not isinstance(current, dict):
            raise UpstreamError("Open-Meteo", "response has no 'current' block")

        return {
            "aqi": _as_number("Open-Meteo", current.get("us_aqi")),
            "pm25": _as_number("Open-Meteo", current.get("pm2_5")),
        }

    def fetch_hourly_aqi_history(self, lat: float, lon: float, past_days: int = None) -> List[Optional[float]]:
        """Fetch the hourly US AQI series for the past N days (values may be None)"""
        params = {
            "latitude": lat,
            "longitude": lon,
            "hourly": "us_aqi",
            "past_days": past_days or settings.HISTORY_DAYS,
        }
        data = self._get_json(
            "Open-Meteo history", settings.OPENMETEO_AQ_URL, params,
            timeout=settings.HISTORY_TIMEOUT_SECONDS,
        )

        hourly = data.get("hourly") if isinstance(data, dict) else None
        series = hourly.get("us_aqi") if isinstance(hourly, dict) else None
        if not isinstance(series, list):
            raise UpstreamError("Open-Meteo history", "response has no hourly us_aqi series")
        return series

    # ==================== TomTom ====================

    def fetch_traffic_flow(self, lat: float, lon: float) -> Dict[str, float]:
        """Fetch current and free-flow road speed near a point from TomTom"""
        if not self.tomtom_key:
            raise UpstreamError("TomTom", "TOMTOM_API_KEY not configured")

        params = {"key": self.tomtom_key, "point": f"{lat},{lon}"}
        data = self._get_json("TomTom", settings.TOMTOM_FLOW_URL, params)

        flow = data.get("flowSegmentData") if isinstance(data, dict) else None
        if not isinstance(flow, dict):
            raise UpstreamError("TomTom", "response has no flowSegmentData")

        current_speed = flow.get("currentSpeed")
        free_flow_speed = flow.get("freeFlowSpeed")
        if current_speed is None or not free_flow_speed:
            raise UpstreamError("TomTom", "flowSegmentData is missing speeds")

        return {"current_speed": current_speed, "free_flow_speed": free_flow_speed}

    def search_tomtom(self, query: str) -> List[Dict]:
        """Fuzzy place search; returns [] when TomTom finds nothing"""
        if not self.tomtom_key:
            raise UpstreamError("TomTom search", "TOMTOM_API_KEY not configured")

        url = f"{settings.TOMTOM_SEARCH_URL}/{quote(query)}.json"
        params = {
            "key": self.tomtom_key,
            "limit": settings.GEOCODE_LIMIT,
            "minFuzzyLevel": 1,
            "maxFuzzyLevel": 2,
            "typeahead": "true",
        }
        data = self._get_json("TomTom search", url, params, timeout=settings.GEOCODE_TIMEOUT_SECONDS)

        if not isinstance(data, dict):
            raise UpstreamError("TomTom search", "unexpected response shape")

        suggestions = []
        for place in _as_dict_list("TomTom search", data.get("results")):
            address = _as_dict("TomTom search", place.get("address"))
            position = _as_dict("TomTom search", place.get("position"))
            poi = _as_dict("TomTom search", place.get("poi"))

            poi_name = f"{poi['name']}, " if poi.get("name") else ""
            display_name = f"{poi_name}{address.get('freeformAddress', '')}" or address.get("country")

            suggestions.append({
                "lat": position.get("lat"),
                "lon": position.get("lon"),
                "display_name": display_name,
                "country": address.get("country"),
            })
        return suggestions

    # ==================== PositionStack ====================

    def search_positionstack(self, query: str) -> List[Dict]:
        """Forward geocode with PositionStack; returns at most one place"""
        if not self.positionstack_key:
            raise UpstreamError("PositionStack", "POSITIONSTACK_API_KEY not configured")

        params = {"access_key": self.positionstack_key, "query": query, "limit": 1}
        data = self._get_json(
            "PositionStack", settings.POSITIONSTACK_URL, params,
            timeout=settings.GEOCODE_FALLBACK_TIMEOUT_SECONDS,
        )

        if not isinstance(data, dict):
            raise UpstreamError("PositionStack", "unexpected response shape")
        places = _as_dict_list("PositionStack", data.get("data"))
        if not places:
            return []

        place = places[0]
        return [{
            "lat": place.get("latitude"),
            "lon": place.get("longitude"),
            "display_name": place.get("label") or place.get("name"),
            "country": place.get("country"),
        }]

    # ==================== Mapbox ====================

    def fetch_area_features(self, lat: float, lon: float) -> List[Dict]:
        """Fetch building / land-use / natural features around a point from Mapbox Tilequery"""
        if not self.mapbox_token:
            raise UpstreamError("Mapbox", "MAPBOX_ACCESS_TOKEN not configured")

        url = f"{settings.MAPBOX_TILEQUERY_URL}/{lon},{lat}.json"
        params = {
            "radius": settings.AREA_QUERY_RADIUS_M,
            "limit": settings.AREA_QUERY_LIMIT,
            "layers": settings.AREA_QUERY_LAYERS,
            "access_token": self.mapbox_token,
        }
        data = self._get_json("Mapbox", url, params)

        if not isinstance(data, dict):
            raise UpstreamError("Mapbox", "unexpected response shape")
        return _as_dict_list("Mapbox", data.get("features"))
