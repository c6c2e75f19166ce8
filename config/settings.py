"""
Configuration Management for EcoBlocks API
Loads environment variables and provides centralized settings
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


class Settings:
    """Application settings and configuration"""

    # Project paths
    BASE_DIR = Path(__file__).resolve().parent.parent
    DATA_DIR = BASE_DIR / "data_storage"

    # API Configuration
    API_TITLE = "EcoBlocks API"
    API_VERSION = "1.0.0"
    API_DESCRIPTION = "Urban environment snapshots and intervention simulations"
    API_HOST = "0.0.0.0"
    API_PORT = int(os.getenv("PORT", "5000"))

    # External API Keys
    TOMTOM_API_KEY = os.getenv("TOMTOM_API_KEY", "")
    MAPBOX_ACCESS_TOKEN = os.getenv("MAPBOX_ACCESS_TOKEN", "")
    POSITIONSTACK_API_KEY = os.getenv("POSITIONSTACK_API_KEY", "")
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

    # External API URLs
    OPENMETEO_AQ_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"
    TOMTOM_FLOW_URL = "https://api.tomtom.com/traffic/services/4/flowSegmentData/absolute/10/json"
    TOMTOM_SEARCH_URL = "https://api.tomtom.com/search/2/search"
    MAPBOX_TILEQUERY_URL = "https://api.mapbox.com/v4/mapbox.mapbox-streets-v8/tilequery"
    POSITIONSTACK_URL = "http://api.positionstack.com/v1/forward"

    # Timeouts (seconds)
    HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
    AGGREGATE_TIMEOUT_SECONDS = float(os.getenv("AGGREGATE_TIMEOUT_SECONDS", "15"))
    HISTORY_TIMEOUT_SECONDS = float(os.getenv("HISTORY_TIMEOUT_SECONDS", "20"))
    GEMINI_TIMEOUT_SECONDS = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "30"))
    GEOCODE_TIMEOUT_SECONDS = 8
    GEOCODE_FALLBACK_TIMEOUT_SECONDS = 5

    # Worker pool shared by the aggregator and the simulation pipeline
    MAX_WORKERS = int(os.getenv("MAX_WORKERS", "8"))

    # Area lookup
    AREA_QUERY_RADIUS_M = 200
    AREA_QUERY_LIMIT = 50
    AREA_QUERY_LAYERS = "building,landuse,natural_label,poi_label"

    # Simulation Settings
    HISTORY_DAYS = 30
    FORECAST_DAYS = 7
    ESTIMATED_DAYS = 14
    BASE_TRAFFIC_SPEED = 30
    HISTORY_LIMIT = 10
    GEOCODE_LIMIT = 5
    GUEST_USER_ID = "guest"

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'ecoblocks.db'}")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # CORS Settings (for frontend)
    CORS_ORIGINS = ["*"]

    @classmethod
    def create_directories(cls):
        """Create necessary directories if they don't exist"""
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def validate_config(cls):
        """Validate configuration and warn about missing keys"""
        warnings = []

        if not cls.TOMTOM_API_KEY:
            warnings.append("TOMTOM_API_KEY not set - traffic will be estimated from AQI")

        if not cls.MAPBOX_ACCESS_TOKEN:
            warnings.append("MAPBOX_ACCESS_TOKEN not set - area data will use defaults")

        if not cls.POSITIONSTACK_API_KEY:
            warnings.append("POSITIONSTACK_API_KEY not set - geocoding has no fallback provider")

        if not cls.GEMINI_API_KEY:
            warnings.append("GEMINI_API_KEY not set - insights will use the procedural fallback")

        return warnings


# Create singleton instance
settings = Settings()

# Create directories on import
settings.create_directories()

# Validate configuration
config_warnings = settings.validate_config()
for warning in config_warnings:
    logger.warning("Configuration: %s", warning)
