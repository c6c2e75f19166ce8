"""
History Fetcher & Downsampler
Turns the hourly Open-Meteo AQI series into one value per day, and produces
the synthetic daily traffic series used alongside it
"""

import logging
import random
from typing import List, Optional, Sequence

import pandas as pd

from config.settings import settings
from data.fetcher import EnvironmentDataFetcher
from utils import constants as C
from utils.exceptions import UpstreamError
from utils.helpers import round_to_int

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


def downsample_hourly(hourly: Sequence[Optional[float]], fill_value: float, days: int = None) -> List[float]:
    """
    Reduce an hourly series to daily averages

    Day i averages hours [24i, 24i + 24), ignoring missing samples. A day with
    no usable samples (all null, or past the end of the series) takes
    `fill_value`. Always returns exactly `days` values.

    Args:
        hourly: Hourly readings, oldest first; None marks a missing hour
        fill_value: Value substituted for days without data
        days: Number of days to produce (defaults to HISTORY_DAYS)

    Returns:
        List of daily values
    """
    days = days or settings.HISTORY_DAYS
    series = pd.to_numeric(pd.Series(list(hourly), dtype="object"), errors="coerce")

    daily = []
    for day in range(days):
        bucket = series.iloc[day * HOURS_PER_DAY:(day + 1) * HOURS_PER_DAY].dropna()
        if bucket.empty:
            daily.append(fill_value)
        else:
            daily.append(round_to_int(float(bucket.mean())))
    return daily


def generate_traffic_history(base_speed: float = None, days: int = None, rng: random.Random = None) -> List[int]:
    """
    Synthesize a daily average road-speed series

    Days falling on the weekend pattern get a fixed speed boost; every day gets
    symmetric random jitter. Values never drop below MIN_TRAFFIC_SPEED.
    """
    base_speed = settings.BASE_TRAFFIC_SPEED if base_speed is None else base_speed
    days = days or settings.HISTORY_DAYS
    rng = rng or random

    speeds = []
    for i in range(days):
        is_weekend = (days - i) % C.DAYS_PER_WEEK in (0, 1)
        boost = C.WEEKEND_SPEED_BOOST if is_weekend else 0
        jitter = rng.uniform(-C.TRAFFIC_JITTER, C.TRAFFIC_JITTER)
        speeds.append(max(C.MIN_TRAFFIC_SPEED, round_to_int(base_speed + boost + jitter)))
    return speeds


class HistoryFetcher:
    """Retrieves the past month of daily AQI for a coordinate"""

    def __init__(self, fetcher: EnvironmentDataFetcher):
        self.fetcher = fetcher

    def daily_aqi_history(self, lat: float, lon: float, current_aqi: float) -> List[float]:
        """Daily AQI for the past HISTORY_DAYS days; a flat current_aqi series if the fetch fails"""
        days = settings.HISTORY_DAYS
        try:
            hourly = self.fetcher.fetch_hourly_aqi_history(lat, lon, past_days=days)
        except UpstreamError as e:
            logger.warning("⚠️ History fetch failed for (%s, %s): %s", lat, lon, e)
            return [current_aqi] * days

        return downsample_hourly(hourly, current_aqi, days)
