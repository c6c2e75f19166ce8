"""
Weekly Summarizer
Rolls a 30-day daily series up into four weekly buckets for the insight prompt
"""

from typing import List, Sequence

import numpy as np

from api.schemas import WeeklyBucket
from utils import constants as C
from utils.helpers import round_to_int


def weekly_summary(daily: Sequence[float]) -> List[WeeklyBucket]:
    """
    Summarize a daily series into 4 weeks

    Weeks 1-3 are the 7-day windows starting at days 0, 7 and 14; week 4 takes
    everything from day 21 on (9 days for a 30-day month). Empty input gives
    an empty summary.

    Args:
        daily: Daily values, oldest first

    Returns:
        List of WeeklyBucket (week, avg_value, trend)
    """
    if len(daily) == 0:
        return []

    values = np.asarray(daily, dtype=float)
    buckets = []
    for index in range(C.WEEKS_PER_SUMMARY):
        start = index * C.DAYS_PER_WEEK
        is_last = index == C.WEEKS_PER_SUMMARY - 1
        window = values[start:] if is_last else values[start:start + C.DAYS_PER_WEEK]

        avg_value = round_to_int(float(window.mean())) if window.size else 0
        buckets.append(WeeklyBucket(
            week=index + 1,
            avg_value=avg_value,
            trend=C.TREND_CURRENT if is_last else C.TREND_PAST,
        ))
    return buckets
