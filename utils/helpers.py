"""
Helper Functions for EcoBlocks API
Utility functions used across the application
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round a number with ties going up, the way the dashboard clients round

    Python's built-in round() uses banker's rounding (54.5 -> 54); every
    number shown to users is rounded half-up instead (54.5 -> 55).

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        Rounded value (a float; use round_to_int for whole numbers)
    """
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def round_to_int(value: float) -> int:
    """Round half-up to the nearest integer"""
    return int(math.floor(value + 0.5))


def capitalize_first(text: str) -> str:
    """Upper-case the first character only ("industrial area" -> "Industrial area")"""
    if not text:
        return text
    return text[0].upper() + text[1:]


def format_number(value: float) -> str:
    """Render a number without a trailing '.0' for whole values (55.0 -> '55', 54.5 -> '54.5')"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_coordinate(raw: Optional[str]) -> Optional[float]:
    """
    Parse a query-string coordinate

    Args:
        raw: Raw query value

    Returns:
        Float value, or None when missing or not numeric
    """
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def validate_coordinates(lat: float, lon: float) -> bool:
    """
    Validate latitude and longitude values

    Args:
        lat: Latitude
        lon: Longitude

    Returns:
        True if valid, False otherwise
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180
