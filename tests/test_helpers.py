import pytest

from utils.helpers import (
    capitalize_first,
    format_number,
    parse_coordinate,
    round_half_up,
    round_to_int,
    validate_coordinates,
)


@pytest.mark.parametrize("value,digits,expected", [
    (0.25, 1, 0.3),
    (0.35, 1, 0.3),  # 0.35 is stored as 0.34999...
    (45.00000000000001, 1, 45.0),
    (2.5, 0, 3.0),
    (54.5, 0, 55.0),
])
def test_round_half_up(value, digits, expected):
    assert round_half_up(value, digits) == expected


@pytest.mark.parametrize("value,expected", [(54.5, 55), (53.5, 54), (52.4, 52), (-0.5, 0), (-1.5, -1)])
def test_round_to_int(value, expected):
    assert round_to_int(value) == expected


def test_capitalize_first():
    assert capitalize_first("residential") == "Residential"
    assert capitalize_first("industrial area") == "Industrial area"
    assert capitalize_first("") == ""


def test_format_number():
    assert format_number(55.0) == "55"
    assert format_number(54.5) == "54.5"
    assert format_number(20) == "20"


@pytest.mark.parametrize("raw,expected", [
    ("40.7", 40.7), ("-74", -74.0), (None, None), ("", None), ("abc", None), ("nan", None), ("inf", None),
])
def test_parse_coordinate(raw, expected):
    assert parse_coordinate(raw) == expected


def test_validate_coordinates():
    assert validate_coordinates(90, 180)
    assert not validate_coordinates(91, 0)
    assert not validate_coordinates(0, -181)
