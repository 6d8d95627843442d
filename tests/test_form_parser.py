"""Tests for request boundary parsing."""
import pytest
from fastapi import HTTPException

from app.schemas.turf import OperatingHours, TurfFilter
from app.services.form_parser import form_parser


def test_parse_number_accepts_numeric_text():
    assert form_parser.parse_number("250.5", "basePrice") == 250.5
    assert form_parser.parse_number(" 40 ", "basePrice") == 40.0


def test_parse_number_blank_is_none():
    assert form_parser.parse_number(None, "minPrice") is None
    assert form_parser.parse_number("", "minPrice") is None


@pytest.mark.parametrize("raw", ["abc", "12abc", "nan", "inf"])
def test_parse_number_rejects_garbage_naming_the_field(raw):
    with pytest.raises(HTTPException) as exc:
        form_parser.parse_number(raw, "minPrice")
    assert exc.value.status_code == 400
    assert exc.value.detail == "minPrice must be a valid number"


def test_parse_int_rejects_decimal():
    with pytest.raises(HTTPException) as exc:
        form_parser.parse_int("5.5", "teamSize")
    assert exc.value.status_code == 400
    assert "teamSize" in exc.value.detail


def test_string_list_accepts_every_encoding():
    assert form_parser.parse_string_list('["Football", "cricket"]', "sports") == ["football", "cricket"]
    assert form_parser.parse_string_list("Football, cricket,,", "sports") == ["football", "cricket"]
    assert form_parser.parse_string_list(["football", "Cricket", "football"], "sports") == ["football", "cricket"]


def test_string_list_bad_json_is_400():
    with pytest.raises(HTTPException) as exc:
        form_parser.parse_string_list('["football"', "sports")
    assert exc.value.status_code == 400
    assert exc.value.detail == "Invalid sports format"


def test_operating_hours_normalizes_days():
    hours = form_parser.parse_json_model(
        '{"Monday": {"open": "06:00", "close": "22:00"}}', OperatingHours, "operatingHours"
    )
    assert list(hours.root) == ["monday"]
    assert hours.root["monday"].close == "22:00"


@pytest.mark.parametrize("raw", [
    "not json",
    '{"funday": {"open": "06:00", "close": "22:00"}}',
    '{"monday": {"open": "22:00", "close": "06:00"}}',
    '{"monday": {"open": "6am", "close": "22:00"}}',
    '["monday"]',
])
def test_operating_hours_invalid_shapes(raw):
    with pytest.raises(HTTPException) as exc:
        form_parser.parse_json_model(raw, OperatingHours, "operatingHours")
    assert exc.value.status_code == 400
    assert "operatingHours" in exc.value.detail


def test_filter_rejects_inverted_price_range():
    with pytest.raises(HTTPException) as exc:
        form_parser.build(TurfFilter, min_price=500, max_price=100)
    assert exc.value.status_code == 400
    assert "minPrice" in exc.value.detail


def test_filter_requires_both_coordinates():
    with pytest.raises(HTTPException) as exc:
        form_parser.build(TurfFilter, latitude=22.5)
    assert "latitude and longitude" in exc.value.detail


def test_filter_defaults():
    options = form_parser.build(TurfFilter)
    assert options.page == 1
    assert options.limit == 10
    assert options.radius_km == 10
    assert not options.has_location
