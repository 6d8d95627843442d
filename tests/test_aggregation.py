"""Tests for rating aggregation and distance math."""
import pytest

from app.services.turf_review_service import summarize_ratings
from app.services.turf_service import bounding_box, distance_km


def test_summarize_ratings_weighted_average():
    average, distribution = summarize_ratings([(5, 2), (3, 1)])
    assert average == pytest.approx(13 / 3)
    assert distribution == {5: 2, 3: 1}


def test_summarize_ratings_empty():
    assert summarize_ratings([]) == (0, {})


def test_summarize_ratings_merges_repeated_ratings():
    average, distribution = summarize_ratings([(4, 1), (4, 3), (2, 2)])
    assert distribution == {4: 4, 2: 2}
    assert average == pytest.approx((16 + 4) / 6)


def test_distance_zero_for_same_point():
    assert distance_km(22.5726, 88.3639, 22.5726, 88.3639) == 0


def test_distance_kolkata_to_delhi():
    # roughly 1,300 km as the crow flies
    assert distance_km(22.5726, 88.3639, 28.6139, 77.2090) == pytest.approx(1305, rel=0.02)


def test_distance_is_symmetric():
    a = distance_km(12.97, 77.59, 13.08, 80.27)
    b = distance_km(13.08, 80.27, 12.97, 77.59)
    assert a == pytest.approx(b)


def test_bounding_box_contains_radius():
    min_lat, max_lat, min_lng, max_lng = bounding_box(22.5726, 88.3639, 10)
    assert min_lat < 22.5726 < max_lat
    assert min_lng < 88.3639 < max_lng
    # the box edge is at least radius away from the center
    assert distance_km(22.5726, 88.3639, max_lat, 88.3639) == pytest.approx(10, rel=1e-6)


def test_bounding_box_drops_longitude_across_antimeridian():
    _, _, min_lng, max_lng = bounding_box(0, 179.99, 50)
    assert min_lng is None and max_lng is None
