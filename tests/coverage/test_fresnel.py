"""Tests for Fresnel radius formulas and the envelope polygon builder."""

from __future__ import annotations

import math

import pytest

from domain.coverage.services import (
    build_fresnel_polygon,
    fresnel_radius_m,
    fresnel_sample_count,
    legacy_fresnel_zone_m,
    midpoint_fresnel_radius_m,
    summarize_link,
    wavelength_m,
)
from domain.coverage.value_objects import FresnelPolygon
from domain.terrain.services import (
    METERS_PER_DEGREE_LATITUDE,
    distance_km,
    meters_per_degree_longitude,
)
from domain.terrain.value_objects import GeoPoint

A = GeoPoint(latitude=12.0, longitude=77.0)
B = GeoPoint(latitude=12.1, longitude=77.1)


# ===========================================================================
# Radius formulas
# ===========================================================================
def test_wavelength_at_5ghz():
    assert wavelength_m(5.0) == pytest.approx(0.06)


def test_radius_pinches_to_zero_at_endpoints():
    d = 15_000.0
    assert fresnel_radius_m(d, 0.0, 5.0) == 0.0
    assert fresnel_radius_m(d, d, 5.0) == 0.0


@pytest.mark.parametrize("x", [1.0, 100.0, 7_500.0, 14_999.0])
def test_radius_positive_inside_path(x):
    assert fresnel_radius_m(15_000.0, x, 5.0) > 0


@pytest.mark.parametrize(
    "d, x, freq",
    [(0.0, 0.0, 5.0), (-10.0, 5.0, 5.0), (100.0, -1.0, 5.0), (100.0, 150.0, 5.0), (100.0, 50.0, 0.0)],
)
def test_radius_degenerate_inputs_are_zero(d, x, freq):
    assert fresnel_radius_m(d, x, freq) == 0.0


def test_radius_widest_at_midpoint():
    d = 10_000.0
    mid = fresnel_radius_m(d, d / 2, 5.0)
    assert mid > fresnel_radius_m(d, d / 4, 5.0)
    assert fresnel_radius_m(d, d / 4, 5.0) == pytest.approx(fresnel_radius_m(d, 3 * d / 4, 5.0))


def test_midpoint_radius_15_7_km_at_5ghz():
    # sqrt(0.06 m * 15700 m / 4)
    assert midpoint_fresnel_radius_m(15.7, 5.0) == pytest.approx(15.35, abs=0.01)


@pytest.mark.parametrize("dist_km, freq", [(1.0, 2.4), (15.7, 5.0), (42.0, 11.0)])
def test_midpoint_radius_agrees_with_legacy_closed_form(dist_km, freq):
    assert midpoint_fresnel_radius_m(dist_km, freq) == pytest.approx(
        legacy_fresnel_zone_m(dist_km, freq), rel=1e-3
    )


def test_midpoint_radius_zero_distance():
    assert midpoint_fresnel_radius_m(0.0, 5.0) == 0.0
    assert legacy_fresnel_zone_m(0.0, 5.0) == 0.0


def test_summarize_link_uses_mean_frequency():
    summary = summarize_link(A, B, 5.0, 6.0)
    assert summary.freq_ghz == 5.5
    assert summary.distance_km == pytest.approx(distance_km(12.0, 77.0, 12.1, 77.1))
    assert summary.fresnel_f1_m == pytest.approx(
        midpoint_fresnel_radius_m(summary.distance_km, 5.5)
    )


# ===========================================================================
# Sample count
# ===========================================================================
@pytest.mark.parametrize(
    "path_m, samples, expected",
    [
        (100.0, None, 48),  # 6 + 36 below the floor
        (1_000.0, None, 96),  # 60 + 36
        (2_500.0, None, 186),
        (50_000.0, None, 360),  # ceiling
        (50_000.0, 10, 24),  # explicit floor
        (100.0, 100, 100),
        (100.0, 5_000, 360),
    ],
)
def test_sample_count(path_m, samples, expected):
    assert fresnel_sample_count(path_m, samples) == expected


# ===========================================================================
# build_fresnel_polygon
# ===========================================================================
def test_polygon_is_closed_ring_with_distinct_vertices():
    polygon = build_fresnel_polygon(A, B, 5.0)

    assert not polygon.is_empty
    assert polygon.is_closed
    assert polygon.vertices[0] == polygon.vertices[-1]
    assert len(set(polygon.vertices)) >= 3


def test_polygon_starts_at_a_and_passes_through_b():
    polygon = build_fresnel_polygon(A, B, 5.0)
    n = fresnel_sample_count(distance_km(12.0, 77.0, 12.1, 77.1) * 1000)

    assert polygon.vertices[0] == (A.latitude, A.longitude)
    assert polygon.vertices[n] == (B.latitude, B.longitude)
    # left side n+1, right side interior n-1, closing vertex 1
    assert len(polygon) == 2 * n + 1


def test_polygon_sample_override():
    polygon = build_fresnel_polygon(A, B, 5.0, samples=30)
    assert len(polygon) == 2 * 30 + 1


def test_polygon_is_deterministic():
    assert build_fresnel_polygon(A, B, 5.0) == build_fresnel_polygon(A, B, 5.0)


def test_polygon_width_matches_midpoint_radius():
    n = 100
    polygon = build_fresnel_polygon(A, B, 5.0, samples=n)
    left_mid = polygon.vertices[n // 2]
    right_mid = polygon.vertices[n + n // 2]
    width_km = distance_km(left_mid[0], left_mid[1], right_mid[0], right_mid[1])

    expected_m = 2 * midpoint_fresnel_radius_m(distance_km(12.0, 77.0, 12.1, 77.1), 5.0)
    assert width_km * 1000 == pytest.approx(expected_m, rel=0.02)


def test_polygon_sides_do_not_cross_centerline():
    n = 60
    polygon = build_fresnel_polygon(A, B, 5.0, samples=n)
    m_lon = meters_per_degree_longitude((A.latitude + B.latitude) / 2)
    ax = (B.longitude - A.longitude) * m_lon
    ay = (B.latitude - A.latitude) * METERS_PER_DEGREE_LATITUDE

    def side(vertex):
        vx = (vertex[1] - A.longitude) * m_lon
        vy = (vertex[0] - A.latitude) * METERS_PER_DEGREE_LATITUDE
        return ax * vy - ay * vx

    left = polygon.vertices[1:n]
    right = polygon.vertices[n + 1 : -1]
    assert all(side(v) > 0 for v in left)
    assert all(side(v) < 0 for v in right)


def test_polygon_at_the_pole_stays_finite():
    polygon = build_fresnel_polygon(
        GeoPoint(latitude=89.99, longitude=0.0),
        GeoPoint(latitude=89.99, longitude=180.0),
        5.0,
    )
    assert all(math.isfinite(lat) and math.isfinite(lng) for lat, lng in polygon.vertices)


@pytest.mark.parametrize(
    "a, b, freq",
    [
        (None, B, 5.0),
        (A, None, 5.0),
        (A, A, 5.0),
        (A, B, 0.0),
        (A, B, float("nan")),
        (GeoPoint.model_construct(latitude=float("nan"), longitude=77.0), B, 5.0),
        (A, GeoPoint.model_construct(latitude=12.1, longitude=float("inf")), 5.0),
    ],
)
def test_polygon_degenerate_inputs_are_empty(a, b, freq):
    polygon = build_fresnel_polygon(a, b, freq)
    assert polygon.is_empty
    assert polygon == FresnelPolygon.empty()


def test_polygon_value_object_rejects_open_ring():
    with pytest.raises(ValueError, match="not closed"):
        FresnelPolygon(vertices=((0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)))
