"""Coverage Bounded Context - Domain Services.

Idealized first Fresnel zone geometry. No terrain diffraction, multipath or
atmospheric refraction: the zone is the textbook ellipsoid cross-section

    r(x) = sqrt(lambda * x * (D - x) / D)

evaluated along a straight path in a local tangent plane.
"""

from __future__ import annotations

import math

from domain.coverage.value_objects import FresnelPolygon, LatLng, LinkSummary
from domain.terrain.services import (
    METERS_PER_DEGREE_LATITUDE,
    distance_km,
    safe_meters_per_degree_longitude,
)
from domain.terrain.value_objects import GeoPoint

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SPEED_OF_LIGHT_M_S = 3e8

# Adaptive sampling of the polygon boundary (samples per side)
MIN_AUTO_SAMPLES = 48
MAX_SAMPLES = 360
MIN_EXPLICIT_SAMPLES = 24
SAMPLES_PER_KM = 60
SAMPLES_OFFSET = 36

# Constant of the legacy closed form 17.32 * sqrt(d1*d2 / (f*d)), km and GHz
LEGACY_FRESNEL_CONSTANT = 17.32


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Radius formulas
# ---------------------------------------------------------------------------
def wavelength_m(freq_ghz: float) -> float:
    """Free-space wavelength in meters for a frequency in GHz."""
    if not math.isfinite(freq_ghz) or freq_ghz <= 0:
        raise ValueError(f"Frequency must be positive, got {freq_ghz}")
    return SPEED_OF_LIGHT_M_S / (freq_ghz * 1e9)


def fresnel_radius_m(
    total_path_m: float, distance_from_a_m: float, freq_ghz: float
) -> float:
    """First Fresnel-zone radius at distance x from endpoint A.

    Returns 0 when D <= 0, x <= 0 or x >= D: the zone pinches to nothing at
    the transmitter and the receiver. A non-positive frequency also yields 0.
    """
    d = total_path_m
    x = distance_from_a_m
    if not (d > 0) or not (x > 0) or x >= d:
        return 0.0
    if not math.isfinite(freq_ghz) or freq_ghz <= 0:
        return 0.0
    return math.sqrt(wavelength_m(freq_ghz) * x * (d - x) / d)


def midpoint_fresnel_radius_m(distance_km_: float, freq_ghz: float) -> float:
    """Radius at mid-path, i.e. the widest point of the zone."""
    d = distance_km_ * 1000
    if not (d > 0):
        return 0.0
    return fresnel_radius_m(d, d / 2, freq_ghz)


def legacy_fresnel_zone_m(distance_km_: float, freq_ghz: float) -> float:
    """Closed-form mid-path radius, 17.32 * sqrt(d1*d2 / (f*d)).

    Same formula as midpoint_fresnel_radius_m() with sqrt(300) rounded to
    17.32, kept for labels that must match previously published figures.
    """
    if not (distance_km_ > 0) or not (freq_ghz > 0):
        return 0.0
    d1 = d2 = distance_km_ / 2
    return LEGACY_FRESNEL_CONSTANT * math.sqrt((d1 * d2) / (freq_ghz * distance_km_))


def summarize_link(
    a: GeoPoint, b: GeoPoint, freq_a_ghz: float, freq_b_ghz: float
) -> LinkSummary:
    """Distance, mean frequency and mid-path F1 radius for a link."""
    dist = distance_km(a.latitude, a.longitude, b.latitude, b.longitude)
    freq = (freq_a_ghz + freq_b_ghz) / 2
    return LinkSummary(
        distance_km=dist,
        freq_ghz=freq,
        fresnel_f1_m=midpoint_fresnel_radius_m(dist, freq),
    )


# ---------------------------------------------------------------------------
# Polygon builder
# ---------------------------------------------------------------------------
def fresnel_sample_count(path_m: float, samples: int | float | None = None) -> int:
    """Boundary samples per side for a path of the given length.

    Automatic: 60 per km plus 36, clamped to [48, 360]. An explicit count
    overrides it but is still clamped to [24, 360].
    """
    if samples and math.isfinite(samples):
        return max(MIN_EXPLICIT_SAMPLES, min(MAX_SAMPLES, _round_half_up(samples)))
    auto = _round_half_up((path_m / 1000) * SAMPLES_PER_KM) + SAMPLES_OFFSET
    return max(MIN_AUTO_SAMPLES, min(MAX_SAMPLES, auto))


def _is_finite_point(point: GeoPoint) -> bool:
    return math.isfinite(point.latitude) and math.isfinite(point.longitude)


def build_fresnel_polygon(
    a: GeoPoint | None,
    b: GeoPoint | None,
    freq_ghz: float,
    samples: int | None = None,
) -> FresnelPolygon:
    """Build the closed Fresnel envelope polygon around the link A -> B.

    The direction of A -> B is taken in a tangent plane at the link's mid
    latitude; the zone width is laid out along its perpendicular. The left
    boundary walks A -> B offset by +r(t), the right boundary walks back
    B -> A offset by -r(t). Both boundaries meet at A and B where r = 0, so
    the right boundary contributes only its interior vertices and the ring
    is closed by repeating A.

    Degenerate input (missing endpoint, non-finite coordinate or frequency,
    zero-length path) returns an empty polygon instead of raising.

    Args:
        a: Endpoint A
        b: Endpoint B
        freq_ghz: Link frequency in GHz
        samples: Optional boundary sample override (clamped to [24, 360])

    Returns:
        FresnelPolygon, deterministic for identical inputs
    """
    if a is None or b is None:
        return FresnelPolygon.empty()
    if not _is_finite_point(a) or not _is_finite_point(b):
        return FresnelPolygon.empty()
    if not math.isfinite(freq_ghz) or freq_ghz <= 0:
        return FresnelPolygon.empty()

    path_m = distance_km(a.latitude, a.longitude, b.latitude, b.longitude) * 1000
    if not (path_m > 0):
        return FresnelPolygon.empty()

    mid_lat = (a.latitude + b.latitude) / 2
    m_lon = safe_meters_per_degree_longitude(mid_lat)
    d_east = (b.longitude - a.longitude) * m_lon
    d_north = (b.latitude - a.latitude) * METERS_PER_DEGREE_LATITUDE

    length = math.hypot(d_east, d_north)
    if not math.isfinite(length) or length == 0:
        return FresnelPolygon.empty()

    # Unit vector along the path and its left-hand perpendicular (east, north)
    ux = d_east / length
    uy = d_north / length
    px = -uy
    py = ux

    n = fresnel_sample_count(path_m, samples)

    def _vertex(i: int, side: float) -> LatLng:
        t = i / n
        r = fresnel_radius_m(path_m, t * path_m, freq_ghz) * side
        base_lat = a.latitude * (1 - t) + b.latitude * t
        base_lng = a.longitude * (1 - t) + b.longitude * t
        return (
            base_lat + (py * r) / METERS_PER_DEGREE_LATITUDE,
            base_lng + (px * r) / m_lon,
        )

    left = [_vertex(i, 1.0) for i in range(n + 1)]
    right = [_vertex(i, -1.0) for i in range(n - 1, 0, -1)]

    ring = [v for v in left + right if math.isfinite(v[0]) and math.isfinite(v[1])]
    if len(set(ring)) < 3:
        return FresnelPolygon.empty()
    ring.append(ring[0])
    return FresnelPolygon(vertices=tuple(ring))
