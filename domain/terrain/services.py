"""Terrain Bounded Context - Domain Services.

Pure domain logic for terrain calculations: great-circle distance, the local
tangent-plane scaling used to turn degrees into meters, linear path
interpolation and elevation sampling.

NO I/O operations - elevation data comes from infrastructure adapters via
the ElevationRepository port.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from pydantic import ValidationError
from pyproj import Geod

from domain.terrain.errors import InvalidProfileError, PointOutOfBoundsError
from domain.terrain.value_objects import (
    ElevationProfile,
    ElevationSample,
    GeoPoint,
    TerrainGrid,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
EARTH_RADIUS_KM = 6371.0  # Spherical Earth for haversine
METERS_PER_DEGREE_LATITUDE = 111320.0
MIN_METERS_PER_DEGREE_LONGITUDE = 1e-6  # Below this we are effectively at a pole
COORDINATE_KEY_PRECISION = 6  # Decimal digits in place-name cache keys

# WGS84 ellipsoid for geodesic calculations (same as GPS, EPSG:4326)
_geod = Geod(ellps="WGS84")


# ---------------------------------------------------------------------------
# Great-circle distance
# ---------------------------------------------------------------------------
def distance_km(lat_a: float, lng_a: float, lat_b: float, lng_b: float) -> float:
    """Great-circle distance in kilometers (haversine, R = 6371 km).

    The haversine term is clamped to [0, 1] before the inverse sine so
    rounding near identical or antipodal points cannot produce NaN.
    """
    phi_a = math.radians(lat_a)
    phi_b = math.radians(lat_b)
    d_phi = math.radians(lat_b - lat_a)
    d_lambda = math.radians(lng_b - lng_a)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi_a) * math.cos(phi_b) * math.sin(d_lambda / 2) ** 2
    )
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def geodesic_distance(start: GeoPoint, end: GeoPoint) -> float:
    """Distance between two points in meters on the WGS84 ellipsoid."""
    _, _, distance = _geod.inv(
        start.longitude, start.latitude, end.longitude, end.latitude
    )
    return float(abs(distance))


# ---------------------------------------------------------------------------
# Tangent-plane projection
# ---------------------------------------------------------------------------
def meters_per_degree_longitude(latitude_deg: float) -> float:
    """Length of one degree of longitude at the given latitude.

    Degenerates toward 0 near the poles; use
    safe_meters_per_degree_longitude() before dividing by it.
    """
    return METERS_PER_DEGREE_LATITUDE * abs(math.cos(math.radians(latitude_deg)))


def safe_meters_per_degree_longitude(latitude_deg: float) -> float:
    """Divisor-safe variant: falls back to the latitude constant at the poles."""
    value = meters_per_degree_longitude(latitude_deg)
    if not math.isfinite(value) or value < MIN_METERS_PER_DEGREE_LONGITUDE:
        return METERS_PER_DEGREE_LATITUDE
    return value


# ---------------------------------------------------------------------------
# Path interpolation
# ---------------------------------------------------------------------------
def interpolate(a: GeoPoint, b: GeoPoint, t: float) -> GeoPoint:
    """Linear interpolation in lat/lng space.

    Not a geodesic; good enough for the short and medium links this planner
    deals with. t=0 returns exactly `a` and t=1 exactly `b`.
    """
    if not (0.0 <= t <= 1.0):
        raise ValueError(f"t must be in [0, 1], got {t}")
    return GeoPoint(
        latitude=a.latitude * (1 - t) + b.latitude * t,
        longitude=a.longitude * (1 - t) + b.longitude * t,
    )


def path_points(start: GeoPoint, end: GeoPoint, segments: int) -> list[GeoPoint]:
    """Return segments + 1 evenly spaced points from start to end inclusive."""
    if segments < 1:
        raise ValueError(f"segments must be >= 1, got {segments}")
    return [interpolate(start, end, i / segments) for i in range(segments + 1)]


def coordinate_key(
    latitude: float, longitude: float, precision: int = COORDINATE_KEY_PRECISION
) -> str:
    """Stable cache key for a coordinate, e.g. "12.000000,77.000000"."""
    return f"{latitude:.{precision}f},{longitude:.{precision}f}"


# ---------------------------------------------------------------------------
# Elevation sampling
# ---------------------------------------------------------------------------
def sample_elevation(grid: TerrainGrid, point: GeoPoint) -> tuple[float, bool]:
    """Bilinear elevation at an arbitrary point using the 4 nearest pixels.

    Returns (elevation, is_nodata). If any of the 4 neighbors is NaN the
    result is (NaN, True).

    Points exactly on grid boundaries use clamped indices, so bilinear
    degrades to linear on edges and to nearest on corners.

    Raises:
        PointOutOfBoundsError: point lies outside grid.bounds
    """
    if not grid.bounds.contains(point):
        raise PointOutOfBoundsError(point, grid.bounds)

    # Row 0 = north edge (max_y), so y is inverted
    px = (point.longitude - grid.bounds.min_x) / grid.resolution[0]
    py = (grid.bounds.max_y - point.latitude) / grid.resolution[1]

    height, width = grid.data.shape

    x0 = max(0, min(int(math.floor(px)), width - 1))
    y0 = max(0, min(int(math.floor(py)), height - 1))
    x1 = max(0, min(x0 + 1, width - 1))
    y1 = max(0, min(y0 + 1, height - 1))

    q11 = float(grid.data[y0, x0])  # top-left
    q21 = float(grid.data[y0, x1])  # top-right
    q12 = float(grid.data[y1, x0])  # bottom-left
    q22 = float(grid.data[y1, x1])  # bottom-right

    if math.isnan(q11) or math.isnan(q21) or math.isnan(q12) or math.isnan(q22):
        return (float("nan"), True)

    fx = px - math.floor(px)
    fy = py - math.floor(py)

    elevation = (
        q11 * (1 - fx) * (1 - fy)
        + q21 * fx * (1 - fy)
        + q12 * (1 - fx) * fy
        + q22 * fx * fy
    )
    return (float(elevation), False)


def build_elevation_profile(
    points: Sequence[GeoPoint],
    elevations: Sequence[float],
    source: str = "unknown",
) -> ElevationProfile:
    """Pair path points with provider elevations into an ElevationProfile.

    Distances are measured from the first point on the WGS84 ellipsoid.
    Non-finite elevations are recorded as NoData samples.

    Raises:
        InvalidProfileError: fewer than 2 points, length mismatch, or a
            zero-length path, or samples that do not form a valid profile
    """
    if len(points) < 2:
        raise InvalidProfileError(f"Need at least 2 points, got {len(points)}")
    if len(points) != len(elevations):
        raise InvalidProfileError(
            f"Got {len(elevations)} elevations for {len(points)} points"
        )
    start = points[0]
    if start == points[-1]:
        raise InvalidProfileError("Start equals end")

    samples: list[ElevationSample] = []
    for i, (point, elevation) in enumerate(zip(points, elevations)):
        distance = 0.0 if i == 0 else geodesic_distance(start, point)
        is_nodata = not math.isfinite(elevation)
        samples.append(
            ElevationSample(
                distance_m=distance,
                elevation_m=float("nan") if is_nodata else float(elevation),
                point=point,
                is_nodata=is_nodata,
            )
        )

    try:
        return ElevationProfile(
            start=start, end=points[-1], samples=tuple(samples), source=source
        )
    except ValidationError as e:
        # e.g. endpoints a few ulps apart collapse to equal sample distances
        raise InvalidProfileError(f"Degenerate elevation profile: {e}") from e
