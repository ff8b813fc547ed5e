"""Tests for elevation sampling and ElevationProfile construction.

TerrainGrids are created directly with numpy arrays to keep domain tests
free of infrastructure dependencies (rasterio).

Grid Bounds Reference:
- Standard bounds: lat [-25, -15], lon [-50, -40], resolution 0.1 degrees
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from domain.terrain.errors import InvalidProfileError, PointOutOfBoundsError
from domain.terrain.services import (
    build_elevation_profile,
    geodesic_distance,
    path_points,
    sample_elevation,
)
from domain.terrain.value_objects import (
    BoundingBox,
    ElevationSample,
    GeoPoint,
    TerrainGrid,
)

STANDARD_BOUNDS = BoundingBox(min_x=-50.0, max_x=-40.0, min_y=-25.0, max_y=-15.0)


# ---------------------------------------------------------------------------
# Test Fixture Helpers - Create TerrainGrids directly (no I/O)
# ---------------------------------------------------------------------------
def create_constant_grid(value: float = 150.0) -> TerrainGrid:
    data = np.full((100, 100), value, dtype=np.float32)
    return TerrainGrid(data=data, bounds=STANDARD_BOUNDS, resolution=(0.1, 0.1))


def create_east_half_nodata_grid() -> TerrainGrid:
    """West half 150 m, east half (lon > -45) NoData."""
    data = np.full((100, 100), 150.0, dtype=np.float32)
    data[:, 50:] = np.nan
    return TerrainGrid(data=data, bounds=STANDARD_BOUNDS, resolution=(0.1, 0.1))


def create_column_gradient_grid() -> TerrainGrid:
    """Elevation equals 10 m per column index."""
    data = np.tile(np.arange(100, dtype=np.float32) * 10, (100, 1))
    return TerrainGrid(data=data, bounds=STANDARD_BOUNDS, resolution=(0.1, 0.1))


# ===========================================================================
# TerrainGrid
# ===========================================================================
def test_grid_data_is_read_only_copy():
    source = np.zeros((10, 10), dtype=np.float32)
    grid = TerrainGrid(
        data=source,
        bounds=STANDARD_BOUNDS,
        resolution=(1.0, 1.0),
    )
    assert not grid.data.flags.writeable
    assert source.flags.writeable


def test_grid_rejects_all_nodata():
    with pytest.raises(ValueError, match="100% NoData"):
        TerrainGrid(
            data=np.full((5, 5), np.nan, dtype=np.float32),
            bounds=STANDARD_BOUNDS,
            resolution=(1.0, 1.0),
        )


# ===========================================================================
# sample_elevation
# ===========================================================================
def test_sample_constant_grid():
    elevation, is_nodata = sample_elevation(
        create_constant_grid(), GeoPoint(latitude=-20.0, longitude=-45.0)
    )
    assert not is_nodata
    assert elevation == pytest.approx(150.0)


def test_sample_interpolates_between_columns():
    grid = create_column_gradient_grid()
    # Halfway between column 10 (100 m) and column 11 (110 m)
    elevation, _ = sample_elevation(grid, GeoPoint(latitude=-20.0, longitude=-48.95))
    assert elevation == pytest.approx(105.0, abs=1e-3)


def test_sample_nodata_region_flagged():
    elevation, is_nodata = sample_elevation(
        create_east_half_nodata_grid(), GeoPoint(latitude=-20.0, longitude=-42.0)
    )
    assert is_nodata
    assert math.isnan(elevation)


def test_sample_out_of_bounds_raises():
    point = GeoPoint(latitude=0.0, longitude=0.0)
    with pytest.raises(PointOutOfBoundsError) as exc_info:
        sample_elevation(create_constant_grid(), point)
    assert exc_info.value.point == point


# ===========================================================================
# build_elevation_profile
# ===========================================================================
def test_profile_from_path_points():
    start = GeoPoint(latitude=12.0, longitude=77.0)
    end = GeoPoint(latitude=12.1, longitude=77.1)
    points = path_points(start, end, 20)
    elevations = [900.0 + i for i in range(21)]

    profile = build_elevation_profile(points, elevations, source="test")

    assert len(profile.samples) == 21
    assert profile.start == start
    assert profile.end == end
    assert profile.samples[0].distance_m == 0
    assert profile.total_distance_m == pytest.approx(geodesic_distance(start, end))
    assert profile.elevations()[-1] == 920.0
    assert profile.distances()[-1] == pytest.approx(profile.total_distance_m)
    assert profile.source == "test"
    assert not profile.has_nodata


def test_profile_marks_nan_as_nodata():
    start = GeoPoint(latitude=0.0, longitude=0.0)
    end = GeoPoint(latitude=0.0, longitude=0.01)
    points = path_points(start, end, 2)

    profile = build_elevation_profile(points, [1.0, float("nan"), 3.0])

    assert profile.has_nodata
    assert profile.samples[1].is_nodata


def test_profile_length_mismatch_raises():
    start = GeoPoint(latitude=0.0, longitude=0.0)
    end = GeoPoint(latitude=0.0, longitude=0.01)
    with pytest.raises(InvalidProfileError):
        build_elevation_profile(path_points(start, end, 4), [1.0, 2.0])


def test_profile_zero_length_path_raises():
    point = GeoPoint(latitude=5.0, longitude=5.0)
    with pytest.raises(InvalidProfileError, match="Start equals end"):
        build_elevation_profile([point, point], [1.0, 1.0])


def test_sample_nodata_consistency_enforced():
    with pytest.raises(ValueError):
        ElevationSample(
            distance_m=0.0,
            elevation_m=12.0,
            point=GeoPoint(latitude=0, longitude=0),
            is_nodata=True,
        )


def test_profile_repeated_point_raises_profile_error():
    # Endpoints a few ulps apart interpolate to repeated path points
    start = GeoPoint(latitude=12.0, longitude=77.0)
    end = GeoPoint(latitude=12.0, longitude=77.0 + 7e-14)

    with pytest.raises(InvalidProfileError, match="Degenerate"):
        build_elevation_profile([start, start, end], [100.0, 100.0, 100.0])
