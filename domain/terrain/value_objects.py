"""Terrain Bounded Context - Value Objects.

Immutable data structures representing geographic concepts.
All validation occurs at construction time via Pydantic.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, model_validator


class BoundingBox(BaseModel):
    """Geographic extent in EPSG:4326 (Value Object).

    Invariants are enforced at construction time - invalid BoundingBox
    cannot be instantiated.
    """

    min_x: float  # Western boundary (longitude)
    min_y: float  # Southern boundary (latitude)
    max_x: float  # Eastern boundary (longitude)
    max_y: float  # Northern boundary (latitude)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_bounds(self) -> "BoundingBox":
        if not (-180 <= self.min_x <= 180):
            raise ValueError(f"min_x longitude out of range: {self.min_x}")
        if not (-180 <= self.max_x <= 180):
            raise ValueError(f"max_x longitude out of range: {self.max_x}")
        if not (-90 <= self.min_y <= 90):
            raise ValueError(f"min_y latitude out of range: {self.min_y}")
        if not (-90 <= self.max_y <= 90):
            raise ValueError(f"max_y latitude out of range: {self.max_y}")
        if not (self.min_x < self.max_x):
            raise ValueError(
                f"Invalid x ordering: min_x={self.min_x} >= max_x={self.max_x}"
            )
        if not (self.min_y < self.max_y):
            raise ValueError(
                f"Invalid y ordering: min_y={self.min_y} >= max_y={self.max_y}"
            )
        return self

    def contains(self, point: "GeoPoint") -> bool:
        """Inclusive containment test."""
        return (
            self.min_x <= point.longitude <= self.max_x
            and self.min_y <= point.latitude <= self.max_y
        )


class TerrainGrid(BaseModel):
    """Immutable elevation grid with geographic metadata (Value Object).

    Row 0 is the northern edge. NoData pixels are stored as NaN. The data
    array is frozen (read-only) at construction time.
    """

    data: NDArray[np.float32]  # 2D float32 array (height x width), read-only
    bounds: BoundingBox  # Geographic extent in EPSG:4326
    resolution: tuple[float, float]  # (x_res, y_res) absolute values in degrees
    source_crs: str | None = None  # CRS of the file before reprojection

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def validate_grid(self) -> "TerrainGrid":
        if self.data.ndim != 2:
            raise ValueError(f"Data must be 2D, got {self.data.ndim}D")
        if self.data.shape[0] == 0 or self.data.shape[1] == 0:
            raise ValueError(f"Data cannot be empty: {self.data.shape}")
        if self.resolution[0] <= 0 or self.resolution[1] <= 0:
            raise ValueError(f"Resolution must be positive: {self.resolution}")
        if np.isnan(self.data).all():
            raise ValueError("Grid contains 100% NoData")

        # Owned, contiguous float32 copy so callers' arrays are never frozen
        immutable = np.array(self.data, dtype=np.float32, copy=True, order="C")
        immutable.flags.writeable = False
        object.__setattr__(self, "data", immutable)
        return self


# ---------------------------------------------------------------------------
# GeoPoint
# ---------------------------------------------------------------------------
class GeoPoint(BaseModel):
    """Geographic coordinate in WGS84 (Value Object).

    Invariants:
        GP-1: latitude in [-90, 90]
        GP-2: longitude in [-180, 180]

    Pydantic frozen models compare by value, so two GeoPoints built from the
    same coordinates are equal and hash alike.
    """

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Elevation profile
# ---------------------------------------------------------------------------
class ElevationSample(BaseModel):
    """Single elevation sample along a link path (Value Object).

    Invariants:
        ES-1: distance_m >= 0
        ES-2: If is_nodata == True, then elevation_m is NaN
        ES-3: If is_nodata == False, then elevation_m is finite
    """

    distance_m: float = Field(ge=0)  # Distance from the path start in meters
    elevation_m: float  # Elevation at this point (NaN if nodata)
    point: GeoPoint
    is_nodata: bool = False

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_nodata_consistency(self) -> "ElevationSample":
        if self.is_nodata and not math.isnan(self.elevation_m):
            raise ValueError("is_nodata=True requires elevation_m=NaN")
        if not self.is_nodata and not math.isfinite(self.elevation_m):
            raise ValueError("is_nodata=False requires finite elevation_m")
        return self


class ElevationProfile(BaseModel):
    """Elevation samples at evenly spaced points between two link endpoints.

    Invariants:
        EP-1: len(samples) >= 2
        EP-2: samples[0].distance_m == 0
        EP-3: Samples strictly ordered by distance_m
        EP-4: samples[0].point == start and samples[-1].point == end
    """

    start: GeoPoint
    end: GeoPoint
    samples: tuple[ElevationSample, ...]
    source: str = "unknown"  # Provider name, for labels and audit

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_profile(self) -> "ElevationProfile":
        if len(self.samples) < 2:
            raise ValueError(f"Profile must have >= 2 samples, got {len(self.samples)}")
        if self.samples[0].distance_m != 0:
            raise ValueError(
                f"First sample must be at distance 0, got {self.samples[0].distance_m}"
            )
        for i in range(1, len(self.samples)):
            if self.samples[i].distance_m <= self.samples[i - 1].distance_m:
                raise ValueError("Samples must be strictly ordered by distance")
        if self.samples[0].point != self.start:
            raise ValueError("First sample point must equal start")
        if self.samples[-1].point != self.end:
            raise ValueError("Last sample point must equal end")
        return self

    @property
    def total_distance_m(self) -> float:
        return self.samples[-1].distance_m

    @property
    def has_nodata(self) -> bool:
        return any(s.is_nodata for s in self.samples)

    def elevations(self) -> tuple[float, ...]:
        """Return elevation values (may contain NaN)."""
        return tuple(s.elevation_m for s in self.samples)

    def distances(self) -> tuple[float, ...]:
        return tuple(s.distance_m for s in self.samples)
