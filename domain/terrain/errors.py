"""Terrain Bounded Context - Error Hierarchy.

Custom exceptions for terrain operations: DEM loading, elevation lookups
and profile construction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.terrain.value_objects import BoundingBox, GeoPoint


class TerrainError(Exception):
    """Base error for terrain operations."""


class InvalidRasterError(TerrainError):
    """File is not a valid raster, wrong format, or corrupted."""


class MissingCRSError(TerrainError):
    """Raster has no CRS defined."""


class AllNoDataError(TerrainError):
    """Raster contains 100% NoData pixels - unusable."""


class InvalidBoundsError(TerrainError):
    """Raster bounds are outside valid WGS84 range after reprojection."""


# ---------------------------------------------------------------------------
# Elevation lookup errors
# ---------------------------------------------------------------------------
class ElevationLookupError(TerrainError):
    """An elevation provider could not answer a lookup.

    Raised for transport failures, non-success responses and malformed
    payloads alike; callers treat it as "no profile available".
    """


class PointOutOfBoundsError(ElevationLookupError):
    """Point is outside the terrain grid bounds.

    Attributes:
        point: The offending GeoPoint
        bounds: The grid's BoundingBox
    """

    def __init__(self, point: "GeoPoint", bounds: "BoundingBox") -> None:
        self.point = point
        self.bounds = bounds
        super().__init__(
            f"Point ({point.latitude:.6f}, {point.longitude:.6f}) outside bounds "
            f"[lat: {bounds.min_y:.6f} to {bounds.max_y:.6f}, "
            f"lon: {bounds.min_x:.6f} to {bounds.max_x:.6f}]"
        )


class InvalidProfileError(TerrainError):
    """Profile parameters are invalid."""
