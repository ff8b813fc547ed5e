"""Infrastructure adapters for elevation lookups.

Two providers implement ElevationRepository: the Open-Elevation HTTP API
and a local GeoTIFF DEM for offline use.
"""

from .geotiff_adapter import GeoTiffElevationAdapter
from .open_elevation_adapter import OpenElevationAdapter

__all__ = ["GeoTiffElevationAdapter", "OpenElevationAdapter"]
