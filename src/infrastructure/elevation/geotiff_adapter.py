"""GeoTIFF adapter for ElevationRepository.

Offline elevation provider backed by a single-band DEM. The raster is
loaded once, lazily, and normalized to EPSG:4326:

1) Open dataset with context manager (rasterio.open) inside rasterio.Env
2) Validate band count, CRS and geotransform
3) Reproject through a WarpedVRT when the source CRS is not WGS84
4) Convert nodata -> np.nan as float32; reject all-NoData rasters
5) Derive bounds and resolution from the affine transform
6) Exit contexts to release GDAL handles, keep the TerrainGrid

Lookups are answered by bilinear interpolation on the grid.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np
import rasterio
from affine import Affine
from rasterio.crs import CRS
from rasterio.enums import Resampling
from rasterio.errors import RasterioError
from rasterio.vrt import WarpedVRT

from domain.terrain.errors import (
    AllNoDataError,
    ElevationLookupError,
    InvalidBoundsError,
    InvalidRasterError,
    MissingCRSError,
    TerrainError,
)
from domain.terrain.services import sample_elevation
from domain.terrain.value_objects import BoundingBox, GeoPoint, TerrainGrid

logger = logging.getLogger(__name__)

_TARGET_CRS = CRS.from_epsg(4326)


def _grid_from_dataset(dataset: Any, source_crs: str) -> TerrainGrid:
    transform: Affine = dataset.transform
    if not isinstance(transform, Affine):
        raise InvalidRasterError("Missing affine transform")
    if not all(math.isfinite(v) for v in transform[:6]):
        raise InvalidRasterError("Invalid (NaN/Inf) transform values")
    if transform.a == 0 or transform.e == 0:
        raise InvalidRasterError("Invalid transform scale (zero)")

    masked = dataset.read(1, masked=True, out_dtype="float32")
    data = np.ma.filled(masked, np.float32(np.nan)).astype(np.float32, copy=False)
    if dataset.nodata is not None and not np.isnan(dataset.nodata):
        # Exact match: GeoTIFF stores nodata as an exact value
        data = np.where(data == dataset.nodata, np.float32(np.nan), data)
    if np.isnan(data).all():
        raise AllNoDataError("Raster contains 100% NoData pixels - unusable")

    height, width = data.shape
    west, north = transform * (0, 0)
    east, south = transform * (width, height)
    try:
        bounds = BoundingBox(
            min_x=min(west, east),
            min_y=min(north, south),
            max_x=max(west, east),
            max_y=max(north, south),
        )
    except ValueError as e:
        raise InvalidBoundsError(str(e)) from e

    return TerrainGrid(
        data=data,
        bounds=bounds,
        resolution=(abs(transform.a), abs(transform.e)),
        source_crs=source_crs,
    )


class GeoTiffElevationAdapter:
    """Elevation lookups from a local GeoTIFF DEM.

    Parameters
    ----------
    file_path: Path | str
        The DEM. Must be a single-band .tif/.tiff with a CRS.
    """

    name = "geotiff"

    def __init__(self, file_path: Path | str) -> None:
        self.path = Path(file_path)
        self._grid: TerrainGrid | None = None

    def load_dem(self) -> TerrainGrid:
        """Load (once) and return the DEM as a TerrainGrid in EPSG:4326."""
        if self._grid is not None:
            return self._grid

        path = self.path
        if not path.exists():
            raise FileNotFoundError(str(path))
        if path.suffix.lower() not in (".tif", ".tiff"):
            raise InvalidRasterError(f"Unsupported file extension: {path.suffix}")
        if path.stat().st_size == 0:
            raise InvalidRasterError("Empty file")

        try:
            with rasterio.Env():
                with rasterio.open(path) as src:
                    if src.count != 1:
                        raise InvalidRasterError(f"Expected 1 band, got {src.count}")
                    if src.crs is None:
                        raise MissingCRSError("Raster has no CRS defined")
                    source_crs = src.crs.to_string()

                    if src.crs == _TARGET_CRS:
                        grid = _grid_from_dataset(src, source_crs)
                    else:
                        with WarpedVRT(
                            src, crs=_TARGET_CRS, resampling=Resampling.bilinear
                        ) as vrt:
                            grid = _grid_from_dataset(vrt, source_crs)
                        logger.info(
                            "DEM %s: Reprojected from %s to EPSG:4326",
                            path.name,
                            source_crs,
                        )
        except RasterioError as e:
            raise InvalidRasterError(f"Corrupted or invalid raster: {e}") from e

        height, width = grid.data.shape
        nodata_pct = float(np.isnan(grid.data).mean() * 100.0)
        if nodata_pct > 80.0:
            logger.warning("DEM %s: %.1f%% NoData pixels detected", path.name, nodata_pct)
        # Log only the filename, not the full path
        logger.debug("DEM %s: Loaded %dx%d grid", path.name, width, height)

        self._grid = grid
        return grid

    async def lookup(self, points: Sequence[GeoPoint]) -> tuple[float, ...]:
        """Bilinear elevations; NoData pixels come back as NaN.

        Raises:
            PointOutOfBoundsError: a point lies outside the DEM
            ElevationLookupError: the DEM cannot be loaded
        """
        grid = self._grid
        if grid is None:
            try:
                grid = await asyncio.to_thread(self.load_dem)
            except (TerrainError, OSError) as e:
                raise ElevationLookupError(f"DEM {self.path.name} unavailable: {e}") from e
        elevations = []
        for point in points:
            elevation, is_nodata = sample_elevation(grid, point)
            elevations.append(math.nan if is_nodata else elevation)
        return tuple(elevations)
