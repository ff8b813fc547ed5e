"""Open-Elevation adapter for ElevationRepository.

GET {base}/api/v1/lookup?locations=lat,lng|lat,lng|...

Expected response: {"results": [{"latitude": .., "longitude": .., "elevation": ..}, ...]}
with exactly one result per requested location, in request order.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

import httpx

from application.settings import PlannerSettings
from domain.terrain.errors import ElevationLookupError
from domain.terrain.value_objects import GeoPoint

logger = logging.getLogger(__name__)


class OpenElevationAdapter:
    name = "open-elevation"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: PlannerSettings | None = None,
    ) -> None:
        self.settings = settings or PlannerSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.settings.http_timeout_s)
        self._url = self.settings.open_elevation_url.rstrip("/") + "/api/v1/lookup"

    async def lookup(self, points: Sequence[GeoPoint]) -> tuple[float, ...]:
        if not points:
            return ()
        locations = "|".join(f"{p.latitude},{p.longitude}" for p in points)
        try:
            response = await self._client.get(
                self._url,
                params={"locations": locations},
                headers={"User-Agent": self.settings.user_agent},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise ElevationLookupError(f"Open-Elevation request failed: {e}") from e
        except ValueError as e:
            raise ElevationLookupError("Open-Elevation returned invalid JSON") from e

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise ElevationLookupError("Open-Elevation response has no results list")
        if len(results) != len(points):
            raise ElevationLookupError(
                f"Open-Elevation returned {len(results)} results for {len(points)} points"
            )

        elevations = tuple(_elevation_of(r) for r in results)
        logger.debug("Fetched %d elevations", len(elevations))
        return elevations

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "OpenElevationAdapter":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _elevation_of(result: Any) -> float:
    """Elevation in meters; a null elevation is NoData (NaN)."""
    if not isinstance(result, dict) or "elevation" not in result:
        raise ElevationLookupError(f"Malformed elevation result: {result!r}")
    value = result["elevation"]
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ElevationLookupError(f"Non-numeric elevation: {value!r}") from e
