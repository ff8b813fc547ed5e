"""Land/water gate run before a tower is committed to the store.

The gate fails closed: a failed lookup, a timeout or a provider error is
treated as water, never as land.
"""

from __future__ import annotations

import asyncio
import logging

from domain.siting.errors import GeocodingError, PlacementRejectedError
from domain.siting.placement import classify_place
from domain.siting.repositories import GeocodingRepository
from domain.siting.value_objects import PlaceDescription, PlacementVerdict

from .settings import PlannerSettings

logger = logging.getLogger(__name__)


class PlacementValidator:
    def __init__(
        self, geocoder: GeocodingRepository, settings: PlannerSettings | None = None
    ) -> None:
        self.geocoder = geocoder
        self.settings = settings or PlannerSettings()

    async def evaluate(
        self, lat: float, lng: float
    ) -> tuple[PlacementVerdict, PlaceDescription | None]:
        """Reverse geocode and classify, without raising on water."""
        try:
            description = await asyncio.wait_for(
                self.geocoder.reverse(lat, lng),
                timeout=self.settings.placement_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("Placement lookup timed out for (%.6f, %.6f)", lat, lng)
            return (
                PlacementVerdict(is_water=True, reason="location lookup timed out"),
                None,
            )
        except GeocodingError as e:
            logger.warning("Placement lookup failed for (%.6f, %.6f): %s", lat, lng, e)
            return (
                PlacementVerdict(is_water=True, reason="location could not be verified"),
                None,
            )
        return classify_place(description), description

    async def check(self, lat: float, lng: float) -> PlaceDescription:
        """Return the place description for a land coordinate.

        Raises:
            PlacementRejectedError: the coordinate is (or may be) water
        """
        verdict, description = await self.evaluate(lat, lng)
        if verdict.is_water or description is None:
            logger.warning(
                "Placement rejected at (%.6f, %.6f): %s", lat, lng, verdict.reason
            )
            raise PlacementRejectedError(
                lat, lng, f"{verdict.reason}; choose a point on land"
            )
        return description
