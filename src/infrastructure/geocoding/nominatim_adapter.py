"""Nominatim adapter for GeocodingRepository.

Calls the public (or a self-hosted) Nominatim `/reverse` endpoint with
`format=jsonv2`. Every kind of failure is reported as GeocodingError:

- transport errors and timeouts (httpx.HTTPError)
- non-2xx status codes
- bodies that are not a JSON object, or whose place fields have the wrong type
- provider-reported errors, e.g. {"error": "Unable to geocode"} over open water
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from application.settings import PlannerSettings
from domain.siting.errors import GeocodingError
from domain.siting.value_objects import PlaceDescription

logger = logging.getLogger(__name__)


class NominatimGeocodingAdapter:
    """Reverse geocoding through Nominatim.

    Parameters
    ----------
    client: httpx.AsyncClient | None
        Shared client to use. When omitted the adapter creates (and owns)
        one configured from settings.
    settings: PlannerSettings | None
        Endpoint, headers and timeout.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: PlannerSettings | None = None,
    ) -> None:
        self.settings = settings or PlannerSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.settings.http_timeout_s)
        self._url = self.settings.nominatim_url.rstrip("/") + "/reverse"

    async def reverse(self, latitude: float, longitude: float) -> PlaceDescription:
        params = {"format": "jsonv2", "lat": f"{latitude}", "lon": f"{longitude}"}
        headers = {
            "Accept-Language": self.settings.accept_language,
            "User-Agent": self.settings.user_agent,
        }
        try:
            response = await self._client.get(self._url, params=params, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise GeocodingError(f"Nominatim request failed: {e}") from e
        except ValueError as e:
            raise GeocodingError("Nominatim returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise GeocodingError("Nominatim returned an unexpected payload")
        if payload.get("error"):
            raise GeocodingError(f"Nominatim: {payload['error']}")

        try:
            description = PlaceDescription(
                display_name=payload.get("display_name") or None,
                address=_string_fields(payload.get("address")),
                category=payload.get("category"),
                place_type=payload.get("type"),
            )
        except ValidationError as e:
            raise GeocodingError(f"Nominatim returned a malformed place: {e}") from e

        logger.debug("Reverse geocoded (%.6f, %.6f)", latitude, longitude)
        return description

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "NominatimGeocodingAdapter":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _string_fields(address: Any) -> dict[str, str]:
    if not isinstance(address, dict):
        return {}
    return {str(k): str(v) for k, v in address.items() if v is not None}
