"""Domain Port(s) for Siting I/O.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from typing import Protocol

from .value_objects import PlaceDescription


class GeocodingRepository(Protocol):
    """Port for reverse geocoding a coordinate.

    Implementations live in infrastructure (e.g., Nominatim adapter).
    """

    async def reverse(self, latitude: float, longitude: float) -> PlaceDescription:
        """Describe what is at (latitude, longitude).

        Any non-success response, transport failure or provider-reported
        error raises GeocodingError; there is no "empty" success.
        """
        ...
