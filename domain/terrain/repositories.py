"""Domain Port(s) for Terrain I/O.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .value_objects import GeoPoint


class ElevationRepository(Protocol):
    """Port for looking up ground elevation at a sequence of points.

    Implementations live in infrastructure (Open-Elevation HTTP API, local
    GeoTIFF DEM).
    """

    name: str

    async def lookup(self, points: Sequence[GeoPoint]) -> tuple[float, ...]:
        """Return one elevation in meters per input point, in input order.

        NoData is reported as NaN. Any failure (transport, non-success
        response, malformed or length-mismatched payload) raises
        ElevationLookupError.
        """
        ...
