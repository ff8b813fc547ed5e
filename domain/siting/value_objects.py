"""Siting Bounded Context - Value Objects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PlaceDescription(BaseModel):
    """What a reverse geocoder says is at a coordinate.

    Mirrors the useful subset of a Nominatim jsonv2 response.
    """

    display_name: str | None = None
    address: dict[str, str] = Field(default_factory=dict)
    category: str | None = None  # e.g. "natural", "place", "highway"
    place_type: str | None = None  # e.g. "water", "bay", "village"

    model_config = ConfigDict(frozen=True)


class PlacementVerdict(BaseModel):
    """Outcome of the land/water classification."""

    is_water: bool
    reason: str
    matched_keyword: str | None = None

    model_config = ConfigDict(frozen=True)
