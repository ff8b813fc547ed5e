"""Siting Bounded Context - Entities.

Tower is the only mutable entity (its frequency can be edited). Link
identity is the unordered pair of endpoint ids, normalized to a canonical
LinkKey so "A-B" and "B-A" can never diverge in any cache.
"""

from __future__ import annotations

import math
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.siting.errors import InvalidCacheKeyError
from domain.terrain.services import coordinate_key
from domain.terrain.value_objects import GeoPoint

DEFAULT_FREQUENCY_GHZ = 5.0
KEY_SEPARATOR = "-"

# Tower ids must not contain the key separator so pair keys stay parseable
TOWER_ID_PATTERN = r"^[^\s\-]+$"


def new_tower_id() -> str:
    return uuid4().hex


class Tower(BaseModel):
    """A radio tower placed on the map.

    Invariants:
        T-1: lat in [-90, 90], lng in [-180, 180]
        T-2: freq is finite and > 0 (GHz), also on reassignment
        T-3: id never changes
    """

    id: str = Field(default_factory=new_tower_id, pattern=TOWER_ID_PATTERN, frozen=True)
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    freq: float = Field(default=DEFAULT_FREQUENCY_GHZ, gt=0)

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("freq")
    @classmethod
    def _finite_freq(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError(f"freq must be finite, got {value}")
        return value

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(latitude=self.lat, longitude=self.lng)

    @property
    def coordinate_key(self) -> str:
        return coordinate_key(self.lat, self.lng)


class LinkKey(BaseModel):
    """Canonical identity of an unordered tower pair.

    Endpoint ids are stored sorted, so LinkKey.of("b", "a") == LinkKey.of("a", "b").
    The string form is "low-high".
    """

    low: str
    high: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def of(cls, a: str, b: str) -> "LinkKey":
        low, high = sorted((a, b))
        return cls(low=low, high=high)

    @classmethod
    def parse(cls, key: "str | LinkKey") -> "LinkKey":
        """Normalize a LinkKey or an "A-B" string (either ordering)."""
        if isinstance(key, LinkKey):
            return key
        if not isinstance(key, str):
            raise InvalidCacheKeyError(f"Link key must be a string, got {type(key).__name__}")
        parts = key.split(KEY_SEPARATOR)
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise InvalidCacheKeyError(f"Malformed link key: {key!r}")
        a, b = (p.strip() for p in parts)
        if a == b:
            raise InvalidCacheKeyError(f"Link key endpoints must differ: {key!r}")
        return cls.of(a, b)

    def involves(self, tower_id: str) -> bool:
        return tower_id in (self.low, self.high)

    def __str__(self) -> str:
        return f"{self.low}{KEY_SEPARATOR}{self.high}"


class Link(BaseModel):
    """A line-of-sight link. Direction is kept for display only."""

    from_id: str
    to_id: str

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> LinkKey:
        return LinkKey.of(self.from_id, self.to_id)

    def involves(self, tower_id: str) -> bool:
        return tower_id in (self.from_id, self.to_id)
