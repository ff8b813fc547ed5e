"""Siting Bounded Context - LinkGraphStore aggregate.

The single owner of towers, links and every derived cache:
- Fresnel polygons keyed by LinkKey
- elevation profiles keyed by LinkKey
- place names keyed by rounded coordinate ("lat,lng", 6 decimals)

Mutations never suspend, so under a cooperative (asyncio) scheduler each
one is applied atomically. Cached values are rendering hints only; the
towers and links are the source of truth.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from domain.coverage.value_objects import FresnelPolygon
from domain.siting.entities import DEFAULT_FREQUENCY_GHZ, Link, LinkKey, Tower
from domain.siting.errors import (
    DuplicateLinkError,
    DuplicateTowerError,
    FrequencyMismatchError,
    InvalidCacheKeyError,
    SelfLinkError,
    TowerInUseError,
    UnknownTowerError,
)
from domain.terrain.value_objects import ElevationProfile

logger = logging.getLogger(__name__)

_COORDINATE_KEY_RE = re.compile(r"^-?\d+\.\d+,-?\d+\.\d+$")

LinkKeyLike = LinkKey | str


class GraphSnapshot(BaseModel):
    """Read-only copy of the store for the rendering collaborator."""

    towers: tuple[Tower, ...]
    links: tuple[Link, ...]
    fresnel_polygons: dict[str, FresnelPolygon]
    place_names: dict[str, str]
    elevation_profiles: dict[str, ElevationProfile]

    model_config = ConfigDict(frozen=True)


class LinkGraphStore:
    """Authoritative in-memory model of the tower/link graph.

    No other component mutates these collections; readers that need current
    state read through the store instead of holding private copies.
    """

    def __init__(self) -> None:
        self._towers: dict[str, Tower] = {}
        self._links: dict[LinkKey, Link] = {}
        self._fresnel: dict[LinkKey, FresnelPolygon] = {}
        self._elevations: dict[LinkKey, ElevationProfile] = {}
        self._places: dict[str, str] = {}

    # -----------------------------------------------------------------------
    # Towers
    # -----------------------------------------------------------------------
    def add_tower(
        self,
        lat: float,
        lng: float,
        freq: float = DEFAULT_FREQUENCY_GHZ,
        tower_id: str | None = None,
    ) -> Tower:
        """Create a tower with a fresh id (or the given one) and append it.

        Raises:
            DuplicateTowerError: tower_id is already taken
            pydantic.ValidationError: coordinate or frequency out of range
        """
        if tower_id is None:
            tower = Tower(lat=lat, lng=lng, freq=freq)
        else:
            if tower_id in self._towers:
                raise DuplicateTowerError(tower_id)
            tower = Tower(id=tower_id, lat=lat, lng=lng, freq=freq)
        self._towers[tower.id] = tower
        logger.info(
            "Tower %s added at (%.6f, %.6f) @ %s GHz", tower.id, lat, lng, tower.freq
        )
        return tower

    def remove_tower(self, tower_id: str, cascade: bool = False) -> list[Link]:
        """Delete a tower.

        By default a tower that still has links is protected: the call raises
        TowerInUseError and nothing changes. With cascade=True the attached
        links are removed first. Either way, no link, polygon or elevation
        entry referencing the tower survives, and its place name is dropped
        unless another tower sits on the same rounded coordinate.

        Returns:
            The links removed by the cascade (empty without cascade)
        """
        tower = self.require_tower(tower_id)
        attached = self.links_for_tower(tower_id)
        if attached and not cascade:
            raise TowerInUseError(tower_id, len(attached))

        for link in attached:
            self._drop_link(link.key)
        for cache in (self._fresnel, self._elevations):
            for key in [k for k in cache if k.involves(tower_id)]:
                del cache[key]

        del self._towers[tower_id]
        if not self.has_tower_at(tower.coordinate_key):
            self._places.pop(tower.coordinate_key, None)

        logger.info(
            "Tower %s removed (%d link(s) cascaded)", tower_id, len(attached)
        )
        self.reconcile_derived_caches()
        return attached

    def update_tower_frequency(self, tower_id: str, freq: float) -> Tower:
        """Edit a tower's frequency in place.

        Existing links and cached polygons are left alone; they refresh the
        next time the link is selected or re-created.
        """
        tower = self.require_tower(tower_id)
        tower.freq = freq
        logger.info("Tower %s frequency set to %s GHz", tower_id, freq)
        return tower

    def get_tower(self, tower_id: str) -> Tower | None:
        return self._towers.get(tower_id)

    def require_tower(self, tower_id: str) -> Tower:
        tower = self._towers.get(tower_id)
        if tower is None:
            raise UnknownTowerError(tower_id)
        return tower

    @property
    def towers(self) -> list[Tower]:
        return list(self._towers.values())

    def has_tower_at(self, coord_key: str) -> bool:
        return any(t.coordinate_key == coord_key for t in self._towers.values())

    # -----------------------------------------------------------------------
    # Links
    # -----------------------------------------------------------------------
    def add_link(self, from_id: str, to_id: str) -> Link:
        """Connect two towers.

        Validation order: self-link, unknown endpoint, frequency mismatch,
        duplicate (either direction). The polygon cache is not touched.
        """
        if from_id == to_id:
            raise SelfLinkError(from_id)
        a = self.require_tower(from_id)
        b = self.require_tower(to_id)
        if a.freq != b.freq:
            raise FrequencyMismatchError(a.freq, b.freq)
        key = LinkKey.of(from_id, to_id)
        if key in self._links:
            raise DuplicateLinkError(from_id, to_id)

        link = Link(from_id=from_id, to_id=to_id)
        self._links[key] = link
        logger.info("Link %s added", key)
        return link

    def remove_link(self, from_id: str, to_id: str) -> bool:
        """Remove the link between two towers if present (either direction).

        Returns:
            True if a link was removed, False for a no-op
        """
        key = LinkKey.of(from_id, to_id)
        removed = self._drop_link(key)
        if removed:
            logger.info("Link %s removed", key)
            self.reconcile_derived_caches()
        return removed

    def _drop_link(self, key: LinkKey) -> bool:
        removed = self._links.pop(key, None) is not None
        self._fresnel.pop(key, None)
        self._elevations.pop(key, None)
        return removed

    @property
    def links(self) -> list[Link]:
        return list(self._links.values())

    def find_link(self, from_id: str, to_id: str) -> Link | None:
        return self._links.get(LinkKey.of(from_id, to_id))

    def has_link(self, key: LinkKeyLike) -> bool:
        return LinkKey.parse(key) in self._links

    def links_for_tower(self, tower_id: str) -> list[Link]:
        return [link for link in self._links.values() if link.involves(tower_id)]

    def link_keys(self) -> set[LinkKey]:
        return set(self._links)

    # -----------------------------------------------------------------------
    # Derived caches
    # -----------------------------------------------------------------------
    def set_fresnel_polygon(self, key: LinkKeyLike, polygon: FresnelPolygon) -> None:
        self._fresnel[LinkKey.parse(key)] = polygon
        logger.debug("Fresnel polygon cached for %s (%d vertices)", key, len(polygon))

    def clear_fresnel_polygon(self, key: LinkKeyLike) -> bool:
        return self._fresnel.pop(LinkKey.parse(key), None) is not None

    def fresnel_polygon(self, key: LinkKeyLike) -> FresnelPolygon | None:
        return self._fresnel.get(LinkKey.parse(key))

    @property
    def fresnel_polygons(self) -> dict[LinkKey, FresnelPolygon]:
        return dict(self._fresnel)

    def set_elevation_profile(self, key: LinkKeyLike, profile: ElevationProfile) -> None:
        self._elevations[LinkKey.parse(key)] = profile
        logger.debug("Elevation profile cached for %s", key)

    def elevation_profile(self, key: LinkKeyLike) -> ElevationProfile | None:
        return self._elevations.get(LinkKey.parse(key))

    def set_place_name(self, coord_key: str, name: str) -> None:
        if not isinstance(coord_key, str) or not _COORDINATE_KEY_RE.match(coord_key):
            raise InvalidCacheKeyError(f"Malformed coordinate key: {coord_key!r}")
        if not name:
            raise ValueError("Place name must be a non-empty string")
        self._places[coord_key] = name
        logger.debug("Place name cached for %s", coord_key)

    def place_name(self, coord_key: str) -> str | None:
        return self._places.get(coord_key)

    def reconcile_derived_caches(self) -> set[LinkKey]:
        """Evict link-keyed cache entries that no longer belong to a live link.

        Idempotent: a second call without structural changes evicts nothing.

        Returns:
            The evicted keys
        """
        valid = set(self._links)
        evicted: set[LinkKey] = set()
        for cache in (self._fresnel, self._elevations):
            stale = [key for key in cache if key not in valid]
            for key in stale:
                del cache[key]
            evicted.update(stale)
        if evicted:
            logger.debug("Evicted %d orphaned cache entr(y/ies)", len(evicted))
        return evicted

    # -----------------------------------------------------------------------
    # Views
    # -----------------------------------------------------------------------
    def tower_label(self, tower: Tower) -> str:
        """Cached place name, or "<id> (lat, lng)" when none is known yet."""
        name = self._places.get(tower.coordinate_key)
        if name:
            return name
        return f"{tower.id} ({tower.lat:.5f}, {tower.lng:.5f})"

    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(
            towers=tuple(t.model_copy() for t in self._towers.values()),
            links=tuple(self._links.values()),
            fresnel_polygons=_stringify(self._fresnel.items()),
            place_names=dict(self._places),
            elevation_profiles=_stringify(self._elevations.items()),
        )


def _stringify(items: Iterable[tuple[LinkKey, object]]) -> dict:
    return {str(key): value for key, value in items}
