"""Fetch-and-cache of derived link data.

When a link is created or (re-)selected:

1. Both endpoint towers are resolved from the store; a missing tower means
   the request is stale and it is dropped without error.
2. The Fresnel polygon is computed and cached synchronously, before any
   network round trip.
3. An elevation profile along the path is requested.
4. Concurrently, both endpoints are reverse geocoded unless their rounded
   coordinate already has a cached name.

Network results can arrive in any order and after arbitrary delay. Each
one is applied only if its target still exists in the store at that moment
(liveness check); otherwise it is dropped. Failures leave the cache entry
absent and are never retried automatically: re-selecting the link is the
retry.
"""

from __future__ import annotations

import asyncio
import logging

from domain.coverage.services import build_fresnel_polygon
from domain.coverage.value_objects import FresnelPolygon
from domain.siting.entities import LinkKey, Tower
from domain.siting.errors import GeocodingError
from domain.siting.link_graph import LinkGraphStore
from domain.siting.repositories import GeocodingRepository
from domain.terrain.errors import ElevationLookupError, InvalidProfileError
from domain.terrain.repositories import ElevationRepository
from domain.terrain.services import build_elevation_profile, coordinate_key, path_points

from .settings import PlannerSettings

logger = logging.getLogger(__name__)


class EnrichmentOrchestrator:
    """Keeps the store's derived caches populated for selected links."""

    def __init__(
        self,
        store: LinkGraphStore,
        geocoder: GeocodingRepository,
        elevation: ElevationRepository,
        settings: PlannerSettings | None = None,
    ) -> None:
        self.store = store
        self.geocoder = geocoder
        self.elevation = elevation
        self.settings = settings or PlannerSettings()
        self._tasks: set[asyncio.Task[None]] = set()

    # -----------------------------------------------------------------------
    # Synchronous part
    # -----------------------------------------------------------------------
    def _resolve(self, from_id: str, to_id: str) -> tuple[Tower, Tower] | None:
        a = self.store.get_tower(from_id)
        b = self.store.get_tower(to_id)
        if a is None or b is None:
            logger.debug("Skipping enrichment for %s-%s: tower no longer exists", from_id, to_id)
            return None
        return a, b

    def _write_polygon(self, a: Tower, b: Tower) -> FresnelPolygon:
        freq = (a.freq + b.freq) / 2
        polygon = build_fresnel_polygon(a.point, b.point, freq)
        if not polygon.is_empty:
            self.store.set_fresnel_polygon(LinkKey.of(a.id, b.id), polygon)
        return polygon

    def refresh_polygon(self, from_id: str, to_id: str) -> FresnelPolygon | None:
        """Recompute and cache the Fresnel polygon for a tower pair.

        Uses the current mean of the endpoint frequencies. Returns None when
        either tower is gone.
        """
        resolved = self._resolve(from_id, to_id)
        if resolved is None:
            return None
        return self._write_polygon(*resolved)

    # -----------------------------------------------------------------------
    # Asynchronous part
    # -----------------------------------------------------------------------
    async def enrich_link(self, from_id: str, to_id: str) -> None:
        """Run the full procedure inline; safe to repeat for the same link."""
        resolved = self._resolve(from_id, to_id)
        if resolved is None:
            return
        self._write_polygon(*resolved)
        await self._enrich_remote(*resolved)

    def schedule(self, from_id: str, to_id: str) -> asyncio.Task[None] | None:
        """Write the polygon now and run the network lookups as a background task.

        Returns the task, or None when the towers are gone or no event loop
        is running (the polygon is still written in that case).
        """
        resolved = self._resolve(from_id, to_id)
        if resolved is None:
            return None
        a, b = resolved
        self._write_polygon(a, b)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(
                "No running event loop; lookups for %s wait until the link is selected",
                LinkKey.of(a.id, b.id),
            )
            return None

        task = loop.create_task(
            self._enrich_remote(a, b), name=f"enrich:{LinkKey.of(a.id, b.id)}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def drain(self) -> None:
        """Wait until every scheduled enrichment task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Enrichment task %s failed", task.get_name(), exc_info=exc)

    async def _enrich_remote(self, a: Tower, b: Tower) -> None:
        key = LinkKey.of(a.id, b.id)
        await asyncio.gather(
            self._fetch_elevation_profile(key, a, b),
            self.fetch_place_name(a.lat, a.lng),
            self.fetch_place_name(b.lat, b.lng),
        )

    async def _fetch_elevation_profile(self, key: LinkKey, a: Tower, b: Tower) -> None:
        points = path_points(a.point, b.point, self.settings.elevation_segments)
        try:
            elevations = await self.elevation.lookup(points)
            profile = build_elevation_profile(points, elevations, source=self.elevation.name)
        except (ElevationLookupError, InvalidProfileError) as e:
            logger.warning("Elevation profile unavailable for %s: %s", key, e)
            return

        # Liveness check: the link may have been deleted while we waited
        if not self.store.has_link(key):
            logger.debug("Dropping elevation profile for removed link %s", key)
            return
        self.store.set_elevation_profile(key, profile)

    async def fetch_place_name(self, lat: float, lng: float) -> str | None:
        """Reverse geocode one coordinate into the place-name cache.

        Short-circuits on a cached name. Failures leave the entry absent;
        no negative result is cached.
        """
        coord_key = coordinate_key(lat, lng)
        cached = self.store.place_name(coord_key)
        if cached:
            return cached

        try:
            description = await self.geocoder.reverse(lat, lng)
        except GeocodingError as e:
            logger.warning("Reverse geocoding failed for %s: %s", coord_key, e)
            return None

        name = description.display_name
        if not name:
            return None
        # Liveness check: only towers own place names
        if not self.store.has_tower_at(coord_key):
            logger.debug("Dropping place name for %s: no tower there any more", coord_key)
            return None
        self.store.set_place_name(coord_key, name)
        return name

    async def prefetch_place_names(self) -> None:
        """Look up names for every tower coordinate not cached yet."""
        by_key: dict[str, Tower] = {}
        for tower in self.store.towers:
            if self.store.place_name(tower.coordinate_key) is None:
                by_key.setdefault(tower.coordinate_key, tower)
        await asyncio.gather(
            *(self.fetch_place_name(t.lat, t.lng) for t in by_key.values())
        )
