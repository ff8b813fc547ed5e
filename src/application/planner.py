"""Mutation surface exposed to the UI layer.

Every UI event maps to one method here. Structural mutations are applied
to the store in the order they are issued; derived data (Fresnel polygons,
elevation profiles, place names) is produced by the EnrichmentOrchestrator.
"""

from __future__ import annotations

import logging

from domain.coverage.services import summarize_link
from domain.coverage.value_objects import LinkSummary
from domain.siting.entities import Link, LinkKey, Tower
from domain.siting.link_graph import LinkGraphStore
from domain.siting.repositories import GeocodingRepository
from domain.terrain.repositories import ElevationRepository

from .enrichment import EnrichmentOrchestrator
from .placement import PlacementValidator
from .settings import PlannerSettings

logger = logging.getLogger(__name__)


class LinkPlannerService:
    """Facade over the store, the placement gate and the orchestrator.

    The store is an explicit context object: pass one in to share it with a
    renderer, or let the service create its own.
    """

    def __init__(
        self,
        geocoder: GeocodingRepository,
        elevation: ElevationRepository,
        settings: PlannerSettings | None = None,
        store: LinkGraphStore | None = None,
    ) -> None:
        self.settings = settings or PlannerSettings()
        self.store = store if store is not None else LinkGraphStore()
        self.validator = PlacementValidator(geocoder, self.settings)
        self.enrichment = EnrichmentOrchestrator(
            self.store, geocoder, elevation, self.settings
        )

    # -----------------------------------------------------------------------
    # Towers
    # -----------------------------------------------------------------------
    async def place_tower(
        self, lat: float, lng: float, freq: float | None = None
    ) -> Tower:
        """Validate a coordinate against the land/water gate, then add a tower.

        The gate completes before the store is touched; a rejection leaves
        the tower collection unchanged.

        Raises:
            PlacementRejectedError: the coordinate is water or could not be
                verified
        """
        description = await self.validator.check(lat, lng)
        tower = self.store.add_tower(
            lat, lng, freq if freq is not None else self.settings.default_frequency_ghz
        )
        if description.display_name:
            self.store.set_place_name(tower.coordinate_key, description.display_name)
        return tower

    def remove_tower(self, tower_id: str, cascade: bool = False) -> list[Link]:
        return self.store.remove_tower(tower_id, cascade=cascade)

    def update_tower_frequency(self, tower_id: str, freq: float) -> Tower:
        return self.store.update_tower_frequency(tower_id, freq)

    # -----------------------------------------------------------------------
    # Links
    # -----------------------------------------------------------------------
    def add_link(self, from_id: str, to_id: str) -> Link:
        """Create a link and start enriching it.

        Validation errors propagate synchronously. On success the Fresnel
        polygon is cached before this returns; lookups continue in the
        background when an event loop is running.
        """
        link = self.store.add_link(from_id, to_id)
        self.enrichment.schedule(from_id, to_id)
        return link

    def remove_link(self, from_id: str, to_id: str) -> bool:
        return self.store.remove_link(from_id, to_id)

    def select_link(self, from_id: str, to_id: str) -> None:
        """Recompute the polygon and re-run lookups for an existing link."""
        if self.store.find_link(from_id, to_id) is None:
            logger.debug("Ignoring selection of unknown link %s-%s", from_id, to_id)
            return
        self.enrichment.schedule(from_id, to_id)

    def toggle_link(self, from_id: str, to_id: str) -> bool:
        """Show or hide a link's Fresnel zone.

        Returns:
            True if the polygon is shown after the call
        """
        key = LinkKey.of(from_id, to_id)
        if self.store.clear_fresnel_polygon(key):
            return False
        self.select_link(from_id, to_id)
        return self.store.fresnel_polygon(key) is not None

    def link_summary(self, from_id: str, to_id: str) -> LinkSummary:
        a = self.store.require_tower(from_id)
        b = self.store.require_tower(to_id)
        return summarize_link(a.point, b.point, a.freq, b.freq)

    def link_label(self, from_id: str, to_id: str) -> str:
        """One-line description, e.g. "Bengaluru → Mysuru · 15.55 km @ 5.0 GHz"."""
        a = self.store.require_tower(from_id)
        b = self.store.require_tower(to_id)
        summary = summarize_link(a.point, b.point, a.freq, b.freq)
        return (
            f"{self.store.tower_label(a)} → {self.store.tower_label(b)} · "
            f"{summary.distance_km:.2f} km @ {summary.freq_ghz} GHz"
        )

    async def drain(self) -> None:
        await self.enrichment.drain()
