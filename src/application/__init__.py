"""Application Layer.

Coordinates domain logic with the outside world: asynchronous enrichment
of the link graph, the land/water placement gate and the mutation surface
exposed to the UI.
"""

from .enrichment import EnrichmentOrchestrator
from .placement import PlacementValidator
from .planner import LinkPlannerService
from .settings import PlannerSettings

__all__ = [
    "EnrichmentOrchestrator",
    "LinkPlannerService",
    "PlacementValidator",
    "PlannerSettings",
]
