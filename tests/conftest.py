"""Root pytest configuration: shared store and service fixtures.

Imports resolve through the pytest `pythonpath` setting (project root and
src/), so tests use `domain.*`, `application.*` and `infrastructure.*`.
"""

import pytest

from application.planner import LinkPlannerService
from application.settings import PlannerSettings
from domain.siting.link_graph import LinkGraphStore
from tests.fakes import FakeElevation, FakeGeocoder


@pytest.fixture
def store() -> LinkGraphStore:
    return LinkGraphStore()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def elevation() -> FakeElevation:
    return FakeElevation()


@pytest.fixture
def settings() -> PlannerSettings:
    return PlannerSettings(placement_timeout_s=0.2)


@pytest.fixture
def service(geocoder, elevation, settings, store) -> LinkPlannerService:
    return LinkPlannerService(geocoder, elevation, settings=settings, store=store)


@pytest.fixture
def linked_pair(store):
    """Two 5 GHz towers near Bengaluru joined by a link."""
    a = store.add_tower(12.0, 77.0, 5.0, tower_id="A")
    b = store.add_tower(12.1, 77.1, 5.0, tower_id="B")
    store.add_link("A", "B")
    return a, b
