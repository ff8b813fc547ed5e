"""Coverage Bounded Context - Value Objects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

LatLng = tuple[float, float]


class FresnelPolygon(BaseModel):
    """First Fresnel-zone envelope around a link as a closed (lat, lng) ring.

    A derived, disposable value: it can always be rebuilt from the two
    endpoints and the link frequency. An empty polygon stands for "nothing
    to draw" (degenerate input).

    Invariants:
        FP-1: empty, or at least 4 vertices (3 distinct + closing vertex)
        FP-2: if non-empty, first vertex == last vertex
    """

    vertices: tuple[LatLng, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_ring(self) -> "FresnelPolygon":
        if not self.vertices:
            return self
        if len(self.vertices) < 4:
            raise ValueError(
                f"A closed ring needs at least 4 vertices, got {len(self.vertices)}"
            )
        if self.vertices[0] != self.vertices[-1]:
            raise ValueError("Ring is not closed: first vertex != last vertex")
        return self

    @classmethod
    def empty(cls) -> "FresnelPolygon":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.vertices

    @property
    def is_closed(self) -> bool:
        return bool(self.vertices) and self.vertices[0] == self.vertices[-1]

    def __len__(self) -> int:
        return len(self.vertices)

    def bounds(self) -> tuple[float, float, float, float] | None:
        """Return (min_lat, min_lng, max_lat, max_lng), or None when empty."""
        if not self.vertices:
            return None
        lats = [v[0] for v in self.vertices]
        lngs = [v[1] for v in self.vertices]
        return (min(lats), min(lngs), max(lats), max(lngs))


class LinkSummary(BaseModel):
    """Headline numbers shown for a link: length, frequency, F1 clearance."""

    distance_km: float = Field(ge=0)
    freq_ghz: float = Field(gt=0)  # Mean of the two endpoint frequencies
    fresnel_f1_m: float = Field(ge=0)  # First Fresnel radius at mid-path

    model_config = ConfigDict(frozen=True)
