"""Siting Bounded Context - Error Hierarchy.

Validation errors are raised synchronously to the caller and never
retried; the caller corrects the request and resubmits.
"""

from __future__ import annotations


class SitingError(Exception):
    """Base error for siting operations."""


class ConstraintViolation(SitingError):
    """A mutation would break a link-graph invariant."""


class UnknownTowerError(ConstraintViolation):
    """Referenced tower id does not exist in the store."""

    def __init__(self, tower_id: str) -> None:
        self.tower_id = tower_id
        super().__init__(f"Unknown tower: {tower_id}")


class DuplicateTowerError(ConstraintViolation):
    """A tower with this id already exists."""

    def __init__(self, tower_id: str) -> None:
        self.tower_id = tower_id
        super().__init__(f"Tower already exists: {tower_id}")


class TowerInUseError(ConstraintViolation):
    """Tower cannot be removed while links still reference it.

    Attributes:
        tower_id: The tower that was to be removed
        link_count: Number of links still attached to it
    """

    def __init__(self, tower_id: str, link_count: int) -> None:
        self.tower_id = tower_id
        self.link_count = link_count
        super().__init__(
            f"Cannot delete tower {tower_id}: it is part of {link_count} existing link(s)"
        )


# ---------------------------------------------------------------------------
# Link creation
# ---------------------------------------------------------------------------
class LinkValidationError(ConstraintViolation):
    """Base for the link-creation validations."""


class SelfLinkError(LinkValidationError):
    """Both link endpoints are the same tower."""

    def __init__(self, tower_id: str) -> None:
        self.tower_id = tower_id
        super().__init__(f"Cannot link tower {tower_id} to itself")


class FrequencyMismatchError(LinkValidationError):
    """Endpoint towers operate on different frequencies."""

    def __init__(self, from_freq: float, to_freq: float) -> None:
        self.from_freq = from_freq
        self.to_freq = to_freq
        super().__init__(
            f"Frequencies must match to create link ({from_freq} GHz vs {to_freq} GHz)"
        )


class DuplicateLinkError(LinkValidationError):
    """A link between these two towers already exists (in either direction)."""

    def __init__(self, from_id: str, to_id: str) -> None:
        self.from_id = from_id
        self.to_id = to_id
        super().__init__(f"Link already exists between {from_id} and {to_id}")


class InvalidCacheKeyError(SitingError, ValueError):
    """A derived-cache key is malformed."""


# ---------------------------------------------------------------------------
# Placement and geocoding
# ---------------------------------------------------------------------------
class PlacementRejectedError(SitingError):
    """Tower placement refused by the land/water gate.

    Attributes:
        latitude, longitude: The rejected coordinate
        reason: Human-readable explanation for the caller
    """

    def __init__(self, latitude: float, longitude: float, reason: str) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.reason = reason
        super().__init__(
            f"Cannot place tower at ({latitude:.5f}, {longitude:.5f}): {reason}"
        )


class GeocodingError(SitingError):
    """Reverse geocoding produced no usable place description."""
