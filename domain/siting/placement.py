"""Land/water classification for tower placement.

Pure decision logic; the reverse-geocoding call that feeds it lives in the
application layer. Anything ambiguous is classified as water so that
invalid placements are refused rather than admitted.
"""

from __future__ import annotations

import re

from domain.siting.value_objects import PlaceDescription, PlacementVerdict

WATER_KEYWORDS: tuple[str, ...] = (
    "ocean",
    "sea",
    "bay",
    "gulf",
    "strait",
    "channel",
    "lake",
    "river",
)

# Whole words only: "Chelsea" or "Bayreuth" must not count as water
_WATER_RE = re.compile(r"\b(" + "|".join(WATER_KEYWORDS) + r")\b", re.IGNORECASE)

# OSM feature tags that are water regardless of the place name
WATER_FEATURES: dict[str, frozenset[str]] = {
    "natural": frozenset({"water", "bay", "strait", "coastline"}),
    "place": frozenset({"ocean", "sea"}),
    "waterway": frozenset({"river", "canal", "stream", "riverbank", "dock"}),
}


def find_water_keyword(text: str | None) -> str | None:
    if not text:
        return None
    match = _WATER_RE.search(text)
    return match.group(1).lower() if match else None


def find_water_feature(description: PlaceDescription) -> str | None:
    """Return "category/type" when the OSM feature tags mark water."""
    if not description.category or not description.place_type:
        return None
    category = description.category.lower()
    place_type = description.place_type.lower()
    if place_type in WATER_FEATURES.get(category, ()):
        return f"{category}/{place_type}"
    return None


def classify_place(description: PlaceDescription | None) -> PlacementVerdict:
    """Classify a reverse-geocoding result as land or water.

    Water when there is no description at all, when it carries neither a
    display name nor an address, when a water keyword appears in the
    display name or in any structured address field (key or value), or
    when its feature tags (category and type) name a water body.
    """
    if description is None:
        return PlacementVerdict(is_water=True, reason="location could not be geocoded")

    if not description.display_name and not description.address:
        return PlacementVerdict(is_water=True, reason="location has no known address")

    keyword = find_water_keyword(description.display_name)
    if keyword is None:
        for field, value in description.address.items():
            keyword = find_water_keyword(field) or find_water_keyword(value)
            if keyword is not None:
                break

    if keyword is not None:
        return PlacementVerdict(
            is_water=True,
            reason=f"location appears to be water ({keyword})",
            matched_keyword=keyword,
        )

    feature = find_water_feature(description)
    if feature is not None:
        return PlacementVerdict(
            is_water=True,
            reason=f"location is a water feature ({feature})",
            matched_keyword=feature,
        )
    return PlacementVerdict(is_water=False, reason="location is on land")
