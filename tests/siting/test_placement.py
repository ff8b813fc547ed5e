"""Tests for land/water classification of reverse-geocoding results."""

from __future__ import annotations

import pytest

from domain.siting.placement import (
    classify_place,
    find_water_feature,
    find_water_keyword,
)
from domain.siting.value_objects import PlaceDescription
from tests.fakes import LAND, OCEAN


def test_land_place_is_accepted():
    verdict = classify_place(LAND)
    assert not verdict.is_water
    assert verdict.matched_keyword is None


def test_ocean_place_is_water():
    verdict = classify_place(OCEAN)
    assert verdict.is_water
    assert verdict.matched_keyword == "sea"


def test_missing_description_is_water():
    assert classify_place(None).is_water


def test_description_without_name_or_address_is_water():
    verdict = classify_place(PlaceDescription())
    assert verdict.is_water
    assert "no known address" in verdict.reason


@pytest.mark.parametrize(
    "display_name",
    [
        "Bay of Bengal",
        "Gulf of Mannar",
        "Lake Geneva, Switzerland",
        "Strait of Gibraltar",
        "English Channel",
        "Yamuna River, Delhi",
        "PACIFIC OCEAN",
    ],
)
def test_water_keyword_in_display_name(display_name):
    verdict = classify_place(PlaceDescription(display_name=display_name))
    assert verdict.is_water
    assert verdict.matched_keyword in verdict.reason


def test_water_keyword_as_address_field_name():
    description = PlaceDescription(
        display_name="Somewhere offshore",
        address={"bay": "Palk"},
    )
    assert classify_place(description).matched_keyword == "bay"


def test_water_keyword_in_address_value():
    description = PlaceDescription(
        display_name="Unnamed",
        address={"natural": "Salt lake"},
    )
    assert classify_place(description).is_water


@pytest.mark.parametrize(
    "text",
    ["Chelsea, London", "Bayreuth, Bavaria", "Riverside, California", "Seattle, Washington"],
)
def test_keyword_must_be_a_whole_word(text):
    assert find_water_keyword(text) is None
    assert not classify_place(PlaceDescription(display_name=text)).is_water


def test_address_only_land_place_is_accepted():
    description = PlaceDescription(address={"village": "Hosur", "country": "India"})
    assert not classify_place(description).is_water


@pytest.mark.parametrize(
    ("category", "place_type"),
    [("natural", "water"), ("natural", "bay"), ("Natural", "Strait"), ("waterway", "river")],
)
def test_water_feature_tags_without_keyword_are_water(category, place_type):
    description = PlaceDescription(
        display_name="Unnamed", category=category, place_type=place_type
    )

    verdict = classify_place(description)

    assert verdict.is_water
    assert verdict.matched_keyword == f"{category.lower()}/{place_type.lower()}"
    assert "water feature" in verdict.reason


@pytest.mark.parametrize(
    ("category", "place_type"),
    [("natural", "peak"), ("place", "city"), ("waterway", None), (None, "water")],
)
def test_non_water_feature_tags_stay_land(category, place_type):
    description = PlaceDescription(
        display_name="Nandi Hills, Karnataka", category=category, place_type=place_type
    )

    assert find_water_feature(description) is None
    assert not classify_place(description).is_water


def test_keyword_match_wins_over_feature_tags():
    assert classify_place(OCEAN).matched_keyword == "sea"
    assert find_water_feature(OCEAN) == "natural/water"
