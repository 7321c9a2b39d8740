"""Unit tests for preference category mapping."""

import pytest

from src.models.deal import UserPreferences
from src.services.categories import (
    CATEGORY_SYNONYMS,
    PREFERENCE_CATEGORIES,
    available_categories,
    canonical_preference,
    matches_preferences,
    normalize_category,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("food", "Food"),
        ("Food", "Food"),
        ("restaurant", "Food"),
        ("dining", "Food"),
        ("cocktail", "Drinks"),
        ("Bar", "Drinks"),
        ("coffee", "Drinks"),
        ("club", "Nightlife"),
        ("lounge", "Nightlife"),
        ("festival", "Events"),
        ("concert", "Events"),
    ],
)
def test_known_tags_map_to_category(raw, expected):
    assert normalize_category(raw) == expected


def test_unknown_tag_passes_through():
    assert normalize_category("bowling") == "bowling"
    assert normalize_category("Special") == "Special"


@pytest.mark.parametrize(
    "raw",
    list(CATEGORY_SYNONYMS) + list(PREFERENCE_CATEGORIES) + ["bowling", " Food ", "", "FESTIVAL", "offer"],
)
def test_normalization_is_idempotent(raw):
    once = normalize_category(raw)
    assert normalize_category(once) == once


def test_canonical_names_are_fixed_points():
    for category in PREFERENCE_CATEGORIES:
        assert normalize_category(category) == category


def test_matches_preferences_is_case_insensitive():
    prefs = UserPreferences(categories=["drinks"])
    assert matches_preferences("cocktail", prefs)
    assert matches_preferences("Drinks", prefs)
    assert not matches_preferences("festival", prefs)


def test_unknown_tag_matches_preference_of_same_name():
    prefs = UserPreferences(categories=["Bowling"])
    assert matches_preferences("bowling", prefs)


def test_canonical_preference():
    assert canonical_preference("food") == "Food"
    assert canonical_preference(" NIGHTLIFE ") == "Nightlife"
    assert canonical_preference("tacos") is None


def test_available_categories_sorted_unique(deal_factory):
    deals = [
        deal_factory(deal_type="food"),
        deal_factory(deal_type="bar"),
        deal_factory(deal_type="food"),
    ]
    assert available_categories(deals) == ["bar", "food"]
