"""Preference category mapping for raw deal category tags.

Deal authors tag deals freely ("food", "Food", "restaurant", "cocktail").
User preferences are picked from a small fixed vocabulary, so raw tags are
folded into that vocabulary before matching.
"""

from typing import Iterable

from src.models.deal import Deal, UserPreferences

FOOD = "Food"
DRINKS = "Drinks"
NIGHTLIFE = "Nightlife"
EVENTS = "Events"

PREFERENCE_CATEGORIES: tuple[str, ...] = (FOOD, DRINKS, NIGHTLIFE, EVENTS)

# Keys are lowercase; canonical names map to themselves
CATEGORY_SYNONYMS: dict[str, str] = {
    "food": FOOD,
    "restaurant": FOOD,
    "dining": FOOD,
    "drinks": DRINKS,
    "bar": DRINKS,
    "cocktail": DRINKS,
    "coffee": DRINKS,
    "nightlife": NIGHTLIFE,
    "club": NIGHTLIFE,
    "lounge": NIGHTLIFE,
    "events": EVENTS,
    "concert": EVENTS,
    "festival": EVENTS,
}


def normalize_category(raw_tag: str) -> str:
    """Fold a raw tag into its preference category.

    Unknown tags pass through as their own category.
    """
    tag = (raw_tag or "").strip()
    return CATEGORY_SYNONYMS.get(tag.lower(), tag)


def matches_preferences(raw_tag: str, preferences: UserPreferences) -> bool:
    """Check whether a deal tag falls in any preferred category (case-insensitive)."""
    category = normalize_category(raw_tag).lower()
    return any(category == preferred.strip().lower() for preferred in preferences.categories)


def canonical_preference(name: str) -> str | None:
    """Return the vocabulary spelling of ``name`` or None if it is not a preference category."""
    for category in PREFERENCE_CATEGORIES:
        if category.lower() == name.strip().lower():
            return category
    return None


def available_categories(deals: Iterable[Deal]) -> list[str]:
    """Sorted unique raw tags, used to offer manual category filters."""
    return sorted({deal.deal_type for deal in deals if deal.deal_type})
