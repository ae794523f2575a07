from typing import Iterable

from khrecipes.domain.models import Recipe


LIBRARY_CATEGORIES = (
    "Breakfast",
    "Mains",
    "Sides",
    "Desserts",
    "Snacks",
    "Drinks",
    "Sauces & Dips",
    "Powders",
    "Temple Recipes",
    "Other",
)

# The add/edit forms offer a shorter list than the library shows.
EDIT_CATEGORIES = (
    "Breakfast",
    "Mains",
    "Sides",
    "Desserts",
    "Snacks",
    "Drinks",
    "Sauces & Dips",
    "Other",
)

CATEGORY_EMOJI = {
    "Breakfast": "🍳",
    "Mains": "🍽️",
    "Sides": "🥗",
    "Desserts": "🍰",
    "Snacks": "🍿",
    "Drinks": "🥤",
    "Sauces & Dips": "🫙",
    "Powders": "🧂",
    "Temple Recipes": "🪷",
    "Other": "📝",
}

DEFAULT_CATEGORY = "Other"


def emoji(category: str) -> str:
    return CATEGORY_EMOJI.get(category, CATEGORY_EMOJI[DEFAULT_CATEGORY])


def search(recipes: Iterable[Recipe], query: str) -> list[Recipe]:
    """Recipes whose name, description or any ingredient contains `query`."""
    if not query.strip():
        return list(recipes)
    q = query.lower()
    return [
        r
        for r in recipes
        if q in (r.name or "").lower()
        or q in (r.description or "").lower()
        or any(q in str(i).lower() for i in r.ingredients)
    ]


def group_by_category(recipes: Iterable[Recipe]) -> dict[str, list[Recipe]]:
    grouped: dict[str, list[Recipe]] = {}
    for recipe in recipes:
        grouped.setdefault(recipe.category or DEFAULT_CATEGORY, []).append(recipe)

    order = [c for c in LIBRARY_CATEGORIES if c in grouped]
    order += sorted(c for c in grouped if c not in LIBRARY_CATEGORIES)
    return {
        c: sorted(grouped[c], key=lambda r: (r.name or "").lower())
        for c in order
    }
