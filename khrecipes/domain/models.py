from datetime import datetime, timezone
from typing import Any, Self

from khrecipes.domain.errors import ValidationFailure


# attribute name -> name on the wire
WIRE_NAMES = {
    "id": "id",
    "name": "name",
    "description": "description",
    "category": "category",
    "prep_time": "prepTime",
    "cook_time": "cookTime",
    "servings": "servings",
    "ingredients": "ingredients",
    "instructions": "instructions",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string, e.g. 2024-01-01T12:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Recipe:
    def __init__(
        self,
        *,
        id: str,
        name: str | None = None,
        description: str | None = None,
        category: str | None = None,
        prep_time: str | None = None,
        cook_time: str | None = None,
        servings: str | None = None,
        ingredients: list[str] | None = None,
        instructions: list[str] | None = None,
        created_at: str | None = None,
        updated_at: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.id = id
        self.name = name
        self.description = description
        self.category = category
        self.prep_time = prep_time
        self.cook_time = cook_time
        self.servings = servings
        self.ingredients = [] if ingredients is None else ingredients
        self.instructions = [] if instructions is None else instructions
        self.created_at = created_at
        self.updated_at = updated_at
        # Keys we do not model, kept so a round trip does not drop them.
        self.extra = {} if extra is None else extra

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        if not isinstance(data, dict):
            raise ValidationFailure("Recipe must be an object.")
        if data.get("id") in (None, ""):
            raise ValidationFailure("Recipe without an id.")
        known = set(WIRE_NAMES.values())
        kwargs = {attr: data.get(wire) for attr, wire in WIRE_NAMES.items()}
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(**kwargs, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        for attr, wire in WIRE_NAMES.items():
            value = getattr(self, attr)
            if value is not None:
                data[wire] = value
        return data

    def merge(self, updates: dict[str, Any], *, now: str) -> Self:
        """New recipe with `updates` applied. `id` and `createdAt` are kept."""
        data = {**self.to_dict(), **updates}
        data["id"] = self.id
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        data["updatedAt"] = now
        return type(self).from_dict(data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Recipe):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name={self.name})>"


class Document:
    """The whole recipe collection. Read and written as one piece."""

    def __init__(
        self,
        *,
        recipes: list[Recipe] | None = None,
        updated_at: str | None = None,
    ) -> None:
        self.recipes = [] if recipes is None else recipes
        self.updated_at = updated_at

    @classmethod
    def empty(cls) -> Self:
        return cls(recipes=[], updated_at=utc_now())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        if not isinstance(data, dict):
            raise ValidationFailure("Document must be an object.")
        recipes = data.get("recipes") or []
        if not isinstance(recipes, list):
            raise ValidationFailure("'recipes' must be a list.")
        return cls(
            recipes=[Recipe.from_dict(r) for r in recipes],
            updated_at=data.get("updatedAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"recipes": [r.to_dict() for r in self.recipes]}
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"<Document(recipes={len(self.recipes)}, updated_at={self.updated_at})>"
