"""Offline-first recipe state.

The session owns the recipe list the user sees. Every change is applied in
memory first, written to the local cache, then pushed to the server as one
whole document. A failed push keeps the local change; the next successful
push or load reconciles. Last writer wins and there is no merge. Two
clients editing at once will overwrite each other.
"""

import logging
from typing import Any, Callable, Self
import uuid

from khrecipes.client.api import RecipesApi
from khrecipes.client.store import CACHE_KEY, PASSKEY_KEY, LocalStore
from khrecipes.domain.errors import AuthFailure, NetworkFailure, ValidationFailure
from khrecipes.domain.models import Document, Recipe, utc_now


logger = logging.getLogger(__name__)


OFFLINE_NOTICE = "Working offline - changes will sync when connection is restored"
SAVED_LOCALLY_NOTICE = "Saved locally - will sync when connection is restored"


def new_id() -> str:
    return str(uuid.uuid4())


class RecipeSession:
    def __init__(
        self,
        *,
        api: RecipesApi,
        store: LocalStore,
        clock: Callable[[], str] = utc_now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.api = api
        self.store = store
        self.clock = clock
        self.id_factory = id_factory
        self.recipes: list[Recipe] = []
        self.loading = False
        self.syncing = False
        self.sync_error: str | None = None

    @classmethod
    async def login(
        cls,
        passkey: str,
        *,
        api: RecipesApi,
        store: LocalStore,
        **kwargs: Any,
    ) -> Self:
        """Check the passkey with the server, remember it and load recipes."""
        await api.verify_passkey(passkey)
        store.set(PASSKEY_KEY, passkey)
        session = cls(api=api, store=store, **kwargs)
        await session.load()
        return session

    @classmethod
    def resume(cls, *, api: RecipesApi, store: LocalStore, **kwargs: Any) -> Self | None:
        """Session from a remembered passkey, or None if there is none."""
        passkey = store.get(PASSKEY_KEY)
        if not passkey:
            return None
        api.passkey = passkey
        return cls(api=api, store=store, **kwargs)

    def _forget_passkey(self) -> None:
        self.store.remove(PASSKEY_KEY)
        self.api.passkey = None

    def _cached(self) -> Document | None:
        data = self.store.get(CACHE_KEY)
        if data is None:
            return None
        try:
            return Document.from_dict(data)
        except ValidationFailure as e:
            logger.warning("Ignoring broken recipe cache: %s", e)
            return None

    async def load(self) -> list[Recipe]:
        self.loading = True
        self.sync_error = None
        try:
            document = await self.api.fetch_document()
        except AuthFailure:
            self._forget_passkey()
            raise
        except NetworkFailure as e:
            logger.warning("Failed to load from server: %s", e)
            cached = self._cached()
            self.recipes = [] if cached is None else cached.recipes
            self.sync_error = OFFLINE_NOTICE
        else:
            self.recipes = document.recipes
            self.store.set(CACHE_KEY, document.to_dict())
        finally:
            self.loading = False
        return self.recipes

    async def persist(self, recipes: list[Recipe]) -> None:
        self.recipes = list(recipes)
        document = Document(recipes=self.recipes, updated_at=self.clock())
        self.store.set(CACHE_KEY, document.to_dict())

        self.syncing = True
        try:
            await self.api.save_document(document)
        except AuthFailure:
            # Local state stays; the user has to log in again to push it.
            self._forget_passkey()
            raise
        except NetworkFailure as e:
            logger.warning("Failed to sync to server: %s", e)
            self.sync_error = SAVED_LOCALLY_NOTICE
        else:
            self.sync_error = None
        finally:
            self.syncing = False

    async def add(self, fields: dict[str, Any]) -> Recipe:
        name = fields.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationFailure("Recipe name is required")
        taken = {r.id for r in self.recipes}
        id = self.id_factory()
        while id in taken:
            id = self.id_factory()
        now = self.clock()
        recipe = Recipe.from_dict({**fields, "id": id, "createdAt": now, "updatedAt": now})
        await self.persist([*self.recipes, recipe])
        return recipe

    async def update(self, id: str, updates: dict[str, Any]) -> None:
        # Unknown ids are ignored on purpose.
        if self.get(id) is None:
            return
        if "name" in updates:
            name = updates["name"]
            if not isinstance(name, str) or not name.strip():
                raise ValidationFailure("Recipe name is required")
        now = self.clock()
        await self.persist(
            [r.merge(updates, now=now) if r.id == id else r for r in self.recipes]
        )

    async def remove(self, id: str) -> None:
        await self.persist([r for r in self.recipes if r.id != id])

    def get(self, id: str) -> Recipe | None:
        return next((r for r in self.recipes if r.id == id), None)

    @property
    def categories(self) -> list[str]:
        return list(dict.fromkeys(r.category for r in self.recipes if r.category))

    async def parse(self, text: str) -> dict[str, Any]:
        try:
            return await self.api.parse_recipe(text)
        except AuthFailure:
            self._forget_passkey()
            raise

    async def close(self) -> None:
        await self.api.close()

    async def logout(self) -> None:
        self._forget_passkey()
        self.recipes = []
        await self.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
