from types import SimpleNamespace
from typing import Any

import pytest

from khrecipes.client.store import LocalStore
from khrecipes.domain.errors import AuthFailure, NetworkFailure, StorageError
from khrecipes.domain.models import Document, Recipe, utc_now


TEA = {
    "id": "1",
    "name": "Tea",
    "ingredients": ["1 tsp tea leaves", "200ml water"],
    "instructions": ["Boil water", "Add leaves, steep 3 min"],
}


class FakeRepository:
    def __init__(self, document: Document | None = None) -> None:
        self.document = Document.empty() if document is None else document
        self.fail = False

    async def get(self) -> Document:
        if self.fail:
            raise StorageError("disk on fire")
        return self.document

    async def put(self, document: Document) -> Document:
        if self.fail:
            raise StorageError("disk on fire")
        self.document = document
        return document


class FakeCompletions:
    def __init__(self, reply: str | Exception) -> None:
        self.reply = reply
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if isinstance(self.reply, Exception):
            raise self.reply
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, reply: str | Exception) -> None:
        self.completions = FakeCompletions(reply)
        self.chat = SimpleNamespace(completions=self.completions)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class FakeApi:
    """Stands in for `RecipesApi`, with a switchable network."""

    def __init__(self, document: Document | None = None) -> None:
        self.server = Document(recipes=[]) if document is None else document
        self.passkey: str | None = None
        self.offline = False
        self.unauthorized = False
        self.saves: list[Document] = []
        self.closed = False

    def _check(self) -> None:
        if self.unauthorized:
            raise AuthFailure("Unauthorized")
        if self.offline:
            raise NetworkFailure("offline")

    async def verify_passkey(self, passkey: str) -> None:
        self._check()
        self.passkey = passkey

    async def fetch_document(self) -> Document:
        self._check()
        return Document.from_dict(self.server.to_dict())

    async def save_document(self, document: Document) -> Document:
        self.saves.append(document)
        self._check()
        self.server = Document.from_dict(document.to_dict())
        self.server.updated_at = utc_now()
        return self.server

    async def parse_recipe(self, text: str) -> dict[str, Any]:
        self._check()
        return {"name": text.title(), "ingredients": [], "instructions": []}

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def tea() -> Recipe:
    return Recipe.from_dict(dict(TEA))


@pytest.fixture
def store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "store")


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()
