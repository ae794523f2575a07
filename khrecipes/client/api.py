import json
import logging
from typing import Any

import httpx

from khrecipes.client.config import ClientConfig
from khrecipes.domain.errors import (
    AuthFailure,
    NetworkFailure,
    ParseFailure,
    ValidationFailure,
)
from khrecipes.domain.models import Document


logger = logging.getLogger(__name__)


PASSKEY_HEADER = "x-passkey"


def api_client_factory(
    config: ClientConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    config = ClientConfig() if config is None else config
    return httpx.AsyncClient(
        base_url=config.api_base,
        headers={"Content-Type": "application/json"},
        timeout=config.timeout,
        transport=transport,
    )


class RecipesApi:
    """Talks to the recipes server. Maps HTTP outcomes onto domain errors."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        passkey: str | None = None,
    ) -> None:
        self.client = api_client_factory() if client is None else client
        self.passkey = passkey

    async def _request(
        self,
        method: str,
        path: str,
        *,
        body: Any | None = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        headers = {PASSKEY_HEADER: self.passkey or ""} if authenticated else {}
        try:
            resp = await self.client.request(method, path, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise NetworkFailure(f"{method} {path} failed: {e!r}") from e
        if resp.status_code == 401:
            raise AuthFailure("Unauthorized")
        return resp

    async def verify_passkey(self, passkey: str) -> None:
        resp = await self._request(
            "POST", "auth", body={"passkey": passkey}, authenticated=False
        )
        if not resp.is_success:
            raise NetworkFailure(f"Could not verify passkey ({resp.status_code}).")
        self.passkey = passkey

    async def fetch_document(self) -> Document:
        resp = await self._request("GET", "recipes")
        if not resp.is_success:
            raise NetworkFailure(f"Failed to fetch recipes ({resp.status_code}).")
        try:
            return Document.from_dict(resp.json())
        except (json.JSONDecodeError, ValidationFailure) as e:
            raise NetworkFailure(f"Server sent an unreadable document: {e}") from e

    async def save_document(self, document: Document) -> Document:
        resp = await self._request("POST", "recipes", body=document.to_dict())
        if not resp.is_success:
            raise NetworkFailure(f"Failed to save recipes ({resp.status_code}).")
        try:
            return Document.from_dict(resp.json())
        except (json.JSONDecodeError, ValidationFailure) as e:
            raise NetworkFailure(f"Server sent an unreadable document: {e}") from e

    async def parse_recipe(self, text: str) -> dict[str, Any]:
        if not text or not text.strip():
            raise ValidationFailure("Please enter or dictate a recipe first")
        resp = await self._request("POST", "parse", body={"text": text.strip()})
        if not resp.is_success:
            try:
                message = resp.json().get("error")
            except (json.JSONDecodeError, AttributeError):
                message = None
            raise ParseFailure(message or "Failed to parse recipe")
        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise ParseFailure("Failed to parse recipe") from e

    async def close(self) -> None:
        await self.client.aclose()
