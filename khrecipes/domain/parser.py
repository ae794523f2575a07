import logging
from typing import Any

import openai

from khrecipes.domain.decoder import decode_json_object
from khrecipes.domain.errors import ValidationFailure
from khrecipes.domain.prompts import ParseRecipePrompt


logger = logging.getLogger(__name__)


DEFAULT_MODEL = "gpt-4o"
MAX_TOKENS = 1024


class RecipeParser:
    """Turns dictated or typed text into a recipe-shaped dict.

    One completion per call. Whatever JSON object the model returns is
    handed back as is.
    """

    def __init__(
        self,
        openai_client: openai.AsyncClient | None = None,
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = MAX_TOKENS,
        api_key: str | None = None,
    ) -> None:
        self._openai_client = openai_client
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens

    @property
    def openai_client(self) -> openai.AsyncClient:
        # Created on first use so the server can start without an API key.
        if self._openai_client is None:
            self._openai_client = openai.AsyncClient(api_key=self.api_key)
        return self._openai_client

    async def complete(self, prompt: str) -> str:
        resp = await self.openai_client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return resp.choices[0].message.content or ""

    async def parse(self, text: str) -> dict[str, Any]:
        if not text or not text.strip():
            raise ValidationFailure("No recipe text provided")
        content = await self.complete(str(ParseRecipePrompt(text.strip())))
        logger.debug("Model replied with %d characters.", len(content))
        return decode_json_object(content)

    async def close(self) -> None:
        if self._openai_client is not None:
            await self._openai_client.close()
