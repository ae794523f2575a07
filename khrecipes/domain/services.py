import logging
from typing import Any

from khrecipes.domain.models import Document, utc_now
from khrecipes.domain.parser import RecipeParser
from khrecipes.domain.repository import DocumentRepository


logger = logging.getLogger(__name__)


async def load_document(*, repository: DocumentRepository) -> Document:
    return await repository.get()


async def save_document(
    document: Document,
    *,
    repository: DocumentRepository,
) -> Document:
    """Overwrite the stored document. The server owns `updatedAt`."""
    document.updated_at = utc_now()
    saved = await repository.put(document)
    logger.info("Saved %d recipes at %s.", len(saved.recipes), saved.updated_at)
    return saved


async def parse_recipe(text: str, *, parser: RecipeParser) -> dict[str, Any]:
    return await parser.parse(text)
