import contextlib
import functools
import json
import logging
import secrets
from typing import Any, Awaitable, Callable

import openai
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from khrecipes.config import Config, Env
from khrecipes.domain.errors import ParseFailure, StorageError, ValidationFailure
from khrecipes.domain.models import Document
from khrecipes.domain.parser import RecipeParser
from khrecipes.domain.repository import DocumentRepository, repository_from_config
from khrecipes.domain.services import load_document, parse_recipe, save_document


logger = logging.getLogger(__name__)


CONFIG = Config()


PASSKEY_HEADER = "x-passkey"


def error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def aJSONResponse(route: Callable[..., Awaitable[Any | tuple[Any, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> JSONResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            content, code = resp, 200
        else:
            content, code = resp
        return JSONResponse(content, status_code=code)

    return wrapper


def passkey_matches(given: str | None, expected: str | None) -> bool:
    # No configured passkey means nobody gets in.
    if not expected or given is None:
        return False
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def requires_passkey(route: Callable[[Request], Awaitable[JSONResponse]]):
    @functools.wraps(route)
    async def wrapper(request: Request) -> JSONResponse:
        config: Config = request.app.state.config
        if not passkey_matches(request.headers.get(PASSKEY_HEADER), config.passkey):
            return error("Invalid passkey", 401)
        return await route(request)

    return wrapper


async def read_json(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationFailure("Request body is not valid JSON.") from e


@aJSONResponse
async def auth(request: Request) -> dict[str, Any] | tuple[dict[str, Any], int]:
    body = await read_json(request)
    passkey = body.get("passkey") if isinstance(body, dict) else None
    config: Config = request.app.state.config
    if not passkey_matches(passkey, config.passkey):
        return {"error": "Invalid passkey"}, 401
    return {"success": True}


@requires_passkey
@aJSONResponse
async def get_recipes(request: Request) -> dict[str, Any] | tuple[dict[str, Any], int]:
    repo: DocumentRepository = request.app.state.repository
    try:
        document = await load_document(repository=repo)
    except StorageError:
        logger.exception("Error fetching recipes")
        return {"error": "Failed to fetch recipes"}, 500
    return document.to_dict()


@requires_passkey
@aJSONResponse
async def save_recipes(request: Request) -> dict[str, Any] | tuple[dict[str, Any], int]:
    document = Document.from_dict(await read_json(request))
    repo: DocumentRepository = request.app.state.repository
    try:
        saved = await save_document(document, repository=repo)
    except StorageError:
        logger.exception("Error saving recipes")
        return {"error": "Failed to save recipes"}, 500
    return saved.to_dict()


@requires_passkey
@aJSONResponse
async def parse(request: Request) -> dict[str, Any] | tuple[dict[str, Any], int]:
    body = await read_json(request)
    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str) or not text.strip():
        return {"error": "No recipe text provided"}, 400
    parser: RecipeParser = request.app.state.parser
    try:
        return await parse_recipe(text, parser=parser)
    except openai.OpenAIError:
        logger.exception("Error parsing recipe")
        return {"error": "Failed to parse recipe"}, 500


async def validation_failure(request: Request, exc: Exception) -> JSONResponse:
    return error(str(exc), 400)


async def parse_failure(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("Unusable model reply: %s", exc)
    return error(str(exc), 500)


async def http_exception(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HTTPException)
    message = "Not found" if exc.status_code == 404 else exc.detail
    return error(message, exc.status_code)


def create_app(
    config: Config | None = None,
    *,
    repository: DocumentRepository | None = None,
    parser: RecipeParser | None = None,
) -> Starlette:
    config = CONFIG if config is None else config

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info("Storage: %s", "S3" if config.use_s3 else config.local_data_file)
        if not config.passkey:
            logger.warning("PASSKEY is not set. Every authenticated request will be refused.")
        yield
        await app.state.parser.close()

    app = Starlette(
        debug=True if config.env == Env.local else False,
        routes=[
            Route("/api/auth", auth, methods=["POST"]),
            Route("/api/recipes", get_recipes, methods=["GET"]),
            Route("/api/recipes", save_recipes, methods=["POST"]),
            Route("/api/parse", parse, methods=["POST"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["Content-Type", PASSKEY_HEADER],
            ),
        ],
        exception_handlers={
            HTTPException: http_exception,
            ValidationFailure: validation_failure,
            ParseFailure: parse_failure,
        },
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.repository = (
        repository_from_config(config) if repository is None else repository
    )
    app.state.parser = (
        RecipeParser(
            model=config.llm_model,
            max_tokens=config.llm_max_tokens,
            api_key=config.openai_api_key,
        )
        if parser is None
        else parser
    )
    return app


app = create_app()
