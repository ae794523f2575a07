import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Protocol, TypeVar

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from khrecipes.config import Config
from khrecipes.domain.errors import StorageError, ValidationFailure
from khrecipes.domain.models import Document


logger = logging.getLogger(__name__)


T = TypeVar("T")


async def run_blocking(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    # Yield to the loop either side of the thread hop.
    await asyncio.sleep(0)
    result = await asyncio.to_thread(func, *args, **kwargs)
    await asyncio.sleep(0)
    return result


class DocumentRepository(Protocol):
    async def get(self) -> Document:
        ...

    async def put(self, document: Document) -> Document:
        ...


class LocalFileRepository:
    """The document as a pretty-printed JSON file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read(self) -> Document:
        if not self.path.exists():
            return Document.empty()
        with open(self.path, "r", encoding="utf-8") as f:
            return Document.from_dict(json.load(f))

    def _write(self, document: Document) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(document.to_dict(), f, indent=2)

    async def get(self) -> Document:
        try:
            return await run_blocking(self._read)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationFailure) as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e

    async def put(self, document: Document) -> Document:
        try:
            await run_blocking(self._write, document)
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e
        return document


class S3Repository:
    """The document as a single object in an S3 bucket."""

    def __init__(
        self,
        *,
        bucket: str,
        key: str = "recipes.json",
        client: Any | None = None,
        region: str = "us-east-1",
    ) -> None:
        self.bucket = bucket
        self.key = key
        self.client = boto3.client("s3", region_name=region) if client is None else client

    def _read(self) -> Document:
        try:
            resp = self.client.get_object(Bucket=self.bucket, Key=self.key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "NoSuchKey":
                logger.info("No %s in %s yet.", self.key, self.bucket)
                return Document.empty()
            raise
        body = resp["Body"].read().decode("utf-8")
        return Document.from_dict(json.loads(body))

    def _write(self, document: Document) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=self.key,
            Body=json.dumps(document.to_dict(), indent=2).encode("utf-8"),
            ContentType="application/json",
        )

    async def get(self) -> Document:
        try:
            return await run_blocking(self._read)
        except (
            BotoCoreError,
            ClientError,
            UnicodeDecodeError,
            json.JSONDecodeError,
            ValidationFailure,
        ) as e:
            raise StorageError(f"Could not read s3://{self.bucket}/{self.key}: {e}") from e

    async def put(self, document: Document) -> Document:
        try:
            await run_blocking(self._write, document)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Could not write s3://{self.bucket}/{self.key}: {e}") from e
        return document


def repository_from_config(config: Config) -> DocumentRepository:
    if config.use_s3:
        if not config.s3_bucket:
            raise ValueError("USE_S3 is set but S3_BUCKET is not.")
        return S3Repository(
            bucket=config.s3_bucket,
            key=config.storage_key,
            region=config.aws_region,
        )
    return LocalFileRepository(config.local_data_file)
