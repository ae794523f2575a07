import io
import json

import boto3
from botocore.response import StreamingBody
from botocore.stub import ANY, Stubber
import pytest

from khrecipes.config import Config
from khrecipes.domain.errors import StorageError
from khrecipes.domain.models import Document, Recipe
from khrecipes.domain.repository import (
    LocalFileRepository,
    S3Repository,
    repository_from_config,
)

from conftest import TEA


def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def body(data: dict) -> StreamingBody:
    raw = json.dumps(data).encode("utf-8")
    return StreamingBody(io.BytesIO(raw), len(raw))


@pytest.mark.asyncio
async def test_local_missing_file_is_empty(tmp_path) -> None:
    repo = LocalFileRepository(tmp_path / "recipes-data.json")
    document = await repo.get()
    assert document.recipes == []
    assert document.updated_at


@pytest.mark.asyncio
async def test_local_put_then_get(tmp_path) -> None:
    path = tmp_path / "recipes-data.json"
    repo = LocalFileRepository(path)
    document = Document(recipes=[Recipe.from_dict(TEA)], updated_at="2024-01-01T00:00:00.000Z")

    await repo.put(document)

    assert '\n  "recipes"' in path.read_text(encoding="utf-8")
    assert await repo.get() == document


@pytest.mark.asyncio
async def test_local_corrupt_file(tmp_path) -> None:
    path = tmp_path / "recipes-data.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        await LocalFileRepository(path).get()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    (
        b"\xff\xfe not utf-8",
        b'{"recipes": [{"name": "Legacy"}]}',
        b'{"recipes": "all of them"}',
    ),
)
async def test_local_unreadable_document(tmp_path, raw: bytes) -> None:
    path = tmp_path / "recipes-data.json"
    path.write_bytes(raw)
    with pytest.raises(StorageError):
        await LocalFileRepository(path).get()


@pytest.mark.asyncio
async def test_s3_get() -> None:
    client = s3_client()
    repo = S3Repository(bucket="kh-recipes", client=client)
    data = {"recipes": [TEA], "updatedAt": "2024-01-01T00:00:00.000Z"}
    with Stubber(client) as stub:
        stub.add_response(
            "get_object",
            {"Body": body(data)},
            {"Bucket": "kh-recipes", "Key": "recipes.json"},
        )
        document = await repo.get()
        stub.assert_no_pending_responses()
    assert document.to_dict() == data


@pytest.mark.asyncio
async def test_s3_no_such_key_is_empty() -> None:
    client = s3_client()
    repo = S3Repository(bucket="kh-recipes", client=client)
    with Stubber(client) as stub:
        stub.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
        document = await repo.get()
    assert document.recipes == []


@pytest.mark.asyncio
async def test_s3_other_errors_propagate() -> None:
    client = s3_client()
    repo = S3Repository(bucket="kh-recipes", client=client)
    with Stubber(client) as stub:
        stub.add_client_error("get_object", service_error_code="AccessDenied", http_status_code=403)
        with pytest.raises(StorageError):
            await repo.get()


@pytest.mark.asyncio
async def test_s3_put() -> None:
    client = s3_client()
    repo = S3Repository(bucket="kh-recipes", key="custom.json", client=client)
    document = Document(recipes=[Recipe.from_dict(TEA)], updated_at="2024-01-01T00:00:00.000Z")
    with Stubber(client) as stub:
        stub.add_response(
            "put_object",
            {},
            {
                "Bucket": "kh-recipes",
                "Key": "custom.json",
                "Body": ANY,
                "ContentType": "application/json",
            },
        )
        assert await repo.put(document) is document
        stub.assert_no_pending_responses()


def test_repository_from_config(tmp_path) -> None:
    local = repository_from_config(Config(use_s3=False, local_data_file=tmp_path / "r.json"))
    assert isinstance(local, LocalFileRepository)

    s3 = repository_from_config(Config(use_s3=True, s3_bucket="kh-recipes"))
    assert isinstance(s3, S3Repository)
    assert s3.key == "recipes.json"

    with pytest.raises(ValueError):
        repository_from_config(Config(use_s3=True, s3_bucket=None))


@pytest.mark.asyncio
async def test_s3_unreadable_document() -> None:
    client = s3_client()
    repo = S3Repository(bucket="kh-recipes", client=client)
    with Stubber(client) as stub:
        stub.add_response("get_object", {"Body": body({"recipes": [{"name": "Legacy"}]})})
        with pytest.raises(StorageError):
            await repo.get()

        raw = b"\xff\xfe"
        stub.add_response("get_object", {"Body": StreamingBody(io.BytesIO(raw), len(raw))})
        with pytest.raises(StorageError):
            await repo.get()
