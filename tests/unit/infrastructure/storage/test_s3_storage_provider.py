"""Unit tests for the S3 media store."""

from unittest import mock

import pytest
from botocore.exceptions import ClientError

from vidtube.infrastructure.storage.s3_storage_provider import S3MediaStore, S3StorageSettings


def _client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def s3_store() -> S3MediaStore:
    return S3MediaStore(
        S3StorageSettings(
            bucket="test-bucket",
            region="us-east-1",
            access_key_id="AKIATEST",
            secret_access_key="secret",
        )
    )


@pytest.fixture
def staged_file(tmp_path):
    path = tmp_path / "staged.png"
    path.write_bytes(b"\x89PNG")
    return path


@pytest.mark.asyncio
async def test_upload_returns_public_url(s3_store: S3MediaStore, staged_file) -> None:
    with mock.patch("vidtube.infrastructure.storage.s3_storage_provider.boto3.client") as mock_client:
        client = mock.MagicMock()
        mock_client.return_value = client

        media = await s3_store.upload(staged_file, "avatar.png", "image/png")

    assert media.key.startswith("media/")
    assert media.key.endswith(".png")
    assert media.url == f"https://test-bucket.s3.us-east-1.amazonaws.com/{media.key}"
    assert media.size == 4
    client.upload_file.assert_called_once()
    assert client.upload_file.call_args.kwargs["ExtraArgs"] == {"ContentType": "image/png"}


@pytest.mark.asyncio
async def test_upload_client_error_raises_runtime_error(s3_store: S3MediaStore, staged_file) -> None:
    with mock.patch("vidtube.infrastructure.storage.s3_storage_provider.boto3.client") as mock_client:
        client = mock.MagicMock()
        client.upload_file.side_effect = _client_error("AccessDenied", "denied", "PutObject")
        mock_client.return_value = client

        with pytest.raises(RuntimeError, match="Failed to upload file to S3"):
            await s3_store.upload(staged_file, "avatar.png", "image/png")


def test_public_url_with_custom_endpoint() -> None:
    store = S3MediaStore(
        S3StorageSettings(bucket="b", region="auto", endpoint_url="https://minio.local/")
    )

    assert store.public_url("media/x.png") == "https://minio.local/b/media/x.png"


@pytest.mark.asyncio
async def test_connection_failure_reports_code(s3_store: S3MediaStore) -> None:
    with mock.patch("vidtube.infrastructure.storage.s3_storage_provider.boto3.client") as mock_client:
        client = mock.MagicMock()
        client.head_bucket.side_effect = _client_error("NoSuchBucket", "missing", "HeadBucket")
        mock_client.return_value = client

        ok, message = await s3_store.test_connection()

    assert ok is False
    assert "NoSuchBucket" in message


@pytest.mark.asyncio
async def test_delete_removes_object(s3_store: S3MediaStore) -> None:
    with mock.patch("vidtube.infrastructure.storage.s3_storage_provider.boto3.client") as mock_client:
        client = mock.MagicMock()
        mock_client.return_value = client

        await s3_store.delete("media/x.png")

    client.delete_object.assert_called_once_with(Bucket="test-bucket", Key="media/x.png")


@pytest.mark.asyncio
async def test_delete_client_error_raises_runtime_error(s3_store: S3MediaStore) -> None:
    with mock.patch("vidtube.infrastructure.storage.s3_storage_provider.boto3.client") as mock_client:
        client = mock.MagicMock()
        client.delete_object.side_effect = _client_error("AccessDenied", "denied", "DeleteObject")
        mock_client.return_value = client

        with pytest.raises(RuntimeError, match="Failed to delete file from S3"):
            await s3_store.delete("media/x.png")
