"""Amazon S3 media store."""

import asyncio
import uuid
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ConfigDict

from vidtube.core.config import Settings
from vidtube.infrastructure.storage.base import MediaStore, UploadedMedia

MEDIA_PREFIX = "media"


class S3StorageSettings(BaseModel):
    """Configuration settings for the S3 media store."""

    model_config = ConfigDict(from_attributes=True)

    bucket: str
    region: str
    access_key_id: str | None = None
    secret_access_key: str | None = None
    endpoint_url: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3StorageSettings":
        return cls(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            endpoint_url=settings.s3_endpoint_url,
        )


class S3MediaStore(MediaStore):
    """Media store implementation for Amazon S3 and S3-compatible services."""

    def __init__(self, settings: S3StorageSettings) -> None:
        self.settings = settings
        self._client = None

    def _get_client(self):
        """Get or create the S3 client."""
        if self._client is None:
            client_kwargs = {"region_name": self.settings.region}
            if self.settings.access_key_id and self.settings.secret_access_key:
                client_kwargs["aws_access_key_id"] = self.settings.access_key_id
                client_kwargs["aws_secret_access_key"] = self.settings.secret_access_key
            if self.settings.endpoint_url:
                client_kwargs["endpoint_url"] = self.settings.endpoint_url

            self._client = boto3.client("s3", **client_kwargs)
        return self._client

    @staticmethod
    def _generate_key(original_filename: str) -> str:
        suffix = Path(original_filename).suffix
        return f"{MEDIA_PREFIX}/{uuid.uuid4()}{suffix}"

    def public_url(self, key: str) -> str:
        """Public URL of an object in the bucket."""
        if self.settings.endpoint_url:
            return f"{self.settings.endpoint_url.rstrip('/')}/{self.settings.bucket}/{key}"
        return f"https://{self.settings.bucket}.s3.{self.settings.region}.amazonaws.com/{key}"

    async def upload(self, local_path: Path, filename: str, mime_type: str) -> UploadedMedia:
        key = self._generate_key(filename)
        size = Path(local_path).stat().st_size

        try:
            await asyncio.to_thread(
                self._get_client().upload_file,
                str(local_path),
                self.settings.bucket,
                key,
                ExtraArgs={"ContentType": mime_type},
            )
        except (ClientError, BotoCoreError) as e:
            raise RuntimeError(f"Failed to upload file to S3: {str(e)}") from e

        return UploadedMedia(url=self.public_url(key), key=key, size=size, mime_type=mime_type)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(
                self._get_client().delete_object,
                Bucket=self.settings.bucket,
                Key=key,
            )
        except (ClientError, BotoCoreError) as e:
            raise RuntimeError(f"Failed to delete file from S3: {str(e)}") from e

    async def test_connection(self) -> tuple[bool, str | None]:
        try:
            await asyncio.to_thread(self._get_client().head_bucket, Bucket=self.settings.bucket)
            return True, (
                f"S3 connection successful. Bucket '{self.settings.bucket}' "
                f"is accessible in region '{self.settings.region}'."
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_message = e.response.get("Error", {}).get("Message", str(e))
            return False, f"S3 connection failed ({error_code}): {error_message}"
        except BotoCoreError as e:
            return False, f"S3 connection failed: {str(e)}"
