"""Media upload service.

Stages an incoming upload on local disk, hands it to the configured media
store, and removes the staged copy whether the upload succeeds or fails.
"""

import asyncio
import tempfile
from pathlib import Path

from fastapi import UploadFile

from vidtube.core.config import Settings
from vidtube.core.exceptions import UploadError, ValidationError
from vidtube.core.logging import get_logger
from vidtube.infrastructure.storage.base import MediaStore, UploadedMedia
from vidtube.infrastructure.storage.local_storage_provider import LocalMediaStore
from vidtube.infrastructure.storage.s3_storage_provider import S3MediaStore, S3StorageSettings

logger = get_logger(__name__)


def create_media_store(settings: Settings) -> MediaStore:
    """Build the media store selected by settings.media_provider."""
    if settings.media_provider == "s3":
        return S3MediaStore(S3StorageSettings.from_settings(settings))
    return LocalMediaStore(storage_path=settings.storage_path, base_url=settings.media_base_url)


def has_file(upload: UploadFile | None) -> bool:
    """True when the client actually attached a file."""
    return upload is not None and bool(upload.filename)


class MediaService:
    """Validate uploads and push them to the media store."""

    def __init__(self, store: MediaStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings
        self.tmp_dir = Path(settings.upload_tmp_dir)

    def validate(self, filename: str, mime_type: str, size: int) -> None:
        """Check size and MIME type limits.

        Raises:
            ValidationError: If the file is empty, too large or of a disallowed type.
        """
        if size == 0:
            raise ValidationError(f"File '{filename}' is empty")
        if size > self.settings.max_file_size:
            max_size_mb = self.settings.max_file_size / (1024 * 1024)
            actual_size_mb = size / (1024 * 1024)
            raise ValidationError(
                f"File size ({actual_size_mb:.2f}MB) exceeds maximum allowed "
                f"size ({max_size_mb:.2f}MB)"
            )
        if mime_type not in self.settings.allowed_mime_types:
            raise ValidationError(
                f"File type '{mime_type}' is not allowed. "
                f"Allowed types: {', '.join(self.settings.allowed_mime_types)}"
            )

    def _stage(self, content: bytes, suffix: str) -> Path:
        self.tmp_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=self.tmp_dir, suffix=suffix, delete=False) as fh:
            fh.write(content)
            return Path(fh.name)

    async def check(self, upload: UploadFile | None) -> None:
        """Validate an upload without storing it.

        Raises:
            ValidationError: If the file breaks size or type limits.
        """
        if not has_file(upload):
            return
        content = await upload.read()
        await upload.seek(0)
        self.validate(upload.filename, upload.content_type or "application/octet-stream", len(content))

    async def discard(self, *media: UploadedMedia | None) -> None:
        """Remove media that no stored record refers to."""
        for item in media:
            if item is None:
                continue
            try:
                await self.store.delete(item.key)
            except Exception as e:
                logger.warning("Failed to remove orphaned media", key=item.key, error=str(e))
            else:
                logger.info("Orphaned media removed", key=item.key)

    async def upload(self, upload: UploadFile | None) -> UploadedMedia | None:
        """Upload a client file to the media store.

        Args:
            upload: The uploaded file, or None when the client sent none.

        Returns:
            The stored media, or None if no file was attached.

        Raises:
            ValidationError: If the file breaks size or type limits.
            UploadError: If the media store fails.
        """
        if not has_file(upload):
            return None

        filename = upload.filename
        mime_type = upload.content_type or "application/octet-stream"
        content = await upload.read()
        self.validate(filename, mime_type, len(content))

        staged = await asyncio.to_thread(self._stage, content, Path(filename).suffix)
        try:
            media = await self.store.upload(staged, filename, mime_type)
        except Exception as e:
            logger.error("Media upload failed", filename=filename, error=str(e))
            raise UploadError("Failed to upload file") from e
        finally:
            staged.unlink(missing_ok=True)

        logger.info("Media uploaded", filename=filename, key=media.key, size=media.size)
        return media
