"""Media stores and the upload service built on them."""

from vidtube.infrastructure.storage.base import MediaStore, UploadedMedia
from vidtube.infrastructure.storage.local_storage_provider import LocalMediaStore
from vidtube.infrastructure.storage.media_service import (
    MediaService,
    create_media_store,
    has_file,
)
from vidtube.infrastructure.storage.s3_storage_provider import (
    S3MediaStore,
    S3StorageSettings,
)

__all__ = [
    "LocalMediaStore",
    "MediaService",
    "MediaStore",
    "S3MediaStore",
    "S3StorageSettings",
    "UploadedMedia",
    "create_media_store",
    "has_file",
]
