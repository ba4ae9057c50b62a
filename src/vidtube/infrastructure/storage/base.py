"""Base abstractions for media stores."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class UploadedMedia:
    """Result of a successful upload to a media store."""

    url: str
    key: str
    size: int
    mime_type: str


class MediaStore(ABC):
    """Abstract base class for media stores.

    A media store takes a file already staged on local disk and returns a
    durable URL for it. It never deletes the staged file; the caller owns it.
    """

    @abstractmethod
    async def upload(self, local_path: Path, filename: str, mime_type: str) -> UploadedMedia:
        """Upload a local file and return where it can be fetched from."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a stored object. Deleting a missing key is not an error."""
        ...

    @abstractmethod
    async def test_connection(self) -> tuple[bool, str | None]:
        """Test store connectivity and credentials."""
        ...
