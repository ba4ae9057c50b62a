"""Local filesystem media store."""

import asyncio
import shutil
import uuid
from pathlib import Path

from vidtube.infrastructure.storage.base import MediaStore, UploadedMedia


class LocalMediaStore(MediaStore):
    """Media store that keeps files in a directory served by the app."""

    def __init__(self, storage_path: str | Path, base_url: str) -> None:
        self.storage_path = Path(storage_path)
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def _generate_unique_filename(original_filename: str) -> str:
        suffix = Path(original_filename).suffix
        return f"{uuid.uuid4()}{suffix}"

    def _copy(self, source: Path, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)

    async def upload(self, local_path: Path, filename: str, mime_type: str) -> UploadedMedia:
        key = self._generate_unique_filename(filename)
        destination = self.storage_path / key
        await asyncio.to_thread(self._copy, Path(local_path), destination)
        return UploadedMedia(
            url=f"{self.base_url}/{key}",
            key=key,
            size=destination.stat().st_size,
            mime_type=mime_type,
        )

    async def delete(self, key: str) -> None:
        await asyncio.to_thread((self.storage_path / key).unlink, missing_ok=True)

    async def test_connection(self) -> tuple[bool, str | None]:
        """Verify that the configured storage path is writable."""
        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)

            check_file = self.storage_path / ".media_store_write_check"
            check_file.write_text("ok", encoding="utf-8")
            check_file.unlink(missing_ok=True)

            return True, f"Local storage is writable at '{self.storage_path}'."
        except OSError as e:
            return False, f"Local storage test failed: {str(e)}"
