import logging
import shutil
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile

from tastebox.app.core.errors import StorageError
from tastebox.app.services.storage.base import StorageProvider

logger = logging.getLogger(__name__)


class LocalStorageProvider(StorageProvider):
    def __init__(self, media_root: Path, url_prefix: str = "/media"):
        self.media_root = media_root
        self.url_prefix = url_prefix.rstrip("/")
        self.media_root.mkdir(parents=True, exist_ok=True)

    def save_image(self, file: UploadFile) -> str:
        extension = Path(file.filename or "upload").suffix
        filename = f"{uuid4().hex}{extension}"
        destination = self.media_root / filename
        try:
            with destination.open("wb") as buffer:
                file.file.seek(0)
                shutil.copyfileobj(file.file, buffer)
        except OSError as exc:
            logger.exception("Failed to write upload to %s", destination)
            raise StorageError("Failed to store image") from exc
        return f"{self.url_prefix}/{filename}"

    def save_bytes(self, filename: str, data: bytes, content_type: str) -> str:
        name = Path(filename).name
        destination = self.media_root / name
        try:
            destination.write_bytes(data)
        except OSError as exc:
            logger.exception("Failed to write %s (%s)", destination, content_type)
            raise StorageError("Failed to store image") from exc
        return f"{self.url_prefix}/{name}"

    def delete_image(self, url: str) -> None:
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            return
        filename = url[len(prefix) :]
        path = self.media_root / filename
        if path.exists():
            path.unlink()
