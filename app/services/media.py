"""Media host service: stage uploads locally, then push them to Cloudinary."""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.config import Settings, get_settings

logger = logging.getLogger("streamline.media")


@dataclass
class MediaUploadResult:
    """Hosted asset returned by the media host."""

    url: str
    secure_url: str | None = None
    public_id: str | None = None
    resource_type: str | None = None


class MediaService:
    """Handles temporary local storage and upload to the external media host."""

    def __init__(self, settings: Settings) -> None:
        self.cloud_name = settings.CLOUDINARY_CLOUD_NAME
        self.api_key = settings.CLOUDINARY_API_KEY
        self.api_secret = settings.CLOUDINARY_API_SECRET
        self.timeout = settings.MEDIA_UPLOAD_TIMEOUT
        self.upload_dir = Path(settings.UPLOAD_DIR)
        self.max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        if self.is_configured:
            cloudinary.config(
                cloud_name=self.cloud_name, api_key=self.api_key, api_secret=self.api_secret, secure=True
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    async def store_temp_file(self, upload: UploadFile) -> Path:
        """Stream an uploaded file to the temp directory with a size limit. Returns its path.

        Raises ValueError if the file exceeds the max upload size.
        """
        ext = Path(upload.filename or "upload.bin").suffix.lower()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.upload_dir / f"{uuid.uuid4()}{ext}"
        file_size = 0
        chunk_size = 1024 * 64  # 64KB chunks

        try:
            with open(file_path, "wb") as f:
                while True:
                    chunk = await upload.read(chunk_size)
                    if not chunk:
                        break
                    file_size += len(chunk)
                    if file_size > self.max_bytes:
                        raise ValueError(
                            f"File too large ({file_size // (1024 * 1024)}MB). "
                            f"Maximum: {self.max_bytes // (1024 * 1024)}MB"
                        )
                    f.write(chunk)
        except ValueError:
            self.remove_temp_file(file_path)
            raise

        return file_path

    async def upload(self, local_path: Path | str | None) -> MediaUploadResult | None:
        """Upload a local file to the media host. Returns None on any failure.

        The local file is removed once the attempt finishes.
        """
        if not local_path:
            return None
        path = Path(local_path)
        if not self.is_configured:
            logger.error("Cloudinary configuration is missing, cannot upload %s", path.name)
            self.remove_temp_file(path)
            return None

        try:
            # The SDK call is blocking
            body = await run_in_threadpool(
                cloudinary.uploader.upload, str(path), resource_type="auto", timeout=self.timeout
            )
        except (cloudinary.exceptions.Error, OSError) as e:
            logger.error("Error occurred while uploading %s: %s", path.name, e)
            return None
        finally:
            self.remove_temp_file(path)

        if not body.get("url"):
            logger.error("Media host response for %s has no url", path.name)
            return None

        logger.info("File uploaded to media host: %s", body["url"])
        return MediaUploadResult(
            url=body["url"],
            secure_url=body.get("secure_url"),
            public_id=body.get("public_id"),
            resource_type=body.get("resource_type"),
        )

    async def upload_file(self, upload: UploadFile | None) -> MediaUploadResult | None:
        """Stage an incoming file and upload it. Returns None if nothing was sent."""
        if upload is None or not upload.filename:
            return None
        local_path = await self.store_temp_file(upload)
        return await self.upload(local_path)

    @staticmethod
    def remove_temp_file(path: Path) -> None:
        if path.exists():
            os.remove(path)
            logger.debug("Local temporary file removed: %s", path)


_media_service: MediaService | None = None


def get_media_service() -> MediaService:
    """Get singleton media service instance."""
    global _media_service
    if _media_service is None:
        _media_service = MediaService(get_settings())
    return _media_service
