"""
DevCamper API — Photo Storage Service
======================================

What:  Validates, resizes and stores bootcamp photos; serves them back.
How:   Declared media type, size and extension are checked before any
       decoding. Pillow resizes the image in a worker thread, and aiofiles
       writes the result under the upload directory.
Who:   BootcampService.upload_photo and the /uploads route.

Validation order (cheap checks first):
    1. Declared media type starts with "image"
    2. Size <= max_file_size
    3. Extension is a format Pillow knows
    4. Decode + resize (failure here is a processing error, not a client error)
    5. Write to disk

Naming:
    photo_<bootcamp id><original extension>, so a new upload replaces the
    previous photo of the same type instead of accumulating files.
"""

import logging
import os
from io import BytesIO
from pathlib import Path
from typing import Optional

import aiofiles
from PIL import Image
from starlette.concurrency import run_in_threadpool

from devcamper.config import Settings
from devcamper.exceptions import BadRequestError, FileStorageError, NotFoundError

logger = logging.getLogger(__name__)

# Formats that cannot carry an alpha channel
_NO_ALPHA_FORMATS = {"JPEG", "BMP", "PCX", "EPS"}


class PhotoStore:
    """
    Lifecycle of an uploaded photo:
        1. Route reads the multipart `file` field → PhotoStore.validate()
        2. PhotoStore.save() resizes and writes it, returning the stored name
        3. The bootcamp row is updated with that name
        4. If the row update fails, cleanup() removes the new file
    """

    def __init__(
        self,
        upload_path: str,
        max_file_size: int = 1_000_000,
        width: int = 150,
        height: int = 97,
    ):
        self.upload_root = Path(upload_path).resolve()
        self.max_file_size = max_file_size
        self.width = width
        self.height = height

    @classmethod
    def from_settings(cls, settings: Settings) -> "PhotoStore":
        return cls(
            upload_path=settings.file_upload_path,
            max_file_size=settings.max_file_size,
            width=settings.photo_width,
            height=settings.photo_height,
        )

    def ensure_directory(self) -> None:
        self.upload_root.mkdir(parents=True, exist_ok=True)
        logger.info("PhotoStore using upload_root=%s", self.upload_root)

    def validate(self, filename: Optional[str], content_type: Optional[str], size: int) -> str:
        """
        Returns:
            Normalized extension (lowercase with dot).

        Raises:
            BadRequestError for a non-image media type, an oversized file or
            an extension Pillow does not recognize
        """
        if not content_type or not content_type.startswith("image"):
            raise BadRequestError(
                message="Please upload an image file",
                field="file",
                context={"content_type": content_type},
            )

        if size > self.max_file_size:
            raise BadRequestError(
                message=f"Please upload an image less than {self.max_file_size} bytes",
                field="file",
                context={"max_size": self.max_file_size, "actual_size": size},
            )

        ext = Path(filename or "").suffix.lower()
        if ext not in Image.registered_extensions():
            raise BadRequestError(
                message=f"File type '{ext or filename}' is not a supported image format",
                field="file",
                context={"extension": ext},
            )
        return ext

    def _resize(self, content: bytes, ext: str) -> bytes:
        image_format = Image.registered_extensions()[ext]
        with Image.open(BytesIO(content)) as img:
            resized = img.resize((self.width, self.height))
        if image_format in _NO_ALPHA_FORMATS and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")
        buffer = BytesIO()
        resized.save(buffer, format=image_format)
        return buffer.getvalue()

    async def save(self, resource_id: str, content: bytes, ext: str) -> str:
        """
        Resize and write a validated photo.

        Returns:
            The stored filename (relative to the upload directory).

        Raises:
            FileStorageError if decoding, resizing or writing fails. Nothing is
            left on disk in that case.
        """
        filename = f"photo_{resource_id}{ext}"
        path = self.upload_root / filename

        try:
            data = await run_in_threadpool(self._resize, content, ext)
        except (OSError, ValueError, KeyError, Image.DecompressionBombError) as e:
            logger.warning("Image processing failed for %s: %s", filename, str(e))
            raise FileStorageError(context={"filename": filename, "error": str(e)})

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error("Failed to store photo at %s: %s", path, str(e))
            await self.cleanup(filename)
            raise FileStorageError(context={"path": str(path), "os_error": str(e)})

        logger.info("Photo stored: %s (%d bytes)", filename, len(data))
        return filename

    async def cleanup(self, filename: str) -> None:
        """Best-effort removal of a stored photo."""
        try:
            path = self.upload_root / filename
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", filename)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", filename, str(e))

    def resolve(self, filename: str) -> Path:
        """
        Map a public filename to a path inside the upload directory.

        Raises:
            NotFoundError if the name escapes the directory or does not exist
        """
        path = (self.upload_root / filename).resolve()
        if self.upload_root not in path.parents or not path.is_file():
            raise NotFoundError(resource="file", context={"filename": filename})
        return path
