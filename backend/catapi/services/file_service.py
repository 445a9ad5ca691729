"""
CatAPI Backend — File Storage Service
=======================================

What:  Validates, stores, resolves and removes uploaded cat images.
How:   Checks extension and size, then writes the bytes with aiofiles under
       `settings.storage_root` using a UUID filename. The stored name is what
       the cat record keeps in its `filename` column.
Who:   Called by the cat routes (store/cleanup) and the uploads route (resolve).

Security Model:
    1. Extension check:  only common image formats are accepted
    2. Size check:       empty files and files above max_file_size are rejected
    3. UUID filename:    no client input reaches the filesystem path
    4. Resolve check:    served paths must stay inside the storage root
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from catapi.config import settings
from catapi.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class FileService:
    """
    Upload lifecycle:
        1. Route reads the multipart file → FileService.validate_and_store()
        2. Extension and size are checked
        3. Bytes are written to <storage_root>/<uuid><ext>
        4. The stored name is handed to CatService.create_cat
        5. If create_cat fails the route calls cleanup_file()
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: Optional[str]) -> str:
        """Return the normalized extension or raise ValidationError."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"Unsupported file type '{ext or filename}', "
                    f"allowed {', '.join(sorted(ALLOWED_EXTENSIONS))}: file"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty uploads and uploads above `settings.max_file_size`.

        Content-Length is checked as well as the real byte count because
        clients do not always report it correctly.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty: file", field="file")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File exceeds maximum size of {max_mb:.0f}MB: file",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File exceeds maximum size of {max_mb:.0f}MB: file",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    async def store_file(self, content: bytes, extension: str) -> str:
        """
        Write the bytes to a new UUID-named file and return the stored name.

        Raises:
            FileStorageError if the write fails.
        """
        stored_name = f"{uuid.uuid4()}{extension}"
        absolute_path = self.storage_root / stored_name

        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", stored_name, len(content))
        return stored_name

    async def validate_and_store(
        self,
        filename: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """Validate an upload and store it. Returns the stored filename."""
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        return await self.store_file(content, ext)

    def resolve_path(self, stored_name: str) -> Path:
        """
        Absolute path of a stored file.

        Raises:
            NotFoundError if the name escapes the storage root or the file
            does not exist.
        """
        candidate = (self.storage_root / stored_name).resolve()
        if candidate.parent != self.storage_root or not candidate.is_file():
            raise NotFoundError(resource="file", resource_id=stored_name)
        return candidate

    async def cleanup_file(self, stored_name: str) -> None:
        """
        Best-effort removal of a stored file.

        Used after a failed create. Failures are logged, never raised: the API
        response does not depend on it.
        """
        try:
            path = (self.storage_root / stored_name).resolve()
            if path.parent != self.storage_root:
                logger.warning("Refusing to remove file outside storage root: %s", stored_name)
                return
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", stored_name, str(e))


file_service = FileService()
