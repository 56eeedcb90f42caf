"""Filesystem storage for book cover images.

Images live in one flat directory. Each upload gets a fresh name of the form
``<millisecond-epoch>-<9-digit-random><original-extension>`` and is referenced
from a Book by ``<url_prefix>/<name>``; the bytes never enter the database.
Files are only ever created or deleted, never overwritten.
"""

import secrets
import time
from pathlib import Path, PurePosixPath

from fastapi import UploadFile
from loguru import logger
from starlette.concurrency import run_in_threadpool

from src.app.core.errors import InvalidMediaType, PayloadTooLarge
from src.app.runtime.config.config_data import StorageConfig
from src.app.runtime.context import get_config

_NAME_ATTEMPTS = 5


class ImageStore:
    """Write, resolve and delete uploaded cover images."""

    def __init__(self, config: StorageConfig | None = None) -> None:
        config = config or get_config().storage
        self._directory = Path(config.upload_dir)
        self._url_prefix = "/" + config.url_prefix.strip("/")
        self._max_size = config.max_size_bytes
        self._extensions = frozenset(ext.lower() for ext in config.allowed_extensions)
        self._mime_types = frozenset(mime.lower() for mime in config.allowed_mime_types)
        self._directory_ready = False

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def url_prefix(self) -> str:
        return self._url_prefix

    @property
    def max_size(self) -> int:
        return self._max_size

    def ensure_directory(self) -> Path:
        """Create the upload directory once, on first use."""
        if not self._directory_ready:
            self._directory.mkdir(parents=True, exist_ok=True)
            self._directory_ready = True
            logger.debug("Image directory ready at {}", self._directory)
        return self._directory

    def check_media_type(self, original_filename: str | None, declared_mime_type: str | None) -> str:
        """Return the original extension if both it and the MIME type are images.

        Raises:
            InvalidMediaType: when either the extension or the declared type
                is not an accepted image type.
        """
        extension = PurePosixPath(original_filename or "").suffix
        mime_type = (declared_mime_type or "").split(";", 1)[0].strip().lower()
        if extension.lower() not in self._extensions or mime_type not in self._mime_types:
            raise InvalidMediaType()
        return extension

    @staticmethod
    def generate_filename(extension: str) -> str:
        millis = time.time_ns() // 1_000_000
        suffix = 100_000_000 + secrets.randbelow(900_000_000)
        return f"{millis}-{suffix}{extension}"

    def store(
        self,
        payload: bytes,
        original_filename: str | None,
        declared_mime_type: str | None,
    ) -> str:
        """Persist ``payload`` and return its reference path.

        The media type and size are checked before anything touches the disk.
        A partially written file is removed if the write does not complete.
        """
        extension = self.check_media_type(original_filename, declared_mime_type)
        if len(payload) > self._max_size:
            raise PayloadTooLarge()

        directory = self.ensure_directory()
        for _ in range(_NAME_ATTEMPTS):
            filename = self.generate_filename(extension)
            path = directory / filename
            try:
                handle = path.open("xb")
            except FileExistsError:
                continue
            try:
                with handle:
                    handle.write(payload)
            except BaseException:
                path.unlink(missing_ok=True)
                logger.warning("Removed partially written image {}", filename)
                raise
            logger.info(
                "Stored image {} ({} bytes) from {}", filename, len(payload), original_filename
            )
            return f"{self._url_prefix}/{filename}"

        raise FileExistsError(f"Could not allocate a unique image name in {directory}")

    async def save_upload(self, upload: UploadFile) -> str:
        """Store a multipart upload without blocking the event loop."""
        self.check_media_type(upload.filename, upload.content_type)
        # one byte past the limit is enough to detect an oversized upload
        payload = await upload.read(self._max_size + 1)
        if len(payload) > self._max_size:
            raise PayloadTooLarge()
        return await run_in_threadpool(
            self.store, payload, upload.filename, upload.content_type
        )

    def path_for(self, reference: object) -> Path | None:
        """Resolve a reference to a path inside the upload directory.

        References outside the URL prefix, or naming anything but a plain
        file in the directory, resolve to ``None``.
        """
        if not isinstance(reference, str) or not reference:
            return None
        prefix = f"{self._url_prefix}/"
        if not reference.startswith(prefix):
            return None
        name = reference[len(prefix):]
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            return None
        return self._directory / name

    def exists(self, reference: object) -> bool:
        path = self.path_for(reference)
        return path is not None and path.is_file()

    def delete(self, reference: str) -> bool:
        """Delete the image behind ``reference``.

        Idempotent: returns ``False`` without raising when the file is
        already gone or the reference is not one of ours.
        """
        path = self.path_for(reference)
        if path is None:
            logger.warning("Refusing to delete image outside the store: {}", reference)
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("Image {} already absent", reference)
            return False
        logger.info("Deleted image {}", reference)
        return True
