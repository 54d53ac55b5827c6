"""Uploaded image storage implemented via fsspec."""

from __future__ import annotations

import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from .config import DEFAULT_MAX_UPLOAD_BYTES
from .exceptions import (
    InvalidFileTypeError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    ValidationError,
)
from .utils import fs_exists, fs_join, fs_makedirs, validate_filename

if TYPE_CHECKING:
    import fsspec

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPE_PREFIX = "image/"
RANDOM_SUFFIX_LIMIT = 10**9
EXTENSION_PATTERN = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


@dataclass(frozen=True)
class Upload:
    """An uploaded file already extracted from the request."""

    data: bytes
    filename: str
    content_type: str


def _extension(filename: str) -> str:
    suffix = PurePosixPath(filename.replace("\\", "/")).suffix
    return suffix if EXTENSION_PATTERN.match(suffix) else ""


def generate_filename(prefix: str, original_name: str) -> str:
    """Build a collision resistant name such as ``uploaded-1700000000000-42.jpg``.

    Args:
        prefix: Purpose tag placed in front of the name.
        original_name: Client supplied filename; only its extension is kept.

    Returns:
        The generated filename.

    """
    millis = time.time_ns() // 1_000_000
    suffix = secrets.randbelow(RANDOM_SUFFIX_LIMIT)
    return f"{prefix}-{millis}-{suffix}{_extension(original_name)}"


class AssetManager:
    """Stores images for one record type under a single directory."""

    def __init__(
        self,
        fs: fsspec.AbstractFileSystem,
        directory: str,
        *,
        prefix: str,
        url_prefix: str,
        max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        """Bind the manager to ``directory`` on ``fs``.

        Args:
            fs: Filesystem holding the images.
            directory: Directory the images are written to.
            prefix: Purpose tag for generated names (``uploaded``, ``letter``).
            url_prefix: Public path the images are served under (``pic``).
            max_bytes: Largest accepted upload in bytes.

        """
        self.fs = fs
        self.directory = directory
        self.prefix = prefix
        self.url_prefix = url_prefix
        self.max_bytes = max_bytes

    def ensure(self) -> None:
        """Create the asset directory if it is missing."""
        fs_makedirs(self.fs, self.directory)

    def src_for(self, filename: str) -> str:
        """Return the public path of a stored image."""
        return f"{self.url_prefix}/{filename}"

    def filename_from_src(self, src: str) -> str:
        """Return the stored filename referenced by a public path."""
        return src.rsplit("/", 1)[-1]

    def validate(self, upload: Upload) -> None:
        """Check that ``upload`` is an image within the size limit.

        Raises:
            InvalidFileTypeError: If the declared type is not ``image/*``.
            PayloadTooLargeError: If the upload exceeds ``max_bytes``.

        """
        content_type = (upload.content_type or "").lower()
        if not content_type.startswith(IMAGE_CONTENT_TYPE_PREFIX):
            msg = f"Only image files are allowed: {upload.filename or 'upload'}"
            raise InvalidFileTypeError(msg)
        if len(upload.data) > self.max_bytes:
            msg = (
                f"{upload.filename or 'upload'} exceeds the "
                f"{self.max_bytes} byte upload limit"
            )
            raise PayloadTooLargeError(msg)

    def store(self, upload: Upload) -> str:
        """Validate and persist ``upload`` under a generated name.

        Args:
            upload: The extracted upload.

        Returns:
            The generated filename.

        Raises:
            InvalidFileTypeError: If the upload is not an image.
            PayloadTooLargeError: If the upload is too large.
            StorageError: If the file cannot be written.

        """
        self.validate(upload)
        filename = generate_filename(self.prefix, upload.filename)
        path = fs_join(self.directory, filename)
        try:
            self.ensure()
            with self.fs.open(path, "wb") as handle:
                handle.write(upload.data)
        except OSError as e:
            logger.exception("Failed to write asset %s", path)
            msg = f"Failed to store {upload.filename or 'upload'}"
            raise StorageError(msg) from e
        logger.info("Stored asset %s (%d bytes)", path, len(upload.data))
        return filename

    def _path(self, filename: str) -> str:
        try:
            return fs_join(self.directory, validate_filename(filename))
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def exists(self, filename: str) -> bool:
        """Return True if ``filename`` is stored in this directory."""
        return fs_exists(self.fs, self._path(filename))

    def delete(self, filename: str) -> bool:
        """Remove ``filename`` from the directory.

        Deleting a file that is already gone is not an error.

        Returns:
            True if a file was removed, False if it did not exist.

        Raises:
            ValidationError: If ``filename`` is not a bare filename.
            StorageError: If the file exists but cannot be removed.

        """
        path = self._path(filename)
        if not fs_exists(self.fs, path):
            return False
        try:
            self.fs.rm(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            msg = f"Failed to delete asset {filename}"
            raise StorageError(msg) from e
        logger.info("Deleted asset %s", path)
        return True

    def read(self, filename: str) -> bytes:
        """Return the bytes of a stored image.

        Raises:
            NotFoundError: If the image does not exist.

        """
        path = self._path(filename)
        try:
            with self.fs.open(path, "rb") as handle:
                return handle.read()
        except FileNotFoundError as e:
            msg = f"Asset {filename} not found"
            raise NotFoundError(msg) from e
