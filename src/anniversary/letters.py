"""Letters written as text or scanned from paper."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import (
    EmptyTitleError,
    MissingImageError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .utils import epoch_millis, isoformat_z, parse_timestamp, utc_now

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from .assets import AssetManager, Upload
    from .store import Record, RecordStore

logger = logging.getLogger(__name__)

FORMAT_TEXT = "text"
FORMAT_IMAGE = "image"
# Moods a reader must declare before a locked letter is shown.
READ_WHEN_CHOICES = ("", "miss", "unsure", "happy", "sad")
LETTER_NOT_FOUND = "Letter not found"


def _clean_title(title: Any) -> str:  # noqa: ANN401
    if not isinstance(title, str) or not title.strip():
        msg = "Letter title cannot be empty"
        raise EmptyTitleError(msg)
    return title.strip()


def _clean_read_when(read_when: str | None) -> str:
    value = read_when or ""
    if value not in READ_WHEN_CHOICES:
        choices = ", ".join(choice for choice in READ_WHEN_CHOICES if choice)
        msg = f"readWhen must be empty or one of: {choices}"
        raise ValidationError(msg)
    return value


class LetterService:
    """Create, list and delete letters."""

    def __init__(
        self,
        store: RecordStore,
        assets: AssetManager,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.assets = assets
        self.clock = clock

    def list(self) -> list[Record]:
        """Return every letter, most recently created first."""
        return sorted(
            self.store.load_all(),
            key=lambda letter: parse_timestamp(letter.get("createdAt")),
            reverse=True,
        )

    def create_text(
        self,
        title: str,
        content: str | None = "",
        *,
        date_written: str | None = None,
        feeling: str | None = "",
        read_when: str | None = "",
    ) -> Record:
        """Save a letter typed into the site.

        Raises:
            EmptyTitleError: If ``title`` is blank.
            ValidationError: If ``read_when`` is not a known mood.

        """
        letter = self._base(title, FORMAT_TEXT, date_written, feeling, read_when)
        letter["content"] = content or ""
        return self._append(letter)

    def create_image(
        self,
        title: str,
        upload: Upload | None,
        *,
        date_written: str | None = None,
        feeling: str | None = "",
        read_when: str | None = "",
    ) -> Record:
        """Save a photographed or scanned letter.

        Raises:
            EmptyTitleError: If ``title`` is blank.
            MissingImageError: If no image was attached.
            InvalidFileTypeError: If the attachment is not an image.
            PayloadTooLargeError: If the attachment is too large.

        """
        letter = self._base(title, FORMAT_IMAGE, date_written, feeling, read_when)
        if upload is None or not upload.data:
            msg = "An image is required for image letters"
            raise MissingImageError(msg)
        filename = self.assets.store(upload)
        letter["imageSrc"] = self.assets.src_for(filename)
        try:
            return self._append(letter)
        except StorageError:
            self._discard(letter["imageSrc"])
            raise

    def _base(
        self,
        title: str,
        letter_format: str,
        date_written: str | None,
        feeling: str | None,
        read_when: str | None,
    ) -> Record:
        return {
            "title": _clean_title(title),
            "format": letter_format,
            "dateWritten": date_written or None,
            "feeling": feeling or "",
            "readWhen": _clean_read_when(read_when),
        }

    def _append(self, letter: Record) -> Record:
        now = self.clock()
        with self.store.transaction() as records:
            taken = {str(record.get("id")) for record in records}
            millis = epoch_millis(now)
            while str(millis) in taken:
                millis += 1
            letter = {"id": str(millis), **letter, "createdAt": isoformat_z(now)}
            records.append(letter)
        logger.info("Created %s letter %s", letter["format"], letter["id"])
        return letter

    def delete(self, letter_id: str) -> None:
        """Delete a letter and, for image letters, its image file.

        Raises:
            NotFoundError: If no letter has ``letter_id``.

        """
        with self.store.transaction() as records:
            letter = next((r for r in records if r.get("id") == letter_id), None)
            if letter is None:
                raise NotFoundError(LETTER_NOT_FOUND)
            if letter.get("imageSrc"):
                self._discard(letter["imageSrc"])
            records[:] = [r for r in records if r.get("id") != letter_id]
        logger.info("Deleted letter %s", letter_id)

    def _discard(self, image_src: Any) -> None:  # noqa: ANN401
        if not isinstance(image_src, str):
            logger.warning("Letter record has an unusable imageSrc: %r", image_src)
            return
        filename = self.assets.filename_from_src(image_src)
        try:
            if not self.assets.delete(filename):
                logger.warning("Letter image %s was already missing", filename)
        except (StorageError, ValidationError):
            logger.exception("Failed to delete letter image %s", filename)
