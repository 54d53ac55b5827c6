"""Photo gallery records."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from .exceptions import NotFoundError, StorageError, ValidationError
from .utils import epoch_millis, isoformat_z, utc_now

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from .assets import AssetManager, Upload
    from .store import Record, RecordStore

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 20
PHOTO_NOT_FOUND = "Photo not found"


def parse_metadata(raw: str | Sequence[Any] | None) -> list[dict[str, Any]]:
    """Decode the ``metadata`` form field sent alongside a batch upload.

    Args:
        raw: JSON text, an already decoded list, or nothing.

    Returns:
        One mapping per position; entries that are not objects become ``{}``.

    Raises:
        ValidationError: If the text is not a JSON array.

    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as e:
            msg = "metadata must be a JSON array"
            raise ValidationError(msg) from e
    else:
        decoded = raw
    if not isinstance(decoded, list):
        msg = "metadata must be a JSON array"
        raise ValidationError(msg)
    return [dict(item) if isinstance(item, Mapping) else {} for item in decoded]


class PhotoService:
    """List, bulk-create and delete gallery photos."""

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
        """Return every photo in the order it was uploaded."""
        return self.store.load_all()

    def create(
        self,
        uploads: Sequence[Upload],
        metadata: str | Sequence[Any] | None = None,
    ) -> list[Record]:
        """Store a batch of images and append one record per image.

        The whole batch is validated before anything is written, so a single
        non-image file rejects the request without leaving files behind.

        Args:
            uploads: The uploaded images in form order.
            metadata: ``{year, caption}`` entries matched to ``uploads`` by
                position; missing entries use the current year and no caption.

        Returns:
            The newly created photo records.

        Raises:
            ValidationError: If the batch is empty, too large, or holds a
                file that is not an acceptable image.
            StorageError: If a file or the store cannot be written.

        """
        if not uploads:
            msg = "No photos uploaded"
            raise ValidationError(msg)
        if len(uploads) > MAX_BATCH_SIZE:
            msg = f"At most {MAX_BATCH_SIZE} photos can be uploaded at once"
            raise ValidationError(msg)
        entries = parse_metadata(metadata)
        for upload in uploads:
            self.assets.validate(upload)

        now = self.clock()
        stored: list[str] = []
        try:
            for upload in uploads:
                stored.append(self.assets.store(upload))
            with self.store.transaction() as records:
                base = self._free_base(records, epoch_millis(now), len(stored))
                new_photos = [
                    self._build(f"{base}-{index}", filename, entries, index, now)
                    for index, filename in enumerate(stored)
                ]
                records.extend(new_photos)
        except Exception:
            for filename in stored:
                self._discard(filename)
            raise

        logger.info("Uploaded %d photos", len(new_photos))
        return new_photos

    @staticmethod
    def _free_base(records: list[Record], base: int, count: int) -> int:
        """Return the first timestamp whose batch ids are all unused."""
        taken = {str(record.get("id")) for record in records}
        while any(f"{base}-{index}" in taken for index in range(count)):
            base += 1
        return base

    def _build(
        self,
        photo_id: str,
        filename: str,
        entries: list[dict[str, Any]],
        index: int,
        now: datetime,
    ) -> Record:
        meta = entries[index] if index < len(entries) else {}
        return {
            "id": photo_id,
            "filename": filename,
            "src": self.assets.src_for(filename),
            "year": str(meta.get("year") or now.year),
            "caption": str(meta.get("caption") or ""),
            "uploadedAt": isoformat_z(now),
        }

    def delete(self, photo_id: str) -> None:
        """Delete a photo record and its image file.

        A file that cannot be removed is logged; the record is removed anyway.

        Raises:
            NotFoundError: If no photo has ``photo_id``.

        """
        with self.store.transaction() as records:
            index = next(
                (i for i, record in enumerate(records) if record.get("id") == photo_id),
                None,
            )
            if index is None:
                raise NotFoundError(PHOTO_NOT_FOUND)
            photo = records.pop(index)
            self._discard(photo.get("filename"))
        logger.info("Deleted photo %s", photo_id)

    def _discard(self, filename: Any) -> None:  # noqa: ANN401
        if not filename:
            return
        if not isinstance(filename, str):
            logger.warning("Photo record has an unusable filename: %r", filename)
            return
        try:
            if not self.assets.delete(filename):
                logger.warning("Photo file %s was already missing", filename)
        except (StorageError, ValidationError):
            logger.exception("Failed to delete photo file %s", filename)
