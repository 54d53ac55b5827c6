"""Love notes with pin and archive flags."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import NotFoundError, ValidationError
from .utils import epoch_millis, isoformat_z, parse_timestamp, utc_now

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime

    from .store import Record, RecordStore

logger = logging.getLogger(__name__)

DEFAULT_TAG = "thought"
KNOWN_TAGS = ("thought", "memory", "joke", "love", "dream", "promise")
ALL_TAGS = "all"
UPDATABLE_FIELDS = ("pinned", "archived", "content", "tag")
NOTE_NOT_FOUND = "Note not found"


def sort_notes(notes: list[Record]) -> list[Record]:
    """Order notes pinned first, newest first within each group."""
    by_recency = sorted(
        notes,
        key=lambda note: parse_timestamp(note.get("createdAt")),
        reverse=True,
    )
    return sorted(by_recency, key=lambda note: not note.get("pinned"))


def _clean_content(content: Any) -> str:  # noqa: ANN401
    if not isinstance(content, str) or not content.strip():
        msg = "Note content cannot be empty"
        raise ValidationError(msg)
    return content


def _clean_tag(tag: Any) -> str:  # noqa: ANN401
    if tag is None or tag == "":
        return DEFAULT_TAG
    if not isinstance(tag, str) or not tag.strip():
        msg = "Note tag must be a non-empty string"
        raise ValidationError(msg)
    return tag.strip()


class NoteService:
    """CRUD over notes stored in one JSON array."""

    def __init__(
        self,
        store: RecordStore,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.clock = clock

    def list(self, tag: str | None = None) -> list[Record]:
        """Return unarchived notes, pinned first, optionally for one tag.

        Args:
            tag: Exact tag to keep; ``None`` or ``"all"`` keeps every tag.

        Returns:
            The visible notes in display order.

        """
        notes = [note for note in self.store.load_all() if not note.get("archived")]
        if tag and tag != ALL_TAGS:
            notes = [note for note in notes if note.get("tag") == tag]
        return sort_notes(notes)

    def create(
        self,
        content: str,
        tag: str | None = DEFAULT_TAG,
        *,
        pinned: bool = False,
    ) -> Record:
        """Append a new note.

        Raises:
            ValidationError: If ``content`` is empty or only whitespace.

        """
        content = _clean_content(content)
        tag = _clean_tag(tag)
        now = self.clock()
        with self.store.transaction() as records:
            taken = {str(record.get("id")) for record in records}
            millis = epoch_millis(now)
            while str(millis) in taken:
                millis += 1
            note = {
                "id": str(millis),
                "content": content,
                "tag": tag,
                "pinned": bool(pinned),
                "archived": False,
                "createdAt": isoformat_z(now),
            }
            records.append(note)
        logger.info("Created note %s", note["id"])
        return note

    def update(self, note_id: str, changes: Mapping[str, Any]) -> Record:
        """Merge ``changes`` into an existing note.

        Only ``pinned``, ``archived``, ``content`` and ``tag`` are applied;
        other keys are ignored so ids and timestamps cannot be rewritten.

        Raises:
            NotFoundError: If no note has ``note_id``.
            ValidationError: If ``content`` is set to blank text.

        """
        patch: dict[str, Any] = {}
        for field in UPDATABLE_FIELDS:
            if field not in changes or changes[field] is None:
                continue
            value = changes[field]
            if field == "content":
                value = _clean_content(value)
            elif field == "tag":
                value = _clean_tag(value)
            else:
                value = bool(value)
            patch[field] = value

        with self.store.transaction() as records:
            note = next((n for n in records if n.get("id") == note_id), None)
            if note is None:
                raise NotFoundError(NOTE_NOT_FOUND)
            note.update(patch)
        logger.info(
            "Updated note %s (%s)",
            note_id,
            ", ".join(sorted(patch)) or "no changes",
        )
        return note

    def delete(self, note_id: str) -> None:
        """Remove a note.

        Raises:
            NotFoundError: If no note has ``note_id``.

        """
        with self.store.transaction() as records:
            remaining = [note for note in records if note.get("id") != note_id]
            if len(remaining) == len(records):
                raise NotFoundError(NOTE_NOT_FOUND)
            records[:] = remaining
        logger.info("Deleted note %s", note_id)
