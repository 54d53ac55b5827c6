"""Data root layout and service wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .assets import AssetManager
from .config import DEFAULT_MAX_UPLOAD_BYTES
from .exceptions import StorageError
from .letters import LetterService
from .notes import NoteService
from .photos import PhotoService
from .store import open_store
from .utils import fs_join, fs_makedirs, get_fs_and_path

if TYPE_CHECKING:
    import fsspec

logger = logging.getLogger(__name__)

PHOTOS_STORE = "photos"
NOTES_STORE = "notes"
LETTERS_STORE = "letters"
PHOTO_ASSET_DIR = "pic"
LETTER_ASSET_DIR = "letters"
PHOTO_PREFIX = "uploaded"
LETTER_PREFIX = "letter"


@dataclass
class Site:
    """The three services bound to one data root."""

    root: str
    photos: PhotoService
    notes: NoteService
    letters: LetterService

    @classmethod
    def from_root(
        cls,
        root_path: str | Path,
        *,
        fs: fsspec.AbstractFileSystem | None = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> Site:
        """Build the services for the data root at ``root_path``.

        Layout under the root::

            photos.json  notes.json  letters.json
            pic/         (gallery uploads)
            letters/     (scanned letters)

        Args:
            root_path: Local path or fsspec URI of the data root.
            fs: Filesystem to use instead of inferring one from the path.
            max_upload_bytes: Per-file upload limit for both image folders.

        """
        fs_obj, root = get_fs_and_path(root_path, fs)
        photo_assets = AssetManager(
            fs_obj,
            fs_join(root, PHOTO_ASSET_DIR),
            prefix=PHOTO_PREFIX,
            url_prefix=PHOTO_ASSET_DIR,
            max_bytes=max_upload_bytes,
        )
        letter_assets = AssetManager(
            fs_obj,
            fs_join(root, LETTER_ASSET_DIR),
            prefix=LETTER_PREFIX,
            url_prefix=LETTER_ASSET_DIR,
            max_bytes=max_upload_bytes,
        )
        return cls(
            root=root,
            photos=PhotoService(open_store(fs_obj, root, PHOTOS_STORE), photo_assets),
            notes=NoteService(open_store(fs_obj, root, NOTES_STORE)),
            letters=LetterService(
                open_store(fs_obj, root, LETTERS_STORE),
                letter_assets,
            ),
        )

    def asset_manager(self, directory: str) -> AssetManager:
        """Return the asset manager serving ``directory`` (``pic``/``letters``)."""
        managers = {
            PHOTO_ASSET_DIR: self.photos.assets,
            LETTER_ASSET_DIR: self.letters.assets,
        }
        try:
            return managers[directory]
        except KeyError as e:
            msg = f"Unknown asset directory: {directory}"
            raise ValueError(msg) from e

    def initialize(self) -> None:
        """Create missing store files and asset directories.

        Raises:
            StorageError: If the data root cannot be prepared.

        """
        try:
            fs_makedirs(self.photos.store.fs, self.root)
            for store in (self.photos.store, self.notes.store, self.letters.store):
                store.ensure()
            self.photos.assets.ensure()
            self.letters.assets.ensure()
        except OSError as e:
            logger.exception("Failed to initialize data root %s", self.root)
            msg = f"Failed to initialize data root {self.root}"
            raise StorageError(msg) from e
        logger.info("Data root ready at %s", self.root)
