"""Backend for a personal anniversary website.

Photos, notes and letters are kept in JSON files under a data root, with
uploaded images stored beside them.
"""

from .assets import AssetManager, Upload
from .exceptions import (
    AnniversaryError,
    EmptyTitleError,
    InvalidFileTypeError,
    MissingImageError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    ValidationError,
)
from .letters import LetterService
from .notes import NoteService
from .photos import PhotoService
from .site import Site
from .store import RecordStore

__all__ = [
    "AnniversaryError",
    "AssetManager",
    "EmptyTitleError",
    "InvalidFileTypeError",
    "LetterService",
    "MissingImageError",
    "NoteService",
    "NotFoundError",
    "PayloadTooLargeError",
    "PhotoService",
    "RecordStore",
    "Site",
    "StorageError",
    "Upload",
    "ValidationError",
]
