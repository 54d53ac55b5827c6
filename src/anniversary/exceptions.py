"""Error taxonomy for the anniversary site."""


class AnniversaryError(Exception):
    """Base class for errors raised by the stores and services."""


class ValidationError(AnniversaryError):
    """Raised when input is missing or malformed."""


class InvalidFileTypeError(ValidationError):
    """Raised when an upload is not an image."""


class PayloadTooLargeError(ValidationError):
    """Raised when an upload exceeds the per-file size limit."""


class EmptyTitleError(ValidationError):
    """Raised when a letter is submitted without a title."""


class MissingImageError(ValidationError):
    """Raised when an image letter is submitted without an image."""


class NotFoundError(AnniversaryError):
    """Raised when a record or asset id is absent from its store."""


class StorageError(AnniversaryError):
    """Raised when a store or asset directory cannot be read or written."""
