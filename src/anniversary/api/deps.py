"""Request-scoped dependencies and error translation."""

import logging

from fastapi import HTTPException, UploadFile, status

from anniversary.assets import Upload
from anniversary.config import get_max_upload_bytes, get_root_path
from anniversary.exceptions import (
    AnniversaryError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from anniversary.site import Site

logger = logging.getLogger(__name__)

STORAGE_ERROR_DETAIL = "Something went wrong while saving your data"


def get_site() -> Site:
    """Build the services for the configured data root.

    The root is read on every request so it follows ``ANNIVERSARY_ROOT``.
    """
    return Site.from_root(get_root_path(), max_upload_bytes=get_max_upload_bytes())


def to_http_exception(error: AnniversaryError, action: str) -> HTTPException:
    """Translate a service error into the HTTP error returned to the browser.

    Args:
        error: The error raised by a service.
        action: What the request was doing, used for server-side logs.

    Returns:
        The HTTPException to raise.

    """
    if isinstance(error, PayloadTooLargeError):
        return HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(error),
        )
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    logger.error("%s failed: %s", action, error, exc_info=error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=STORAGE_ERROR_DETAIL,
    )


def read_upload(file: UploadFile, limit: int) -> Upload:
    """Read an uploaded file, stopping one byte past ``limit``.

    Only for sync endpoints; it reads the spooled file without awaiting.
    """
    data = file.file.read(limit + 1)
    return Upload(
        data=data,
        filename=file.filename or "",
        content_type=file.content_type or "",
    )
