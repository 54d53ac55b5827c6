"""Serve uploaded gallery photos and letter scans."""

import logging
import mimetypes
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from anniversary.api.deps import get_site, to_http_exception
from anniversary.exceptions import AnniversaryError
from anniversary.site import LETTER_ASSET_DIR, PHOTO_ASSET_DIR, Site

router = APIRouter(tags=["assets"])
logger = logging.getLogger(__name__)

FALLBACK_MEDIA_TYPE = "application/octet-stream"


def _serve(site: Site, directory: str, filename: str) -> Response:
    try:
        data = site.asset_manager(directory).read(filename)
    except AnniversaryError as e:
        raise to_http_exception(e, f"Reading {directory}/{filename}") from e
    except Exception as e:
        logger.exception("Failed to read asset")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read image",
        ) from e
    media_type = mimetypes.guess_type(filename)[0] or FALLBACK_MEDIA_TYPE
    return Response(content=data, media_type=media_type)


@router.get(f"/{PHOTO_ASSET_DIR}/{{filename}}")
def get_photo_file_endpoint(
    filename: str,
    site: Annotated[Site, Depends(get_site)],
) -> Response:
    """Return a gallery image by its stored filename."""
    return _serve(site, PHOTO_ASSET_DIR, filename)


@router.get(f"/{LETTER_ASSET_DIR}/{{filename}}")
def get_letter_file_endpoint(
    filename: str,
    site: Annotated[Site, Depends(get_site)],
) -> Response:
    """Return a letter scan by its stored filename."""
    return _serve(site, LETTER_ASSET_DIR, filename)
