"""Photo gallery endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from anniversary.api.deps import get_site, read_upload, to_http_exception
from anniversary.exceptions import AnniversaryError
from anniversary.site import Site

router = APIRouter(tags=["photos"])
logger = logging.getLogger(__name__)


@router.get("/api/photos")
def list_photos_endpoint(
    site: Annotated[Site, Depends(get_site)],
) -> list[dict[str, Any]]:
    """List all uploaded photos in upload order."""
    try:
        return site.photos.list()
    except Exception:
        logger.exception("Failed to list photos")
        return []


@router.post("/api/photos")
def upload_photos_endpoint(
    site: Annotated[Site, Depends(get_site)],
    photos: Annotated[list[UploadFile] | None, File()] = None,
    metadata: Annotated[str | None, Form()] = None,
) -> dict[str, Any]:
    """Upload a batch of photos with per-photo year and caption."""
    limit = site.photos.assets.max_bytes
    uploads = [read_upload(file, limit) for file in photos or []]

    try:
        created = site.photos.create(uploads, metadata)
    except AnniversaryError as e:
        raise to_http_exception(e, "Uploading photos") from e
    except Exception as e:
        logger.exception("Failed to upload photos")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload photos",
        ) from e

    return {"success": True, "photos": created}


@router.delete("/api/photos/{photo_id}")
def delete_photo_endpoint(
    photo_id: str,
    site: Annotated[Site, Depends(get_site)],
) -> dict[str, Any]:
    """Delete a photo and its image file."""
    try:
        site.photos.delete(photo_id)
    except AnniversaryError as e:
        raise to_http_exception(e, f"Deleting photo {photo_id}") from e
    except Exception as e:
        logger.exception("Failed to delete photo")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete photo",
        ) from e
    else:
        return {"success": True}
