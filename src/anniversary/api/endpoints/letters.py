"""Letter endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from anniversary.api.deps import get_site, read_upload, to_http_exception
from anniversary.exceptions import AnniversaryError
from anniversary.schemas import LetterCreate
from anniversary.site import Site

router = APIRouter(tags=["letters"])
logger = logging.getLogger(__name__)


@router.get("/api/letters")
def list_letters_endpoint(
    site: Annotated[Site, Depends(get_site)],
) -> list[dict[str, Any]]:
    """List all letters, newest first."""
    try:
        return site.letters.list()
    except Exception:
        logger.exception("Failed to list letters")
        return []


@router.post("/api/letters")
def create_text_letter_endpoint(
    payload: LetterCreate,
    site: Annotated[Site, Depends(get_site)],
) -> dict[str, Any]:
    """Write a text letter."""
    try:
        letter = site.letters.create_text(
            payload.title,
            payload.content,
            date_written=payload.date_written,
            feeling=payload.feeling,
            read_when=payload.read_when,
        )
    except AnniversaryError as e:
        raise to_http_exception(e, "Creating letter") from e
    except Exception as e:
        logger.exception("Failed to create letter")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create letter",
        ) from e

    return {"success": True, "letter": letter}


@router.post("/api/letters/image")
def create_image_letter_endpoint(  # noqa: PLR0913
    site: Annotated[Site, Depends(get_site)],
    image: Annotated[UploadFile | None, File()] = None,
    title: Annotated[str, Form()] = "",
    date_written: Annotated[str | None, Form(alias="dateWritten")] = None,
    feeling: Annotated[str, Form()] = "",
    read_when: Annotated[str, Form(alias="readWhen")] = "",
) -> dict[str, Any]:
    """Upload a photographed or scanned letter."""
    upload = (
        read_upload(image, site.letters.assets.max_bytes)
        if image is not None
        else None
    )

    try:
        letter = site.letters.create_image(
            title,
            upload,
            date_written=date_written,
            feeling=feeling,
            read_when=read_when,
        )
    except AnniversaryError as e:
        raise to_http_exception(e, "Creating image letter") from e
    except Exception as e:
        logger.exception("Failed to create image letter")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create letter",
        ) from e

    return {"success": True, "letter": letter}


@router.delete("/api/letters/{letter_id}")
def delete_letter_endpoint(
    letter_id: str,
    site: Annotated[Site, Depends(get_site)],
) -> dict[str, Any]:
    """Delete a letter and its scanned image, if any."""
    try:
        site.letters.delete(letter_id)
    except AnniversaryError as e:
        raise to_http_exception(e, f"Deleting letter {letter_id}") from e
    except Exception as e:
        logger.exception("Failed to delete letter")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete letter",
        ) from e
    else:
        return {"success": True}
