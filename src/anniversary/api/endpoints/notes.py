"""Note endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from anniversary.api.deps import get_site, to_http_exception
from anniversary.exceptions import AnniversaryError
from anniversary.schemas import NoteCreate, NoteUpdate
from anniversary.site import Site

router = APIRouter(tags=["notes"])
logger = logging.getLogger(__name__)


@router.get("/api/notes")
def list_notes_endpoint(
    site: Annotated[Site, Depends(get_site)],
    tag: Annotated[str | None, Query()] = None,
) -> list[dict[str, Any]]:
    """List unarchived notes, pinned first, optionally for a single tag."""
    try:
        return site.notes.list(tag)
    except Exception:
        logger.exception("Failed to list notes")
        return []


@router.post("/api/notes")
def create_note_endpoint(
    payload: NoteCreate,
    site: Annotated[Site, Depends(get_site)],
) -> dict[str, Any]:
    """Create a new note."""
    try:
        note = site.notes.create(payload.content, payload.tag, pinned=payload.pinned)
    except AnniversaryError as e:
        raise to_http_exception(e, "Creating note") from e
    except Exception as e:
        logger.exception("Failed to create note")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create note",
        ) from e

    return {"success": True, "note": note}


@router.put("/api/notes/{note_id}")
def update_note_endpoint(
    note_id: str,
    payload: NoteUpdate,
    site: Annotated[Site, Depends(get_site)],
) -> dict[str, Any]:
    """Pin, archive or edit a note."""
    try:
        note = site.notes.update(note_id, payload.model_dump(exclude_unset=True))
    except AnniversaryError as e:
        raise to_http_exception(e, f"Updating note {note_id}") from e
    except Exception as e:
        logger.exception("Failed to update note")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update note",
        ) from e

    return {"success": True, "note": note}


@router.delete("/api/notes/{note_id}")
def delete_note_endpoint(
    note_id: str,
    site: Annotated[Site, Depends(get_site)],
) -> dict[str, Any]:
    """Delete a note."""
    try:
        site.notes.delete(note_id)
    except AnniversaryError as e:
        raise to_http_exception(e, f"Deleting note {note_id}") from e
    except Exception as e:
        logger.exception("Failed to delete note")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete note",
        ) from e
    else:
        return {"success": True}
