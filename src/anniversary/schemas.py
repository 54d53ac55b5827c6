"""Pydantic models for request payloads."""

from pydantic import BaseModel, ConfigDict, Field


class NoteCreate(BaseModel):
    """Note creation payload."""

    content: str = ""
    tag: str | None = "thought"
    pinned: bool = False


class NoteUpdate(BaseModel):
    """Partial note update; omitted fields keep their stored value."""

    pinned: bool | None = None
    archived: bool | None = None
    content: str | None = None
    tag: str | None = None


class LetterCreate(BaseModel):
    """Text letter creation payload."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    content: str | None = ""
    date_written: str | None = Field(default=None, alias="dateWritten")
    feeling: str | None = ""
    read_when: str | None = Field(default="", alias="readWhen")
