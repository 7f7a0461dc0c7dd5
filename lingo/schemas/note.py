"""
Note Schemas.

The Note entity as held locally, its mapping from store rows, and the
transient edit buffer used while a note is open in the editor.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lingo.core.utils import parse_timestamp, utc_now


def dedupe_tags(tags: list[str]) -> list[str]:
    """Drop repeated tags, keeping the first occurrence and its position."""
    seen: set[str] = set()
    unique: list[str] = []
    for tag in tags:
        if tag not in seen:
            seen.add(tag)
            unique.append(tag)
    return unique


class Note(BaseModel):
    """A study note mirrored from the remote store."""

    id: str = Field(description="Store-assigned identifier")
    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note body")
    tags: list[str] = Field(default_factory=list, description="Ordered, unique tags")
    is_favorite: bool = Field(default=False, description="Pinned by the user")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    last_modified: datetime = Field(default_factory=utc_now, description="Last persisted edit")

    model_config = ConfigDict(frozen=True)

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, value: list[str]) -> list[str]:
        return dedupe_tags(value)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Note":
        """
        Map a store row to a Note.

        Null or missing columns map to type defaults: empty strings,
        no tags, not favorite, and "now" for timestamps.

        Args:
            row: Row as returned by the store (snake_case columns)

        Returns:
            Note instance
        """
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            content=row.get("content") or "",
            tags=row.get("tags") or [],
            is_favorite=bool(row.get("is_favorite") or False),
            created_at=parse_timestamp(row.get("created_at")),
            last_modified=parse_timestamp(row.get("updated_at")),
        )


class EditableField(StrEnum):
    """Fields of the edit buffer that can be changed through the editor."""

    TITLE = "title"
    CONTENT = "content"
    ADD_TAG = "add_tag"
    REMOVE_TAG = "remove_tag"


@dataclass
class EditBuffer:
    """Transient copy of a note's editable fields while it is open."""

    note_id: str
    title: str = ""
    content: str = ""
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_note(cls, note: Note) -> "EditBuffer":
        return cls(
            note_id=note.id,
            title=note.title,
            content=note.content,
            tags=list(note.tags),
        )

    def add_tag(self, tag: str) -> bool:
        """Append a tag. Blank and already-present tags are ignored."""
        value = tag.strip()
        if not value or value in self.tags:
            return False
        self.tags.append(value)
        return True

    def remove_tag(self, tag: str) -> bool:
        """Remove a tag by exact match. Missing tags are ignored."""
        if tag not in self.tags:
            return False
        self.tags = [t for t in self.tags if t != tag]
        return True

    def snapshot(self) -> "NoteDraft":
        """Freeze the current buffer contents for a save."""
        return NoteDraft(title=self.title, content=self.content, tags=list(self.tags))

    @property
    def word_count(self) -> int:
        return len([w for w in re.split(r"\s+", self.content.strip()) if w])


class NoteDraft(BaseModel):
    """Editable fields written by an autosave."""

    title: str
    content: str
    tags: list[str]

    model_config = ConfigDict(frozen=True)
