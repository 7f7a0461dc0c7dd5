"""
Note Repository.

Data access layer for notes. Every query is scoped by owner id
or by row id.
"""

from datetime import datetime

import httpx

from lingo.core.config import get_app_config
from lingo.core.utils import to_wire_timestamp
from lingo.repositories.base import BaseRepository, TokenProvider
from lingo.schemas.note import Note, NoteDraft


class NoteRepository(BaseRepository):
    """
    Repository for notes.

    Inherits standard CRUD operations from BaseRepository
    and adds note-specific queries.
    """

    table = "notes"

    async def list_by_owner(self, owner_id: str) -> list[Note]:
        """
        Get all notes owned by a user, newest first.

        Args:
            owner_id: Authenticated user's id

        Returns:
            Notes ordered by creation time, descending
        """
        rows = await self.select(
            filters={"user_id": f"eq.{owner_id}"},
            order="created_at.desc",
        )
        return [Note.from_row(row) for row in rows]

    async def create_empty(self, owner_id: str) -> Note:
        """Insert an empty note and return it with store-assigned id and timestamps."""
        row = await self.insert({
            "user_id": owner_id,
            "title": "",
            "content": "",
            "tags": [],
            "is_favorite": False,
        })
        return Note.from_row(row)

    async def save_draft(self, note_id: str, draft: NoteDraft, modified_at: datetime) -> None:
        """Write the editable fields of a note along with its modified timestamp."""
        await self.update(
            {"id": f"eq.{note_id}"},
            {
                "title": draft.title,
                "content": draft.content,
                "tags": draft.tags,
                "updated_at": to_wire_timestamp(modified_at),
            },
        )

    async def set_favorite(self, note_id: str, is_favorite: bool) -> None:
        await self.update({"id": f"eq.{note_id}"}, {"is_favorite": is_favorite})

    async def delete_by_id(self, note_id: str) -> None:
        await self.delete({"id": f"eq.{note_id}"})


def build_note_repository(
    client: httpx.AsyncClient,
    token_provider: TokenProvider | None = None,
) -> NoteRepository:
    """Create a NoteRepository configured from store.yaml."""
    store_config = get_app_config().store
    return NoteRepository(
        client,
        token_provider=token_provider,
        max_attempts=store_config.retry.max_attempts,
        backoff_multiplier=store_config.retry.backoff_multiplier,
        backoff_max=store_config.retry.backoff_max,
        table=store_config.notes_table,
    )
