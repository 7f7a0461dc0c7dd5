"""
Note Sync Service.

Keeps the locally held notes consistent with the remote store while the
user edits them.

- Reads and deletes are pessimistic: local state changes only after the
  store confirms.
- Creation is pessimistic too, since edits need the store-assigned id.
- Editor changes go to a transient buffer and are persisted by a
  debounced autosave of the buffer's latest snapshot.
- The favorite toggle is optimistic with rollback.

Every asynchronous completion reconciles by note id and is a no-op if
the note is gone. Each autosave carries a per-note generation number;
a completion older than the newest applied one is discarded locally.
"""

from collections.abc import Awaitable, Callable
from enum import StrEnum

from lingo.ai.writing import ImproveInstruction, improve_text
from lingo.core.config import get_app_config
from lingo.core.exceptions import (
    FetchError,
    NotFoundError,
    ValidationError,
    WriteError,
)
from lingo.core.utils import utc_now
from lingo.repositories.note import NoteRepository
from lingo.schemas.note import EditableField, EditBuffer, Note
from lingo.services.base import BaseService
from lingo.services.collection import NoteCollection
from lingo.services.optimistic import run_intent, toggle_favorite_intent
from lingo.tasks.debounce import DebounceScheduler

Improver = Callable[[str, ImproveInstruction], Awaitable[str]]


class SaveStatus(StrEnum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class NoteSyncService(BaseService):
    """
    Service for the note lifecycle and editor autosave.

    Only one note is open for editing at a time.
    """

    def __init__(
        self,
        repo: NoteRepository,
        scheduler: DebounceScheduler | None = None,
        debounce_seconds: float = 1.0,
        flush_on_close: bool = True,
        improver: Improver | None = None,
    ) -> None:
        super().__init__()
        self.repo = repo
        self.scheduler = scheduler or DebounceScheduler()
        self.debounce_seconds = debounce_seconds
        self.flush_on_close = flush_on_close
        self._improver = improver or improve_text

        self.notes = NoteCollection()
        self.buffer: EditBuffer | None = None
        self.save_status = SaveStatus.IDLE
        self.fetch_error: str | None = None

        self._dispatched: dict[str, int] = {}
        self._applied: dict[str, int] = {}

    # -------------------------------------------------------------------------
    # Remote lifecycle
    # -------------------------------------------------------------------------

    async def list_notes(self, owner_id: str) -> list[Note]:
        """
        Load every note of the owner, newest first.

        On failure the local collection is left as it was and
        fetch_error holds the message so the caller can offer a retry.

        Raises:
            FetchError: If the store is unreachable or denies access
        """
        self._validate_required({"owner_id": owner_id}, ["owner_id"])
        self.fetch_error = None
        try:
            notes = await self._execute_store_operation(
                "list_notes",
                self.repo.list_by_owner(owner_id),
                error_cls=FetchError,
            )
        except FetchError as e:
            self.fetch_error = e.message
            raise

        self.notes.reset(notes)
        self._log_debug("Notes loaded", owner_id=owner_id, count=len(notes))
        return notes

    async def create_note(self, owner_id: str) -> Note:
        """
        Create an empty note, add it to the top of the list and open it.

        Raises:
            WriteError: If the insert fails; local state is unchanged
        """
        self._validate_required({"owner_id": owner_id}, ["owner_id"])
        self._log_operation("Creating note", owner_id=owner_id)

        note = await self._execute_store_operation(
            "create_note",
            self.repo.create_empty(owner_id),
        )

        self.notes.prepend(note)
        self.open_for_edit(note.id)
        self._log_debug("Note created", note_id=note.id)
        return note

    async def delete_note(self, note_id: str) -> None:
        """
        Delete a note remotely, then locally.

        A pending autosave for the note is cancelled, not flushed.

        Raises:
            WriteError: If the delete fails; local state is unchanged
        """
        self._log_operation("Deleting note", note_id=note_id)

        await self._execute_store_operation(
            "delete_note",
            self.repo.delete_by_id(note_id),
        )

        self.scheduler.cancel(note_id)
        self.notes.remove(note_id)
        self._dispatched.pop(note_id, None)
        self._applied.pop(note_id, None)
        if self.buffer is not None and self.buffer.note_id == note_id:
            self.buffer = None
            self.save_status = SaveStatus.IDLE

    async def toggle_favorite(self, note_id: str) -> bool:
        """
        Flip the favorite flag immediately, then persist it.

        If the write fails the flag is reverted on that note only and
        the failure is logged.

        Returns:
            True if the store accepted the change
        """
        note = self.notes.get(note_id)
        if note is None:
            return False

        target = not note.is_favorite
        return await run_intent(
            self.notes,
            note_id,
            toggle_favorite_intent(),
            commit=lambda: self._execute_store_operation(
                "toggle_favorite",
                self.repo.set_favorite(note_id, target),
            ),
        )

    # -------------------------------------------------------------------------
    # Editor session
    # -------------------------------------------------------------------------

    def open_for_edit(self, note_id: str) -> EditBuffer:
        """
        Copy a note's editable fields into the edit buffer.

        Opening a different note closes the current edit session first.

        Raises:
            NotFoundError: If the note is not in the local collection
        """
        if self.buffer is not None and self.buffer.note_id == note_id:
            return self.buffer

        note = self.notes.get(note_id)
        if note is None:
            raise NotFoundError(f"Note {note_id} not found")

        self.close_edit()
        self.buffer = EditBuffer.from_note(note)
        self.save_status = SaveStatus.IDLE
        return self.buffer

    def edit_field(self, field: EditableField | str, value: str) -> bool:
        """
        Change the edit buffer and (re)start the autosave timer.

        Args:
            field: title, content, add_tag or remove_tag
            value: New text, or the tag to add/remove

        Returns:
            True if the buffer changed

        Raises:
            ValidationError: If no note is open or the field is unknown
        """
        if self.buffer is None:
            raise ValidationError("No note is open for editing")
        try:
            field = EditableField(field)
        except ValueError:
            raise ValidationError(
                "Unknown field",
                details={"field": str(field)},
            ) from None

        buffer = self.buffer
        match field:
            case EditableField.TITLE:
                changed = buffer.title != value
                buffer.title = value
            case EditableField.CONTENT:
                changed = buffer.content != value
                buffer.content = value
            case EditableField.ADD_TAG:
                changed = buffer.add_tag(value)
            case EditableField.REMOVE_TAG:
                changed = buffer.remove_tag(value)

        if changed:
            self._schedule_save(buffer)
        return changed

    def close_edit(self) -> None:
        """
        End the edit session.

        A pending autosave is fired immediately when flush_on_close is set,
        otherwise it is dropped. Saves already in flight complete on their own.
        """
        if self.buffer is None:
            return
        note_id = self.buffer.note_id
        if self.flush_on_close:
            self.scheduler.flush(note_id)
        else:
            self.scheduler.cancel(note_id)
        self.buffer = None
        self.save_status = SaveStatus.IDLE

    def save_now(self) -> None:
        """Fire the pending autosave for the open note without waiting for the timer."""
        if self.buffer is not None:
            self.scheduler.flush(self.buffer.note_id)

    async def improve_content(self, instruction: ImproveInstruction | str) -> str:
        """
        Rewrite the open note's content with the writing assistant.

        The result goes through edit_field, so it is autosaved like any edit.
        Blank content is returned as is without calling the assistant.

        Raises:
            ValidationError: If no note is open
            GenerationError: If the assistant fails
        """
        buffer = self.buffer
        if buffer is None:
            raise ValidationError("No note is open for editing")
        if not buffer.content.strip():
            return buffer.content

        improved = await self._improver(buffer.content, ImproveInstruction(instruction))
        if self.buffer is buffer:
            self.edit_field(EditableField.CONTENT, improved)
        return improved

    # -------------------------------------------------------------------------
    # Lifecycle helpers
    # -------------------------------------------------------------------------

    async def drain(self) -> None:
        """Wait for every fired autosave to complete."""
        await self.scheduler.drain()

    async def aclose(self) -> None:
        """Close the editor (honouring flush_on_close) and wait for saves."""
        self.close_edit()
        self.scheduler.cancel_all()
        await self.drain()

    def clear(self) -> None:
        """Forget all local state, e.g. after sign-out."""
        self.scheduler.cancel_all()
        self.buffer = None
        self.notes.clear()
        self.save_status = SaveStatus.IDLE
        self.fetch_error = None
        self._dispatched.clear()
        self._applied.clear()

    # -------------------------------------------------------------------------
    # Autosave
    # -------------------------------------------------------------------------

    def _schedule_save(self, buffer: EditBuffer) -> None:
        self.scheduler.schedule(
            buffer.note_id,
            lambda: self._save(buffer),
            delay=self.debounce_seconds,
        )

    async def _save(self, buffer: EditBuffer) -> bool:
        note_id = buffer.note_id
        draft = buffer.snapshot()
        generation = self._dispatched.get(note_id, 0) + 1
        self._dispatched[note_id] = generation
        modified_at = utc_now()

        if self.buffer is buffer:
            self.save_status = SaveStatus.SAVING

        try:
            await self._execute_store_operation(
                "save_note",
                self.repo.save_draft(note_id, draft, modified_at),
            )
        except WriteError as e:
            self._logger.error(
                "Autosave failed",
                extra={"note_id": note_id, "error": e.message},
            )
            if self.buffer is buffer:
                self.save_status = SaveStatus.ERROR
            return False

        if generation < self._applied.get(note_id, 0):
            self._log_debug("Stale autosave discarded", note_id=note_id, generation=generation)
            return False

        current = self.notes.get(note_id)
        if current is None:
            return False

        self._applied[note_id] = generation
        self.notes.replace(
            current.model_copy(update={
                "title": draft.title,
                "content": draft.content,
                "tags": list(draft.tags),
                "last_modified": max(utc_now(), current.last_modified),
            })
        )
        if self.buffer is buffer:
            self.save_status = SaveStatus.SAVED
        self._log_debug("Note saved", note_id=note_id, generation=generation)
        return True


def build_note_sync_service(repo: NoteRepository) -> NoteSyncService:
    """Create a NoteSyncService configured from notes.yaml."""
    notes_config = get_app_config().notes
    return NoteSyncService(
        repo,
        debounce_seconds=notes_config.debounce_seconds,
        flush_on_close=notes_config.flush_on_close,
    )
