"""
Unit Tests for the Note Sync Service.

Covers the note lifecycle, debounced autosave, optimistic favorite
toggling and reconciliation of late completions. The repository is
mocked (or replaced by an in-memory fake for end-to-end scenarios) and
debounce delays are shortened to a few milliseconds.
"""

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock

import httpx
import pytest

from lingo.core.exceptions import FetchError, NotFoundError, ValidationError, WriteError
from lingo.core.utils import utc_now
from lingo.repositories.base import create_store_client
from lingo.repositories.note import NoteRepository
from lingo.schemas.note import EditableField, Note, NoteDraft
from lingo.services.note import NoteSyncService, SaveStatus, build_note_sync_service

DEBOUNCE = 0.03


class FakeNoteRepository:
    """In-memory stand-in for the store."""

    def __init__(self) -> None:
        self.rows: dict[str, dict] = {}
        self.owners: dict[str, str] = {}
        self.saves: list[tuple[str, NoteDraft]] = []
        self._next_id = 1

    async def list_by_owner(self, owner_id: str) -> list[Note]:
        rows = [row for note_id, row in self.rows.items() if self.owners[note_id] == owner_id]
        rows.sort(key=lambda row: row["created_at"], reverse=True)
        return [Note(**row) for row in rows]

    async def create_empty(self, owner_id: str) -> Note:
        note_id = f"note-{self._next_id}"
        self._next_id += 1
        now = utc_now()
        self.rows[note_id] = {"id": note_id, "created_at": now, "last_modified": now}
        self.owners[note_id] = owner_id
        return Note(**self.rows[note_id])

    async def save_draft(self, note_id: str, draft: NoteDraft, modified_at: datetime) -> None:
        self.saves.append((note_id, draft))
        self.rows[note_id].update(
            title=draft.title,
            content=draft.content,
            tags=list(draft.tags),
            last_modified=modified_at,
        )

    async def set_favorite(self, note_id: str, is_favorite: bool) -> None:
        self.rows[note_id]["is_favorite"] = is_favorite

    async def delete_by_id(self, note_id: str) -> None:
        self.rows.pop(note_id, None)


@pytest.fixture
def service(mock_repo, sample_notes) -> NoteSyncService:
    """Service with three loaded notes and a short debounce."""
    svc = NoteSyncService(mock_repo, debounce_seconds=DEBOUNCE, improver=AsyncMock())
    svc.notes.reset(sample_notes)
    return svc


async def _wait_for_autosave(service: NoteSyncService) -> None:
    await asyncio.sleep(DEBOUNCE * 3)
    await service.drain()


# =============================================================================
# List
# =============================================================================


class TestListNotes:
    @pytest.mark.asyncio
    async def test_loads_notes(self, mock_repo, sample_notes):
        mock_repo.list_by_owner.return_value = sample_notes
        service = NoteSyncService(mock_repo)

        notes = await service.list_notes("user-1")

        mock_repo.list_by_owner.assert_awaited_once_with("user-1")
        assert service.notes.ids == ["note-3", "note-2", "note-1"]
        assert notes == sample_notes
        assert service.fetch_error is None

    @pytest.mark.asyncio
    async def test_failure_keeps_collection_and_sets_error(self, service, mock_repo):
        """Should raise FetchError and leave the local list as it was."""
        mock_repo.list_by_owner.side_effect = httpx.ConnectError("unreachable")

        with pytest.raises(FetchError):
            await service.list_notes("user-1")

        assert len(service.notes) == 3
        assert service.fetch_error == "unreachable"


def _http_service(handler) -> NoteSyncService:
    client = create_store_client(
        base_url="https://project.example.co",
        api_key="anon-key",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )
    return NoteSyncService(NoteRepository(client, token_provider=lambda: "user-token"))


class TestMalformedStoreReplies:
    """A 2xx reply that is not rows must surface as an application error."""

    @pytest.mark.asyncio
    async def test_list_with_html_body(self):
        service = _http_service(lambda request: httpx.Response(200, text="<html>gateway</html>"))

        with pytest.raises(FetchError):
            await service.list_notes("user-1")

        assert service.fetch_error == "Store returned an unexpected response"

    @pytest.mark.asyncio
    async def test_list_with_row_missing_id(self):
        service = _http_service(lambda request: httpx.Response(200, json=[{"title": "x"}]))

        with pytest.raises(FetchError):
            await service.list_notes("user-1")

    @pytest.mark.asyncio
    async def test_create_with_text_body(self):
        service = _http_service(lambda request: httpx.Response(201, text="oops"))

        with pytest.raises(WriteError):
            await service.create_note("user-1")

        assert len(service.notes) == 0
        assert service.buffer is None


# =============================================================================
# Create / Delete
# =============================================================================


class TestCreateNote:
    @pytest.mark.asyncio
    async def test_prepends_and_opens(self, service, mock_repo, make_note):
        mock_repo.create_empty.return_value = make_note("note-new")

        note = await service.create_note("user-1")

        assert note.id == "note-new"
        assert service.notes.ids[0] == "note-new"
        assert service.buffer.note_id == "note-new"
        assert service.buffer.title == ""

    @pytest.mark.asyncio
    async def test_failure_leaves_state_unchanged(self, service, mock_repo):
        """No optimistic insert: a failed create adds nothing."""
        mock_repo.create_empty.side_effect = httpx.ConnectError("down")

        with pytest.raises(WriteError):
            await service.create_note("user-1")

        assert service.notes.ids == ["note-3", "note-2", "note-1"]
        assert service.buffer is None


class TestDeleteNote:
    @pytest.mark.asyncio
    async def test_failure_leaves_note(self, service, mock_repo):
        request = httpx.Request("DELETE", "https://store/rest/v1/notes")
        mock_repo.delete_by_id.side_effect = httpx.HTTPStatusError(
            "forbidden",
            request=request,
            response=httpx.Response(403, json={"message": "denied"}, request=request),
        )

        with pytest.raises(WriteError, match="denied"):
            await service.delete_note("note-2")

        assert "note-2" in service.notes
        assert len(service.notes) == 3

    @pytest.mark.asyncio
    async def test_removes_exactly_that_note_and_closes_editor(self, service, mock_repo):
        service.open_for_edit("note-2")
        service.edit_field(EditableField.TITLE, "pending change")

        await service.delete_note("note-2")
        await _wait_for_autosave(service)

        assert service.notes.ids == ["note-3", "note-1"]
        assert service.buffer is None
        mock_repo.save_draft.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_save_completing_after_delete_is_noop(self, service, mock_repo):
        gate = asyncio.Event()

        async def slow_save(*args) -> None:
            await gate.wait()

        mock_repo.save_draft.side_effect = slow_save
        service.open_for_edit("note-2")
        service.edit_field(EditableField.TITLE, "late")
        service.save_now()
        await asyncio.sleep(0)

        await service.delete_note("note-2")
        gate.set()
        await service.drain()

        assert "note-2" not in service.notes
        assert service.notes.ids == ["note-3", "note-1"]


# =============================================================================
# Favorite toggle
# =============================================================================


class TestToggleFavorite:
    @pytest.mark.asyncio
    async def test_flip_is_visible_before_write_completes(self, service, mock_repo):
        seen_during_write = []

        async def record(note_id, value) -> None:
            seen_during_write.append(service.notes.get(note_id).is_favorite)

        mock_repo.set_favorite.side_effect = record

        assert await service.toggle_favorite("note-1") is True
        assert seen_during_write == [True]
        assert service.notes.get("note-1").is_favorite is True

    @pytest.mark.asyncio
    async def test_failed_write_reverts_only_that_note(self, service, mock_repo):
        mock_repo.set_favorite.side_effect = httpx.ConnectError("down")
        before = {note.id: note for note in service.notes}

        assert await service.toggle_favorite("note-1") is False

        assert service.notes.get("note-1").is_favorite is False
        assert service.notes.get("note-2") == before["note-2"]
        assert service.notes.get("note-3") == before["note-3"]

    @pytest.mark.asyncio
    async def test_overlapping_failed_toggles_restore_original(self, service, mock_repo):
        """Should end on the stored value when two in-flight toggles both fail."""
        written = []

        async def reject(note_id, value) -> None:
            written.append(value)
            await asyncio.sleep(0)
            raise WriteError("Store unavailable")

        mock_repo.set_favorite.side_effect = reject

        results = await asyncio.gather(
            service.toggle_favorite("note-1"),
            service.toggle_favorite("note-1"),
        )

        assert results == [False, False]
        assert written == [True, False]
        assert service.notes.get("note-1").is_favorite is False

    @pytest.mark.asyncio
    async def test_overlapping_toggles_with_second_failing(self, service, mock_repo):
        """Should keep the accepted value when only the later write fails."""
        calls = 0

        async def second_fails(note_id, value) -> None:
            nonlocal calls
            calls += 1
            attempt = calls
            await asyncio.sleep(0)
            if attempt == 2:
                raise WriteError("Store unavailable")

        mock_repo.set_favorite.side_effect = second_fails

        results = await asyncio.gather(
            service.toggle_favorite("note-1"),
            service.toggle_favorite("note-1"),
        )

        assert results == [True, False]
        assert service.notes.get("note-1").is_favorite is True

    @pytest.mark.asyncio
    async def test_unknown_note(self, service, mock_repo):
        assert await service.toggle_favorite("missing") is False
        mock_repo.set_favorite.assert_not_awaited()


# =============================================================================
# Editor and autosave
# =============================================================================


class TestEditor:
    def test_open_unknown_note_raises(self, service):
        with pytest.raises(NotFoundError):
            service.open_for_edit("missing")

    def test_edit_without_open_note_raises(self, service):
        with pytest.raises(ValidationError):
            service.edit_field(EditableField.TITLE, "x")

    def test_unknown_field_raises(self, service):
        service.open_for_edit("note-1")
        with pytest.raises(ValidationError):
            service.edit_field("colour", "red")

    @pytest.mark.asyncio
    async def test_edits_touch_only_the_buffer(self, service, mock_repo):
        service.open_for_edit("note-1")
        assert service.edit_field(EditableField.TITLE, "New title") is True

        assert service.notes.get("note-1").title == "Due diligence"
        assert service.scheduler.pending("note-1")
        mock_repo.save_draft.assert_not_called()

    def test_unchanged_value_schedules_nothing(self, service):
        service.open_for_edit("note-1")
        assert service.edit_field(EditableField.TITLE, "Due diligence") is False
        assert not service.scheduler.pending("note-1")

    @pytest.mark.asyncio
    async def test_tags_never_duplicate(self, service):
        buffer = service.open_for_edit("note-2")
        assert service.edit_field(EditableField.ADD_TAG, "GDPR") is False
        assert service.edit_field(EditableField.ADD_TAG, " AML ") is True
        assert service.edit_field(EditableField.REMOVE_TAG, "KYC") is False
        assert buffer.tags == ["privacy", "GDPR", "AML"]


class TestAutosave:
    @pytest.mark.asyncio
    async def test_rapid_edits_write_once_with_last_state(self, service, mock_repo):
        service.open_for_edit("note-1")
        for text in ("D", "Dr", "Dra", "Draft"):
            service.edit_field(EditableField.CONTENT, text)
            await asyncio.sleep(DEBOUNCE / 5)

        await _wait_for_autosave(service)

        mock_repo.save_draft.assert_awaited_once()
        note_id, draft, _ = mock_repo.save_draft.await_args.args
        assert note_id == "note-1"
        assert draft.content == "Draft"
        assert service.notes.get("note-1").content == "Draft"
        assert service.save_status is SaveStatus.SAVED

    @pytest.mark.asyncio
    async def test_spaced_edits_write_per_group(self, service, mock_repo):
        service.open_for_edit("note-1")
        service.edit_field(EditableField.CONTENT, "first")
        await _wait_for_autosave(service)
        service.edit_field(EditableField.CONTENT, "second")
        await _wait_for_autosave(service)

        contents = [call.args[1].content for call in mock_repo.save_draft.await_args_list]
        assert contents == ["first", "second"]

    @pytest.mark.asyncio
    async def test_success_advances_last_modified(self, service):
        before = service.notes.get("note-1").last_modified
        service.open_for_edit("note-1")
        service.edit_field(EditableField.TITLE, "Updated")

        await _wait_for_autosave(service)

        assert service.notes.get("note-1").last_modified > before

    @pytest.mark.asyncio
    async def test_failure_is_logged_and_local_note_untouched(self, service, mock_repo):
        mock_repo.save_draft.side_effect = httpx.ConnectError("down")
        service.open_for_edit("note-1")
        service.edit_field(EditableField.TITLE, "Lost")

        await _wait_for_autosave(service)

        assert service.notes.get("note-1").title == "Due diligence"
        assert service.save_status is SaveStatus.ERROR

    @pytest.mark.asyncio
    async def test_stale_completion_is_discarded(self, service, mock_repo):
        """An older save finishing last must not overwrite a newer one."""
        gates = [asyncio.Event(), asyncio.Event()]
        drafts: list[NoteDraft] = []

        async def gated_save(note_id, draft, modified_at) -> None:
            index = len(drafts)
            drafts.append(draft)
            await gates[index].wait()

        mock_repo.save_draft.side_effect = gated_save
        service.open_for_edit("note-1")

        service.edit_field(EditableField.TITLE, "one")
        service.save_now()
        await asyncio.sleep(0)
        service.edit_field(EditableField.TITLE, "two")
        service.save_now()
        await asyncio.sleep(0)

        gates[1].set()
        await asyncio.sleep(0.01)
        assert service.notes.get("note-1").title == "two"

        gates[0].set()
        await service.drain()

        assert [d.title for d in drafts] == ["one", "two"]
        assert service.notes.get("note-1").title == "two"


class TestCloseEdit:
    @pytest.mark.asyncio
    async def test_switching_notes_flushes_pending_save(self, mock_repo, sample_notes):
        service = NoteSyncService(mock_repo, debounce_seconds=10, flush_on_close=True)
        service.notes.reset(sample_notes)

        service.open_for_edit("note-1")
        service.edit_field(EditableField.TITLE, "A edited")
        service.open_for_edit("note-2")
        await service.drain()

        mock_repo.save_draft.assert_awaited_once()
        assert mock_repo.save_draft.await_args.args[1].title == "A edited"
        assert service.buffer.note_id == "note-2"

    @pytest.mark.asyncio
    async def test_switching_notes_drops_pending_save(self, mock_repo, sample_notes):
        service = NoteSyncService(mock_repo, debounce_seconds=DEBOUNCE, flush_on_close=False)
        service.notes.reset(sample_notes)

        service.open_for_edit("note-1")
        service.edit_field(EditableField.TITLE, "A edited")
        service.open_for_edit("note-2")
        await _wait_for_autosave(service)

        mock_repo.save_draft.assert_not_awaited()
        assert service.notes.get("note-1").title == "Due diligence"

    @pytest.mark.asyncio
    async def test_in_flight_save_reconciles_after_close(self, service, mock_repo):
        gate = asyncio.Event()

        async def slow_save(*args) -> None:
            await gate.wait()

        mock_repo.save_draft.side_effect = slow_save
        service.open_for_edit("note-1")
        service.edit_field(EditableField.TITLE, "Closed while saving")
        service.save_now()
        await asyncio.sleep(0)

        service.close_edit()
        gate.set()
        await service.drain()

        assert service.buffer is None
        assert service.notes.get("note-1").title == "Closed while saving"

    @pytest.mark.asyncio
    async def test_aclose_flushes_and_drains(self, mock_repo, sample_notes):
        service = NoteSyncService(mock_repo, debounce_seconds=10)
        service.notes.reset(sample_notes)
        service.open_for_edit("note-1")
        service.edit_field(EditableField.CONTENT, "flushed")

        await service.aclose()

        mock_repo.save_draft.assert_awaited_once()
        assert service.scheduler.in_flight == 0


class TestImproveContent:
    @pytest.mark.asyncio
    async def test_result_goes_through_autosave(self, service, mock_repo):
        service._improver.return_value = "Improved text."
        service.open_for_edit("note-1")

        result = await service.improve_content("simplify")
        await _wait_for_autosave(service)

        assert result == "Improved text."
        assert service.buffer.content == "Improved text."
        assert mock_repo.save_draft.await_args.args[1].content == "Improved text."

    @pytest.mark.asyncio
    async def test_blank_content_skips_assistant(self, service):
        service.open_for_edit("note-1")
        service.edit_field(EditableField.CONTENT, "   ")

        assert await service.improve_content("expand") == "   "
        service._improver.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_open_note(self, service):
        with pytest.raises(ValidationError):
            await service.improve_content("expand")


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_create_edit_wait_reload(self):
        """Edits persisted by autosave should survive a reload."""
        repo = FakeNoteRepository()
        service = NoteSyncService(repo, debounce_seconds=DEBOUNCE)

        note = await service.create_note("user-1")
        service.edit_field(EditableField.TITLE, "KYC")
        service.edit_field(EditableField.CONTENT, "Know your customer")
        await _wait_for_autosave(service)

        reloaded = NoteSyncService(repo)
        notes = await reloaded.list_notes("user-1")

        assert len(repo.saves) == 1
        assert notes[0].id == note.id
        assert notes[0].title == "KYC"
        assert notes[0].content == "Know your customer"
        assert notes[0].last_modified > notes[0].created_at


def test_build_from_config(mock_repo):
    service = build_note_sync_service(mock_repo)
    assert service.debounce_seconds == 1.0
    assert service.flush_on_close is True
