"""
Optimistic Updates.

An intent is a pair of pure functions over a note: apply produces the
tentative state shown immediately, invert undoes it if the remote write
fails. Inversion runs against whatever version of the note is current
when the failure arrives, so unrelated fields changed in the meantime
are preserved.

Usage:
    intent = toggle_favorite_intent()
    ok = await run_intent(collection, note_id, intent, commit=persist)
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from lingo.core.exceptions import ApplicationError
from lingo.core.logging import get_logger, log_with_source
from lingo.schemas.note import Note
from lingo.services.collection import NoteCollection

logger = get_logger(__name__)

NoteTransform = Callable[[Note], Note]


@dataclass(frozen=True)
class Intent:
    """A tentative change and its inverse."""

    name: str
    apply: NoteTransform
    invert: NoteTransform


def set_field_intent(field: str, new_value: Any, old_value: Any) -> Intent:
    """Set one field tentatively; the inverse restores the prior value."""
    return Intent(
        name=f"set_{field}",
        apply=lambda note: note.model_copy(update={field: new_value}),
        invert=lambda note: note.model_copy(update={field: old_value}),
    )


def _flip_favorite(note: Note) -> Note:
    return note.model_copy(update={"is_favorite": not note.is_favorite})


def toggle_favorite_intent() -> Intent:
    """
    Flip the favorite flag; the inverse flips it again.

    Both directions act on the current value, so overlapping toggles
    that fail in any order still cancel out.
    """
    return Intent(name="toggle_is_favorite", apply=_flip_favorite, invert=_flip_favorite)


async def run_intent(
    collection: NoteCollection,
    note_id: str,
    intent: Intent,
    commit: Callable[[], Awaitable[Any]],
) -> bool:
    """
    Apply an intent locally, persist it, and roll back on failure.

    The rollback only touches the note with note_id, and is skipped if
    that note has left the collection in the meantime. Failures are
    logged, not raised.

    Args:
        collection: Local notes
        note_id: Target note
        intent: Change to apply
        commit: Zero-argument callable performing the remote write

    Returns:
        True if the write succeeded, False if it failed or the note is unknown
    """
    current = collection.get(note_id)
    if current is None:
        return False

    collection.replace(intent.apply(current))

    try:
        await commit()
    except ApplicationError as e:
        latest = collection.get(note_id)
        if latest is not None:
            collection.replace(intent.invert(latest))
        log_with_source(
            logger,
            "notes",
            "warning",
            "Optimistic update rolled back",
            intent=intent.name,
            note_id=note_id,
            error=e.message,
        )
        return False
    return True
