"""
Note Collection.

Ordered in-memory list of notes, addressed by identifier. Every
mutation targets exactly one id and is a no-op when the id is absent,
so late asynchronous completions cannot touch unrelated notes.
"""

from collections.abc import Iterator

from lingo.schemas.note import Note


class NoteCollection:
    """The locally held notes, in display order."""

    def __init__(self, notes: list[Note] | None = None) -> None:
        self._notes: list[Note] = list(notes or [])

    def __iter__(self) -> Iterator[Note]:
        return iter(list(self._notes))

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, note_id: object) -> bool:
        return any(note.id == note_id for note in self._notes)

    @property
    def ids(self) -> list[str]:
        return [note.id for note in self._notes]

    def get(self, note_id: str) -> Note | None:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def reset(self, notes: list[Note]) -> None:
        self._notes = list(notes)

    def prepend(self, note: Note) -> None:
        self._notes.insert(0, note)

    def replace(self, note: Note) -> bool:
        """Swap in a new version of the note with the same id."""
        for index, existing in enumerate(self._notes):
            if existing.id == note.id:
                self._notes[index] = note
                return True
        return False

    def remove(self, note_id: str) -> bool:
        before = len(self._notes)
        self._notes = [note for note in self._notes if note.id != note_id]
        return len(self._notes) != before

    def clear(self) -> None:
        self._notes = []
