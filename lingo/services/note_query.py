"""
Note Queries.

Search, tag filtering and display ordering for the notes list.
"""

from collections.abc import Iterable

from lingo.schemas.note import Note


def all_tags(notes: Iterable[Note]) -> list[str]:
    """Every tag used by any note, sorted."""
    return sorted({tag for note in notes for tag in note.tags})


def matches(note: Note, query: str = "", tag: str | None = None) -> bool:
    """
    Check a note against a free-text query and an optional tag.

    The query matches case-insensitively on title, content or any tag;
    the tag filter is an exact match.
    """
    needle = query.lower()
    matches_query = (
        needle in note.title.lower()
        or needle in note.content.lower()
        or any(needle in t.lower() for t in note.tags)
    )
    matches_tag = tag in note.tags if tag else True
    return matches_query and matches_tag


def sort_for_display(notes: Iterable[Note]) -> list[Note]:
    """Favorites first, then most recently modified."""
    return sorted(
        notes,
        key=lambda note: (not note.is_favorite, -note.last_modified.timestamp()),
    )


def filter_notes(notes: Iterable[Note], query: str = "", tag: str | None = None) -> list[Note]:
    """Apply search and tag filters, then display ordering."""
    return sort_for_display(note for note in notes if matches(note, query, tag))
