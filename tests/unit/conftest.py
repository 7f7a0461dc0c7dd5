"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests never touch the real store or AI service.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from lingo.ai.client import GenerationClient
from lingo.repositories.note import NoteRepository
from lingo.schemas.note import Note


# =============================================================================
# Note Fixtures
# =============================================================================

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0)


@pytest.fixture
def make_note() -> Callable[..., Note]:
    """
    Factory for notes with sensible defaults.

    Usage:
        def test_x(make_note):
            note = make_note("n1", title="GDPR", tags=["privacy"])
    """

    def _make(note_id: str = "note-1", **overrides: Any) -> Note:
        values: dict[str, Any] = {
            "id": note_id,
            "title": "",
            "content": "",
            "tags": [],
            "is_favorite": False,
            "created_at": BASE_TIME,
            "last_modified": BASE_TIME,
        }
        values.update(overrides)
        return Note(**values)

    return _make


@pytest.fixture
def sample_notes(make_note: Callable[..., Note]) -> list[Note]:
    """Three notes, newest first, one favorite."""
    return [
        make_note(
            "note-3",
            title="Know Your Customer",
            content="KYC checks verify client identity.",
            tags=["AML"],
            created_at=BASE_TIME + timedelta(days=2),
            last_modified=BASE_TIME + timedelta(days=2),
        ),
        make_note(
            "note-2",
            title="GDPR basics",
            content="Personal data must be processed lawfully.",
            tags=["privacy", "GDPR"],
            is_favorite=True,
            created_at=BASE_TIME + timedelta(days=1),
            last_modified=BASE_TIME + timedelta(days=1),
        ),
        make_note(
            "note-1",
            title="Due diligence",
            content="Investigate a partner before signing.",
            tags=[],
        ),
    ]


# =============================================================================
# Repository Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_repo() -> AsyncMock:
    """
    Mock note repository.

    Every method succeeds by default; override return_value or
    side_effect per test.
    """
    repo = AsyncMock(spec=NoteRepository)
    repo.list_by_owner.return_value = []
    repo.save_draft.return_value = None
    repo.set_favorite.return_value = None
    repo.delete_by_id.return_value = None
    return repo


# =============================================================================
# AI Fixtures
# =============================================================================


@pytest.fixture
def mock_generation_client() -> MagicMock:
    """
    Mock AI generation client.

    Usage:
        async def test_x(mock_generation_client):
            mock_generation_client.generate_text.return_value = "text"
    """
    client = MagicMock(spec=GenerationClient)
    client.generate_text = AsyncMock(return_value="")
    client.generate_structured = AsyncMock()
    client.search = AsyncMock()
    return client


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    return logger
