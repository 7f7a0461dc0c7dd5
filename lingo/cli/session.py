"""
CLI Session Wiring.

Builds the auth session, note repository and sync service for one CLI
invocation, and persists the auth tokens between invocations in
~/.compliance_lingo/session.json.

Usage:
    async with CliSession() as cli:
        user = cli.session.require_user()
        await cli.notes.list_notes(user.id)
"""

import json
from pathlib import Path
from typing import Any

import httpx

from lingo.core.logging import get_logger, log_with_source
from lingo.repositories.base import create_store_client
from lingo.repositories.note import build_note_repository
from lingo.schemas.user import AuthSession
from lingo.services.auth import (
    AuthClient,
    SessionContext,
    SessionEvent,
    Subscription,
    create_auth_http_client,
)
from lingo.services.note import NoteSyncService, build_note_sync_service

logger = get_logger(__name__)

DEFAULT_TOKEN_PATH = Path.home() / ".compliance_lingo" / "session.json"


class TokenStore:
    """JSON file holding the access and refresh tokens of the last session."""

    def __init__(self, path: Path = DEFAULT_TOKEN_PATH) -> None:
        self.path = path

    def load(self) -> tuple[str | None, str | None]:
        if not self.path.exists():
            return None, None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log_with_source(logger, "cli", "warning", "Stored session unreadable", error=str(e))
            return None, None
        return data.get("access_token"), data.get("refresh_token")

    def save(self, session: AuthSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({
                "access_token": session.access_token,
                "refresh_token": session.refresh_token,
            }),
            encoding="utf-8",
        )
        self.path.chmod(0o600)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class CliSession:
    """
    Per-invocation application wiring.

    Session changes are written to the token store through a session
    listener, so sign-in, refresh and sign-out survive the process.
    """

    def __init__(
        self,
        token_store: TokenStore | None = None,
        store_transport: httpx.AsyncBaseTransport | None = None,
        auth_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token_store = token_store or TokenStore()
        self._store_http = create_store_client(transport=store_transport)
        self._auth_http = create_auth_http_client(transport=auth_transport)

        self.session = SessionContext(AuthClient(self._auth_http))
        self.repo = build_note_repository(self._store_http, token_provider=self.session.access_token)
        self.notes: NoteSyncService = build_note_sync_service(self.repo)
        self._subscription: Subscription | None = None

    def _on_session_change(self, event: SessionEvent, session: AuthSession | None) -> None:
        if session is not None:
            self.token_store.save(session)
        else:
            self.token_store.clear()
        if event is SessionEvent.SIGNED_OUT:
            self.notes.clear()

    async def __aenter__(self) -> "CliSession":
        self._subscription = self.session.subscribe(self._on_session_change)
        access_token, refresh_token = self.token_store.load()
        await self.session.initialize(access_token, refresh_token)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.notes.aclose()
        if self._subscription is not None:
            self._subscription.unsubscribe()
        self.session.shutdown()
        await self._store_http.aclose()
        await self._auth_http.aclose()
