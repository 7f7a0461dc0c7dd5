"""
Authentication and Session Context.

AuthClient talks to the hosted auth service (GoTrue) over httpx.
SessionContext holds the current session and notifies subscribers of
changes; it is created once at startup, initialized from any stored
tokens, and shut down by dropping its listeners.

Usage:
    auth = AuthClient(create_auth_http_client())
    session = SessionContext(auth)
    subscription = session.subscribe(on_change)
    await session.initialize(access_token, refresh_token)
    ...
    subscription.unsubscribe()
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

from lingo.core.config import get_settings, get_store_base_url
from lingo.core.exceptions import AuthenticationError, ValidationError
from lingo.core.logging import get_logger, log_with_source
from lingo.schemas.user import AuthSession, SignUpResult, User

logger = get_logger(__name__)


def create_auth_http_client(
    base_url: str | None = None,
    api_key: str | None = None,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the HTTP client for the auth endpoint (<project>/auth/v1)."""
    if base_url is None or timeout is None:
        config_url, config_timeout = get_store_base_url()
        base_url = base_url or config_url
        timeout = timeout if timeout is not None else config_timeout
    if api_key is None:
        api_key = get_settings().supabase_anon_key

    return httpx.AsyncClient(
        base_url=f"{base_url.rstrip('/')}/auth/v1",
        timeout=timeout,
        headers={"apikey": api_key, "Content-Type": "application/json"},
        transport=transport,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"Authentication failed (HTTP {response.status_code})"


class AuthClient:
    """Email/password authentication against the hosted auth service."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def _post(self, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.client.post(path, **kwargs)
        except httpx.HTTPError as e:
            raise AuthenticationError("Authentication service unavailable") from e
        if response.is_error:
            raise AuthenticationError(_error_message(response))
        return response.json() if response.content else {}

    @staticmethod
    def _session_from(payload: dict[str, Any]) -> AuthSession:
        return AuthSession(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            user=User.from_auth_user(payload["user"]),
        )

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        payload = await self._post(
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return self._session_from(payload)

    async def refresh(self, refresh_token: str) -> AuthSession:
        payload = await self._post(
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return self._session_from(payload)

    async def sign_up(self, email: str, password: str, full_name: str) -> SignUpResult:
        """
        Register a new account.

        When the project requires email confirmation the response carries
        no session; confirmation_required is then set.
        """
        payload = await self._post(
            "/signup",
            json={
                "email": email,
                "password": password,
                "data": {"full_name": full_name},
            },
        )
        if payload.get("access_token"):
            session = self._session_from(payload)
            return SignUpResult(user=session.user, session=session)

        user_payload = payload.get("user") or (payload if payload.get("id") else None)
        user = User.from_auth_user(user_payload) if user_payload else None
        return SignUpResult(user=user, confirmation_required=True)

    async def sign_out(self, access_token: str) -> None:
        await self._post("/logout", headers={"Authorization": f"Bearer {access_token}"})

    async def get_user(self, access_token: str) -> User:
        try:
            response = await self.client.get(
                "/user",
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            raise AuthenticationError("Authentication service unavailable") from e
        if response.is_error:
            raise AuthenticationError(_error_message(response))
        return User.from_auth_user(response.json())


class SessionEvent(StrEnum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


SessionListener = Callable[[SessionEvent, AuthSession | None], None]


@dataclass
class Subscription:
    """Handle returned by SessionContext.subscribe."""

    context: "SessionContext"
    listener: SessionListener

    def unsubscribe(self) -> None:
        self.context.unsubscribe(self.listener)


class SessionContext:
    """
    Current auth session with change notifications.

    Pass this object to consumers instead of reaching for global state.
    """

    def __init__(self, auth: AuthClient) -> None:
        self.auth = auth
        self._session: AuthSession | None = None
        self._listeners: list[SessionListener] = []
        self.initialized = False

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def user(self) -> User | None:
        return self._session.user if self._session else None

    def access_token(self) -> str | None:
        """Token provider for repositories."""
        return self._session.access_token if self._session else None

    def require_user(self) -> User:
        if self._session is None:
            raise AuthenticationError()
        return self._session.user

    def subscribe(self, listener: SessionListener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: SessionEvent) -> None:
        log_with_source(
            logger,
            "auth",
            "info",
            "Session event",
            session_event=event.value,
            user_id=self.user.id if self.user else None,
        )
        for listener in list(self._listeners):
            listener(event, self._session)

    async def initialize(
        self,
        access_token: str | None = None,
        refresh_token: str | None = None,
    ) -> AuthSession | None:
        """
        Restore the session from stored tokens, if they are still valid.

        An expired access token is refreshed when a refresh token is
        available. Invalid tokens leave the context signed out.
        """
        session: AuthSession | None = None
        if access_token:
            try:
                user = await self.auth.get_user(access_token)
                session = AuthSession(
                    access_token=access_token,
                    refresh_token=refresh_token,
                    user=user,
                )
            except AuthenticationError as e:
                log_with_source(logger, "auth", "info", "Stored session rejected", error=e.message)
        if session is None and refresh_token:
            try:
                session = await self.auth.refresh(refresh_token)
            except AuthenticationError as e:
                log_with_source(logger, "auth", "info", "Session refresh failed", error=e.message)

        self._session = session
        self.initialized = True
        self._emit(SessionEvent.INITIAL_SESSION)
        return session

    async def sign_in(self, email: str, password: str) -> AuthSession:
        if not email or not password:
            raise ValidationError("Email and password are required")
        self._session = await self.auth.sign_in_with_password(email, password)
        self._emit(SessionEvent.SIGNED_IN)
        return self._session

    async def sign_up(self, email: str, password: str, full_name: str) -> SignUpResult:
        if not email or not password or not full_name:
            raise ValidationError("Name, email and password are required")
        result = await self.auth.sign_up(email, password, full_name)
        if result.session is not None:
            self._session = result.session
            self._emit(SessionEvent.SIGNED_IN)
        return result

    async def sign_out(self) -> None:
        """Revoke the session remotely (best effort) and clear it locally."""
        if self._session is not None:
            try:
                await self.auth.sign_out(self._session.access_token)
            except AuthenticationError as e:
                log_with_source(logger, "auth", "warning", "Remote sign-out failed", error=e.message)
        self._session = None
        self._emit(SessionEvent.SIGNED_OUT)

    def shutdown(self) -> None:
        """Drop all listeners."""
        self._listeners.clear()
