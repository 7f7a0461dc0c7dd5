"""
User and Session Schemas.

Authenticated user identity and the auth session returned by the
hosted auth service.
"""

from typing import Any

from pydantic import BaseModel, Field


class User(BaseModel):
    """The signed-in user, as shown in the client."""

    id: str
    email: str = ""
    name: str = "User"

    @classmethod
    def from_auth_user(cls, payload: dict[str, Any]) -> "User":
        """
        Build a User from the auth service's user object.

        The display name comes from the profile's full_name metadata,
        falling back to the local part of the email, then "User".
        """
        email = payload.get("email") or ""
        metadata = payload.get("user_metadata") or {}
        name = metadata.get("full_name") or email.split("@")[0] or "User"
        return cls(id=str(payload["id"]), email=email, name=name)


class AuthSession(BaseModel):
    """Tokens and user for an authenticated session."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    user: User


class SignUpResult(BaseModel):
    """Outcome of a sign-up request."""

    user: User | None = None
    session: AuthSession | None = None
    confirmation_required: bool = Field(
        default=False,
        description="True when the account must be confirmed by email before sign-in",
    )
