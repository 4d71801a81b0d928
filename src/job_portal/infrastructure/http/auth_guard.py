"""Session-cookie guard resolving the authenticated account id."""

from __future__ import annotations

from uuid import UUID

from job_portal.infrastructure.security.token_service import JwtSessionTokenService

SESSION_COOKIE_NAME = "token"


class MissingAuthTokenError(PermissionError):
    """Raised when the session cookie is required but not provided."""


class InvalidAuthTokenError(PermissionError):
    """Raised when the session cookie does not carry a valid token."""


class SessionAuthGuard:
    """Resolve the caller's account id from the signed session cookie."""

    def __init__(self, *, token_service: JwtSessionTokenService) -> None:
        self._token_service = token_service

    def require_account_id(self, *, session_token: str | None) -> UUID:
        """Return the account id bound to the session token or raise."""

        if session_token is None or not session_token.strip():
            raise MissingAuthTokenError("User not authenticated")

        subject = self._token_service.decode_subject(session_token.strip())
        if subject is None:
            raise InvalidAuthTokenError("Invalid token")

        try:
            return UUID(subject)
        except ValueError as exc:
            raise InvalidAuthTokenError("Invalid token") from exc
