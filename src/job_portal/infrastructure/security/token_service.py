"""Signed JWT session token issuance and verification."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import jwt
from jwt.exceptions import InvalidTokenError

from job_portal.application.ports.session_token_port import (
    IssuedSessionToken,
    SessionTokenIssuerPort,
)

SESSION_TOKEN_TTL = timedelta(days=1)
SESSION_TOKEN_ALGORITHM = "HS256"
SUBJECT_CLAIM = "userId"


class JwtSessionTokenService(SessionTokenIssuerPort):
    """Issue and verify HS256 tokens carrying the account id as `userId`."""

    def __init__(
        self,
        *,
        secret_key: str,
        token_ttl: timedelta = SESSION_TOKEN_TTL,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        if not secret_key:
            raise ValueError("session token secret key cannot be blank")
        self._secret_key = secret_key
        self._token_ttl = token_ttl
        self._now = now or (lambda: datetime.now(tz=UTC))

    def issue_token(self, *, subject_id: str) -> IssuedSessionToken:
        """Issue a signed token that expires after the configured ttl."""

        issued_at = self._now()
        expires_at = issued_at + self._token_ttl
        token = jwt.encode(
            {SUBJECT_CLAIM: subject_id, "iat": issued_at, "exp": expires_at},
            self._secret_key,
            algorithm=SESSION_TOKEN_ALGORITHM,
        )
        return IssuedSessionToken(
            token=token,
            expires_at=expires_at,
            max_age_seconds=int(self._token_ttl.total_seconds()),
        )

    def decode_subject(self, token: str) -> str | None:
        """Return the account id bound to a valid token, or None when invalid or expired."""

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[SESSION_TOKEN_ALGORITHM],
                options={"require": ["exp", SUBJECT_CLAIM]},
            )
        except InvalidTokenError:
            return None

        subject = payload.get(SUBJECT_CLAIM)
        if not isinstance(subject, str) or not subject:
            return None
        return subject
