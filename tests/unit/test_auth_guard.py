from __future__ import annotations

from uuid import uuid4

import pytest

from job_portal.infrastructure.http.auth_guard import (
    InvalidAuthTokenError,
    MissingAuthTokenError,
    SessionAuthGuard,
)
from job_portal.infrastructure.security.token_service import JwtSessionTokenService

SECRET = "unit-test-signing-secret-with-enough-length"


def test_require_account_id_resolves_issued_token() -> None:
    token_service = JwtSessionTokenService(secret_key=SECRET)
    guard = SessionAuthGuard(token_service=token_service)
    account_id = uuid4()

    token = token_service.issue_token(subject_id=str(account_id)).token

    assert guard.require_account_id(session_token=token) == account_id


@pytest.mark.parametrize("session_token", [None, "", "   "])
def test_missing_cookie_raises_missing_token(session_token: str | None) -> None:
    guard = SessionAuthGuard(token_service=JwtSessionTokenService(secret_key=SECRET))

    with pytest.raises(MissingAuthTokenError, match="User not authenticated"):
        guard.require_account_id(session_token=session_token)


def test_tampered_token_raises_invalid_token() -> None:
    token_service = JwtSessionTokenService(secret_key=SECRET)
    guard = SessionAuthGuard(token_service=token_service)
    token = token_service.issue_token(subject_id=str(uuid4())).token

    with pytest.raises(InvalidAuthTokenError, match="Invalid token"):
        guard.require_account_id(session_token=token[:-2] + "xx")


def test_non_uuid_subject_raises_invalid_token() -> None:
    token_service = JwtSessionTokenService(secret_key=SECRET)
    guard = SessionAuthGuard(token_service=token_service)
    token = token_service.issue_token(subject_id="not-a-uuid").token

    with pytest.raises(InvalidAuthTokenError):
        guard.require_account_id(session_token=token)
