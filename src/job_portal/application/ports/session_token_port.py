"""Port for signed session token issuance."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class IssuedSessionToken:
    """Signed session token plus its expiry metadata."""

    token: str
    expires_at: datetime
    max_age_seconds: int


class SessionTokenIssuerPort(Protocol):
    """Session token issuance contract."""

    def issue_token(self, *, subject_id: str) -> IssuedSessionToken:
        """Issue a signed token bound to one account id."""
