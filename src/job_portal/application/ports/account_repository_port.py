"""Port for account persistence operations used by the account workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID


@dataclass
class AccountProfile:
    """Nested profile document stored with each account."""

    bio: str | None = None
    skills: list[str] = field(default_factory=list)
    profile_photo: str | None = None
    resume: str | None = None
    resume_original_name: str | None = None


@dataclass
class AccountRecord:
    """Account persistence model.

    Mutable so the workflow can merge profile updates before saving it back.
    """

    account_id: UUID
    fullname: str
    email: str
    phone_number: str
    password_hash: str
    role: str
    profile: AccountProfile
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AccountCreateInput:
    """Input payload for inserting a new account."""

    fullname: str
    email: str
    phone_number: str
    password_hash: str
    role: str
    profile: AccountProfile


class DuplicateAccountEmailError(ValueError):
    """Raised by the store when another account already owns an email."""

    def __init__(self, *, email: str) -> None:
        super().__init__(f"account email already registered: {email}")
        self.email = email


class AccountStoreError(RuntimeError):
    """Raised for normalized account store failures other than duplicate email."""


class AccountRepositoryPort(Protocol):
    """Account store contract."""

    async def get_by_email(self, *, email: str) -> AccountRecord | None:
        """Return account by exact email or None."""

    async def get_by_id(self, *, account_id: UUID) -> AccountRecord | None:
        """Return account by id or None."""

    async def create_account(self, payload: AccountCreateInput) -> AccountRecord:
        """Persist a new account; raise DuplicateAccountEmailError on email clash."""

    async def save_account(self, account: AccountRecord) -> AccountRecord:
        """Persist mutated account fields; raise DuplicateAccountEmailError on email clash."""
