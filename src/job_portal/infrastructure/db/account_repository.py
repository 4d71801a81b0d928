"""SQLAlchemy adapter for account persistence."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from job_portal.application.ports.account_repository_port import (
    AccountCreateInput,
    AccountProfile,
    AccountRecord,
    AccountRepositoryPort,
    AccountStoreError,
    DuplicateAccountEmailError,
)
from job_portal.infrastructure.db.metadata import accounts

_ACCOUNT_COLUMNS = (
    accounts.c.id,
    accounts.c.fullname,
    accounts.c.email,
    accounts.c.phone_number,
    accounts.c.password_hash,
    accounts.c.role,
    accounts.c.profile,
    accounts.c.created_at,
    accounts.c.updated_at,
)


def _is_duplicate_email_error(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "uq_accounts_email" in message or "accounts.email" in message


class SqlAlchemyAccountRepository(AccountRepositoryPort):
    """Account repository backed by SQLAlchemy async sessions.

    The nested profile is stored as one JSON document using the portal's
    camelCase keys.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_email(self, *, email: str) -> AccountRecord | None:
        """Return account by exact email or None."""

        statement = sa.select(*_ACCOUNT_COLUMNS).where(accounts.c.email == email).limit(1)
        return await self._fetch_one(statement, operation="get_by_email")

    async def get_by_id(self, *, account_id: UUID) -> AccountRecord | None:
        """Return account by id or None."""

        statement = sa.select(*_ACCOUNT_COLUMNS).where(accounts.c.id == account_id).limit(1)
        return await self._fetch_one(statement, operation="get_by_id")

    async def create_account(self, payload: AccountCreateInput) -> AccountRecord:
        """Insert a new account row and return the created record."""

        statement = (
            sa.insert(accounts)
            .values(
                id=uuid4(),
                fullname=payload.fullname,
                email=payload.email,
                phone_number=payload.phone_number,
                password_hash=payload.password_hash,
                role=payload.role,
                profile=profile_to_document(payload.profile),
            )
            .returning(*_ACCOUNT_COLUMNS)
        )
        row = await self._write_one(statement, email=payload.email, operation="create_account")
        if row is None:  # pragma: no cover - insert returning always yields a row.
            raise AccountStoreError("create_account returned no row")
        return _to_account_record(row)

    async def save_account(self, account: AccountRecord) -> AccountRecord:
        """Persist mutable account fields and return the refreshed record."""

        statement = (
            sa.update(accounts)
            .where(accounts.c.id == account.account_id)
            .values(
                fullname=account.fullname,
                email=account.email,
                phone_number=account.phone_number,
                password_hash=account.password_hash,
                role=account.role,
                profile=profile_to_document(account.profile),
                updated_at=sa.func.current_timestamp(),
            )
            .returning(*_ACCOUNT_COLUMNS)
        )
        row = await self._write_one(statement, email=account.email, operation="save_account")
        if row is None:
            raise AccountStoreError(f"save_account target missing: {account.account_id}")
        return _to_account_record(row)

    async def _fetch_one(
        self,
        statement: sa.Select[Any],
        *,
        operation: str,
    ) -> AccountRecord | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
        except SQLAlchemyError as error:
            raise AccountStoreError(f"{operation} failed") from error

        row = result.mappings().first()
        if row is None:
            return None
        return _to_account_record(row)

    async def _write_one(
        self,
        statement: sa.Insert | sa.Update,
        *,
        email: str,
        operation: str,
    ) -> sa.RowMapping | None:
        try:
            async with self._session_factory() as session:
                try:
                    result = await session.execute(statement)
                    row = result.mappings().first()
                    await session.commit()
                except IntegrityError as error:
                    await session.rollback()
                    if _is_duplicate_email_error(error):
                        raise DuplicateAccountEmailError(email=email) from error
                    raise
        except SQLAlchemyError as error:
            raise AccountStoreError(f"{operation} failed") from error
        return row


def profile_to_document(profile: AccountProfile) -> dict[str, Any]:
    """Serialize the nested profile to its stored JSON document."""

    return {
        "bio": profile.bio,
        "skills": list(profile.skills),
        "profilePhoto": profile.profile_photo,
        "resume": profile.resume,
        "resumeOriginalName": profile.resume_original_name,
    }


def profile_from_document(document: Mapping[str, Any] | None) -> AccountProfile:
    """Rebuild the nested profile from its stored JSON document."""

    raw = document or {}
    skills = raw.get("skills") or []
    return AccountProfile(
        bio=raw.get("bio"),
        skills=[str(skill) for skill in skills],
        profile_photo=raw.get("profilePhoto"),
        resume=raw.get("resume"),
        resume_original_name=raw.get("resumeOriginalName"),
    )


def _to_account_record(row: sa.RowMapping) -> AccountRecord:
    raw_account_id = row["id"]
    account_id = raw_account_id if isinstance(raw_account_id, UUID) else UUID(str(raw_account_id))
    return AccountRecord(
        account_id=account_id,
        fullname=cast(str, row["fullname"]),
        email=cast(str, row["email"]),
        phone_number=cast(str, row["phone_number"]),
        password_hash=cast(str, row["password_hash"]),
        role=cast(str, row["role"]),
        profile=profile_from_document(cast("Mapping[str, Any] | None", row["profile"])),
        created_at=cast("Any", row["created_at"]),
        updated_at=cast("Any", row["updated_at"]),
    )
