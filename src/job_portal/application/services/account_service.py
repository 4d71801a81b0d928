"""Application service for account registration, login, logout and profile update."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from uuid import UUID

from job_portal.application.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    RoleMismatchError,
    UpstreamError,
    ValidationError,
)
from job_portal.application.ports.account_repository_port import (
    AccountCreateInput,
    AccountProfile,
    AccountRecord,
    AccountRepositoryPort,
    AccountStoreError,
    DuplicateAccountEmailError,
)
from job_portal.application.ports.image_upload_port import (
    FileAttachment,
    ImageUploadError,
    ImageUploadPort,
    UploadedImage,
    UploadOptions,
)
from job_portal.application.ports.password_hasher_port import PasswordHasherPort
from job_portal.application.ports.session_token_port import (
    IssuedSessionToken,
    SessionTokenIssuerPort,
)
from job_portal.domain.auth.credentials import present_text, split_skills

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "All fields are required."
MISSING_PHOTO_MESSAGE = "Profile picture is required."
UNKNOWN_ROLE_MESSAGE = "Role is not supported."
DUPLICATE_EMAIL_MESSAGE = "User already exists with this email."
LOGIN_MISSING_MESSAGE = "Something is missing"
INVALID_CREDENTIALS_MESSAGE = "Incorrect email or password."
ROLE_MISMATCH_MESSAGE = "Account doesn't exist with current role."
ACCOUNT_NOT_FOUND_MESSAGE = "User not found."
UPLOAD_FAILED_MESSAGE = "File upload failed."
STORE_FAILED_MESSAGE = "Account storage is unavailable."

RESUME_UPLOAD_OPTIONS = UploadOptions(
    resource_type="image",
    folder="user_profiles",
    normalize_format="jpg",
    multi_page=True,
)


@dataclass(frozen=True)
class RegisterAccountInput:
    """Registration form fields plus the required profile photo."""

    fullname: str | None
    email: str | None
    phone_number: str | None
    password: str | None
    role: str | None
    profile_photo: FileAttachment | None


@dataclass(frozen=True)
class LoginInput:
    """Login credentials plus the role the caller asserts."""

    email: str | None
    password: str | None
    role: str | None


@dataclass(frozen=True)
class ProfileUpdateInput:
    """Partial profile fields; None or blank means leave untouched."""

    fullname: str | None = None
    email: str | None = None
    phone_number: str | None = None
    bio: str | None = None
    skills: str | None = None
    resume: FileAttachment | None = None


@dataclass(frozen=True)
class LoginResult:
    """Authenticated account plus the session token issued for it."""

    account: AccountRecord
    session: IssuedSessionToken


@dataclass(frozen=True)
class LogoutResult:
    """Instruction for the transport layer to clear the session credential."""

    clear_session: bool = True


class AccountService:
    """Orchestrate account use-cases against store, hasher, token issuer and uploads."""

    def __init__(
        self,
        *,
        accounts: AccountRepositoryPort,
        password_hasher: PasswordHasherPort,
        token_issuer: SessionTokenIssuerPort,
        image_uploader: ImageUploadPort,
        allowed_roles: Collection[str] | None = None,
    ) -> None:
        self._accounts = accounts
        self._password_hasher = password_hasher
        self._token_issuer = token_issuer
        self._image_uploader = image_uploader
        self._allowed_roles = frozenset(allowed_roles) if allowed_roles is not None else None

    async def register(self, payload: RegisterAccountInput) -> AccountRecord:
        """Create one account with a hashed password and uploaded profile photo."""

        fullname = present_text(payload.fullname)
        email = present_text(payload.email)
        phone_number = present_text(payload.phone_number)
        password = present_text(payload.password)
        role = present_text(payload.role)
        if (
            fullname is None
            or email is None
            or phone_number is None
            or password is None
            or role is None
        ):
            raise ValidationError(MISSING_FIELDS_MESSAGE)
        if payload.profile_photo is None:
            raise ValidationError(MISSING_PHOTO_MESSAGE)
        if self._allowed_roles is not None and role not in self._allowed_roles:
            raise ValidationError(UNKNOWN_ROLE_MESSAGE)

        uploaded = await self._upload(payload.profile_photo, options=UploadOptions())

        with _store_failures():
            existing = await self._accounts.get_by_email(email=email)
        if existing is not None:
            logger.info("account_register_rejected reason=duplicate_email")
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        create_input = AccountCreateInput(
            fullname=fullname,
            email=email,
            phone_number=phone_number,
            password_hash=self._password_hasher.hash_password(password),
            role=role,
            profile=AccountProfile(profile_photo=uploaded.url),
        )
        try:
            with _store_failures():
                account = await self._accounts.create_account(create_input)
        except DuplicateAccountEmailError as exc:
            logger.info("account_register_rejected reason=duplicate_email_race")
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from exc

        logger.info(
            "account_registered account_id=%s role=%s",
            account.account_id,
            account.role,
        )
        return account

    async def login(self, payload: LoginInput) -> LoginResult:
        """Verify credentials and role, then issue a session token."""

        email = present_text(payload.email)
        password = present_text(payload.password)
        role = present_text(payload.role)
        if email is None or password is None or role is None:
            raise ValidationError(LOGIN_MISSING_MESSAGE)

        with _store_failures():
            account = await self._accounts.get_by_email(email=email)
        if account is None:
            logger.info("account_login_failed reason=invalid_credentials")
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        is_valid = self._password_hasher.verify_password(
            password=password,
            password_hash=account.password_hash,
        )
        if not is_valid:
            logger.info(
                "account_login_failed account_id=%s reason=invalid_credentials",
                account.account_id,
            )
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        if account.role != role:
            logger.info(
                "account_login_failed account_id=%s reason=role_mismatch",
                account.account_id,
            )
            raise RoleMismatchError(ROLE_MISMATCH_MESSAGE)

        session = self._token_issuer.issue_token(subject_id=str(account.account_id))
        logger.info("account_login_success account_id=%s role=%s", account.account_id, role)
        return LoginResult(account=account, session=session)

    def logout(self) -> LogoutResult:
        """Signal that the session credential must be cleared."""

        return LogoutResult()

    async def update_profile(
        self,
        *,
        account_id: UUID,
        payload: ProfileUpdateInput,
    ) -> AccountRecord:
        """Merge present fields into the account, upload an optional resume and save."""

        with _store_failures():
            account = await self._accounts.get_by_id(account_id=account_id)
        if account is None:
            raise NotFoundError(ACCOUNT_NOT_FOUND_MESSAGE)

        fullname = present_text(payload.fullname)
        email = present_text(payload.email)
        phone_number = present_text(payload.phone_number)
        bio = present_text(payload.bio)
        skills = present_text(payload.skills)

        if email is not None and email != account.email:
            with _store_failures():
                owner = await self._accounts.get_by_email(email=email)
            if owner is not None and owner.account_id != account.account_id:
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        if fullname is not None:
            account.fullname = fullname
        if email is not None:
            account.email = email
        if phone_number is not None:
            account.phone_number = phone_number
        if bio is not None:
            account.profile.bio = bio
        if skills is not None:
            account.profile.skills = split_skills(skills=skills)

        if payload.resume is not None:
            uploaded = await self._upload(payload.resume, options=RESUME_UPLOAD_OPTIONS)
            account.profile.resume = uploaded.url
            account.profile.resume_original_name = payload.resume.filename

        try:
            with _store_failures():
                saved = await self._accounts.save_account(account)
        except DuplicateAccountEmailError as exc:
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from exc

        logger.info("account_profile_updated account_id=%s", saved.account_id)
        return saved

    async def _upload(self, attachment: FileAttachment, *, options: UploadOptions) -> UploadedImage:
        """Upload one attachment and wrap adapter failures as upstream errors."""

        try:
            return await self._image_uploader.upload(attachment, options=options)
        except ImageUploadError as exc:
            logger.warning("account_upload_failed filename=%s error=%s", attachment.filename, exc)
            raise UpstreamError(UPLOAD_FAILED_MESSAGE) from exc


@contextmanager
def _store_failures() -> Iterator[None]:
    """Translate account store outages into upstream workflow errors."""

    try:
        yield
    except AccountStoreError as exc:
        logger.warning("account_store_failed error=%s", exc)
        raise UpstreamError(STORE_FAILED_MESSAGE) from exc
