"""Pydantic models for account HTTP request and response contracts."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from job_portal.application.ports.account_repository_port import AccountProfile, AccountRecord


class CamelModel(BaseModel):
    """Base model serializing snake_case fields with the portal's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(BaseModel):
    """HTTP request model for login; missing fields are reported by the workflow."""

    email: str | None = None
    password: str | None = None
    role: str | None = None


class ProfileView(CamelModel):
    """Public projection of the nested profile document."""

    bio: str | None = None
    skills: list[str] = Field(default_factory=list)
    profile_photo: str | None = None
    resume: str | None = None
    resume_original_name: str | None = None

    @classmethod
    def from_profile(cls, profile: AccountProfile) -> ProfileView:
        return cls(
            bio=profile.bio,
            skills=list(profile.skills),
            profile_photo=profile.profile_photo,
            resume=profile.resume,
            resume_original_name=profile.resume_original_name,
        )


class AccountView(CamelModel):
    """Sanitized account view; the password hash is never part of it."""

    account_id: UUID = Field(alias="_id")
    fullname: str
    email: str
    phone_number: str
    role: str
    profile: ProfileView

    @classmethod
    def from_record(cls, record: AccountRecord) -> AccountView:
        return cls(
            account_id=record.account_id,
            fullname=record.fullname,
            email=record.email,
            phone_number=record.phone_number,
            role=record.role,
            profile=ProfileView.from_profile(record.profile),
        )


class MessageResponse(BaseModel):
    """Envelope shared by every account endpoint response."""

    message: str
    success: bool


class AccountResponse(MessageResponse):
    """Envelope carrying the sanitized account view."""

    user: AccountView
