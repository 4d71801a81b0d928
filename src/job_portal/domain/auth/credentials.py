"""Shared normalization helpers for account form inputs."""

from __future__ import annotations


def present_text(value: str | None) -> str | None:
    """Return the value when it carries non-blank text, otherwise None."""

    if value is None or not value.strip():
        return None
    return value


def split_skills(*, skills: str) -> list[str]:
    """Split comma-separated skills text into an ordered list of trimmed tokens."""

    return [token.strip() for token in skills.split(",") if token.strip()]


def parse_account_roles(*, roles: str) -> frozenset[str]:
    """Parse a comma-separated role list and reject an empty configuration."""

    parsed = frozenset(role.strip() for role in roles.split(",") if role.strip())
    if not parsed:
        raise ValueError("account roles cannot be blank")
    return parsed
