"""Port for account password hashing and verification."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """One-way password hashing contract used by the account workflow."""

    def hash_password(self, password: str) -> str:
        """Return a salted one-way hash of the plaintext password."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Return whether plaintext matches stored hash; malformed hashes never match."""
