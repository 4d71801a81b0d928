"""Bcrypt password hasher adapter."""

from __future__ import annotations

import bcrypt

from job_portal.application.ports.password_hasher_port import PasswordHasherPort

BCRYPT_ROUNDS = 10
# bcrypt only reads the first 72 bytes of a secret; newer releases reject longer input.
BCRYPT_MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher(PasswordHasherPort):
    """Password hashing adapter using bcrypt with a fixed work factor.

    Passwords longer than 72 UTF-8 bytes are truncated before hashing and
    verification alike, so any accepted password can later be used to log in.
    """

    def __init__(self, *, rounds: int = BCRYPT_ROUNDS) -> None:
        self._rounds = rounds

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            return False


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]
