"""Typed failures raised by the account workflow.

Each error carries the HTTP-equivalent status code and the message shown to the
caller. Messages never include internal identifiers or exception details.
"""

from __future__ import annotations


class AccountWorkflowError(Exception):
    """Base class for expected account workflow failures."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AccountWorkflowError):
    """Raised when required input is missing or not acceptable."""


class ConflictError(AccountWorkflowError):
    """Raised when an email is already owned by another account."""


class AuthError(AccountWorkflowError):
    """Raised for bad credentials; the message never says which one was wrong."""


class RoleMismatchError(AccountWorkflowError):
    """Raised when credentials match but the asserted role does not."""


class NotFoundError(AccountWorkflowError):
    """Raised when the target account does not exist."""

    status_code = 404


class UpstreamError(AccountWorkflowError):
    """Raised when the account store or upload service fails."""

    status_code = 500
