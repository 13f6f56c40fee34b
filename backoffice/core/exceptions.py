"""Typed failures raised by the RBAC core.

Each error carries a stable ``code`` and the HTTP status the API layer maps it
to. Services raise them; ``backoffice.api.errors`` renders them.
"""

from typing import Optional


class BackofficeError(Exception):
    """Base class for errors that propagate to the API boundary."""

    code = "C002"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(BackofficeError):
    """Malformed or inconsistent request fields."""

    code = "C001"
    status_code = 400
    default_message = "Invalid input value"


class NotFoundError(BackofficeError):
    """A role, permission or menu id/code does not exist."""

    code = "C003"
    status_code = 404
    default_message = "Requested resource was not found"


class ConflictError(BackofficeError):
    """Duplicate natural key on create."""

    code = "C006"
    status_code = 409
    default_message = "Resource already exists"


class PolicyViolationError(BackofficeError):
    """The operation is forbidden by an RBAC policy (protected role, menu with children)."""

    code = "C007"
    status_code = 403
    default_message = "Operation not allowed"
