"""Domain error taxonomy.

Services raise these; `inventorydb.main` maps each one to an HTTP status.
None of them represents a transient fault, so nothing retries them.
"""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for errors surfaced to API callers."""

    kind = "inventory_error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConstraintViolation(InventoryError):
    """A write would break an invariant of the data model."""

    kind = "constraint_violation"
    status_code = 409


class NotFound(InventoryError):
    """A requested row does not exist."""

    kind = "not_found"
    status_code = 404


class PermissionDenied(InventoryError):
    """The acting user's role is below what the action requires."""

    kind = "permission_denied"
    status_code = 403


class AuthenticationFailed(InventoryError):
    """Bad credentials. The message never says which half was wrong."""

    kind = "authentication_failed"
    status_code = 401


class InvalidToken(InventoryError):
    """Bad signature, malformed payload, wrong token kind or expired."""

    kind = "invalid_token"
    status_code = 401
