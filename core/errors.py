"""
core/errors.py -- Domain error taxonomy for the inventory service.

Every failure a caller can observe is one of these classes. Each carries the
HTTP status it maps to and a default client-facing message; api/main.py turns
them into a {"message": ...} JSON body with a single exception handler.

auth/ and inventory/ raise these directly instead of returning None, so route
handlers stay thin and the 401/403/404 distinctions are decided in one place
per operation.

Layer rule: core/ is the kernel. No imports from api/, auth/, or inventory/.
"""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for all domain errors. Never raised directly."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(InventoryError):
    """Client supplied incomplete or invalid input."""

    status_code = 400
    message = "All fields are required"


class MissingCredential(InventoryError):
    """No bearer token on a protected route -- the client made no attempt."""

    status_code = 401
    message = "Access denied. No token provided."


class InvalidCredential(InventoryError):
    """A bearer token was presented but is malformed, tampered with, or expired."""

    status_code = 403
    message = "Invalid token"


class InvalidCredentials(InventoryError):
    """Login failed. Same message whether the email is unknown or the password is wrong."""

    status_code = 401
    message = "Invalid credentials"


class DuplicateEmail(InventoryError):
    status_code = 400
    message = "User already exists"


class NotFound(InventoryError):
    status_code = 404
    message = "Product not found"


class Forbidden(InventoryError):
    """Authenticated, but neither the resource owner nor an admin."""

    status_code = 403
    message = "Not authorized to modify this product"


class StorageError(InventoryError):
    """The backing store failed. The cause is logged, never sent to the client."""

    status_code = 500
    message = "Internal server error"
