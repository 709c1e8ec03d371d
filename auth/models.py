"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in inventory/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    email is unique and matched case-sensitively, exactly as stored.
    password_hash is a bcrypt string; the plaintext is never persisted.
    Users are never updated or deleted by any exposed operation.
    """

    name: str
    email: str
    password_hash: str
    id: int | None = None
    is_admin: bool = False
    created_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The acting user, as asserted by a verified session token.

    Built once per request by auth.dependencies.get_identity() and passed
    explicitly to every write path. It reflects the user as of token issuance
    and is NOT re-checked against the users table: a demoted or deleted user's
    unexpired token still resolves to the old identity until it expires.
    """

    user_id: int
    is_admin: bool = False


@dataclass(frozen=True)
class Session:
    """Result of a successful login: the signed token plus display fields."""

    token: str
    user_id: int
    is_admin: bool
    name: str
