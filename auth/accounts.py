"""
auth/accounts.py -- Account registration and bootstrap admin seeding.

register_user() is the signup operation behind POST /api/auth/signup.

seed_bootstrap_admin() is a one-time startup step, called explicitly by the
API lifespan and by `python main.py init-db` -- never from request handling.
It is idempotent on email: running it against a database that already holds
the bootstrap email changes nothing.

The bootstrap password is random unless BOOTSTRAP_ADMIN_PASSWORD is set. The
legacy well-known default is still accepted (test fixtures seed with it) but
logs a warning every time it is used.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password
from core.errors import DuplicateEmail, ValidationError

logger = logging.getLogger("inventory.auth")

# Well-known default from earlier deployments. Never used unless configured.
LEGACY_DEFAULT_ADMIN_PASSWORD = "admin123"

# bcrypt only looks at the first 72 bytes and current releases reject longer input.
_MAX_PASSWORD_BYTES = 72


def register_user(store: UserStore, name: str | None, email: str | None, password: str | None) -> int:
    """Create a non-admin account and return its user id.

    Raises:
        ValidationError: a field is missing or blank, or the password is too long.
        DuplicateEmail:  the email is already registered (exact, case-sensitive).
    """
    if not _present(name) or not _present(email) or not _present(password):
        raise ValidationError("All fields are required")
    if len(password.encode("utf-8")) > _MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {_MAX_PASSWORD_BYTES} bytes")

    if store.get_by_email(email) is not None:
        raise DuplicateEmail()

    try:
        user_id = store.create_user(User(name=name, email=email, password_hash=hash_password(password)))
    except IntegrityError as exc:
        # A concurrent signup won the UNIQUE(email) race.
        raise DuplicateEmail() from exc
    logger.info("Registered user id=%d", user_id)
    return user_id


@dataclass(frozen=True)
class BootstrapResult:
    """Outcome of seed_bootstrap_admin().

    generated_password is set only when this call created the admin with a
    random password; it is shown to the operator once and never stored.
    """

    email: str
    created: bool
    user_id: int | None = None
    generated_password: str | None = None


def seed_bootstrap_admin(store: UserStore, email: str, name: str = "Admin", password: str = "") -> BootstrapResult:
    """Ensure exactly one bootstrap admin exists with the given email.

    Storage errors propagate to the caller, which reports them and aborts
    startup.
    """
    if not email:
        raise ValueError("bootstrap admin email must not be empty")

    existing = store.get_by_email(email)
    if existing is not None:
        logger.info("Bootstrap admin %s already present (id=%d)", email, existing.id)
        return BootstrapResult(email=email, created=False, user_id=existing.id)

    generated: str | None = None
    if not password:
        generated = secrets.token_urlsafe(18)
        password = generated
    elif password == LEGACY_DEFAULT_ADMIN_PASSWORD:
        logger.warning(
            "Bootstrap admin %s is being seeded with the well-known default password. "
            "Use this only for local testing.",
            email,
        )

    try:
        user_id = store.create_user(User(name=name, email=email, password_hash=hash_password(password), is_admin=True))
    except IntegrityError:
        # Another process seeded it between our check and insert.
        existing = store.get_by_email(email)
        return BootstrapResult(email=email, created=False, user_id=existing.id if existing else None)

    logger.info("Bootstrap admin %s created (id=%d)", email, user_id)
    return BootstrapResult(email=email, created=True, user_id=user_id, generated_password=generated)


def _present(value: str | None) -> bool:
    return isinstance(value, str) and value.strip() != ""
