"""
auth/tokens.py -- Password hashing and session token issue / verify.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry userId, isAdmin, iat and exp.
       The signing key is passed into SessionIssuer / SessionVerifier at
       construction -- there is no module-level secret -- so keys can be
       rotated and tests can sign with a fixed key and a fake clock.

  Expiry: checked here against the injected clock rather than by jose's
       wall-clock check. A token is valid while now < exp and rejected at
       or after exp.

  Passwords: bcrypt directly (no passlib wrapper). The _DUMMY_HASH constant
       enables timing equalization in SessionIssuer.issue() so response time
       does not reveal whether an email is registered.

  Identity is trusted from the token alone. verify() does not consult the
       users table; a demoted or deleted user's token stays valid until exp.

Layer rule: no imports from api/ or inventory/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import Identity, Session, User
from core.errors import InvalidCredential, InvalidCredentials

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("inventory.auth")

_ALGORITHM = "HS256"

DEFAULT_EXPIRE_SECONDS = 24 * 60 * 60

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Corrupt or non-bcrypt hash in storage, or over-long input.
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("inventory_timing_dummy")


# ---------------------------------------------------------------------------
# Session issuer
# ---------------------------------------------------------------------------


class SessionIssuer:
    """Verifies login credentials and signs session tokens.

    Args:
        user_store:     Where users are looked up by email.
        secret_key:     HS256 signing key. Must match the SessionVerifier's.
        expire_seconds: Validity window from issuance (default 24 hours).
        clock:          Returns the current UNIX time. Injected for tests.
    """

    def __init__(
        self,
        user_store: UserStore,
        secret_key: str,
        expire_seconds: int = DEFAULT_EXPIRE_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._store = user_store
        self._secret_key = secret_key
        self._expire_seconds = expire_seconds
        self._clock = clock

    def issue(self, email: str, password: str) -> Session:
        """Authenticate email/password and return a signed Session.

        Always runs bcrypt whether or not the email exists, so an unknown
        email and a wrong password cost the same and raise the same
        InvalidCredentials error.
        """
        user = self._store.get_by_email(email)
        if user is None:
            # Equalize timing -- do NOT return early before running bcrypt.
            verify_password(password, _DUMMY_HASH)
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        return Session(
            token=self.create_token(user),
            user_id=user.id,
            is_admin=user.is_admin,
            name=user.name,
        )

    def create_token(self, user: User) -> str:
        """Sign a token for an already-authenticated user."""
        issued_at = int(self._clock())
        payload = {
            "sub": str(user.id),
            "userId": user.id,
            "isAdmin": bool(user.is_admin),
            "iat": issued_at,
            "exp": issued_at + self._expire_seconds,
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)


# ---------------------------------------------------------------------------
# Session verifier
# ---------------------------------------------------------------------------


class SessionVerifier:
    """Validates bearer tokens and extracts the caller's Identity."""

    def __init__(self, secret_key: str, clock: Callable[[], float] = time.time) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._clock = clock

    def verify(self, token: str) -> Identity:
        """Return the Identity in a valid token. Raises InvalidCredential otherwise.

        Malformed tokens, bad signatures, missing or mistyped claims and
        expired tokens all fail the same way.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.info("Token rejected: %s", exc)
            raise InvalidCredential() from exc

        user_id = payload.get("userId")
        is_admin = payload.get("isAdmin")
        exp = payload.get("exp")
        if not _is_int(user_id) or not isinstance(is_admin, bool) or not _is_int(exp):
            logger.info("Token rejected: missing or malformed claims")
            raise InvalidCredential()
        if self._clock() >= exp:
            logger.info("Token rejected: expired")
            raise InvalidCredential()
        return Identity(user_id=user_id, is_admin=is_admin)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
