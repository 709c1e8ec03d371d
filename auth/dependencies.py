"""
auth/dependencies.py -- FastAPI Depends() helper for bearer authentication.

get_identity() is attached to every protected router. It reads the
Authorization header, hands the token to the SessionVerifier built in the
lifespan (request.app.state.session_verifier), and returns an Identity.

Status contract:
  No header, or "Bearer" with nothing after it -> MissingCredential (401).
  Any other scheme, or a token the verifier rejects -> InvalidCredential (403).

There is no database lookup here. The Identity is what the token says it is.

Layer rule: no imports from api/ or inventory/. This module may import from
fastapi because it is part of the dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import Identity
from auth.tokens import SessionVerifier
from core.errors import InvalidCredential, MissingCredential


def get_identity(request: Request) -> Identity:
    """Require a valid bearer token and return the caller's Identity.

    Use as a FastAPI dependency:
        @router.put("/products/{product_id}")
        def route(identity: Identity = Depends(get_identity)): ...
    """
    auth_header = request.headers.get("Authorization", "").strip()
    if not auth_header:
        raise MissingCredential()

    scheme, _, token = auth_header.partition(" ")
    token = token.strip()
    if not token:
        raise MissingCredential()
    if scheme.lower() != "bearer":
        raise InvalidCredential()

    verifier: SessionVerifier = request.app.state.session_verifier
    return verifier.verify(token)
