"""
api/routes/auth.py -- Signup and login endpoints.

Routes:
  POST /api/auth/signup  -- create a non-admin account; 201 {message, userId}
  POST /api/auth/login   -- exchange email/password for a bearer token

Security:
  Login returns the same 401 body for an unknown email and a wrong password.
  SessionIssuer.issue() runs bcrypt in both cases so timing matches too --
  do not inline a get_by_email() + verify_password() pair here.
  Cache-Control: no-store on login responses so tokens are not cached.

Both routes are public. Storage failures become StorageError (500) with an
operation-specific message; the cause is logged by the app's handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from api.models import LoginRequest, LoginResponse, SignupRequest, SignupResponse
from auth.accounts import register_user
from auth.store import UserStore
from auth.tokens import SessionIssuer
from core.errors import StorageError, ValidationError

router = APIRouter()


@router.post("/auth/signup", response_model=SignupResponse, status_code=201)
def signup(request: Request, body: SignupRequest) -> SignupResponse:
    """Register a new account. Duplicate emails are a 400, not a 409."""
    user_store: UserStore = request.app.state.user_store
    try:
        user_id = register_user(user_store, body.name, body.email, body.password)
    except SQLAlchemyError as exc:
        raise StorageError("Error creating user") from exc
    return SignupResponse(message="User created successfully", userId=user_id)


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a 24-hour bearer token."""
    if not body.email or not body.password:
        raise ValidationError("Email and password are required")

    issuer: SessionIssuer = request.app.state.session_issuer
    try:
        session = issuer.issue(body.email, body.password)
    except SQLAlchemyError as exc:
        raise StorageError("Error logging in") from exc

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=session.token,
            userId=session.user_id,
            isAdmin=session.is_admin,
            name=session.name,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
