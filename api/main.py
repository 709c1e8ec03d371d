"""
api/main.py -- FastAPI application entry point for the inventory service.

Run with:      python main.py serve
               uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- allows the browser client at FRONTEND_URL
  2. log_requests   -- one access-log line per request with latency

Lifespan handles startup and shutdown symmetrically. Startup builds every
stateful collaborator from Settings and attaches it to app.state:
  user_store, product_store   -- SQLAlchemy repositories on DATABASE_URL
  session_issuer              -- SessionIssuer(SECRET_KEY, TOKEN_EXPIRE_SECONDS)
  session_verifier            -- SessionVerifier(SECRET_KEY)
and runs the bootstrap admin seed as an explicit step. Route handlers only
read from app.state; nothing is constructed lazily per request.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.products import router as products_router
from auth.accounts import seed_bootstrap_admin
from auth.store import UserStore
from auth.tokens import SessionIssuer, SessionVerifier
from core.config import get_settings
from core.errors import InventoryError, StorageError
from inventory.store import ProductStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("inventory.api")

_settings = get_settings()

VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Startup order matters:
      1. UserStore first -- creates the users table that products references.
      2. ProductStore second.
      3. Bootstrap admin seed -- a failure here aborts startup.
      4. Issuer / verifier last -- the issuer needs the user store.
    """
    settings = _settings
    logger.info("Inventory API starting up")
    app.state.settings = settings
    app.state.user_store = UserStore(settings.database_url)
    app.state.product_store = ProductStore(settings.database_url)

    try:
        result = seed_bootstrap_admin(
            app.state.user_store,
            email=settings.bootstrap_admin_email,
            name=settings.bootstrap_admin_name,
            password=settings.bootstrap_admin_password,
        )
    except SQLAlchemyError:
        logger.exception("Bootstrap admin seeding failed -- refusing to start")
        app.state.product_store.close()
        app.state.user_store.close()
        raise
    if result.generated_password:
        logger.warning(
            "Bootstrap admin %s created with generated password: %s  (shown once -- store it now)",
            result.email,
            result.generated_password,
        )

    app.state.session_issuer = SessionIssuer(
        app.state.user_store,
        secret_key=settings.secret_key,
        expire_seconds=settings.token_expire_seconds,
    )
    app.state.session_verifier = SessionVerifier(secret_key=settings.secret_key)
    logger.info("Auth initialized (token lifetime %ds)", settings.token_expire_seconds)

    yield

    # Shutdown
    app.state.product_store.close()
    app.state.user_store.close()
    logger.info("Inventory API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Inventory API",
    description="Multi-user product inventory with owner-or-admin write access.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[_settings.frontend_url],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(products_router, prefix="/api", tags=["Products"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every error body is {"message": ...}. Clients get no structured error
# codes beyond the HTTP status; "error" is added in debug mode only.
# ---------------------------------------------------------------------------


def _debug(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings is not None and settings.debug)


def _error_body(message: str, error: str | None = None) -> dict:
    return ErrorResponse(message=message, error=error).model_dump(exclude_none=True)


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    """Map the domain error taxonomy in core/errors.py onto HTTP responses.

    StorageError is logged with its underlying cause; the cause text reaches
    the client only in debug mode.
    """
    detail = None
    if isinstance(exc, StorageError):
        cause = exc.__cause__ or exc
        logger.error(
            "%s on %s %s",
            exc.message,
            request.method,
            request.url.path,
            exc_info=(type(cause), cause, cause.__traceback__),
        )
        if _debug(request):
            detail = str(cause)
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON, wrong field types and non-integer path ids are all a 400."""
    detail = str(exc.errors()) if _debug(request) else None
    return JSONResponse(status_code=400, content=_error_body("Invalid request body", detail))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and wrong methods keep their status but use the common body."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body,
    unless DEBUG is on.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    detail = str(exc) if _debug(request) else None
    return JSONResponse(status_code=500, content=_error_body("Internal server error", detail))


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state, and never requires auth.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return liveness and the current server time."""
    return HealthResponse(timestamp=datetime.now(timezone.utc).isoformat())
