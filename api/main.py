"""
api/main.py -- FastAPI application entry point for Gatehouse.

Run with:      uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- CORS headers for allowed browser origins, with
                              credentials so the session cookie crosses origins
  3. SessionMiddleware     -- signed-cookie session slot (request.session);
                              holds only the logged-in user's id

Lifespan opens the CredentialStore on startup (seeding the bootstrap admin
whitelist entry if configured) and closes it on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.whitelist import router as whitelist_router
from auth.errors import AuthError, DuplicateKeyError, UnauthenticatedError
from auth.models import Role
from auth.store import CredentialStore
from auth.workflows import INVALID_CREDENTIALS_MESSAGE
from core.config import get_settings

API_VERSION = "0.1.0"
_LOGIN_PATH = "/api/v1/auth/login"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("gatehouse.api")

_settings = get_settings()


def _seed_bootstrap_admin(store: CredentialStore, email: str) -> None:
    """Whitelist the configured bootstrap email as ADMIN if it is not listed yet.

    Without this the whitelist API (itself ADMIN-only) could never be used on a
    fresh database. An existing entry is left alone so an operator's later
    role change is not reverted on restart.
    """
    if store.find_authorized_email(email) is not None:
        return
    try:
        store.create_authorized_email(email, Role.ADMIN)
    except DuplicateKeyError:
        # Another worker seeded it between the lookup and the insert.
        return
    logger.info("Bootstrap admin email whitelisted: %s", email)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the credential store for the server's lifetime."""
    logger.info("Gatehouse API starting up")
    app.state.credential_store = CredentialStore(_settings.database_url)
    if _settings.bootstrap_admin_email:
        _seed_bootstrap_admin(app.state.credential_store, _settings.bootstrap_admin_email)
    logger.info("Credential store initialized")

    yield

    app.state.credential_store.close()
    logger.info("Gatehouse API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Gatehouse API",
    description="Whitelist-gated registration, session login and role-based access control.",
    version=API_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# add_middleware() wraps the current stack, so the LAST call ends up
# outermost. Registered innermost-first: Session -> CORS -> TrustedHost.
# ---------------------------------------------------------------------------

app.add_middleware(
    SessionMiddleware,
    secret_key=_settings.secret_key,
    session_cookie=_settings.session_cookie,
    max_age=_settings.session_max_age,
    same_site="lax",
    https_only=_settings.secure_cookies,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
    max_age=3600,
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching any route
# handler; latency is reported on every response.
# ---------------------------------------------------------------------------


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

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(whitelist_router, prefix="/api/v1", tags=["Whitelist"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Map auth-core error kinds (400/401/403/409/500) onto the error envelope.

    A 500-class AuthError is logged with its cause but answered with the
    generic message only.
    """
    if exc.status_code >= 500:
        logger.error("Internal auth error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return _error_response(500, "internal_error", "An unexpected error occurred.")
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the request body or path params fail Pydantic validation.

    The submitted values are dropped from the detail so a password is never
    echoed back. A login body that cannot even be parsed gets the ordinary
    failed-login 401 instead.
    """
    if request.url.path == _LOGIN_PATH:
        return _error_response(401, UnauthenticatedError.code, INVALID_CREDENTIALS_MESSAGE)
    errors = [{k: v for k, v in err.items() if k != "input"} for err in exc.errors()]
    return _error_response(400, "bad_request", "Request validation failed.", detail=str(errors))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for framework-raised HTTP exceptions (404, 405, ...)."""
    if exc.status_code == 404:
        return _error_response(404, "not_found", "Resource not found.")
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected store or hasher failures.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version and credential store reachability."""
    try:
        database = "ok" if request.app.state.credential_store.ping() else "error"
    except Exception:
        logger.exception("Health check: credential store unreachable")
        database = "error"
    return HealthResponse(version=API_VERSION, components={"app": "ok", "database": database})
