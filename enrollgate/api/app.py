"""FastAPI application for enrollgate.

Endpoints (also mounted under /api/v2):
  GET    /enrollments               — ADMIN: list all enrollments
  POST   /enrollments/reset         — ADMIN: clear enrollments
  GET    /enrollments/{student_id}  — owner or ADMIN: one student's enrollments
  POST   /enrollments/{student_id}  — STUDENT owner: enroll in a course
  DELETE /enrollments/{student_id}  — STUDENT owner: drop a course
  GET    /users                     — ADMIN: list users (passwords redacted)
  POST   /users/login               — public: issue an access token
  POST   /users/logout              — public: not implemented
  POST   /users/reset               — ADMIN: restore seed accounts
  GET    /health                    — Health check
  GET    /api/version               — API version info
  GET    /metrics                   — Prometheus metrics
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import enrollgate
from enrollgate.api.routes.enrollments import router as enrollments_router
from enrollgate.api.routes.users import router as users_router
from enrollgate.config import settings
from enrollgate.enrollments import EnrollmentService
from enrollgate.exceptions import EnrollGateError, ValidationFailedError
from enrollgate.logging_config import log_startup_info, setup_logging
from enrollgate.storage.memory import MemoryStore

logger = logging.getLogger("enrollgate")

_API_PREFIX = "/api/v2"
_STARTUP_TIME: float = 0.0

_store = MemoryStore()
_enrollment_service = EnrollmentService(_store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _STARTUP_TIME
    _STARTUP_TIME = time.monotonic()
    setup_logging()
    await _store.restore_seed()
    log_startup_info()
    yield
    logger.info("Shutdown complete")


_OPENAPI_TAGS = [
    {"name": "Health", "description": "Health checks and version info"},
    {"name": "Enrollments", "description": "Course enrollments, guarded by role and ownership"},
    {"name": "Users", "description": "Login and user administration"},
    {"name": "Metrics", "description": "Prometheus metrics endpoint"},
]

app = FastAPI(
    title="enrollgate",
    description="Token-authenticated enrollment API with role and ownership policies.",
    version=enrollgate.__version__,
    lifespan=lifespan,
    openapi_tags=_OPENAPI_TAGS,
)

app.state.store = _store
app.state.enrollment_service = _enrollment_service


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
def _error_body(request: Request, error_type: str, message: str) -> dict:
    return {
        "success": False,
        "message": message,
        "error": error_type,
        "request_id": getattr(request.state, "request_id", "unknown"),
    }


@app.exception_handler(EnrollGateError)
async def enrollgate_error_handler(request: Request, exc: EnrollGateError) -> JSONResponse:
    """Centralized handler for enrollgate exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.error_type, exc.message),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures are 400s carrying the first issue."""
    errors = exc.errors()
    detail = "Validation failed"
    if errors:
        first = errors[0]
        loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{loc}: {first.get('msg', 'invalid')}" if loc else first.get("msg", detail)
    err = ValidationFailedError()
    body = _error_body(request, err.error_type, err.message)
    body["errors"] = detail
    return JSONResponse(status_code=err.status_code, content=body)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler. Details go to the log, never to the caller."""
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content=_error_body(request, "internal_error", "Something is wrong, please try again"),
    )


# ---------------------------------------------------------------------------
# CORS middleware
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Security headers middleware
# ---------------------------------------------------------------------------
@app.middleware("http")
async def security_headers_middleware(request: Request, call_next) -> Response:
    response: Response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Cache-Control"] = "no-store"
    return response


# ---------------------------------------------------------------------------
# Request logging middleware (also sets request_id on state for error handlers)
# ---------------------------------------------------------------------------
@app.middleware("http")
async def request_logging_middleware(request: Request, call_next) -> Response:
    request_id = str(uuid4())[:8]
    request.state.request_id = request_id
    start = time.monotonic()
    response: Response = await call_next(request)
    elapsed_ms = round((time.monotonic() - start) * 1000, 1)
    logger.info(
        "%s %s %s %.1fms [%s]",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "duration_ms": elapsed_ms,
        },
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Prometheus metrics
# ---------------------------------------------------------------------------
from prometheus_fastapi_instrumentator import Instrumentator  # noqa: E402

_instrumentator = Instrumentator(
    excluded_handlers=["/metrics"],
    should_respect_env_var=False,
)
_instrumentator.instrument(app).expose(app, endpoint="/metrics", tags=["Metrics"])


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health", tags=["Health"], summary="Health check")
async def health():
    uptime_s = time.monotonic() - _STARTUP_TIME if _STARTUP_TIME > 0 else 0
    return {
        "status": "ok",
        "version": enrollgate.__version__,
        "uptime_seconds": round(uptime_s, 1),
        "user_count": len(await _store.list_users()),
        "enrollment_count": len(await _store.list_enrollments()),
    }


@app.get("/api/version", tags=["Health"], summary="API version info")
async def api_version():
    """Return API version information."""
    return {"version": enrollgate.__version__, "api_prefix": _API_PREFIX}


# ---------------------------------------------------------------------------
# Routers: unversioned paths plus the /api/v2 mirror
# ---------------------------------------------------------------------------
for _router in (enrollments_router, users_router):
    app.include_router(_router)
    app.include_router(_router, prefix=_API_PREFIX)
