# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rental_db.database import db_service

from . import __version__
from .core.config import settings
from .middleware.pii import PIIMaskingMiddleware
from .routes import admin, applications, health
from .schemas.error import ErrorResponse
from .services.errors import ApplicationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    if settings.AUTH_DISABLED:
        logger.warning("AUTH_DISABLED is set: every request runs as the dev admin user")
    logger.info(
        "Property catalog at %s (timeout %.1fs); expiry window %d days",
        settings.PROPERTY_CATALOG_URL,
        settings.PROPERTY_CATALOG_TIMEOUT,
        settings.EXPIRY_WINDOW_DAYS,
    )
    yield
    await db_service.close()


app = FastAPI(
    title="Rental Applications API",
    description="Rental application lifecycle: drafts, review, payments and conditions",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# PII masking -- runs after CORS, masks JSON response bodies for landlords
app.add_middleware(PIIMaskingMiddleware)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def _build_error(
    status_code: int,
    detail: str,
    request_id: str,
    *,
    code: str = "",
    errors: dict[str, str] | None = None,
) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
        code=code,
        errors=errors or {},
    )


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


@app.exception_handler(ApplicationError)
async def application_error_handler(request: Request, exc: ApplicationError):
    """Render lifecycle errors (validation, transition, conflict, ...) as RFC 7807."""
    body = _build_error(
        exc.status_code,
        exc.detail,
        _request_id(request),
        code=exc.code,
        errors=exc.errors,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), _request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    errors = {
        ".".join(str(part) for part in err.get("loc", ())): err.get("msg", "")
        for err in exc.errors()
    }
    body = _build_error(
        422, "Request validation failed.", _request_id(request), code="validation_error", errors=errors
    )
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Rental Applications API"}
