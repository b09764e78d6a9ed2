# src/pullup/main.py

"""Main FastAPI application for PullUp."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .api import match, player, referral, sport
from .db.session import engine
from .exceptions import (
    ConflictError,
    NotFoundError,
    PullUpError,
    StorageError,
    ValidationError,
)
from .middleware.logging import RequestLoggingMiddleware, request_id

logger = logging.getLogger(__name__)


def _log_extra(request: Request, exc: PullUpError) -> dict:
    return {**exc.details, "request_id": request_id(request)}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown events."""
    yield
    # Shutdown: Dispose of database connections gracefully
    await engine.dispose()


app = FastAPI(title="PullUp API", lifespan=lifespan)

app.add_middleware(RequestLoggingMiddleware)


# =============================================================================
# Global Exception Handlers
# =============================================================================


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle all not found errors -> 404."""
    logger.warning(
        "Resource not found: %s", exc.message, extra=_log_extra(request, exc)
    )
    return JSONResponse(
        status_code=404,
        content={"detail": exc.message, "error_type": type(exc).__name__},
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle all validation errors -> 422."""
    logger.warning("Validation error: %s", exc.message, extra=_log_extra(request, exc))
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "error_type": type(exc).__name__},
    )


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Handle concurrent-write conflicts -> 409. Clients may retry once."""
    logger.warning("Conflict: %s", exc.message, extra=_log_extra(request, exc))
    return JSONResponse(
        status_code=409,
        content={"detail": exc.message, "error_type": type(exc).__name__},
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle store failures -> 503. Nothing was written; safe to retry."""
    logger.error("Storage error: %s", exc.message, extra=_log_extra(request, exc))
    return JSONResponse(
        status_code=503,
        content={"detail": exc.message, "error_type": type(exc).__name__},
    )


@app.exception_handler(PullUpError)
async def pullup_error_handler(request: Request, exc: PullUpError) -> JSONResponse:
    """Catch-all for any other PullUp errors -> 500."""
    logger.error(
        "PullUp error: %s",
        exc.message,
        extra=_log_extra(request, exc),
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": exc.message, "error_type": type(exc).__name__},
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Handle database integrity constraint violations."""
    error_msg = str(exc.orig) if exc.orig else str(exc)
    logger.warning("Database integrity error: %s", error_msg)

    # Unique constraint violations -> 409 Conflict
    if "UNIQUE constraint failed" in error_msg or "duplicate key" in error_msg:
        return JSONResponse(
            status_code=409,
            content={"detail": "Resource already exists with given unique field(s)"},
        )

    return JSONResponse(
        status_code=400,
        content={"detail": "Database constraint violation"},
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Catch-all for other SQLAlchemy database errors."""
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=503,
        content={"detail": "The database is unavailable, please retry"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions."""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal server error occurred"},
    )


# Include routers into the main application
app.include_router(match.router)
app.include_router(player.router)
app.include_router(sport.router)
app.include_router(referral.router)


@app.get("/", tags=["Root"])
async def read_root() -> dict[str, str]:
    """Provides a welcome message."""
    return {"message": "Welcome to the PullUp API"}


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
