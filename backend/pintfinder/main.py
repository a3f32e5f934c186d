"""Pint Finder FastAPI Application.

Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from pintfinder.api import close_services, router
from pintfinder.config import get_settings
from pintfinder.models import (
    DiscoveryError,
    ErrorCode,
    LocationError,
    NoResultsError,
    NoVenuesFoundError,
    PintFinderError,
    SessionNotFoundError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)

# Most specific first
ERROR_STATUS = [
    (DiscoveryError, 502),
    (NoVenuesFoundError, 404),
    (SessionNotFoundError, 404),
    (NoResultsError, 409),
    (LocationError, 400),
]


def status_for(exc: PintFinderError) -> int:
    for error_cls, status in ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    yield
    # Shutdown - close shared HTTP clients
    await close_services()


app = FastAPI(
    title="Pint Finder API",
    description="Find the nearest pub and plan a crawl",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers
@app.exception_handler(PintFinderError)
async def pintfinder_exception_handler(request: Request, exc: PintFinderError):
    """Handle errors raised by the core."""
    status = status_for(exc)
    logger.info(f"[API] {request.url.path} -> {status} {exc.code.value}: {exc}")
    return JSONResponse(
        status_code=status,
        content={
            "success": False,
            "error": exc.to_app_error().model_dump(mode="json"),
        },
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors."""
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": str(exc),
                "user_message": "Invalid request format. Please check your input.",
            },
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception(f"[API] Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": ErrorCode.API_ERROR.value,
                "message": str(exc),
                "user_message": "Something went wrong. Please try again.",
            },
        },
    )


# Include API routes
app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
