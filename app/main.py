# app/main.py
"""
FastAPI application entry point.
"""

import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core import storage
from app.core.config import APP_NAME, APP_VERSION, get_cors_origins, get_data_dir, is_production
from app.core.errors import PayrollError
from app.core.logging_config import get_logger, setup_logging
from app.core.request_logging import RequestLoggingMiddleware
from app.core.sentry_config import capture_exception, init_sentry
from app.routes.configuration import router as configuration_router
from app.routes.employees import router as employees_router
from app.routes.payrolls import router as payrolls_router

# Setup logging FIRST (before any other imports that might log)
setup_logging()
logger = get_logger(__name__)

# Initialize Sentry for error tracking (production only)
sentry_enabled = init_sentry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Application starting up",
        extra={
            "extra_fields": {
                "production": is_production(),
                "python_version": sys.version,
                "data_dir": str(get_data_dir().absolute()),
            }
        },
    )

    try:
        storage.initialize_data_files()
        storage.validate_data_files()
    except Exception as e:
        logger.error(f"Data file validation failed: {e}", exc_info=True)
        raise

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title="Nomina",
    description="Colombian payroll settlement service",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS Configuration
if is_production():
    allowed_origins = get_cors_origins()
    if not allowed_origins:
        logger.warning(
            "Production mode but no CORS_ORIGINS set. CORS will block all cross-origin requests. "
            "Set CORS_ORIGINS environment variable if you need to allow specific origins."
        )
    allow_credentials = True
    allowed_methods = ["GET", "POST", "PUT", "DELETE"]
    logger.info(f"CORS configured for production with origins: {allowed_origins}")
else:
    allowed_origins = ["*"]
    allow_credentials = False
    allowed_methods = ["*"]
    logger.info("CORS configured for development (permissive)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=allow_credentials,
    allow_methods=allowed_methods,
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(employees_router)
app.include_router(configuration_router)
app.include_router(payrolls_router)


def _error_response(status_code: int, error: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


@app.exception_handler(PayrollError)
async def payroll_error_handler(request: Request, exc: PayrollError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc}", exc_info=exc)
    else:
        logger.warning(
            f"{exc.code} on {request.url.path}: {exc}",
            extra={"extra_fields": {"code": exc.code, "path": request.url.path}},
        )
    return _error_response(exc.status_code, exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(p) for p in err["loc"] if p != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return _error_response(400, {"code": "VALIDATION_ERROR", "message": "Invalid input data", "details": details})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    if sentry_enabled:
        capture_exception(exc, {"request": {"method": request.method, "path": request.url.path}})
    return _error_response(
        500,
        {"code": "INTERNAL_ERROR", "message": "Internal server error", "details": None},
    )


@app.get("/api/health", tags=["health"])
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns 200 when the data directory is readable, 503 otherwise.
    """
    data_dir = get_data_dir()
    readable = data_dir.is_dir() and os.access(data_dir, os.R_OK)
    content = {
        "success": readable,
        "data": {
            "status": "healthy" if readable else "unhealthy",
            "service": APP_NAME,
            "version": APP_VERSION,
            "data_dir": "readable" if readable else "unavailable",
        },
    }
    if not readable:
        logger.error(f"Health check failed - data directory {data_dir} not readable")
    return JSONResponse(status_code=200 if readable else 503, content=content)
