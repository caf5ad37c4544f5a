"""
FastAPI application initialization
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import pydantic
from api.routes import health, external_blog, data_export, admin
from core.config import settings
from core.exceptions import (
    SyncException,
    ConfigurationError,
    AuthenticationError,
    RemoteError,
    NotFoundError,
    ValidationError,
    PersistenceError,
    describe_error,
)
from core.logging import setup_logging
import logging
from api.middleware import RequestContextMiddleware
from sync.scheduler import PostImportScheduler

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="RequestDesk Blog Sync API",
    description="Keeps the store blog and catalog in sync with RequestDesk",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Initialize Scheduler
scheduler = PostImportScheduler()


# Include routers
app.include_router(health.router)
app.include_router(external_blog.router)
app.include_router(data_export.router)
app.include_router(admin.router)


# ============================================================================
# Error handling
# ============================================================================

# Order matters: subclasses before their parents
ERROR_STATUS_CODES = [
    (AuthenticationError, 401),
    (ConfigurationError, 503),
    (NotFoundError, 404),
    (ValidationError, 422),
    (PersistenceError, 409),
    (RemoteError, 502),
]


def status_code_for(error: SyncException) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


@app.exception_handler(SyncException)
async def sync_exception_handler(request: Request, exc: SyncException):
    status_code = status_code_for(exc)
    request_id = getattr(request.state, "request_id", "-")

    if status_code >= 500:
        logger.error(f"[{request_id}] {request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"[{request_id}] {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(status_code=status_code, content={"success": False, "error": exc.message})


@app.exception_handler(pydantic.ValidationError)
async def validation_exception_handler(request: Request, exc: pydantic.ValidationError):
    return JSONResponse(status_code=422, content={"success": False, "error": describe_error(exc)})


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting RequestDesk Blog Sync API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

    scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down RequestDesk Blog Sync API")
    scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "RequestDesk Blog Sync API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "external_blog": external_blog.router.prefix,
            "data_export": data_export.router.prefix,
            "admin": admin.router.prefix
        }
    }
