"""Mowsy API - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from mowsy.core.config import get_settings
from mowsy.core.database import close_db, init_db
from mowsy.core.env_validation import validate_environment
from mowsy.core.logging_config import configure_logging, log_requests
from mowsy.core.rate_limit import limiter
from mowsy.routers import (
    auth_router,
    users_router,
    jobs_router,
    equipment_router,
    payments_router,
    uploads_router,
    admin_router,
)
from mowsy.services.errors import ServiceError

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Paths served before startup completes
ALWAYS_OPEN_PATHS = {"/health", "/"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: hard-fails (exit 1) on invalid configuration
    validate_environment()
    await init_db()
    app.state.ready = True
    logger.info(f"{settings.app_name} ready")
    yield
    # Shutdown
    app.state.ready = False
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Marketplace for neighborhood lawn-care jobs and equipment rentals.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)
app.state.ready = False

# Rate limiting (per user when authenticated, per IP otherwise)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": "Rate limit exceeded"},
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.middleware("http")
async def readiness_gate(request: Request, call_next):
    """Answer 503 for API calls until startup has finished."""
    if not request.app.state.ready and request.url.path not in ALWAYS_OPEN_PATHS:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Service is starting up"},
        )
    return await call_next(request)


app.middleware("http")(log_requests)

# CORS - configured from ALLOWED_ORIGINS; wildcard is blocked outside debug by env_validation
logger.info(f"CORS configured with origins: {settings.cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API v1 routers
app.include_router(auth_router, prefix=settings.api_v1_prefix)
app.include_router(users_router, prefix=settings.api_v1_prefix)
app.include_router(jobs_router, prefix=settings.api_v1_prefix)
app.include_router(equipment_router, prefix=settings.api_v1_prefix)
app.include_router(payments_router, prefix=settings.api_v1_prefix)
app.include_router(uploads_router, prefix=settings.api_v1_prefix)
app.include_router(admin_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    ready = bool(request.app.state.ready)
    return {
        "status": "healthy" if ready else "starting",
        "ready": ready,
        "service": settings.app_name,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
    }
