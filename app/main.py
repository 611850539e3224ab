"""
Main Application Entry Point
============================

Responsibilities:
- Initialize FastAPI application
- Configure middleware stack
- Register API routers under /api
- Set up exception handlers
- Provide health check endpoints
- Serve uploaded images

IMPORTANT:
    Database tables are managed via Alembic migrations.
    Do NOT use Base.metadata.create_all() in production.
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.exceptions import FlockException
from app.core.logging import configure_logging, get_logger
from app.db.session import check_database_connection

# Import models so every table is registered on Base.metadata
from app import models  # noqa: F401

from app.routes import (
    area_routes,
    attendance_routes,
    auth_routes,
    bacenta_routes,
    call_log_routes,
    dashboard_routes,
    member_routes,
    ministry_routes,
    notification_routes,
    region_routes,
    report_routes,
    sync_routes,
    user_routes,
)

from app.middleware.auth_middleware import (
    AuthMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)

configure_logging()
logger = get_logger(__name__)


# =====================================
# Application Lifespan Handler
# =====================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
    - Check database connection
    - Create the upload directory

    Shutdown:
    - Log application shutdown
    """
    logger.info(
        "application_starting",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    if not check_database_connection():
        logger.error("database_unavailable_on_startup")
    else:
        logger.info("database_connected")

    settings.upload_path.mkdir(parents=True, exist_ok=True)

    try:
        yield
    except asyncio.CancelledError:
        logger.debug("application_shutdown_cancelled")
        raise
    finally:
        logger.info("application_shutdown_complete")


# =====================================
# FastAPI App Initialization
# =====================================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    State of the Flock - Church Administration API

    ## Features

    * **Members & Attendance**: Sunday attendance, call lists and follow-up calls
    * **Bacenta Meetings**: Home-group meetings, offerings and verification
    * **Role Scoping**: Every query limited to the caller's area, region or flock
    * **Reports**: Attendance, growth and exports (JSON or CSV)

    ## Authentication

    Use `/api/auth/login` to obtain a token. Send it as `Authorization: Bearer <token>`
    or rely on the `token` cookie set at login.

    ## Roles

    From the top: `Bishop`, `Assisting_Overseer`, `Governor`, `Area_Pastor`,
    `Data_Clerk`, `Bacenta_Leader`.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)


# =====================================
# Middleware
# =====================================

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(AuthMiddleware)

# Outermost, so preflight requests and 429s carry CORS headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.cors_methods_list,
    allow_headers=settings.cors_headers_list,
    max_age=3600,
)


# =====================================
# Exception Handlers
# =====================================

@app.exception_handler(FlockException)
async def flock_exception_handler(request: Request, exc: FlockException):
    """Render application exceptions as `{message, details}`."""
    logger.warning(
        "application_exception",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Invalid body, path or query parameters: 422 with the offending fields."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("request_validation_error", path=request.url.path, errors=errors)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": "Validation error", "details": {"errors": errors}},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": "Route not found", "details": {"path": request.url.path}},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail), "details": {}},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Log unexpected errors; hide their text in production."""
    logger.error(
        "unhandled_exception",
        exception_type=type(exc).__name__,
        message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    if settings.ENVIRONMENT == "production":
        content = {"message": "An unexpected error occurred", "details": {}}
    else:
        content = {"message": str(exc), "details": {"type": type(exc).__name__}}

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


# =====================================
# Register Routers
# =====================================

for module in (
    auth_routes,
    user_routes,
    area_routes,
    region_routes,
    member_routes,
    attendance_routes,
    bacenta_routes,
    call_log_routes,
    ministry_routes,
    notification_routes,
    dashboard_routes,
    report_routes,
    sync_routes,
):
    app.include_router(module.router, prefix="/api")

app.mount(
    "/uploads",
    StaticFiles(directory=str(settings.upload_path), check_dir=False),
    name="uploads",
)


# =====================================
# Health Check Endpoints
# =====================================

def _health_payload() -> dict:
    db_healthy = check_database_connection()
    return {
        "status": "healthy" if db_healthy else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "checks": {"database": "healthy" if db_healthy else "unhealthy"},
    }


@app.get("/", tags=["Health"], summary="Basic Health Check")
def health_check():
    return _health_payload()


@app.get("/health", tags=["Health"], summary="Detailed Health Check")
def detailed_health_check():
    """
    Health status including database connectivity.

    Returns:
        "healthy" when the database answers, "degraded" otherwise
    """
    return _health_payload()


@app.get("/ready", tags=["Health"], summary="Readiness Check")
def readiness_check():
    """
    Readiness check for container orchestration.

    Returns:
        200 if ready, 503 if the database is unavailable
    """
    if not check_database_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready"}
