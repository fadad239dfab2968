"""
ResourceHub API Main Application

Entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from resourcehub.platform.config import settings
from resourcehub.platform.logging import configure_logging, get_logger
from resourcehub.api.routers import allocations, capacity, departments, employees, notifications, projects
from resourcehub.api.dependencies import (
    init_resources,
    close_resources,
    get_database_adapter,
)

# Configure logging on import
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting ResourceHub API...")
    try:
        await init_resources()
        logger.info("Resources initialized successfully.")
    except Exception as e:
        logger.error("Failed to initialize resources", error=str(e))
        raise

    yield

    logger.info("Shutting down ResourceHub API...")
    await close_resources()
    logger.info("Resources closed.")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Resource allocation with over-allocation detection and capacity heat maps",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(",") if settings.CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# OBSERVABILITY
# =============================================================================

if settings.METRICS_ENABLED:
    app.mount("/metrics", make_asgi_app())


# =============================================================================
# HEALTH ENDPOINTS
# =============================================================================


@app.get("/health/live", tags=["Health"])
async def liveness() -> dict:
    """Liveness probe - is the service running?"""
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"])
async def readiness() -> dict:
    """
    Readiness probe - is the service ready to accept traffic?
    Checks the database connection.
    """
    database_healthy = get_database_adapter().health_check()

    return {
        "status": "ready" if database_healthy else "not_ready",
        "version": settings.VERSION,
        "checks": {
            "database": "healthy" if database_healthy else "unhealthy",
        },
    }


# =============================================================================
# API ROUTERS
# =============================================================================

app.include_router(departments.router, prefix="/api/v1/departments", tags=["Departments"])
app.include_router(employees.router, prefix="/api/v1/employees", tags=["Employees"])
app.include_router(projects.router, prefix="/api/v1/projects", tags=["Projects"])
app.include_router(allocations.router, prefix="/api/v1/allocations", tags=["Allocations"])
app.include_router(capacity.router, prefix="/api/v1/capacity", tags=["Capacity"])
app.include_router(notifications.router, prefix="/api/v1/notifications", tags=["Notifications"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "resourcehub.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
