"""
Collection Sorter — Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import structlog
from datetime import datetime, timezone

from config import settings

logging.basicConfig(format="%(message)s", level=getattr(logging, settings.log_level))

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Report what is configured
    Shutdown: Nothing to release
    """
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
        shopify_configured=settings.shopify_configured,
        collections=len(settings.collection_id_list),
        cron_secret_set=bool(settings.cron_secret)
    )

    if not settings.shopify_configured:
        logger.warning("shopify_not_configured")

    yield

    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Collection Sorter",
    description="Sales-driven collection ordering with merchandising rules",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status and whether the run can be triggered
    """
    ready = settings.shopify_configured and bool(settings.collection_id_list)

    return {
        "status": "healthy" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "shopify_configured": settings.shopify_configured,
        "collections": len(settings.collection_id_list)
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Collection Sorter API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "sort_collections": "/api/sort-collections"
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.sort import router as sort_router

app.include_router(sort_router)  # Prefix already in router


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
