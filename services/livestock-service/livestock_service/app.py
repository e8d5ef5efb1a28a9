"""
Livestock Service FastAPI application.

This file wires together all layers:
- Domain: Livestock entity and herd rules
- Repositories: Data access
- Services: Business rule orchestration
- Routers: HTTP endpoints and error mapping
"""

import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from livestock_contracts.livestock import LIVESTOCK_SCHEMA

from .config import settings
from .database import init_db
from .metrics import metrics_endpoint, track_request_metrics
from .routers import health_router, livestock_router
from .routers.errors import register_exception_handlers

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        "Starting Livestock Service",
        version=settings.SERVICE_VERSION,
        schema_version=LIVESTOCK_SCHEMA.version,
        schema_fingerprint=LIVESTOCK_SCHEMA.fingerprint,
    )

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Livestock Service shut down complete")


app = FastAPI(
    title="Livestock Service",
    description="Herd record management behind the shared livestock contract",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID for distributed tracing."""
    request_id = request.headers.get("X-Request-ID", f"req-{id(request)}")

    structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()

    response.headers["X-Request-ID"] = request_id
    return response


# Metrics middleware
@app.middleware("http")
async def track_metrics(request: Request, call_next):
    """Track Prometheus metrics."""
    start_time = time.time()

    response = await call_next(request)

    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    track_request_metrics(
        request.method, endpoint, response.status_code, time.time() - start_time
    )

    return response


app.include_router(livestock_router.router)
app.include_router(health_router.router)

register_exception_handlers(app)

app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "contract": {
            "entity": LIVESTOCK_SCHEMA.entity,
            "version": LIVESTOCK_SCHEMA.version,
            "fingerprint": LIVESTOCK_SCHEMA.fingerprint,
        },
        "status": "operational",
        "docs": "/api/docs",
        "health": "/api/v1/health",
        "ready": "/api/v1/ready",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "livestock_service.app:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
