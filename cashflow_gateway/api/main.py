"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from cashflow_gateway.api.middleware import MetricsMiddleware, RequestIDMiddleware
from cashflow_gateway.api.v1 import projections, stats
from cashflow_gateway.config import settings
from cashflow_gateway.infrastructure.database.session import init_db
from cashflow_gateway.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Cash-Flow Projection Gateway",
        description="Historical cash-flow statistics, scenario projections and plan-vs-actual variance",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(stats.router, prefix="/v1", tags=["stats"])
    app.include_router(projections.router, prefix="/v1", tags=["projections"])

    return app


app = create_app()
