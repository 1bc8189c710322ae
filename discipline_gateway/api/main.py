"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from discipline_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from discipline_gateway.api.v1 import analyses, results
from discipline_gateway.infrastructure.observability.logging import setup_logging
from discipline_gateway.config import settings

setup_logging(settings.log_level, service=settings.service_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Stablecoin Discipline Gateway",
        description="Conversion pattern analysis and monthly discipline rule comparison",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(analyses.router, prefix="/v1", tags=["analyses"])
    app.include_router(results.router, prefix="/v1", tags=["results"])

    return app


app = create_app()
