"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from flus_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from flus_gateway.api.v1 import cards, recurring, notifications, installments
from flus_gateway.domain.exceptions import InvalidCardConfigError
from flus_gateway.infrastructure.database.models import Base
from flus_gateway.infrastructure.database.session import engine
from flus_gateway.infrastructure.observability.logging import setup_logging
from flus_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Flus Gateway",
        description="Card billing cycles, recurring payments and reminder service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(InvalidCardConfigError)
    async def invalid_card_config_handler(request: Request, exc: InvalidCardConfigError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(cards.router, prefix="/v1", tags=["cards"])
    app.include_router(recurring.router, prefix="/v1", tags=["recurring"])
    app.include_router(notifications.router, prefix="/v1", tags=["notifications"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])

    return app


app = create_app()
