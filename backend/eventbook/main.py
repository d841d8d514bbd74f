# backend/eventbook/main.py
"""
EventBook API application.

Mounts the versioned routers under /api/v1 and exposes /health and
/metrics at the root.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from .core.config import is_running_tests, settings
from .core.constants import BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import (
    admin as admin_v1,
    auth as auth_v1,
    bookings as bookings_v1,
    services as services_v1,
    users as users_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")
    else:
        init_db()
    yield
    logger.info(f"{BRAND_NAME} API shutting down...")


app = FastAPI(
    title=f"{BRAND_NAME} API",
    description="Event services marketplace: catalog, availability and bookings",
    version="1.0.0",
    lifespan=app_lifespan,
)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(PrometheusMiddleware)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(auth_v1.router, prefix="/auth")
api_v1.include_router(services_v1.router, prefix="/services")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(users_v1.router, prefix="/users")
api_v1.include_router(admin_v1.router, prefix="/admin")
app.include_router(api_v1)


@app.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "healthy", "service": f"{BRAND_NAME.lower()}-api", "environment": settings.environment}


@app.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus exposition."""
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
