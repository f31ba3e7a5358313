"""
FastAPI application for the Proofly order engine.

JSON API over the evaluation service. Production deployment configuration
via environment variables.
"""

import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from utils.config import Config
from web.admin_routes import router as admin_router
from web.notification_routes import router as notification_router
from web.order_routes import router as order_router

logger = logging.getLogger(__name__)


# =============================================================================
# Environment Configuration
# =============================================================================

APP_VERSION = "0.1.0"

IS_PRODUCTION = os.getenv("PRODUCTION", "").lower() == "true"

# CORS configuration - locked down for production
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else []
if not ALLOWED_ORIGINS and not IS_PRODUCTION:
    # Development fallback only (local dashboard dev server)
    ALLOWED_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


def create_app(config: Config = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load()

    app = FastAPI(
        title="Proofly Order Engine",
        description="Property evaluation orders, pricing and notifications",
        version=APP_VERSION,
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=config.debug and not IS_PRODUCTION,
    )

    # Health endpoints first: no dependencies, no IO
    @app.get("/", include_in_schema=False)
    def root():
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        return {"status": "healthy"}

    @app.get("/api/health")
    async def api_health():
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "environment": "production" if IS_PRODUCTION else "development",
        }

    if ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE"],
            allow_headers=["*"],
        )

    @app.on_event("startup")
    def on_startup():
        Path(config.reports_dir).mkdir(parents=True, exist_ok=True)
        logger.info("Proofly order engine started")

    app.include_router(order_router)
    app.include_router(notification_router)
    app.include_router(admin_router)

    return app


# Create app instance for uvicorn
app = create_app()
