"""
DebtDesk - FastAPI Application

Main application entry point. Creates the FastAPI app and wires up
middleware, error handlers and routers.

Run with: uvicorn debtdesk.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core.config import get_settings
from .core.errors import setup_error_handlers
from .core.logging import setup_logging
from .core.middleware import RequestLoggingMiddleware
from .routers.health import router as health_router
from .routers.imports import router as imports_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Application factory.

    Middleware order: CORS is added last so it is outermost and answers
    preflight requests before request logging runs.
    """
    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title="DebtDesk",
        description="Account spreadsheet import and validation service.",
        version=__version__,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    setup_error_handlers(app)

    app.include_router(health_router)
    app.include_router(imports_router, prefix="/api/v1")

    logger.info(
        f"DebtDesk {__version__} ready (env={settings.environment}, "
        f"cors_origins={settings.cors_allowed_origins})"
    )
    return app


app = create_app()
