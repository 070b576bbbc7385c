"""HTTP entry point for the authorization engine.

Only wiring lives here. The engine itself is assembled in
gatekeeper.core.composition and owned by the lifespan.
"""

import uvicorn
from fastapi import FastAPI

from gatekeeper.api.v1.router import api_router
from gatekeeper.core.config import get_settings
from gatekeeper.core.exception_handlers import register_exception_handlers
from gatekeeper.core.lifespan import create_lifespan
from gatekeeper.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Build the application; settings are read at call time, not import time."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def run() -> None:
    """Serve the internal API (console script `gatekeeper-api`)."""
    settings = get_settings()
    uvicorn.run("gatekeeper.main:app", host=settings.api_host, port=settings.api_port)
