"""FastAPI entry point for the automation service."""

from typing import Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import AutomationSettings, get_settings
from .routers import schedules, workflows


def create_app(settings: Optional[AutomationSettings] = None) -> FastAPI:
    """Create a FastAPI application exposing workflows and schedules."""

    resolved_settings = settings or get_settings()

    app = FastAPI(title=resolved_settings.app_name, version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=resolved_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(workflows.router)
    app.include_router(schedules.router)

    @app.get("/health", tags=["health"])
    def health_check() -> Dict[str, str]:
        """Report service status and the configured storage backend."""

        return {
            "status": "ok",
            "service": resolved_settings.app_name,
            "storage": resolved_settings.storage_backend,
        }

    return app


app = create_app()
