"""
FastAPI application for the pkeeper server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.auth import router as auth_router
from auth.config import AuthConfig
from auth.dependencies import build_credential_service
from auth.services.credential_service import CredentialService

logger = logging.getLogger(__name__)


def create_app(
    config: AuthConfig | None = None,
    credential_service: CredentialService | None = None,
) -> FastAPI:
    config = config or AuthConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown."""
        logger.info("Starting pkeeper server (auth store: %s)", config.auth_store)
        yield
        logger.info("Shutting down pkeeper server")

    app = FastAPI(title="pkeeper API", lifespan=lifespan)
    app.state.credential_service = credential_service or build_credential_service(config)
    app.include_router(auth_router, prefix="/auth", tags=["auth"])

    @app.get("/")
    def health_check():
        return {"status": "ok"}

    return app
