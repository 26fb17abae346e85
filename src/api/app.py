"""FastAPI application factory."""

import logging
import time
import tomllib
from contextlib import asynccontextmanager
from importlib import metadata
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from api.dependencies import build_user_repository
from api.errors import register_exception_handlers
from api.middleware.error_handling import UnhandledErrorMiddleware
from api.middleware.request_logging import RequestLoggingMiddleware
from api.middleware.security_headers import SecurityHeadersMiddleware
from api.routes import auth, endpoints, health
from port.user_repository import UserRepository
from services.token_service import TokenIssuer
from utils.config import Settings

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "nexus-backend"
SERVICE_NAME = "Project Nexus API"


def _read_version() -> str:
    """Installed distribution version, or pyproject.toml when running from a checkout."""
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        # app.py is at <root>/src/api/app.py
        pyproject = Path(__file__).parent.parent.parent / "pyproject.toml"
        with open(pyproject, "rb") as f:
            return tomllib.load(f)["project"]["version"]


VERSION = _read_version()


def _configure_cors(app: FastAPI, settings: Settings) -> None:
    # Browsers reject credentials with a wildcard origin
    if settings.cors_origins == "*":
        allow_origins = ["*"]
        allow_credentials = False
        logger.warning(
            "CORS configured with wildcard origin ('*'). "
            "For production, set CORS_ORIGIN to specific domains (e.g., 'https://app.example.com')"
        )
    else:
        allow_origins = list(settings.cors_origins)
        allow_credentials = True
        logger.info(f"CORS configured with specific origins: {allow_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app(settings: Settings, user_repo: UserRepository | None = None) -> FastAPI:
    """Build a fully wired application.

    Args:
        settings: Application settings (see ``Settings.from_env``)
        user_repo: Credential store to use; built from ``settings.database_url`` when omitted

    Returns:
        FastAPI app with routes, middleware and exception handlers registered
    """
    if user_repo is None:
        user_repo = build_user_repository(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: schema setup on startup, store cleanup on shutdown."""
        await run_in_threadpool(user_repo.ensure_schema)
        logger.info(
            f"{SERVICE_NAME} started",
            extra={"environment": settings.environment, "port": settings.port, "version": VERSION},
        )

        yield  # App runs here

        await run_in_threadpool(user_repo.close)
        logger.info(f"{SERVICE_NAME} stopped")

    app = FastAPI(
        title=SERVICE_NAME,
        description="Customer service dashboard backend - health and authentication API",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.user_repo = user_repo
    app.state.token_issuer = TokenIssuer(settings.auth)
    app.state.started_at = time.monotonic()

    # Last added runs first: CORS sees the request before logging and headers
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    _configure_cors(app, settings)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(endpoints.router)
    app.include_router(auth.router)

    return app
