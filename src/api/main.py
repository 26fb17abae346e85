"""Server entry point.

Run with ``python -m api.main`` from ``src`` or ``uvicorn api.main:app``.
"""

import logging

import uvicorn
from dotenv import load_dotenv

from api.app import create_app
from utils.config import Settings
from utils.logging import setup_logging

# Load environment variables from .env file
# Must run before Settings.from_env() reads them
load_dotenv()

settings = Settings.from_env()
setup_logging(settings.environment, settings.log_level)

logger = logging.getLogger(__name__)

app = create_app(settings)


if __name__ == "__main__":
    logger.info(
        f"Server listening on http://{settings.host}:{settings.port}",
        extra={"health": "/health", "api": "/api"},
    )
    # Uvicorn handles SIGINT/SIGTERM and drains connections before exiting.
    # Its access log is off because RequestLoggingMiddleware covers requests.
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        access_log=False,
    )
