"""Main FastAPI application entry point."""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from sinnaybot.config import get_settings
from sinnaybot.core.app_factory import create_app
from sinnaybot.exceptions import ConfigurationException
from sinnaybot.logging_config import get_logger, log_with_context, setup_logging

# Load environment variables from .env file
load_dotenv(Path(__file__).parent.parent / ".env")

logger = get_logger(__name__)

app = create_app()


def run() -> None:
    """Validate configuration, then serve until interrupted.

    Exits with status 1 before binding the port if required credentials
    are missing.
    """
    import uvicorn

    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    try:
        settings = get_settings()
    except ConfigurationException as e:
        log_with_context(
            logger,
            "critical",
            "Refusing to start without required configuration",
            error=e.message,
            event_type="app_config_fatal",
        )
        sys.exit(1)

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
