"""Entry point for running the onboarding assistant service."""

import logging
import sys

import uvicorn

from .api.app import create_app
from .config import get_settings


def main():
    """Run the onboarding assistant service."""
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger = logging.getLogger(__name__)

    app = create_app(settings)

    logger.info(f"Starting onboarding assistant on {settings.app_host}:{settings.app_port}")
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    main()
