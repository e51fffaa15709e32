"""Application entry point for the DHR notifier."""

from __future__ import annotations

import logging
import os
import sys

import uvicorn

from dhr_notifier.config.settings import AppConfig
from dhr_notifier.errors.notifier_errors import ConfigError

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    """Validate configuration and start the notifier server."""
    config = AppConfig()
    configure_logging(config.log_level)

    try:
        config.require_credentials()
    except ConfigError as exc:
        logger.critical("%s", exc.message)
        sys.exit(1)

    reload = os.getenv("DHR_NOTIFIER_RELOAD", "false").lower() in ("1", "true", "yes")
    logger.info(
        "Starting dhr-notifier on port %d (interval %ss)",
        config.server.port,
        config.poller.interval_seconds,
    )
    uvicorn.run(
        "dhr_notifier.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
