"""로깅 설정입니다. / Logging configuration for the CLI."""

from __future__ import annotations

import logging
import sys

LOGGER_NAMES = ("telemetry", "weather", "forecast", "tracking")


def setup_logging(level: str = "WARNING") -> None:
    """패키지 로거를 설정합니다. / Configure the package loggers."""

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level.upper())
        if logger.hasHandlers():
            logger.handlers.clear()
        logger.addHandler(handler)
