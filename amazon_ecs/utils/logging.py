from __future__ import annotations

import logging
import os

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure application logging. Falls back to AMAZON_ECS_LOG_LEVEL, then WARNING,
    so CLI output stays clean unless asked otherwise.
    """
    if level is None:
        level = os.getenv("AMAZON_ECS_LOG_LEVEL", "WARNING")

    if isinstance(level, str):
        level = _LEVELS.get(level.upper(), logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    # aiohttp is chatty at DEBUG; keep it one notch quieter than ours.
    logging.getLogger("aiohttp").setLevel(max(level, logging.INFO))
