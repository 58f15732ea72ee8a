"""Logging configuration using Loguru.

Modules import ``from loguru import logger`` directly; this module only
installs the sinks, once per process.
"""

import sys

from loguru import logger

_CONFIGURED: bool = False


def setup_logging(level: str = "INFO") -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss} - {name} - {level} - {message}",
        diagnose=False,
        backtrace=False,
    )
    _CONFIGURED = True
