"""
================================================================================
Logging Configuration for Automation Tools
================================================================================

Centralized Loguru setup shared by the test framework and the runner.

Features:
    - Level and format taken from the active configuration
    - Optional rotating file sink
    - Idempotent initialization (first caller wins)

Author: Automation Team
License: MIT
================================================================================
"""

import sys
import threading
from pathlib import Path
from typing import Any, Optional

from loguru import logger


DEFAULT_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {thread.name} | "
    "{name}:{function}:{line} | {message}"
)

_logger_initialized: bool = False
_init_lock = threading.Lock()


def init_logger(
    config: Any = None,
    level: Optional[str] = None,
    format_str: Optional[str] = None,
) -> None:
    """
    Initializes the global Loguru logger with consistent configuration.

    Args:
        config: Configuration providing logging.* keys. Optional.
        level: Log level (DEBUG, INFO, WARNING, ERROR). Overrides config.
        format_str: Custom log format string. Overrides config.
    """
    global _logger_initialized

    with _init_lock:
        if _logger_initialized:
            return

        def setting(key: str, default: Optional[str]) -> Optional[str]:
            return config.get(key, default) if config is not None else default

        log_level = (level or setting("logging.level", "INFO")).upper()
        log_format = format_str or setting("logging.format", DEFAULT_FORMAT)

        # Remove default logger and add configured one
        logger.remove()
        logger.add(
            sys.stderr,
            level=log_level,
            format=log_format,
            colorize=True,
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

        log_file = setting("logging.file", None)
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                log_file,
                level=log_level,
                format=log_format.replace("{level: <8}", "{level}"),
                rotation=setting("logging.rotation", "10 MB"),
                retention=setting("logging.retention", "7 days"),
                compression="zip",
                enqueue=True,
            )

        _logger_initialized = True

    logger.debug(f"Logger initialized with level: {log_level}")


def reset_logger() -> None:
    """Allow init_logger() to run again (tests and config reloads)."""
    global _logger_initialized
    with _init_lock:
        _logger_initialized = False


__all__ = [
    "DEFAULT_FORMAT",
    "init_logger",
    "reset_logger",
]
