"""
================================================================================
Autotest Tools Common Utilities
================================================================================

Shared logging setup for the framework, the tests and the runner.

Exports:
    - init_logger: Initialize loguru with level/format/file from configuration
    - reset_logger: Allow re-initialization (tests, config reloads)

Usage:
    from autotest_tools.common import init_logger

    init_logger(config)

================================================================================
"""

from .log_config import DEFAULT_FORMAT, init_logger, reset_logger

__all__ = [
    "DEFAULT_FORMAT",
    "init_logger",
    "reset_logger",
]
