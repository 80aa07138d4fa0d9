"""
================================================================================
Screenshot Capture
================================================================================

Screenshot helpers used by test lifecycle hooks and page objects.

Features:
    - Full-page captures written to the configured screenshots directory
    - Base64 captures for inline report embedding
    - Element captures
    - Retention cleanup of old files

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import base64
import re
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .config_store import Configuration


_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_file_name(name: str) -> str:
    """Replace anything outside [a-zA-Z0-9._-] with underscores."""
    return _UNSAFE_CHARS.sub("_", name)


class ScreenshotCapture:
    """
    Captures screenshots from a browser session.

    Capture failures are logged and reported as None / "" so a broken
    screenshot never hides the real test failure.

    Usage:
        capture = ScreenshotCapture(config)
        path = capture.capture_to_file(session, "test_login", "FAILED")
    """

    def __init__(self, config: Configuration, directory: Optional[Path] = None):
        self.config = config
        self.directory = Path(directory or config.screenshots_path)
        self.image_format = config.get_or_default("screenshot.format", "png").lower()
        self.full_page = config.get_bool("screenshot.full.page", True)

    def ensure_directory(self) -> Path:
        if not self.directory.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"Screenshots directory created: {self.directory}")
        return self.directory

    def build_path(self, test_name: str, suffix: str = "full") -> Path:
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S-%f")[:-3]
        filename = (
            f"{sanitize_file_name(test_name)}_{sanitize_file_name(suffix)}_"
            f"{timestamp}.{self.image_format}"
        )
        return self.directory / filename

    def capture_to_file(
        self,
        session: Any,
        test_name: str,
        suffix: str = "full",
    ) -> Optional[Path]:
        """
        Save a screenshot of the session's page.

        Returns:
            Path to the saved file, or None when capture failed
        """
        try:
            self.ensure_directory()
            path = self.build_path(test_name, suffix)
            session.page.screenshot(
                path=str(path),
                full_page=self.full_page,
                type="jpeg" if self.image_format in ("jpg", "jpeg") else "png",
            )
            logger.info(f"Screenshot taken: {path}")
            return path
        except Exception as e:
            logger.error(f"Failed to take screenshot for test {test_name}: {e}")
            return None

    def capture_to_base64(self, session: Any) -> str:
        """Screenshot as a base64 string, or "" when capture failed."""
        try:
            data = session.page.screenshot(full_page=self.full_page)
            return base64.b64encode(data).decode("ascii")
        except Exception as e:
            logger.error(f"Failed to take screenshot as base64: {e}")
            return ""

    def capture_element(
        self,
        session: Any,
        selector: str,
        test_name: str,
        element_name: str,
    ) -> Optional[Path]:
        """Save a screenshot of the first element matching selector."""
        try:
            self.ensure_directory()
            path = self.build_path(test_name, element_name)
            session.page.locator(selector).first.screenshot(path=str(path))
            logger.info(f"Element screenshot taken: {path}")
            return path
        except Exception as e:
            logger.error(
                f"Failed to take element screenshot for test {test_name} element {element_name}: {e}"
            )
            return None

    def cleanup_older_than(self, days: float) -> int:
        """
        Delete screenshot files last modified more than `days` ago.

        Returns:
            Number of deleted files
        """
        if not self.directory.exists():
            return 0

        cutoff = time.time() - days * 24 * 60 * 60
        deleted = 0
        for path in self.directory.iterdir():
            if path.is_file() and path.stat().st_mtime < cutoff:
                try:
                    path.unlink()
                    deleted += 1
                except OSError as e:
                    logger.warning(f"Could not delete {path}: {e}")

        logger.info(f"Cleaned up {deleted} old screenshot files")
        return deleted

    def directory_size(self) -> int:
        if not self.directory.exists():
            return 0
        return sum(p.stat().st_size for p in self.directory.rglob("*") if p.is_file())


__all__ = [
    "ScreenshotCapture",
    "sanitize_file_name",
]
