"""
================================================================================
Test Lifecycle Hooks
================================================================================

Ordered hook points for UI test runs:

    suite_start -> class_start -> method_start ... method_end -> class_end -> suite_end

method_start creates a fresh browser session for the calling worker and a
report entry; method_end records the outcome (with screenshots according to
the screenshot.on.failure / screenshot.on.success flags) and always destroys
the session. suite_end flushes the report and removes stale screenshots.

The hooks are framework-agnostic; testsuites/ui_testing/tests/conftest.py
drives them from pytest fixtures.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import threading
import time
import unittest
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

import pytest
from loguru import logger

from autotest_tools.report_tools.allure_utils import ReportEntry, ReportSink
from .config_store import Configuration
from .screenshots import ScreenshotCapture
from .session_registry import BrowserSession, SessionRegistry


SKIP_EXCEPTIONS = (unittest.SkipTest, pytest.skip.Exception)


class OutcomeStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class TestOutcome:
    """
    Result of one test method, forwarded to the report and then dropped.

    Attributes:
        name: Test method name
        status: passed / failed / skipped
        elapsed: Seconds between method_start and method_end
        failure: Failure cause, if any
        screenshot: Screenshot taken at method end, if any
    """
    __test__ = False

    name: str
    status: OutcomeStatus
    elapsed: float
    failure: Optional[str] = None
    screenshot: Optional[Path] = None


@dataclass
class SuiteStats:
    name: str = ""
    started_at: datetime = field(default_factory=datetime.now)
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.passed / self.total * 100

    def record(self, status: OutcomeStatus) -> None:
        self.total += 1
        if status is OutcomeStatus.PASSED:
            self.passed += 1
        elif status is OutcomeStatus.FAILED:
            self.failed += 1
        else:
            self.skipped += 1


class TestLifecycle:
    """
    Suite/class/method hooks tying sessions, screenshots and reporting together.

    One instance serves every worker thread of a process: per-method state
    lives in thread-local storage, suite counters behind a lock.

    Usage:
        lifecycle = TestLifecycle(config, registry, reporter)
        lifecycle.suite_start("ui")
        with lifecycle.method_scope("test_login") as session:
            LoginPage(session, config).open().login()
        lifecycle.suite_end()
    """

    __test__ = False

    def __init__(
        self,
        config: Configuration,
        registry: SessionRegistry,
        reporter: ReportSink,
        screenshots: Optional[ScreenshotCapture] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.registry = registry
        self.reporter = reporter
        self.screenshots = screenshots or ScreenshotCapture(config)
        self.stats = SuiteStats()
        self._clock = clock
        self._stats_lock = threading.Lock()
        self._local = threading.local()

    @property
    def continue_on_failure(self) -> bool:
        return self.config.get_bool("suite.continue.on.failure", True)

    @property
    def should_stop(self) -> bool:
        """True once a failure happened and the suite must not continue."""
        with self._stats_lock:
            failed = self.stats.failed
        return failed > 0 and not self.continue_on_failure

    # =========================================================================
    # Suite / Class
    # =========================================================================

    def suite_start(self, suite_name: str) -> None:
        with self._stats_lock:
            self.stats = SuiteStats(name=suite_name)

        logger.info("=" * 60)
        logger.info(f"Test suite started: {suite_name}")
        logger.info(f"Environment: {self.config.environment}")
        logger.info(f"Browser: {self.config.browser} (headless={self.config.headless})")
        logger.info(f"Base URL: {self.config.base_url}")
        logger.info(
            f"Parallel: {self.config.parallel_tests} (threads={self.config.thread_count})"
        )
        logger.info("=" * 60)
        self.screenshots.ensure_directory()

    def class_start(self, class_name: str) -> None:
        logger.info(f"Test class started: {class_name}")

    def class_end(self, class_name: str) -> None:
        logger.info(f"Test class finished: {class_name}")

    def suite_end(self) -> SuiteStats:
        """
        Log the run summary, flush the report and remove stale screenshots.

        Returns:
            Counters for the finished suite
        """
        with self._stats_lock:
            stats = self.stats
            duration = (datetime.now() - stats.started_at).total_seconds()

        logger.info("=" * 60)
        logger.info(f"Test suite finished: {stats.name}")
        logger.info(f"Total: {stats.total}")
        logger.info(f"Passed: {stats.passed}")
        logger.info(f"Failed: {stats.failed}")
        logger.info(f"Skipped: {stats.skipped}")
        logger.info(f"Success rate: {stats.success_rate:.2f}%")
        logger.info(f"Duration: {duration:.2f}s")
        logger.info("=" * 60)

        try:
            self.reporter.flush()
        except Exception as e:
            logger.error(f"Failed to flush report: {e}")

        retention_days = self.config.get_float("screenshot.cleanup.days", 7.0)
        if retention_days > 0:
            self.screenshots.cleanup_older_than(retention_days)
        return stats

    # =========================================================================
    # Method
    # =========================================================================

    def method_start(self, test_name: str, description: str = "") -> BrowserSession:
        """
        Open a report entry and a fresh session for the calling worker.

        Session creation errors count as a failed test and propagate to
        the caller.
        """
        logger.info(f"Test started: {test_name}")
        entry = self.reporter.create_test_entry(test_name, description)
        self._local.entry = entry
        self._local.test_name = test_name
        self._local.started = self._clock()

        self.reporter.log(entry, "INFO", f"Test started: {test_name}")
        try:
            session = self.registry.create_session()
        except Exception as e:
            self.reporter.log(entry, "FAIL", f"Session creation failed: {e}")
            with self._stats_lock:
                self.stats.record(OutcomeStatus.FAILED)
            self._clear_method_state()
            raise

        self.reporter.log(entry, "INFO", f"Browser session: {session.kind.value}")
        return session

    def method_end(
        self,
        status: Union[OutcomeStatus, str],
        failure: Union[BaseException, str, None] = None,
    ) -> TestOutcome:
        """
        Record the outcome of the current method and destroy its session.

        The session is destroyed even when reporting or screenshots fail.
        """
        status = OutcomeStatus(status)
        entry: Optional[ReportEntry] = getattr(self._local, "entry", None)
        test_name = getattr(self._local, "test_name", "unknown")
        started = getattr(self._local, "started", None)
        elapsed = self._clock() - started if started is not None else 0.0
        cause = _describe_failure(failure)
        screenshot = None

        try:
            screenshot = self._capture_for(status, test_name)
            if entry is not None:
                self._report(entry, status, test_name, elapsed, cause, screenshot)
        except Exception as e:
            logger.error(f"Failed to report outcome of {test_name}: {e}")
        finally:
            self.registry.destroy_session()
            self._clear_method_state()

        with self._stats_lock:
            self.stats.record(status)

        outcome = TestOutcome(test_name, status, elapsed, cause, screenshot)
        if status is OutcomeStatus.FAILED:
            logger.error(f"Test failed: {test_name} ({elapsed:.2f}s): {cause}")
        else:
            logger.info(f"Test {status.value}: {test_name} ({elapsed:.2f}s)")
        return outcome

    @contextmanager
    def method_scope(self, test_name: str, description: str = "") -> Iterator[BrowserSession]:
        """
        method_start on entry, method_end on every exit path.

        Failures raised by the body are recorded and re-raised.
        """
        session = self.method_start(test_name, description)
        try:
            yield session
        except SKIP_EXCEPTIONS as e:
            self.method_end(OutcomeStatus.SKIPPED, e)
            raise
        except BaseException as e:
            self.method_end(OutcomeStatus.FAILED, e)
            raise
        else:
            self.method_end(OutcomeStatus.PASSED)

    def _capture_for(self, status: OutcomeStatus, test_name: str) -> Optional[Path]:
        session = self.registry.get_current_session()
        if session is None or not session.is_alive:
            return None
        if status is OutcomeStatus.FAILED and self.config.screenshot_on_failure:
            return self.screenshots.capture_to_file(session, test_name, "FAILED")
        if status is OutcomeStatus.PASSED and self.config.screenshot_on_success:
            return self.screenshots.capture_to_file(session, test_name, "PASSED")
        return None

    def _report(
        self,
        entry: ReportEntry,
        status: OutcomeStatus,
        test_name: str,
        elapsed: float,
        cause: Optional[str],
        screenshot: Optional[Path],
    ) -> None:
        if status is OutcomeStatus.PASSED:
            self.reporter.log(entry, "PASS", f"Test passed: {test_name}")
        elif status is OutcomeStatus.FAILED:
            self.reporter.log(entry, "FAIL", f"Test failed: {test_name}")
            if cause:
                self.reporter.log(entry, "FAIL", cause)
        else:
            self.reporter.log(entry, "SKIP", f"Test skipped: {cause or test_name}")

        if screenshot is not None:
            caption = "Failure screenshot" if status is OutcomeStatus.FAILED else "Success screenshot"
            self.reporter.attach_artifact(entry, screenshot, caption)

        self.reporter.log(entry, "INFO", f"Execution time: {elapsed:.2f}s")

    def _clear_method_state(self) -> None:
        for name in ("entry", "test_name", "started"):
            if hasattr(self._local, name):
                delattr(self._local, name)


def _describe_failure(failure: Union[BaseException, str, None]) -> Optional[str]:
    if failure is None:
        return None
    if isinstance(failure, BaseException):
        return f"{type(failure).__name__}: {failure}"
    return str(failure)


__all__ = [
    "OutcomeStatus",
    "SuiteStats",
    "TestLifecycle",
    "TestOutcome",
]
