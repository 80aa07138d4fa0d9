"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module drives the TestLifecycle hooks from pytest and provides the
fixtures UI tests build on.

Key Features:
- suite/class/method hooks mapped onto session/class/function fixtures
- One fresh browser session per test, destroyed even when the test fails
- Failure screenshots and outcomes pushed to the Allure sink
- Local demo application served for the browser tests
- Page Object fixtures

Set UI_BASE_URL to run the tests against a deployed application instead
of the bundled demo site.

================================================================================
"""

import os
import threading
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Generator

import pytest
from loguru import logger
from playwright.sync_api import Error as PlaywrightError

from autotest_tools.common import init_logger
from autotest_tools.report_tools.allure_utils import AllureReportSink
from testsuites.ui_testing.framework.config_store import Configuration, ConfigurationStore
from testsuites.ui_testing.framework.lifecycle import OutcomeStatus, TestLifecycle
from testsuites.ui_testing.framework.screenshots import ScreenshotCapture
from testsuites.ui_testing.framework.session_registry import BrowserSession, SessionRegistry
from testsuites.ui_testing.pages.home_page import HomePage
from testsuites.ui_testing.pages.login_page import LoginPage


SITE_DIR = Path(__file__).parent.parent / "site"


# ================================================================================
# Reporting Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Keep each phase report on the item (rep_setup / rep_call / rep_teardown)
    so fixtures can see how the test body ended.

    With suite.continue.on.failure false, a failed setup or test body stops
    the run. Teardown errors never stop it.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)

    if report.when in ("setup", "call") and report.failed and ConfigurationStore.is_loaded():
        if not ConfigurationStore.load().get_bool("suite.continue.on.failure", True):
            item.session.shouldstop = "suite.continue.on.failure is false"


def _outcome_of(item) -> tuple:
    """(status, failure text) for a finished test item."""
    for when in ("setup", "call"):
        report = getattr(item, f"rep_{when}", None)
        if report is None:
            continue
        if report.failed:
            return OutcomeStatus.FAILED, report.longreprtext
        if report.skipped:
            return OutcomeStatus.SKIPPED, report.longreprtext
    if getattr(item, "rep_call", None) is None:
        return OutcomeStatus.SKIPPED, "test body did not run"
    return OutcomeStatus.PASSED, None


# ================================================================================
# Suite / Class Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def ui_config() -> Configuration:
    """Configuration for the active environment (ENVIRONMENT / ENV, default dev)."""
    config = ConfigurationStore.load()
    init_logger(config)
    return config


@pytest.fixture(scope="session")
def session_registry(ui_config: Configuration) -> SessionRegistry:
    return SessionRegistry(ui_config)


@pytest.fixture(scope="session")
def lifecycle(
    ui_config: Configuration,
    session_registry: SessionRegistry,
) -> Generator[TestLifecycle, None, None]:
    """
    Suite-level hooks: suite_start before the first UI test, suite_end
    (report flush and screenshot retention) after the last.
    """
    reporter = AllureReportSink(
        results_dir=ui_config.reports_path / "allure-results",
        environment_info={
            "Environment": ui_config.environment,
            "Browser": ui_config.browser,
            "Headless": ui_config.headless,
            "Base URL": ui_config.base_url,
        },
        generate_html=ui_config.get_bool("reports.generate", False),
    )
    hooks = TestLifecycle(
        ui_config,
        session_registry,
        reporter,
        ScreenshotCapture(ui_config),
    )
    hooks.suite_start(ui_config.get_or_default("reports.title", "UI Test Suite"))
    yield hooks
    hooks.suite_end()


@pytest.fixture(scope="session")
def browser_available(session_registry: SessionRegistry) -> bool:
    """
    Probe once whether the configured browser can be launched.

    Browser tests are skipped (not failed) on machines without Playwright
    browsers installed.
    """
    try:
        session_registry.create_session()
    except PlaywrightError as e:
        logger.warning(f"Browser not available, skipping UI tests: {e}")
        return False
    finally:
        session_registry.destroy_session()
    return True


@pytest.fixture(scope="class", autouse=True)
def _class_hooks(request) -> Generator[None, None, None]:
    if request.cls is None:
        yield
        return

    hooks = request.getfixturevalue("lifecycle")
    hooks.class_start(request.cls.__name__)
    yield
    hooks.class_end(request.cls.__name__)


# ================================================================================
# Demo Application
# ================================================================================

class _QuietHandler(SimpleHTTPRequestHandler):
    def log_message(self, format, *args):
        logger.trace(f"demo site: {format % args}")


@pytest.fixture(scope="session")
def app_url() -> Generator[str, None, None]:
    """
    Base URL of the application under test.

    Serves testsuites/ui_testing/site on a free local port unless
    UI_BASE_URL points somewhere else.
    """
    external = os.getenv("UI_BASE_URL")
    if external:
        yield external.rstrip("/")
        return

    handler = partial(_QuietHandler, directory=str(SITE_DIR))
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, name="demo-site", daemon=True)
    thread.start()
    url = f"http://127.0.0.1:{server.server_address[1]}"
    logger.info(f"Demo site served at {url}")
    try:
        yield url
    finally:
        server.shutdown()
        server.server_close()


# ================================================================================
# Method Fixtures
# ================================================================================

@pytest.fixture
def browser_session(
    request,
    lifecycle: TestLifecycle,
    browser_available: bool,
) -> Generator[BrowserSession, None, None]:
    """
    Fresh session for one test: method_start before, method_end after,
    whatever the test body did.
    """
    if not browser_available:
        pytest.skip("Playwright browser is not installed")

    description = (request.function.__doc__ or "").strip()
    session = lifecycle.method_start(request.node.name, description)
    try:
        yield session
    finally:
        status, failure = _outcome_of(request.node)
        lifecycle.method_end(status, failure)


@pytest.fixture
def login_page(browser_session: BrowserSession, ui_config: Configuration, app_url: str) -> LoginPage:
    """LoginPage opened in the test's session."""
    return LoginPage(browser_session, ui_config, base_url=app_url).open()


@pytest.fixture
def home_page(login_page: LoginPage) -> HomePage:
    """HomePage reached through a valid login."""
    return login_page.login()


@pytest.fixture
def test_data():
    """
    Provides common test data for UI tests.
    """
    return {
        "valid_user": {
            "username": os.getenv("UI_USERNAME", "demo_user"),
            "password": os.getenv("UI_PASSWORD", "demo_password"),
        },
        "invalid_user": {
            "username": "invalid_user",
            "password": "wrong_password",
        },
    }
