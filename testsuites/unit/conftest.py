"""
================================================================================
Unit Test Fixtures
================================================================================

Browser-free fixtures: in-memory configurations and a fake Playwright
driver factory (see fakes.py).

================================================================================
"""

from typing import Dict, Optional

import pytest

from testsuites.ui_testing.framework.config_store import Configuration, ConfigurationStore
from testsuites.unit.fakes import FakePlaywrightFactory


# ================================================================================
# Fixtures
# ================================================================================

DEV_SETTINGS = {
    "base.url": "http://localhost:3000",
    "browser.name": "chrome",
    "browser.headless": "true",
    "browser.implicit.wait": "10",
    "browser.page.load.timeout": "30",
    "browser.script.timeout": "30",
    "browser.window.maximize": "true",
    "browser.window.width": "1920",
    "browser.window.height": "1080",
    "explicit.wait.timeout": "2",
    "explicit.wait.polling": "0.5",
    "screenshot.on.failure": "true",
    "screenshot.on.success": "false",
    "screenshot.cleanup.days": "7",
    "grid.hub.url": "ws://localhost:3001/",
    "suite.continue.on.failure": "true",
}


@pytest.fixture
def make_config(tmp_path):
    """Build an in-memory Configuration from DEV_SETTINGS plus dotted-key overrides."""

    def _make(values: Optional[Dict[str, str]] = None, environ: Optional[Dict[str, str]] = None):
        settings = dict(DEV_SETTINGS)
        settings["screenshots.path"] = str(tmp_path / "screenshots")
        settings["reports.path"] = str(tmp_path / "reports")
        settings.update(values or {})
        return Configuration("dev", settings, environ or {})

    return _make


@pytest.fixture
def config(make_config) -> Configuration:
    return make_config()


@pytest.fixture
def fake_playwright() -> FakePlaywrightFactory:
    return FakePlaywrightFactory()


@pytest.fixture(autouse=True)
def _reset_configuration_store():
    ConfigurationStore.reset()
    yield
    ConfigurationStore.reset()
