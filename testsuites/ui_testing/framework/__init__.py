"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework.

Components:
    - config_store: Environment-scoped configuration, loaded once per process
    - session_registry: One browser session per worker thread
    - wait_helpers: Polling wait, the single synchronization primitive
    - conditions: Named predicates for the wait
    - page_base: Base page object for synchronized interactions
    - screenshots: Screenshot capture and retention
    - lifecycle: Suite/class/method hooks

Author: Automation Team
License: MIT
================================================================================
"""

from .config_store import (
    Configuration,
    ConfigurationError,
    ConfigurationNotFound,
    ConfigurationStore,
    InvalidPropertyType,
    PropertyNotFound,
)
from .session_registry import (
    BrowserKind,
    BrowserSession,
    HubUnreachable,
    InvalidHubAddress,
    ScriptTimeoutError,
    SessionAlreadyDestroyed,
    SessionError,
    SessionRegistry,
    SessionTimeouts,
    UnsupportedBrowser,
)
from .wait_helpers import ElementNotFoundError, WaitCondition, Waiter, WaitTimeoutError
from .page_base import BasePage
from .screenshots import ScreenshotCapture
from .lifecycle import OutcomeStatus, TestLifecycle, TestOutcome

__all__ = [
    "BasePage",
    "BrowserKind",
    "BrowserSession",
    "Configuration",
    "ConfigurationError",
    "ConfigurationNotFound",
    "ConfigurationStore",
    "ElementNotFoundError",
    "HubUnreachable",
    "InvalidHubAddress",
    "InvalidPropertyType",
    "OutcomeStatus",
    "PropertyNotFound",
    "ScreenshotCapture",
    "ScriptTimeoutError",
    "SessionAlreadyDestroyed",
    "SessionError",
    "SessionRegistry",
    "SessionTimeouts",
    "TestLifecycle",
    "TestOutcome",
    "UnsupportedBrowser",
    "WaitCondition",
    "WaitTimeoutError",
    "Waiter",
]
