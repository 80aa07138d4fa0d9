"""
================================================================================
Session Registry
================================================================================

Browser session lifecycle management for UI automation.

Features:
    - One browser session per worker thread (thread-local ownership)
    - Explicit chrome / firefox / edge dispatch
    - Fixed CI-safe hardening flags
    - Implicit, page-load and script timeouts applied from configuration
    - Remote browser server connection with a bounded connect deadline
    - Idempotent teardown that never raises

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import threading
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

from loguru import logger
from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    sync_playwright,
)

from .config_store import Configuration


# Connect deadline for remote browser servers (milliseconds)
REMOTE_CONNECT_TIMEOUT_MS = 30_000


class SessionError(Exception):
    """Base class for browser session failures."""
    pass


class UnsupportedBrowser(SessionError, ValueError):
    """Raised when a browser kind outside chrome/firefox/edge is requested."""
    pass


class InvalidHubAddress(SessionError, ValueError):
    """Raised when a remote hub URL cannot be used."""
    pass


class HubUnreachable(SessionError):
    """Raised when the remote hub does not accept a session in time."""
    pass


class SessionAlreadyDestroyed(SessionError):
    """Raised when a destroyed session is used."""
    pass


class ScriptTimeoutError(SessionError):
    """Raised when an injected script outlives the script timeout."""
    pass


class BrowserKind(str, Enum):
    """Supported browser back-ends."""

    CHROME = "chrome"
    FIREFOX = "firefox"
    EDGE = "edge"

    @classmethod
    def parse(cls, value: "BrowserKind | str") -> "BrowserKind":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise UnsupportedBrowser(
            f"Unsupported browser: {value!r}. "
            f"Expected one of: {', '.join(k.value for k in cls)}"
        )

    @property
    def is_chromium(self) -> bool:
        return self in (BrowserKind.CHROME, BrowserKind.EDGE)


@dataclass(frozen=True)
class SessionTimeouts:
    """
    Session timeouts in seconds.

    Attributes:
        implicit_wait: Element lookup / action auto-wait
        page_load: Navigation wait
        script: Injected script execution limit
    """
    implicit_wait: float = 10
    page_load: float = 30
    script: float = 30

    @classmethod
    def from_config(cls, config: Configuration) -> "SessionTimeouts":
        return cls(
            implicit_wait=config.implicit_wait,
            page_load=config.page_load_timeout,
            script=config.script_timeout,
        )


# Wraps a function-body script ("return document.title") and races it
# against the script timeout.
_SCRIPT_RUNNER = """
async ([source, arg, timeoutMs]) => {
    const fn = new Function('arg', source);
    let timer;
    const expired = new Promise((_, reject) => {
        timer = setTimeout(
            () => reject(new Error(`script timeout after ${timeoutMs}ms`)),
            timeoutMs
        );
    });
    try {
        return await Promise.race([Promise.resolve(fn(arg)), expired]);
    } finally {
        clearTimeout(timer);
    }
}
"""


class BrowserSession:
    """
    One live browser owned by one worker.

    Holds the Playwright driver, browser, context and page, plus the
    timeouts that were applied when it was created.
    """

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
        kind: BrowserKind,
        headless: bool,
        timeouts: SessionTimeouts,
        remote: bool = False,
    ):
        self.session_id = uuid.uuid4().hex[:12]
        self.kind = kind
        self.headless = headless
        self.timeouts = timeouts
        self.remote = remote
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page
        self._alive = True
        self.owner_thread = threading.get_ident()

    def __repr__(self) -> str:
        state = "alive" if self._alive else "destroyed"
        return f"BrowserSession({self.kind.value}, id={self.session_id}, {state})"

    @property
    def is_alive(self) -> bool:
        return self._alive

    @property
    def page(self) -> Page:
        self._ensure_alive()
        return self._page

    @property
    def context(self) -> BrowserContext:
        self._ensure_alive()
        return self._context

    @property
    def browser(self) -> Browser:
        self._ensure_alive()
        return self._browser

    def _ensure_alive(self) -> None:
        if not self._alive:
            raise SessionAlreadyDestroyed(f"Session {self.session_id} was already destroyed")

    def execute_script(self, script: str, arg: Any = None) -> Any:
        """
        Run a function-body script in the page.

        The script sees its argument as `arg` and returns with `return`,
        e.g. "return document.readyState".

        Raises:
            ScriptTimeoutError: Script did not settle within timeouts.script
        """
        timeout_ms = int(self.timeouts.script * 1000)
        try:
            return self.page.evaluate(_SCRIPT_RUNNER, [script, arg, timeout_ms])
        except PlaywrightError as e:
            if "script timeout" in str(e):
                raise ScriptTimeoutError(
                    f"Script did not finish within {self.timeouts.script}s"
                ) from e
            raise

    def quit(self) -> None:
        """
        Release every native resource behind this session.

        Safe to call more than once. Close errors are logged, not raised.
        """
        if not self._alive:
            return
        self._alive = False

        for name, closer in (
            ("page", self._page.close),
            ("context", self._context.close),
            ("browser", self._browser.close),
            ("driver", self._playwright.stop),
        ):
            try:
                closer()
            except Exception as e:
                logger.warning(f"Failed to close {name} for session {self.session_id}: {e}")

        logger.debug(f"Session {self.session_id} closed")


def _is_containerized() -> bool:
    return (
        Path("/.dockerenv").exists()
        or bool(os.getenv("KUBERNETES_SERVICE_HOST"))
        or os.getenv("CONTAINER", "").lower() in ("1", "true", "yes")
    )


class SessionRegistry:
    """
    Creates and tracks one BrowserSession per worker thread.

    Sessions live in thread-local storage, so a worker can only see and
    destroy the session it created.

    Usage:
        registry = SessionRegistry(config)
        session = registry.create_session()
        session.page.goto(config.base_url)
        registry.destroy_session()
    """

    # Chromium flags applied to every local launch
    CHROMIUM_ARGS = [
        "--disable-gpu",
        "--disable-notifications",
        "--disable-dev-shm-usage",
        "--disable-extensions",
        "--disable-infobars",
        "--disable-popup-blocking",
    ]

    # Firefox preferences applied to every local launch
    FIREFOX_PREFS: Dict[str, Any] = {
        "dom.webnotifications.enabled": False,
        "dom.push.enabled": False,
        "layers.acceleration.disabled": True,
        "media.volume_scale": "0.0",
    }

    def __init__(
        self,
        config: Configuration,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ):
        """
        Initialize registry.

        Args:
            config: Active configuration
            playwright_factory: Returns an object with start() -> Playwright
        """
        self.config = config
        self._playwright_factory = playwright_factory
        self._local = threading.local()

    # =========================================================================
    # Query
    # =========================================================================

    def get_current_session(self) -> Optional[BrowserSession]:
        """Session owned by the calling worker, if any."""
        return getattr(self._local, "session", None)

    def has_session(self) -> bool:
        return self.get_current_session() is not None

    # =========================================================================
    # Create
    # =========================================================================

    def create_session(
        self,
        browser_kind: "BrowserKind | str | None" = None,
        headless: Optional[bool] = None,
        timeouts: Optional[SessionTimeouts] = None,
    ) -> BrowserSession:
        """
        Launch a local browser bound to the calling worker.

        Args:
            browser_kind: chrome / firefox / edge. Defaults to configuration.
            headless: Headless mode. Defaults to configuration.
            timeouts: Session timeouts. Defaults to configuration.

        Returns:
            New BrowserSession

        Raises:
            UnsupportedBrowser: Unknown browser kind
        """
        kind = BrowserKind.parse(browser_kind or self.config.browser)
        headless = self.config.headless if headless is None else headless
        timeouts = timeouts or SessionTimeouts.from_config(self.config)

        self._replace_existing()
        logger.info(f"Creating {kind.value} session (headless={headless})")

        playwright = self._playwright_factory().start()
        try:
            launcher = self._launcher(playwright, kind)
            browser = launcher.launch(**self._launch_options(kind, headless))
        except Exception:
            playwright.stop()
            raise

        session = self._open_session(playwright, browser, kind, headless, timeouts, remote=False)
        logger.info(f"Session {session.session_id} created for browser: {kind.value}")
        return session

    def create_remote_session(
        self,
        browser_kind: "BrowserKind | str | None" = None,
        headless: Optional[bool] = None,
        hub_url: Optional[str] = None,
        timeouts: Optional[SessionTimeouts] = None,
    ) -> BrowserSession:
        """
        Connect to an already running remote browser server.

        ws:// and wss:// URLs are Playwright browser servers; http:// and
        https:// URLs are Chrome DevTools endpoints (chrome and edge only).

        Raises:
            InvalidHubAddress: URL missing, unparsable or wrong scheme
            HubUnreachable: Server did not accept the session in time
        """
        kind = BrowserKind.parse(browser_kind or self.config.browser)
        headless = self.config.headless if headless is None else headless
        timeouts = timeouts or SessionTimeouts.from_config(self.config)
        hub_url = hub_url or self.config.get("grid.hub.url")
        scheme = self._validate_hub_url(hub_url, kind)

        self._replace_existing()
        logger.info(f"Connecting {kind.value} session to hub: {hub_url}")

        playwright = self._playwright_factory().start()
        try:
            launcher = self._launcher(playwright, kind)
            if scheme in ("ws", "wss"):
                browser = launcher.connect(hub_url, timeout=REMOTE_CONNECT_TIMEOUT_MS)
            else:
                browser = launcher.connect_over_cdp(hub_url, timeout=REMOTE_CONNECT_TIMEOUT_MS)
        except PlaywrightError as e:
            playwright.stop()
            logger.error(f"Hub {hub_url} did not accept a {kind.value} session: {e}")
            raise HubUnreachable(f"Hub {hub_url} unreachable: {e}") from e
        except Exception:
            playwright.stop()
            raise

        if not headless:
            logger.debug("Headless mode of remote sessions is decided by the hub")

        session = self._open_session(playwright, browser, kind, headless, timeouts, remote=True)
        logger.info(f"Remote session {session.session_id} created on {hub_url}")
        return session

    # =========================================================================
    # Destroy
    # =========================================================================

    def destroy_session(self) -> None:
        """
        Destroy the calling worker's session.

        No-op without a session; never raises.
        """
        session = self.get_current_session()
        if session is None:
            return
        try:
            session.quit()
            logger.info(f"Session {session.session_id} destroyed")
        except Exception as e:
            logger.error(f"Error while destroying session {session.session_id}: {e}")
        finally:
            self._local.session = None

    # =========================================================================
    # Internals
    # =========================================================================

    def _replace_existing(self) -> None:
        if self.has_session():
            logger.warning("Worker already owns a session; destroying it first")
            self.destroy_session()

    @staticmethod
    def _launcher(playwright: Playwright, kind: BrowserKind):
        if kind is BrowserKind.FIREFOX:
            return playwright.firefox
        return playwright.chromium

    def _launch_options(self, kind: BrowserKind, headless: bool) -> Dict[str, Any]:
        options: Dict[str, Any] = {"headless": headless}

        if kind is BrowserKind.FIREFOX:
            options["firefox_user_prefs"] = dict(self.FIREFOX_PREFS)
            return options

        args = list(self.CHROMIUM_ARGS)
        if self._maximize(headless):
            args.append("--start-maximized")
        options["args"] = args
        options["chromium_sandbox"] = not (headless or _is_containerized())

        if kind is BrowserKind.EDGE:
            options["channel"] = "msedge"
        else:
            channel = self.config.get("browser.chrome.channel")
            if channel:
                options["channel"] = channel
        return options

    def _maximize(self, headless: bool) -> bool:
        return not headless and self.config.get_bool("browser.window.maximize", True)

    def _context_options(self, headless: bool) -> Dict[str, Any]:
        # bypass_csp: execute_script compiles the script in the page, which
        # a strict Content-Security-Policy would otherwise refuse
        options: Dict[str, Any] = {"ignore_https_errors": True, "bypass_csp": True}
        if self._maximize(headless):
            options["no_viewport"] = True
        else:
            options["viewport"] = {
                "width": self.config.get_int("browser.window.width", 1920),
                "height": self.config.get_int("browser.window.height", 1080),
            }
        return options

    def _open_session(
        self,
        playwright: Playwright,
        browser: Browser,
        kind: BrowserKind,
        headless: bool,
        timeouts: SessionTimeouts,
        remote: bool,
    ) -> BrowserSession:
        try:
            context = browser.new_context(**self._context_options(headless))
            context.set_default_timeout(timeouts.implicit_wait * 1000)
            context.set_default_navigation_timeout(timeouts.page_load * 1000)
            page = context.new_page()
        except Exception:
            browser.close()
            playwright.stop()
            raise

        session = BrowserSession(
            playwright, browser, context, page, kind, headless, timeouts, remote
        )
        self._local.session = session
        logger.debug(
            f"Session {session.session_id} timeouts: implicit={timeouts.implicit_wait}s, "
            f"page_load={timeouts.page_load}s, script={timeouts.script}s"
        )
        return session

    @staticmethod
    def _validate_hub_url(hub_url: Optional[str], kind: BrowserKind) -> str:
        if not hub_url:
            raise InvalidHubAddress("Grid hub URL is not configured")
        try:
            parsed = urlparse(hub_url)
            parsed.port  # raises ValueError on a malformed port
        except ValueError as e:
            raise InvalidHubAddress(f"Invalid grid hub URL: {hub_url}") from e

        scheme = parsed.scheme.lower()
        if scheme not in ("ws", "wss", "http", "https") or not parsed.hostname:
            raise InvalidHubAddress(f"Invalid grid hub URL: {hub_url}")
        if scheme in ("http", "https") and not kind.is_chromium:
            raise InvalidHubAddress(
                f"{kind.value} needs a ws:// browser server, got: {hub_url}"
            )
        return scheme


__all__ = [
    "BrowserKind",
    "BrowserSession",
    "HubUnreachable",
    "InvalidHubAddress",
    "REMOTE_CONNECT_TIMEOUT_MS",
    "ScriptTimeoutError",
    "SessionAlreadyDestroyed",
    "SessionError",
    "SessionRegistry",
    "SessionTimeouts",
    "UnsupportedBrowser",
]
