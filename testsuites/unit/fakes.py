"""
================================================================================
Playwright Fakes
================================================================================

In-memory stand-ins for the Playwright sync API so the framework can be
tested without launching a browser. Every driver, browser, context and page
registers itself with a HandleTracker, which lets tests assert that
teardown released everything it opened.

================================================================================
"""

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from playwright.sync_api import Error as PlaywrightError


# ================================================================================
# Handle Tracking
# ================================================================================

class HandleTracker:
    """Counts native handles opened and not yet closed."""

    def __init__(self):
        self._open = set()
        self._lock = threading.Lock()

    def opened(self, handle: Any) -> None:
        with self._lock:
            self._open.add(id(handle))

    def closed(self, handle: Any) -> None:
        with self._lock:
            self._open.discard(id(handle))

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._open)


# ================================================================================
# DOM
# ================================================================================

@dataclass
class FakeElement:
    text: str = ""
    visible: bool = True
    enabled: bool = True
    checked: bool = False
    value: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    clicks: List[str] = field(default_factory=list)


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str, index: Optional[int] = None):
        self.page = page
        self.selector = selector
        self.index = index

    def _matches(self) -> List[FakeElement]:
        return self.page.dom.get(self.selector, [])

    def _element(self) -> FakeElement:
        matches = self._matches()
        position = self.index or 0
        if position >= len(matches):
            raise PlaywrightError(f"no element for {self.selector}")
        return matches[position]

    def count(self) -> int:
        return len(self._matches())

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, 0)

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, index)

    def is_visible(self) -> bool:
        return self._element().visible

    def is_enabled(self) -> bool:
        return self._element().enabled

    def is_checked(self) -> bool:
        return self._element().checked

    def inner_text(self, timeout: Optional[float] = None) -> str:
        return self._element().text

    def input_value(self) -> str:
        return self._element().value

    def get_attribute(self, name: str, timeout: Optional[float] = None) -> Optional[str]:
        return self._element().attributes.get(name)

    def click(self, button: str = "left") -> None:
        self._element().clicks.append(button)

    def dblclick(self) -> None:
        self._element().clicks.append("double")

    def fill(self, value: str) -> None:
        self._element().value = value

    def set_checked(self, checked: bool) -> None:
        self._element().checked = checked

    def hover(self) -> None:
        self._element().clicks.append("hover")

    def select_option(self, **kwargs: Any) -> None:
        element = self._element()
        element.value = str(next(iter(kwargs.values())))

    def evaluate(self, expression: str, arg: Any = None) -> None:
        element = self._element()
        if "click()" in expression:
            element.clicks.append("js")
        else:
            element.value = arg

    def scroll_into_view_if_needed(self) -> None:
        self._element().clicks.append("scroll")

    def screenshot(self, path: str) -> bytes:
        Path(path).write_bytes(b"element")
        return b"element"


# ================================================================================
# Driver Objects
# ================================================================================

class FakePage:
    def __init__(self, tracker: HandleTracker):
        self.tracker = tracker
        self.url = "about:blank"
        self.page_title = ""
        self.dom: Dict[str, List[FakeElement]] = {}
        self.ready_state = "complete"
        self.script_results: Dict[str, Any] = {}
        self.evaluated: List[str] = []
        self.closed = False
        tracker.opened(self)

    def add(self, selector: str, *elements: FakeElement) -> None:
        self.dom.setdefault(selector, []).extend(elements or [FakeElement()])

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def goto(self, url: str) -> None:
        self.url = url

    def reload(self) -> None:
        pass

    def go_back(self) -> None:
        pass

    def go_forward(self) -> None:
        pass

    def title(self) -> str:
        return self.page_title

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        # Only the session's script runner reaches here: arg = [source, arg, timeout_ms]
        source, script_arg, _timeout_ms = arg
        self.evaluated.append(source)
        if source == "return document.readyState":
            return self.ready_state
        result = self.script_results.get(source)
        if isinstance(result, BaseException):
            raise result
        if callable(result):
            return result(script_arg)
        return result

    def screenshot(self, path: Optional[str] = None, full_page: bool = False, type: str = "png") -> bytes:
        data = b"\x89PNG fake"
        if path:
            Path(path).write_bytes(data)
        return data

    def close(self) -> None:
        self.closed = True
        self.tracker.closed(self)


class FakeContext:
    def __init__(self, tracker: HandleTracker, options: Dict[str, Any]):
        self.tracker = tracker
        self.options = options
        self.default_timeout_ms: Optional[float] = None
        self.navigation_timeout_ms: Optional[float] = None
        self.pages: List[FakePage] = []
        tracker.opened(self)

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout_ms = timeout

    def set_default_navigation_timeout(self, timeout: float) -> None:
        self.navigation_timeout_ms = timeout

    def new_page(self) -> FakePage:
        page = FakePage(self.tracker)
        self.pages.append(page)
        return page

    def close(self) -> None:
        self.tracker.closed(self)


class FakeBrowser:
    def __init__(self, tracker: HandleTracker, browser_type: str, options: Dict[str, Any]):
        self.tracker = tracker
        self.browser_type = browser_type
        self.options = options
        self.contexts: List[FakeContext] = []
        tracker.opened(self)

    def new_context(self, **options: Any) -> FakeContext:
        context = FakeContext(self.tracker, options)
        self.contexts.append(context)
        return context

    def close(self) -> None:
        self.tracker.closed(self)


class FakeBrowserType:
    def __init__(self, tracker: HandleTracker, name: str):
        self.tracker = tracker
        self.name = name
        self.launches: List[Dict[str, Any]] = []
        self.connections: List[tuple] = []
        self.launch_error: Optional[BaseException] = None
        self.connect_error: Optional[BaseException] = None

    def launch(self, **options: Any) -> FakeBrowser:
        self.launches.append(options)
        if self.launch_error is not None:
            raise self.launch_error
        return FakeBrowser(self.tracker, self.name, options)

    def connect(self, ws_endpoint: str, timeout: Optional[float] = None) -> FakeBrowser:
        return self._connect("connect", ws_endpoint, timeout)

    def connect_over_cdp(self, endpoint_url: str, timeout: Optional[float] = None) -> FakeBrowser:
        return self._connect("connect_over_cdp", endpoint_url, timeout)

    def _connect(self, method: str, url: str, timeout: Optional[float]) -> FakeBrowser:
        self.connections.append((method, url, timeout))
        if self.connect_error is not None:
            raise self.connect_error
        return FakeBrowser(self.tracker, self.name, {"remote": url})


class FakePlaywright:
    def __init__(self, tracker: HandleTracker):
        self.tracker = tracker
        self.chromium = FakeBrowserType(tracker, "chromium")
        self.firefox = FakeBrowserType(tracker, "firefox")
        self.stopped = False
        tracker.opened(self)

    def stop(self) -> None:
        self.stopped = True
        self.tracker.closed(self)


class FakePlaywrightFactory:
    """
    Drop-in for sync_playwright: calling it returns an object whose start()
    boots a FakePlaywright. `configure` runs on every new driver so tests can
    inject launch or connect errors.
    """

    def __init__(self):
        self.tracker = HandleTracker()
        self.drivers: List[FakePlaywright] = []
        self.configure: Callable[[FakePlaywright], None] = lambda driver: None
        self._lock = threading.Lock()

    def __call__(self) -> "FakePlaywrightFactory":
        return self

    def start(self) -> FakePlaywright:
        driver = FakePlaywright(self.tracker)
        self.configure(driver)
        with self._lock:
            self.drivers.append(driver)
        return driver

    @property
    def last(self) -> FakePlaywright:
        return self.drivers[-1]

