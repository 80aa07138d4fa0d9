"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Synchronized element interactions (every action waits first)
    - JavaScript fallbacks for stubborn elements
    - Navigation helpers returning page objects
    - Screenshot utilities

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Type, TypeVar

import allure
from loguru import logger
from playwright.sync_api import Locator

from .conditions import (
    element_to_be_clickable,
    page_load_complete,
    presence_of,
    url_contains,
    visibility_of,
)
from .config_store import Configuration
from .screenshots import ScreenshotCapture
from .session_registry import BrowserSession
from .wait_helpers import Waiter, WaitTimeoutError


P = TypeVar("P", bound="BasePage")


class BasePage:
    """
    Base class for all page objects.

    A page object is bound to the calling worker's session. Interaction
    methods resolve their target through the Waiter before acting; nothing
    touches the DOM unsynchronized.

    Usage:
        class LoginPage(BasePage):
            URL_PATH = "/login.html"

            def login(self, username: str, password: str) -> "HomePage":
                self.fill("#username", username)
                self.fill("#password", password)
                self.click("#loginButton")
                return self.go_to(HomePage)
    """

    # Override in subclasses
    URL_PATH: str = "/"
    PAGE_TITLE: str = ""

    def __init__(
        self,
        session: BrowserSession,
        config: Configuration,
        base_url: Optional[str] = None,
        waiter: Optional[Waiter] = None,
    ):
        """
        Initialize page object.

        Args:
            session: Session owned by the calling worker
            config: Active configuration
            base_url: Application base URL (defaults to base.url)
            waiter: Waiter to synchronize with (defaults from configuration)
        """
        self.session = session
        self.config = config
        self.base_url = (base_url or config.base_url).rstrip("/")
        self.waiter = waiter or Waiter.from_config(session, config)

    @property
    def page(self):
        return self.session.page

    @property
    def url(self) -> str:
        """Full URL of this page."""
        return f"{self.base_url}{self.URL_PATH}"

    def go_to(self, page_class: Type[P]) -> P:
        """
        Build the page object for the screen a navigation landed on.

        The destination waits until the browser is on its URL and the
        document has loaded before being handed back.
        """
        destination = page_class(self.session, self.config, self.base_url, self.waiter)
        self.waiter.until(url_contains(destination.URL_PATH))
        destination.wait_for_page_load()
        return destination

    # =========================================================================
    # Navigation
    # =========================================================================

    def open(self: P) -> P:
        """Navigate to URL_PATH and wait for the document to load."""
        with allure.step(f"Open {self.__class__.__name__}"):
            self.page.goto(self.url)
            logger.debug(f"Navigated to: {self.url}")
            self.wait_for_page_load()
        return self

    def navigate_to(self, path_or_url: str) -> None:
        """
        Navigate to a path under base_url, or to an absolute URL.
        """
        if "://" in path_or_url:
            target = path_or_url
        else:
            target = f"{self.base_url}/{path_or_url.lstrip('/')}"
        with allure.step(f"Navigate to {target}"):
            self.page.goto(target)
            self.wait_for_page_load()

    def refresh(self) -> None:
        with allure.step("Refresh page"):
            self.page.reload()
            self.wait_for_page_load()

    def back(self) -> None:
        with allure.step("Navigate back"):
            self.page.go_back()
            self.wait_for_page_load()

    def forward(self) -> None:
        with allure.step("Navigate forward"):
            self.page.go_forward()
            self.wait_for_page_load()

    def title(self) -> str:
        return self.page.title()

    def current_url(self) -> str:
        return self.page.url

    def wait_for_page_load(self, timeout: Optional[float] = None) -> None:
        """Wait until document.readyState is 'complete'."""
        self.waiter.until(page_load_complete(), timeout=timeout)

    def is_loaded(self) -> bool:
        """True when the page title matches PAGE_TITLE (or no title is declared)."""
        return not self.PAGE_TITLE or self.PAGE_TITLE in self.title()

    # =========================================================================
    # Element Resolution
    # =========================================================================

    def wait_visible(self, selector: str, timeout: Optional[float] = None) -> Locator:
        return self.waiter.until(visibility_of(selector), timeout=timeout)

    def wait_clickable(self, selector: str, timeout: Optional[float] = None) -> Locator:
        return self.waiter.until(element_to_be_clickable(selector), timeout=timeout)

    def wait_present(self, selector: str, timeout: Optional[float] = None) -> Locator:
        return self.waiter.until(presence_of(selector), timeout=timeout)

    # =========================================================================
    # Element Interactions
    # =========================================================================

    def click(self, selector: str, timeout: Optional[float] = None) -> None:
        with allure.step(f"Click: {selector}"):
            self.wait_clickable(selector, timeout).click()
            logger.debug(f"Clicked element: {selector}")

    def fill(self, selector: str, value: str, timeout: Optional[float] = None) -> None:
        """
        Clear the input and type `value` into it.

        Values typed into password fields are masked in the report.
        """
        shown = "*" * len(value) if "password" in selector.lower() else value
        with allure.step(f"Fill {selector}: {shown}"):
            self.wait_visible(selector, timeout).fill(value)
            logger.debug(f"Typed into element: {selector}")

    def get_text(self, selector: str, timeout: Optional[float] = None) -> str:
        text = self.wait_visible(selector, timeout).inner_text()
        logger.debug(f"Got text from element {selector}: {text}")
        return text

    def get_value(self, selector: str, timeout: Optional[float] = None) -> str:
        return self.wait_visible(selector, timeout).input_value()

    def get_attribute(
        self,
        selector: str,
        attribute: str,
        timeout: Optional[float] = None,
    ) -> Optional[str]:
        return self.wait_present(selector, timeout).get_attribute(attribute)

    def is_displayed(self, selector: str, timeout: Optional[float] = None) -> bool:
        """
        Check whether an element becomes visible.

        A wait timeout means "not displayed" here, not a failure.
        """
        try:
            self.wait_visible(selector, timeout)
            return True
        except WaitTimeoutError:
            logger.debug(f"Element not displayed: {selector}")
            return False

    def is_enabled(self, selector: str, timeout: Optional[float] = None) -> bool:
        return self.wait_visible(selector, timeout).is_enabled()

    def is_checked(self, selector: str, timeout: Optional[float] = None) -> bool:
        return self.wait_present(selector, timeout).is_checked()

    def set_checked(self, selector: str, checked: bool = True, timeout: Optional[float] = None) -> None:
        with allure.step(f"{'Check' if checked else 'Uncheck'}: {selector}"):
            self.wait_clickable(selector, timeout).set_checked(checked)

    def select_by_text(self, selector: str, text: str, timeout: Optional[float] = None) -> None:
        with allure.step(f"Select '{text}' in {selector}"):
            self.wait_visible(selector, timeout).select_option(label=text)

    def select_by_value(self, selector: str, value: str, timeout: Optional[float] = None) -> None:
        with allure.step(f"Select value '{value}' in {selector}"):
            self.wait_visible(selector, timeout).select_option(value=value)

    def select_by_index(self, selector: str, index: int, timeout: Optional[float] = None) -> None:
        with allure.step(f"Select index {index} in {selector}"):
            self.wait_visible(selector, timeout).select_option(index=index)

    def hover(self, selector: str, timeout: Optional[float] = None) -> None:
        with allure.step(f"Hover: {selector}"):
            self.wait_visible(selector, timeout).hover()

    def double_click(self, selector: str, timeout: Optional[float] = None) -> None:
        with allure.step(f"Double click: {selector}"):
            self.wait_clickable(selector, timeout).dblclick()

    def right_click(self, selector: str, timeout: Optional[float] = None) -> None:
        with allure.step(f"Right click: {selector}"):
            self.wait_clickable(selector, timeout).click(button="right")

    def count(self, selector: str) -> int:
        """Number of elements currently matching selector (no wait)."""
        return self.page.locator(selector).count()

    # =========================================================================
    # JavaScript Helpers
    # =========================================================================

    def click_js(self, selector: str, timeout: Optional[float] = None) -> None:
        """Click through the DOM, bypassing actionability checks."""
        with allure.step(f"Click via JS: {selector}"):
            self.wait_present(selector, timeout).evaluate("el => el.click()")

    def fill_js(self, selector: str, value: str, timeout: Optional[float] = None) -> None:
        """Set an input's value through the DOM and fire input/change events."""
        with allure.step(f"Fill via JS: {selector}"):
            self.wait_present(selector, timeout).evaluate(
                "(el, value) => {"
                " el.value = value;"
                " el.dispatchEvent(new Event('input', {bubbles: true}));"
                " el.dispatchEvent(new Event('change', {bubbles: true}));"
                "}",
                value,
            )

    def scroll_to_element(self, selector: str, timeout: Optional[float] = None) -> None:
        self.wait_present(selector, timeout).scroll_into_view_if_needed()

    def scroll_to_top(self) -> None:
        self.session.execute_script("window.scrollTo(0, 0)")

    def scroll_to_bottom(self) -> None:
        self.session.execute_script("window.scrollTo(0, document.body.scrollHeight)")

    # =========================================================================
    # Screenshot Utilities
    # =========================================================================

    def screenshot(self, name: str, attach_to_allure: bool = True) -> Optional[Path]:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot, None when capture failed
        """
        path = ScreenshotCapture(self.config).capture_to_file(self.session, name, "page")
        if path is not None and attach_to_allure:
            allure.attach.file(str(path), name=name, attachment_type=allure.attachment_type.PNG)
        return path


__all__ = [
    "BasePage",
]
