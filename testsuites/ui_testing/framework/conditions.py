"""
================================================================================
Wait Conditions
================================================================================

Named predicates for the Waiter.

Every builder returns a Condition: a callable taking the browser session and
returning a truthy value once the UI is in the expected state. Conditions
raise ElementNotFoundError while their target does not exist yet, which the
Waiter treats as "not satisfied".

Usage:
    waiter.until(visibility_of("#username"))
    waiter.until(text_to_be_present(".toast", "Saved"))
    waiter.until(page_load_complete())

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator

from .wait_helpers import ElementNotFoundError


# Upper bound for single DOM reads inside a poll (milliseconds)
QUERY_TIMEOUT_MS = 1000


@dataclass(frozen=True)
class Condition:
    """A predicate over the browser session with a readable description."""
    description: str
    check: Callable[[Any], Any]

    def __call__(self, session: Any) -> Any:
        return self.check(session)

    def __str__(self) -> str:
        return self.description


def _first_match(session: Any, selector: str) -> Locator:
    locator = session.page.locator(selector)
    if locator.count() == 0:
        raise ElementNotFoundError(f"No element matches: {selector}")
    return locator.first


# =============================================================================
# Element Conditions
# =============================================================================

def presence_of(selector: str) -> Condition:
    """Element attached to the DOM, visible or not."""
    return Condition(f"presence of {selector}", lambda s: _first_match(s, selector))


def visibility_of(selector: str) -> Condition:
    """Element present and visible. Returns its Locator."""
    def check(session: Any):
        element = _first_match(session, selector)
        return element if element.is_visible() else None

    return Condition(f"visibility of {selector}", check)


def visibility_of_all(selector: str) -> Condition:
    """At least one match, and every match visible. Returns the Locators."""
    def check(session: Any) -> List[Locator]:
        locator = session.page.locator(selector)
        count = locator.count()
        if count == 0:
            raise ElementNotFoundError(f"No element matches: {selector}")
        elements = [locator.nth(i) for i in range(count)]
        return elements if all(e.is_visible() for e in elements) else []

    return Condition(f"visibility of all {selector}", check)


def element_to_be_clickable(selector: str) -> Condition:
    """Element visible and enabled. Returns its Locator."""
    def check(session: Any):
        element = _first_match(session, selector)
        return element if element.is_visible() and element.is_enabled() else None

    return Condition(f"{selector} to be clickable", check)


def invisibility_of(selector: str) -> Condition:
    """Element absent or hidden."""
    def check(session: Any) -> bool:
        locator = session.page.locator(selector)
        if locator.count() == 0:
            return True
        return not locator.first.is_visible()

    return Condition(f"invisibility of {selector}", check)


def text_to_be_present(selector: str, text: str) -> Condition:
    """Element's rendered text contains `text`."""
    def check(session: Any) -> bool:
        element = _first_match(session, selector)
        return text in (element.inner_text(timeout=QUERY_TIMEOUT_MS) or "")

    return Condition(f"text '{text}' in {selector}", check)


def attribute_contains(selector: str, attribute: str, value: str) -> Condition:
    """Element attribute contains `value`."""
    def check(session: Any) -> bool:
        element = _first_match(session, selector)
        actual = element.get_attribute(attribute, timeout=QUERY_TIMEOUT_MS)
        return actual is not None and value in actual

    return Condition(f"{selector}[{attribute}] to contain '{value}'", check)


# =============================================================================
# Page Conditions
# =============================================================================

def page_load_complete() -> Condition:
    """document.readyState is 'complete'."""
    def check(session: Any) -> bool:
        try:
            return session.execute_script("return document.readyState") == "complete"
        except PlaywrightError as e:
            # The document was replaced mid-evaluation; the next poll sees the new one
            if "context was destroyed" in str(e):
                return False
            raise

    return Condition("document.readyState == 'complete'", check)


def jquery_idle() -> Condition:
    """No active jQuery requests. Pages without jQuery count as idle."""
    return Condition(
        "jQuery idle",
        lambda s: bool(s.execute_script(
            "return typeof window.jQuery === 'undefined' || window.jQuery.active === 0"
        )),
    )


def angular_stable() -> Condition:
    """All Angular testabilities stable. Pages without Angular count as stable."""
    return Condition(
        "Angular stable",
        lambda s: bool(s.execute_script(
            "return typeof window.getAllAngularTestabilities !== 'function' || "
            "window.getAllAngularTestabilities().every(t => t.isStable())"
        )),
    )


def url_contains(fragment: str) -> Condition:
    return Condition(f"URL to contain '{fragment}'", lambda s: fragment in (s.page.url or ""))


def title_contains(fragment: str) -> Condition:
    return Condition(f"title to contain '{fragment}'", lambda s: fragment in (s.page.title() or ""))


__all__ = [
    "Condition",
    "QUERY_TIMEOUT_MS",
    "angular_stable",
    "attribute_contains",
    "element_to_be_clickable",
    "invisibility_of",
    "jquery_idle",
    "page_load_complete",
    "presence_of",
    "text_to_be_present",
    "title_contains",
    "url_contains",
    "visibility_of",
    "visibility_of_all",
]
