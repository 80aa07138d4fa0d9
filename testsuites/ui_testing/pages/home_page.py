"""
================================================================================
Home Page Object
================================================================================

Landing screen after login: welcome banner, product grid, notifications,
search and the user menu.

================================================================================
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import allure
from loguru import logger

from testsuites.ui_testing.framework.conditions import visibility_of_all
from testsuites.ui_testing.framework.page_base import BasePage

if TYPE_CHECKING:
    from .login_page import LoginPage


class HomePage(BasePage):
    """Home page object."""

    URL_PATH = "/home.html"
    PAGE_TITLE = "Home"

    # Locators
    WELCOME_MESSAGE = "#welcomeMessage"
    USER_MENU = "#userMenu"
    LOGOUT_BUTTON = "#logoutButton"
    SEARCH_BOX = "#searchBox"
    SEARCH_BUTTON = "#searchButton"
    NAVIGATION_MENU = ".navigation-menu"
    MAIN_CONTENT = ".main-content"
    SIDEBAR = ".sidebar"
    FOOTER = ".footer"
    PRODUCT_CARDS = ".product-card"
    VISIBLE_PRODUCT_CARDS = ".product-card:not(.hidden)"
    PROFILE_LINK = "#profileLink"
    SETTINGS_LINK = "#settingsLink"
    NOTIFICATION_BELL = "#notificationBell"
    NOTIFICATION_COUNT = ".notification-count"
    NOTIFICATION_PANEL = "#notificationPanel"

    def get_welcome_message(self) -> str:
        return self.get_text(self.WELCOME_MESSAGE)

    def is_home_page_loaded(self) -> bool:
        return (
            self.is_displayed(self.WELCOME_MESSAGE)
            and self.is_displayed(self.NAVIGATION_MENU)
            and self.is_displayed(self.MAIN_CONTENT)
        )

    def is_user_logged_in(self) -> bool:
        return self.is_displayed(self.USER_MENU)

    @allure.step("Logout")
    def logout(self) -> "LoginPage":
        from .login_page import LoginPage

        self.click(self.USER_MENU)
        self.click(self.LOGOUT_BUTTON)
        logger.info("Logged out")
        return self.go_to(LoginPage)

    @allure.step("Search for '{term}'")
    def search(self, term: str) -> "HomePage":
        """Filter the product grid in place."""
        self.fill(self.SEARCH_BOX, term)
        self.click(self.SEARCH_BUTTON)
        return self

    def product_names(self) -> List[str]:
        # The grid renders asynchronously; wait for it before filtering
        self.wait_present(self.PRODUCT_CARDS)
        if self.count(self.VISIBLE_PRODUCT_CARDS) == 0:
            return []
        cards = self.waiter.until(visibility_of_all(self.VISIBLE_PRODUCT_CARDS))
        return [card.inner_text().strip() for card in cards]

    def get_product_count(self) -> int:
        """Number of visible product cards once the grid has rendered."""
        return len(self.product_names())

    def click_product(self, index: int) -> None:
        count = self.get_product_count()
        if not 0 <= index < count:
            raise IndexError(f"Product index {index} out of range (found {count})")
        self.click(f"{self.VISIBLE_PRODUCT_CARDS} >> nth={index}")

    def get_notification_count(self) -> int:
        """Badge value, 0 when the badge is hidden or not numeric."""
        if not self.is_displayed(self.NOTIFICATION_COUNT, timeout=1):
            return 0
        text = self.get_text(self.NOTIFICATION_COUNT).strip()
        try:
            return int(text)
        except ValueError:
            logger.warning(f"Notification badge is not a number: {text!r}")
            return 0

    def has_notifications(self) -> bool:
        return self.get_notification_count() > 0

    def open_notifications(self) -> "HomePage":
        self.click(self.NOTIFICATION_BELL)
        self.wait_visible(self.NOTIFICATION_PANEL)
        return self

    def get_home_page_title(self) -> str:
        return self.title()

    def validate_page_layout(self) -> bool:
        """Navigation, content, sidebar and footer all rendered."""
        sections = (self.NAVIGATION_MENU, self.MAIN_CONTENT, self.SIDEBAR, self.FOOTER)
        missing = [s for s in sections if not self.is_displayed(s)]
        if missing:
            logger.warning(f"Layout sections not displayed: {missing}")
        return not missing


__all__ = ["HomePage"]
