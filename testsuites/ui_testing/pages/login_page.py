"""
================================================================================
Login Page Object
================================================================================

Login screen: credentials form, remember-me option and feedback messages.

Successful logins hand back a HomePage; staying on the form (validation
errors) keeps returning this page.

================================================================================
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Optional

import allure
from loguru import logger

from testsuites.ui_testing.framework.page_base import BasePage

if TYPE_CHECKING:
    from .home_page import HomePage


class LoginPage(BasePage):
    """Login page object."""

    URL_PATH = "/login.html"
    PAGE_TITLE = "Login"

    # Locators
    USERNAME_INPUT = "#username"
    PASSWORD_INPUT = "#password"
    LOGIN_BUTTON = "#loginButton"
    FORGOT_PASSWORD_LINK = "#forgotPasswordLink"
    REMEMBER_ME_CHECKBOX = "#rememberMeCheckbox"
    ERROR_MESSAGE = ".error-message"
    SUCCESS_MESSAGE = ".success-message"

    @allure.step("Enter username: {username}")
    def enter_username(self, username: str) -> "LoginPage":
        self.fill(self.USERNAME_INPUT, username)
        return self

    @allure.step("Enter password")
    def enter_password(self, password: str) -> "LoginPage":
        self.fill(self.PASSWORD_INPUT, password)
        return self

    def set_remember_me(self, checked: bool) -> "LoginPage":
        if self.is_remember_me_checked() != checked:
            self.set_checked(self.REMEMBER_ME_CHECKBOX, checked)
        return self

    def clear_username(self) -> "LoginPage":
        self.fill(self.USERNAME_INPUT, "")
        return self

    def clear_password(self) -> "LoginPage":
        self.fill(self.PASSWORD_INPUT, "")
        return self

    def click_login_button(self) -> "HomePage":
        """Submit the form and wait for the home screen."""
        from .home_page import HomePage

        self.click(self.LOGIN_BUTTON)
        logger.info("Login button clicked")
        return self.go_to(HomePage)

    @allure.step("Login (username={username})")
    def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> "HomePage":
        """
        Perform login.

        Args:
            username: Defaults to `UI_USERNAME` env var (demo-safe)
            password: Defaults to `UI_PASSWORD` env var (demo-safe)

        Returns:
            HomePage the login lands on
        """
        if username is None:
            username = os.getenv("UI_USERNAME", "demo_user")
        if password is None:
            password = os.getenv("UI_PASSWORD", "demo_password")

        self.enter_username(username)
        self.enter_password(password)
        return self.click_login_button()

    def login_with_remember_me(
        self,
        username: str,
        password: str,
        remember_me: bool,
    ) -> "HomePage":
        self.enter_username(username)
        self.enter_password(password)
        self.set_remember_me(remember_me)
        return self.click_login_button()

    @allure.step("Submit invalid credentials")
    def submit_expecting_error(self, username: str, password: str) -> "LoginPage":
        """Submit credentials that keep the user on the login form."""
        self.enter_username(username)
        self.enter_password(password)
        self.click(self.LOGIN_BUTTON)
        return self

    def get_error_message(self) -> str:
        return self.get_text(self.ERROR_MESSAGE)

    def get_success_message(self) -> str:
        return self.get_text(self.SUCCESS_MESSAGE)

    def is_error_message_displayed(self) -> bool:
        return self.is_displayed(self.ERROR_MESSAGE)

    def is_success_message_displayed(self) -> bool:
        return self.is_displayed(self.SUCCESS_MESSAGE)

    def is_login_button_enabled(self) -> bool:
        return self.is_enabled(self.LOGIN_BUTTON)

    def get_username_value(self) -> str:
        return self.get_value(self.USERNAME_INPUT)

    def is_remember_me_checked(self) -> bool:
        return self.is_checked(self.REMEMBER_ME_CHECKBOX)

    def is_forgot_password_link_displayed(self) -> bool:
        return self.is_displayed(self.FORGOT_PASSWORD_LINK)

    def is_login_page_loaded(self) -> bool:
        """Form controls are visible and the title matches."""
        return (
            self.is_loaded()
            and self.is_displayed(self.USERNAME_INPUT)
            and self.is_displayed(self.PASSWORD_INPUT)
            and self.is_displayed(self.LOGIN_BUTTON)
        )


__all__ = ["LoginPage"]
