"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for application pages.

Each page class encapsulates:
    - Element locators
    - Page-specific actions
    - Navigation that returns the destination page object

Author: Automation Team
License: MIT
================================================================================
"""

from .login_page import LoginPage
from .home_page import HomePage

__all__ = [
    "LoginPage",
    "HomePage",
]
