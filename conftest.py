"""
Repository-level pytest configuration (demo-safe).

Why this exists:
  - Provide safe defaults for the bundled demo application (no secrets embedded)
  - Keep the repo root importable so run_tests.py can be tested like any module

Important:
  Values below are placeholders for the demo site served by the UI conftest.
  Real projects should load secrets from a secure secret manager in CI/CD.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


# Lets framework tests run throwaway pytest sessions against the UI hooks
pytest_plugins = ["pytester"]


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """
    Set demo credentials if not already provided by the user/CI.

    UI_BASE_URL is deliberately left alone: without it the UI tests serve
    the bundled demo site themselves.
    """
    defaults = {
        "UI_USERNAME": "demo_user",
        "UI_PASSWORD": "demo_password",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
