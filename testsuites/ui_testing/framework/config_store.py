"""
================================================================================
Configuration Store
================================================================================

Environment-scoped settings for UI automation.

Features:
    - One YAML file per environment (config/dev.yaml, config/staging.yaml, ...)
    - Nested YAML flattened to dot-notation keys (browser.implicit.wait)
    - Environment variable override (BROWSER_IMPLICIT_WAIT overrides browser.implicit.wait)
    - Typed accessors with default-bearing variants
    - Load-once semantics guarded by a lock

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

import yaml
from loguru import logger


DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent.parent / "config"
DEFAULT_ENVIRONMENT = "dev"

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")

_MISSING = object()


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


class ConfigurationNotFound(ConfigurationError):
    """Raised when no settings file exists for the requested environment."""
    pass


class PropertyNotFound(ConfigurationError, KeyError):
    """Raised when a required key is absent and no default was supplied."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class InvalidPropertyType(ConfigurationError, ValueError):
    """Raised when a stored value cannot be parsed as the requested type."""
    pass


def active_environment() -> str:
    """Environment name selected by the process (ENVIRONMENT, then ENV)."""
    return os.getenv("ENVIRONMENT", os.getenv("ENV", DEFAULT_ENVIRONMENT))


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    flat: Dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, full_key))
        elif value is None:
            continue
        elif isinstance(value, bool):
            flat[full_key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            flat[full_key] = ",".join(str(item) for item in value)
        else:
            flat[full_key] = str(value)
    return flat


def env_key(key: str) -> str:
    """Environment variable name that overrides a dot-notation key."""
    return key.upper().replace(".", "_")


class Configuration(Mapping[str, str]):
    """
    Immutable settings for one environment.

    Values are stored as strings; typed accessors parse on demand.

    Usage:
        >>> config = load_configuration("staging")
        >>> config.get("base.url")
        'https://staging.example.com'
        >>> config.get_int("browser.implicit.wait", 10)
        10
    """

    def __init__(
        self,
        environment: str,
        values: Mapping[str, str],
        overrides: Optional[Mapping[str, str]] = None,
        source: Optional[Path] = None,
    ) -> None:
        self._environment = environment
        self._values = MappingProxyType(dict(values))
        self._overrides = MappingProxyType(dict(overrides or {}))
        self._source = source

    def __getitem__(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise PropertyNotFound(f"Property not found: {key}")
        return value

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Configuration(environment={self._environment!r}, keys={len(self)})"

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def source(self) -> Optional[Path]:
        return self._source

    # =========================================================================
    # Raw Access
    # =========================================================================

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a value by dot-notation key.

        Environment overrides win over the file value for dotted keys.
        Single-word keys are never overridden, so a key such as "path"
        cannot pick up the OS PATH.

        Args:
            key: Dot-notation key (e.g., "base.url")
            default: Returned when the key is absent

        Returns:
            String value or default
        """
        if "." in key:
            override = self._overrides.get(env_key(key))
            if override is not None:
                return override
        return self._values.get(key, default)

    def get_or_default(self, key: str, default: str) -> str:
        value = self.get(key)
        return default if value is None else value

    # =========================================================================
    # Typed Access
    # =========================================================================

    def get_int(self, key: str, default: Any = _MISSING) -> int:
        return self._typed(key, default, int, "integer")

    def get_float(self, key: str, default: Any = _MISSING) -> float:
        return self._typed(key, default, float, "float")

    def get_bool(self, key: str, default: Any = _MISSING) -> bool:
        return self._typed(key, default, _parse_bool, "boolean")

    def _typed(
        self, key: str, default: Any, parser, type_name: str, raw: Optional[str] = None
    ) -> Any:
        if raw is None:
            raw = self.get(key)

        if raw is None:
            if default is _MISSING:
                raise PropertyNotFound(f"Property not found: {key}")
            logger.debug(f"Property '{key}' not set, using default {default!r}")
            return default

        try:
            return parser(raw.strip())
        except ValueError as e:
            if default is _MISSING:
                raise InvalidPropertyType(
                    f"Invalid {type_name} value for property {key}: {raw!r}"
                ) from e
            logger.warning(
                f"Invalid {type_name} value for property {key}: {raw!r}. "
                f"Using default {default!r}"
            )
            return default

    # =========================================================================
    # Framework Settings
    # =========================================================================

    @property
    def base_url(self) -> str:
        return self.get_or_default("base.url", "http://localhost:3000").rstrip("/")

    @property
    def browser(self) -> str:
        # BROWSER / HEADLESS are the short process-level switches
        return self._overrides.get("BROWSER") or self.get_or_default("browser.name", "chrome")

    @property
    def headless(self) -> bool:
        switch = self._overrides.get("HEADLESS")
        if switch is not None:
            return self._typed("HEADLESS", False, _parse_bool, "boolean", raw=switch)
        return self.get_bool("browser.headless", False)

    @property
    def implicit_wait(self) -> float:
        return self.get_float("browser.implicit.wait", 10)

    @property
    def page_load_timeout(self) -> float:
        return self.get_float("browser.page.load.timeout", 30)

    @property
    def script_timeout(self) -> float:
        return self.get_float("browser.script.timeout", 30)

    @property
    def explicit_wait_timeout(self) -> float:
        return self.get_float("explicit.wait.timeout", 15)

    @property
    def polling_interval(self) -> float:
        return self.get_float("explicit.wait.polling", 0.5)

    @property
    def screenshot_on_failure(self) -> bool:
        return self.get_bool("screenshot.on.failure", True)

    @property
    def screenshot_on_success(self) -> bool:
        return self.get_bool("screenshot.on.success", False)

    @property
    def screenshots_path(self) -> Path:
        return Path(self.get_or_default("screenshots.path", "reports/screenshots"))

    @property
    def reports_path(self) -> Path:
        return Path(self.get_or_default("reports.path", "reports"))

    @property
    def parallel_tests(self) -> bool:
        return self.get_bool("parallel.tests", False)

    @property
    def thread_count(self) -> int:
        return self.get_int("thread.count", 1)


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def load_configuration(
    environment: Optional[str] = None,
    config_dir: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Configuration:
    """
    Load the settings file for one environment.

    Args:
        environment: Environment name. Uses ENVIRONMENT/ENV, then "dev".
        config_dir: Directory holding <environment>.yaml files.
        environ: Override source. Snapshot of os.environ if not given.

    Returns:
        Immutable Configuration

    Raises:
        ConfigurationNotFound: No file exists for the environment
        ConfigurationError: The file is not a valid YAML mapping
    """
    environment = environment or active_environment()
    config_dir = Path(config_dir or DEFAULT_CONFIG_DIR)
    config_path = config_dir / f"{environment}.yaml"

    if not config_path.exists():
        logger.error(f"Configuration file not found: {config_path}")
        raise ConfigurationNotFound(
            f"Configuration file not found for environment '{environment}': {config_path}"
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file {config_path}: {e}"
        ) from e

    if not isinstance(data, Mapping):
        raise ConfigurationError(
            f"Configuration file {config_path} must contain a mapping"
        )

    snapshot = dict(os.environ if environ is None else environ)
    config = Configuration(environment, _flatten(data), snapshot, config_path)
    logger.info(f"Loaded configuration for environment: {environment}")
    return config


class ConfigurationStore:
    """
    Process-wide holder of the active Configuration.

    The first call to load() reads the settings file; later calls return the
    cached instance. Loading is guarded by a lock so concurrent workers never
    race a duplicate load.

    Usage:
        >>> config = ConfigurationStore.load()
        >>> config is ConfigurationStore.load()
        True
    """

    _instance: Optional[Configuration] = None
    _lock = threading.Lock()

    @classmethod
    def load(
        cls,
        environment: Optional[str] = None,
        config_dir: Optional[Path] = None,
    ) -> Configuration:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = load_configuration(environment, config_dir)

        if environment and environment != cls._instance.environment:
            raise ConfigurationError(
                f"Configuration already loaded for '{cls._instance.environment}', "
                f"cannot switch to '{environment}'"
            )
        return cls._instance

    @classmethod
    def is_loaded(cls) -> bool:
        return cls._instance is not None

    @classmethod
    def reset(cls) -> None:
        """
        Drop the cached configuration.

        Used by tests that load several environments in one process.
        """
        with cls._lock:
            cls._instance = None


__all__ = [
    "Configuration",
    "ConfigurationError",
    "ConfigurationNotFound",
    "ConfigurationStore",
    "InvalidPropertyType",
    "PropertyNotFound",
    "active_environment",
    "env_key",
    "load_configuration",
]
