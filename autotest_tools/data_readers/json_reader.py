"""
================================================================================
JSON Data Reader
================================================================================

Reads JSON test data and resolves dotted key paths such as
"users.0.credentials.username" (numeric segments index into lists).

================================================================================
"""

import json
from typing import Any, Optional

from loguru import logger

from .base import DataFileError, DataReader, PathLike


_MISSING = object()


def _as_text(value: Any) -> str:
    """Render a JSON value the way it reads in the file."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


class JsonDataReader(DataReader):
    """
    JSON test data reader.

    Usage:
        reader = JsonDataReader("testsuites/ui_testing/data")
        data = reader.read("login.json")
        username = reader.read_value("login.json", "valid.username")
    """

    SUFFIXES = (".json",)

    def read(self, path: PathLike) -> Any:
        """
        Load a JSON document.

        Raises:
            DataFileError: File missing, not UTF-8 or not valid JSON
        """
        resolved = self.resolve(path)
        try:
            with open(resolved, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise DataFileError(f"Invalid JSON in {resolved}: {e}") from e
        except UnicodeDecodeError as e:
            raise DataFileError(f"JSON file {resolved} is not valid UTF-8: {e}") from e

    def lookup(self, data: Any, key_path: str) -> Any:
        """Walk `key_path` through nested dicts/lists; _MISSING when absent."""
        node = data
        for key in key_path.split("."):
            if isinstance(node, dict):
                node = node.get(key, _MISSING)
            elif isinstance(node, list) and key.lstrip("-").isdigit():
                index = int(key)
                node = node[index] if -len(node) <= index < len(node) else _MISSING
            else:
                node = _MISSING
            if node is _MISSING:
                return _MISSING
        return node

    def read_value(self, path: PathLike, key_path: str) -> Optional[str]:
        """
        Value at `key_path` as text, or None when the path does not exist.
        """
        value = self.lookup(self.read(path), key_path)
        if value is _MISSING:
            logger.warning(f"Key path not found: {key_path} in file: {path}")
            return None

        text = _as_text(value)
        logger.debug(f"Retrieved value '{text}' for key path '{key_path}' from file: {path}")
        return text


__all__ = ["JsonDataReader"]
