"""
Shared path handling for the test data readers.
"""

from pathlib import Path
from typing import Optional, Union

from loguru import logger


PathLike = Union[str, Path]


class DataFileError(Exception):
    """Raised when a data file is missing or cannot be parsed."""
    pass


class DataReader:
    """
    Base class resolving data file paths.

    Relative paths are resolved against `base_dir` when one is given,
    otherwise against the current working directory.
    """

    SUFFIXES: tuple = ()

    def __init__(self, base_dir: Optional[PathLike] = None):
        self.base_dir = Path(base_dir) if base_dir else None

    def resolve(self, path: PathLike) -> Path:
        resolved = Path(path)
        if not resolved.is_absolute() and self.base_dir is not None:
            resolved = self.base_dir / resolved

        if not resolved.is_file():
            raise DataFileError(f"Data file not found: {resolved}")
        if self.SUFFIXES and resolved.suffix.lower() not in self.SUFFIXES:
            raise DataFileError(
                f"Unsupported file format '{resolved.suffix}' for {type(self).__name__}; "
                f"expected one of {', '.join(self.SUFFIXES)}"
            )

        logger.debug(f"Reading test data: {resolved}")
        return resolved


__all__ = ["DataFileError", "DataReader", "PathLike"]
