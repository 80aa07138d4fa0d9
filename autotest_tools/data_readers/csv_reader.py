"""
================================================================================
CSV Data Reader
================================================================================

Reads CSV test data as raw rows or header-keyed rows. Cells are stripped;
a UTF-8 byte order mark (Excel exports) is tolerated.

================================================================================
"""

import csv
from typing import Dict, List

from loguru import logger

from .base import DataFileError, DataReader, PathLike


class CsvDataReader(DataReader):
    """
    CSV test data reader.

    Usage:
        reader = CsvDataReader("testsuites/ui_testing/data")
        for row in reader.read_rows_with_headers("users.csv"):
            print(row["username"])
    """

    SUFFIXES = (".csv", ".txt")

    def __init__(self, base_dir=None, delimiter: str = ","):
        super().__init__(base_dir)
        self.delimiter = delimiter

    def read_rows(self, path: PathLike) -> List[List[str]]:
        """All rows, header included."""
        resolved = self.resolve(path)
        try:
            with open(resolved, newline="", encoding="utf-8-sig") as f:
                rows = [[cell.strip() for cell in row] for row in csv.reader(f, delimiter=self.delimiter)]
        except UnicodeDecodeError as e:
            raise DataFileError(f"CSV file {resolved} is not valid UTF-8: {e}") from e

        logger.debug(f"Read {len(rows)} rows from CSV file: {resolved}")
        return rows

    def read_rows_with_headers(self, path: PathLike) -> List[Dict[str, str]]:
        """
        Data rows keyed by the header row.

        Short rows are padded with empty strings; extra cells are dropped.
        """
        rows = self.read_rows(path)
        if not rows:
            return []

        headers = rows[0]
        records = []
        for row in rows[1:]:
            if not any(row):
                continue
            padded = row + [""] * (len(headers) - len(row))
            records.append(dict(zip(headers, padded)))
        return records

    def get_cell_value_by_header(self, path: PathLike, row_index: int, header: str) -> str:
        """
        Cell of data row `row_index` (0-based, header excluded) under `header`.

        Raises:
            IndexError: Row index out of range
            KeyError: Header not present
        """
        records = self.read_rows_with_headers(path)
        if not 0 <= row_index < len(records):
            raise IndexError(f"Row index {row_index} is out of bounds ({len(records)} rows)")

        record = records[row_index]
        if header not in record:
            raise KeyError(f"Column header '{header}' not found")
        return record[header]

    def filter_by_column(self, path: PathLike, header: str, value: str) -> List[Dict[str, str]]:
        matches = [r for r in self.read_rows_with_headers(path) if r.get(header) == value]
        logger.debug(
            f"Filtered {len(matches)} rows by column '{header}' with value '{value}' from {path}"
        )
        return matches

    def row_count(self, path: PathLike) -> int:
        """Number of rows, header included."""
        return len(self.read_rows(path))


__all__ = ["CsvDataReader"]
