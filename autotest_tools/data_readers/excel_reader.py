"""
================================================================================
Excel Data Reader
================================================================================

Reads .xlsx test data with openpyxl. Values come back as strings:
blank cells as "", whole numbers without a trailing ".0", booleans as
"true"/"false" and dates in ISO format.

================================================================================
"""

from datetime import date, datetime, time
from typing import Any, Dict, List, Union
from zipfile import BadZipFile

from loguru import logger
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .base import DataFileError, DataReader, PathLike


SheetRef = Union[str, int]


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


class ExcelDataReader(DataReader):
    """
    Excel (.xlsx) test data reader.

    Sheets are addressed by name or by 0-based index.

    Usage:
        reader = ExcelDataReader("testsuites/ui_testing/data")
        rows = reader.read_sheet_with_headers("users.xlsx", "Login")
    """

    SUFFIXES = (".xlsx", ".xlsm")

    def _open(self, path: PathLike):
        resolved = self.resolve(path)
        try:
            return load_workbook(resolved, read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile, OSError, KeyError) as e:
            raise DataFileError(f"Error reading Excel file {resolved}: {e}") from e

    @staticmethod
    def _worksheet(workbook, sheet: SheetRef):
        if isinstance(sheet, int):
            names = workbook.sheetnames
            if not 0 <= sheet < len(names):
                raise IndexError(f"Sheet index {sheet} is out of bounds ({len(names)} sheets)")
            return workbook[names[sheet]]
        if sheet not in workbook.sheetnames:
            raise KeyError(f"Sheet '{sheet}' not found")
        return workbook[sheet]

    def sheet_names(self, path: PathLike) -> List[str]:
        workbook = self._open(path)
        try:
            return list(workbook.sheetnames)
        finally:
            workbook.close()

    def read_sheet(self, path: PathLike, sheet: SheetRef = 0) -> List[List[str]]:
        """All rows of a sheet, header included."""
        workbook = self._open(path)
        try:
            worksheet = self._worksheet(workbook, sheet)
            rows = [
                [cell_text(value) for value in row]
                for row in worksheet.iter_rows(values_only=True)
            ]
        finally:
            workbook.close()

        logger.debug(f"Read {len(rows)} rows from sheet '{sheet}' of {path}")
        return rows

    def read_sheet_with_headers(self, path: PathLike, sheet: SheetRef = 0) -> List[Dict[str, str]]:
        """Data rows keyed by the first row; fully blank rows are skipped."""
        rows = self.read_sheet(path, sheet)
        if not rows:
            return []

        headers = [h.strip() for h in rows[0]]
        return [
            dict(zip(headers, row + [""] * (len(headers) - len(row))))
            for row in rows[1:]
            if any(cell.strip() for cell in row)
        ]

    def get_cell_value(self, path: PathLike, sheet: SheetRef, row_index: int, column_index: int) -> str:
        """
        Cell at 0-based (row_index, column_index); "" for cells beyond the data.
        """
        rows = self.read_sheet(path, sheet)
        if not 0 <= row_index < len(rows):
            raise IndexError(f"Row index {row_index} is out of bounds ({len(rows)} rows)")
        row = rows[row_index]
        return row[column_index] if 0 <= column_index < len(row) else ""

    def get_cell_value_by_header(self, path: PathLike, sheet: SheetRef, row_index: int, header: str) -> str:
        records = self.read_sheet_with_headers(path, sheet)
        if not 0 <= row_index < len(records):
            raise IndexError(f"Row index {row_index} is out of bounds ({len(records)} rows)")
        if header not in records[row_index]:
            raise KeyError(f"Column header '{header}' not found")
        return records[row_index][header]

    def row_count(self, path: PathLike, sheet: SheetRef = 0) -> int:
        return len(self.read_sheet(path, sheet))


__all__ = ["ExcelDataReader", "cell_text"]
