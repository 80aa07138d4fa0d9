"""
================================================================================
Test Data Readers
================================================================================

Thin readers for structured test data kept beside the tests.

Modules:
    - json_reader: JSON documents and dotted key-path lookups
    - csv_reader: CSV rows, header-keyed rows and simple filtering
    - excel_reader: .xlsx sheets via openpyxl

Every reader returns cell values as strings; converting them is up to the
test that consumes them.

Example:
    from autotest_tools.data_readers import CsvDataReader, JsonDataReader

    users = CsvDataReader("testsuites/ui_testing/data").read_rows_with_headers("users.csv")
    username = JsonDataReader().read_value("data/login.json", "valid.username")

================================================================================
"""

from .base import DataFileError, DataReader
from .json_reader import JsonDataReader
from .csv_reader import CsvDataReader
from .excel_reader import ExcelDataReader

__all__ = [
    "CsvDataReader",
    "DataFileError",
    "DataReader",
    "ExcelDataReader",
    "JsonDataReader",
]
