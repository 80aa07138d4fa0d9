"""
================================================================================
Autotest Tools
================================================================================

Supporting utilities for the UI test framework.

Modules:
    - common: Shared logging setup
    - report_tools: Allure reporting sink and report processing
    - data_readers: JSON / CSV / Excel test data readers

Example:
    from autotest_tools.common import init_logger
    from autotest_tools.data_readers import CsvDataReader
    from autotest_tools.report_tools.allure_utils import AllureReportSink

    init_logger(level="DEBUG")
    rows = CsvDataReader().read_rows_with_headers("data/users.csv")

    sink = AllureReportSink(results_dir="reports/allure-results")
    entry = sink.create_test_entry("test_login")
    sink.log(entry, "PASS", "Logged in")
    sink.flush()

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "data_readers",
    "report_tools",
]
