"""
================================================================================
Allure Report Utilities
================================================================================

This module is the reporting sink of the UI framework: it records test
entries, log lines and artifacts into Allure, and post-processes the
allure-results directory at the end of a run.

Features:
- ReportSink protocol consumed by the test lifecycle
- Allure-backed sink (steps, attachments, dynamic titles)
- environment.properties and summary written on flush
- Optional HTML generation through the Allure CLI

================================================================================
"""

import json
import shutil
import subprocess
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import allure
from loguru import logger


LEVELS = ("INFO", "PASS", "FAIL", "WARNING", "SKIP")

_ATTACHMENT_TYPES = {
    ".png": allure.attachment_type.PNG,
    ".jpg": allure.attachment_type.JPG,
    ".jpeg": allure.attachment_type.JPG,
    ".txt": allure.attachment_type.TEXT,
    ".log": allure.attachment_type.TEXT,
    ".json": allure.attachment_type.JSON,
    ".html": allure.attachment_type.HTML,
}


# ================================================================================
# Reporting Sink
# ================================================================================

@dataclass
class ReportEntry:
    """Handle for one test in the report."""
    name: str
    description: str = ""
    status: Optional[str] = None
    logs: List[tuple] = field(default_factory=list)
    artifacts: List[tuple] = field(default_factory=list)
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())


class ReportSink(Protocol):
    """What the test lifecycle needs from a reporter."""

    def create_test_entry(self, name: str, description: str = "") -> ReportEntry: ...

    def log(self, entry: ReportEntry, level: str, message: str) -> None: ...

    def attach_artifact(self, entry: ReportEntry, file_path: Path, caption: str) -> None: ...

    def flush(self) -> None: ...


class AllureReportSink:
    """
    Reporting sink backed by allure-pytest.

    Log lines become Allure steps, artifacts become attachments. When no
    Allure listener is active (no --alluredir) the allure calls are no-ops
    and the entries are still kept for the run summary.

    Usage:
        sink = AllureReportSink(results_dir="reports/allure-results")
        entry = sink.create_test_entry("test_login", "Valid user can log in")
        sink.log(entry, "INFO", "Opened login page")
        sink.attach_artifact(entry, Path("shot.png"), "Failure screenshot")
        sink.flush()
    """

    def __init__(
        self,
        results_dir: Optional[Path] = None,
        environment_info: Optional[Dict[str, Any]] = None,
        generate_html: bool = False,
    ):
        """
        Initialize sink.

        Args:
            results_dir: allure-results directory (None disables file output)
            environment_info: Key/values shown in the report Environment widget
            generate_html: Run `allure generate` on flush
        """
        self.results_dir = Path(results_dir) if results_dir else None
        self.environment_info = dict(environment_info or {})
        self.generate_html = generate_html
        self.entries: List[ReportEntry] = []
        self._lock = threading.Lock()

    def create_test_entry(self, name: str, description: str = "") -> ReportEntry:
        entry = ReportEntry(name=name, description=description)
        with self._lock:
            self.entries.append(entry)
        allure.dynamic.title(name)
        if description:
            allure.dynamic.description(description)
        return entry

    def log(self, entry: ReportEntry, level: str, message: str) -> None:
        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown report level: {level}")

        entry.logs.append((level, message))
        if level in ("PASS", "FAIL", "SKIP"):
            entry.status = level
        with allure.step(f"[{level}] {message}"):
            pass

    def attach_artifact(self, entry: ReportEntry, file_path: Path, caption: str) -> None:
        file_path = Path(file_path)
        if not file_path.exists():
            logger.warning(f"Artifact not found, not attached: {file_path}")
            return

        entry.artifacts.append((str(file_path), caption))
        allure.attach.file(
            str(file_path),
            name=caption,
            attachment_type=_ATTACHMENT_TYPES.get(file_path.suffix.lower()),
        )

    def summary(self) -> "TestResultSummary":
        summary = TestResultSummary()
        with self._lock:
            entries = list(self.entries)
        summary.total = len(entries)
        for entry in entries:
            if entry.status == "PASS":
                summary.passed += 1
            elif entry.status == "FAIL":
                summary.failed += 1
            elif entry.status == "SKIP":
                summary.skipped += 1
            else:
                summary.unknown += 1
        return summary

    def flush(self) -> None:
        """Write environment.properties and the run summary; optionally build HTML."""
        summary = self.summary()
        logger.info(
            f"Report summary: total={summary.total}, passed={summary.passed}, "
            f"failed={summary.failed}, skipped={summary.skipped}, "
            f"pass rate={summary.pass_rate:.2f}%"
        )

        if self.results_dir is None:
            return

        self.results_dir.mkdir(parents=True, exist_ok=True)
        lines = [f"{key}={value}" for key, value in sorted(self.environment_info.items())]
        (self.results_dir / "environment.properties").write_text(
            "\n".join(lines) + "\n", encoding="utf-8"
        )
        (self.results_dir / "ui-summary.json").write_text(
            json.dumps(summary.to_dict(), indent=2), encoding="utf-8"
        )

        if self.generate_html:
            AllureReportProcessor(self.results_dir).generate_report()


# ================================================================================
# Report Processing
# ================================================================================

@dataclass
class TestResultSummary:
    """Summary of test execution results."""
    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    unknown: int = 0
    duration_ms: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Calculate pass rate percentage."""
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "unknown": self.unknown,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
        }


class AllureReportProcessor:
    """
    Processes Allure results and generates reports.

    Provides methods for analyzing results, generating summaries,
    and managing report history.
    """

    def __init__(
        self,
        results_dir: Path,
        report_dir: Optional[Path] = None,
    ):
        """
        Initialize processor.

        Args:
            results_dir: Allure results directory
            report_dir: Output report directory
        """
        self.results_dir = Path(results_dir)
        self.report_dir = Path(report_dir or self.results_dir.parent / "allure-report")

    def parse_results(self) -> List[Dict[str, Any]]:
        """
        Parse Allure result files.

        Returns:
            List of test result dictionaries
        """
        results = []

        for result_file in self.results_dir.glob("*-result.json"):
            try:
                with open(result_file, encoding="utf-8") as f:
                    results.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to parse {result_file}: {e}")

        return results

    def generate_summary(self) -> TestResultSummary:
        """
        Generate summary from results.

        Returns:
            TestResultSummary object
        """
        results = self.parse_results()
        summary = TestResultSummary()
        summary.total = len(results)

        for result in results:
            status = result.get("status", "unknown")
            if status == "passed":
                summary.passed += 1
            elif status == "failed":
                summary.failed += 1
            elif status == "broken":
                summary.broken += 1
            elif status == "skipped":
                summary.skipped += 1
            else:
                summary.unknown += 1

            summary.duration_ms += result.get("stop", 0) - result.get("start", 0)

        return summary

    def copy_history(self):
        """Copy history from previous report to results."""
        history_source = self.report_dir / "history"
        history_dest = self.results_dir / "history"

        if history_source.exists():
            if history_dest.exists():
                shutil.rmtree(history_dest)
            shutil.copytree(history_source, history_dest)
            logger.info("Copied history from previous report")

    def generate_report(self) -> bool:
        """
        Generate Allure HTML report.

        Returns:
            True if successful
        """
        try:
            self.copy_history()

            cmd = [
                "allure", "generate",
                str(self.results_dir),
                "-o", str(self.report_dir),
                "--clean"
            ]

            result = subprocess.run(cmd, capture_output=True, text=True)

            if result.returncode == 0:
                logger.info(f"Report generated at {self.report_dir}")
                return True
            logger.error(f"Report generation failed: {result.stderr}")
            return False

        except FileNotFoundError:
            logger.error("Allure command not found. Install allure-commandline.")
            return False


__all__ = [
    "AllureReportProcessor",
    "AllureReportSink",
    "ReportEntry",
    "ReportSink",
    "TestResultSummary",
]
