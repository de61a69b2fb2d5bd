"""Observer pattern for pipeline runs."""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from .models import Finding, RunResult


class RunObserver(ABC):
    """Abstract base class for pipeline run observers."""

    @abstractmethod
    def on_check_completed(self, check_name: str, findings: List[Finding]) -> None:
        """Called after each check or validation step has run."""
        pass

    @abstractmethod
    def on_run_completed(self, result: RunResult) -> None:
        """Called once the run result is final."""
        pass


def describe_outcome(result: RunResult) -> str:
    if result.skipped_reason:
        return f"skipped ({result.skipped_reason})"
    status = "blocked" if result.has_blocking else "passed"
    return (
        f"{status} ({len(result.blocking)} blocking, "
        f"{len(result.advisory)} advisory)"
    )


class ConsoleLogObserver(RunObserver):
    """Observer that traces each check to the console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def on_check_completed(self, check_name: str, findings: List[Finding]) -> None:
        self.console.print(
            f"[dim]{escape(check_name)}: {len(findings)} finding(s)[/dim]"
        )

    def on_run_completed(self, result: RunResult) -> None:
        self.console.print(
            f"[dim]{result.pipeline.value} {describe_outcome(result)}[/dim]"
        )


class FileLogObserver(RunObserver):
    """Observer that appends one line per run to a log file.

    A log file that cannot be written disables file logging with a warning;
    it never fails the hook.
    """

    def __init__(self, log_file: str, console: Optional[Console] = None):
        self.log_file = Path(log_file)
        self.console = console or Console(stderr=True)
        self.enabled = True
        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._disable(e)

    def _disable(self, error: OSError) -> None:
        self.enabled = False
        self.console.print(
            f"[yellow]Warning: cannot write log file {escape(str(self.log_file))}: "
            f"{escape(str(error))}[/yellow]"
        )

    def _log(self, message: str) -> None:
        if not self.enabled:
            return
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        try:
            with self.log_file.open("a", encoding="utf-8") as f:
                f.write(f"{timestamp} - {message}\n")
        except OSError as e:
            self._disable(e)

    def on_check_completed(self, check_name: str, findings: List[Finding]) -> None:
        pass

    def on_run_completed(self, result: RunResult) -> None:
        self._log(f"{result.pipeline.value} {describe_outcome(result)}")
        for finding in result.findings:
            location = f" {finding.file_path}" if finding.file_path else ""
            self._log(
                f"  [{finding.severity.value}] {finding.check_name}{location}: {finding.message}"
            )
