"""Terminal rendering of pipeline results.

The text layout is stable per check name so other tooling can parse it:
one summary line per check that ran, file details under failing checks and
a closing banner.
"""
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .checks import Check, checks_by_name
from .config import Config
from .models import Finding, PipelineKind, RunResult
from .runner import PROTECTED_BRANCH_CHECK

PASS_ICON = "[green]✓[/green]"
ADVISORY_ICON = "[yellow]⚠[/yellow]"
BLOCKING_ICON = "[red]✗[/red]"


def _icon(findings: List[Finding]) -> str:
    if any(finding.is_blocking for finding in findings):
        return BLOCKING_ICON
    if findings:
        return ADVISORY_ICON
    return PASS_ICON


def _detail(finding: Finding) -> str:
    line = f" (first at line {finding.line_number})" if finding.line_number else ""
    return f"{finding.file_path}: {finding.message}{line}"


class ReportRenderer:
    """Renders RunResults with rich."""

    def __init__(self, console: Optional[Console] = None, checks: Optional[List[Check]] = None):
        self.console = console or Console(soft_wrap=True)
        self.checks: Dict[str, Check] = checks_by_name(checks)

    def render(self, result: RunResult, config: Config) -> None:
        if result.pipeline is PipelineKind.PRE_COMMIT:
            self.render_pre_commit(result, config)
        else:
            self.render_commit_msg(result, config)

    def render_pre_commit(self, result: RunResult, config: Config) -> None:
        self.console.print("[bold blue]Running pre-commit checks...[/bold blue]")

        for name in result.checks_run:
            findings = [finding for finding in result.findings if finding.check_name == name]
            self._render_group(name, findings, config)

        if result.has_blocking:
            self._banner(f"❌ Commit blocked: {len(result.blocking)} blocking issue(s)", "red")
        elif result.findings:
            self._banner(
                f"⚠ Commit allowed with {len(result.advisory)} warning(s)", "yellow"
            )
        else:
            self._banner("✅ All pre-commit checks passed", "green")

    def _render_group(self, name: str, findings: List[Finding], config: Config) -> None:
        check = self.checks.get(name)
        title = check.title if check else name.replace("_", " ").capitalize()
        icon = _icon(findings)

        if name == PROTECTED_BRANCH_CHECK:
            for finding in findings:
                self.console.print(f"{icon} {escape(finding.message)}")
            return

        if not findings:
            self.console.print(f"{icon} {escape(title)}")
            return

        file_findings = [finding for finding in findings if finding.file_path]
        other_findings = [finding for finding in findings if not finding.file_path]

        if file_findings and check is not None:
            summary = check.summarize(file_findings, config.pre_commit.check(name))
        elif file_findings:
            summary = f"{len(file_findings)} file(s)"
        else:
            summary = other_findings[0].message
        self.console.print(f"{icon} {escape(title)}: {escape(summary)}")

        for finding in file_findings:
            self.console.print(f"    {escape(_detail(finding))}")
            for detail in finding.details:
                self.console.print(f"      [dim]{escape(detail)}[/dim]")
        if file_findings:
            for finding in other_findings:
                self.console.print(f"    {escape(finding.message)}")

    def render_commit_msg(self, result: RunResult, config: Config) -> None:
        if result.skipped_reason:
            self.console.print(
                f"{PASS_ICON} Skipping commit message validation ({escape(result.skipped_reason)})"
            )
            return

        if result.has_blocking:
            for finding in result.blocking:
                self.console.print(f"{BLOCKING_ICON} {escape(finding.message)}")
            if result.expected_format:
                self.console.print(f"\nExpected format: [bold]{escape(result.expected_format)}[/bold]")
            if config.commit_msg.require_type:
                self.console.print(
                    f"Allowed types: {escape(', '.join(config.commit_msg.allowed_types))}"
                )
            self._banner("❌ Commit message rejected", "red")
            return

        self.console.print(f"{PASS_ICON} Commit message format is valid")
        parsed = result.parsed_message
        if parsed is not None:
            self.console.print(f"    Ticket:  {escape(parsed.ticket or '-')}")
            if parsed.type is not None:
                self.console.print(f"    Type:    {escape(parsed.type)}")
            self.console.print(f"    Subject: {escape(parsed.subject)}")

        for finding in result.advisory:
            self.console.print(f"{ADVISORY_ICON} {escape(finding.message)}")

    def _banner(self, text: str, style: str) -> None:
        self.console.print(Panel(text, style=style, expand=False))
