"""Base classes for pre-commit checks.

Every check shares one shape: it receives the staged change set together
with its own :class:`~commitgate.config.CheckConfig` and returns findings.
Checks never see each other's results and never stop the pipeline; the
runner decides about blocking once all of them have run.
"""

import re
from abc import ABC, abstractmethod
from typing import List, Pattern, Sequence, Tuple

from ..config import CheckConfig
from ..models import AddedLine, ChangeSet, Finding, Severity, StagedFile


def file_count(findings: Sequence[Finding]) -> int:
    return len({finding.file_path for finding in findings if finding.file_path})


def occurrence_total(findings: Sequence[Finding]) -> int:
    return sum(finding.occurrence_count for finding in findings if finding.file_path)


class Check(ABC):
    """Abstract base class for pre-commit checks.

    Attributes:
        name (str): Key of the check in the ``pre-commit.checks`` config
        title (str): Human readable label used in reports
    """

    name: str = ""
    title: str = ""

    def severity(self, config: CheckConfig) -> Severity:
        return Severity.BLOCKING if config.blocking else Severity.ADVISORY

    @abstractmethod
    def evaluate(self, changeset: ChangeSet, config: CheckConfig) -> List[Finding]:
        """Evaluate the staged changes.

        Args:
            changeset: Files staged for the pending commit
            config: Settings for this check

        Returns:
            List[Finding]: At most one finding per offending file
        """
        pass

    @abstractmethod
    def summarize(self, findings: Sequence[Finding], config: CheckConfig) -> str:
        """One-line report summary for this check's file findings."""
        pass


class PatternCheck(Check):
    """Check driven by a list of regular expressions.

    Patterns come from the check's ``patterns`` setting, or from
    ``default_patterns`` when the setting is absent. Each added line is
    matched on its own; a file yields one finding counting its matching lines.
    """

    default_patterns: Tuple[str, ...] = ()
    flags: int = 0
    noun: str = "match(es)"
    include_lines: bool = False

    def compile_patterns(self, config: CheckConfig) -> List[Tuple[str, Pattern]]:
        """Build the ``(label, compiled pattern)`` pairs for a run."""
        sources = config.patterns if config.patterns is not None else self.default_patterns
        return [(source, re.compile(source, self.flags)) for source in sources]

    def matches(self, line: AddedLine, patterns: List[Tuple[str, Pattern]]) -> bool:
        # CRLF files keep their "\r" in the diff text
        text = line.text.rstrip("\r")
        return any(pattern.search(text) for _, pattern in patterns)

    def build_finding(
        self, staged: StagedFile, matched: List[AddedLine], config: CheckConfig
    ) -> Finding:
        details: Tuple[str, ...] = ()
        if self.include_lines:
            details = tuple(f"line {line.line_number}: {line.text.strip()}" for line in matched)
        return Finding(
            check_name=self.name,
            severity=self.severity(config),
            file_path=staged.path,
            line_number=matched[0].line_number,
            message=f"{len(matched)} {self.noun}",
            occurrence_count=len(matched),
            details=details,
        )

    def evaluate(self, changeset: ChangeSet, config: CheckConfig) -> List[Finding]:
        patterns = self.compile_patterns(config)
        if not patterns:
            return []

        findings = []
        for staged in changeset.scannable():
            matched = [line for line in staged.added_lines if self.matches(line, patterns)]
            if matched:
                findings.append(self.build_finding(staged, matched, config))
        return findings
