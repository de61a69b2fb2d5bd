"""Checks over the lines added by the pending commit."""
import re
from typing import Sequence

from ..config import CheckConfig
from ..models import Finding
from .base import PatternCheck, file_count, occurrence_total


class ConflictMarkerCheck(PatternCheck):
    """Leftover merge conflict markers."""

    name = "conflict_markers"
    title = "Merge conflict markers"
    noun = "conflict marker(s)"
    default_patterns = (r"^<{7}(?:\s.*)?$", r"^={7}$", r"^>{7}(?:\s.*)?$")

    def summarize(self, findings: Sequence[Finding], config: CheckConfig) -> str:
        return f"Found merge conflict markers in {file_count(findings)} file(s)"


class DebugStatementCheck(PatternCheck):
    name = "debug_statements"
    title = "Debug statements"
    noun = "debug statement(s)"

    def summarize(self, findings: Sequence[Finding], config: CheckConfig) -> str:
        return (
            f"Found {occurrence_total(findings)} debug statement(s) "
            f"in {file_count(findings)} file(s)"
        )


class TodoCommentCheck(PatternCheck):
    """TODO/FIXME markers introduced by this commit.

    Only added lines are scanned, so markers already in the file are never
    counted again.
    """

    name = "todo_comments"
    title = "TODO/FIXME comments"
    noun = "TODO/FIXME comment(s)"

    def summarize(self, findings: Sequence[Finding], config: CheckConfig) -> str:
        return (
            f"Found {occurrence_total(findings)} new TODO/FIXME comment(s) "
            f"in {file_count(findings)} file(s)"
        )


class SensitiveDataCheck(PatternCheck):
    """Credentials and keys; offending lines are kept for review."""

    name = "sensitive_data"
    title = "Sensitive data"
    noun = "potential secret(s)"
    flags = re.IGNORECASE
    include_lines = True

    def summarize(self, findings: Sequence[Finding], config: CheckConfig) -> str:
        return (
            f"Found {occurrence_total(findings)} potential secret(s) "
            f"in {file_count(findings)} file(s)"
        )


class TrailingWhitespaceCheck(PatternCheck):
    name = "trailing_whitespace"
    title = "Trailing whitespace"
    noun = "line(s) with trailing whitespace"
    default_patterns = (r"[ \t]+$",)

    def summarize(self, findings: Sequence[Finding], config: CheckConfig) -> str:
        return (
            f"Found {occurrence_total(findings)} line(s) with trailing whitespace "
            f"in {file_count(findings)} file(s)"
        )
