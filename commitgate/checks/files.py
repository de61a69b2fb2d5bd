"""Checks over staged file metadata."""
from typing import List, Sequence

from ..config import DEFAULT_MAX_SIZE_BYTES, CheckConfig
from ..models import ChangeSet, FileStatus, Finding
from .base import Check, file_count


def format_size(size_bytes: int) -> str:
    """Render a byte count the way ``ls -h`` would."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


class LargeFileCheck(Check):
    name = "large_files"
    title = "Large files"

    def limit(self, config: CheckConfig) -> int:
        return config.max_size_bytes or DEFAULT_MAX_SIZE_BYTES

    def evaluate(self, changeset: ChangeSet, config: CheckConfig) -> List[Finding]:
        limit = self.limit(config)
        return [
            Finding(
                check_name=self.name,
                severity=self.severity(config),
                file_path=staged.path,
                message=f"{format_size(staged.size_bytes)} exceeds {format_size(limit)}",
            )
            for staged in changeset
            if staged.status is not FileStatus.DELETED
            and not staged.is_submodule
            and staged.size_bytes > limit
        ]

    def summarize(self, findings: Sequence[Finding], config: CheckConfig) -> str:
        return (
            f"Found {file_count(findings)} file(s) larger than "
            f"{format_size(self.limit(config))}"
        )


class EmptyFileCheck(Check):
    name = "empty_files"
    title = "Empty files"

    def evaluate(self, changeset: ChangeSet, config: CheckConfig) -> List[Finding]:
        return [
            Finding(
                check_name=self.name,
                severity=self.severity(config),
                file_path=staged.path,
                message=f"empty file ({staged.status.value})",
            )
            for staged in changeset
            if staged.status in (FileStatus.ADDED, FileStatus.MODIFIED)
            and not staged.is_submodule
            and staged.size_bytes == 0
        ]

    def summarize(self, findings: Sequence[Finding], config: CheckConfig) -> str:
        return f"Found {file_count(findings)} empty file(s)"
