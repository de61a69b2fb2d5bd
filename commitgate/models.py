"""Shared models for commitgate."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    BLOCKING = "blocking"
    ADVISORY = "advisory"


class FileStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class PipelineKind(str, Enum):
    PRE_COMMIT = "pre-commit"
    COMMIT_MSG = "commit-msg"


@dataclass(frozen=True)
class AddedLine:
    line_number: int
    text: str


@dataclass
class StagedFile:
    path: str
    status: FileStatus
    size_bytes: int = 0
    added_lines: List[AddedLine] = field(default_factory=list)
    is_binary: bool = False
    is_submodule: bool = False

    @property
    def is_scannable(self) -> bool:
        """Whether the added lines of this file can be pattern-scanned."""
        return (
            not self.is_binary
            and not self.is_submodule
            and self.status is not FileStatus.DELETED
        )


@dataclass
class ChangeSet:
    files: List[StagedFile] = field(default_factory=list)

    def __iter__(self) -> Iterator[StagedFile]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def scannable(self) -> Iterator[StagedFile]:
        return (staged for staged in self.files if staged.is_scannable)


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    check_name: str
    severity: Severity
    message: str
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    occurrence_count: int = 1
    details: Tuple[str, ...] = ()

    @property
    def is_blocking(self) -> bool:
        return self.severity is Severity.BLOCKING


class ParsedMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str
    subject: str
    ticket: Optional[str] = None
    type: Optional[str] = None


class RunResult(BaseModel):
    """Outcome of one pipeline run.

    Built by the runner, rendered once and discarded when the hook exits.
    """

    pipeline: PipelineKind
    findings: List[Finding] = Field(default_factory=list)
    checks_run: List[str] = Field(
        default_factory=list,
        description="Names of the checks that ran, in execution order",
    )
    parsed_message: Optional[ParsedMessage] = None
    expected_format: Optional[str] = None
    skipped_reason: Optional[str] = None

    @property
    def has_blocking(self) -> bool:
        return any(finding.is_blocking for finding in self.findings)

    @property
    def blocking(self) -> List[Finding]:
        return [finding for finding in self.findings if finding.is_blocking]

    @property
    def advisory(self) -> List[Finding]:
        return [finding for finding in self.findings if not finding.is_blocking]

    @property
    def exit_code(self) -> int:
        return 1 if self.has_blocking else 0
