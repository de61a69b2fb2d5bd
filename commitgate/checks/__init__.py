"""Pre-commit checks.

Checks run in the order of :data:`DEFAULT_CHECKS` so aggregated output is
reproducible. Adding a check means adding a :class:`Check` subclass here and
a default entry in :data:`commitgate.config.DEFAULT_CHECK_SETTINGS`.

Example:
    ```python
    from commitgate.checks import TodoCommentCheck
    from commitgate.config import Config

    config = Config()
    findings = TodoCommentCheck().evaluate(
        changeset, config.pre_commit.check("todo_comments")
    )
    ```
"""

from typing import Dict, List, Optional

from .base import Check, PatternCheck
from .content import (
    ConflictMarkerCheck,
    DebugStatementCheck,
    SensitiveDataCheck,
    TodoCommentCheck,
    TrailingWhitespaceCheck,
)
from .files import EmptyFileCheck, LargeFileCheck, format_size

DEFAULT_CHECKS: List[Check] = [
    ConflictMarkerCheck(),
    DebugStatementCheck(),
    TodoCommentCheck(),
    LargeFileCheck(),
    SensitiveDataCheck(),
    EmptyFileCheck(),
    TrailingWhitespaceCheck(),
]


def checks_by_name(checks: Optional[List[Check]] = None) -> Dict[str, Check]:
    return {check.name: check for check in (checks or DEFAULT_CHECKS)}


__all__ = [
    "Check",
    "PatternCheck",
    "ConflictMarkerCheck",
    "DebugStatementCheck",
    "TodoCommentCheck",
    "LargeFileCheck",
    "SensitiveDataCheck",
    "EmptyFileCheck",
    "TrailingWhitespaceCheck",
    "DEFAULT_CHECKS",
    "checks_by_name",
    "format_size",
]
