"""Configuration management for commitgate."""
import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from rich.console import Console
from rich.markup import escape

DEFAULT_CONFIG_FILENAME = ".githooks-config.json"

DEFAULT_ALLOWED_TYPES = [
    "feat",
    "fix",
    "hotfix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "chore",
    "build",
    "ci",
    "revert",
    "security",
]

DEFAULT_PROTECTED_BRANCHES = ["develop", "master", "micro-qa", "micro-qa-adhoc"]

DEFAULT_MAX_SIZE_BYTES = 5 * 1024 * 1024

DEFAULT_CHECK_SETTINGS: Dict[str, Dict[str, Any]] = {
    "conflict_markers": {"enabled": True, "blocking": True},
    "debug_statements": {
        "enabled": True,
        "blocking": False,
        "patterns": [
            r"console\.log\(",
            r"\bdebugger\b",
            r"\bprint\(",
            r"pdb\.set_trace\(\)",
            r"\bbreakpoint\(\)",
            r"var_dump\(",
            r"System\.out\.println\(",
        ],
    },
    "todo_comments": {
        "enabled": True,
        "blocking": False,
        "patterns": [r"\bTODO\b", r"\bFIXME\b", r"\bXXX\b", r"\bHACK\b"],
    },
    "large_files": {
        "enabled": True,
        "blocking": False,
        "max_size_bytes": DEFAULT_MAX_SIZE_BYTES,
    },
    "sensitive_data": {
        "enabled": True,
        "blocking": False,
        "patterns": [
            r"passw(?:or)?d\s*[=:]\s*\S+",
            r"secret(?:_key)?\s*[=:]\s*\S+",
            r"api[_-]?key\s*[=:]\s*\S+",
            r"(?:access|auth)[_-]?token\s*[=:]\s*\S+",
            r"-----BEGIN [A-Z ]*PRIVATE KEY-----",
            r"AKIA[0-9A-Z]{16}",
        ],
    },
    "empty_files": {"enabled": True, "blocking": False},
    "trailing_whitespace": {"enabled": True, "blocking": False},
}

ENV_MAPPING = {
    "GITHOOKS_JIRA_PROJECT": "jira_project",
    "GITHOOKS_LOG_FILE": "log_file",
}

_warning_console = Console(stderr=True, soft_wrap=True)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _warn(console: Optional[Console], message: str) -> None:
    (console or _warning_console).print(f"[yellow]Warning: {escape(message)}[/yellow]")


def _describe(error: ValidationError) -> str:
    """Flatten a pydantic error into a single warning line."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(parts)


def _sanitize_string(value: str) -> str:
    """Sanitize string values to prevent injection attacks."""
    if not value:
        return value

    # Remove control characters and null bytes
    value = re.sub(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]', '', value)

    # Remove command injection patterns and split on them
    value = re.split(r'[;&|`$()]', value)[0]

    if len(value) > 1000:
        value = value[:1000]

    return value.strip()


def _is_safe_path(path: str) -> bool:
    """Check if a path is safe (relative, no path traversal)."""
    if not path:
        return False

    if '..' in path or path.startswith('/') or '\\' in path:
        return False

    if os.path.isabs(path):
        return False

    return True


class CheckConfig(BaseModel):
    """Per-check settings from the ``pre-commit.checks`` section."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = Field(default=True, description="Whether the check runs at all")
    blocking: bool = Field(
        default=False, description="Whether findings of this check abort the commit"
    )
    patterns: Optional[List[str]] = Field(
        default=None, description="Regular expressions matched against added lines"
    )
    max_size_bytes: Optional[int] = Field(
        default=None, gt=0, description="Size limit used by the large file check"
    )

    @field_validator("patterns")
    @classmethod
    def _patterns_compile(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid regular expression {pattern!r}: {e}")
        return value


class CommitMsgConfig(BaseModel):
    """Settings from the ``commit-msg`` section."""

    model_config = ConfigDict(extra="ignore")

    jira_project: str = Field(
        default="CDE", description="Jira project key every commit must reference"
    )
    min_message_length: int = Field(
        default=10, gt=0, description="Minimum subject length after ticket and type"
    )
    max_subject_length: int = Field(
        default=72, gt=0, description="Subject length above which a warning is shown"
    )
    require_type: bool = Field(
        default=True, description="Whether a commit type must follow the ticket"
    )
    allowed_types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_TYPES),
        description="Accepted commit types, in display order",
    )

    @field_validator("jira_project")
    @classmethod
    def _project_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("jira_project must not be empty")
        return value

    @field_validator("allowed_types")
    @classmethod
    def _normalize_types(cls, value: List[str]) -> List[str]:
        seen: List[str] = []
        for commit_type in value:
            commit_type = commit_type.strip().lower()
            if commit_type and commit_type not in seen:
                seen.append(commit_type)
        return seen

    @model_validator(mode="after")
    def _types_present(self) -> "CommitMsgConfig":
        if self.require_type and not self.allowed_types:
            raise ValueError("allowed_types must not be empty when require_type is true")
        return self


def default_checks() -> Dict[str, CheckConfig]:
    return {
        name: CheckConfig(**settings)
        for name, settings in DEFAULT_CHECK_SETTINGS.items()
    }


class PreCommitConfig(BaseModel):
    """Settings from the ``pre-commit`` section."""

    model_config = ConfigDict(extra="ignore")

    protected_branches: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES),
        description="Branches that may not receive direct commits",
    )
    checks: Dict[str, CheckConfig] = Field(default_factory=default_checks)

    @field_validator("protected_branches")
    @classmethod
    def _dedupe_branches(cls, value: List[str]) -> List[str]:
        branches: List[str] = []
        for branch in value:
            branch = branch.strip()
            if branch and branch not in branches:
                branches.append(branch)
        return branches

    def check(self, name: str) -> CheckConfig:
        """Settings for ``name``, falling back to the built-in defaults."""
        if name in self.checks:
            return self.checks[name]
        return CheckConfig(**DEFAULT_CHECK_SETTINGS.get(name, {}))

    @classmethod
    def from_section(cls, section: Any, console: Optional[Console] = None) -> "PreCommitConfig":
        """Merge a raw ``pre-commit`` section over the defaults.

        Each ``checks.<name>`` entry is merged over that check's defaults and
        validated on its own, so one bad entry only resets that check.
        """
        if section is None:
            return cls()
        if not isinstance(section, dict):
            _warn(console, "'pre-commit' section must be an object, using defaults")
            return cls()

        base = _load_section(
            cls,
            {k: v for k, v in section.items() if k != "checks"},
            "pre-commit",
            console,
        )

        checks = default_checks()
        raw_checks = section.get("checks", {})
        if not isinstance(raw_checks, dict):
            _warn(console, "'pre-commit.checks' must be an object, using default checks")
            raw_checks = {}

        for name, entry in raw_checks.items():
            if name not in checks:
                continue
            if not isinstance(entry, dict):
                _warn(console, f"Settings for check '{name}' must be an object, using defaults")
                continue
            merged = {**checks[name].model_dump(exclude_none=True), **entry}
            try:
                checks[name] = CheckConfig.model_validate(merged)
            except ValidationError as e:
                _warn(console, f"Invalid settings for check '{name}' ({_describe(e)}), using defaults")

        return cls(protected_branches=base.protected_branches, checks=checks)


def _load_section(
    model: Type[ModelT], raw: Any, name: str, console: Optional[Console]
) -> ModelT:
    if raw is None:
        return model()
    if not isinstance(raw, dict):
        _warn(console, f"'{name}' section must be an object, using defaults")
        return model()
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        _warn(console, f"Invalid '{name}' section ({_describe(e)}), using defaults")
        return model()


class Config(BaseModel):
    """Policy settings for both hooks.

    Loaded from ``.githooks-config.json`` at the repository root. Every key
    is optional; anything missing or invalid falls back to the defaults.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    commit_msg: CommitMsgConfig = Field(
        default_factory=CommitMsgConfig, alias="commit-msg"
    )
    pre_commit: PreCommitConfig = Field(
        default_factory=PreCommitConfig, alias="pre-commit"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Relative path of a file that receives a line per hook run",
    )
    source: Optional[str] = Field(
        default=None,
        exclude=True,
        description="File the configuration was read from, None for defaults",
    )

    @classmethod
    def load(cls, path: Path, console: Optional[Console] = None) -> "Config":
        """Load configuration from a file or a directory holding one.

        Never raises: a missing, unreadable or malformed file produces a
        warning and the built-in defaults.

        Args:
            path: Config file, or directory containing ``.githooks-config.json``
            console: Console receiving warnings (stderr by default)

        Returns:
            Config: Configuration with file values merged over defaults
        """
        config_path = Path(path)
        if config_path.is_dir():
            config_path = config_path / DEFAULT_CONFIG_FILENAME

        if not config_path.exists():
            _warn(console, f"No configuration file found at {config_path}, using defaults")
            config = cls()
        else:
            try:
                with config_path.open("r", encoding="utf-8") as f:
                    document = json.load(f)
            except (OSError, ValueError) as e:
                _warn(console, f"Error reading config file {config_path}: {e}")
                config = cls()
            else:
                config = cls.from_document(document, console)
                config.source = str(config_path)

        config._apply_environment(console)
        return config

    @classmethod
    def from_document(cls, document: Any, console: Optional[Console] = None) -> "Config":
        """Build a configuration from an already parsed JSON document."""
        if not isinstance(document, dict):
            _warn(console, "Configuration root must be an object, using defaults")
            return cls()

        log_file = document.get("log_file")
        if log_file is not None and not (isinstance(log_file, str) and _is_safe_path(log_file)):
            _warn(console, f"Unsafe log file path '{log_file}', logging to file disabled")
            log_file = None

        return cls(
            commit_msg=_load_section(
                CommitMsgConfig, document.get("commit-msg"), "commit-msg", console
            ),
            pre_commit=PreCommitConfig.from_section(document.get("pre-commit"), console),
            log_file=log_file,
        )

    def _apply_environment(self, console: Optional[Console] = None) -> None:
        for env_var, field_name in ENV_MAPPING.items():
            if env_var not in os.environ:
                continue
            value = _sanitize_string(os.environ[env_var])
            if not value:
                continue

            if field_name == "jira_project":
                self.commit_msg = self.commit_msg.model_copy(update={"jira_project": value})
            elif field_name == "log_file":
                if _is_safe_path(value):
                    self.log_file = value
                else:
                    _warn(console, f"Unsafe log file path '{value}' in {env_var}, ignoring")

    def to_document(self) -> Dict[str, Any]:
        """The configuration as it would be written to the JSON file."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def save(self, path: Path) -> Path:
        """Write the configuration as JSON.

        Args:
            path: Target file, or directory receiving ``.githooks-config.json``

        Returns:
            Path: The file written
        """
        config_path = Path(path)
        if config_path.is_dir():
            config_path = config_path / DEFAULT_CONFIG_FILENAME

        with config_path.open("w", encoding="utf-8") as f:
            json.dump(self.to_document(), f, indent=2)
            f.write("\n")
        return config_path

    def get_log_file(self, repo_root: Optional[Path] = None) -> Optional[Path]:
        """Get the path to the run log file, or None if file logging is off."""
        if not self.log_file or not _is_safe_path(self.log_file):
            return None
        if repo_root is not None:
            return Path(repo_root) / self.log_file
        return Path(self.log_file)
