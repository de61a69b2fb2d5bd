"""Pipeline runner for the pre-commit and commit-msg hooks."""
from dataclasses import dataclass
from typing import List, Optional, Union

from .checks import DEFAULT_CHECKS, Check
from .commit_message import CommitMessageValidator
from .config import Config
from .models import ChangeSet, Finding, PipelineKind, RunResult, Severity
from .observers import RunObserver

PROTECTED_BRANCH_CHECK = "protected_branch"


@dataclass
class PreCommitInputs:
    changeset: ChangeSet
    branch: Optional[str] = None


class PipelineRunner:
    """Runs a pipeline and aggregates its findings into a RunResult.

    The pre-commit pipeline runs every enabled check before deciding about
    blocking, so one pass shows every problem. Only a protected branch
    short-circuits it. The commit-msg pipeline stops at the first structural
    failure.

    Attributes:
        checks (List[Check]): Checks in execution order
        observers (List[RunObserver]): Observers notified during runs
    """

    def __init__(self, checks: Optional[List[Check]] = None):
        self.checks = list(checks) if checks is not None else list(DEFAULT_CHECKS)
        self.observers: List[RunObserver] = []

    def add_observer(self, observer: RunObserver) -> None:
        self.observers.append(observer)

    def remove_observer(self, observer: RunObserver) -> None:
        self.observers.remove(observer)

    def _notify_check(self, check_name: str, findings: List[Finding]) -> None:
        for observer in self.observers:
            observer.on_check_completed(check_name, findings)

    def _finish(self, result: RunResult) -> RunResult:
        for observer in self.observers:
            observer.on_run_completed(result)
        return result

    def run(
        self,
        kind: PipelineKind,
        inputs: Union[PreCommitInputs, str],
        config: Config,
    ) -> RunResult:
        """Run one pipeline.

        Args:
            kind: Which hook is being served
            inputs: ``PreCommitInputs`` for pre-commit, the raw message for commit-msg
            config: Loaded configuration

        Returns:
            RunResult: Aggregated findings; ``exit_code`` is the hook status
        """
        if kind is PipelineKind.PRE_COMMIT:
            if not isinstance(inputs, PreCommitInputs):
                raise TypeError("pre-commit pipeline expects PreCommitInputs")
            return self.run_pre_commit(inputs.changeset, inputs.branch, config)

        if not isinstance(inputs, str):
            raise TypeError("commit-msg pipeline expects the raw message")
        return self.run_commit_msg(inputs, config)

    def run_pre_commit(
        self, changeset: ChangeSet, branch: Optional[str], config: Config
    ) -> RunResult:
        if branch is not None and branch in config.pre_commit.protected_branches:
            finding = Finding(
                check_name=PROTECTED_BRANCH_CHECK,
                severity=Severity.BLOCKING,
                message=(
                    f"Direct commits to '{branch}' are not allowed. "
                    f"Create a feature branch first: git checkout -b feature/<ticket>-<description>"
                ),
            )
            self._notify_check(PROTECTED_BRANCH_CHECK, [finding])
            return self._finish(RunResult(
                pipeline=PipelineKind.PRE_COMMIT,
                findings=[finding],
                checks_run=[PROTECTED_BRANCH_CHECK],
            ))

        findings: List[Finding] = []
        checks_run: List[str] = []
        for check in self.checks:
            check_config = config.pre_commit.check(check.name)
            if not check_config.enabled:
                continue

            try:
                check_findings = check.evaluate(changeset, check_config)
            except Exception as e:
                check_findings = [Finding(
                    check_name=check.name,
                    severity=Severity.ADVISORY,
                    message=f"check failed to run: {e}",
                )]

            checks_run.append(check.name)
            findings.extend(check_findings)
            self._notify_check(check.name, check_findings)

        return self._finish(RunResult(
            pipeline=PipelineKind.PRE_COMMIT,
            findings=findings,
            checks_run=checks_run,
        ))

    def run_commit_msg(self, message: str, config: Config) -> RunResult:
        validator = CommitMessageValidator(config.commit_msg)
        validation = validator.validate(message)

        if validation.is_merge:
            return self._finish(RunResult(
                pipeline=PipelineKind.COMMIT_MSG,
                skipped_reason="merge commit",
            ))

        self._notify_check("commit_message", validation.findings)
        return self._finish(RunResult(
            pipeline=PipelineKind.COMMIT_MSG,
            findings=validation.findings,
            checks_run=["commit_message"],
            parsed_message=validation.parsed,
            expected_format=validator.expected_format,
        ))
