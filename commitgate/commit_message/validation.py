"""Commit message validation using Chain of Responsibility pattern.

Structural handlers stop at the first failure, since later fields cannot be
extracted from a message without a valid prefix. Style rules run after a
message passed the chain and only ever produce advisory findings.
"""
import re
from abc import ABC, abstractmethod
from typing import List, Optional

from ..config import CommitMsgConfig
from ..models import Finding, Severity
from .parser import MessageHeader

NON_IMPERATIVE_EXCEPTIONS = {"bring", "embed", "spring", "string", "swing"}


def _blocking(check_name: str, message: str) -> Finding:
    return Finding(check_name=check_name, severity=Severity.BLOCKING, message=message)


def _advisory(check_name: str, message: str) -> Finding:
    return Finding(check_name=check_name, severity=Severity.ADVISORY, message=message)


class ValidationHandler(ABC):
    """Abstract base class for validation handlers."""

    def __init__(self, next_handler: Optional['ValidationHandler'] = None):
        self.next_handler = next_handler

    def handle(self, header: MessageHeader) -> Optional[Finding]:
        """Handle validation and pass to next handler if valid."""
        finding = self.validate(header)
        if finding is not None or not self.next_handler:
            return finding
        return self.next_handler.handle(header)

    @abstractmethod
    def validate(self, header: MessageHeader) -> Optional[Finding]:
        """Validate the commit header, returning a blocking finding on failure."""
        pass


class TicketHandler(ValidationHandler):
    """Validates the ``<PROJECT>-<number>:`` prefix."""

    def __init__(self, jira_project: str, next_handler: Optional[ValidationHandler] = None):
        super().__init__(next_handler)
        self.jira_project = jira_project

    def validate(self, header: MessageHeader) -> Optional[Finding]:
        if header.ticket is None:
            return _blocking(
                "missing_ticket",
                f"Missing Jira ticket: message must start with '{self.jira_project}-<number>:'",
            )
        return None


class TypeHandler(ValidationHandler):
    """Validates the commit type following the ticket."""

    def __init__(self, allowed_types: List[str], next_handler: Optional[ValidationHandler] = None):
        super().__init__(next_handler)
        self.allowed_types = allowed_types

    def validate(self, header: MessageHeader) -> Optional[Finding]:
        if header.type_token is None:
            return _blocking("missing_type", f"Missing commit type after ticket {header.ticket}")
        if header.type_token not in self.allowed_types:
            return _blocking("invalid_type", f"Invalid type '{header.type_token}'")
        return None


class SubjectLengthHandler(ValidationHandler):
    """Validates the minimum subject length."""

    def __init__(self, min_length: int, next_handler: Optional[ValidationHandler] = None):
        super().__init__(next_handler)
        self.min_length = min_length

    def validate(self, header: MessageHeader) -> Optional[Finding]:
        actual = len(header.subject.strip())
        if actual < self.min_length:
            return _blocking(
                "subject_too_short",
                f"Subject too short: {actual} character(s), at least {self.min_length} required",
            )
        return None


class SubjectRule(ABC):
    """Advisory style rule applied to a valid subject."""

    @abstractmethod
    def check(self, subject: str) -> Optional[Finding]:
        pass


class SubjectMaxLengthRule(SubjectRule):
    def __init__(self, max_length: int):
        self.max_length = max_length

    def check(self, subject: str) -> Optional[Finding]:
        if len(subject) > self.max_length:
            return _advisory(
                "subject_length",
                f"Subject line too long ({len(subject)} > {self.max_length})",
            )
        return None


class CapitalizationRule(SubjectRule):
    def check(self, subject: str) -> Optional[Finding]:
        if subject[:1].islower():
            return _advisory("subject_capitalization", "Subject should start with a capital letter")
        return None


class SubjectPeriodRule(SubjectRule):
    def check(self, subject: str) -> Optional[Finding]:
        if subject.endswith('.'):
            return _advisory("subject_period", "Subject line should not end with a period")
        return None


class ImperativeMoodRule(SubjectRule):
    """Best-effort imperative mood check on the first word.

    Flags ``-ing`` and ``-ed`` forms ("Added", "Fixing"); anything else is
    accepted.
    """

    def check(self, subject: str) -> Optional[Finding]:
        words = subject.split()
        if not words:
            return None
        word = re.sub(r"[^A-Za-z]", "", words[0]).lower()
        if len(word) <= 4 or word in NON_IMPERATIVE_EXCEPTIONS or word.endswith("eed"):
            return None
        if word.endswith("ing") or word.endswith("ed"):
            return _advisory(
                "imperative_mood",
                f"Use the imperative mood (e.g. 'Add' instead of '{words[0]}')",
            )
        return None


def create_validation_chain(config: CommitMsgConfig) -> ValidationHandler:
    """Create the structural validation chain for ``config``."""
    subject_length = SubjectLengthHandler(config.min_message_length)
    first_after_ticket: ValidationHandler = subject_length
    if config.require_type:
        first_after_ticket = TypeHandler(config.allowed_types, subject_length)
    return TicketHandler(config.jira_project, first_after_ticket)


def create_subject_rules(config: CommitMsgConfig) -> List[SubjectRule]:
    return [
        SubjectMaxLengthRule(config.max_subject_length),
        CapitalizationRule(),
        SubjectPeriodRule(),
        ImperativeMoodRule(),
    ]
