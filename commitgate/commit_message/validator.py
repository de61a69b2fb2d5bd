"""Commit message validation."""
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import CommitMsgConfig
from ..models import Finding, ParsedMessage
from .parser import MessageParser, is_merge_message
from .validation import create_subject_rules, create_validation_chain


@dataclass
class MessageValidation:
    parsed: Optional[ParsedMessage] = None
    findings: List[Finding] = field(default_factory=list)
    is_merge: bool = False

    @property
    def passed(self) -> bool:
        return not any(finding.is_blocking for finding in self.findings)


class CommitMessageValidator:
    """Validates commit messages against the configured ticket grammar."""

    def __init__(self, config: CommitMsgConfig):
        self.config = config
        self.parser = MessageParser(config)
        self.validation_chain = create_validation_chain(config)
        self.subject_rules = create_subject_rules(config)

    @property
    def expected_format(self) -> str:
        return self.parser.expected_format

    def validate(self, message: str) -> MessageValidation:
        """Validate a raw commit message.

        Merge commits pass untouched. Otherwise the first structural failure
        is returned on its own; a structurally valid message is parsed and
        checked against the advisory subject rules.
        """
        if is_merge_message(message):
            return MessageValidation(is_merge=True)

        header = self.parser.split(message)
        failure = self.validation_chain.handle(header)
        if failure is not None:
            return MessageValidation(findings=[failure])

        findings = []
        for rule in self.subject_rules:
            finding = rule.check(header.subject)
            if finding is not None:
                findings.append(finding)

        return MessageValidation(parsed=self.parser.parse(message), findings=findings)
