"""Commit message parsing."""
import re
from dataclasses import dataclass
from typing import List, Optional

from ..config import CommitMsgConfig
from ..models import ParsedMessage

SCISSORS_LINE = re.compile(r"^# -+ >8 -+$")

MERGE_MESSAGE = re.compile(
    r"^Merge (?:(?:remote-tracking )?branch(?:es)?|pull request|tag|commit) "
)

TYPE_SEGMENT = re.compile(r"^(?P<type>[^\s:]+):\s*(?P<subject>.*)$")


def clean_lines(raw: str) -> List[str]:
    """Message lines as Git would record them with ``--cleanup=scissors``."""
    lines = []
    for line in raw.splitlines():
        if SCISSORS_LINE.match(line):
            break
        if line.startswith("#"):
            continue
        lines.append(line)
    return lines


def header_line(raw: str) -> str:
    """First non-blank line of the cleaned message."""
    for line in clean_lines(raw):
        if line.strip():
            return line.strip()
    return ""


def is_merge_message(raw: str) -> bool:
    return bool(MERGE_MESSAGE.match(header_line(raw)))


@dataclass(frozen=True)
class MessageHeader:
    """Pieces of a commit header line.

    Attributes:
        header: The header line itself
        ticket: Ticket id, None when the prefix is missing
        type_token: Token before the second colon, None when there is none
        commit_type: ``type_token`` if it counts as the commit type
        subject: Text after the ticket and, if present, the commit type
    """

    header: str
    ticket: Optional[str] = None
    type_token: Optional[str] = None
    commit_type: Optional[str] = None
    subject: str = ""


class MessageParser:
    """Splits commit messages according to the configured grammar.

    With ``require_type`` the grammar is ``<PROJECT>-<n>: <type>: <subject>``
    and any leading ``<token>:`` is taken as the type, valid or not. Without
    it the grammar is ``<PROJECT>-<n>: <subject>`` and a leading token is
    only split off when it is one of the allowed types.
    """

    def __init__(self, config: CommitMsgConfig):
        self.config = config
        self.ticket_pattern = re.compile(
            rf"^(?P<ticket>{re.escape(config.jira_project)}-\d+):\s*(?P<rest>.*)$"
        )

    @property
    def expected_format(self) -> str:
        if self.config.require_type:
            return f"{self.config.jira_project}-<number>: <type>: <subject>"
        return f"{self.config.jira_project}-<number>: <subject>"

    @property
    def example(self) -> str:
        if self.config.require_type:
            return f"{self.config.jira_project}-123: feat: Add user authentication"
        return f"{self.config.jira_project}-123: Add user authentication"

    def split(self, raw: str) -> MessageHeader:
        header = header_line(raw)
        match = self.ticket_pattern.match(header)
        if not match:
            return MessageHeader(header=header, subject=header)

        ticket, rest = match.group("ticket"), match.group("rest")
        type_match = TYPE_SEGMENT.match(rest)
        if not type_match:
            return MessageHeader(header=header, ticket=ticket, subject=rest.strip())

        token = type_match.group("type")
        if self.config.require_type or token in self.config.allowed_types:
            return MessageHeader(
                header=header,
                ticket=ticket,
                type_token=token,
                commit_type=token,
                subject=type_match.group("subject").strip(),
            )
        return MessageHeader(
            header=header, ticket=ticket, type_token=token, subject=rest.strip()
        )

    def parse(self, raw: str) -> ParsedMessage:
        parts = self.split(raw)
        return ParsedMessage(
            raw=raw,
            ticket=parts.ticket,
            type=parts.commit_type,
            subject=parts.subject,
        )
