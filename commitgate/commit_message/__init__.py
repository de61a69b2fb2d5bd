"""Commit message parsing and validation package."""

from .parser import MessageHeader, MessageParser, is_merge_message
from .validation import ValidationHandler, create_validation_chain
from .validator import CommitMessageValidator, MessageValidation

__all__ = [
    'MessageHeader',
    'MessageParser',
    'is_merge_message',
    'ValidationHandler',
    'create_validation_chain',
    'CommitMessageValidator',
    'MessageValidation',
]
