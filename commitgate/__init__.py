"""Commit-quality gate for the pre-commit and commit-msg Git hooks."""

__version__ = "1.0.0"
