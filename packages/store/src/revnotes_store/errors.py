"""Errors raised by annotation store backends."""

from __future__ import annotations


class GitError(Exception):
    """A git invocation failed or could not be started."""


class NotesParseError(ValueError):
    """Output of a batch git command did not match the expected format."""
