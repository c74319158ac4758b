"""Exceptions raised by eventtrace."""

from __future__ import annotations


class EventTraceError(RuntimeError):
    """Base class for errors reported to the user."""


class SourceParseError(EventTraceError):
    """The front end could not produce a syntax tree for an entry file."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot parse {path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigError(EventTraceError):
    """Configuration file is missing, malformed or fails validation."""
