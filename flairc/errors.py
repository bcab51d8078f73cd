# flairc/errors.py
"""
Error taxonomy for a compile batch.

• ConfigurationError          – fatal for the whole batch (theme, grammar).
• UnsupportedStyleDefinition  – local to one call site; becomes a Diagnostic.
• IdentifierCollision         – internal invariant broken; fatal for one file.
• UnreadableSource            – input missing or not UTF-8; fatal for one file.

Classification ambiguity never raises: it resolves to Dynamic.
"""

from __future__ import annotations


class FlairError(Exception):
    """Base class for every error raised by flairc."""


class ConfigurationError(FlairError):
    """The batch cannot run: theme source missing/broken or no parser."""


class UnsupportedStyleDefinition(FlairError):
    """A style-definition call whose shape the scanner cannot handle."""

    code = "unsupported-style-definition"

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class IdentifierCollision(FlairError, AssertionError):
    """Two dynamic interpolations of one file produced the same token."""


class UnreadableSource(FlairError):
    """An input file that cannot be read or is not valid UTF-8."""
