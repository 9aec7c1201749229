"""
Matcher error hierarchy.

Only FileAccessError is meant to reach a caller; the others are caught
inside the engine and turned into "rule did not match" or "no result".
"""

from __future__ import annotations


class MatcherError(Exception):
    """Base class for all matcher errors."""


class NotInitializedError(MatcherError):
    """The rule configuration store was read before init_matcher()."""

    def __init__(self) -> None:
        super().__init__("matcher configuration not initialized")


class FileAccessError(MatcherError):
    """File metadata or content could not be read."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"Get file meta failed: {path}: {cause}")
        self.path = path
        self.cause = cause


class ExpressionError(MatcherError):
    """Base class for rule expression failures."""


class ExpressionBuildError(ExpressionError):
    """The expression text could not be compiled."""


class ExpressionEvalError(ExpressionError):
    """The compiled expression failed while evaluating against a context."""


class ExpectedBooleanError(ExpressionEvalError):
    """A boolean argument was required but something else was given."""

    def __init__(self, actual: object) -> None:
        super().__init__(f"Expected a Boolean value, but got {actual!r}")
        self.actual = actual
