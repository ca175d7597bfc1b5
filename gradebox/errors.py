"""
Error types for the GradeBox evaluation engine.

Every recoverable failure is a GradeBoxError and degrades only the score
contribution it belongs to. IntegrityViolation is the single fatal signal
and deliberately sits outside the Exception hierarchy.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class FaultKind(Enum):
    """
    Where a failure surfaced during an evaluation run.

    EXECUTION:  a check predicate raised (contained by the ledger)
    INVOCATION: the check method itself raised (contained by the engine)
    """
    EXECUTION = "check_execution"
    INVOCATION = "check_invocation"


class GradeBoxError(Exception):
    """Base exception for all recoverable engine errors."""
    pass


class ConfigError(GradeBoxError):
    """Error related to configuration loading or values."""
    pass


class LoadError(GradeBoxError):
    """Raised when a named submission class cannot be resolved or imported."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot load '{name}': {reason}")


# Name used for the same condition in the audit vocabulary.
ProbeResolutionError = LoadError


class SourceReadError(GradeBoxError):
    """Raised when a submission source file cannot be read for scanning."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class LogReadError(GradeBoxError):
    """Raised when the static-analysis log is missing or undecodable."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class IntegrityViolation(BaseException):
    """
    A forbidden token was found in submission source.

    Not an Exception subclass: `except Exception` in checks, probes and the
    ledger never contains it. Only the engine's dispatch loop handles it,
    by forcing the grade to zero and terminating the run.
    """

    def __init__(
        self,
        keyword: str,
        line_number: int,
        line: str,
        path: Optional[Path] = None,
    ):
        self.keyword = keyword
        self.line_number = line_number
        self.line = line
        self.path = path
        super().__init__(
            f"forbidden '{keyword}' in {path or '<source>'} line {line_number}"
        )


def describe_exception(exc: BaseException) -> str:
    """Render an exception as `Type: message` for audit lines."""
    message = str(exc)
    if message:
        return f"{type(exc).__name__}: {message}"
    return type(exc).__name__
