"""
Static-Log Reconciliation for GradeBox.

An external static-analysis tool (flake8, pylint, checkstyle, ...) writes
one finding per line. Each finding that names a watched file and matches
no ignored pattern costs a fixed penalty.

Static analysis is advisory: a missing or unreadable log applies no
penalty and never stops the run.

Reconciliation is NOT idempotent. Running it twice over the same log
applies every penalty twice; an evaluation run calls it exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .errors import LogReadError, describe_exception
from .ledger import ScoreLedger
from .log import get_logger
from .reporting import Reporter

logger = get_logger("reconcile")


@dataclass(frozen=True)
class Violation:
    """
    One penalized finding from the static-analysis log.

    `message` is the line from the watched file's name onward, which
    drops tool-specific prefixes such as absolute paths or `[WARN]`.
    """
    line_number: int
    line: str
    watched_file: str
    penalty: int

    @property
    def message(self) -> str:
        return self.line[self.line.index(self.watched_file):]


@dataclass
class ReconciliationResult:
    """What one reconciliation pass did to the ledger."""
    violations: list[Violation] = field(default_factory=list)
    lines_read: int = 0
    error: Optional[LogReadError] = None

    @property
    def penalty_total(self) -> int:
        return sum(v.penalty for v in self.violations)

    @property
    def succeeded(self) -> bool:
        return self.error is None


def read_violation_log(path: Path) -> list[str]:
    """
    Read the whole log before any penalty is applied.

    Raises:
        LogReadError: If the file is missing, unreadable or not UTF-8
    """
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        raise LogReadError(path, describe_exception(exc)) from exc


def match_violation(
    line: str,
    check_files: Sequence[str],
    ignored_checks: Iterable[str],
) -> Optional[str]:
    """
    Return the watched file a log line is charged to, or None.

    A line containing any ignored pattern is never charged, even when it
    also names a watched file.
    """
    watched = next((name for name in check_files if name and name in line), None)
    if watched is None:
        return None
    if any(pattern in line for pattern in ignored_checks if pattern):
        return None
    return watched


def reconcile_static_log(
    ledger: ScoreLedger,
    log_path: Path,
    check_files: Sequence[str],
    ignored_checks: Sequence[str],
    penalty: int,
    reporter: Optional[Reporter] = None,
) -> ReconciliationResult:
    """
    Deduct `penalty` from the ledger once per charged log line.

    Args:
        ledger: Ledger of the current evaluation run
        log_path: Static-analysis output, one finding per line
        check_files: File names whose findings are charged
        ignored_checks: Substrings that exempt a line
        penalty: Points per charged line
        reporter: Audit output (defaults to the ledger's reporter)

    Returns:
        ReconciliationResult listing every charged violation
    """
    reporter = reporter if reporter is not None else ledger.reporter
    result = ReconciliationResult()

    try:
        lines = read_violation_log(Path(log_path))
    except LogReadError as exc:
        logger.warning("Skipping static-log reconciliation: %s", exc)
        reporter.comment(f"You are so lucky! We had problems processing the {Path(log_path).name}.")
        reporter.comment(f"This was due to: {exc.reason}")
        result.error = exc
        return result

    result.lines_read = len(lines)
    for number, line in enumerate(lines, start=1):
        watched = match_violation(line, check_files, ignored_checks)
        if watched is None:
            continue

        violation = Violation(
            line_number=number,
            line=line,
            watched_file=watched,
            penalty=penalty,
        )
        ledger.apply_penalty(penalty)
        result.violations.append(violation)
        reporter.comment(f"[LINT]: {violation.message}")

    logger.debug(
        "Reconciled %d of %d log lines, -%d points",
        len(result.violations), result.lines_read, result.penalty_total,
    )
    reporter.comment(f"[LINT] All violations: {ledger.points} points")
    return result
