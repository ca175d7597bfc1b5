"""
Grading Engine for GradeBox.

Ties configuration, static-log reconciliation and check execution into a
single evaluation run:

    1. configure()   — assignment author adjusts the GradingConfig
    2. reconcile()   — static-analysis findings cost points
    3. evaluate()    — every @check method runs, grade reported after each
    4. "Finished"

Assignment authors subclass Evaluator and mark check methods:

    class Checks(Evaluator):

        @check
        def test_structure(self):
            self.grading(10, "Main declares no fields",
                         lambda: self.assure("Main", lambda i: i.has_no_fields()))
            self.degrading(20, "Main uses no loops",
                           lambda: self.assure("Main", lambda i: i.has_no_loops()))

Failures inside checks only cost that check's points. The one exception
is a forbidden token in submission source, which zeroes the grade and
ends the process at once.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, NoReturn, Optional

from .config import GradingConfig
from .errors import FaultKind, IntegrityViolation, describe_exception
from .inspection.inspector import Inspector
from .ledger import CheckOutcome, Predicate, ScoreLedger
from .log import get_logger
from .reconcile import ReconciliationResult, reconcile_static_log
from .reporting import Reporter

logger = get_logger("engine")

CHECK_MARKER = "__gradebox_check__"

# Exit status of a run aborted for a forbidden token.
INTEGRITY_EXIT_CODE = 1


# =============================================================================
# CHECK REGISTRATION
# =============================================================================

def check(func: Callable[..., Any]) -> Callable[..., Any]:
    """Mark an Evaluator method as a check. Checks run in declaration order."""
    setattr(func, CHECK_MARKER, True)
    return func


def is_check(value: Any) -> bool:
    return callable(value) and getattr(value, CHECK_MARKER, False) is True


def discover_checks(cls: type) -> list[str]:
    """
    Names of the check methods of `cls`, in declaration order.

    Base class checks come first. An override keeps the position of the
    method it overrides; overriding without @check removes the check.
    """
    names: dict[str, None] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if is_check(value):
                names.setdefault(name, None)
            elif name in names:
                del names[name]
    return list(names)


@contextmanager
def submission_path(workdir: Path) -> Iterator[None]:
    """Make modules in `workdir` importable for the duration of the block."""
    entry = str(workdir)
    added = entry not in sys.path
    if added:
        sys.path.insert(0, entry)
    try:
        yield
    finally:
        if added and entry in sys.path:
            sys.path.remove(entry)


# =============================================================================
# EVALUATOR
# =============================================================================

class Evaluator:
    """
    One evaluation run: a ledger, its checks and the static-log pass.

    Create one per process. Subclasses provide checks with @check and may
    override configure().
    """

    def __init__(
        self,
        config: Optional[GradingConfig] = None,
        reporter: Optional[Reporter] = None,
        workdir: Optional[Path] = None,
    ):
        self.config = config.model_copy(deep=True) if config is not None else GradingConfig()
        self.reporter = reporter if reporter is not None else Reporter()
        self.workdir = Path(workdir) if workdir is not None else Path.cwd()
        self.ledger = ScoreLedger(max_points=self.config.max_points, reporter=self.reporter)
        self.invocation_faults: list[tuple[str, BaseException]] = []

    @property
    def points(self) -> int:
        return self.ledger.points

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def configure(self) -> None:
        """Hook for assignment authors to adjust `self.config` before grading."""

    def run(self) -> int:
        """
        Execute the full evaluation run and return the final grade.

        Raises:
            SystemExit: With status 1 if a forbidden token was found
        """
        self.configure()
        self.ledger.max_points = self.config.max_points
        logger.debug("Effective config: %s", self.config.model_dump())

        self.reconcile()
        self.evaluate()
        self.comment("Finished")
        return self.ledger.grade()

    def reconcile(self) -> ReconciliationResult:
        """Apply static-analysis penalties. Not idempotent."""
        log_path = self.config.lint_log
        if not log_path.is_absolute():
            log_path = self.workdir / log_path
        return reconcile_static_log(
            self.ledger,
            log_path,
            check_files=self.config.check_files,
            ignored_checks=self.config.ignored_checks,
            penalty=self.config.check_penalty,
            reporter=self.reporter,
        )

    def checks(self) -> list[tuple[str, Callable[[], Any]]]:
        """Bound check methods in execution order."""
        return [(name, getattr(self, name)) for name in discover_checks(type(self))]

    def evaluate(self) -> None:
        """
        Run every check and report the bounded grade after each one.

        A check method that raises is reported as failed completely and
        leaves the points untouched.
        """
        with submission_path(self.workdir):
            for name, method in self.checks():
                logger.debug("Running check %s", name)
                try:
                    method()
                except IntegrityViolation as violation:
                    self.abort(violation)
                except (Exception, SystemExit) as exc:
                    # sys.exit() from submission code is a failed check too.
                    self.invocation_faults.append((name, exc))
                    logger.warning(
                        "%s in %s: %s", FaultKind.INVOCATION.value, name, describe_exception(exc)
                    )
                    self.comment(f"Test case {name} failed completely: {describe_exception(exc)}")
                self.report_grade()

    def abort(self, violation: IntegrityViolation) -> NoReturn:
        """Force the grade to zero and stop the process."""
        logger.error("Evaluation aborted: %s", violation)
        self.reporter.grade(0)
        raise SystemExit(INTEGRITY_EXIT_CODE)

    def report_grade(self) -> int:
        grade = self.ledger.grade()
        self.reporter.grade(grade)
        return grade

    # -------------------------------------------------------------------------
    # Check helpers
    # -------------------------------------------------------------------------

    def grading(self, add: int, remark: str, predicate: Predicate) -> CheckOutcome:
        """Add points if the predicate holds (wished behavior)."""
        return self.ledger.reward(add, remark, predicate)

    def degrading(self, deduct: int, remark: str, predicate: Predicate) -> CheckOutcome:
        """Subtract points unless the predicate holds (unwished behavior)."""
        return self.ledger.penalize(deduct, remark, predicate)

    def inspector(self, class_name: str) -> Inspector:
        return Inspector(class_name, workdir=self.workdir, reporter=self.reporter)

    def assure(self, class_name: str, probe: Callable[[Inspector], Any]) -> bool:
        """
        Apply a probe to a submission class.

        Any failure to load or inspect the class is reported and counts as
        a failed probe. IntegrityViolation passes through.
        """
        try:
            return bool(probe(self.inspector(class_name)))
        except Exception as exc:
            self.comment(f"Check failed due to {describe_exception(exc)}")
            self.comment("This might be due to a syntax error in your submission.")
            return False

    def comment(self, text: str) -> str:
        return self.reporter.comment(text)
