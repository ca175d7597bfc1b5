"""
Score Ledger for GradeBox evaluation runs.

Core principle:
    Every point movement is one numbered, explained check outcome.
    A crashing check costs at most its own points, never the run.

Score composition:
    points = sum of rewards earned - sum of penalties applied
    The running total is unbounded. Clamping to [0, max_points] happens
    only when a grade is reported.

Directions:
    REWARD   — optional bonus: pass adds points, failure costs nothing
    PENALIZE — desired default: pass is free, failure subtracts points
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from .errors import FaultKind, describe_exception
from .log import get_logger
from .reporting import Reporter

logger = get_logger("ledger")

Predicate = Callable[[], Any]


class Direction(Enum):
    """The two check directions."""
    REWARD = "reward"
    PENALIZE = "penalize"


# =============================================================================
# PREDICATE EXECUTION
# =============================================================================

@dataclass(frozen=True)
class PredicateResult:
    """
    Outcome of running one check predicate.

    Either `fault` is None and `passed` carries the predicate's verdict,
    or `fault` holds the exception and `passed` is False.
    """
    passed: bool
    fault: Optional[BaseException] = None

    @property
    def faulted(self) -> bool:
        return self.fault is not None


def run_predicate(check: Predicate) -> PredicateResult:
    """
    Run a zero-argument predicate and downgrade any exception to a failure.

    sys.exit() from submission code counts as a raising predicate.
    IntegrityViolation is neither and passes through untouched.
    """
    try:
        return PredicateResult(passed=bool(check()))
    except (Exception, SystemExit) as exc:
        logger.warning("Check predicate raised %s", describe_exception(exc))
        return PredicateResult(passed=False, fault=exc)


# =============================================================================
# CHECK OUTCOME
# =============================================================================

@dataclass(frozen=True)
class CheckOutcome:
    """
    A single, numbered check result with full transparency.

    Exposes:
    - number: consecutive check number within the run
    - direction: reward or penalize
    - description: what was checked
    - points: the check's point value
    - passed: the predicate's verdict (False on fault)
    - delta: how `points` moved
    - fault: the exception the predicate raised, if any
    """
    number: int
    direction: Direction
    description: str
    points: int
    passed: bool
    delta: int
    fault: Optional[BaseException] = None

    @property
    def fault_kind(self) -> Optional[FaultKind]:
        return FaultKind.EXECUTION if self.fault is not None else None

    @property
    def remark(self) -> str:
        """The audit line text for this outcome."""
        if self.passed:
            status = "[OK]"
        elif self.fault is not None:
            status = f"[FAILED due to {describe_exception(self.fault)}]"
        else:
            status = "[FAILED]"

        if self.direction == Direction.REWARD:
            detail = f"{self.points} points" if self.passed else f"0 of {self.points} points"
        else:
            detail = "no subtraction" if self.passed else f"subtracted {self.points} points"

        return f"Check {self.number}: {status} {self.description} ({detail})"


# =============================================================================
# LEDGER
# =============================================================================

@dataclass
class ScoreLedger:
    """
    Running point total and check counter of one evaluation run.

    The ledger is passed explicitly to whoever scores; there is no
    process-wide score state.
    """
    max_points: int = 100
    reporter: Reporter = field(default_factory=Reporter)
    points: int = 0
    checks_run: int = 0
    history: list[CheckOutcome] = field(default_factory=list)

    def reward(self, amount: int, description: str, check: Predicate) -> CheckOutcome:
        """
        Add `amount` points if `check` passes.

        A failing or raising check leaves the total unchanged.
        """
        return self._record(Direction.REWARD, amount, description, check)

    def penalize(self, amount: int, description: str, check: Predicate) -> CheckOutcome:
        """
        Subtract `amount` points unless `check` passes.

        A raising check is penalized exactly like a failing one.
        """
        return self._record(Direction.PENALIZE, amount, description, check)

    def _record(
        self,
        direction: Direction,
        amount: int,
        description: str,
        check: Predicate,
    ) -> CheckOutcome:
        self.checks_run += 1
        result = run_predicate(check)

        if direction == Direction.REWARD:
            delta = amount if result.passed else 0
        else:
            delta = 0 if result.passed else -amount
        self.points += delta

        outcome = CheckOutcome(
            number=self.checks_run,
            direction=direction,
            description=description,
            points=amount,
            passed=result.passed,
            delta=delta,
            fault=result.fault,
        )
        self.history.append(outcome)
        self.reporter.comment(outcome.remark)
        logger.debug("Check %d %s: delta=%d total=%d", outcome.number, direction.value, delta, self.points)
        return outcome

    def apply_penalty(self, amount: int) -> None:
        """Deduct points outside any check, e.g. for static-analysis findings."""
        self.points -= amount

    def grade(self) -> int:
        """The running total clamped into [0, max_points]."""
        return max(0, min(self.max_points, self.points))

    def get_passed(self) -> list[CheckOutcome]:
        return [o for o in self.history if o.passed]

    def get_failed(self) -> list[CheckOutcome]:
        return [o for o in self.history if not o.passed]
