# GradeBox Evaluation Engine

"""
Core invariant: the reported grade is always within [0, max_points],
whatever the submission under evaluation does.

The one deliberate exception to "failures only cost their own points" is
a forbidden token in submission source, which zeroes the grade and ends
the run.
"""

from .config import GradingConfig, load_grading_config
from .engine import Evaluator, check
from .errors import (
    ConfigError,
    GradeBoxError,
    IntegrityViolation,
    LoadError,
    LogReadError,
    ProbeResolutionError,
    SourceReadError,
)
from .inspection import Inspector
from .ledger import CheckOutcome, Direction, ScoreLedger
from .randomized import Randomized
from .reconcile import reconcile_static_log
from .reporting import Reporter

__version__ = "0.1.0"

__all__ = [
    "GradingConfig",
    "load_grading_config",
    "Evaluator",
    "check",
    "ConfigError",
    "GradeBoxError",
    "IntegrityViolation",
    "LoadError",
    "LogReadError",
    "ProbeResolutionError",
    "SourceReadError",
    "Inspector",
    "CheckOutcome",
    "Direction",
    "ScoreLedger",
    "Randomized",
    "reconcile_static_log",
    "Reporter",
]
