"""
Configuration for GradeBox evaluation runs.

A run is configured once, before evaluation starts: which static-analysis
findings are ignored, which files are watched, how much each finding costs
and the score ceiling. Values come from model defaults, an optional YAML
file and the evaluator's `configure()` hook, in that order.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Final, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError


# =============================================================================
# PROCESS SETTINGS
# =============================================================================

# 1 = verbose operator log on stderr, 0 = warnings only
DEBUG: Final[int] = int(os.environ.get("GRADEBOX_DEBUG", "0"))

LOG_LEVEL = logging.DEBUG if DEBUG else logging.WARNING
LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(module)s.%(funcName)s:%(lineno)d | %(message)s'

# Static-analysis codes that cost nothing by default (flake8/pydocstyle):
# missing newline at end of file, missing module and package docstrings.
DEFAULT_IGNORED_CHECKS: Final[List[str]] = ["W292", "D100", "D104"]
DEFAULT_CHECK_FILES: Final[List[str]] = ["Main.py"]
DEFAULT_CHECK_PENALTY: Final[int] = 5
DEFAULT_MAX_POINTS: Final[int] = 100
DEFAULT_LINT_LOG: Final[str] = "lint.log"


# =============================================================================
# MODEL
# =============================================================================

class GradingConfig(BaseModel):
    """Scoring levers of one evaluation run."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    ignored_checks: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_CHECKS),
        description="Substrings that exempt a log line from penalties.",
    )
    check_files: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CHECK_FILES),
        description="File names whose static-analysis findings are penalized.",
    )
    check_penalty: int = Field(default=DEFAULT_CHECK_PENALTY, ge=0)
    max_points: int = Field(default=DEFAULT_MAX_POINTS, ge=1)
    lint_log: Path = Field(default=Path(DEFAULT_LINT_LOG))

    @field_validator("ignored_checks", "check_files", mode="before")
    @classmethod
    def strip_items(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            return [item.strip() if isinstance(item, str) else item for item in value]
        return value

    @field_validator("ignored_checks", "check_files")
    @classmethod
    def drop_empty(cls, value: List[str]) -> List[str]:
        # An empty pattern would match every log line.
        return [item for item in value if item]

    @field_validator("lint_log", mode="before")
    @classmethod
    def coerce_path(cls, value: Any) -> Path:
        return Path(value).expanduser()


# =============================================================================
# LOADING
# =============================================================================

def read_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return a dictionary."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping at root of {path}, received {type(data).__name__}")
    return data


def load_grading_config(path: Path, *, base_dir: Path | None = None) -> GradingConfig:
    """
    Parse a grading YAML file into a validated GradingConfig.

    A relative `lint_log` is resolved against `base_dir`, which defaults
    to the directory holding the config file.
    """
    path = path.expanduser()
    data = read_yaml_file(path)
    # Accept both a flat file and one nested under a `grading:` section.
    if isinstance(data.get("grading"), dict):
        data = data["grading"]
    if data.get("lint_log"):
        log_path = Path(data["lint_log"]).expanduser()
        if not log_path.is_absolute():
            log_path = (base_dir or path.parent) / log_path
        data["lint_log"] = log_path
    try:
        return GradingConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid grading config in {path}: {exc}") from exc


def merge_overrides(base: GradingConfig, overrides: Dict[str, Any]) -> GradingConfig:
    """Return a new GradingConfig with `overrides` applied on top of `base`."""
    payload = base.model_dump()
    payload.update(overrides)
    try:
        return GradingConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid grading config overrides: {exc}") from exc
