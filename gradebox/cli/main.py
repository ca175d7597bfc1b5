"""
GradeBox CLI — entry point for platform evaluation scripts.

Commands:
    gradebox run <checks>    — Grade the submission in the working directory
    gradebox config          — Show the effective grading configuration

`<checks>` names the assignment's Evaluator subclass:

    checks:Checks            module:Class, importable from --workdir
    checks                   module holding exactly one Evaluator subclass
    path/to/checks.py:Checks file path, class optional as above

Exit status:
    0  evaluation finished (the grade is on stdout)
    1  evaluation aborted for a forbidden token (grade 0)
    2  configuration or checks could not be loaded
"""

from __future__ import annotations

import argparse
import importlib
import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Optional

import yaml

from ..config import GradingConfig, load_grading_config
from ..engine import Evaluator, submission_path
from ..errors import ConfigError, GradeBoxError, LoadError, describe_exception
from ..log import setup_logging


EXIT_OK = 0
EXIT_USAGE = 2


# =============================================================================
# LOADING
# =============================================================================

def _import_checks_module(target: str) -> ModuleType:
    if target.endswith(".py"):
        path = Path(target).expanduser()
        spec = importlib.util.spec_from_file_location(path.stem, path)
        if spec is None or spec.loader is None or not path.is_file():
            raise LoadError(target, "no such checks file")
        module = importlib.util.module_from_spec(spec)
        sys.modules[path.stem] = module
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            del sys.modules[path.stem]
            raise LoadError(target, describe_exception(exc)) from exc
        return module

    try:
        return importlib.import_module(target)
    except Exception as exc:
        raise LoadError(target, describe_exception(exc)) from exc


def split_checks_spec(spec: str) -> tuple[str, str]:
    """Split `target[:Class]`; a colon inside a path (C:\\...) is kept."""
    head, sep, tail = spec.rpartition(":")
    if not sep or not head or "/" in tail or "\\" in tail:
        return spec, ""
    return head, tail


def load_checks(spec: str) -> type[Evaluator]:
    """
    Resolve a checks spec to an Evaluator subclass.

    Raises:
        LoadError: If the module cannot be imported or holds no unique
            Evaluator subclass
    """
    target, class_name = split_checks_spec(spec)
    module = _import_checks_module(target)

    if class_name:
        cls = getattr(module, class_name, None)
        if not (inspect.isclass(cls) and issubclass(cls, Evaluator)):
            raise LoadError(spec, f"'{class_name}' is not an Evaluator subclass")
        return cls

    candidates = [
        value for value in vars(module).values()
        if inspect.isclass(value)
        and issubclass(value, Evaluator)
        and value is not Evaluator
        and value.__module__ == module.__name__
    ]
    if len(candidates) != 1:
        raise LoadError(spec, f"expected one Evaluator subclass, found {len(candidates)}")
    return candidates[0]


def _load_config(args: argparse.Namespace) -> GradingConfig:
    if args.config is None:
        return GradingConfig()
    return load_grading_config(Path(args.config))


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_run(args: argparse.Namespace) -> int:
    """Grade the submission; SystemExit(1) escapes on a forbidden token."""
    workdir = Path(args.workdir).expanduser().resolve()
    try:
        config = _load_config(args)
        with submission_path(workdir):
            checks_class = load_checks(args.checks)
    except GradeBoxError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE

    evaluator = checks_class(config=config, workdir=workdir)
    evaluator.run()
    return EXIT_OK


def cmd_config(args: argparse.Namespace) -> int:
    """Show the effective grading configuration."""
    try:
        config = _load_config(args)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE

    print(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False), end="")
    return EXIT_OK


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="gradebox",
        description="GradeBox — automated grading of programming exercises",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log engine diagnostics to stderr",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Run command
    run_parser = subparsers.add_parser(
        "run",
        help="Grade the submission in the working directory",
    )
    run_parser.add_argument(
        "checks",
        help="Checks to run: module[:Class] or path/to/checks.py[:Class]",
    )
    run_parser.add_argument(
        "--config",
        help="YAML grading configuration",
    )
    run_parser.add_argument(
        "--workdir",
        default=".",
        help="Directory holding the submission (default: current directory)",
    )
    run_parser.set_defaults(func=cmd_run)

    # Config command
    config_parser = subparsers.add_parser(
        "config",
        help="Show the effective grading configuration",
    )
    config_parser.add_argument(
        "--config",
        help="YAML grading configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    setup_logging(logging.DEBUG if args.verbose else None)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
