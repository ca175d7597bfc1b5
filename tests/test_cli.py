"""
Tests for the GradeBox CLI.

These tests verify:
1. Parser commands and defaults
2. Checks specs resolve to exactly one Evaluator subclass
3. `run` writes the platform protocol to stdout
4. Exit status for load errors and aborted runs
"""

import textwrap

import pytest
import yaml

from gradebox.cli.main import (
    EXIT_OK,
    EXIT_USAGE,
    create_parser,
    load_checks,
    main,
    split_checks_spec,
)
from gradebox.engine import Evaluator
from gradebox.errors import LoadError


CHECKS_SOURCE = """
from gradebox import Evaluator, check


class StructureChecks(Evaluator):

    @check
    def test_fields(self):
        self.grading(40, "Main has no fields",
                     lambda: self.assure("Main", lambda i: i.has_no_fields()))

    @check
    def test_loops(self):
        self.degrading(10, "Main uses no loops",
                       lambda: self.assure("Main", lambda i: i.has_no_loops()))
"""


def write_checks(tmp_path, name="structure_checks", source=CHECKS_SOURCE):
    path = tmp_path / f"{name}.py"
    path.write_text(textwrap.dedent(source), encoding="utf-8")
    return path


# =============================================================================
# PARSER TESTS
# =============================================================================

class TestParser:
    """Test argument parsing."""

    def test_run_defaults(self):
        args = create_parser().parse_args(["run", "checks:Checks"])

        assert args.command == "run"
        assert args.checks == "checks:Checks"
        assert args.workdir == "."
        assert args.config is None

    def test_config_command(self):
        args = create_parser().parse_args(["config", "--config", "grading.yaml"])
        assert args.config == "grading.yaml"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_OK
        assert "usage: gradebox" in capsys.readouterr().out


class TestSplitChecksSpec:
    """Test `target[:Class]` splitting."""

    @pytest.mark.parametrize("spec, expected", [
        ("checks:Checks", ("checks", "Checks")),
        ("checks", ("checks", "")),
        ("dir/checks.py", ("dir/checks.py", "")),
        ("dir/checks.py:Checks", ("dir/checks.py", "Checks")),
        ("C:\\work\\checks.py", ("C:\\work\\checks.py", "")),
    ])
    def test_split(self, spec, expected):
        assert split_checks_spec(spec) == expected


# =============================================================================
# LOADING TESTS
# =============================================================================

class TestLoadChecks:
    """Test checks resolution."""

    def test_file_with_single_subclass(self, tmp_path):
        cls = load_checks(str(write_checks(tmp_path)))

        assert issubclass(cls, Evaluator)
        assert cls.__name__ == "StructureChecks"

    def test_module_and_class(self, submission):
        submission("assignment_checks", CHECKS_SOURCE)
        assert load_checks("assignment_checks:StructureChecks").__name__ == "StructureChecks"

    def test_ambiguous_module(self, tmp_path):
        path = write_checks(tmp_path, "two_checks", CHECKS_SOURCE + "\n\nclass More(StructureChecks):\n    pass\n")
        with pytest.raises(LoadError, match="expected one Evaluator subclass, found 2"):
            load_checks(str(path))

    def test_class_must_be_evaluator(self, tmp_path):
        path = write_checks(tmp_path)
        with pytest.raises(LoadError, match="not an Evaluator subclass"):
            load_checks(f"{path}:check")

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError, match="no such checks file"):
            load_checks(str(tmp_path / "absent.py"))

    def test_broken_checks_file(self, tmp_path):
        path = write_checks(tmp_path, "broken_checks", "def oops(:\n")
        with pytest.raises(LoadError, match="SyntaxError"):
            load_checks(str(path))


# =============================================================================
# COMMAND TESTS
# =============================================================================

class TestRunCommand:
    """Test `gradebox run`."""

    def test_run_prints_protocol(self, submission, tmp_path, capsys):
        submission("Main", """
            class Main:
                def total(self, values):
                    return sum(values)
        """)
        checks = write_checks(tmp_path)

        status = main(["run", str(checks), "--workdir", str(tmp_path)])

        out = capsys.readouterr().out.splitlines()
        assert status == EXIT_OK
        assert "Comment :=>> Check 1: [OK] Main has no fields (40 points)" in out
        assert "Comment :=>> Check 2: [OK] Main uses no loops (no subtraction)" in out
        assert [line for line in out if line.startswith("Grade :=>> ")] == [
            "Grade :=>> 40", "Grade :=>> 40",
        ]
        assert out[-1] == "Comment :=>> Finished"

    def test_run_with_config(self, submission, tmp_path, capsys):
        submission("Main", "class Main:\n    pass\n")
        (tmp_path / "lint.log").write_text("Main.py:1:1: E302 expected 2 blank lines\n", encoding="utf-8")
        config = tmp_path / "grading.yaml"
        config.write_text("grading:\n  check_penalty: 15\n", encoding="utf-8")

        status = main([
            "run", str(write_checks(tmp_path)),
            "--config", str(config),
            "--workdir", str(tmp_path),
        ])

        out = capsys.readouterr().out.splitlines()
        assert status == EXIT_OK
        assert "Comment :=>> [LINT] All violations: -15 points" in out
        assert "Grade :=>> 25" in out

    def test_forbidden_token_exits_with_zero_grade(self, submission, tmp_path, capsys):
        submission("Main", """
            class Main:
                def total(self, values):
                    return sum(v for v in values)
        """)
        checks = write_checks(tmp_path)

        with pytest.raises(SystemExit) as info:
            main(["run", str(checks), "--workdir", str(tmp_path)])

        out = capsys.readouterr().out.splitlines()
        assert info.value.code == 1
        assert out[-1] == "Grade :=>> 0"
        assert "Comment :=>> Finished" not in out

    def test_unloadable_checks(self, tmp_path, capsys):
        status = main(["run", str(tmp_path / "absent.py"), "--workdir", str(tmp_path)])

        captured = capsys.readouterr()
        assert status == EXIT_USAGE
        assert captured.err.startswith("ERROR: Cannot load")
        assert captured.out == ""

    def test_invalid_config(self, tmp_path, capsys):
        config = tmp_path / "grading.yaml"
        config.write_text("max_points: 0\n", encoding="utf-8")

        status = main(["run", str(write_checks(tmp_path)), "--config", str(config)])

        assert status == EXIT_USAGE
        assert "Invalid grading config" in capsys.readouterr().err


class TestConfigCommand:
    """Test `gradebox config`."""

    def test_defaults(self, capsys):
        assert main(["config"]) == EXIT_OK

        shown = yaml.safe_load(capsys.readouterr().out)
        assert shown["max_points"] == 100
        assert shown["check_files"] == ["Main.py"]
        assert shown["lint_log"] == "lint.log"

    def test_from_file(self, tmp_path, capsys):
        config = tmp_path / "grading.yaml"
        config.write_text("check_penalty: 3\n", encoding="utf-8")

        assert main(["config", "--config", str(config)]) == EXIT_OK
        assert yaml.safe_load(capsys.readouterr().out)["check_penalty"] == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
