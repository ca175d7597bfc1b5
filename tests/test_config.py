"""
Tests for grading configuration.

These tests verify:
1. Defaults match the documented scoring levers
2. YAML files load flat or under a `grading:` section
3. Invalid values surface as ConfigError
"""

from pathlib import Path

import pytest

from gradebox.config import (
    DEFAULT_CHECK_FILES,
    DEFAULT_IGNORED_CHECKS,
    GradingConfig,
    load_grading_config,
    merge_overrides,
    read_yaml_file,
)
from gradebox.errors import ConfigError


def write_yaml(tmp_path, text, name="grading.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    """Test default configuration values."""

    def test_defaults(self):
        config = GradingConfig()

        assert config.ignored_checks == DEFAULT_IGNORED_CHECKS
        assert config.check_files == DEFAULT_CHECK_FILES
        assert config.check_penalty == 5
        assert config.max_points == 100
        assert config.lint_log == Path("lint.log")

    def test_default_lists_are_not_shared(self):
        first, second = GradingConfig(), GradingConfig()
        first.check_files.append("Helper.py")

        assert second.check_files == ["Main.py"]
        assert DEFAULT_CHECK_FILES == ["Main.py"]

    def test_empty_patterns_are_dropped(self):
        config = GradingConfig(ignored_checks=[" E501 ", "", "  "])
        assert config.ignored_checks == ["E501"]

    def test_single_string_becomes_list(self):
        assert GradingConfig(check_files="Main.py").check_files == ["Main.py"]

    def test_assignment_is_validated(self):
        config = GradingConfig()
        with pytest.raises(ValueError):
            config.max_points = 0


class TestLoading:
    """Test YAML loading."""

    def test_flat_file(self, tmp_path):
        path = write_yaml(tmp_path, "check_penalty: 2\nmax_points: 50\n")
        config = load_grading_config(path)

        assert config.check_penalty == 2
        assert config.max_points == 50

    def test_grading_section(self, tmp_path):
        path = write_yaml(tmp_path, """
grading:
  check_files: [Main.py, Helper.py]
  ignored_checks: [E501]
""")
        config = load_grading_config(path)

        assert config.check_files == ["Main.py", "Helper.py"]
        assert config.ignored_checks == ["E501"]

    def test_relative_lint_log_resolves_against_config_dir(self, tmp_path):
        path = write_yaml(tmp_path, "lint_log: reports/flake8.log\n")
        assert load_grading_config(path).lint_log == tmp_path / "reports" / "flake8.log"

    def test_relative_lint_log_with_base_dir(self, tmp_path):
        path = write_yaml(tmp_path, "lint_log: flake8.log\n")
        config = load_grading_config(path, base_dir=tmp_path / "work")
        assert config.lint_log == tmp_path / "work" / "flake8.log"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = write_yaml(tmp_path, "")
        assert load_grading_config(path) == GradingConfig()

    def test_unknown_key(self, tmp_path):
        path = write_yaml(tmp_path, "max_pionts: 10\n")
        with pytest.raises(ConfigError, match="Invalid grading config"):
            load_grading_config(path)

    def test_negative_penalty(self, tmp_path):
        path = write_yaml(tmp_path, "check_penalty: -1\n")
        with pytest.raises(ConfigError):
            load_grading_config(path)

    def test_non_mapping_root(self, tmp_path):
        path = write_yaml(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected mapping"):
            read_yaml_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read config"):
            load_grading_config(tmp_path / "absent.yaml")

    def test_broken_yaml(self, tmp_path):
        path = write_yaml(tmp_path, "check_files: [Main.py\n")
        with pytest.raises(ConfigError):
            load_grading_config(path)


class TestMergeOverrides:
    """Test layering overrides on a base config."""

    def test_override_replaces_values(self):
        merged = merge_overrides(GradingConfig(), {"check_penalty": 1})

        assert merged.check_penalty == 1
        assert merged.max_points == 100

    def test_base_is_untouched(self):
        base = GradingConfig()
        merge_overrides(base, {"check_files": ["Other.py"]})
        assert base.check_files == ["Main.py"]

    def test_invalid_override(self):
        with pytest.raises(ConfigError):
            merge_overrides(GradingConfig(), {"max_points": 0})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
