"""
Shared pytest fixtures.

Submission modules are written to a temporary directory and imported by
name, the way the platform lays out a student's files.
"""

import importlib
import io
import sys
import textwrap
from pathlib import Path

import pytest

from gradebox.reporting import Reporter


@pytest.fixture
def reporter():
    """A Reporter that writes to an in-memory stream."""
    return Reporter(stream=io.StringIO())


@pytest.fixture
def submission(tmp_path, monkeypatch):
    """
    Fixture factory writing importable submission modules.

    Usage:
        def test_something(submission):
            path = submission("Main", "class Main:\\n    pass\\n")
    """
    written: list[str] = []
    monkeypatch.syspath_prepend(str(tmp_path))

    def _write(module_name: str, source: str) -> Path:
        path = tmp_path / f"{module_name}.py"
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        sys.modules.pop(module_name, None)
        importlib.invalidate_caches()
        written.append(module_name)
        return path

    yield _write

    for module_name in written:
        sys.modules.pop(module_name, None)
