"""
Audit output for GradeBox evaluation runs.

Two line shapes make up the whole protocol with the course platform:

    Comment :=>> <text>      human-readable diagnostic, append-only
    Grade :=>> <integer>     current bounded grade

Consumers treat comment lines as an ordered audit log, never as
structured data. Every line written is also kept in `Reporter.lines`.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Optional, TextIO


COMMENT_PREFIX = "Comment :=>> "
GRADE_PREFIX = "Grade :=>> "


def comment_line(text: str) -> str:
    """Format a platform comment line."""
    return f"{COMMENT_PREFIX}{text}"


def grade_line(grade: int) -> str:
    """Format a platform grade line."""
    return f"{GRADE_PREFIX}{grade}"


@dataclass
class Reporter:
    """
    Writes protocol lines to a stream and records them in order.

    With no explicit stream, lines go to whatever `sys.stdout` is at
    write time.
    """
    stream: Optional[TextIO] = None
    lines: list[str] = field(default_factory=list)

    def _write(self, line: str) -> str:
        out = self.stream if self.stream is not None else sys.stdout
        out.write(line + "\n")
        out.flush()
        self.lines.append(line)
        return line

    def comment(self, text: str) -> str:
        return self._write(comment_line(text))

    def grade(self, grade: int) -> str:
        return self._write(grade_line(grade))

    @property
    def comments(self) -> list[str]:
        """Comment texts without the protocol prefix."""
        return [
            line[len(COMMENT_PREFIX):]
            for line in self.lines
            if line.startswith(COMMENT_PREFIX)
        ]

    @property
    def grades(self) -> list[int]:
        """Every grade reported so far, in order."""
        return [
            int(line[len(GRADE_PREFIX):])
            for line in self.lines
            if line.startswith(GRADE_PREFIX)
        ]
