"""
Forbidden-token scanning of submission source text.

Guards against point injection: a submission that satisfies the letter of
a structural check while using a banned construct (e.g. "no loops" met
with a hidden `while`). A single match is fatal for the whole run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..errors import IntegrityViolation
from ..log import get_logger
from ..reporting import Reporter

logger = get_logger("scanner")


@dataclass(frozen=True)
class TokenMatch:
    """The first forbidden token found in a source text."""
    keyword: str
    line_number: int  # 1-based
    line: str


def _matcher(keyword: str, whole_words: bool):
    if not whole_words:
        return lambda line: keyword in line
    pattern = re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)")
    return lambda line: pattern.search(line) is not None


def find_forbidden(
    lines: Iterable[str],
    keywords: Sequence[str],
    whole_words: bool = False,
) -> Optional[TokenMatch]:
    """
    Return the first line containing any keyword, or None.

    Lines are scanned in order; within a line, keywords are tried in the
    order given.
    """
    matchers = [(keyword, _matcher(keyword, whole_words)) for keyword in keywords if keyword]
    for number, line in enumerate(lines, start=1):
        for keyword, matches in matchers:
            if matches(line):
                return TokenMatch(keyword=keyword, line_number=number, line=line)
    return None


def enforce_no_tokens(
    lines: Iterable[str],
    keywords: Sequence[str],
    path: Path,
    reporter: Reporter,
    whole_words: bool = False,
) -> bool:
    """
    Return True when no keyword occurs in `lines`.

    On a match, the offending line and a diagnostic are reported and
    IntegrityViolation is raised. The caller never sees False.

    Raises:
        IntegrityViolation: If any line contains a forbidden keyword
    """
    match = find_forbidden(lines, keywords, whole_words)
    if match is None:
        return True

    reporter.comment(f"Line {match.line_number}: {match.line}")
    reporter.comment(
        f"Line {match.line_number} in file {path} seem to have "
        f"a not allowed '{match.keyword}' phrase."
    )
    logger.warning("Forbidden '%s' in %s:%d", match.keyword, path, match.line_number)
    raise IntegrityViolation(match.keyword, match.line_number, match.line, path)
