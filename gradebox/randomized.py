"""
Randomized test data for check authors.

Checks that call submission behavior usually compare it against a
reference on many generated inputs:

    data = Randomized(seed=42)
    for _ in range(100):
        word = data.string("[a-cA-C]{0,7}")
        n = data.integer(-10, 10)

Patterns understand a small regular-expression subset: character classes
with ranges and negation, the shorthands \\d \\w \\s, `.`, escaped or plain
literals, and the quantifiers {n}, {m,n}, {m,}, ?, * and +. Open-ended
quantifiers repeat at most MAX_REPEAT extra times.
"""

from __future__ import annotations

import random
import string as _strings
from dataclasses import dataclass
from typing import Optional


MAX_REPEAT = 8

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1
FLOAT_SPAN = 1e9

PRINTABLE = "".join(c for c in _strings.printable if c not in "\t\n\r\x0b\x0c")

SHORTHANDS = {
    "d": _strings.digits,
    "w": _strings.ascii_letters + _strings.digits + "_",
    "s": " \t",
}


@dataclass(frozen=True)
class Atom:
    """One pattern element: an alphabet repeated between low and high times."""
    alphabet: str
    low: int = 1
    high: int = 1


def _parse_class(pattern: str, pos: int) -> tuple[str, int]:
    """Parse a `[...]` body starting after the bracket; return (alphabet, next pos)."""
    negate = pos < len(pattern) and pattern[pos] == "^"
    if negate:
        pos += 1

    chars: list[str] = []
    first = True
    while True:
        if pos >= len(pattern):
            raise ValueError(f"Unterminated character class in {pattern!r}")
        c = pattern[pos]
        if c == "]" and not first:
            pos += 1
            break
        first = False

        if c == "\\":
            if pos + 1 >= len(pattern):
                raise ValueError(f"Dangling escape in {pattern!r}")
            escaped = pattern[pos + 1]
            pos += 2
            if escaped in SHORTHANDS:
                chars.extend(SHORTHANDS[escaped])
                continue
            c = escaped
        else:
            pos += 1

        if pos + 1 < len(pattern) and pattern[pos] == "-" and pattern[pos + 1] != "]":
            end = pattern[pos + 1]
            if ord(end) < ord(c):
                raise ValueError(f"Bad range {c}-{end} in {pattern!r}")
            chars.extend(chr(o) for o in range(ord(c), ord(end) + 1))
            pos += 2
        else:
            chars.append(c)

    alphabet = "".join(dict.fromkeys(chars))
    if negate:
        alphabet = "".join(c for c in PRINTABLE if c not in alphabet)
    if not alphabet:
        raise ValueError(f"Empty character class in {pattern!r}")
    return alphabet, pos


def _parse_quantifier(pattern: str, pos: int) -> tuple[int, int, int]:
    """Return (low, high, next pos); (1, 1, pos) when no quantifier follows."""
    if pos >= len(pattern):
        return 1, 1, pos
    c = pattern[pos]
    if c == "?":
        return 0, 1, pos + 1
    if c == "*":
        return 0, MAX_REPEAT, pos + 1
    if c == "+":
        return 1, 1 + MAX_REPEAT, pos + 1
    if c != "{":
        return 1, 1, pos

    end = pattern.find("}", pos)
    if end < 0:
        raise ValueError(f"Unterminated quantifier in {pattern!r}")
    body = pattern[pos + 1:end]
    try:
        if "," in body:
            low_text, high_text = body.split(",", 1)
            low = int(low_text)
            high = int(high_text) if high_text.strip() else low + MAX_REPEAT
        else:
            low = high = int(body)
    except ValueError as exc:
        raise ValueError(f"Bad quantifier {{{body}}} in {pattern!r}") from exc
    if low < 0 or high < low:
        raise ValueError(f"Bad quantifier {{{body}}} in {pattern!r}")
    return low, high, end + 1


def parse_pattern(pattern: str) -> list[Atom]:
    """Split a pattern into repeated alphabets."""
    atoms: list[Atom] = []
    pos = 0
    while pos < len(pattern):
        c = pattern[pos]
        if c == "[":
            alphabet, pos = _parse_class(pattern, pos + 1)
        elif c == "\\":
            if pos + 1 >= len(pattern):
                raise ValueError(f"Dangling escape in {pattern!r}")
            escaped = pattern[pos + 1]
            alphabet = SHORTHANDS.get(escaped, escaped)
            pos += 2
        elif c == ".":
            alphabet, pos = PRINTABLE, pos + 1
        elif c in "{}?*+":
            raise ValueError(f"Quantifier without atom at {pos} in {pattern!r}")
        else:
            alphabet, pos = c, pos + 1

        low, high, pos = _parse_quantifier(pattern, pos)
        atoms.append(Atom(alphabet, low, high))
    return atoms


class Randomized:
    """Seedable generator of booleans, numbers, characters and strings."""

    def __init__(self, seed: Optional[int] = None):
        self.random = random.Random(seed)

    def boolean(self) -> bool:
        return self.random.random() < 0.5

    def integer(self, lower: Optional[int] = None, upper: Optional[int] = None) -> int:
        """
        integer()              any 32-bit signed value
        integer(upper)         0 <= n < upper
        integer(lower, upper)  lower <= n < upper
        """
        if lower is None:
            return self.random.randint(INT_MIN, INT_MAX)
        if upper is None:
            lower, upper = 0, lower
        if upper <= lower:
            raise ValueError(f"Empty integer range [{lower}, {upper})")
        return self.random.randrange(lower, upper)

    def floating(self, lower: Optional[float] = None, upper: Optional[float] = None) -> float:
        """Same bounds convention as integer(); the upper bound is exclusive."""
        if lower is None:
            lower, upper = -FLOAT_SPAN, FLOAT_SPAN
        elif upper is None:
            lower, upper = 0.0, lower
        if upper <= lower:
            raise ValueError(f"Empty float range [{lower}, {upper})")
        value = lower + (upper - lower) * self.random.random()
        return value if value < upper else lower

    def string(self, pattern: str) -> str:
        parts = []
        for atom in parse_pattern(pattern):
            count = self.random.randint(atom.low, atom.high)
            parts.append("".join(self.random.choice(atom.alphabet) for _ in range(count)))
        return "".join(parts)

    def letters(self, min_length: int, max_length: int) -> str:
        """A string of ASCII letters with length in [min_length, max_length]."""
        return self.string(f"[a-zA-Z]{{{min_length},{max_length}}}")

    def char(self, pattern: str = "[a-zA-Z]") -> str:
        atoms = parse_pattern(pattern)
        if len(atoms) != 1 or (atoms[0].low, atoms[0].high) != (1, 1):
            raise ValueError(f"Pattern {pattern!r} does not describe a single character")
        return self.random.choice(atoms[0].alphabet)
