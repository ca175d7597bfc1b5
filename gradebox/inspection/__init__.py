# Inspection package for GradeBox
"""
Capability probes over submitted classes.

Provides structural inspection (fields, constants, inner classes,
methods) and the forbidden-token source scan.
"""

from .inspector import Inspector, resolve_type
from .scanner import TokenMatch, enforce_no_tokens, find_forbidden

__all__ = [
    "Inspector",
    "resolve_type",
    "TokenMatch",
    "enforce_no_tokens",
    "find_forbidden",
]
