"""Glob-style pattern matching for GitHub identifiers.

Two pattern shapes are supported:

- :class:`NamePattern` for a single segment (``repo-*``).
- :class:`CompoundPattern` for ``account`` or ``account/repo`` identifiers.
"""
from __future__ import annotations

from provision_github_tokens.patterns.compound_pattern import (
    CompoundPattern,
    compile_compound_pattern,
)
from provision_github_tokens.patterns.name_pattern import (
    NamePattern,
    Pattern,
    PatternError,
    any_matches,
    compile_account_pattern,
    compile_name_pattern,
)
from provision_github_tokens.patterns.normalize import (
    normalize_account_pattern,
    normalize_compound_pattern,
)

__all__ = [
    "CompoundPattern",
    "NamePattern",
    "Pattern",
    "PatternError",
    "any_matches",
    "compile_account_pattern",
    "compile_compound_pattern",
    "compile_name_pattern",
    "normalize_account_pattern",
    "normalize_compound_pattern",
]
