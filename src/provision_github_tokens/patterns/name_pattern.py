"""Single-segment glob patterns.

A name pattern matches one path segment of a GitHub identifier: an account
login, a repository name, a secret name or an environment name.  ``*``
matches any run of characters except ``/``; every other character is
literal.

Example
-------
::

    pattern = compile_name_pattern("deploy-*")
    assert pattern.test("deploy-prod")
    assert not pattern.test("deploy/prod")
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Protocol


class PatternError(ValueError):
    """Raised when a pattern literal is malformed.

    Attributes
    ----------
    literal:
        The offending pattern literal.
    """

    def __init__(self, message: str, literal: str) -> None:
        self.literal = literal
        super().__init__(message)


class Pattern(Protocol):
    """Anything that can test a candidate string."""

    @property
    def literal(self) -> str: ...

    def test(self, candidate: str) -> bool: ...


@dataclass(frozen=True)
class NamePattern:
    """Compiled single-segment glob pattern.

    Attributes
    ----------
    literal:
        The pattern text, e.g. ``"repo-*"``.
    """

    literal: str
    _expression: re.Pattern[str] = field(init=False, repr=False, compare=False)
    _is_all: bool = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.literal:
            raise PatternError("Pattern cannot be empty", self.literal)
        if "/" in self.literal:
            raise PatternError(
                f"Pattern {self.literal!r} cannot contain /", self.literal
            )

        runs = self.literal.split("*")
        expression = "[^/]*".join(re.escape(run) for run in runs)
        object.__setattr__(self, "_expression", re.compile(expression))
        object.__setattr__(self, "_is_all", not any(runs))

    @property
    def is_all(self) -> bool:
        """True when the pattern matches every single-segment string."""
        return self._is_all

    def test(self, candidate: str) -> bool:
        return self._expression.fullmatch(candidate) is not None

    def __str__(self) -> str:
        return self.literal


def compile_name_pattern(literal: str) -> NamePattern:
    """Compile *literal* into a :class:`NamePattern`.

    Raises
    ------
    PatternError
        If *literal* is empty or contains ``/``.
    """
    return NamePattern(literal)


def compile_account_pattern(literal: str) -> NamePattern:
    """Compile an ``accounts`` key of a provisioning rule or secret declaration.

    Account keys are single-segment name patterns.  A key such as
    ``octo-org/api`` is rejected here instead of being accepted as a pattern
    that can never match an account.

    Raises
    ------
    PatternError
        If *literal* is empty or contains ``/``.
    """
    if "/" in literal:
        raise PatternError(
            f"Account pattern {literal!r} cannot contain /; list owner/repo patterns under repos",
            literal,
        )
    return NamePattern(literal)


def any_matches(patterns: Iterable[Pattern], candidate: str) -> bool:
    """Return True if any of *patterns* matches *candidate*."""
    for pattern in patterns:
        if pattern.test(candidate):
            return True
    return False
