"""Compound ``account[/repo]`` patterns.

Each segment is compiled independently as a :class:`NamePattern`.  A
pattern without a repo segment matches bare account strings only, and a
pattern with a repo segment matches ``account/repo`` strings only.

Example
-------
::

    pattern = compile_compound_pattern("org-*/service-*")
    assert pattern.test("org-a/service-api")
    assert not pattern.test("org-a")
"""
from __future__ import annotations

from dataclasses import dataclass, field

from provision_github_tokens.patterns.name_pattern import NamePattern, PatternError


def split_compound_literal(literal: str) -> tuple[str, str | None]:
    """Split *literal* into its account and optional repo segments.

    Raises
    ------
    PatternError
        If there is more than one ``/`` or a segment is empty.
    """
    parts = literal.split("/")

    if len(parts) > 2:
        raise PatternError(
            f"Pattern {literal!r} cannot have more than one slash", literal
        )
    if not parts[0]:
        raise PatternError(
            f"Pattern {literal!r} account part cannot be empty", literal
        )
    if len(parts) == 2 and not parts[1]:
        raise PatternError(
            f"Pattern {literal!r} repo part cannot be empty", literal
        )

    return parts[0], parts[1] if len(parts) == 2 else None


@dataclass(frozen=True)
class CompoundPattern:
    """Compiled ``account`` or ``account/repo`` pattern."""

    literal: str
    account: NamePattern = field(init=False, compare=False)
    repo: NamePattern | None = field(init=False, compare=False)

    def __post_init__(self) -> None:
        account_part, repo_part = split_compound_literal(self.literal)
        object.__setattr__(self, "account", NamePattern(account_part))
        object.__setattr__(
            self, "repo", NamePattern(repo_part) if repo_part is not None else None
        )

    @property
    def arity(self) -> int:
        """Number of ``/``-separated segments (1 or 2)."""
        return 1 if self.repo is None else 2

    @property
    def is_all(self) -> bool:
        if not self.account.is_all:
            return False
        return self.repo is None or self.repo.is_all

    def is_all_for_account(self, account: str) -> bool:
        """True when this pattern matches every repo in *account*."""
        if self.repo is None or not self.repo.is_all:
            return False
        return self.account.test(account)

    def test(self, candidate: str) -> bool:
        parts = candidate.split("/")
        if len(parts) != self.arity:
            return False
        if not self.account.test(parts[0]):
            return False
        return self.repo is None or self.repo.test(parts[1])

    def __str__(self) -> str:
        return self.literal


def compile_compound_pattern(literal: str) -> CompoundPattern:
    """Compile *literal* into a :class:`CompoundPattern`."""
    return CompoundPattern(literal)
