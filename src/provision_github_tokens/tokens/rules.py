"""Token permission rules.

A token rule grants (or, with ``none``, revokes) permissions to the
consumers it names, for the resources it names.  Rules are kept in
declaration order; the authorizer folds them from first to last.

Example
-------
::

    rule = TokenRule.from_dict({
        "description": "CI can read code everywhere",
        "resources": [{"accounts": ["octo-org"], "allRepos": True}],
        "consumers": ["octo-org/*"],
        "permissions": {"contents": "read"},
    })
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from provision_github_tokens.patterns import (
    CompoundPattern,
    NamePattern,
    any_matches,
    compile_compound_pattern,
    compile_name_pattern,
)
from provision_github_tokens.permissions import AccessLevel, normalize_permissions


@dataclass(frozen=True)
class ResourceCriteria:
    """Which accounts and which repo scope a rule applies to.

    Attributes
    ----------
    accounts:
        Account name patterns.
    no_repos:
        Applies to account-level tokens (no repository access).
    all_repos:
        Applies to tokens for all repos in a matching account.
    selected_repos:
        Repo name patterns for tokens scoped to specific repos.
    """

    accounts: tuple[NamePattern, ...] = ()
    no_repos: bool = False
    all_repos: bool = False
    selected_repos: tuple[NamePattern, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ResourceCriteria:
        return cls(
            accounts=tuple(compile_name_pattern(str(a)) for a in _list(data, "accounts")),
            no_repos=bool(data.get("noRepos", data.get("no_repos", False))),
            all_repos=bool(data.get("allRepos", data.get("all_repos", False))),
            selected_repos=tuple(
                compile_name_pattern(str(r))
                for r in _list(data, "selectedRepos", "selected_repos")
            ),
        )

    def matches_account(self, account: str) -> bool:
        return any_matches(self.accounts, account)

    def matches_repo(self, account: str, repo: str) -> bool:
        return self.matches_account(account) and any_matches(self.selected_repos, repo)


@dataclass(frozen=True)
class TokenRule:
    """One entry of the ordered token permission rule list."""

    resources: tuple[ResourceCriteria, ...]
    consumers: tuple[CompoundPattern, ...]
    permissions: dict[str, AccessLevel] = field(default_factory=dict, hash=False)
    description: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> TokenRule:
        """Build a rule from a plain dictionary of pattern literals.

        Raises
        ------
        PatternError
            If any pattern literal is malformed.
        ValueError
            If a permission value is not an access level.
        """
        raw_permissions = data.get("permissions", {}) or {}
        description = data.get("description")
        return cls(
            resources=tuple(
                ResourceCriteria.from_dict(r) for r in _list(data, "resources")  # type: ignore[arg-type]
            ),
            consumers=tuple(
                compile_compound_pattern(str(c)) for c in _list(data, "consumers")
            ),
            permissions=normalize_permissions(raw_permissions),  # type: ignore[arg-type]
            description=str(description) if description else None,
        )

    def matches_consumer(self, consumer: str) -> bool:
        return any_matches(self.consumers, consumer)


def _list(data: Mapping[str, object], *keys: str) -> list[object]:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return list(value)  # type: ignore[call-overload]
    return []
