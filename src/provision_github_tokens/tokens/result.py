"""Immutable results of token authorization.

Every result carries the full rule trace so that a decision can be
explained after the fact: which rules applied, in what order, and what the
accumulated permissions were after each one.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from provision_github_tokens.permissions import AccessLevel
from provision_github_tokens.references import AccountOrRepoRef
from provision_github_tokens.tokens.request import RepoScope, TokenRequest
from provision_github_tokens.tokens.rules import TokenRule


@dataclass(frozen=True)
class TokenAuthRuleResult:
    """Trace entry for one applicable rule.

    Attributes
    ----------
    index:
        Zero-based position of the rule in the rule list.
    rule:
        The rule itself.
    have:
        Snapshot of the accumulated permissions after applying the rule.
    is_sufficient:
        Whether *have* covered the wanted permissions at this point.
    """

    index: int
    rule: TokenRule
    have: dict[str, AccessLevel]
    is_sufficient: bool


@dataclass(frozen=True)
class TokenAuthResourceResult:
    """Outcome for one resource (an account, all repos, or one repo)."""

    rules: tuple[TokenAuthRuleResult, ...]
    have: dict[str, AccessLevel]
    is_sufficient: bool


@dataclass(frozen=True)
class TokenAuthResult:
    """Outcome of authorizing one :class:`TokenRequest`.

    For ``ALL_REPOS`` and ``NO_REPOS`` requests, ``resource`` holds the
    trace.  For ``SELECTED_REPOS`` requests, ``results`` holds one trace per
    requested repo name.
    """

    request: TokenRequest
    scope: RepoScope
    want: dict[str, AccessLevel]
    max_want: AccessLevel
    is_sufficient: bool
    is_missing_role: bool
    is_allowed: bool
    resource: TokenAuthResourceResult | None = None
    results: dict[str, TokenAuthResourceResult] = field(default_factory=dict)

    @property
    def consumer(self) -> AccountOrRepoRef:
        return self.request.consumer

    @property
    def account(self) -> str:
        return self.request.account

    @property
    def role(self) -> str | None:
        return self.request.role

    def __bool__(self) -> bool:
        return self.is_allowed
