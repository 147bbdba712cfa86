"""Token requests and token declarations.

A *token declaration* is what a repository writes in its configuration: the
account, repo patterns and permissions it would like a token for.  A
*token request* is a declaration resolved for one consumer, with concrete
repository names.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Literal, Mapping, Sequence

from provision_github_tokens.patterns import compile_compound_pattern
from provision_github_tokens.permissions import AccessLevel, PermissionMap, normalize_permissions
from provision_github_tokens.references import AccountOrRepoRef, ref_sort_key

if TYPE_CHECKING:
    from provision_github_tokens.registry import InstallationRegistry

logger = logging.getLogger(__name__)

Repos = Literal["all"] | tuple[str, ...]


class RepoScope(str, Enum):
    """Repository scope of a token."""

    ALL_REPOS = "ALL_REPOS"
    NO_REPOS = "NO_REPOS"
    SELECTED_REPOS = "SELECTED_REPOS"


_SCOPE_ORDER: dict[RepoScope, int] = {
    RepoScope.NO_REPOS: 0,
    RepoScope.ALL_REPOS: 1,
    RepoScope.SELECTED_REPOS: 2,
}


def _normalize_repos(repos: str | Sequence[str]) -> Repos:
    if repos == "all":
        return "all"
    if isinstance(repos, str):
        raise ValueError(f"Invalid repos {repos!r}; expected 'all' or a list of names")
    return tuple(sorted(set(repos)))


def _permissions_key(permissions: Mapping[str, AccessLevel]) -> tuple[tuple[str, str], ...]:
    return tuple(sorted((name, access.value) for name, access in permissions.items()))


@dataclass(frozen=True)
class TokenRequest:
    """A request for an installation token on behalf of *consumer*.

    Attributes
    ----------
    consumer:
        The account or repo that will use the token.
    role:
        Issuer role the token is requested with, if any.
    account:
        The account the token grants access to.
    repos:
        ``"all"``, or the repo names in *account* (empty for no repos).
    permissions:
        Wanted permissions.
    """

    consumer: AccountOrRepoRef
    role: str | None
    account: str
    repos: Repos
    permissions: dict[str, AccessLevel] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        consumer: AccountOrRepoRef,
        account: str,
        repos: str | Sequence[str],
        permissions: PermissionMap,
        role: str | None = None,
    ) -> TokenRequest:
        """Build a normalized request (sorted unique repos, coerced levels)."""
        return cls(
            consumer=consumer,
            role=role,
            account=account,
            repos=_normalize_repos(repos),
            permissions=normalize_permissions(permissions),
        )

    @property
    def scope(self) -> RepoScope:
        if self.repos == "all":
            return RepoScope.ALL_REPOS
        if not self.repos:
            return RepoScope.NO_REPOS
        return RepoScope.SELECTED_REPOS

    def sort_key(self) -> tuple[object, ...]:
        """Order by consumer, account, scope (no repos, all, selected), repos,
        then permissions with higher access first."""
        return (
            ref_sort_key(self.consumer),
            self.account,
            _SCOPE_ORDER[self.scope],
            () if self.repos == "all" else self.repos,
            tuple((name, -access.rank) for name, access in sorted(self.permissions.items())),
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.consumer,
                self.role,
                self.account,
                self.repos,
                _permissions_key(self.permissions),
            )
        )


@dataclass(frozen=True)
class TokenDeclaration:
    """A token declared in a requester's configuration.

    ``repos`` holds repo name patterns relative to ``account``, or ``"all"``.
    """

    account: str
    repos: Repos
    permissions: dict[str, AccessLevel] = field(default_factory=dict)
    shared: bool = False
    as_role: str | None = None

    @classmethod
    def create(
        cls,
        account: str,
        repos: str | Sequence[str],
        permissions: PermissionMap,
        shared: bool = False,
        as_role: str | None = None,
    ) -> TokenDeclaration:
        return cls(
            account=account,
            repos=_normalize_repos(repos),
            permissions=normalize_permissions(permissions),
            shared=shared,
            as_role=as_role,
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.account,
                self.repos,
                _permissions_key(self.permissions),
                self.shared,
                self.as_role,
            )
        )


class TokenRequestFactory:
    """Resolves token declarations into token requests for a consumer.

    Repo patterns in a declaration are resolved against the repos reachable
    by issuer installations.  Identical requests are returned as the same
    object so that each distinct token is authorized and created once.
    """

    def __init__(self, registry: InstallationRegistry) -> None:
        self._registry = registry
        self._cache: dict[TokenRequest, TokenRequest] = {}

    def create(
        self, declaration: TokenDeclaration, consumer: AccountOrRepoRef
    ) -> TokenRequest:
        if declaration.repos == "all":
            repos: str | list[str] = "all"
        else:
            patterns = [
                compile_compound_pattern(f"{declaration.account}/{repo}")
                for repo in declaration.repos
            ]
            repos = [ref.repo for ref in self._registry.resolve_issuer_repos(patterns)]
            logger.debug(
                "Repo patterns %s in %s resolved to %s",
                list(declaration.repos),
                declaration.account,
                repos,
            )

        request = TokenRequest.create(
            consumer=consumer,
            account=declaration.account,
            repos=repos,
            permissions=declaration.permissions,
            role=declaration.as_role,
        )
        return self._cache.setdefault(request, request)
