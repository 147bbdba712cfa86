"""Repository environment listing and resolution.

Listing a repository's deployment environments is I/O, so it is delegated
to an :class:`EnvironmentLister`.  :class:`EnvironmentResolver` memoizes the
listing per repository for the lifetime of one authorization run and
filters it by name patterns.
"""
from __future__ import annotations

import logging
from typing import Mapping, Protocol, Sequence

from provision_github_tokens.patterns import NamePattern, any_matches
from provision_github_tokens.references import RepoRef

logger = logging.getLogger(__name__)


class EnvironmentLister(Protocol):
    """Lists the environment names of a repository."""

    async def list_environments(self, repo: RepoRef) -> list[str]:
        ...


class StaticEnvironmentLister:
    """Serves environments from a ``"account/repo" -> names`` mapping.

    Repositories missing from the mapping have no environments.
    """

    def __init__(self, environments: Mapping[str, Sequence[str]]) -> None:
        self._environments = {name: list(envs) for name, envs in environments.items()}

    async def list_environments(self, repo: RepoRef) -> list[str]:
        return list(self._environments.get(repo.full_name, []))


class EnvironmentResolver:
    """Resolves environment name patterns against a repository.

    Parameters
    ----------
    lister:
        Source of environment names.  It is consulted at most once per
        repository; a failing call is not cached, so a later call retries.
    """

    def __init__(self, lister: EnvironmentLister) -> None:
        self._lister = lister
        self._by_repo: dict[RepoRef, list[str]] = {}

    async def resolve_environments(
        self, repo: RepoRef, patterns: Sequence[NamePattern]
    ) -> list[str]:
        """Return the environments of *repo* matching any of *patterns*."""
        resolved = [env for env in await self._repo_environments(repo) if any_matches(patterns, env)]
        logger.debug(
            "Environment patterns %s for %s resolved to %s",
            [p.literal for p in patterns],
            repo,
            resolved,
        )
        return resolved

    async def _repo_environments(self, repo: RepoRef) -> list[str]:
        cached = self._by_repo.get(repo)
        if cached is not None:
            return cached

        names = list(await self._lister.list_environments(repo))
        logger.debug("Repo %s has environments %s", repo, names)
        self._by_repo[repo] = names
        return names
