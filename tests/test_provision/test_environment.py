"""Tests for EnvironmentResolver."""
from __future__ import annotations

import pytest

from provision_github_tokens.patterns import compile_name_pattern
from provision_github_tokens.provision import EnvironmentResolver, StaticEnvironmentLister
from provision_github_tokens.references import RepoRef

API = RepoRef("octo-org", "api")


class CountingLister:
    def __init__(self, failures: int = 0) -> None:
        self.calls = 0
        self.failures = failures

    async def list_environments(self, repo: RepoRef) -> list[str]:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("environment listing failed")
        return ["prod", "staging", "dev"]


class TestEnvironmentResolver:
    @pytest.mark.asyncio
    async def test_filters_by_patterns(self) -> None:
        resolver = EnvironmentResolver(CountingLister())
        patterns = [compile_name_pattern("prod"), compile_name_pattern("d*")]
        assert await resolver.resolve_environments(API, patterns) == ["prod", "dev"]

    @pytest.mark.asyncio
    async def test_listing_is_memoized(self) -> None:
        lister = CountingLister()
        resolver = EnvironmentResolver(lister)
        await resolver.resolve_environments(API, [compile_name_pattern("*")])
        await resolver.resolve_environments(API, [compile_name_pattern("prod")])
        assert lister.calls == 1

        await resolver.resolve_environments(RepoRef("octo-org", "web"), [compile_name_pattern("*")])
        assert lister.calls == 2

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self) -> None:
        lister = CountingLister(failures=1)
        resolver = EnvironmentResolver(lister)
        with pytest.raises(ConnectionError):
            await resolver.resolve_environments(API, [compile_name_pattern("*")])
        assert await resolver.resolve_environments(API, [compile_name_pattern("*")]) == [
            "prod",
            "staging",
            "dev",
        ]
        assert lister.calls == 2


class TestStaticEnvironmentLister:
    @pytest.mark.asyncio
    async def test_unknown_repo_has_no_environments(self) -> None:
        lister = StaticEnvironmentLister({"octo-org/api": ["prod"]})
        assert await lister.list_environments(API) == ["prod"]
        assert await lister.list_environments(RepoRef("octo-org", "web")) == []
