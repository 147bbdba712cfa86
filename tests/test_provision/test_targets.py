"""Tests for target expansion and provisioning request creation."""
from __future__ import annotations

import pytest

from provision_github_tokens.provision import (
    EnvironmentResolver,
    ProvisionRequestFactory,
    ProvisionTarget,
    ProvisionTargetExpander,
    SecretDeclaration,
    SecretType,
    SecretTypeFlags,
    StaticEnvironmentLister,
    combine_types,
    override_types,
)
from provision_github_tokens.references import AccountRef, EnvironmentRef, RepoRef
from provision_github_tokens.registry import (
    App,
    Installation,
    InstallationRegistry,
    ProvisionerConfig,
    Repo,
)
from provision_github_tokens.tokens import TokenDeclaration, TokenDeclarationRegistry

CI = RepoRef("octo-org", "ci")
API = RepoRef("octo-org", "api")
WEB = RepoRef("octo-org", "web")


def _installation(installation_id: int, account: str, selection: str) -> Installation:
    return Installation.model_validate(
        {
            "id": installation_id,
            "app_id": 1,
            "account": {"login": account},
            "repository_selection": selection,
            "permissions": {"secrets": "write"},
        }
    )


def _repos(account: str, *names: str) -> list[Repo]:
    return [Repo.model_validate({"owner": {"login": account}, "name": n}) for n in names]


@pytest.fixture()
def registry() -> InstallationRegistry:
    registry = InstallationRegistry()
    registry.register_app(App(id=1), provisioner=ProvisionerConfig(enabled=True))
    registry.register_installation(_installation(1, "octo-org", "selected"), _repos("octo-org", "api", "web", "ci"))
    registry.register_installation(_installation(2, "other-org", "all"), _repos("other-org", "lib"))
    return registry


@pytest.fixture()
def expander(registry: InstallationRegistry) -> ProvisionTargetExpander:
    lister = StaticEnvironmentLister(
        {
            "octo-org/api": ["prod", "staging", "dev"],
            "octo-org/web": ["prod", "dev"],
            "octo-org/ci": ["ci-env", "release"],
        }
    )
    return ProvisionTargetExpander(registry, EnvironmentResolver(lister))


def _declaration(github: dict) -> SecretDeclaration:
    return SecretDeclaration.from_dict({"token": "octo-org/ci.deploy", "github": github})


def _pairs(targets: list[ProvisionTarget]) -> list[tuple[SecretType, object]]:
    return [(t.type, t.target) for t in targets]


# ---------------------------------------------------------------------------
# Type flag merges
# ---------------------------------------------------------------------------


class TestTypeMerges:
    def test_combine_disable_is_sticky(self) -> None:
        flags = {t: None for t in (SecretType.ACTIONS, SecretType.CODESPACES, SecretType.DEPENDABOT)}
        combine_types(flags, SecretTypeFlags(actions=False, codespaces=True))
        combine_types(flags, SecretTypeFlags(actions=True, codespaces=None, dependabot=True))
        assert flags == {
            SecretType.ACTIONS: False,
            SecretType.CODESPACES: True,
            SecretType.DEPENDABOT: True,
        }

    def test_override_replaces_defined_types(self) -> None:
        flags = {
            SecretType.ACTIONS: False,
            SecretType.CODESPACES: True,
            SecretType.DEPENDABOT: None,
        }
        override_types(flags, SecretTypeFlags(actions=True, codespaces=None))
        assert flags[SecretType.ACTIONS] is True
        assert flags[SecretType.CODESPACES] is True
        assert flags[SecretType.DEPENDABOT] is None


# ---------------------------------------------------------------------------
# ProvisionTargetExpander
# ---------------------------------------------------------------------------


class TestExpandTargets:
    @pytest.mark.asyncio
    async def test_empty_declaration_has_no_targets(self, expander: ProvisionTargetExpander) -> None:
        assert await expander.expand_targets(CI, _declaration({})) == []

    @pytest.mark.asyncio
    async def test_target_order(self, expander: ProvisionTargetExpander) -> None:
        targets = await expander.expand_targets(
            CI,
            _declaration(
                {
                    "accounts": {"*": {"actions": True}},
                    "repos": {
                        "octo-org/api": {
                            "dependabot": True,
                            "actions": True,
                            "codespaces": True,
                            "environments": ["prod"],
                        }
                    },
                }
            ),
        )
        assert _pairs(targets) == [
            (SecretType.ACTIONS, AccountRef("octo-org")),
            (SecretType.ACTIONS, AccountRef("other-org")),
            (SecretType.ACTIONS, API),
            (SecretType.CODESPACES, API),
            (SecretType.DEPENDABOT, API),
            (SecretType.ENVIRONMENT, EnvironmentRef("octo-org", "api", "prod")),
        ]

    @pytest.mark.asyncio
    async def test_disabled_type_stays_disabled(self, expander: ProvisionTargetExpander) -> None:
        for repos in (
            {"octo-org/*": {"actions": False}, "octo-org/api": {"actions": True}},
            {"octo-org/api": {"actions": True}, "octo-org/*": {"actions": False}},
        ):
            targets = await expander.expand_targets(CI, _declaration({"repos": repos}))
            assert targets == []

    @pytest.mark.asyncio
    async def test_self_repo_reenables(self, expander: ProvisionTargetExpander) -> None:
        targets = await expander.expand_targets(
            CI,
            _declaration({"repos": {"octo-org/*": {"actions": False}}, "repo": {"actions": True}}),
        )
        assert _pairs(targets) == [(SecretType.ACTIONS, CI)]

    @pytest.mark.asyncio
    async def test_self_account_reenables(self, expander: ProvisionTargetExpander) -> None:
        targets = await expander.expand_targets(
            CI,
            _declaration({"accounts": {"*": {"codespaces": False}}, "account": {"codespaces": True}}),
        )
        assert _pairs(targets) == [(SecretType.CODESPACES, AccountRef("octo-org"))]

    @pytest.mark.asyncio
    async def test_self_targets_do_not_need_provisioners(self, expander: ProvisionTargetExpander) -> None:
        requester = RepoRef("nobody", "x")
        targets = await expander.expand_targets(
            requester, _declaration({"account": {"actions": True}, "repo": {"actions": True}})
        )
        assert _pairs(targets) == [
            (SecretType.ACTIONS, AccountRef("nobody")),
            (SecretType.ACTIONS, requester),
        ]

    @pytest.mark.asyncio
    async def test_environments_are_intersected_across_patterns(self, expander: ProvisionTargetExpander) -> None:
        targets = await expander.expand_targets(
            CI,
            _declaration(
                {
                    "repos": {
                        "octo-org/*": {"environments": ["prod", "dev"]},
                        "octo-org/api": {"environments": ["prod", "staging"]},
                    }
                }
            ),
        )
        assert _pairs(targets) == [
            (SecretType.ENVIRONMENT, EnvironmentRef("octo-org", "api", "prod")),
            (SecretType.ENVIRONMENT, EnvironmentRef("octo-org", "web", "prod")),
            (SecretType.ENVIRONMENT, EnvironmentRef("octo-org", "web", "dev")),
        ]

    @pytest.mark.asyncio
    async def test_self_repo_environments_are_unioned(self, expander: ProvisionTargetExpander) -> None:
        targets = await expander.expand_targets(
            CI,
            _declaration(
                {
                    "repos": {"octo-org/ci": {"environments": ["release"]}},
                    "repo": {"environments": ["ci-*", "release"]},
                }
            ),
        )
        assert _pairs(targets) == [
            (SecretType.ENVIRONMENT, EnvironmentRef("octo-org", "ci", "release")),
            (SecretType.ENVIRONMENT, EnvironmentRef("octo-org", "ci", "ci-env")),
        ]

    @pytest.mark.asyncio
    async def test_patterns_only_reach_provisioner_repos(self, expander: ProvisionTargetExpander) -> None:
        targets = await expander.expand_targets(
            CI, _declaration({"repos": {"*/lib": {"actions": True}, "octo-org/nope": {"actions": True}}})
        )
        assert _pairs(targets) == [(SecretType.ACTIONS, RepoRef("other-org", "lib"))]


# ---------------------------------------------------------------------------
# ProvisionRequestFactory
# ---------------------------------------------------------------------------


class TestProvisionRequestFactory:
    @pytest.mark.asyncio
    async def test_resolves_token_and_targets(self, expander: ProvisionTargetExpander) -> None:
        declarations = TokenDeclarationRegistry()
        token = TokenDeclaration.create("octo-org", "all", {"contents": "read"})
        declarations.register(CI, "deploy", token)

        request = await ProvisionRequestFactory(declarations, expander).create(
            CI, "DEPLOY", _declaration({"repo": {"actions": True}})
        )
        assert request.token_declaration == token
        assert request.token_declaration_is_registered
        assert _pairs(list(request.targets)) == [(SecretType.ACTIONS, CI)]
        assert [t.name for t in request.target_requests()] == ["DEPLOY"]

    @pytest.mark.asyncio
    async def test_private_token_of_other_repo(self, expander: ProvisionTargetExpander) -> None:
        declarations = TokenDeclarationRegistry()
        declarations.register(CI, "deploy", TokenDeclaration.create("octo-org", "all", {"contents": "read"}))

        request = await ProvisionRequestFactory(declarations, expander).create(
            WEB, "DEPLOY", _declaration({"repo": {"actions": True}})
        )
        assert request.token_declaration is None
        assert request.token_declaration_is_registered
