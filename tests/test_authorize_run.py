"""End-to-end tests for Authorizer over several requesters."""
from __future__ import annotations

import logging
import textwrap

import pytest

from provision_github_tokens.authorizer import Authorizer, DiscoveredRequester
from provision_github_tokens.config import ConfigLoader
from provision_github_tokens.discovery import environment_lister, load_registry
from provision_github_tokens.provision import SecretType
from provision_github_tokens.references import EnvironmentRef, RepoRef

API = RepoRef("octo-org", "api")
WEB = RepoRef("octo-org", "web")

PROVIDER_YAML = textwrap.dedent(
    """\
    permissions:
      rules:
        - description: Repos can read code
          resources:
            - accounts: [.]
              allRepos: true
          consumers: ["./*"]
          permissions:
            contents: read
    provision:
      rules:
        secrets:
          - description: Repos can provision to themselves
            secrets: ["*"]
            requesters: ["./*"]
            to:
              github:
                repo:
                  actions: allow
                  environments:
                    "*": allow
    """
)

APPS_YAML = textwrap.dedent(
    """\
    - appId: 1
      issuer: {enabled: true}
    - appId: 2
      provisioner: {enabled: true}
    """
)

DISCOVERY_YAML = textwrap.dedent(
    """\
    apps:
      - {id: 1}
      - {id: 2}
    installations:
      - id: 10
        app_id: 1
        account: {login: octo-org}
        repository_selection: all
        permissions: {contents: write}
        repositories:
          - {owner: {login: octo-org}, name: api}
          - {owner: {login: octo-org}, name: web}
      - id: 20
        app_id: 2
        account: {login: octo-org}
        permissions: {secrets: write}
        repositories:
          - {owner: {login: octo-org}, name: api}
          - {owner: {login: octo-org}, name: web}
    environments:
      octo-org/api: [prod, dev]
    """
)

API_YAML = textwrap.dedent(
    """\
    tokens:
      reader:
        repos: all
        permissions:
          contents: read
      shared-reader:
        shared: true
        repos: all
        permissions:
          contents: read
    provision:
      secrets:
        READ_TOKEN:
          token: reader
          github:
            repo:
              actions: true
              environments: [prod]
    """
)


def _authorizer() -> Authorizer:
    loader = ConfigLoader()
    snapshot = loader.load_discovery_string(DISCOVERY_YAML)
    return Authorizer(
        load_registry(snapshot, loader.load_apps_string(APPS_YAML)),
        loader.load_provider_string(PROVIDER_YAML, RepoRef("octo-org", ".github")),
        environment_lister(snapshot),
    )


def _requester(repo: RepoRef, yaml_content: str) -> DiscoveredRequester:
    return DiscoveredRequester(repo, ConfigLoader().load_requester_string(yaml_content, repo))


class TestAuthorizer:
    @pytest.mark.asyncio
    async def test_single_requester_allowed(self) -> None:
        result = await _authorizer().authorize([_requester(API, API_YAML)])

        assert result.is_allowed
        assert len(result.provision_results) == 1
        provision = result.provision_results[0]
        assert [(r.target.type, r.target.target) for r in provision.results] == [
            (SecretType.ACTIONS, API),
            (SecretType.ENVIRONMENT, EnvironmentRef("octo-org", "api", "prod")),
        ]
        assert len(result.token_results) == 1
        assert result.token_results[0].consumer == API

    @pytest.mark.asyncio
    async def test_shared_token_of_later_requester(self) -> None:
        web_yaml = "provision:\n  secrets:\n    READ:\n      token: api.shared-reader\n      github: {repo: {actions: true}}\n"
        result = await _authorizer().authorize(
            [_requester(WEB, web_yaml), _requester(API, API_YAML)]
        )
        assert result.is_allowed
        assert [str(r.request.requester) for r in result.provision_results] == ["octo-org/api", "octo-org/web"]
        assert [str(r.consumer) for r in result.token_results] == ["octo-org/api", "octo-org/web"]

    @pytest.mark.asyncio
    async def test_private_token_of_other_requester(self) -> None:
        web_yaml = "provision:\n  secrets:\n    READ:\n      token: api.reader\n      github: {repo: {actions: true}}\n"
        result = await _authorizer().authorize([_requester(API, API_YAML), _requester(WEB, web_yaml)])

        web = result.provision_results[1]
        assert web.request.requester == WEB
        assert web.request.token_declaration is None
        assert web.request.token_declaration_is_registered
        assert not web.is_allowed
        assert not result.is_allowed

    @pytest.mark.asyncio
    async def test_failing_secret_is_isolated(self, caplog: pytest.LogCaptureFixture) -> None:
        broken_yaml = textwrap.dedent(
            """\
            tokens:
              empty:
                repos: all
                permissions: {contents: none}
            provision:
              secrets:
                BROKEN:
                  token: empty
                  github: {repo: {actions: true}}
            """
        )
        with caplog.at_level(logging.ERROR):
            result = await _authorizer().authorize(
                [_requester(WEB, broken_yaml), _requester(API, API_YAML)]
            )

        assert [f.secret for f in result.failures] == ["BROKEN"]
        assert result.failures[0].repo == WEB
        assert [r.request.requester for r in result.provision_results] == [API]
        assert result.provision_results[0].is_allowed
        assert not result.is_allowed
        assert "BROKEN" in caplog.text

    @pytest.mark.asyncio
    async def test_explanations_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="provision_github_tokens.authorizer"):
            await _authorizer().authorize([_requester(API, API_YAML)])
        assert "Secret #1:\n✅ Repo octo-org/api was allowed to provision secret READ_TOKEN:" in caplog.text
        assert "Token #1:" in caplog.text

    @pytest.mark.asyncio
    async def test_no_requesters(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            result = await _authorizer().authorize([])
        assert result.provision_results == ()
        assert result.is_allowed
        assert "No secrets were authorized" in caplog.text
