"""Pydantic v2 schemas for policy, requester, apps and discovery files.

Unknown keys are allowed (``$schema`` and future additions), mirroring the
permissive style of the configuration files themselves.  Keys accept the
camelCase spelling used in YAML (``allRepos``) as well as snake_case.

Provider (central policy) file
------------------------------
::

    permissions:
      rules:
        - description: CI can read code
          resources:
            - accounts: [.]
              allRepos: true
          consumers: [./*]
          permissions:
            contents: read
    provision:
      rules:
        secrets:
          - secrets: ["*"]
            requesters: [./*]
            to:
              github:
                repo:
                  actions: allow

Requester file
--------------
::

    tokens:
      deploy:
        repos: [api]
        permissions:
          contents: read
    provision:
      secrets:
        DEPLOY_TOKEN:
          token: deploy
          github:
            repo:
              actions: true
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from provision_github_tokens.permissions import AccessLevel
from provision_github_tokens.registry import App, Installation, IssuerConfig, ProvisionerConfig, Repo

DecisionValue = Literal["allow", "deny"]

_ALLOW = ConfigDict(extra="allow", populate_by_name=True)


# ---------------------------------------------------------------------------
# Provider configuration
# ---------------------------------------------------------------------------


class ResourceCriteriaModel(BaseModel):
    model_config = _ALLOW

    accounts: list[str] = Field(default_factory=list)
    no_repos: bool = Field(default=False, alias="noRepos")
    all_repos: bool = Field(default=False, alias="allRepos")
    selected_repos: list[str] = Field(default_factory=list, alias="selectedRepos")


class PermissionsRuleModel(BaseModel):
    """One token permission rule."""

    model_config = _ALLOW

    description: str | None = Field(default=None)
    resources: list[ResourceCriteriaModel] = Field(default_factory=list)
    consumers: list[str] = Field(default_factory=list)
    permissions: dict[str, AccessLevel] = Field(default_factory=dict)


class PermissionsSection(BaseModel):
    model_config = _ALLOW

    rules: list[PermissionsRuleModel] = Field(default_factory=list)


class SecretTypeSettingsModel(BaseModel):
    model_config = _ALLOW

    actions: DecisionValue | None = Field(default=None)
    codespaces: DecisionValue | None = Field(default=None)
    dependabot: DecisionValue | None = Field(default=None)


class RepoSecretSettingsModel(SecretTypeSettingsModel):
    environments: dict[str, DecisionValue] = Field(default_factory=dict)


class GitHubProvisionTargets(BaseModel):
    """GitHub targets of a provisioning rule.

    Keys of ``accounts`` are single-segment account patterns; a key holding
    ``/`` fails to load.  Owner/repo patterns go under ``repos``.
    """

    model_config = _ALLOW

    account: SecretTypeSettingsModel = Field(default_factory=SecretTypeSettingsModel)
    accounts: dict[str, SecretTypeSettingsModel] = Field(default_factory=dict)
    repo: RepoSecretSettingsModel = Field(default_factory=RepoSecretSettingsModel)
    repos: dict[str, RepoSecretSettingsModel] = Field(default_factory=dict)


class ProvisionTo(BaseModel):
    model_config = _ALLOW

    github: GitHubProvisionTargets = Field(default_factory=GitHubProvisionTargets)


class ProvisionRuleModel(BaseModel):
    """One secret provisioning rule."""

    model_config = _ALLOW

    description: str | None = Field(default=None)
    secrets: list[str] = Field(default_factory=list)
    requesters: list[str] = Field(default_factory=list)
    to: ProvisionTo = Field(default_factory=ProvisionTo)


class ProvisionRules(BaseModel):
    model_config = _ALLOW

    secrets: list[ProvisionRuleModel] = Field(default_factory=list)


class ProviderProvisionSection(BaseModel):
    model_config = _ALLOW

    rules: ProvisionRules = Field(default_factory=ProvisionRules)


class ProviderConfig(BaseModel):
    """Top-level schema of the central policy file.  Both sections are optional."""

    model_config = _ALLOW

    permissions: PermissionsSection = Field(default_factory=PermissionsSection)
    provision: ProviderProvisionSection = Field(default_factory=ProviderProvisionSection)


# ---------------------------------------------------------------------------
# Requester configuration
# ---------------------------------------------------------------------------


class TokenDeclarationModel(BaseModel):
    """A token a requester declares.

    ``account`` defaults to the requester's own account; ``as`` names the
    issuer role to request the token with.
    """

    model_config = _ALLOW

    shared: bool = Field(default=False)
    as_role: str | None = Field(default=None, alias="as")
    account: str | None = Field(default=None)
    repos: Literal["all"] | list[str] = Field(default_factory=list)
    permissions: dict[str, AccessLevel] = Field(default_factory=dict)


class SecretTypeFlagsModel(BaseModel):
    model_config = _ALLOW

    actions: bool | None = Field(default=None)
    codespaces: bool | None = Field(default=None)
    dependabot: bool | None = Field(default=None)


class RepoSecretTypeFlagsModel(SecretTypeFlagsModel):
    environments: list[str] = Field(default_factory=list)


class GitHubSecretTargets(BaseModel):
    model_config = _ALLOW

    account: SecretTypeFlagsModel = Field(default_factory=SecretTypeFlagsModel)
    accounts: dict[str, SecretTypeFlagsModel] = Field(default_factory=dict)
    repo: RepoSecretTypeFlagsModel = Field(default_factory=RepoSecretTypeFlagsModel)
    repos: dict[str, RepoSecretTypeFlagsModel] = Field(default_factory=dict)


class SecretDeclarationModel(BaseModel):
    model_config = _ALLOW

    token: str
    github: GitHubSecretTargets = Field(default_factory=GitHubSecretTargets)


class RequesterProvisionSection(BaseModel):
    model_config = _ALLOW

    secrets: dict[str, SecretDeclarationModel] = Field(default_factory=dict)


class RequesterConfig(BaseModel):
    """Top-level schema of a repository's requester file."""

    model_config = _ALLOW

    tokens: dict[str, TokenDeclarationModel] = Field(default_factory=dict)
    provision: RequesterProvisionSection = Field(default_factory=RequesterProvisionSection)


# ---------------------------------------------------------------------------
# Apps input and discovery snapshot
# ---------------------------------------------------------------------------


class AppInput(BaseModel):
    """Role configuration for one GitHub App.

    ``app_id`` may be given as a string, as it often is in CI inputs.
    """

    model_config = _ALLOW

    app_id: int = Field(alias="appId")
    issuer: IssuerConfig = Field(default_factory=IssuerConfig)
    provisioner: ProvisionerConfig = Field(default_factory=ProvisionerConfig)

    @field_validator("app_id", mode="before")
    @classmethod
    def parse_app_id(cls, value: object) -> object:
        if isinstance(value, str):
            return int(value.strip())
        return value


class DiscoveredInstallation(Installation):
    """An installation together with the repos it can access."""

    repositories: tuple[Repo, ...] = Field(default=())


class DiscoverySnapshot(BaseModel):
    """Apps, installations and environments discovered from GitHub."""

    model_config = _ALLOW

    apps: list[App] = Field(default_factory=list)
    installations: list[DiscoveredInstallation] = Field(default_factory=list)
    environments: dict[str, list[str]] = Field(default_factory=dict)
