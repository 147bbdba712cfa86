"""Pydantic v2 models for discovered GitHub Apps and installations.

The models accept the payload shapes returned by the GitHub REST API
(``GET /app``, ``GET /app/installations``, ``GET /installation/repositories``)
and ignore fields the engine does not need.  All models are frozen: an
installation never changes after it has been registered.

Example
-------
>>> installation = Installation.model_validate({
...     "id": 1,
...     "app_id": 10,
...     "account": {"login": "octo-org"},
...     "repository_selection": "all",
...     "permissions": {"contents": "write"},
... })
>>> installation.account
'octo-org'
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from provision_github_tokens.permissions.access_level import AccessLevel
from provision_github_tokens.references import RepoRef

_FROZEN = {"frozen": True, "extra": "ignore"}


def _login(value: object) -> object:
    if isinstance(value, dict):
        return value.get("login")
    return value


class App(BaseModel):
    """A GitHub App identity."""

    model_config = _FROZEN

    id: int
    slug: str = Field(default="")
    name: str = Field(default="")


class Installation(BaseModel):
    """One GitHub App installation on one account."""

    model_config = _FROZEN

    id: int
    app_id: int
    account: str
    repository_selection: Literal["all", "selected"] = Field(default="selected")
    permissions: dict[str, AccessLevel] = Field(default_factory=dict)

    @field_validator("account", mode="before")
    @classmethod
    def account_login(cls, value: object) -> object:
        return _login(value)


class Repo(BaseModel):
    """A repository accessible to an installation."""

    model_config = _FROZEN

    owner: str
    name: str
    full_name: str = Field(default="")

    @field_validator("owner", mode="before")
    @classmethod
    def owner_login(cls, value: object) -> object:
        return _login(value)

    @model_validator(mode="before")
    @classmethod
    def default_full_name(cls, data: object) -> object:
        if isinstance(data, dict) and not data.get("full_name"):
            owner = _login(data.get("owner"))
            data = {**data, "full_name": f"{owner}/{data.get('name')}"}
        return data

    @property
    def ref(self) -> RepoRef:
        return RepoRef(self.owner, self.name)


class IssuerConfig(BaseModel):
    """Token issuing role of an app."""

    model_config = _FROZEN

    enabled: bool = Field(default=False)
    roles: tuple[str, ...] = Field(default=())


class ProvisionerConfig(BaseModel):
    """Secret provisioning role of an app."""

    model_config = _FROZEN

    enabled: bool = Field(default=False)


class AppRegistration(BaseModel):
    """An app together with the roles it was configured with."""

    model_config = _FROZEN

    app: App
    issuer: IssuerConfig = Field(default_factory=IssuerConfig)
    provisioner: ProvisionerConfig = Field(default_factory=ProvisionerConfig)


class InstallationRegistration(BaseModel):
    """An installation, its accessible repos, and its owning app."""

    model_config = _FROZEN

    installation: Installation
    app: AppRegistration
    repos: tuple[Repo, ...] = Field(default=())

    def has_repo(self, account: str, repo: str) -> bool:
        for candidate in self.repos:
            if candidate.owner == account and candidate.name == repo:
                return True
        return False
