"""Secret provisioning rules.

A provisioning rule names the secrets and requesters it covers and, per
kind of target, whether provisioning is allowed or denied:

- ``account``: the requester's own account
- ``accounts``: accounts matched by pattern
- ``repo``: the requester's own repo (including its environments)
- ``repos``: repos matched by pattern (each with environment patterns)

Example
-------
::

    rule = ProvisionRule.from_dict({
        "secrets": ["DEPLOY_*"],
        "requesters": ["octo-org/*"],
        "to": {"github": {
            "repo": {"actions": "allow", "environments": {"prod-*": "deny"}},
            "accounts": {"octo-*": {"actions": "allow"}},
        }},
    })
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Mapping

from provision_github_tokens.patterns import (
    CompoundPattern,
    NamePattern,
    any_matches,
    compile_account_pattern,
    compile_compound_pattern,
    compile_name_pattern,
)

Decision = Literal["allow", "deny"]

_DECISIONS: frozenset[str] = frozenset({"allow", "deny"})


class SecretType(str, Enum):
    """Kind of GitHub secret."""

    ACTIONS = "actions"
    CODESPACES = "codespaces"
    DEPENDABOT = "dependabot"
    ENVIRONMENT = "environment"


# Types that can be provisioned to accounts and repos directly.
SECRET_TYPES: tuple[SecretType, ...] = (
    SecretType.ACTIONS,
    SecretType.CODESPACES,
    SecretType.DEPENDABOT,
)


def _decision(value: object) -> Decision | None:
    if value is None:
        return None
    text = str(value).lower()
    if text not in _DECISIONS:
        raise ValueError(f"Invalid decision {value!r}; expected 'allow' or 'deny'")
    return text  # type: ignore[return-value]


@dataclass(frozen=True)
class SecretTypeSettings:
    """Per-type allow/deny settings; ``None`` means "not specified"."""

    actions: Decision | None = None
    codespaces: Decision | None = None
    dependabot: Decision | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object] | None) -> SecretTypeSettings:
        data = data or {}
        return cls(
            actions=_decision(data.get("actions")),
            codespaces=_decision(data.get("codespaces")),
            dependabot=_decision(data.get("dependabot")),
        )

    def select(self, secret_type: SecretType) -> Decision | None:
        """Return the setting for *secret_type*.

        Raises
        ------
        ValueError
            For ``environment``, which is not a per-type setting.
        """
        if secret_type is SecretType.ACTIONS:
            return self.actions
        if secret_type is SecretType.CODESPACES:
            return self.codespaces
        if secret_type is SecretType.DEPENDABOT:
            return self.dependabot
        raise ValueError(f"Unexpected secret type {secret_type!r}")


@dataclass(frozen=True)
class RepoSecretSettings(SecretTypeSettings):
    """Per-type settings plus environment pattern settings, in order."""

    environments: tuple[tuple[NamePattern, Decision], ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object] | None) -> RepoSecretSettings:
        data = data or {}
        types = SecretTypeSettings.from_dict(data)
        raw_envs: Mapping[str, object] = data.get("environments") or {}  # type: ignore[assignment]
        return cls(
            actions=types.actions,
            codespaces=types.codespaces,
            dependabot=types.dependabot,
            environments=tuple(
                (compile_name_pattern(str(env)), _decision(value))  # type: ignore[misc]
                for env, value in raw_envs.items()
            ),
        )


@dataclass(frozen=True)
class ProvisionRule:
    """One entry of the ordered secret provisioning rule list."""

    secrets: tuple[NamePattern, ...]
    requesters: tuple[CompoundPattern, ...]
    account: SecretTypeSettings = SecretTypeSettings()
    accounts: tuple[tuple[NamePattern, SecretTypeSettings], ...] = ()
    repo: RepoSecretSettings = RepoSecretSettings()
    repos: tuple[tuple[CompoundPattern, RepoSecretSettings], ...] = ()
    description: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ProvisionRule:
        """Build a rule from a plain dictionary of pattern literals.

        Raises
        ------
        PatternError
            If any pattern literal is malformed.
        """
        to: Mapping[str, object] = data.get("to") or {}  # type: ignore[assignment]
        github: Mapping[str, Mapping[str, object]] = to.get("github") or {}  # type: ignore[assignment]
        accounts: Mapping[str, object] = github.get("accounts") or {}
        repos: Mapping[str, object] = github.get("repos") or {}
        description = data.get("description")

        return cls(
            secrets=tuple(compile_name_pattern(str(s)) for s in data.get("secrets") or []),  # type: ignore[attr-defined]
            requesters=tuple(
                compile_compound_pattern(str(r)) for r in data.get("requesters") or []  # type: ignore[attr-defined]
            ),
            account=SecretTypeSettings.from_dict(github.get("account")),
            accounts=tuple(
                (compile_account_pattern(str(p)), SecretTypeSettings.from_dict(v))  # type: ignore[arg-type]
                for p, v in accounts.items()
            ),
            repo=RepoSecretSettings.from_dict(github.get("repo")),
            repos=tuple(
                (compile_compound_pattern(str(p)), RepoSecretSettings.from_dict(v))  # type: ignore[arg-type]
                for p, v in repos.items()
            ),
            description=str(description) if description else None,
        )

    def matches(self, secret_name: str, requester: str) -> bool:
        return any_matches(self.secrets, secret_name) and any_matches(
            self.requesters, requester
        )
