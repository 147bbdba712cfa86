"""Secret declarations written by requesting repositories.

A secret declaration names the token whose value should be provisioned and
the targets it should be provisioned to.  Each secret type is a tri-state
flag: ``True`` enables it, ``False`` disables it, ``None`` leaves it
unspecified.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from provision_github_tokens.patterns import (
    CompoundPattern,
    NamePattern,
    compile_account_pattern,
    compile_compound_pattern,
    compile_name_pattern,
)


def _flag(value: object) -> bool | None:
    return None if value is None else bool(value)


@dataclass(frozen=True)
class SecretTypeFlags:
    actions: bool | None = None
    codespaces: bool | None = None
    dependabot: bool | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object] | None) -> SecretTypeFlags:
        data = data or {}
        return cls(
            actions=_flag(data.get("actions")),
            codespaces=_flag(data.get("codespaces")),
            dependabot=_flag(data.get("dependabot")),
        )

    def as_dict(self) -> dict[str, bool | None]:
        return {
            "actions": self.actions,
            "codespaces": self.codespaces,
            "dependabot": self.dependabot,
        }


@dataclass(frozen=True)
class RepoSecretTypeFlags(SecretTypeFlags):
    """Type flags plus the environment name patterns to provision to."""

    environments: tuple[NamePattern, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object] | None) -> RepoSecretTypeFlags:
        data = data or {}
        flags = SecretTypeFlags.from_dict(data)
        return cls(
            actions=flags.actions,
            codespaces=flags.codespaces,
            dependabot=flags.dependabot,
            environments=tuple(
                compile_name_pattern(str(env))
                for env in data.get("environments") or []  # type: ignore[attr-defined]
            ),
        )


@dataclass(frozen=True)
class SecretDeclaration:
    """Where a requester wants one secret provisioned.

    Attributes
    ----------
    token:
        Reference to the token declaration supplying the secret value, in
        ``account/repo.name`` form.
    account:
        Types to provision to the requester's own account.
    accounts:
        Account patterns and their types.
    repo:
        Types and environments for the requester's own repo.
    repos:
        Repo patterns and their types and environments.
    """

    token: str
    account: SecretTypeFlags = SecretTypeFlags()
    accounts: tuple[tuple[NamePattern, SecretTypeFlags], ...] = ()
    repo: RepoSecretTypeFlags = RepoSecretTypeFlags()
    repos: tuple[tuple[CompoundPattern, RepoSecretTypeFlags], ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> SecretDeclaration:
        """Build a declaration from a plain dictionary.

        The targets live under ``github``, mirroring the configuration file.
        """
        github: Mapping[str, Mapping[str, object]] = data.get("github") or {}  # type: ignore[assignment]
        accounts: Mapping[str, object] = github.get("accounts") or {}
        repos: Mapping[str, object] = github.get("repos") or {}
        return cls(
            token=str(data["token"]),
            account=SecretTypeFlags.from_dict(github.get("account")),
            accounts=tuple(
                (compile_account_pattern(str(p)), SecretTypeFlags.from_dict(v))  # type: ignore[arg-type]
                for p, v in accounts.items()
            ),
            repo=RepoSecretTypeFlags.from_dict(github.get("repo")),
            repos=tuple(
                (compile_compound_pattern(str(p)), RepoSecretTypeFlags.from_dict(v))  # type: ignore[arg-type]
                for p, v in repos.items()
            ),
        )
