"""Provisioning requests and their materialized targets."""
from __future__ import annotations

from dataclasses import dataclass

from provision_github_tokens.provision.declaration import SecretDeclaration
from provision_github_tokens.provision.rules import SecretType
from provision_github_tokens.references import (
    AccountRef,
    EnvironmentRef,
    RepoRef,
    TargetRef,
    ref_sort_key,
)
from provision_github_tokens.tokens import TokenDeclaration

PLATFORM = "github"


def check_type_fits_target(secret_type: SecretType, target: TargetRef) -> None:
    """Raise ValueError unless *secret_type* can be written to *target*.

    Environment secrets need an :class:`EnvironmentRef`; every other type
    needs an account or a repo.
    """
    if (secret_type is SecretType.ENVIRONMENT) != isinstance(target, EnvironmentRef):
        raise ValueError(
            f"Secret type {secret_type.value!r} cannot target {type(target).__name__} {target}"
        )


@dataclass(frozen=True)
class ProvisionTarget:
    """One place a secret is written to.

    Environment secrets always target an :class:`EnvironmentRef`; the other
    types target an :class:`AccountRef` or a :class:`RepoRef`.
    """

    type: SecretType
    target: TargetRef
    platform: str = PLATFORM

    def __post_init__(self) -> None:
        check_type_fits_target(self.type, self.target)

    @property
    def is_account(self) -> bool:
        return isinstance(self.target, AccountRef)


def target_sort_key(target: ProvisionTarget) -> tuple[tuple[str, int, str, int, str], str]:
    return (ref_sort_key(target.target), target.type.value)


@dataclass(frozen=True)
class ProvisionTargetRequest:
    """A request to provision secret *name* to a single target."""

    requester: RepoRef
    name: str
    type: SecretType
    target: TargetRef

    def __post_init__(self) -> None:
        check_type_fits_target(self.type, self.target)

    @classmethod
    def for_target(
        cls, requester: RepoRef, name: str, target: ProvisionTarget
    ) -> ProvisionTargetRequest:
        return cls(requester=requester, name=name, type=target.type, target=target.target)

    @property
    def is_self_account(self) -> bool:
        return self.requester.account == self.target.account

    @property
    def is_self_repo(self) -> bool:
        return (
            not isinstance(self.target, AccountRef)
            and self.requester.account == self.target.account
            and self.requester.repo == self.target.repo
        )


@dataclass(frozen=True)
class ProvisionRequest:
    """A requester's secret, its token and every target it expands to.

    Attributes
    ----------
    requester:
        The repository that declared the secret.
    name:
        Secret name.
    secret_declaration:
        The declaration the targets were expanded from.
    token_declaration:
        The token supplying the secret value, or ``None`` when the
        reference is unknown or not visible to the requester.
    token_declaration_is_registered:
        Whether the token reference exists at all.
    targets:
        Materialized targets, in expansion order.
    """

    requester: RepoRef
    name: str
    secret_declaration: SecretDeclaration
    token_declaration: TokenDeclaration | None
    token_declaration_is_registered: bool
    targets: tuple[ProvisionTarget, ...]

    def target_requests(self) -> list[ProvisionTargetRequest]:
        return [
            ProvisionTargetRequest.for_target(self.requester, self.name, target)
            for target in self.targets
        ]

    def sort_key(self) -> tuple[object, ...]:
        return (
            ref_sort_key(self.requester),
            self.name,
            tuple(target_sort_key(t) for t in sorted(self.targets, key=target_sort_key)),
        )
