"""Account, repository and environment references.

References identify token consumers and provisioning targets.  They are
frozen (hashable) so they can key result maps and be compared cheaply.

Example
-------
>>> ref = repo_ref_from_name("octo-org/api")
>>> str(ref)
'octo-org/api'
>>> ref.account_ref
AccountRef(account='octo-org')
"""
from __future__ import annotations

from dataclasses import dataclass


def _check_segment(kind: str, value: str) -> None:
    if not isinstance(value, str) or not value or "/" in value:
        raise ValueError(f"Invalid {kind} name {value!r}")


@dataclass(frozen=True)
class AccountRef:
    """A GitHub user or organization."""

    account: str

    def __post_init__(self) -> None:
        _check_segment("account", self.account)

    def __str__(self) -> str:
        return self.account


@dataclass(frozen=True)
class RepoRef:
    """A repository, identified by owner login and name."""

    account: str
    repo: str

    def __post_init__(self) -> None:
        _check_segment("account", self.account)
        _check_segment("repo", self.repo)

    @property
    def account_ref(self) -> AccountRef:
        return AccountRef(self.account)

    @property
    def full_name(self) -> str:
        return f"{self.account}/{self.repo}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class EnvironmentRef:
    """A deployment environment within a repository."""

    account: str
    repo: str
    environment: str

    def __post_init__(self) -> None:
        _check_segment("account", self.account)
        _check_segment("repo", self.repo)
        if not isinstance(self.environment, str) or not self.environment:
            raise ValueError(f"Invalid environment name {self.environment!r}")

    @property
    def repo_ref(self) -> RepoRef:
        return RepoRef(self.account, self.repo)

    def __str__(self) -> str:
        # Environment targets are addressed through their repository.
        return f"{self.account}/{self.repo}"


AccountOrRepoRef = AccountRef | RepoRef
TargetRef = AccountRef | RepoRef | EnvironmentRef


def repo_ref_from_name(name: str) -> RepoRef:
    """Parse an ``owner/name`` string into a :class:`RepoRef`."""
    parts = name.split("/")
    if len(parts) != 2:
        raise ValueError(f"Invalid repo name {name!r}")
    return RepoRef(parts[0], parts[1])


def is_repo_ref(ref: TargetRef) -> bool:
    """True for repository and environment references."""
    return isinstance(ref, (RepoRef, EnvironmentRef))


def consumer_ref(ref: TargetRef) -> AccountOrRepoRef:
    """Return the token consumer for a provisioning target."""
    if isinstance(ref, EnvironmentRef):
        return ref.repo_ref
    return ref


def ref_sort_key(ref: TargetRef) -> tuple[str, int, str, int, str]:
    """Sort key: account, then repo, then environment; shorter refs first."""
    if isinstance(ref, EnvironmentRef):
        return (ref.account, 1, ref.repo, 1, ref.environment)
    if isinstance(ref, RepoRef):
        return (ref.account, 1, ref.repo, 0, "")
    return (ref.account, 0, "", 0, "")
