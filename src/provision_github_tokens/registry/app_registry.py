"""In-memory registry of discovered GitHub Apps and their installations.

Discovery registers every app first, then each installation together with
the repositories it can access.  Registration precomputes the issuer and
provisioner views so that queries never have to recompute them.

Example
-------
::

    registry = InstallationRegistry()
    registry.register_app(app, IssuerConfig(enabled=True, roles=("deploy",)))
    registry.register_installation(installation, repos)
    issuers = registry.find_issuers_for_token_request(request)
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Sequence

from provision_github_tokens.patterns import CompoundPattern, Pattern, any_matches
from provision_github_tokens.permissions import (
    is_empty_permissions,
    is_sufficient_access,
    is_write_access,
)
from provision_github_tokens.references import RepoRef, TargetRef, is_repo_ref
from provision_github_tokens.registry.models import (
    App,
    AppRegistration,
    Installation,
    InstallationRegistration,
    IssuerConfig,
    ProvisionerConfig,
    Repo,
)

if TYPE_CHECKING:
    from provision_github_tokens.tokens.request import TokenRequest

logger = logging.getLogger(__name__)


class UnregisteredAppError(KeyError):
    """Raised when an installation refers to an app that was never registered.

    Attributes
    ----------
    app_id:
        The unknown app id.
    installation_id:
        The installation that referred to it.
    """

    def __init__(self, app_id: int, installation_id: int) -> None:
        self.app_id = app_id
        self.installation_id = installation_id
        super().__init__(
            f"Installation {installation_id} belongs to app {app_id}, "
            "which is not registered"
        )

    def __str__(self) -> str:
        return str(self.args[0])


class _RoleMembers:
    """Accounts and repos reachable through one role, in first-seen order."""

    def __init__(self) -> None:
        self.accounts: dict[str, None] = {}
        self.repos: dict[str, RepoRef] = {}

    def add(self, installation: Installation, repos: Iterable[Repo]) -> None:
        self.accounts.setdefault(installation.account, None)
        for repo in repos:
            self.repos.setdefault(repo.full_name, repo.ref)


class InstallationRegistry:
    """Index of apps and installations, queryable by role and request shape."""

    def __init__(self) -> None:
        self._apps: dict[int, AppRegistration] = {}
        self._installations: dict[int, InstallationRegistration] = {}
        self._issuers: list[InstallationRegistration] = []
        self._provisioners: list[InstallationRegistration] = []
        self._issuer_members = _RoleMembers()
        self._provisioner_members = _RoleMembers()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_app(
        self,
        app: App,
        issuer: IssuerConfig | None = None,
        provisioner: ProvisionerConfig | None = None,
    ) -> AppRegistration:
        """Register an app and its role flags."""
        registration = AppRegistration(
            app=app,
            issuer=issuer or IssuerConfig(),
            provisioner=provisioner or ProvisionerConfig(),
        )
        self._apps[app.id] = registration
        logger.debug(
            "Registered app %s (issuer=%s roles=%s, provisioner=%s)",
            app.id,
            registration.issuer.enabled,
            list(registration.issuer.roles),
            registration.provisioner.enabled,
        )
        return registration

    def register_installation(
        self,
        installation: Installation,
        repos: Sequence[Repo] = (),
    ) -> InstallationRegistration:
        """Register an installation and the repos it can access.

        Raises
        ------
        UnregisteredAppError
            If the installation's app was not registered first.
        """
        app = self._apps.get(installation.app_id)
        if app is None:
            raise UnregisteredAppError(installation.app_id, installation.id)

        registration = InstallationRegistration(
            installation=installation, app=app, repos=tuple(repos)
        )
        self._installations[installation.id] = registration

        if app.issuer.enabled:
            self._issuers.append(registration)
            self._issuer_members.add(installation, repos)
        if app.provisioner.enabled:
            self._provisioners.append(registration)
            self._provisioner_members.add(installation, repos)

        logger.debug(
            "Registered installation %s of app %s for %s with %d repos",
            installation.id,
            installation.app_id,
            installation.account,
            len(registration.repos),
        )
        return registration

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def apps(self) -> list[AppRegistration]:
        return list(self._apps.values())

    @property
    def installations(self) -> list[InstallationRegistration]:
        return list(self._installations.values())

    @property
    def issuers(self) -> list[InstallationRegistration]:
        return list(self._issuers)

    @property
    def provisioners(self) -> list[InstallationRegistration]:
        return list(self._provisioners)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_issuers_for_token_request(
        self, request: TokenRequest
    ) -> list[InstallationRegistration]:
        """Return the issuer installations able to create *request*'s token.

        Write and admin access can only be issued for requests that name a
        role, regardless of what the permission rules allow.
        """
        want = request.permissions
        if is_empty_permissions(want):
            return []

        has_role = request.role is not None
        if not has_role and any(is_write_access(a) for a in want.values()):
            logger.debug("Token request for %s needs a role for write access", request.account)
            return []

        requested_repos = set(request.repos) if request.repos != "all" else set()
        found: list[InstallationRegistration] = []

        for registration in self._issuers:
            installation = registration.installation

            if has_role and request.role not in registration.app.issuer.roles:
                continue

            if not all(
                is_sufficient_access(installation.permissions.get(name), access)
                for name, access in want.items()
            ):
                continue

            if installation.repository_selection == "all":
                if installation.account == request.account:
                    found.append(registration)
                continue

            if request.repos == "all" or installation.account != request.account:
                continue

            match_count = 0
            for repo in registration.repos:
                if repo.owner == request.account and repo.name in requested_repos:
                    match_count += 1

            if match_count == len(request.repos):
                found.append(registration)

        return found

    def find_provisioners_for_account_or_repo(
        self, target: TargetRef
    ) -> list[InstallationRegistration]:
        """Return provisioner installations that can write to *target*."""
        if is_repo_ref(target):
            return [
                r
                for r in self._provisioners
                if r.has_repo(target.account, target.repo)  # type: ignore[union-attr]
            ]
        return [r for r in self._provisioners if r.installation.account == target.account]

    def resolve_issuer_accounts(self, patterns: Sequence[Pattern]) -> list[str]:
        return [a for a in self._issuer_members.accounts if any_matches(patterns, a)]

    def resolve_provisioner_accounts(self, patterns: Sequence[Pattern]) -> list[str]:
        return [
            a for a in self._provisioner_members.accounts if any_matches(patterns, a)
        ]

    def resolve_issuer_repos(self, patterns: Sequence[CompoundPattern]) -> list[RepoRef]:
        return _resolve_repos(self._issuer_members, patterns)

    def resolve_provisioner_repos(
        self, patterns: Sequence[CompoundPattern]
    ) -> list[RepoRef]:
        return _resolve_repos(self._provisioner_members, patterns)


def _resolve_repos(
    members: _RoleMembers, patterns: Sequence[CompoundPattern]
) -> list[RepoRef]:
    return [ref for name, ref in members.repos.items() if any_matches(patterns, name)]
