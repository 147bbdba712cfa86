"""Expansion of secret declarations into concrete provisioning targets.

Account and repo patterns are resolved against the accounts and repos that
provisioner installations can reach.  When several patterns match the same
account or repo, their type flags are combined so that a type disabled by
any pattern stays disabled.  The requester's own account and repo settings
are applied last and override whatever the patterns produced.

Example
-------
::

    expander = ProvisionTargetExpander(registry, EnvironmentResolver(lister))
    targets = await expander.expand_targets(
        RepoRef("octo-org", "ci"),
        SecretDeclaration.from_dict({
            "token": "octo-org/ci.deploy",
            "github": {"repos": {"octo-org/*": {"actions": True}}},
        }),
    )
"""
from __future__ import annotations

import logging

from provision_github_tokens.provision.declaration import SecretDeclaration, SecretTypeFlags
from provision_github_tokens.provision.environment import EnvironmentResolver
from provision_github_tokens.provision.request import ProvisionRequest, ProvisionTarget
from provision_github_tokens.provision.rules import SECRET_TYPES, SecretType
from provision_github_tokens.references import AccountRef, EnvironmentRef, RepoRef
from provision_github_tokens.registry import InstallationRegistry
from provision_github_tokens.tokens import TokenDeclarationRegistry

logger = logging.getLogger(__name__)

TypeFlags = dict[SecretType, bool | None]


def _new_flags() -> TypeFlags:
    return {secret_type: None for secret_type in SECRET_TYPES}


def combine_types(base: TypeFlags, additions: SecretTypeFlags) -> None:
    """Merge *additions* into *base*; a type set to ``False`` stays ``False``."""
    values = additions.as_dict()
    for secret_type in SECRET_TYPES:
        value = values[secret_type.value]
        if base[secret_type] is not False and value is not None:
            base[secret_type] = value


def override_types(base: TypeFlags, additions: SecretTypeFlags) -> None:
    """Overwrite *base* with every type *additions* specifies."""
    values = additions.as_dict()
    for secret_type in SECRET_TYPES:
        value = values[secret_type.value]
        if value is not None:
            base[secret_type] = value


class _RepoTargets:
    __slots__ = ("flags", "environments")

    def __init__(self) -> None:
        self.flags: TypeFlags = _new_flags()
        self.environments: list[str] | None = None


class ProvisionTargetExpander:
    """Expands a :class:`SecretDeclaration` into :class:`ProvisionTarget` s.

    Parameters
    ----------
    registry:
        Installation registry used to resolve account and repo patterns.
    environment_resolver:
        Resolves environment name patterns for a repository.
    """

    def __init__(
        self, registry: InstallationRegistry, environment_resolver: EnvironmentResolver
    ) -> None:
        self._registry = registry
        self._environments = environment_resolver

    async def expand_targets(
        self, requester: RepoRef, declaration: SecretDeclaration
    ) -> list[ProvisionTarget]:
        """Return every target of *declaration*, accounts first.

        Account targets come first, then for each repo its typed targets
        followed by its environment targets.  Types are ordered actions,
        codespaces, dependabot.
        """
        by_account: dict[str, TypeFlags] = {}
        for pattern, flags in declaration.accounts:
            for account in self._registry.resolve_provisioner_accounts([pattern]):
                combine_types(by_account.setdefault(account, _new_flags()), flags)

        override_types(by_account.setdefault(requester.account, _new_flags()), declaration.account)

        by_repo: dict[RepoRef, _RepoTargets] = {}
        for repo_pattern, repo_flags in declaration.repos:
            for repo in self._registry.resolve_provisioner_repos([repo_pattern]):
                entry = by_repo.setdefault(repo, _RepoTargets())
                combine_types(entry.flags, repo_flags)

                environments = (
                    await self._environments.resolve_environments(repo, repo_flags.environments)
                    if repo_flags.environments
                    else []
                )
                if entry.environments is None:
                    entry.environments = environments
                else:
                    # Every matching pattern must agree on an environment.
                    entry.environments = [e for e in entry.environments if e in environments]

        self_repo = by_repo.setdefault(requester, _RepoTargets())
        override_types(self_repo.flags, declaration.repo)
        if self_repo.environments is None:
            self_repo.environments = []
        if declaration.repo.environments:
            for env in await self._environments.resolve_environments(
                requester, declaration.repo.environments
            ):
                if env not in self_repo.environments:
                    self_repo.environments.append(env)

        targets: list[ProvisionTarget] = []
        for account, account_flags in by_account.items():
            for secret_type in SECRET_TYPES:
                if account_flags[secret_type]:
                    targets.append(ProvisionTarget(secret_type, AccountRef(account)))

        for repo, entry in by_repo.items():
            for secret_type in SECRET_TYPES:
                if entry.flags[secret_type]:
                    targets.append(ProvisionTarget(secret_type, repo))
            for env in entry.environments or []:
                targets.append(
                    ProvisionTarget(
                        SecretType.ENVIRONMENT, EnvironmentRef(repo.account, repo.repo, env)
                    )
                )

        logger.debug("Secret declaration of %s expanded to %d targets", requester, len(targets))
        return targets


class ProvisionRequestFactory:
    """Builds :class:`ProvisionRequest` objects for requester secrets.

    Parameters
    ----------
    declarations:
        Registry the secret's token reference is resolved through.
    expander:
        Target expander for the secret declaration.
    """

    def __init__(
        self,
        declarations: TokenDeclarationRegistry,
        expander: ProvisionTargetExpander,
    ) -> None:
        self._declarations = declarations
        self._expander = expander

    async def create(
        self, requester: RepoRef, name: str, declaration: SecretDeclaration
    ) -> ProvisionRequest:
        token_declaration, is_registered = self._declarations.find_for_requester(
            requester, declaration.token
        )
        if token_declaration is None:
            logger.debug(
                "Token %s for secret %s of %s is %s",
                declaration.token,
                name,
                requester,
                "not shared" if is_registered else "not declared",
            )

        targets = await self._expander.expand_targets(requester, declaration)
        return ProvisionRequest(
            requester=requester,
            name=name,
            secret_declaration=declaration,
            token_declaration=token_declaration,
            token_declaration_is_registered=is_registered,
            targets=tuple(targets),
        )

