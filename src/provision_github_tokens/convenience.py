"""Convenience API for provision-github-tokens: 3-line quickstart.

Example
-------
::

    from provision_github_tokens import PolicyChecker
    checker = PolicyChecker(policy_yaml, defining_repo="octo-org/.github")
    print(checker.check_token("octo-org/ci", "octo-org", "all", {"contents": "read"}).is_allowed)

"""
from __future__ import annotations

from typing import Sequence

from provision_github_tokens.config import ConfigLoader
from provision_github_tokens.permissions import PermissionMap
from provision_github_tokens.provision import (
    ProvisionAuthorizer,
    ProvisionAuthTargetResult,
    ProvisionTargetRequest,
    SecretType,
)
from provision_github_tokens.references import (
    AccountOrRepoRef,
    AccountRef,
    EnvironmentRef,
    RepoRef,
    TargetRef,
    repo_ref_from_name,
)
from provision_github_tokens.tokens import TokenAuthorizer, TokenAuthResult, TokenRequest


def _ref(name: str) -> AccountOrRepoRef:
    return repo_ref_from_name(name) if "/" in name else AccountRef(name)


class PolicyChecker:
    """Checks single token and secret requests against a central policy.

    Parameters
    ----------
    policy_yaml:
        The central policy document.
    defining_repo:
        ``owner/name`` of the repo that defines the policy; ``.`` patterns
        refer to its account.
    """

    def __init__(self, policy_yaml: str, defining_repo: str) -> None:
        policy = ConfigLoader().load_provider_string(policy_yaml, repo_ref_from_name(defining_repo))
        self._tokens = TokenAuthorizer(policy.token_rules)
        self._provisions = ProvisionAuthorizer(policy.provision_rules)

    def check_token(
        self,
        consumer: str,
        account: str,
        repos: str | Sequence[str],
        permissions: PermissionMap,
        role: str | None = None,
    ) -> TokenAuthResult:
        """Authorize a token for *consumer* (``account`` or ``account/repo``)."""
        return self._tokens.authorize_token(
            TokenRequest.create(
                consumer=_ref(consumer),
                account=account,
                repos=repos,
                permissions=permissions,
                role=role,
            )
        )

    def check_secret(
        self,
        requester: str,
        name: str,
        secret_type: str,
        target: str,
        environment: str | None = None,
    ) -> ProvisionAuthTargetResult:
        """Authorize provisioning secret *name* from *requester* to *target*.

        Pass *environment* (with ``secret_type="environment"``) to target a
        deployment environment of the *target* repo.

        Raises
        ------
        ValueError
            If *secret_type* is unknown, or if an environment is given for a
            non-environment secret type or missing for ``"environment"``.
        """
        kind = SecretType(secret_type)
        if kind is SecretType.ENVIRONMENT and environment is None:
            raise ValueError(f"Environment secrets for {target} need an environment name")
        if kind is not SecretType.ENVIRONMENT and environment is not None:
            raise ValueError(
                f"Secret type {kind.value!r} cannot target environment {environment!r} of {target}"
            )

        target_ref: TargetRef = _ref(target)
        if environment is not None:
            repo = repo_ref_from_name(target)
            target_ref = EnvironmentRef(repo.account, repo.repo, environment)
        requester_ref: RepoRef = repo_ref_from_name(requester)
        return self._provisions.authorize_secret(
            ProvisionTargetRequest(
                requester=requester_ref,
                name=name,
                type=kind,
                target=target_ref,
            )
        )
