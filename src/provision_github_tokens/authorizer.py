"""Authorization run over every discovered requester.

:class:`Authorizer` wires the engine together for one run: it registers
every requester's token declarations, expands and authorizes each declared
secret, and returns all provisioning and token results in a stable order.
Each decision is explained in the log.

A requester whose secrets cannot be authorized (for example because a token
declaration wants no permissions, or environment listing failed) is logged
and recorded as a failure; the remaining requesters are still authorized.

Example
-------
::

    authorizer = Authorizer(registry, policy, StaticEnvironmentLister({}))
    result = await authorizer.authorize([
        DiscoveredRequester(RepoRef("octo-org", "api"), requester_policy),
    ])
    for provision_result in result.provision_results:
        print(provision_result.is_allowed)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from provision_github_tokens.config.loader import ProviderPolicy, RequesterPolicy
from provision_github_tokens.explain.provision_text import ProvisionAuthExplainer
from provision_github_tokens.explain.token_text import DENIED_ICON, TokenAuthExplainer
from provision_github_tokens.provision import (
    EnvironmentLister,
    EnvironmentResolver,
    ProvisionAuthorizer,
    ProvisionAuthResult,
    ProvisionRequestFactory,
    ProvisionTargetExpander,
)
from provision_github_tokens.references import RepoRef, ref_sort_key
from provision_github_tokens.registry import InstallationRegistry
from provision_github_tokens.tokens import (
    TokenAuthorizer,
    TokenAuthResult,
    TokenDeclarationRegistry,
    TokenRequestFactory,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredRequester:
    """A repository and its compiled requester configuration."""

    repo: RepoRef
    config: RequesterPolicy


@dataclass(frozen=True)
class RequesterFailure:
    """A requester secret that could not be authorized."""

    repo: RepoRef
    secret: str
    error: str


@dataclass(frozen=True)
class AuthorizeResult:
    """Sorted results of one authorization run.

    Attributes
    ----------
    provision_results:
        One result per requester secret, ordered by requester, secret name
        and targets.
    token_results:
        One result per distinct token request, ordered by consumer, account,
        scope, repos and permissions.
    failures:
        Secrets that raised instead of producing a result.
    """

    provision_results: tuple[ProvisionAuthResult, ...]
    token_results: tuple[TokenAuthResult, ...]
    failures: tuple[RequesterFailure, ...] = ()

    @property
    def is_allowed(self) -> bool:
        """True iff nothing failed and every result is allowed."""
        return (
            not self.failures
            and all(r.is_allowed for r in self.provision_results)
            and all(r.is_allowed for r in self.token_results)
        )


class Authorizer:
    """Authorizes the secrets of discovered requesters against policy.

    Parameters
    ----------
    registry:
        Installations discovered for this run.
    policy:
        Compiled central policy.
    environment_lister:
        Source of repository environment names.
    """

    def __init__(
        self,
        registry: InstallationRegistry,
        policy: ProviderPolicy,
        environment_lister: EnvironmentLister,
    ) -> None:
        self._declarations = TokenDeclarationRegistry()
        self._token_authorizer = TokenAuthorizer(policy.token_rules)
        self._provision_authorizer = ProvisionAuthorizer(
            policy.provision_rules,
            token_authorizer=self._token_authorizer,
            token_request_factory=TokenRequestFactory(registry),
        )
        self._request_factory = ProvisionRequestFactory(
            self._declarations,
            ProvisionTargetExpander(registry, EnvironmentResolver(environment_lister)),
        )
        self._token_explainer = TokenAuthExplainer()
        self._provision_explainer = ProvisionAuthExplainer()

    @property
    def declarations(self) -> TokenDeclarationRegistry:
        return self._declarations

    async def authorize(self, requesters: Sequence[DiscoveredRequester]) -> AuthorizeResult:
        """Authorize every secret of every requester.

        Token declarations of all requesters are registered before any
        secret is authorized, so shared tokens resolve regardless of
        requester order.
        """
        for discovered in requesters:
            for name, declaration in discovered.config.tokens.items():
                self._declarations.register(discovered.repo, name, declaration)

        failures: list[RequesterFailure] = []
        for discovered in requesters:
            for name, secret in discovered.config.secrets.items():
                try:
                    request = await self._request_factory.create(discovered.repo, name, secret)
                    self._provision_authorizer.authorize(request)
                except Exception as exc:
                    logger.error(
                        "Secret %s of requester %s could not be authorized: %s",
                        name,
                        discovered.repo,
                        exc,
                    )
                    failures.append(RequesterFailure(discovered.repo, name, str(exc)))

        provision_results = sorted(
            self._provision_authorizer.list_results(), key=lambda r: r.request.sort_key()
        )
        token_results = sorted(
            self._token_authorizer.list_results(), key=lambda r: r.request.sort_key()
        )
        self._log_explanations(provision_results, token_results)

        return AuthorizeResult(
            provision_results=tuple(provision_results),
            token_results=tuple(token_results),
            failures=tuple(sorted(failures, key=lambda f: (ref_sort_key(f.repo), f.secret))),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _log_explanations(
        self,
        provision_results: Sequence[ProvisionAuthResult],
        token_results: Sequence[TokenAuthResult],
    ) -> None:
        if provision_results:
            for number, result in enumerate(provision_results, start=1):
                logger.info("Secret #%d:\n%s", number, self._provision_explainer.explain(result))
        else:
            logger.warning("%s No secrets were authorized", DENIED_ICON)

        if token_results:
            for number, result in enumerate(token_results, start=1):
                logger.info("Token #%d:\n%s", number, self._token_explainer.explain(result))
        else:
            logger.warning("%s No tokens were authorized", DENIED_ICON)
