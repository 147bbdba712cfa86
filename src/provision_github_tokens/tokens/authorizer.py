"""Token authorizer.

Rules are evaluated in declaration order and *every* applicable rule is
folded into the accumulated permissions, so a later rule always overrides
an earlier one for the permissions it names.  There is no first-match
short circuit.

Example
-------
::

    authorizer = TokenAuthorizer([
        TokenRule.from_dict({
            "resources": [{"accounts": ["octo-org"], "allRepos": True}],
            "consumers": ["octo-org/*"],
            "permissions": {"contents": "read"},
        }),
    ])
    request = TokenRequest.create(
        consumer=RepoRef("octo-org", "ci"),
        account="octo-org",
        repos="all",
        permissions={"contents": "read"},
    )
    assert authorizer.authorize_token(request).is_allowed
"""
from __future__ import annotations

import logging
from typing import Callable, Sequence

from provision_github_tokens.permissions import (
    AccessLevel,
    EmptyPermissionsError,
    apply_permission_delta,
    is_empty_permissions,
    is_sufficient_permissions,
    is_write_access,
    max_access,
)
from provision_github_tokens.tokens.request import RepoScope, TokenRequest
from provision_github_tokens.tokens.result import (
    TokenAuthResourceResult,
    TokenAuthResult,
    TokenAuthRuleResult,
)
from provision_github_tokens.tokens.rules import ResourceCriteria, TokenRule

logger = logging.getLogger(__name__)

CriteriaPredicate = Callable[[ResourceCriteria], bool]


class TokenAuthorizer:
    """Evaluates ordered token rules against token requests.

    Parameters
    ----------
    rules:
        Token permission rules, in policy order.
    """

    def __init__(self, rules: Sequence[TokenRule]) -> None:
        self._rules: tuple[TokenRule, ...] = tuple(rules)
        self._results: dict[TokenRequest, TokenAuthResult] = {}

    @property
    def rules(self) -> tuple[TokenRule, ...]:
        return self._rules

    def authorize_token(self, request: TokenRequest) -> TokenAuthResult:
        """Decide whether *request* is allowed.

        Raises
        ------
        EmptyPermissionsError
            If the request wants no permissions.
        """
        want = request.permissions
        if is_empty_permissions(want):
            raise EmptyPermissionsError(want, subject=str(request.consumer))

        existing = self._results.get(request)
        if existing is not None:
            return existing

        consumer = str(request.consumer)
        rules = [(i, r) for i, r in enumerate(self._rules) if r.matches_consumer(consumer)]
        scope = request.scope
        resource: TokenAuthResourceResult | None = None
        results: dict[str, TokenAuthResourceResult] = {}

        if scope is RepoScope.ALL_REPOS:
            resource = self._authorize_resource(
                rules,
                want,
                lambda c: c.all_repos and c.matches_account(request.account),
            )
            is_sufficient = resource.is_sufficient
        elif scope is RepoScope.NO_REPOS:
            resource = self._authorize_resource(
                rules,
                want,
                lambda c: c.no_repos and c.matches_account(request.account),
            )
            is_sufficient = resource.is_sufficient
        else:
            is_sufficient = True
            for repo in request.repos:
                repo_result = self._authorize_resource(
                    rules,
                    want,
                    lambda c, repo=repo: c.matches_repo(request.account, repo),
                )
                results[repo] = repo_result
                is_sufficient = is_sufficient and repo_result.is_sufficient

        max_want = max_access(want)
        is_missing_role = is_write_access(max_want) and request.role is None
        result = TokenAuthResult(
            request=request,
            scope=scope,
            want=dict(want),
            max_want=max_want,
            is_sufficient=is_sufficient,
            is_missing_role=is_missing_role,
            is_allowed=is_sufficient and not is_missing_role,
            resource=resource,
            results=results,
        )

        logger.debug(
            "Token for %s to %s (%s) was %s",
            consumer,
            request.account,
            scope.value,
            "allowed" if result.is_allowed else "denied",
        )
        self._results[request] = result
        return result

    def list_results(self) -> list[TokenAuthResult]:
        """Return every result produced so far, in authorization order."""
        return list(self._results.values())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _authorize_resource(
        self,
        rules: list[tuple[int, TokenRule]],
        want: dict[str, AccessLevel],
        applies: CriteriaPredicate,
    ) -> TokenAuthResourceResult:
        have: dict[str, AccessLevel] = {}
        trace: list[TokenAuthRuleResult] = []
        is_sufficient = False

        for index, rule in rules:
            if not any(applies(criteria) for criteria in rule.resources):
                continue

            apply_permission_delta(have, rule.permissions)
            # The last applicable rule decides.
            is_sufficient = is_sufficient_permissions(have, want)
            trace.append(
                TokenAuthRuleResult(
                    index=index,
                    rule=rule,
                    have=dict(have),
                    is_sufficient=is_sufficient,
                )
            )

        return TokenAuthResourceResult(
            rules=tuple(trace), have=have, is_sufficient=is_sufficient
        )
