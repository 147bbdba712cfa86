"""Secret provisioning authorizer.

Rules are evaluated in order and the decision of the *last relevant* rule
wins.  Within one rule two different merges apply:

- results of pattern-matched accounts/repos merge with
  :func:`merge_pattern_decision`: the first deny sticks;
- the requester's own account/repo settings merge with
  :func:`override_decision`: a defined value always replaces the result.

Example
-------
::

    authorizer = ProvisionAuthorizer([
        ProvisionRule.from_dict({
            "secrets": ["*"],
            "requesters": ["octo-org/*"],
            "to": {"github": {"accounts": {"*": {"actions": "allow"}}}},
        }),
    ])
    result = authorizer.authorize_secret(
        ProvisionTargetRequest(
            requester=RepoRef("octo-org", "ci"),
            name="DEPLOY_TOKEN",
            type=SecretType.ACTIONS,
            target=AccountRef("octo-org"),
        )
    )
    assert result.is_allowed
"""
from __future__ import annotations

import logging
from typing import Sequence

from provision_github_tokens.patterns import NamePattern
from provision_github_tokens.provision.request import ProvisionRequest, ProvisionTargetRequest
from provision_github_tokens.provision.result import (
    ProvisionAuthResult,
    ProvisionAuthRuleResult,
    ProvisionAuthTargetResult,
    TargetAuthorization,
)
from provision_github_tokens.provision.rules import (
    Decision,
    ProvisionRule,
    RepoSecretSettings,
    SecretType,
    SecretTypeSettings,
)
from provision_github_tokens.references import AccountRef, EnvironmentRef, consumer_ref
from provision_github_tokens.tokens import TokenAuthorizer, TokenAuthResult, TokenRequestFactory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Decision merges
# ---------------------------------------------------------------------------


def merge_pattern_decision(current: Decision | None, new: Decision | None) -> Decision | None:
    """Merge a pattern-matched decision; once ``deny``, always ``deny``."""
    if current == "deny" or new is None:
        return current
    return new


def override_decision(current: Decision | None, new: Decision | None) -> Decision | None:
    """Merge a self-target decision; a defined value always wins."""
    return current if new is None else new


def select_by_secret_type(
    settings: SecretTypeSettings, secret_type: SecretType
) -> Decision | None:
    return settings.select(secret_type)


def apply_environment_patterns(
    environment: str,
    patterns: Sequence[tuple[NamePattern, Decision]],
) -> Decision | None:
    """Decide *environment* from ordered ``(pattern, decision)`` pairs.

    The first matching ``deny`` is returned immediately; otherwise the last
    matching ``allow`` (or ``None`` when nothing matches).
    """
    have: Decision | None = None
    for pattern, decision in patterns:
        if not pattern.test(environment):
            continue
        if decision == "deny":
            return "deny"
        have = decision
    return have


# ---------------------------------------------------------------------------
# ProvisionAuthorizer
# ---------------------------------------------------------------------------


class ProvisionAuthorizer:
    """Evaluates ordered provisioning rules against provisioning requests.

    Parameters
    ----------
    rules:
        Secret provisioning rules, in policy order.
    token_authorizer:
        Authorizes the token each target consumes.  Required by
        :meth:`authorize`, not by :meth:`authorize_secret`.
    token_request_factory:
        Builds the per-target token requests.  Required by :meth:`authorize`.
    """

    def __init__(
        self,
        rules: Sequence[ProvisionRule],
        token_authorizer: TokenAuthorizer | None = None,
        token_request_factory: TokenRequestFactory | None = None,
    ) -> None:
        self._rules: tuple[ProvisionRule, ...] = tuple(rules)
        self._token_authorizer = token_authorizer
        self._token_request_factory = token_request_factory
        self._results: list[ProvisionAuthResult] = []

    @property
    def rules(self) -> tuple[ProvisionRule, ...]:
        return self._rules

    def authorize_secret(self, request: ProvisionTargetRequest) -> ProvisionAuthTargetResult:
        """Decide whether *request* may provision its secret to its target."""
        requester = str(request.requester)
        trace: list[ProvisionAuthRuleResult] = []
        have: Decision | None = None

        for index, rule in enumerate(self._rules):
            if not rule.matches(request.name, requester):
                continue

            if isinstance(request.target, AccountRef):
                is_relevant, rule_have = self._evaluate_account(rule, request)
            else:
                is_relevant, rule_have = self._evaluate_repo(rule, request)

            if not is_relevant:
                continue

            have = rule_have
            trace.append(ProvisionAuthRuleResult(index=index, rule=rule, have=rule_have))

        result = ProvisionAuthTargetResult(
            request=request,
            rules=tuple(trace),
            have=have,
            is_allowed=have == "allow",
        )
        logger.debug(
            "Provisioning %s secret %s from %s to %s was %s",
            request.type.value,
            request.name,
            requester,
            _describe_target(request),
            "allowed" if result.is_allowed else "denied",
        )
        return result

    def authorize(self, request: ProvisionRequest) -> ProvisionAuthResult:
        """Authorize every target of *request*, including the token each consumes.

        Raises
        ------
        RuntimeError
            If the authorizer was built without a token authorizer or token
            request factory.
        EmptyPermissionsError
            If the token declaration wants no permissions.
        """
        if self._token_authorizer is None or self._token_request_factory is None:
            raise RuntimeError(
                "ProvisionAuthorizer.authorize requires a token authorizer and "
                "token request factory"
            )

        results: list[TargetAuthorization] = []
        for target, target_request in zip(request.targets, request.target_requests()):
            secret = self.authorize_secret(target_request)
            token: TokenAuthResult | None = None
            if request.token_declaration is not None:
                token_request = self._token_request_factory.create(
                    request.token_declaration, consumer_ref(target.target)
                )
                token = self._token_authorizer.authorize_token(token_request)

            results.append(
                TargetAuthorization(
                    target=target,
                    secret=secret,
                    token=token,
                    is_allowed=secret.is_allowed and token is not None and token.is_allowed,
                )
            )

        is_missing_targets = not results
        result = ProvisionAuthResult(
            request=request,
            results=tuple(results),
            is_missing_targets=is_missing_targets,
            is_allowed=(
                request.token_declaration is not None
                and not is_missing_targets
                and all(r.is_allowed for r in results)
            ),
        )
        logger.debug(
            "Secret %s of %s was %s for %d targets",
            request.name,
            request.requester,
            "allowed" if result.is_allowed else "denied",
            len(results),
        )
        self._results.append(result)
        return result

    def list_results(self) -> list[ProvisionAuthResult]:
        """Return every result produced by :meth:`authorize`, in order."""
        return list(self._results)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _evaluate_account(
        rule: ProvisionRule, request: ProvisionTargetRequest
    ) -> tuple[bool, Decision | None]:
        target = request.target.account
        is_relevant = False
        rule_have: Decision | None = None

        for pattern, settings in rule.accounts:
            if not pattern.test(target):
                continue
            pattern_have = select_by_secret_type(settings, request.type)
            if pattern_have is not None:
                is_relevant = True
            rule_have = merge_pattern_decision(rule_have, pattern_have)
            if rule_have == "deny":
                break

        if request.is_self_account:
            self_have = select_by_secret_type(rule.account, request.type)
            if self_have is not None:
                is_relevant = True
            rule_have = override_decision(rule_have, self_have)

        return is_relevant, rule_have

    @staticmethod
    def _evaluate_repo(
        rule: ProvisionRule, request: ProvisionTargetRequest
    ) -> tuple[bool, Decision | None]:
        target = str(request.target)
        is_relevant = False
        rule_have: Decision | None = None

        for pattern, settings in rule.repos:
            if not pattern.test(target):
                continue
            pattern_have = _repo_decision(settings, request)
            if pattern_have is not None:
                is_relevant = True
            rule_have = merge_pattern_decision(rule_have, pattern_have)
            if rule_have == "deny":
                break

        if request.is_self_repo:
            self_have = _repo_decision(rule.repo, request)
            if self_have is not None:
                is_relevant = True
            rule_have = override_decision(rule_have, self_have)

        return is_relevant, rule_have


def _repo_decision(
    settings: RepoSecretSettings, request: ProvisionTargetRequest
) -> Decision | None:
    if request.type is SecretType.ENVIRONMENT and isinstance(request.target, EnvironmentRef):
        return apply_environment_patterns(request.target.environment, settings.environments)
    return select_by_secret_type(settings, request.type)


def _describe_target(request: ProvisionTargetRequest) -> str:
    if isinstance(request.target, EnvironmentRef):
        return f"{request.target} environment {request.target.environment}"
    return str(request.target)
