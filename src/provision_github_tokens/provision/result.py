"""Immutable results of secret provisioning authorization."""
from __future__ import annotations

from dataclasses import dataclass

from provision_github_tokens.provision.request import (
    ProvisionRequest,
    ProvisionTarget,
    ProvisionTargetRequest,
)
from provision_github_tokens.provision.rules import Decision, ProvisionRule
from provision_github_tokens.tokens import TokenAuthResult


@dataclass(frozen=True)
class ProvisionAuthRuleResult:
    """Trace entry for one relevant rule and the decision it reached."""

    index: int
    rule: ProvisionRule
    have: Decision | None


@dataclass(frozen=True)
class ProvisionAuthTargetResult:
    """Provisioning decision for a single target.

    ``have`` is the decision of the last relevant rule, ``None`` when no
    rule was relevant.
    """

    request: ProvisionTargetRequest
    rules: tuple[ProvisionAuthRuleResult, ...]
    have: Decision | None
    is_allowed: bool

    def __bool__(self) -> bool:
        return self.is_allowed


@dataclass(frozen=True)
class TargetAuthorization:
    """Combined secret and token decision for one target.

    Attributes
    ----------
    target:
        The target.
    secret:
        Whether policy allows the secret to be provisioned there.
    token:
        Whether the target may consume the token supplying the secret, or
        ``None`` when there is no usable token declaration.
    is_allowed:
        True iff both decisions allow.
    """

    target: ProvisionTarget
    secret: ProvisionAuthTargetResult
    token: TokenAuthResult | None
    is_allowed: bool


@dataclass(frozen=True)
class ProvisionAuthResult:
    """Outcome of authorizing every target of a :class:`ProvisionRequest`."""

    request: ProvisionRequest
    results: tuple[TargetAuthorization, ...]
    is_missing_targets: bool
    is_allowed: bool

    def __bool__(self) -> bool:
        return self.is_allowed
