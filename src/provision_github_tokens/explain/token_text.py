"""Plain-text explanation of token authorization results.

Example
-------
::

    explainer = TokenAuthExplainer()
    print(explainer.explain(authorizer.authorize_token(request)))

    ✅ Repo octo-org/ci was allowed access to a token:
      ✅ Read access to all repos in octo-org was requested without a role
      ✅ Sufficient access to all repos in octo-org based on 1 rule:
        ✅ Rule #1: "CI can read" gave sufficient access:
          ✅ contents: have read, wanted read
"""
from __future__ import annotations

import json
from typing import Mapping, Sequence

from provision_github_tokens.permissions import AccessLevel, is_sufficient_access
from provision_github_tokens.references import AccountRef
from provision_github_tokens.tokens import (
    RepoScope,
    TokenAuthResourceResult,
    TokenAuthResult,
    TokenAuthRuleResult,
)

ALLOWED_ICON = "✅"
DENIED_ICON = "❌"

_ACCESS_NAMES: dict[AccessLevel, str] = {
    AccessLevel.NONE: "No",
    AccessLevel.READ: "Read",
    AccessLevel.WRITE: "Write",
    AccessLevel.ADMIN: "Admin",
}


def render_icon(is_allowed: bool) -> str:
    return ALLOWED_ICON if is_allowed else DENIED_ICON


def render_rule(index: int, description: str | None) -> str:
    """Render a rule reference as ``#n`` or ``#n: "description"``."""
    number = f"#{index + 1}"
    return f"{number}: {json.dumps(description, ensure_ascii=False)}" if description else number


def based_on_rules(count: int) -> str:
    if count < 1:
        return "(no matching rules)"
    return f"based on {count} {'rule' if count == 1 else 'rules'}"


class TokenAuthExplainer:
    """Renders a :class:`TokenAuthResult` as indented text."""

    def explain(self, result: TokenAuthResult) -> str:
        request = result.request
        account = request.account

        if result.scope is RepoScope.SELECTED_REPOS:
            lines = [
                self._summary(result),
                "  " + self._max_access_and_role(result, f"repos in {account}"),
            ]
            for repo in sorted(result.results):
                lines.append(self._resource(f"repo {repo}", request.permissions, result.results[repo], "  "))
            return "\n".join(lines)

        subject = f"all repos in {account}" if result.scope is RepoScope.ALL_REPOS else account
        if result.resource is None:
            raise ValueError(f"{result.scope.value} result has no resource trace")
        return "\n".join(
            [
                self._summary(result),
                "  " + self._max_access_and_role(result, subject),
                self._resource(subject, request.permissions, result.resource, ""),
            ]
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _summary(result: TokenAuthResult) -> str:
        kind = "Account" if isinstance(result.consumer, AccountRef) else "Repo"
        verdict = "allowed" if result.is_allowed else "denied"
        return f"{render_icon(result.is_allowed)} {kind} {result.consumer} was {verdict} access to a token:"

    @staticmethod
    def _max_access_and_role(result: TokenAuthResult, subject: str) -> str:
        role = result.role
        requested = f"was requested with role {role}" if role else "was requested without a role"
        return (
            f"{render_icon(not result.is_missing_role)} "
            f"{_ACCESS_NAMES[result.max_want]} access to {subject} {requested}"
        )

    def _resource(
        self,
        subject: str,
        want: Mapping[str, AccessLevel],
        resource: TokenAuthResourceResult,
        indent: str,
    ) -> str:
        sufficiency = "Sufficient" if resource.is_sufficient else "Insufficient"
        head = (
            f"{indent}  {render_icon(resource.is_sufficient)} {sufficiency} "
            f"access to {subject} {based_on_rules(len(resource.rules))}"
        )
        if not resource.rules:
            return head
        return head + ":" + "".join("\n" + self._rule(want, r, indent) for r in resource.rules)

    def _rule(
        self, want: Mapping[str, AccessLevel], rule_result: TokenAuthRuleResult, indent: str
    ) -> str:
        sufficiency = "sufficient" if rule_result.is_sufficient else "insufficient"
        return (
            f"{indent}    {render_icon(rule_result.is_sufficient)} Rule "
            f"{render_rule(rule_result.index, rule_result.rule.description)} "
            f"gave {sufficiency} access:"
            + _permission_comparison(f"{indent}      ", rule_result.have, want)
        )


def _permission_comparison(
    indent: str, have: Mapping[str, AccessLevel], want: Mapping[str, AccessLevel]
) -> str:
    entries: list[tuple[bool, str]] = []
    for name in sorted(want):
        h = have.get(name, AccessLevel.NONE)
        w = want[name]
        entries.append((is_sufficient_access(h, w), f"{name}: have {h.value}, wanted {w.value}"))
    return _allow_deny_list(indent, entries)


def _allow_deny_list(indent: str, items: Sequence[tuple[bool, str]]) -> str:
    return "".join(f"\n{indent}{render_icon(ok)} {entry}" for ok, entry in items)
