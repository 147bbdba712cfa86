"""Plain-text explanation of secret provisioning results."""
from __future__ import annotations

from provision_github_tokens.explain.token_text import based_on_rules, render_icon, render_rule
from provision_github_tokens.provision import (
    ProvisionAuthResult,
    ProvisionAuthRuleResult,
    SecretType,
    TargetAuthorization,
)
from provision_github_tokens.references import AccountRef, EnvironmentRef

_TYPE_NAMES: dict[SecretType, str] = {
    SecretType.ACTIONS: "Actions",
    SecretType.CODESPACES: "Codespaces",
    SecretType.DEPENDABOT: "Dependabot",
}


class ProvisionAuthExplainer:
    """Renders a :class:`ProvisionAuthResult` as indented text.

    One block is produced per secret: a summary line, token declaration
    problems (if any) and, for each target, the provisioning decision with
    its rule trace followed by the token decision for that target.
    """

    def explain(self, result: ProvisionAuthResult) -> str:
        request = result.request
        verdict = "was allowed" if result.is_allowed else "wasn't allowed"
        lines = [
            f"{render_icon(result.is_allowed)} Repo {request.requester} {verdict} "
            f"to provision secret {request.name}:"
        ]

        if request.token_declaration is None:
            problem = (
                f"isn't shared with {request.requester}"
                if request.token_declaration_is_registered
                else "wasn't declared"
            )
            lines.append(f"  {render_icon(False)} Token {request.secret_declaration.token} {problem}")

        if result.is_missing_targets:
            lines.append(f"  {render_icon(False)} No targets were specified")

        for target_result in result.results:
            lines.append(self._target(target_result))

        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _target(self, target_result: TargetAuthorization) -> str:
        secret = target_result.secret
        can = "Can" if secret.is_allowed else "Can't"
        text = (
            f"  {render_icon(secret.is_allowed)} {can} provision to "
            f"{_subject(target_result)} {based_on_rules(len(secret.rules))}"
        )
        if secret.rules:
            text += ":" + "".join("\n" + _rule(r) for r in secret.rules)

        token = target_result.token
        if token is not None:
            kind = "Account" if isinstance(token.consumer, AccountRef) else "Repo"
            access = "can" if token.is_allowed else "can't"
            text += (
                f"\n    {render_icon(token.is_allowed)} {kind} {token.consumer} "
                f"{access} use the token"
            )
        return text


def _subject(target_result: TargetAuthorization) -> str:
    target = target_result.target
    if isinstance(target.target, EnvironmentRef):
        return f"environment {target.target.environment} in {target.target}"
    return f"{_TYPE_NAMES[target.type]} in {target.target}"


def _rule(rule_result: ProvisionAuthRuleResult) -> str:
    is_allowed = rule_result.have == "allow"
    return (
        f"    {render_icon(is_allowed)} {'Allowed' if is_allowed else 'Denied'} "
        f"by rule {render_rule(rule_result.index, rule_result.rule.description)}"
    )
