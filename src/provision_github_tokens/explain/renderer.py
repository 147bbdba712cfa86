"""Rendering of a whole authorization run using Rich.

ResultRenderer produces human-readable output in three formats:
- Rich-formatted terminal panels and tables (for CLI use)
- Plain text explanations (for log-friendly output)
- JSON (for programmatic consumption)
"""
from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from provision_github_tokens.explain.provision_text import ProvisionAuthExplainer
from provision_github_tokens.explain.token_text import TokenAuthExplainer

if TYPE_CHECKING:
    from provision_github_tokens.authorizer import AuthorizeResult


class ResultRenderer:
    """Renders an :class:`AuthorizeResult` in multiple output formats."""

    def __init__(self) -> None:
        self._tokens = TokenAuthExplainer()
        self._provisions = ProvisionAuthExplainer()

    # ------------------------------------------------------------------
    # Rich rendering
    # ------------------------------------------------------------------

    def render_summary(self, result: AuthorizeResult) -> str:
        """Render an overview table followed by one panel per decision.

        Returns
        -------
        str
            Text containing ANSI styling when written to a terminal.
        """
        output_buffer = io.StringIO()
        console = Console(file=output_buffer, highlight=False)

        secrets_allowed = sum(1 for r in result.provision_results if r.is_allowed)
        tokens_allowed = sum(1 for r in result.token_results if r.is_allowed)

        overview = Table.grid(padding=(0, 2))
        overview.add_column(style="bold")
        overview.add_column()
        overview.add_row(
            "Secrets",
            f"[green]{secrets_allowed}[/green] allowed / "
            f"[red]{len(result.provision_results) - secrets_allowed}[/red] denied",
        )
        overview.add_row(
            "Tokens",
            f"[green]{tokens_allowed}[/green] allowed / "
            f"[red]{len(result.token_results) - tokens_allowed}[/red] denied",
        )
        overview.add_row("Failures", str(len(result.failures)))
        border = "green" if result.is_allowed else "red"
        console.print(Panel(overview, title="[bold cyan]Authorization[/bold cyan]", border_style=border))

        for number, provision in enumerate(result.provision_results, start=1):
            console.print(
                Panel(
                    Text(self._provisions.explain(provision)),
                    title=f"Secret #{number}",
                    border_style="green" if provision.is_allowed else "red",
                )
            )

        for number, token in enumerate(result.token_results, start=1):
            console.print(
                Panel(
                    Text(self._tokens.explain(token)),
                    title=f"Token #{number}",
                    border_style="green" if token.is_allowed else "red",
                )
            )

        if result.failures:
            failures = Table("Requester", "Secret", "Error", title="Failures", header_style="bold red")
            for failure in result.failures:
                failures.add_row(Text(str(failure.repo)), Text(failure.secret), Text(failure.error))
            console.print(failures)

        return output_buffer.getvalue()

    # ------------------------------------------------------------------
    # Plain text rendering
    # ------------------------------------------------------------------

    def render_text(self, result: AuthorizeResult) -> str:
        """Render every explanation as plain text, numbered."""
        blocks: list[str] = []
        for number, provision in enumerate(result.provision_results, start=1):
            blocks.append(f"Secret #{number}:\n{self._provisions.explain(provision)}")
        for number, token in enumerate(result.token_results, start=1):
            blocks.append(f"Token #{number}:\n{self._tokens.explain(token)}")
        for failure in result.failures:
            blocks.append(f"Failed: {failure.repo} secret {failure.secret}: {failure.error}")
        return "\n\n".join(blocks)

    # ------------------------------------------------------------------
    # JSON rendering
    # ------------------------------------------------------------------

    def render_json(self, result: AuthorizeResult) -> str:
        """Render the decisions (without rule traces) as a JSON string."""
        payload: dict[str, object] = {
            "is_allowed": result.is_allowed,
            "secrets": [
                {
                    "requester": str(r.request.requester),
                    "name": r.request.name,
                    "is_allowed": r.is_allowed,
                    "is_missing_targets": r.is_missing_targets,
                    "targets": [
                        {
                            "type": t.target.type.value,
                            "target": str(t.target.target),
                            "environment": getattr(t.target.target, "environment", None),
                            "have": t.secret.have,
                            "is_allowed": t.is_allowed,
                        }
                        for t in r.results
                    ],
                }
                for r in result.provision_results
            ],
            "tokens": [
                {
                    "consumer": str(r.consumer),
                    "account": r.account,
                    "repos": r.request.repos if r.request.repos == "all" else list(r.request.repos),
                    "role": r.role,
                    "permissions": {name: access.value for name, access in r.want.items()},
                    "is_allowed": r.is_allowed,
                }
                for r in result.token_results
            ],
            "failures": [
                {"requester": str(f.repo), "secret": f.secret, "error": f.error}
                for f in result.failures
            ],
        }
        return json.dumps(payload, ensure_ascii=False)
