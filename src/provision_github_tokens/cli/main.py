"""CLI entry point for provision-github-tokens.

Invoked as::

    provision-github-tokens [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m provision_github_tokens.cli.main

Commands
--------
- authorize   Authorize requester secrets and tokens against central policy
- validate    Validate a policy file and requester files
- version     Show version information
"""
from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from provision_github_tokens.authorizer import Authorizer, DiscoveredRequester
from provision_github_tokens.config import ConfigError, ConfigLoader
from provision_github_tokens.discovery import environment_lister, load_registry
from provision_github_tokens.explain import ResultRenderer
from provision_github_tokens.references import RepoRef, repo_ref_from_name

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _parse_repo_file(value: str) -> tuple[RepoRef, Path]:
    """Parse an ``OWNER/REPO=FILE`` option value."""
    name, sep, path = value.partition("=")
    if not sep or not path:
        raise click.BadParameter(f"expected OWNER/REPO=FILE, got {value!r}")
    try:
        return repo_ref_from_name(name.strip()), Path(path.strip())
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="provision-github-tokens")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level for engine diagnostics (written to stderr).",
)
def cli(log_level: str) -> None:
    """Authorize GitHub token and secret provisioning requests against policy."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from provision_github_tokens import __version__

    console.print(
        Panel(
            f"[bold]provision-github-tokens[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Policy-based authorization of GitHub App tokens and secrets.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# authorize
# ---------------------------------------------------------------------------


@cli.command(name="authorize")
@click.option(
    "--provider",
    "provider_spec",
    required=True,
    help="Central policy file, as OWNER/REPO=FILE (the repo that defines it).",
)
@click.option(
    "--apps",
    "apps_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML list of apps and their issuer/provisioner roles.",
)
@click.option(
    "--discovery",
    "discovery_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML snapshot of discovered apps, installations and environments.",
)
@click.option(
    "--requester",
    "requester_specs",
    multiple=True,
    help="Requester config, as OWNER/REPO=FILE. May be repeated.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["rich", "text", "json"]),
    default="rich",
    show_default=True,
    help="Output format.",
)
def authorize_command(
    provider_spec: str,
    apps_file: str,
    discovery_file: str,
    requester_specs: tuple[str, ...],
    output_format: str,
) -> None:
    """Authorize every requester secret and the tokens they consume.

    Exits with status 1 when anything was denied or failed, and 2 when the
    central policy, apps input or discovery snapshot is invalid.
    """
    loader = ConfigLoader()
    provider_repo, provider_path = _parse_repo_file(provider_spec)

    try:
        policy = loader.load_provider(provider_path, provider_repo)
        apps = loader.load_apps(Path(apps_file))
        snapshot = loader.load_discovery(Path(discovery_file))
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        sys.exit(2)

    requesters: list[DiscoveredRequester] = []
    invalid = 0
    for spec in requester_specs:
        repo, path = _parse_repo_file(spec)
        try:
            requesters.append(DiscoveredRequester(repo, loader.load_requester(path, repo)))
        except ConfigError as exc:
            invalid += 1
            logger.error("Requester %s has invalid config", repo)
            err_console.print(f"[yellow]Skipping requester {repo}:[/yellow] {escape(str(exc))}")

    registry = load_registry(snapshot, apps)
    authorizer = Authorizer(registry, policy, environment_lister(snapshot))
    result = asyncio.run(authorizer.authorize(requesters))

    renderer = ResultRenderer()
    if output_format == "json":
        click.echo(renderer.render_json(result))
    elif output_format == "text":
        click.echo(renderer.render_text(result))
    else:
        click.echo(renderer.render_summary(result), nl=False)

    sys.exit(0 if result.is_allowed and not invalid else 1)


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.option(
    "--provider",
    "provider_spec",
    default=None,
    help="Central policy file, as OWNER/REPO=FILE.",
)
@click.option(
    "--requester",
    "requester_specs",
    multiple=True,
    help="Requester config, as OWNER/REPO=FILE. May be repeated.",
)
def validate_command(provider_spec: str | None, requester_specs: tuple[str, ...]) -> None:
    """Validate configuration files without authorizing anything."""
    loader = ConfigLoader()
    errors = 0

    if provider_spec is not None:
        repo, path = _parse_repo_file(provider_spec)
        try:
            policy = loader.load_provider(path, repo)
            console.print(
                f"[green]OK[/green] {path}: {len(policy.token_rules)} token rules, "
                f"{len(policy.provision_rules)} provision rules"
            )
        except ConfigError as exc:
            errors += 1
            err_console.print(f"[red]Invalid:[/red] {escape(str(exc))}")

    for spec in requester_specs:
        repo, path = _parse_repo_file(spec)
        try:
            requester = loader.load_requester(path, repo)
            console.print(
                f"[green]OK[/green] {path}: {len(requester.tokens)} tokens, "
                f"{len(requester.secrets)} secrets"
            )
        except ConfigError as exc:
            errors += 1
            err_console.print(f"[red]Invalid:[/red] {escape(str(exc))}")

    sys.exit(1 if errors else 0)


if __name__ == "__main__":
    cli()
