"""Tests for the provision-github-tokens CLI."""
from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from provision_github_tokens.cli.main import cli

PROVIDER_YAML = textwrap.dedent(
    """\
    permissions:
      rules:
        - resources:
            - accounts: [.]
              allRepos: true
          consumers: ["./*"]
          permissions:
            contents: read
    provision:
      rules:
        secrets:
          - secrets: ["*"]
            requesters: ["./*"]
            to:
              github:
                repo:
                  actions: allow
    """
)

APPS_YAML = "- appId: 1\n  issuer: {enabled: true}\n- appId: 2\n  provisioner: {enabled: true}\n"

DISCOVERY_YAML = textwrap.dedent(
    """\
    apps:
      - {id: 1}
      - {id: 2}
    installations:
      - id: 10
        app_id: 1
        account: {login: octo-org}
        repository_selection: all
        permissions: {contents: read}
      - id: 20
        app_id: 2
        account: {login: octo-org}
        permissions: {secrets: write}
        repositories:
          - {owner: {login: octo-org}, name: api}
    """
)

REQUESTER_YAML = textwrap.dedent(
    """\
    tokens:
      reader:
        repos: all
        permissions:
          contents: read
    provision:
      secrets:
        READ_TOKEN:
          token: reader
          github:
            repo: {actions: true}
    """
)


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def files(tmp_path: Path) -> dict[str, Path]:
    paths = {
        "provider": tmp_path / "policy.yml",
        "apps": tmp_path / "apps.yml",
        "discovery": tmp_path / "discovery.yml",
        "requester": tmp_path / "requester.yml",
    }
    paths["provider"].write_text(PROVIDER_YAML, encoding="utf-8")
    paths["apps"].write_text(APPS_YAML, encoding="utf-8")
    paths["discovery"].write_text(DISCOVERY_YAML, encoding="utf-8")
    paths["requester"].write_text(REQUESTER_YAML, encoding="utf-8")
    return paths


def _authorize_args(files: dict[str, Path], *extra: str) -> list[str]:
    return [
        "authorize",
        "--provider",
        f"octo-org/.github={files['provider']}",
        "--apps",
        str(files["apps"]),
        "--discovery",
        str(files["discovery"]),
        *extra,
    ]


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


class TestVersion:
    def test_version_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("authorize", "validate", "version"):
            assert command in result.output


# ---------------------------------------------------------------------------
# authorize
# ---------------------------------------------------------------------------


class TestAuthorize:
    def test_json_output_allowed(self, runner: CliRunner, files: dict[str, Path]) -> None:
        result = runner.invoke(
            cli,
            _authorize_args(files, "--requester", f"octo-org/api={files['requester']}", "--format", "json"),
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["is_allowed"] is True
        assert payload["secrets"][0]["requester"] == "octo-org/api"
        assert payload["secrets"][0]["targets"][0]["target"] == "octo-org/api"

    def test_text_output(self, runner: CliRunner, files: dict[str, Path]) -> None:
        result = runner.invoke(
            cli,
            _authorize_args(files, "--requester", f"octo-org/api={files['requester']}", "--format", "text"),
        )
        assert result.exit_code == 0
        assert "Secret #1:" in result.output
        assert "Can provision to Actions in octo-org/api" in result.output

    def test_rich_output(self, runner: CliRunner, files: dict[str, Path]) -> None:
        result = runner.invoke(
            cli, _authorize_args(files, "--requester", f"octo-org/api={files['requester']}")
        )
        assert result.exit_code == 0
        assert "Authorization" in result.output

    def test_denied_exits_one(self, runner: CliRunner, files: dict[str, Path], tmp_path: Path) -> None:
        requester = tmp_path / "denied.yml"
        requester.write_text(REQUESTER_YAML.replace("repo: {actions: true}", "repo: {codespaces: true}"), encoding="utf-8")
        result = runner.invoke(
            cli, _authorize_args(files, "--requester", f"octo-org/api={requester}", "--format", "json")
        )
        assert result.exit_code == 1

    def test_invalid_requester_is_skipped(self, runner: CliRunner, files: dict[str, Path], tmp_path: Path) -> None:
        broken = tmp_path / "broken.yml"
        broken.write_text("tokens: [", encoding="utf-8")
        result = runner.invoke(
            cli,
            _authorize_args(
                files,
                "--requester",
                f"octo-org/api={files['requester']}",
                "--requester",
                f"octo-org/web={broken}",
                "--format",
                "text",
            ),
        )
        assert result.exit_code == 1
        assert "Skipping requester octo-org/web" in result.output
        assert "Secret #1:" in result.output

    def test_invalid_policy_exits_two(self, runner: CliRunner, files: dict[str, Path]) -> None:
        files["provider"].write_text("permissions: [", encoding="utf-8")
        result = runner.invoke(cli, _authorize_args(files))
        assert result.exit_code == 2
        assert "Configuration error" in result.output

    def test_bad_repo_spec(self, runner: CliRunner, files: dict[str, Path]) -> None:
        args = _authorize_args(files)
        args[2] = str(files["provider"])
        result = runner.invoke(cli, args)
        assert result.exit_code == 2
        assert "OWNER/REPO=FILE" in result.output


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


class TestValidate:
    def test_valid_files(self, runner: CliRunner, files: dict[str, Path]) -> None:
        result = runner.invoke(
            cli,
            [
                "validate",
                "--provider",
                f"octo-org/.github={files['provider']}",
                "--requester",
                f"octo-org/api={files['requester']}",
            ],
        )
        assert result.exit_code == 0
        output = " ".join(result.output.split())
        assert "1 token rules, 1 provision rules" in output
        assert "1 tokens, 1 secrets" in output

    def test_invalid_file(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "bad.yml"
        path.write_text("permissions:\n  rules:\n    - consumers: [a/b/c]\n", encoding="utf-8")
        result = runner.invoke(cli, ["validate", "--provider", f"octo-org/.github={path}"])
        assert result.exit_code == 1
        assert "Invalid" in result.output
