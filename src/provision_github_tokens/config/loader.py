"""YAML configuration loader.

ConfigLoader reads the central policy file, requester files, the apps input
and discovery snapshots.  Each file is parsed with ``yaml.safe_load``,
validated with the pydantic models in :mod:`provision_github_tokens.config.models`,
normalized against the repository that defines it (``.`` and ``./name``
shorthands, relative token references) and compiled into engine objects.

Every failure is raised as :class:`ConfigError`, naming the file.

Example
-------
::

    loader = ConfigLoader()
    policy = loader.load_provider(Path("policy.yml"), RepoRef("octo-org", ".github"))
    requester = loader.load_requester(Path("requester.yml"), RepoRef("octo-org", "api"))
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from provision_github_tokens.config.models import (
    AppInput,
    DiscoverySnapshot,
    ProviderConfig,
    RequesterConfig,
)
from provision_github_tokens.patterns import (
    PatternError,
    normalize_account_pattern,
    normalize_compound_pattern,
)
from provision_github_tokens.provision import ProvisionRule, SecretDeclaration
from provision_github_tokens.references import RepoRef
from provision_github_tokens.tokens import TokenDeclaration, TokenRule, normalize_token_reference

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
ResultT = TypeVar("ResultT")


class ConfigError(ValueError):
    """Raised when a configuration file is unreadable, malformed or invalid.

    Attributes
    ----------
    config_path:
        The path (or other label) of the offending configuration, if known.
    """

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        prefix = f"[{config_path}] " if config_path else ""
        super().__init__(f"{prefix}{message}")


@dataclass
class ProviderPolicy:
    """Compiled central policy: both ordered rule lists."""

    token_rules: list[TokenRule] = field(default_factory=list)
    provision_rules: list[ProvisionRule] = field(default_factory=list)


@dataclass
class RequesterPolicy:
    """Compiled requester file: its token and secret declarations."""

    tokens: dict[str, TokenDeclaration] = field(default_factory=dict)
    secrets: dict[str, SecretDeclaration] = field(default_factory=dict)


class ConfigLoader:
    """Loads and compiles configuration files.

    Each ``load_*`` method reads a file; each ``load_*_string`` method
    accepts YAML text directly, with an optional label used in errors.
    """

    # ------------------------------------------------------------------
    # Provider (central policy)
    # ------------------------------------------------------------------

    def load_provider(self, config_path: Path, defining_repo: RepoRef) -> ProviderPolicy:
        return self.load_provider_string(
            self._read(config_path), defining_repo, config_path=str(config_path)
        )

    def load_provider_string(
        self,
        yaml_content: str,
        defining_repo: RepoRef,
        config_path: str | None = None,
    ) -> ProviderPolicy:
        """Parse, normalize and compile a central policy document.

        Raises
        ------
        ConfigError
            On YAML syntax errors, schema violations or malformed patterns.
        """
        config = self._validate(ProviderConfig, self._parse(yaml_content, config_path), config_path)
        account = defining_repo.account

        def compile_policy() -> ProviderPolicy:
            policy = ProviderPolicy()
            for rule in config.permissions.rules:
                for resource in rule.resources:
                    resource.accounts = [normalize_account_pattern(account, a) for a in resource.accounts]
                rule.consumers = [normalize_compound_pattern(account, c) for c in rule.consumers]
                policy.token_rules.append(TokenRule.from_dict(rule.model_dump(by_alias=True)))

            for secret_rule in config.provision.rules.secrets:
                secret_rule.requesters = [
                    normalize_compound_pattern(account, r) for r in secret_rule.requesters
                ]
                github = secret_rule.to.github
                github.accounts = {
                    normalize_account_pattern(account, p): v for p, v in github.accounts.items()
                }
                github.repos = {
                    normalize_compound_pattern(account, p): v for p, v in github.repos.items()
                }
                policy.provision_rules.append(
                    ProvisionRule.from_dict(secret_rule.model_dump(by_alias=True))
                )
            return policy

        policy = self._compile(compile_policy, config_path)
        logger.info(
            "Loaded %d token rules and %d provision rules from %s",
            len(policy.token_rules),
            len(policy.provision_rules),
            config_path or defining_repo,
        )
        return policy

    # ------------------------------------------------------------------
    # Requester
    # ------------------------------------------------------------------

    def load_requester(self, config_path: Path, defining_repo: RepoRef) -> RequesterPolicy:
        return self.load_requester_string(
            self._read(config_path), defining_repo, config_path=str(config_path)
        )

    def load_requester_string(
        self,
        yaml_content: str,
        defining_repo: RepoRef,
        config_path: str | None = None,
    ) -> RequesterPolicy:
        """Parse, normalize and compile a requester document.

        Token declarations default to the requester's account.  Secret token
        references are expanded to ``account/repo.name``.

        Raises
        ------
        ConfigError
            On YAML syntax errors, schema violations or malformed patterns.
        """
        config = self._validate(
            RequesterConfig, self._parse(yaml_content, config_path), config_path
        )
        account = defining_repo.account

        def compile_requester() -> RequesterPolicy:
            policy = RequesterPolicy()
            for name, token in config.tokens.items():
                policy.tokens[name] = TokenDeclaration.create(
                    account=token.account or account,
                    repos=token.repos,
                    permissions=token.permissions,
                    shared=token.shared,
                    as_role=token.as_role,
                )

            for name, secret in config.provision.secrets.items():
                secret.token = normalize_token_reference(defining_repo, secret.token)
                github = secret.github
                github.accounts = {
                    normalize_account_pattern(account, p): v for p, v in github.accounts.items()
                }
                github.repos = {
                    normalize_compound_pattern(account, p): v for p, v in github.repos.items()
                }
                policy.secrets[name] = SecretDeclaration.from_dict(secret.model_dump())
            return policy

        policy = self._compile(compile_requester, config_path)
        logger.debug(
            "Loaded %d tokens and %d secrets for %s",
            len(policy.tokens),
            len(policy.secrets),
            defining_repo,
        )
        return policy

    # ------------------------------------------------------------------
    # Apps input and discovery
    # ------------------------------------------------------------------

    def load_apps(self, config_path: Path) -> list[AppInput]:
        return self.load_apps_string(self._read(config_path), config_path=str(config_path))

    def load_apps_string(self, yaml_content: str, config_path: str | None = None) -> list[AppInput]:
        raw = self._parse(yaml_content, config_path)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise ConfigError("Apps input must be a list of apps", config_path)
        return [self._validate(AppInput, entry, config_path) for entry in raw]

    def load_discovery(self, config_path: Path) -> DiscoverySnapshot:
        return self.load_discovery_string(self._read(config_path), config_path=str(config_path))

    def load_discovery_string(
        self, yaml_content: str, config_path: str | None = None
    ) -> DiscoverySnapshot:
        return self._validate(
            DiscoverySnapshot, self._parse(yaml_content, config_path), config_path
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _read(config_path: Path) -> str:
        if not config_path.exists():
            raise ConfigError("Config file not found", str(config_path))
        return config_path.read_text(encoding="utf-8")

    @staticmethod
    def _parse(yaml_content: str, config_path: str | None) -> object:
        try:
            return yaml.safe_load(yaml_content)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}", config_path) from exc

    @staticmethod
    def _validate(model: type[ModelT], raw: object, config_path: str | None) -> ModelT:
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(
                f"Expected a mapping at the top level, got {type(raw).__name__}", config_path
            )
        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}", config_path) from exc

    @staticmethod
    def _compile(build: Callable[[], ResultT], config_path: str | None) -> ResultT:
        try:
            return build()
        except PatternError as exc:
            raise ConfigError(f"Invalid pattern {exc.literal!r}: {exc}", config_path) from exc
        except ValueError as exc:
            raise ConfigError(str(exc), config_path) from exc
