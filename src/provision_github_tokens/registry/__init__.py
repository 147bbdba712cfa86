"""Registry of discovered GitHub App installations."""
from __future__ import annotations

from provision_github_tokens.registry.app_registry import (
    InstallationRegistry,
    UnregisteredAppError,
)
from provision_github_tokens.registry.models import (
    App,
    AppRegistration,
    Installation,
    InstallationRegistration,
    IssuerConfig,
    ProvisionerConfig,
    Repo,
)

__all__ = [
    "App",
    "AppRegistration",
    "Installation",
    "InstallationRegistration",
    "InstallationRegistry",
    "IssuerConfig",
    "ProvisionerConfig",
    "Repo",
    "UnregisteredAppError",
]
