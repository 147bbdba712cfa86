"""Configuration schemas and loading."""
from __future__ import annotations

from provision_github_tokens.config.loader import (
    ConfigError,
    ConfigLoader,
    ProviderPolicy,
    RequesterPolicy,
)
from provision_github_tokens.config.models import (
    AppInput,
    DiscoveredInstallation,
    DiscoverySnapshot,
    ProviderConfig,
    RequesterConfig,
)

__all__ = [
    "AppInput",
    "ConfigError",
    "ConfigLoader",
    "DiscoveredInstallation",
    "DiscoverySnapshot",
    "ProviderConfig",
    "ProviderPolicy",
    "RequesterConfig",
    "RequesterPolicy",
]
