"""provision-github-tokens: policy-based authorization of GitHub App tokens and secrets.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import provision_github_tokens as pgt
>>> pgt.__version__
'0.1.0'
>>> pgt.is_sufficient_access("write", "read")
True
>>> pgt.compile_compound_pattern("octo-*/api-*").test("octo-org/api-v2")
True
"""
from __future__ import annotations

__version__: str = "0.1.0"

from provision_github_tokens.authorizer import (
    AuthorizeResult,
    Authorizer,
    DiscoveredRequester,
    RequesterFailure,
)
from provision_github_tokens.config import (
    ConfigError,
    ConfigLoader,
    ProviderPolicy,
    RequesterPolicy,
)
from provision_github_tokens.convenience import PolicyChecker
from provision_github_tokens.discovery import environment_lister, load_registry
from provision_github_tokens.explain import (
    ProvisionAuthExplainer,
    ResultRenderer,
    TokenAuthExplainer,
)

# ---------------------------------------------------------------------------
# Access levels and patterns
# ---------------------------------------------------------------------------
from provision_github_tokens.patterns import (
    CompoundPattern,
    NamePattern,
    PatternError,
    any_matches,
    compile_compound_pattern,
    compile_name_pattern,
)
from provision_github_tokens.permissions import (
    AccessLevel,
    EmptyPermissionsError,
    is_empty_permissions,
    is_sufficient_access,
    is_sufficient_permissions,
    is_write_access,
    max_access,
)

# ---------------------------------------------------------------------------
# Provisioning
# ---------------------------------------------------------------------------
from provision_github_tokens.provision import (
    EnvironmentLister,
    EnvironmentResolver,
    ProvisionAuthorizer,
    ProvisionAuthResult,
    ProvisionAuthTargetResult,
    ProvisionRequest,
    ProvisionRequestFactory,
    ProvisionRule,
    ProvisionTarget,
    ProvisionTargetExpander,
    ProvisionTargetRequest,
    SecretDeclaration,
    SecretType,
    StaticEnvironmentLister,
)
from provision_github_tokens.references import AccountRef, EnvironmentRef, RepoRef

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
from provision_github_tokens.registry import (
    App,
    Installation,
    InstallationRegistry,
    IssuerConfig,
    ProvisionerConfig,
    Repo,
    UnregisteredAppError,
)

# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------
from provision_github_tokens.tokens import (
    RepoScope,
    TokenAuthorizer,
    TokenAuthResult,
    TokenDeclaration,
    TokenDeclarationRegistry,
    TokenRequest,
    TokenRequestFactory,
    TokenRule,
)

__all__ = [
    "__version__",
    # Orchestration
    "AuthorizeResult",
    "Authorizer",
    "DiscoveredRequester",
    "RequesterFailure",
    "PolicyChecker",
    "environment_lister",
    "load_registry",
    # Config
    "ConfigError",
    "ConfigLoader",
    "ProviderPolicy",
    "RequesterPolicy",
    # Explain
    "ProvisionAuthExplainer",
    "ResultRenderer",
    "TokenAuthExplainer",
    # Access levels and patterns
    "AccessLevel",
    "CompoundPattern",
    "EmptyPermissionsError",
    "NamePattern",
    "PatternError",
    "any_matches",
    "compile_compound_pattern",
    "compile_name_pattern",
    "is_empty_permissions",
    "is_sufficient_access",
    "is_sufficient_permissions",
    "is_write_access",
    "max_access",
    # References
    "AccountRef",
    "EnvironmentRef",
    "RepoRef",
    # Registry
    "App",
    "Installation",
    "InstallationRegistry",
    "IssuerConfig",
    "ProvisionerConfig",
    "Repo",
    "UnregisteredAppError",
    # Tokens
    "RepoScope",
    "TokenAuthResult",
    "TokenAuthorizer",
    "TokenDeclaration",
    "TokenDeclarationRegistry",
    "TokenRequest",
    "TokenRequestFactory",
    "TokenRule",
    # Provisioning
    "EnvironmentLister",
    "EnvironmentResolver",
    "ProvisionAuthResult",
    "ProvisionAuthTargetResult",
    "ProvisionAuthorizer",
    "ProvisionRequest",
    "ProvisionRequestFactory",
    "ProvisionRule",
    "ProvisionTarget",
    "ProvisionTargetExpander",
    "ProvisionTargetRequest",
    "SecretDeclaration",
    "SecretType",
    "StaticEnvironmentLister",
]
