"""Secret provisioning rules, target expansion and authorization."""
from __future__ import annotations

from provision_github_tokens.provision.authorizer import (
    ProvisionAuthorizer,
    apply_environment_patterns,
    merge_pattern_decision,
    override_decision,
    select_by_secret_type,
)
from provision_github_tokens.provision.declaration import (
    RepoSecretTypeFlags,
    SecretDeclaration,
    SecretTypeFlags,
)
from provision_github_tokens.provision.environment import (
    EnvironmentLister,
    EnvironmentResolver,
    StaticEnvironmentLister,
)
from provision_github_tokens.provision.request import (
    ProvisionRequest,
    ProvisionTarget,
    ProvisionTargetRequest,
)
from provision_github_tokens.provision.result import (
    ProvisionAuthResult,
    ProvisionAuthRuleResult,
    ProvisionAuthTargetResult,
    TargetAuthorization,
)
from provision_github_tokens.provision.rules import (
    SECRET_TYPES,
    Decision,
    ProvisionRule,
    RepoSecretSettings,
    SecretType,
    SecretTypeSettings,
)
from provision_github_tokens.provision.targets import (
    ProvisionRequestFactory,
    ProvisionTargetExpander,
    combine_types,
    override_types,
)

__all__ = [
    "SECRET_TYPES",
    "Decision",
    "EnvironmentLister",
    "EnvironmentResolver",
    "ProvisionAuthResult",
    "ProvisionAuthRuleResult",
    "ProvisionAuthTargetResult",
    "ProvisionAuthorizer",
    "ProvisionRequest",
    "ProvisionRequestFactory",
    "ProvisionRule",
    "ProvisionTarget",
    "ProvisionTargetExpander",
    "ProvisionTargetRequest",
    "RepoSecretSettings",
    "RepoSecretTypeFlags",
    "SecretDeclaration",
    "SecretType",
    "SecretTypeFlags",
    "SecretTypeSettings",
    "StaticEnvironmentLister",
    "TargetAuthorization",
    "apply_environment_patterns",
    "combine_types",
    "merge_pattern_decision",
    "override_decision",
    "override_types",
]
