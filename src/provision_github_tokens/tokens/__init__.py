"""Token rules, requests, declarations and authorization."""
from __future__ import annotations

from provision_github_tokens.tokens.authorizer import TokenAuthorizer
from provision_github_tokens.tokens.declarations import (
    TokenDeclarationRegistry,
    normalize_token_reference,
)
from provision_github_tokens.tokens.request import (
    RepoScope,
    TokenDeclaration,
    TokenRequest,
    TokenRequestFactory,
)
from provision_github_tokens.tokens.result import (
    TokenAuthResourceResult,
    TokenAuthResult,
    TokenAuthRuleResult,
)
from provision_github_tokens.tokens.rules import ResourceCriteria, TokenRule

__all__ = [
    "RepoScope",
    "ResourceCriteria",
    "TokenAuthResourceResult",
    "TokenAuthResult",
    "TokenAuthRuleResult",
    "TokenAuthorizer",
    "TokenDeclaration",
    "TokenDeclarationRegistry",
    "TokenRequest",
    "TokenRequestFactory",
    "TokenRule",
    "normalize_token_reference",
]
