"""Registry of token declarations and token reference resolution.

Declarations are registered under ``account/repo.name``.  A private
declaration can only be used by the repo that declared it; a shared one by
any requester.
"""
from __future__ import annotations

import logging

from provision_github_tokens.references import RepoRef
from provision_github_tokens.tokens.request import TokenDeclaration

logger = logging.getLogger(__name__)


def normalize_token_reference(defining_repo: RepoRef, reference: str) -> str:
    """Expand a token reference to its ``account/repo.name`` form.

    ``name`` refers to a token in the defining repo, ``repo.name`` to a
    token in another repo of the defining account.
    """
    account_repo, dot, name = reference.rpartition(".")
    if not dot:
        return f"{defining_repo.full_name}.{reference}"

    account, slash, repo = account_repo.partition("/")
    if not slash:
        return f"{defining_repo.account}/{account_repo}.{name}"
    return f"{account}/{repo}.{name}"


class TokenDeclarationRegistry:
    """Stores token declarations keyed by their full reference."""

    def __init__(self) -> None:
        self._declarations: dict[str, TokenDeclaration] = {}

    def register(
        self, defining_repo: RepoRef, name: str, declaration: TokenDeclaration
    ) -> None:
        reference = f"{defining_repo.full_name}.{name}"
        self._declarations[reference] = declaration
        logger.debug("Registered token declaration %s", reference)

    def find_for_requester(
        self, requester: RepoRef, reference: str
    ) -> tuple[TokenDeclaration | None, bool]:
        """Look up *reference* on behalf of *requester*.

        Returns
        -------
        tuple[TokenDeclaration | None, bool]
            The declaration (or ``None`` when the requester may not use
            it) and whether the reference is registered at all.
        """
        declaration = self._declarations.get(reference)
        if declaration is None:
            return None, False
        if declaration.shared:
            return declaration, True
        if reference.startswith(f"{requester.full_name}."):
            return declaration, True

        logger.debug("Token %s is not shared with %s", reference, requester)
        return None, True

    def __len__(self) -> int:
        return len(self._declarations)
