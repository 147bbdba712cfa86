"""Resolve ``.`` shorthands in configuration pattern literals.

Configuration files may write ``.`` for "the account that defines this
file" and ``./name`` for a repo in that account.  These helpers rewrite the
literals before they are compiled.
"""
from __future__ import annotations

from provision_github_tokens.patterns.compound_pattern import split_compound_literal


def normalize_account_pattern(defining_account: str, literal: str) -> str:
    return defining_account if literal == "." else literal


def normalize_compound_pattern(defining_account: str, literal: str) -> str:
    account_part, repo_part = split_compound_literal(literal)

    if account_part != ".":
        return literal
    if repo_part is None:
        return defining_account
    return f"{defining_account}/{repo_part}"
