"""Permission map helpers.

A permission map is a mapping from a GitHub permission name (``contents``,
``issues``, ``metadata`` ...) to an access level.  A missing entry means
``none``, so ``{}`` and ``{"contents": "none"}`` are both empty.
"""
from __future__ import annotations

import logging
from typing import Mapping

from provision_github_tokens.permissions.access_level import (
    AccessLevel,
    AccessLike,
    is_sufficient_access,
)

logger = logging.getLogger(__name__)

PermissionMap = Mapping[str, AccessLike]


class EmptyPermissionsError(ValueError):
    """Raised when a request asks for no permissions at all.

    Attributes
    ----------
    permissions:
        The offending permission map.
    """

    def __init__(self, permissions: PermissionMap, subject: str | None = None) -> None:
        self.permissions = dict(permissions)
        self.subject = subject
        suffix = f" for {subject}" if subject else ""
        super().__init__(f"Empty permissions requested{suffix}: {self.permissions!r}")


def normalize_permissions(permissions: PermissionMap) -> dict[str, AccessLevel]:
    """Return a copy of *permissions* with every value coerced to AccessLevel."""
    return {name: AccessLevel.coerce(access) for name, access in permissions.items()}


def max_access(permissions: PermissionMap) -> AccessLevel:
    """Return the highest access level in *permissions* (``none`` if empty)."""
    highest = AccessLevel.NONE
    for access in permissions.values():
        level = AccessLevel.coerce(access)
        if level.rank > highest.rank:
            highest = level
    return highest


def is_empty_permissions(permissions: PermissionMap) -> bool:
    """Return True when no entry grants more than ``none``."""
    return all(AccessLevel.coerce(a) is AccessLevel.NONE for a in permissions.values())


def is_sufficient_permissions(have: PermissionMap, want: PermissionMap) -> bool:
    """Return True when *have* covers every permission named in *want*.

    Parameters
    ----------
    have:
        Permissions that are available.
    want:
        Permissions that are requested.

    Returns
    -------
    bool

    Raises
    ------
    EmptyPermissionsError
        If *want* is empty.
    """
    if is_empty_permissions(want):
        raise EmptyPermissionsError(want)

    for name, access in want.items():
        if not is_sufficient_access(have.get(name), access):
            return False
    return True


def apply_permission_delta(
    have: dict[str, AccessLevel],
    delta: PermissionMap,
) -> None:
    """Merge a rule's permission *delta* into *have* in place.

    ``none`` entries remove the permission; other entries overwrite it.
    """
    for name, access in delta.items():
        level = AccessLevel.coerce(access)
        if level is AccessLevel.NONE:
            have.pop(name, None)
        else:
            have[name] = level
