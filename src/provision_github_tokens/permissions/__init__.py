"""Access levels and permission maps.

Example
-------
::

    from provision_github_tokens.permissions import is_sufficient_permissions

    assert is_sufficient_permissions({"contents": "write"}, {"contents": "read"})
"""
from __future__ import annotations

from provision_github_tokens.permissions.access_level import (
    AccessLevel,
    is_sufficient_access,
    is_write_access,
)
from provision_github_tokens.permissions.permission_set import (
    EmptyPermissionsError,
    PermissionMap,
    apply_permission_delta,
    is_empty_permissions,
    is_sufficient_permissions,
    max_access,
    normalize_permissions,
)

__all__ = [
    "AccessLevel",
    "EmptyPermissionsError",
    "PermissionMap",
    "apply_permission_delta",
    "is_empty_permissions",
    "is_sufficient_access",
    "is_sufficient_permissions",
    "is_write_access",
    "max_access",
    "normalize_permissions",
]
