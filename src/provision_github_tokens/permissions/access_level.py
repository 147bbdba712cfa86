"""Access levels for GitHub App permissions.

GitHub expresses every installation permission as one of ``read``,
``write`` or ``admin``.  Policy rules additionally use ``none`` to revoke a
permission granted by an earlier rule, so the engine works with the total
order ``none < read < write < admin``.

Example
-------
>>> is_sufficient_access("admin", "write")
True
>>> is_write_access(AccessLevel.READ)
False
"""
from __future__ import annotations

from enum import Enum


class AccessLevel(str, Enum):
    """Totally ordered permission access level."""

    NONE = "none"
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        """Position of this level in the total order (``none`` is 0)."""
        return _ACCESS_RANK[self]

    @classmethod
    def coerce(cls, value: AccessLevel | str | None) -> AccessLevel:
        """Return *value* as an :class:`AccessLevel`; ``None`` means ``none``.

        Raises
        ------
        ValueError
            If *value* is not a known access level string.
        """
        if value is None:
            return cls.NONE
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


_ACCESS_RANK: dict[AccessLevel, int] = {
    AccessLevel.NONE: 0,
    AccessLevel.READ: 1,
    AccessLevel.WRITE: 2,
    AccessLevel.ADMIN: 3,
}

AccessLike = AccessLevel | str | None


def is_sufficient_access(have: AccessLike, want: AccessLike) -> bool:
    """Return True when *have* grants at least as much access as *want*."""
    return AccessLevel.coerce(have).rank >= AccessLevel.coerce(want).rank


def is_write_access(access: AccessLike) -> bool:
    """Return True for ``write`` and ``admin``."""
    return AccessLevel.coerce(access).rank > AccessLevel.READ.rank
