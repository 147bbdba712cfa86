"""Tests for access levels and permission maps."""
from __future__ import annotations

import itertools

import pytest

from provision_github_tokens.permissions import (
    AccessLevel,
    EmptyPermissionsError,
    apply_permission_delta,
    is_empty_permissions,
    is_sufficient_access,
    is_sufficient_permissions,
    is_write_access,
    max_access,
)

_LEVELS = list(AccessLevel)


# ---------------------------------------------------------------------------
# AccessLevel
# ---------------------------------------------------------------------------


class TestAccessLevel:
    def test_order(self) -> None:
        ranks = [level.rank for level in _LEVELS]
        assert ranks == sorted(ranks)
        assert _LEVELS == [AccessLevel.NONE, AccessLevel.READ, AccessLevel.WRITE, AccessLevel.ADMIN]

    def test_coerce_none_is_none_level(self) -> None:
        assert AccessLevel.coerce(None) is AccessLevel.NONE

    def test_coerce_string(self) -> None:
        assert AccessLevel.coerce("Write") is AccessLevel.WRITE

    def test_coerce_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            AccessLevel.coerce("owner")


class TestIsSufficientAccess:
    @pytest.mark.parametrize("level", _LEVELS)
    def test_reflexive(self, level: AccessLevel) -> None:
        assert is_sufficient_access(level, level)

    def test_transitive(self) -> None:
        for a, b, c in itertools.product(_LEVELS, repeat=3):
            if is_sufficient_access(a, b) and is_sufficient_access(b, c):
                assert is_sufficient_access(a, c)

    def test_admin_covers_write(self) -> None:
        assert is_sufficient_access("admin", "write")

    def test_read_does_not_cover_write(self) -> None:
        assert not is_sufficient_access("read", "write")

    def test_missing_have_is_none(self) -> None:
        assert not is_sufficient_access(None, "read")
        assert is_sufficient_access(None, "none")


class TestIsWriteAccess:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [("none", False), ("read", False), ("write", True), ("admin", True)],
    )
    def test_levels(self, level: str, expected: bool) -> None:
        assert is_write_access(level) is expected


# ---------------------------------------------------------------------------
# Permission maps
# ---------------------------------------------------------------------------


class TestMaxAccess:
    def test_highest_level(self) -> None:
        assert max_access({"contents": "read", "issues": "admin", "metadata": "write"}) is AccessLevel.ADMIN

    def test_empty_is_none(self) -> None:
        assert max_access({}) is AccessLevel.NONE


class TestIsEmptyPermissions:
    def test_empty_map(self) -> None:
        assert is_empty_permissions({})

    def test_only_none_entries(self) -> None:
        assert is_empty_permissions({"contents": "none"})

    def test_non_empty(self) -> None:
        assert not is_empty_permissions({"contents": "none", "issues": "read"})


class TestIsSufficientPermissions:
    def test_empty_want_raises(self) -> None:
        with pytest.raises(EmptyPermissionsError) as info:
            is_sufficient_permissions({"contents": "read"}, {})
        assert info.value.permissions == {}

    def test_empty_have_is_insufficient(self) -> None:
        assert not is_sufficient_permissions({}, {"contents": "read"})

    def test_want_covers_itself(self) -> None:
        want = {"contents": "write", "issues": "read"}
        assert is_sufficient_permissions(want, want)

    def test_every_permission_must_be_covered(self) -> None:
        have = {"contents": "admin"}
        assert not is_sufficient_permissions(have, {"contents": "read", "issues": "read"})

    def test_extra_have_is_ignored(self) -> None:
        assert is_sufficient_permissions({"contents": "write", "issues": "write"}, {"contents": "read"})


class TestApplyPermissionDelta:
    def test_overwrites_and_adds(self) -> None:
        have = {"contents": AccessLevel.WRITE}
        apply_permission_delta(have, {"contents": "read", "issues": "write"})
        assert have == {"contents": AccessLevel.READ, "issues": AccessLevel.WRITE}

    def test_none_removes(self) -> None:
        have = {"contents": AccessLevel.WRITE}
        apply_permission_delta(have, {"contents": "none"})
        assert have == {}
