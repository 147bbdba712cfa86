"""Tests for name and compound patterns."""
from __future__ import annotations

import pytest

from provision_github_tokens.patterns import (
    PatternError,
    any_matches,
    compile_account_pattern,
    compile_compound_pattern,
    compile_name_pattern,
    normalize_account_pattern,
    normalize_compound_pattern,
)


# ---------------------------------------------------------------------------
# NamePattern
# ---------------------------------------------------------------------------


class TestNamePattern:
    @pytest.mark.parametrize("candidate", ["a", "repo-1", "x.y_z", ""])
    def test_star_matches_single_segment(self, candidate: str) -> None:
        assert compile_name_pattern("*").test(candidate)

    @pytest.mark.parametrize("candidate", ["a/b", "a/b/c", "/"])
    def test_star_rejects_multi_segment(self, candidate: str) -> None:
        assert not compile_name_pattern("*").test(candidate)

    def test_literal_matches_only_itself(self) -> None:
        pattern = compile_name_pattern("api")
        assert pattern.test("api")
        assert not pattern.test("api-2")
        assert not pattern.test("my-api")

    def test_wildcard_in_the_middle(self) -> None:
        pattern = compile_name_pattern("repo-*-prod")
        assert pattern.test("repo-a-prod")
        assert pattern.test("repo--prod")
        assert not pattern.test("repo-a-dev")

    def test_regex_characters_are_literal(self) -> None:
        pattern = compile_name_pattern("a.b+c")
        assert pattern.test("a.b+c")
        assert not pattern.test("axb+c")

    def test_is_all(self) -> None:
        assert compile_name_pattern("*").is_all
        assert compile_name_pattern("**").is_all
        assert not compile_name_pattern("a*").is_all

    def test_empty_raises(self) -> None:
        with pytest.raises(PatternError) as info:
            compile_name_pattern("")
        assert info.value.literal == ""

    def test_slash_raises(self) -> None:
        with pytest.raises(PatternError) as info:
            compile_name_pattern("a/b")
        assert info.value.literal == "a/b"

    def test_str_is_literal(self) -> None:
        assert str(compile_name_pattern("env-*")) == "env-*"


# ---------------------------------------------------------------------------
# CompoundPattern
# ---------------------------------------------------------------------------


class TestCompoundPattern:
    def test_account_and_repo_wildcards(self) -> None:
        pattern = compile_compound_pattern("a-*/b-*")
        assert pattern.test("a-1/b-2")
        assert not pattern.test("a-1")
        assert not pattern.test("a-1/b-2/c")
        assert not pattern.test("x-1/b-2")

    def test_account_only_matches_bare_accounts(self) -> None:
        pattern = compile_compound_pattern("octo-*")
        assert pattern.test("octo-org")
        assert not pattern.test("octo-org/api")

    def test_arity(self) -> None:
        assert compile_compound_pattern("a").arity == 1
        assert compile_compound_pattern("a/b").arity == 2

    def test_is_all(self) -> None:
        assert compile_compound_pattern("*/*").is_all
        assert compile_compound_pattern("*").is_all
        assert not compile_compound_pattern("*/api").is_all

    def test_is_all_for_account(self) -> None:
        pattern = compile_compound_pattern("octo-*/*")
        assert pattern.is_all_for_account("octo-org")
        assert not pattern.is_all_for_account("other")
        assert not compile_compound_pattern("octo-org").is_all_for_account("octo-org")
        assert not compile_compound_pattern("octo-org/api").is_all_for_account("octo-org")

    @pytest.mark.parametrize("literal", ["a/b/c", "/b", "a/", ""])
    def test_malformed_raises(self, literal: str) -> None:
        with pytest.raises(PatternError) as info:
            compile_compound_pattern(literal)
        assert info.value.literal == literal


class TestAnyMatches:
    def test_empty_list_never_matches(self) -> None:
        assert not any_matches([], "anything")

    def test_any_pattern(self) -> None:
        patterns = [compile_name_pattern("a"), compile_name_pattern("b-*")]
        assert any_matches(patterns, "b-1")
        assert not any_matches(patterns, "c")


class TestAccountPattern:
    def test_single_segment_is_a_name_pattern(self) -> None:
        pattern = compile_account_pattern("octo-*")
        assert pattern.test("octo-org")
        assert not pattern.test("octo-org/api")

    def test_owner_repo_key_is_rejected(self) -> None:
        with pytest.raises(PatternError, match="under repos") as info:
            compile_account_pattern("octo-org/api")
        assert info.value.literal == "octo-org/api"

    def test_empty_key_is_rejected(self) -> None:
        with pytest.raises(PatternError, match="empty"):
            compile_account_pattern("")


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


class TestNormalize:
    def test_dot_account(self) -> None:
        assert normalize_account_pattern("octo-org", ".") == "octo-org"
        assert normalize_account_pattern("octo-org", "other-*") == "other-*"

    def test_dot_compound(self) -> None:
        assert normalize_compound_pattern("octo-org", ".") == "octo-org"
        assert normalize_compound_pattern("octo-org", "./api-*") == "octo-org/api-*"
        assert normalize_compound_pattern("octo-org", "other/*") == "other/*"

    def test_malformed_compound_raises(self) -> None:
        with pytest.raises(PatternError):
            normalize_compound_pattern("octo-org", "./a/b")
