"""
Tests for Pattern Matching.
"""
import re

import pytest

from flowrules.core.services.patterns import (
    PatternCache,
    PatternKind,
    compile_pattern,
    match_any,
    match_pattern,
    matches,
    parse_flags,
)


def test_explicit_regex():
    compiled = compile_pattern("/^a.*/")
    assert compiled.kind is PatternKind.REGEX
    assert matches("abc", compiled)
    assert not matches("xbc", compiled)


def test_explicit_regex_flags():
    assert match_pattern("cpu-load", "/CPU/i")
    assert not match_pattern("cpu-load", "/CPU/")


def test_wildcard():
    compiled = compile_pattern("a*c")
    assert compiled.kind is PatternKind.WILDCARD
    assert matches("abc", compiled)
    assert matches("ac", compiled)
    assert not matches("abcd", compiled)
    assert not matches("xabc", compiled)


def test_wildcard_question_mark():
    assert match_pattern("srv-1", "srv-?")
    assert not match_pattern("srv-10", "srv-?")


def test_wildcard_escapes_regex_characters():
    compiled = compile_pattern("*.example.com")
    assert compiled.kind is PatternKind.WILDCARD
    assert matches("db.example.com", compiled)
    assert not matches("db.example.org", compiled)
    assert not matches("dbxexample.com", compiled)


def test_wildcard_with_dotted_suffix():
    compiled = compile_pattern("host-*.prod")
    assert compiled.kind is PatternKind.WILDCARD
    assert matches("host-1.prod", compiled)
    assert matches("host-.prod", compiled)
    assert not matches("host-1xprod", compiled)


def test_wildcard_with_dots_is_anchored():
    compiled = compile_pattern("db*.local")
    assert compiled.kind is PatternKind.WILDCARD
    assert matches("db-primary.local", compiled)
    assert not matches("my-db.local-backup", compiled)


def test_quantified_group_is_regex():
    compiled = compile_pattern("(cpu|mem)?-load")
    assert compiled.kind is PatternKind.REGEX
    assert matches("mem-load", compiled)
    assert matches("x-load", compiled)


def test_dot_star_matches_everything():
    compiled = compile_pattern(".*")
    assert compiled.kind is PatternKind.REGEX
    assert matches("n1", compiled)
    assert matches("cell-42", compiled)


def test_implicit_regex_is_unanchored():
    compiled = compile_pattern("cpu|mem")
    assert compiled.kind is PatternKind.REGEX
    assert matches("node-mem-usage", compiled)


def test_exact_match():
    compiled = compile_pattern("node1")
    assert compiled.kind is PatternKind.EXACT
    assert matches("node1", compiled)
    assert not matches("node10", compiled)
    assert not matches("Node1", compiled)


@pytest.mark.parametrize("pattern", ["/(/", "/abc/q", "a(b"])
def test_invalid_patterns_never_match(pattern):
    compiled = compile_pattern(pattern)
    assert compiled.kind is PatternKind.INVALID
    assert not matches(pattern, compiled)
    assert not matches("a(b", compiled)


def test_empty_inputs_never_match():
    assert not match_pattern("", ".*")
    assert not match_pattern("abc", "")
    assert not match_any(["abc"], "")


def test_match_any_checks_each_identifier():
    assert match_any(["cell-7", "Web Server"], "/server/i")
    assert match_any(["cell-7", "Web Server"], "cell-7")
    assert not match_any(["cell-7", "Web Server"], "db*")


def test_parse_flags():
    assert parse_flags("") == 0
    assert parse_flags("gi") == re.IGNORECASE
    assert parse_flags("ms") == re.MULTILINE | re.DOTALL
    with pytest.raises(ValueError):
        parse_flags("x")


def test_pattern_cache_reuses_compiled_patterns():
    cache = PatternCache()
    first = cache.get("a*c")
    assert cache.get("a*c") is first
    assert len(cache) == 1

    assert match_pattern("abc", "a*c", cache)
    assert match_pattern("node1", "node1", cache)
    assert len(cache) == 2
