"""
Pattern Matching - Regex, wildcard and exact matching of identifiers.

A pattern string is classified in this order:
1. ``/body/flags``  -> explicit regular expression
2. contains ``*`` or ``?`` -> anchored wildcard, unless one of them follows
   ``.``, ``)`` or ``]`` and so quantifies a regex atom (``.*``, ``(a|b)?``)
3. contains other regex metacharacters -> implicit, unanchored regex
4. anything else -> exact string equality

So ``.*`` matches everything while ``host-*.prod`` is still a wildcard.
Invalid regular expressions never match; they are not reported as errors.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

logger = logging.getLogger(__name__)

_REGEX_SPECIAL = re.compile(r"[.+^${}()|\[\]\\]")
_REGEX_QUANTIFIER = re.compile(r"[.)\]][*?]")

# /body/flags suffix letters; g/y/u/d have no equivalent for a single test
_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "g": 0,
    "y": 0,
    "u": 0,
    "d": 0,
}


class PatternKind(str, Enum):
    REGEX = "regex"
    WILDCARD = "wildcard"
    EXACT = "exact"
    INVALID = "invalid"


@dataclass(frozen=True)
class CompiledPattern:
    """A classified pattern, ready to test identifiers against."""

    source: str
    kind: PatternKind
    regex: re.Pattern | None = None


def parse_flags(flags: str) -> int:
    """
    Translate the flag letters of a ``/body/flags`` pattern into ``re`` flags.

    Raises:
        ValueError: on an unknown flag character
    """
    result = 0
    for flag in flags:
        if flag not in _FLAG_MAP:
            raise ValueError(f"Unknown regex flag '{flag}'")
        result |= _FLAG_MAP[flag]
    return result


def compile_pattern(pattern: str) -> CompiledPattern:
    """Classify and compile a pattern string."""
    if not pattern:
        return CompiledPattern(pattern, PatternKind.INVALID)

    # Explicit regex: /body/ or /body/flags
    last_slash = pattern.rfind("/")
    if pattern.startswith("/") and last_slash > 0:
        body = pattern[1:last_slash]
        try:
            regex = re.compile(body, parse_flags(pattern[last_slash + 1:]))
        except (re.error, ValueError) as e:
            logger.debug(f"Invalid regex pattern '{pattern}': {e}")
            return CompiledPattern(pattern, PatternKind.INVALID)
        return CompiledPattern(pattern, PatternKind.REGEX, regex)

    has_wildcard = "*" in pattern or "?" in pattern

    if has_wildcard and not _REGEX_QUANTIFIER.search(pattern):
        return _compile_wildcard(pattern)

    if _REGEX_SPECIAL.search(pattern):
        try:
            return CompiledPattern(pattern, PatternKind.REGEX, re.compile(pattern))
        except re.error as e:
            if not has_wildcard:
                logger.debug(f"Invalid implicit regex '{pattern}': {e}")
                return CompiledPattern(pattern, PatternKind.INVALID)

    if has_wildcard:
        return _compile_wildcard(pattern)

    return CompiledPattern(pattern, PatternKind.EXACT)


def _compile_wildcard(pattern: str) -> CompiledPattern:
    body = "".join(
        ".*" if ch == "*" else "." if ch == "?" else re.escape(ch)
        for ch in pattern
    )
    return CompiledPattern(pattern, PatternKind.WILDCARD, re.compile(rf"\A{body}\Z"))


def matches(identifier: str, compiled: CompiledPattern) -> bool:
    """Test an identifier against a compiled pattern."""
    if not identifier or compiled.kind is PatternKind.INVALID:
        return False
    if compiled.kind is PatternKind.EXACT:
        return identifier == compiled.source
    return compiled.regex.search(identifier) is not None


class PatternCache:
    """
    Memoizes compiled patterns by their source string.

    Owned by whoever creates it; typically one per state computation.
    """

    def __init__(self):
        self._compiled: dict[str, CompiledPattern] = {}

    def get(self, pattern: str) -> CompiledPattern:
        compiled = self._compiled.get(pattern)
        if compiled is None:
            compiled = compile_pattern(pattern)
            self._compiled[pattern] = compiled
        return compiled

    def __len__(self) -> int:
        return len(self._compiled)


def match_pattern(text: str, pattern: str, cache: PatternCache | None = None) -> bool:
    """Test whether ``text`` matches ``pattern``."""
    if not text or not pattern:
        return False
    compiled = cache.get(pattern) if cache is not None else compile_pattern(pattern)
    return matches(text, compiled)


def match_any(
    identifiers: Iterable[str],
    pattern: str,
    cache: PatternCache | None = None,
) -> bool:
    """Test a pattern against several identifiers (id, label ...), stopping at the first hit."""
    if not pattern:
        return False
    compiled = cache.get(pattern) if cache is not None else compile_pattern(pattern)
    return any(matches(identifier, compiled) for identifier in identifiers)
