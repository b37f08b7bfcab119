"""Static ReDoS checks for user-configured merchant patterns.

The checks work on the pattern text and look one group level deep; a
dangerous construct hidden inside nested groups can slip through.
"""

from __future__ import annotations

import re

MAX_PATTERN_LENGTH = 100

_NESTED_QUANTIFIER = re.compile(r"\([^)]*[+*}]\)[+*{]")
_QUANTIFIED_GROUP_CONTENT = re.compile(r"\([^)]*\{[^}]*\}\)[+*{]|\([^)]*[.][+*]\)[+*{]")
_QUANTIFIED_GROUP = re.compile(r"\(([^)]+)\)[+*{]")
_BACKREFERENCE_QUANTIFIER = re.compile(r"\\[1-9][0-9]*[+*{]")
_WILDCARDS = frozenset({".", ".*", ".+"})


def has_nested_quantifiers(pattern: str) -> bool:
    """``(a+)+``, ``(a*)*``, ``(a+){2}``, ``(a{2,})+``, ``(.+)+`` and similar."""
    return bool(_NESTED_QUANTIFIER.search(pattern) or _QUANTIFIED_GROUP_CONTENT.search(pattern))


def _common_prefix_length(left: str, right: str) -> int:
    length = 0
    for a, b in zip(left, right):
        if a != b:
            break
        length += 1
    return length


def has_overlapping_patterns(alternatives: list[str]) -> bool:
    for i, first in enumerate(alternatives):
        if first in _WILDCARDS:
            return True
        for second in alternatives[i + 1 :]:
            if first == second:
                return True
            if first.startswith(second) or second.startswith(first):
                return True
            if first.endswith(second) or second.endswith(first):
                return True
            min_len = min(len(first), len(second))
            common = _common_prefix_length(first, second)
            if common > 0 and common > min_len / 2:
                return True
    return False


def has_overlapping_alternations(pattern: str) -> bool:
    """Quantified alternation groups whose branches overlap: ``(a|ab)+``, ``(.|a)*``."""
    for match in _QUANTIFIED_GROUP.finditer(pattern):
        content = match.group(1)
        if "|" not in content:
            continue
        if has_overlapping_patterns(content.split("|")):
            return True
    return False


def has_backreference_with_quantifier(pattern: str) -> bool:
    return bool(_BACKREFERENCE_QUANTIFIER.search(pattern))


def validate_regex_safety(pattern: str) -> bool:
    """Return True when ``pattern`` passes every check and may be compiled."""
    if len(pattern) > MAX_PATTERN_LENGTH:
        return False
    if has_nested_quantifiers(pattern):
        return False
    if has_overlapping_alternations(pattern):
        return False
    if has_backreference_with_quantifier(pattern):
        return False
    return True
