"""Gap-based fuzzy matching in the style of fzf.

Query characters must appear in order in the candidate; fewer gaps between
matched characters and an earlier first match score higher.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

MAX_SCORE = 9999
USAGE_WEIGHT = 20


@dataclass(frozen=True)
class FuzzyMatch:
    item: str
    score: int


def gap_score(query: str, item: str) -> int | None:
    """Return ``max(0, 1000 - total_gap + start_bonus)`` or None if ``query`` is not a subsequence."""
    query_index = 0
    total_gap = 0
    last_match = -1
    first_match = -1

    for position, char in enumerate(item):
        if query_index >= len(query):
            break
        if char == query[query_index]:
            if first_match == -1:
                first_match = position
            if last_match >= 0:
                total_gap += position - last_match - 1
            last_match = position
            query_index += 1

    if query_index < len(query):
        return None

    start_bonus = max(0, 10 - first_match)
    return max(0, 1000 - total_gap + start_bonus)


class SimpleFuzzyMatcher:
    def match(
        self,
        query: str,
        items: Sequence[str],
        usage_counts: Mapping[str, int] | None = None,
        max_results: int = 100,
        case_sensitive: bool = False,
    ) -> list[FuzzyMatch]:
        """Rank ``items`` against ``query``.

        Ordering is usage count (descending), then gap score (descending),
        then the item text. An empty query returns every item ranked by usage.
        """
        usage = usage_counts or {}
        needle = query if case_sensitive else query.lower()

        if not needle:
            ranked = sorted(items, key=lambda item: -usage.get(item, 0))
            return [FuzzyMatch(item, usage.get(item, 0)) for item in ranked[:max_results]]

        scored: list[tuple[str, int]] = []
        for item in items:
            score = gap_score(needle, item if case_sensitive else item.lower())
            if score is not None:
                scored.append((item, score))

        scored.sort(key=lambda pair: (-usage.get(pair[0], 0), -pair[1], pair[0]))
        return [
            FuzzyMatch(item, min(score + usage.get(item, 0) * USAGE_WEIGHT, MAX_SCORE))
            for item, score in scored[:max_results]
        ]
