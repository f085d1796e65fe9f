"""Partition merged candidates into exact matches and recommendations.

The classifier is a partition, not a ranker: gateway results arrive
already relevance-ordered and catalog commands keep catalog order, so
each bucket preserves candidate order.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from tunepalette import constants
from tunepalette.commands import Command
from tunepalette.models import (
    RawResult,
    RecencyEntry,
    ResultBuckets,
    ResultType,
    SearchResult,
)

EXACT = "exact"
RECOMMENDATION = "recommendation"


def match_kind(query: str, result: SearchResult, related: bool = False) -> str | None:
    """Classify one candidate against a lower-cased, stripped query.

    Returns ``"exact"`` for a title-prefix match, ``"recommendation"`` for a
    substring/category match or an upstream-related item, None otherwise.
    """
    title = result.title.lower()
    if title.startswith(query):
        return EXACT
    if query in title or query in result.subtitle.lower():
        return RECOMMENDATION
    if result.type is ResultType.COMMAND:
        category = str(result.data.get("category", "")).lower()
        if query in category:
            return RECOMMENDATION
    if related:
        return RECOMMENDATION
    return None


def classify(
    query: str,
    raw_results: Sequence[RawResult],
    commands: Iterable[Command],
    recents: Sequence[RecencyEntry],
    *,
    max_exact: int = constants.MAX_EXACT,
    max_recommendations: int = constants.MAX_RECOMMENDATIONS,
    max_results: int = constants.MAX_RESULTS,
    recent_limit: int = constants.RECENT_DISPLAY_LIMIT,
    quick_access: Iterable[Command] = (),
) -> ResultBuckets:
    """Build the palette buckets for *query*.

    Args:
        query: Current query text (surrounding whitespace is ignored).
        raw_results: Gateway results for the current generation.
        commands: Catalog commands to consider (typically already matched).
        recents: Recency entries, most recent first.
        max_exact: Cap on ``exact_matches``.
        max_recommendations: Cap on ``recommendations``.
        max_results: Shared cap; exact matches are kept first.
        recent_limit: Cap on ``recent_items`` for an empty query.
        quick_access: Commands shown for an empty query with no recents.

    Returns:
        ResultBuckets with no ``(type, id)`` appearing twice.
    """
    needle = query.strip().lower()

    if not needle:
        recent_items = [entry.to_result() for entry in recents[:recent_limit]]
        if recent_items:
            return ResultBuckets(recent_items=recent_items)
        return ResultBuckets(quick_access=[c.to_result() for c in quick_access])

    candidates: list[tuple[SearchResult, bool]] = [
        (raw.to_result(), raw.related)
        for raw in raw_results
        if raw.type is not ResultType.COMMAND
    ]
    candidates.extend((c.to_result(), False) for c in commands)

    exact: list[SearchResult] = []
    recommendations: list[SearchResult] = []
    seen: set[tuple[str, str]] = set()

    for result, related in candidates:
        if result.key in seen:
            continue
        kind = match_kind(needle, result, related)
        if kind is None:
            continue
        seen.add(result.key)
        if kind == EXACT:
            exact.append(result)
        else:
            recommendations.append(result)

    exact = exact[: min(max_exact, max_results)]
    remaining = max(max_results - len(exact), 0)
    recommendations = recommendations[: min(max_recommendations, remaining)]
    return ResultBuckets(exact_matches=exact, recommendations=recommendations)
