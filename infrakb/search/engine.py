"""Query-time search over a SearchIndex.

SearchEngine owns exactly one immutable SearchIndex. Queries read the current
index reference once and work on that snapshot; rebuild() constructs a new
index and swaps the reference under a lock, so readers never observe a
partially built index (single writer, many readers).

Scoring (search_knowledge):
    +3.0  query token equals an indexed token
    +1.5  otherwise, query token is a substring or superstring of an indexed
          token (both at least 3 characters)
    +2.5  query token equals one of the entry's tags
    Korean queries, per Korean text of the entry:
    +4.0  text contains the whole trimmed query
    +2.0  otherwise, per Hangul fragment of the query the text contains

A positive raw score is boosted by (1 + confidence * 0.3), then normalized by
the highest raw score among candidates, so the best hit always scores 1.0.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from infrakb.knowledge.catalogue import Catalogue
from infrakb.knowledge.types import KnowledgeEntryBase
from infrakb.search.index import IndexedEntry, SearchIndex, build_search_index, has_korean, normalize_token, tokenize

logger = logging.getLogger(__name__)

EXACT_TOKEN_WEIGHT = 3.0
PARTIAL_TOKEN_WEIGHT = 1.5
TAG_MATCH_WEIGHT = 2.5
KOREAN_SUBSTRING_WEIGHT = 2.0
CONFIDENCE_BOOST_FACTOR = 0.3
MIN_PARTIAL_LENGTH = 3

COMPONENT_WEIGHT = 2
TAG_WEIGHT = 1


@dataclass(frozen=True)
class SearchOptions:
    """Filters for search_knowledge.

    limit and min_score fall back to Settings.default_search_limit and
    Settings.default_min_score when left as None.
    """

    types: Sequence[str] = ("all",)
    components: Sequence[str] | None = None
    tags: Sequence[str] | None = None
    limit: int | None = None
    min_score: float | None = None

    def __post_init__(self) -> None:
        # a bare string is one filter value, not a sequence of characters
        for name in ("types", "components", "tags"):
            value = getattr(self, name)
            if isinstance(value, str):
                object.__setattr__(self, name, (value,))


@dataclass(frozen=True)
class SearchResult:
    id: str
    type: str
    score: float  # 0.0 to 1.0
    title: str
    title_ko: str
    summary: str
    summary_ko: str
    tags: tuple[str, ...]
    confidence: float
    entry: KnowledgeEntryBase


def _result(indexed: IndexedEntry, score: float) -> SearchResult:
    return SearchResult(
        id=indexed.id,
        type=indexed.type,
        score=score,
        title=indexed.title,
        title_ko=indexed.title_ko,
        summary=indexed.summary,
        summary_ko=indexed.summary_ko,
        tags=indexed.tags,
        confidence=indexed.confidence,
        entry=indexed.entry,
    )


def score_entry(indexed: IndexedEntry, query_tokens: list[str], raw_query: str) -> float:
    """Return the boosted raw relevance of *indexed* for a tokenized query."""
    score = 0.0

    for qt in query_tokens:
        if qt in indexed.tokens:
            score += EXACT_TOKEN_WEIGHT
            continue
        if len(qt) >= MIN_PARTIAL_LENGTH and any(
            len(t) >= MIN_PARTIAL_LENGTH and (qt in t or t in qt) for t in indexed.tokens
        ):
            score += PARTIAL_TOKEN_WEIGHT

    for qt in query_tokens:
        if qt in indexed.normalized_tags:
            score += TAG_MATCH_WEIGHT

    if has_korean(raw_query):
        trimmed = raw_query.strip()
        fragments = [f for f in trimmed.split() if has_korean(f)]
        for text in indexed.korean_texts:
            if trimmed in text:
                score += KOREAN_SUBSTRING_WEIGHT * 2
            else:
                score += KOREAN_SUBSTRING_WEIGHT * sum(1 for f in fragments if f in text)

    if score > 0:
        score *= 1 + indexed.confidence * CONFIDENCE_BOOST_FACTOR
    return score


class SearchEngine:
    """Answers free-text and lookup queries against one owned SearchIndex."""

    def __init__(self, index: SearchIndex) -> None:
        self._index = index
        self._lock = threading.Lock()

    @classmethod
    def from_catalogue(cls, catalogue: Catalogue) -> SearchEngine:
        return cls(build_search_index(catalogue))

    @property
    def index(self) -> SearchIndex:
        return self._index

    def rebuild(self, catalogue: Catalogue) -> SearchIndex:
        """Build a new index from *catalogue* and swap it in atomically."""
        new_index = build_search_index(catalogue)
        with self._lock:
            previous = self._index.size
            self._index = new_index
        logger.info("Search index rebuilt: %d -> %d entries", previous, new_index.size)
        return new_index

    # ------------------------------------------------------------------
    # Free-text search
    # ------------------------------------------------------------------

    def search_knowledge(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """Rank catalogue entries against *query* (English or Korean).

        Args:
            query:   Free-text query. Empty or whitespace-only returns [].
            options: Type, component and tag filters plus limit and min_score.

        Returns:
            Results sorted by descending score, every score in [0, 1].
        """
        if not query or not query.strip():
            return []

        from infrakb.config import settings  # read at call time so env overrides apply

        options = options or SearchOptions()
        limit = max(0, options.limit if options.limit is not None else settings.default_search_limit)
        min_score = options.min_score if options.min_score is not None else settings.default_min_score

        index = self._index
        candidates = self._prefilter(index, options.components, options.tags)
        allowed = None if "all" in options.types else set(options.types)

        query_tokens = tokenize(query)
        scored: list[tuple[IndexedEntry, float]] = []
        for indexed in index.ordered(candidates):
            if allowed is not None and indexed.type not in allowed:
                continue
            raw = score_entry(indexed, query_tokens, query)
            if raw > 0:
                scored.append((indexed, raw))

        if not scored:
            return []

        max_score = max(raw for _, raw in scored)
        results = [_result(indexed, min(1.0, raw / max_score)) for indexed, raw in scored]
        results = [r for r in results if r.score >= min_score]
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:limit]

    @staticmethod
    def _prefilter(
        index: SearchIndex,
        components: Iterable[str] | None,
        tags: Iterable[str] | None,
    ) -> set[str] | None:
        """Union within each filter, intersection across the two. None means no filter."""
        candidates: set[str] | None = None

        if components:
            candidates = set()
            for comp in components:
                candidates |= index.components.get(comp, frozenset())

        if tags:
            tagged: set[str] = set()
            for tag in tags:
                tagged |= index.tags.get(normalize_token(tag), frozenset())
            candidates = tagged if candidates is None else candidates & tagged

        return candidates

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def search_by_component(self, component: str) -> list[SearchResult]:
        """Every entry referencing *component*, highest confidence first."""
        index = self._index
        ids = index.components.get(component)
        if not ids:
            return []
        results = [_result(e, e.confidence) for e in index.ordered(ids)]
        results.sort(key=lambda r: r.confidence, reverse=True)
        return results

    def search_by_tag(self, tag: str) -> list[SearchResult]:
        """Every entry carrying *tag* (case-insensitive), highest confidence first."""
        index = self._index
        ids = index.tags.get(normalize_token(tag))
        if not ids:
            return []
        results = [_result(e, e.confidence) for e in index.ordered(ids)]
        results.sort(key=lambda r: r.confidence, reverse=True)
        return results

    def get_related_knowledge(self, entry_id: str) -> list[SearchResult]:
        """Entries sharing components (weight 2) or tags (weight 1) with *entry_id*.

        Scores are normalized by the largest overlap. The source entry and
        entries with no overlap are excluded. Unknown IDs return [].
        """
        index = self._index
        source = index.entries.get(entry_id)
        if source is None:
            return []

        overlap: dict[str, int] = {}
        for comp in source.components:
            for other in index.components.get(comp, frozenset()):
                if other != entry_id:
                    overlap[other] = overlap.get(other, 0) + COMPONENT_WEIGHT
        for tag in source.normalized_tags:
            for other in index.tags.get(tag, frozenset()):
                if other != entry_id:
                    overlap[other] = overlap.get(other, 0) + TAG_WEIGHT

        if not overlap:
            return []

        max_overlap = max(overlap.values())
        results = [_result(e, overlap[e.id] / max_overlap) for e in index.ordered(set(overlap))]
        results.sort(key=lambda r: r.score, reverse=True)
        return results
