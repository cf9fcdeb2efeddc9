"""Inverted index over the knowledge catalogue.

build_search_index() walks every entry of a validated Catalogue once and
produces an immutable SearchIndex:

  tokens      token -> entry IDs        (normalized English text, enums, IDs)
  components  component type -> entry IDs
  tags        normalized tag -> entry IDs

Per entry it also keeps the raw Korean text fragments. Korean is matched by
substring at query time instead of by token, because it does not split on
whitespace the way English does.

Index contents are derived per variant by dispatching on the concrete entry
class, so every variant (tips included) is searchable.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from infrakb.knowledge.catalogue import Catalogue
from infrakb.knowledge.types import (
    AntiPattern,
    ArchitecturePattern,
    ComponentRelationship,
    FailureScenario,
    KnowledgeEntryBase,
    PerformanceProfile,
    QuickTip,
)

logger = logging.getLogger(__name__)

_STRIP_RE = re.compile(r"[^a-z0-9가-힣\-]")
_SPLIT_RE = re.compile(r"[\s,/()]+")
_HANGUL_RE = re.compile(r"[가-힣]")


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_token(token: str) -> str:
    """Lower-case and strip punctuation other than hyphens."""
    return _STRIP_RE.sub("", token.lower())


def tokenize(text: str | None) -> list[str]:
    """Split on whitespace, commas, slashes and parentheses; drop empty tokens."""
    if not text:
        return []
    return [t for t in (normalize_token(part) for part in _SPLIT_RE.split(text)) if t]


def has_korean(text: str) -> bool:
    return bool(_HANGUL_RE.search(text))


# ---------------------------------------------------------------------------
# Index types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IndexedEntry:
    """Normalized view of one catalogue entry."""

    id: str
    type: str
    title: str
    title_ko: str
    summary: str
    summary_ko: str
    tags: tuple[str, ...]
    normalized_tags: frozenset[str]
    confidence: float
    components: tuple[str, ...]
    tokens: frozenset[str]
    korean_texts: tuple[str, ...]
    entry: KnowledgeEntryBase


@dataclass(frozen=True)
class SearchIndex:
    """Immutable lookup structure. Rebuild wholesale when the catalogue changes."""

    entries: dict[str, IndexedEntry]
    tokens: dict[str, frozenset[str]]
    components: dict[str, frozenset[str]]
    tags: dict[str, frozenset[str]]

    @property
    def size(self) -> int:
        return len(self.entries)

    def ordered(self, ids: frozenset[str] | set[str] | None = None) -> list[IndexedEntry]:
        """Return indexed entries in catalogue order, optionally restricted to *ids*."""
        if ids is None:
            return list(self.entries.values())
        return [e for e in self.entries.values() if e.id in ids]


# ---------------------------------------------------------------------------
# Per-variant extraction
# ---------------------------------------------------------------------------


def _extract(entry: KnowledgeEntryBase) -> tuple[list[str], list[str], list[str]]:
    """Return (tokens, korean_texts, components) for one entry."""
    tokens = [normalize_token(t) for t in entry.tags]
    tokens.append(normalize_token(entry.id))
    korean: list[str] = []
    components: list[str] = []

    if isinstance(entry, ComponentRelationship):
        tokens += tokenize(entry.reason)
        tokens += [
            normalize_token(entry.source),
            normalize_token(entry.target),
            normalize_token(entry.relationship_type),
            normalize_token(entry.strength),
            normalize_token(entry.direction),
        ]
        korean.append(entry.reason_ko)
        components += [entry.source, entry.target]

    elif isinstance(entry, ArchitecturePattern):
        tokens += tokenize(entry.name)
        tokens += tokenize(entry.description)
        korean += [entry.name_ko, entry.description_ko, *entry.best_for_ko, *entry.not_suitable_for_ko]
        for rc in entry.required_components:
            tokens.append(normalize_token(rc.type))
            components.append(rc.type)
        for oc in entry.optional_components:
            tokens.append(normalize_token(oc.type))
            tokens += tokenize(oc.benefit)
            korean.append(oc.benefit_ko)
            components.append(oc.type)

    elif isinstance(entry, AntiPattern):
        tokens += tokenize(entry.name)
        tokens.append(normalize_token(entry.severity))
        korean += [
            entry.name_ko,
            entry.problem_ko,
            entry.impact_ko,
            entry.solution_ko,
            entry.detection_description_ko,
        ]

    elif isinstance(entry, FailureScenario):
        tokens += tokenize(entry.component)
        tokens += [normalize_token(entry.impact), normalize_token(entry.likelihood)]
        tokens += [normalize_token(c) for c in entry.affected_components]
        korean += [entry.title_ko, entry.scenario_ko, *entry.prevention_ko, *entry.mitigation_ko]
        components += [entry.component, *entry.affected_components]

    elif isinstance(entry, QuickTip):
        tokens += [normalize_token(entry.component), normalize_token(entry.category)]
        korean.append(entry.tip_ko)
        components.append(entry.component)

    elif isinstance(entry, PerformanceProfile):
        tokens += [normalize_token(entry.component), normalize_token(entry.scaling_strategy)]
        for indicator in entry.bottleneck_indicators:
            tokens += tokenize(indicator)
        korean += [entry.name_ko, *entry.bottleneck_indicators_ko, *entry.optimization_tips_ko]
        components.append(entry.component)

    tokens = list(dict.fromkeys(t for t in tokens if t))
    components = list(dict.fromkeys(components))
    return tokens, [k for k in korean if k], components


def _titles(entry: KnowledgeEntryBase) -> tuple[str, str, str, str]:
    """Return (title, title_ko, summary, summary_ko) for display."""
    if isinstance(entry, ComponentRelationship):
        title = f"{entry.source} {entry.relationship_type} {entry.target}"
        return title, title, entry.reason, entry.reason_ko
    if isinstance(entry, ArchitecturePattern):
        return entry.name, entry.name_ko, entry.description, entry.description_ko
    if isinstance(entry, AntiPattern):
        return entry.name, entry.name_ko, entry.name, entry.problem_ko
    if isinstance(entry, FailureScenario):
        summary = f"{entry.component}: {entry.impact} ({entry.likelihood} likelihood)"
        return f"{entry.component} failure", entry.title_ko, summary, entry.scenario_ko
    if isinstance(entry, QuickTip):
        return f"{entry.component} tip", f"{entry.component} 팁", f"{entry.component}: {entry.category}", entry.tip_ko
    if isinstance(entry, PerformanceProfile):
        summary = f"{entry.component}: {entry.throughput_range.typical}"
        return f"{entry.component} performance", entry.name_ko, summary, entry.name_ko
    return entry.id, entry.id, "", ""


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def _add(index: dict[str, set[str]], key: str, entry_id: str) -> None:
    index.setdefault(key, set()).add(entry_id)


def index_entry(entry: KnowledgeEntryBase) -> IndexedEntry:
    tokens, korean, components = _extract(entry)
    title, title_ko, summary, summary_ko = _titles(entry)
    return IndexedEntry(
        id=entry.id,
        type=entry.type,
        title=title,
        title_ko=title_ko,
        summary=summary,
        summary_ko=summary_ko,
        tags=tuple(entry.tags),
        normalized_tags=frozenset(normalize_token(t) for t in entry.tags),
        confidence=entry.trust.confidence,
        components=tuple(components),
        tokens=frozenset(tokens),
        korean_texts=tuple(korean),
        entry=entry,
    )


def build_search_index(catalogue: Catalogue) -> SearchIndex:
    """Build a fresh immutable SearchIndex from *catalogue*."""
    entries: dict[str, IndexedEntry] = {}
    tokens: dict[str, set[str]] = {}
    components: dict[str, set[str]] = {}
    tags: dict[str, set[str]] = {}

    for entry in catalogue:
        indexed = index_entry(entry)
        entries[indexed.id] = indexed
        for token in indexed.tokens:
            _add(tokens, token, indexed.id)
        for comp in indexed.components:
            _add(components, comp, indexed.id)
        for tag in indexed.normalized_tags:
            _add(tags, tag, indexed.id)

    logger.info(
        "Search index built: %d entries, %d tokens, %d components, %d tags",
        len(entries), len(tokens), len(components), len(tags),
    )
    return SearchIndex(
        entries=entries,
        tokens={k: frozenset(v) for k, v in tokens.items()},
        components={k: frozenset(v) for k, v in components.items()},
        tags={k: frozenset(v) for k, v in tags.items()},
    )
