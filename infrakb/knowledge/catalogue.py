"""Validated, read-only knowledge catalogue.

The catalogue is the data feed every other component consumes. All
referential invariants are checked once, here:

  - entry IDs are globally unique
  - every component reference names a known component type
  - every pattern evolves_to / evolves_from edge names a pattern in the catalogue

A catalogue that fails any check raises CatalogueValidationError listing every
problem found, so a broken feed is rejected as a whole rather than indexed in
part. Query-time code trusts a constructed Catalogue and never re-validates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from infrakb.knowledge.infra import COMPONENT_TYPES
from infrakb.knowledge.types import (
    AntiPattern,
    ArchitecturePattern,
    ComponentRelationship,
    FailureScenario,
    KnowledgeEntryBase,
    KnowledgeType,
    PerformanceProfile,
    QuickTip,
    referenced_components,
)

logger = logging.getLogger(__name__)


class CatalogueValidationError(ValueError):
    """Raised when a catalogue violates a load-time invariant."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        preview = "; ".join(problems[:5])
        more = f" (+{len(problems) - 5} more)" if len(problems) > 5 else ""
        super().__init__(f"Catalogue validation failed: {preview}{more}")


def find_catalogue_problems(
    entries: Iterable[KnowledgeEntryBase],
    component_types: frozenset[str] = COMPONENT_TYPES,
) -> list[str]:
    """Return every load-time invariant violation in *entries* (empty if valid)."""
    problems: list[str] = []
    seen: set[str] = set()
    pattern_ids: set[str] = set()
    patterns: list[ArchitecturePattern] = []
    entries = list(entries)

    for entry in entries:
        if entry.id in seen:
            problems.append(f"Duplicate entry id: {entry.id}")
        seen.add(entry.id)

        for comp in referenced_components(entry):
            if comp not in component_types:
                problems.append(f"{entry.id}: unknown component type '{comp}'")

        if isinstance(entry, ArchitecturePattern):
            pattern_ids.add(entry.id)
            patterns.append(entry)

    for pattern in patterns:
        for ref in (*pattern.evolves_to, *pattern.evolves_from):
            if ref not in pattern_ids:
                problems.append(f"{pattern.id}: evolution reference '{ref}' does not resolve to a pattern")

    return problems


class Catalogue:
    """Ordered, validated collection of knowledge entries grouped by variant."""

    def __init__(
        self,
        entries: Iterable[KnowledgeEntryBase],
        component_types: frozenset[str] = COMPONENT_TYPES,
    ) -> None:
        entries = list(entries)
        problems = find_catalogue_problems(entries, component_types)
        if problems:
            logger.warning("Rejected catalogue with %d problem(s)", len(problems))
            raise CatalogueValidationError(problems)

        self._entries: tuple[KnowledgeEntryBase, ...] = tuple(entries)
        self._by_id: dict[str, KnowledgeEntryBase] = {e.id: e for e in entries}
        logger.debug("Catalogue loaded with %d entries", len(self._entries))

    # -- lookup -------------------------------------------------------------

    def get(self, entry_id: str) -> KnowledgeEntryBase | None:
        return self._by_id.get(entry_id)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._by_id

    def __iter__(self) -> Iterator[KnowledgeEntryBase]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def of_type(self, knowledge_type: KnowledgeType | str) -> list[KnowledgeEntryBase]:
        return [e for e in self._entries if e.type == knowledge_type]

    # -- typed views --------------------------------------------------------

    @property
    def relationships(self) -> list[ComponentRelationship]:
        return [e for e in self._entries if isinstance(e, ComponentRelationship)]

    @property
    def patterns(self) -> list[ArchitecturePattern]:
        return [e for e in self._entries if isinstance(e, ArchitecturePattern)]

    @property
    def anti_patterns(self) -> list[AntiPattern]:
        return [e for e in self._entries if isinstance(e, AntiPattern)]

    @property
    def failures(self) -> list[FailureScenario]:
        return [e for e in self._entries if isinstance(e, FailureScenario)]

    @property
    def tips(self) -> list[QuickTip]:
        return [e for e in self._entries if isinstance(e, QuickTip)]

    @property
    def performance_profiles(self) -> list[PerformanceProfile]:
        return [e for e in self._entries if isinstance(e, PerformanceProfile)]
