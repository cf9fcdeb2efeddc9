"""Enrich an infrastructure diagram with catalogue knowledge.

enrich_context() looks at which component types a diagram contains and
returns:

  relationships  relationships whose two ends are both present (conflicts included)
  suggestions    requires/recommends companions that are missing from the diagram
  violations     anti-patterns whose detection predicate matches the diagram
  risks          failure scenarios for present components, most severe first
  tips           quick tips for present components

Only relationships at or above min_confidence are considered.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from infrakb.enrich.detection import safe_detect
from infrakb.knowledge.infra import InfraSpec
from infrakb.knowledge.types import AntiPattern, ComponentRelationship, FailureScenario, KnowledgeEntryBase, QuickTip

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONFIDENCE = 0.5

_IMPACT_ORDER = {"service-down": 0, "data-loss": 1, "security-breach": 2, "degraded": 3}

_E = TypeVar("_E", bound=KnowledgeEntryBase)


@dataclass
class EnrichedKnowledge:
    relationships: list[ComponentRelationship] = field(default_factory=list)
    violations: list[AntiPattern] = field(default_factory=list)
    suggestions: list[ComponentRelationship] = field(default_factory=list)
    risks: list[FailureScenario] = field(default_factory=list)
    tips: list[QuickTip] = field(default_factory=list)

    @property
    def has_violations(self) -> bool:
        """True on a present conflict, a missing mandatory companion or a matched anti-pattern."""
        return (
            any(r.relationship_type == "conflicts" for r in self.relationships)
            or any(s.relationship_type == "requires" for s in self.suggestions)
            or bool(self.violations)
        )


def _dedup(entries: Iterable[_E]) -> list[_E]:
    seen: set[str] = set()
    result = []
    for entry in entries:
        if entry.id not in seen:
            seen.add(entry.id)
            result.append(entry)
    return result


def _suggestions(present: set[str], relationships: Sequence[ComponentRelationship]) -> list[ComponentRelationship]:
    found = []
    for rel in relationships:
        if rel.relationship_type not in ("requires", "recommends"):
            continue
        if rel.source in present and rel.target not in present:
            found.append(rel)
        if rel.direction == "bidirectional" and rel.target in present and rel.source not in present:
            found.append(rel)
    # requires first, then confidence descending
    found = _dedup(found)
    found.sort(key=lambda r: (r.relationship_type != "requires", -r.trust.confidence))
    return found


def _violations(spec: InfraSpec, anti_patterns: Iterable[AntiPattern]) -> list[AntiPattern]:
    matched = []
    for ap in anti_patterns:
        if safe_detect(ap.id, ap.detection, spec):
            matched.append(ap)
    return matched


def enrich_context(
    spec: InfraSpec,
    relationships: Sequence[ComponentRelationship],
    anti_patterns: Iterable[AntiPattern] | None = None,
    failures: Iterable[FailureScenario] | None = None,
    tips: Iterable[QuickTip] | None = None,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> EnrichedKnowledge:
    """Collect the knowledge relevant to the components present in *spec*.

    Args:
        spec:           Parsed diagram.
        relationships:  Candidate relationships, usually the catalogue's.
        anti_patterns:  Anti-patterns to evaluate. A predicate that raises is
                        skipped; the others still run.
        failures:       Failure scenarios to match against present components.
        tips:           Quick tips to match against present components.
        min_confidence: Relationships below this confidence are ignored.

    Returns:
        EnrichedKnowledge with every list de-duplicated by entry ID.
    """
    present = spec.node_types()
    trusted = [r for r in relationships if r.trust.confidence >= min_confidence]

    relevant = [
        r for r in trusted
        if r.relationship_type != "conflicts" and r.source in present and r.target in present
    ]
    conflicts = [
        r for r in trusted
        if r.relationship_type == "conflicts" and r.source in present and r.target in present
    ]

    risks = [f for f in (failures or []) if f.component in present]
    risks.sort(key=lambda f: _IMPACT_ORDER.get(f.impact, 9))

    enriched = EnrichedKnowledge(
        relationships=_dedup([*relevant, *conflicts]),
        violations=_dedup(_violations(spec, anti_patterns or [])),
        suggestions=_suggestions(present, trusted),
        risks=_dedup(risks),
        tips=_dedup(t for t in (tips or []) if t.component in present),
    )
    logger.debug(
        "Enriched %s: %d relationship(s), %d suggestion(s), %d violation(s), %d risk(s)",
        spec.name or "diagram",
        len(enriched.relationships), len(enriched.suggestions),
        len(enriched.violations), len(enriched.risks),
    )
    return enriched
