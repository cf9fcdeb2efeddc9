"""Rule-based conflict detection between a candidate relationship and existing ones.

Compares a submitted component relationship with every existing relationship
on the same slot (same pair of components, in either order) and classifies
the pairing.

Outcome vocabulary:
  overlaps: same relationship type already recorded (duplicate)
  contradicts: one side is 'conflicts' and the other is not
  extends: candidate strengthens an existing relation
    (recommends over requires, enhances over recommends)

Contradiction matrix (row = candidate, column = existing):

             requires  recommends  conflicts  enhances  protects
  requires      O          -          C          -         -
  recommends    E          O          C          -         -
  conflicts     C          C          O          C         C
  enhances      -          E          C          O         -
  protects      -          -          C          -         O

Pairs marked '-' produce no record. The detector is pure and never raises
for unknown relationship types; they simply match nothing but themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import BaseModel

from infrakb.knowledge.types import ComponentRelationship

logger = logging.getLogger(__name__)

ConflictType = Literal["contradicts", "overlaps", "extends"]

# (candidate type, existing type)
_EXTENSION_PAIRS = frozenset({
    ("recommends", "requires"),
    ("enhances", "recommends"),
})


class ConflictInfo(BaseModel):
    """One finding against an existing relationship."""

    existing_knowledge_id: str
    conflict_type: ConflictType
    description: str
    description_ko: str
    existing_confidence: float


def are_contradictory(type_a: str, type_b: str) -> bool:
    """Return True if exactly one of the two relationship types is 'conflicts'."""
    return type_a != type_b and "conflicts" in (type_a, type_b)


def is_extension(new_type: str, existing_type: str) -> bool:
    """Return True if *new_type* extends *existing_type*. Order matters."""
    return (new_type, existing_type) in _EXTENSION_PAIRS


def _candidate_fields(candidate: Any) -> tuple[str, str, str]:
    if isinstance(candidate, Mapping):
        return candidate["source"], candidate["target"], candidate["relationship_type"]
    return candidate.source, candidate.target, candidate.relationship_type


def detect_relationship_conflicts(
    candidate: ComponentRelationship | Mapping[str, Any],
    existing: Iterable[ComponentRelationship] | None = None,
) -> list[ConflictInfo]:
    """Classify *candidate* against each existing relationship on the same slot.

    Args:
        candidate: The relationship being submitted. A ComponentRelationship or
                   any mapping/object with source, target and relationship_type.
        existing:  Relationships to compare against. Defaults to the default
                   catalogue's relationships.

    Returns:
        One ConflictInfo per matching existing relationship, in the order of
        *existing*. Empty when nothing shares the slot.
    """
    if existing is None:
        from infrakb.knowledge.seed import default_catalogue  # lazy import: seed builds the catalogue

        existing = default_catalogue().relationships

    source, target, new_type = _candidate_fields(candidate)
    conflicts: list[ConflictInfo] = []

    for rel in existing:
        same_slot = (rel.source == source and rel.target == target) or (
            rel.source == target and rel.target == source
        )
        if not same_slot:
            continue

        existing_type = rel.relationship_type
        between = f"between {rel.source} and {rel.target} ({rel.id})"

        if new_type == existing_type:
            conflicts.append(ConflictInfo(
                existing_knowledge_id=rel.id,
                conflict_type="overlaps",
                description=(
                    f"A {existing_type} relationship between {rel.source} and {rel.target} "
                    f"already exists ({rel.id})"
                ),
                description_ko=f"{rel.source}와 {rel.target} 간의 {existing_type} 관계가 이미 존재합니다 ({rel.id})",
                existing_confidence=rel.trust.confidence,
            ))
        elif are_contradictory(new_type, existing_type):
            conflicts.append(ConflictInfo(
                existing_knowledge_id=rel.id,
                conflict_type="contradicts",
                description=f"New '{new_type}' contradicts existing '{existing_type}' relationship {between}",
                description_ko=(
                    f"새로운 '{new_type}' 관계가 {rel.source}와 {rel.target} 간의 "
                    f"기존 '{existing_type}' 관계와 모순됩니다 ({rel.id})"
                ),
                existing_confidence=rel.trust.confidence,
            ))
        elif is_extension(new_type, existing_type):
            conflicts.append(ConflictInfo(
                existing_knowledge_id=rel.id,
                conflict_type="extends",
                description=f"New '{new_type}' extends existing '{existing_type}' relationship {between}",
                description_ko=(
                    f"새로운 '{new_type}' 관계가 {rel.source}와 {rel.target} 간의 "
                    f"기존 '{existing_type}' 관계를 확장합니다 ({rel.id})"
                ),
                existing_confidence=rel.trust.confidence,
            ))

    if conflicts:
        logger.debug(
            "Conflict detector: %s-%s (%s) matched %d existing relationship(s)",
            source, target, new_type, len(conflicts),
        )
    return conflicts
