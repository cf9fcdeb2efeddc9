"""Unit tests for relationship conflict detection."""

import pytest

from infrakb.conflict.detector import are_contradictory, detect_relationship_conflicts, is_extension
from infrakb.knowledge.seed import default_catalogue
from infrakb.knowledge.types import RELATIONSHIP_TYPES

from conftest import make_relationship


@pytest.mark.parametrize("other", ["requires", "recommends", "enhances", "protects"])
def test_conflicts_contradicts_every_other_type(other):
    assert are_contradictory(other, "conflicts")
    assert are_contradictory("conflicts", other)


@pytest.mark.parametrize("rel_type", RELATIONSHIP_TYPES)
def test_same_type_never_contradictory(rel_type):
    assert not are_contradictory(rel_type, rel_type)


def test_independent_pairs():
    assert not are_contradictory("requires", "recommends")
    assert not are_contradictory("enhances", "protects")


def test_extension_is_directional():
    assert is_extension("recommends", "requires")
    assert is_extension("enhances", "recommends")
    assert not is_extension("requires", "recommends")
    assert not is_extension("recommends", "enhances")
    assert not is_extension("requires", "requires")


def test_overlap_on_same_slot():
    existing = [make_relationship("REL-X-1", "A", "B", "requires", confidence=0.8)]
    found = detect_relationship_conflicts({"source": "A", "target": "B", "relationship_type": "requires"}, existing)

    assert len(found) == 1
    assert found[0].conflict_type == "overlaps"
    assert found[0].existing_knowledge_id == "REL-X-1"
    assert found[0].existing_confidence == 0.8
    assert found[0].description == "A requires relationship between A and B already exists (REL-X-1)"
    assert "REL-X-1" in found[0].description_ko


def test_contradiction_on_same_slot():
    existing = [make_relationship("REL-X-1", "A", "B", "conflicts")]
    found = detect_relationship_conflicts({"source": "A", "target": "B", "relationship_type": "requires"}, existing)

    assert [c.conflict_type for c in found] == ["contradicts"]
    assert "contradicts" in found[0].description


def test_reversed_pair_is_same_slot():
    existing = [make_relationship("REL-X-1", "B", "A", "requires")]
    found = detect_relationship_conflicts({"source": "A", "target": "B", "relationship_type": "requires"}, existing)

    assert len(found) == 1
    assert found[0].conflict_type == "overlaps"


def test_extension_on_same_slot():
    existing = [make_relationship("REL-X-1", "A", "B", "requires")]
    candidate = make_relationship("NEW", "A", "B", "recommends")

    found = detect_relationship_conflicts(candidate, existing)

    assert [c.conflict_type for c in found] == ["extends"]


def test_independent_types_produce_nothing():
    existing = [make_relationship("REL-X-1", "A", "B", "protects")]
    assert detect_relationship_conflicts({"source": "A", "target": "B", "relationship_type": "requires"}, existing) == []


def test_other_slots_ignored_and_order_kept():
    existing = [
        make_relationship("REL-X-1", "A", "C", "requires"),
        make_relationship("REL-X-2", "B", "A", "conflicts"),
        make_relationship("REL-X-3", "A", "B", "requires"),
    ]
    found = detect_relationship_conflicts({"source": "A", "target": "B", "relationship_type": "requires"}, existing)

    assert [c.existing_knowledge_id for c in found] == ["REL-X-2", "REL-X-3"]
    assert [c.conflict_type for c in found] == ["contradicts", "overlaps"]


def test_defaults_to_catalogue_relationships():
    """Without an explicit list the default catalogue is used."""
    found = detect_relationship_conflicts({"source": "internet", "target": "db-server", "relationship_type": "requires"})
    ids = {c.existing_knowledge_id for c in found}
    assert "REL-CNF-001" in ids
    assert all(c.conflict_type == "contradicts" for c in found if c.existing_knowledge_id == "REL-CNF-001")
    assert len(default_catalogue().relationships) > 0
