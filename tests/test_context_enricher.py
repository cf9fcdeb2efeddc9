"""Tests for diagram enrichment and anti-pattern detection."""

import logging

from infrakb.enrich.context import enrich_context
from infrakb.enrich.detection import DetectionRegistry, safe_detect
from infrakb.knowledge.infra import Connection, InfraNode, InfraSpec

from conftest import make_relationship


def _spec(*types, connections=()):
    nodes = [InfraNode(id=f"n{i}", type=t) for i, t in enumerate(types)]
    return InfraSpec(
        name="test",
        nodes=nodes,
        connections=[Connection(source=s, target=t) for s, t in connections],
    )


def _boom(spec):
    raise RuntimeError("broken rule")


def _enrich(spec, catalogue, **kwargs):
    return enrich_context(
        spec,
        catalogue.relationships,
        anti_patterns=catalogue.anti_patterns,
        failures=catalogue.failures,
        tips=catalogue.tips,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# enrich_context
# ---------------------------------------------------------------------------


def test_exposed_database_diagram(catalogue):
    spec = _spec("firewall", "web-server", "db-server", "internet", connections=[("n2", "n3")])

    enriched = _enrich(spec, catalogue)

    assert [r.id for r in enriched.relationships] == ["REL-T-001", "REL-T-003"]
    assert [s.id for s in enriched.suggestions] == ["REL-T-002", "REL-T-004"]
    assert [v.id for v in enriched.violations] == ["AP-T-001"]
    assert [f.id for f in enriched.risks] == ["FAIL-T-001", "FAIL-T-002"]
    assert enriched.tips == []
    assert enriched.has_violations


def test_conflict_without_both_ends_not_reported(catalogue):
    enriched = _enrich(_spec("db-server"), catalogue)
    assert all(r.relationship_type != "conflicts" for r in enriched.relationships)


def test_min_confidence_filters_relationships(catalogue):
    enriched = _enrich(_spec("web-server"), catalogue, min_confidence=0.8)
    assert [s.id for s in enriched.suggestions] == ["REL-T-002"]


def test_suggestions_requires_first():
    rels = [
        make_relationship("REL-S-1", "web-server", "cdn", "recommends", confidence=0.95),
        make_relationship("REL-S-2", "web-server", "dns", "requires", confidence=0.6),
        make_relationship("REL-S-3", "web-server", "cache", "recommends", confidence=0.7),
    ]
    enriched = enrich_context(_spec("web-server"), rels)
    assert [s.id for s in enriched.suggestions] == ["REL-S-2", "REL-S-1", "REL-S-3"]


def test_bidirectional_relationship_suggested_from_either_end():
    rel = make_relationship("REL-B-1", "cache", "app-server", "recommends", direction="bidirectional")

    enriched = enrich_context(_spec("app-server"), [rel])

    assert [s.id for s in enriched.suggestions] == ["REL-B-1"]
    assert not enriched.has_violations


def test_tips_for_present_components(catalogue):
    enriched = _enrich(_spec("cache", "firewall"), catalogue)
    assert [t.id for t in enriched.tips] == ["TIP-T-001"]


def test_clean_diagram_has_no_violations(catalogue):
    enriched = _enrich(_spec("router", "switch-l2"), catalogue)
    assert not enriched.has_violations
    assert enriched.relationships == enriched.suggestions == enriched.risks == []


def test_raising_detector_skipped(catalogue, caplog):
    broken = catalogue.get("AP-T-001").model_copy(update={"id": "AP-BOOM", "detection": _boom})
    spec = _spec("db-server", "internet", connections=[("n0", "n1")])

    with caplog.at_level(logging.WARNING, logger="infrakb.enrich.detection"):
        enriched = enrich_context(spec, [], anti_patterns=[broken, *catalogue.anti_patterns])

    assert [v.id for v in enriched.violations] == ["AP-T-001"]
    assert "AP-BOOM" in caplog.text


# ---------------------------------------------------------------------------
# Detection registry
# ---------------------------------------------------------------------------


def test_safe_detect():
    spec = _spec("vm")
    assert safe_detect("R", lambda s: True, spec) is True
    assert safe_detect("R", _boom, spec) is None


def test_registry_lookup(catalogue):
    registry = DetectionRegistry(catalogue.anti_patterns)

    assert len(registry) == 1
    assert registry.ids() == ["AP-T-001"]
    assert registry.has("AP-T-001")
    assert not registry.has("AP-NOPE")
    assert callable(registry.get("AP-T-001"))
    assert registry.get("AP-NOPE") is None


def test_registry_run(catalogue):
    registry = DetectionRegistry(catalogue.anti_patterns)
    exposed = _spec("db-server", "internet", connections=[("n1", "n0")])

    assert registry.run("AP-T-001", exposed) is True
    assert registry.run("AP-T-001", _spec("db-server", "internet")) is False
    assert registry.run("AP-NOPE", exposed) is False


def test_seeded_rules():
    registry = DetectionRegistry.default()

    assert registry.run("AP-SEC-001", _spec("db-server", "internet", connections=[("n0", "n1")])) is True
    assert registry.run("AP-SEC-002", _spec("web-server")) is True
    assert registry.run("AP-SEC-002", _spec("firewall", "web-server")) is False
    assert registry.run("AP-SEC-002", _spec("router")) is False
    assert registry.run("AP-HA-001", _spec("load-balancer", "web-server", "web-server")) is True
    assert registry.run("AP-HA-001", _spec("load-balancer", "load-balancer", "web-server", "web-server")) is False
