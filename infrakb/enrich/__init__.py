"""Diagram enrichment: anti-pattern detection and context lookup.

Public API:
- detection.DetectionRegistry : anti-pattern ID -> detection predicate
- detection.safe_detect       : run one predicate, isolating failures
- context.enrich_context      : relationships, suggestions, violations and risks for a diagram
"""
