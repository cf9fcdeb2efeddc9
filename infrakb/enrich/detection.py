"""Anti-pattern detection registry.

Detection predicates are runtime-only callables and are never serialised with
their entries. The registry resolves a rule ID (the anti-pattern's ID) to its
predicate so stored references can be evaluated later.

Predicates run through safe_detect(): a predicate that raises is logged and
reported as None, and batch callers skip it instead of failing the batch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from infrakb.knowledge.infra import InfraSpec
from infrakb.knowledge.types import AntiPattern

logger = logging.getLogger(__name__)

DetectionFn = Callable[[InfraSpec], bool]


def safe_detect(rule_id: str, detection: DetectionFn, spec: InfraSpec) -> bool | None:
    """Run *detection* against *spec*; None if the predicate raised."""
    try:
        return bool(detection(spec))
    except Exception as exc:
        logger.warning("Detection rule %s failed: %s", rule_id, exc)
        return None


class DetectionRegistry:
    """Maps anti-pattern IDs to their detection predicates."""

    def __init__(self, anti_patterns: Iterable[AntiPattern]) -> None:
        self._rules: dict[str, DetectionFn] = {ap.id: ap.detection for ap in anti_patterns}

    @classmethod
    def default(cls) -> DetectionRegistry:
        from infrakb.knowledge.seed import default_catalogue

        return cls(default_catalogue().anti_patterns)

    def get(self, rule_id: str) -> DetectionFn | None:
        return self._rules.get(rule_id)

    def has(self, rule_id: str) -> bool:
        return rule_id in self._rules

    def ids(self) -> list[str]:
        return list(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def run(self, rule_id: str, spec: InfraSpec) -> bool | None:
        """Evaluate one rule. False for unknown IDs, None if the predicate raised."""
        detection = self._rules.get(rule_id)
        if detection is None:
            return False
        return safe_detect(rule_id, detection, spec)
