"""Trust and confidence scoring for user contributions.

Every function here is pure: the inputs fully determine the output and nothing
is read from Settings at compute time. Thresholds are keyword parameters with
defaults; the contribution store passes configured values at the call site.

Score ladder for a user contribution:
    0.05 - 0.5   submitted (initial confidence, capped at 0.1 when conflicted)
    0.5  - 0.65  approved by an admin (best cited source decides the bonus)
    up to 0.8    after community votes (net upvotes above 5)

Reputation bands for auto-approval:
    0-20    none
    21-50   tip                              @ 0.35
    51-80   tip, relationship, failure       @ 0.45
    81-100  every knowledge type             @ 0.55  (trusted contributor)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from infrakb.knowledge.types import BASE_CONFIDENCE, SourceType

# Bonus on top of the approved base, per cited source kind
SOURCE_QUALITY_BONUS: dict[str, float] = {
    SourceType.RFC.value: 0.15,
    SourceType.NIST.value: 0.15,
    SourceType.CIS.value: 0.13,
    SourceType.OWASP.value: 0.12,
    SourceType.VENDOR.value: 0.10,
    SourceType.ACADEMIC.value: 0.10,
    SourceType.INDUSTRY.value: 0.08,
    SourceType.USER_VERIFIED.value: 0.05,
    SourceType.USER_UNVERIFIED.value: 0.0,
}

ALL_KNOWLEDGE_TYPES: tuple[str, ...] = ("tip", "relationship", "failure", "pattern", "antipattern", "performance")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReputationCounters:
    """Raw counters reputation is derived from."""

    approved_count: int = 0
    rejected_count: int = 0
    upvotes: int = 0
    downvotes: int = 0


@dataclass(frozen=True)
class AutoApprovalBands:
    """Lower reputation edges of the three auto-approval bands."""

    tip_min: int = 21
    standard_min: int = 51
    trusted_min: int = 81


@dataclass(frozen=True)
class AutoApprovalLevel:
    can_auto_approve: bool
    allowed_types: tuple[str, ...] = field(default_factory=tuple)
    auto_confidence: float = 0.0

    def allows(self, knowledge_type: str) -> bool:
        return self.can_auto_approve and knowledge_type in self.allowed_types


# ---------------------------------------------------------------------------
# Scoring functions
# ---------------------------------------------------------------------------


def calculate_reputation(counters: ReputationCounters) -> int:
    """Compute a contributor's reputation in [0, 100].

    Parameters
    ----------
    counters : ReputationCounters
        Or any object exposing approved_count, rejected_count, upvotes and
        downvotes (a Contributor works).

    Returns
    -------
    int
        ``approved*10 - rejected*5 + upvotes - downvotes*2``, clamped.
    """
    raw = (
        counters.approved_count * 10
        - counters.rejected_count * 5
        + counters.upvotes
        - counters.downvotes * 2
    )
    return int(_clamp(raw, 0, 100))


def calculate_initial_confidence(
    reputation: float,
    has_source_urls: bool,
    is_firsthand: bool,
    has_conflicts: bool,
) -> float:
    """Compute the starting confidence of a fresh contribution.

    Parameters
    ----------
    reputation : float
        Contributor reputation (0-100). Contributes reputation/1000, at most 0.1.
    has_source_urls : bool
        At least one user-supplied source carries a URL (+0.05).
    is_firsthand : bool
        Contributor marked the knowledge as firsthand experience (+0.02).
    has_conflicts : bool
        The contribution contradicts or duplicates existing knowledge; caps
        the result at 0.1.

    Returns
    -------
    float
        Confidence in [0.05, 0.5]. A user contribution never starts above 0.5.
    """
    confidence = BASE_CONFIDENCE[SourceType.USER_UNVERIFIED]
    confidence += min(reputation / 1000, 0.1)
    if has_source_urls:
        confidence += 0.05
    if is_firsthand:
        confidence += 0.02

    if has_conflicts:
        confidence = min(confidence, 0.1)

    return _clamp(confidence, 0.05, 0.5)


def calculate_approved_confidence(source_types: Iterable[SourceType | str]) -> float:
    """Compute confidence after admin approval.

    Base 0.5 plus the single best source bonus among *source_types*
    (bonuses are not summed). Unknown kinds contribute nothing. Result is
    clamped to [0.5, 0.65].
    """
    best = 0.0
    for source_type in source_types:
        key = source_type.value if isinstance(source_type, SourceType) else str(source_type)
        best = max(best, SOURCE_QUALITY_BONUS.get(key, 0.0))
    return _clamp(0.5 + best, 0.5, 0.65)


def apply_vote_adjustment(confidence: float, upvotes: int, downvotes: int) -> float:
    """Raise *confidence* for strong community approval.

    Net votes of 5 or fewer leave confidence unchanged; downvotes are handled
    by the re-review trigger, not here. Each net upvote above 5 adds 0.01, at
    most 0.15 in total, with an absolute ceiling of 0.8.
    """
    net = upvotes - downvotes
    if net <= 5:
        return confidence
    bonus = min((net - 5) * 0.01, 0.15)
    return min(confidence + bonus, 0.8)


def get_auto_approval_level(
    reputation: float,
    bands: AutoApprovalBands | None = None,
) -> AutoApprovalLevel:
    """Return the auto-approval privileges earned at *reputation*."""
    bands = bands or AutoApprovalBands()

    if reputation < bands.tip_min:
        return AutoApprovalLevel(can_auto_approve=False)
    if reputation < bands.standard_min:
        return AutoApprovalLevel(True, ("tip",), 0.35)
    if reputation < bands.trusted_min:
        return AutoApprovalLevel(True, ("tip", "relationship", "failure"), 0.45)
    return AutoApprovalLevel(True, ALL_KNOWLEDGE_TYPES, 0.55)
