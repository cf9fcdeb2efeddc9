"""In-memory contribution store: submit, review and vote.

The store is the only stateful component in InfraKB. One re-entrant lock
guards every read-modify-write, so a vote's increment and the re-review check
that follows it are atomic with respect to concurrent votes and reviews.

Expected bad input is reported, never raised:
  - structural problems land in validation.auto_check_errors
  - review() on an unknown ID returns None
  - vote() on an unknown ID or from a repeat voter returns False

Contributor counters live in a store-owned registry keyed by contributor ID,
seeded from the profile passed with a contributor's first submission. Each
contribution keeps a snapshot of its contributor as of submission, so the
reputation behind an auto-approval decision stays auditable.

Thresholds (re-review downvote count, auto-approval band edges) are read from
Settings when the store is constructed unless passed explicitly.
"""

from __future__ import annotations

import datetime
import logging
import secrets
import threading
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from infrakb.conflict.detector import ConflictInfo, detect_relationship_conflicts
from infrakb.contributions.models import (
    AdminReview,
    CommunityVotes,
    ContributionStatus,
    Contributor,
    UserContribution,
    UserSource,
    ValidationState,
)
from infrakb.contributions.validation import as_mapping, auto_validate, coerce_entry
from infrakb.knowledge.types import ComponentRelationship, KnowledgeEntryBase, KnowledgeType
from infrakb.trust.scorer import (
    AutoApprovalBands,
    apply_vote_adjustment,
    calculate_approved_confidence,
    calculate_initial_confidence,
    get_auto_approval_level,
)

logger = logging.getLogger(__name__)

_ID_PREFIX = "contrib-"


def _cited_source_types(data: Any) -> list[str]:
    """Source kinds cited in the data's own trust block."""
    if isinstance(data, KnowledgeEntryBase):
        return [t.value for t in data.trust.source_types()]
    mapping = as_mapping(data) or {}
    trust = mapping.get("trust") or {}
    return [str(s.get("type")) for s in trust.get("sources") or [] if isinstance(s, Mapping)]


class ContributionStore:
    """Holds every contribution for the lifetime of the process."""

    def __init__(
        self,
        existing_relationships: Iterable[ComponentRelationship] | None = None,
        rereview_threshold: int | None = None,
        auto_approval_bands: AutoApprovalBands | None = None,
    ) -> None:
        from infrakb.config import settings

        self._contributions: dict[str, UserContribution] = {}
        self._contributors: dict[str, Contributor] = {}
        # contributions whose approval has already been credited to the contributor
        self._credited: set[str] = set()
        self._lock = threading.RLock()
        self._existing_relationships = list(existing_relationships) if existing_relationships is not None else None
        self._rereview_threshold = (
            rereview_threshold if rereview_threshold is not None else settings.rereview_downvote_threshold
        )
        self._bands = auto_approval_bands or AutoApprovalBands(
            tip_min=settings.auto_approve_tip_reputation,
            standard_min=settings.auto_approve_standard_reputation,
            trusted_min=settings.auto_approve_trusted_reputation,
        )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def _new_id(self) -> str:
        while True:
            candidate = _ID_PREFIX + secrets.token_urlsafe(6)
            if candidate not in self._contributions:
                return candidate

    def _detect_conflicts(self, knowledge_type: KnowledgeType, data: Any, passed: bool) -> list[ConflictInfo]:
        if not passed or knowledge_type != KnowledgeType.RELATIONSHIP or self._existing_relationships is None:
            return []
        mapping = as_mapping(data) or {}
        if not all(isinstance(mapping.get(k), str) for k in ("source", "target", "relationship_type")):
            return []
        return detect_relationship_conflicts(mapping, self._existing_relationships)

    def submit(
        self,
        knowledge_type: KnowledgeType | str,
        data: Any,
        user_sources: Iterable[UserSource],
        contributor: Contributor,
    ) -> UserContribution:
        """Record a new contribution and decide its initial status.

        Args:
            knowledge_type: Variant the data is submitted as.
            data:           A typed knowledge entry or a raw mapping.
            user_sources:   References the contributor supplied.
            contributor:    Submitting contributor. Its counters seed the
                            store's record the first time its ID is seen;
                            afterwards the store's own counters are used.

        Returns:
            The stored contribution. A tip that passes the auto-check from a
            contributor in a tip-allowing reputation band starts approved;
            everything else starts pending. The stored entry's
            trust.confidence is set to the contribution's confidence.
        """
        knowledge_type = KnowledgeType(knowledge_type)
        user_sources = list(user_sources)
        passed, errors = auto_validate(knowledge_type, data)
        conflicts = self._detect_conflicts(knowledge_type, data, passed)
        has_conflicts = any(c.conflict_type in ("contradicts", "overlaps") for c in conflicts)
        entry = coerce_entry(data)

        with self._lock:
            live = self._contributors.setdefault(contributor.id, contributor.model_copy())
            snapshot = live.model_copy()
            reputation = snapshot.reputation
            initial = calculate_initial_confidence(
                reputation=reputation,
                has_source_urls=any(s.url for s in user_sources),
                is_firsthand=any(s.is_firsthand for s in user_sources),
                has_conflicts=has_conflicts,
            )

            status = ContributionStatus.PENDING
            confidence = initial
            approved_confidence = None
            level = get_auto_approval_level(reputation, self._bands)
            if knowledge_type == KnowledgeType.TIP and passed and level.allows("tip"):
                status = ContributionStatus.APPROVED
                confidence = approved_confidence = level.auto_confidence

            if isinstance(entry, KnowledgeEntryBase):
                entry.trust.confidence = confidence
                entry.trust.contributed_by = contributor.id
                entry.trust.contributed_at = datetime.datetime.now(datetime.timezone.utc)
                entry.trust.record("created", contributor.id)

            contribution = UserContribution(
                id=self._new_id(),
                knowledge_type=knowledge_type,
                status=status,
                data=entry,
                user_sources=user_sources,
                contributor=snapshot,
                validation=ValidationState(
                    auto_check_passed=passed,
                    auto_check_errors=errors,
                    conflicts=conflicts,
                    community_votes=CommunityVotes(),
                    initial_confidence=initial,
                    approved_confidence=approved_confidence,
                ),
                confidence=confidence,
            )
            self._contributions[contribution.id] = contribution
            live.total_contributions += 1

        logger.info(
            "Contribution %s submitted by %s (reputation %d): type=%s status=%s confidence=%.2f errors=%d conflicts=%d",
            contribution.id, contributor.id, reputation, knowledge_type.value, status.value,
            confidence, len(errors), len(conflicts),
        )
        return contribution

    def attach_conflicts(self, contribution_id: str, conflicts: Iterable[ConflictInfo]) -> UserContribution | None:
        """Store conflict findings computed outside submit(). None if the ID is unknown."""
        with self._lock:
            contribution = self._contributions.get(contribution_id)
            if contribution is None:
                return None
            contribution.validation.conflicts = list(conflicts)
            contribution.touch()
            return contribution

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, contribution_id: str) -> UserContribution | None:
        with self._lock:
            return self._contributions.get(contribution_id)

    def get_all(
        self,
        status: ContributionStatus | str | None = None,
        knowledge_type: KnowledgeType | str | None = None,
        contributor_id: str | None = None,
    ) -> list[UserContribution]:
        """All contributions in submission order, optionally filtered."""
        with self._lock:
            items = list(self._contributions.values())
        if status is not None:
            items = [c for c in items if c.status == ContributionStatus(status)]
        if knowledge_type is not None:
            items = [c for c in items if c.knowledge_type == KnowledgeType(knowledge_type)]
        if contributor_id is not None:
            items = [c for c in items if c.contributor.id == contributor_id]
        return items

    def get_pending_queue(self) -> list[UserContribution]:
        return self.get_all(status=ContributionStatus.PENDING)

    def get_contributor(self, contributor_id: str) -> Contributor | None:
        """Copy of the store's current counters for a contributor. None if never seen."""
        with self._lock:
            live = self._contributors.get(contributor_id)
            return live.model_copy() if live is not None else None

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._contributions)

    def __len__(self) -> int:
        return self.size

    # ------------------------------------------------------------------
    # Review & votes
    # ------------------------------------------------------------------

    def review(self, contribution_id: str, review: AdminReview) -> UserContribution | None:
        """Apply an admin decision. None if the ID is unknown.

        approved -> approved (confidence from the best cited source kind;
                    only the first approval is credited to the contributor)
        rejected -> rejected
        needs_revision -> pending
        """
        with self._lock:
            contribution = self._contributions.get(contribution_id)
            if contribution is None:
                return None

            contribution.validation.admin_review = review
            entry = contribution.data
            live = self._contributors[contribution.contributor.id]

            if review.decision == "approved":
                approved = calculate_approved_confidence(_cited_source_types(entry))
                contribution.status = ContributionStatus.APPROVED
                contribution.validation.approved_confidence = approved
                contribution.confidence = approved
                if contribution_id not in self._credited:
                    self._credited.add(contribution_id)
                    live.approved_count += 1
                if isinstance(entry, KnowledgeEntryBase):
                    entry.trust.confidence = approved
                    entry.trust.verified_by = review.reviewer_id
                    entry.trust.verified_at = review.reviewed_at
            elif review.decision == "rejected":
                contribution.status = ContributionStatus.REJECTED
                live.rejected_count += 1
            else:
                contribution.status = ContributionStatus.PENDING

            if isinstance(entry, KnowledgeEntryBase):
                entry.trust.record("reviewed", review.reviewer_id, review.comment or review.decision)
            contribution.touch()

        logger.info(
            "Contribution %s reviewed by %s: %s -> %s",
            contribution_id, review.reviewer_id, review.decision, contribution.status.value,
        )
        return contribution

    def vote(self, contribution_id: str, voter_id: str, direction: Literal["up", "down"]) -> bool:
        """Record one community vote.

        False, with nothing recorded, if the ID is unknown, the voter already
        voted or *direction* is neither "up" nor "down".

        Reaching the downvote threshold while approved moves the contribution
        to in_review. Otherwise an approved contribution's confidence is
        recomputed from its approval-time confidence and the tally.
        """
        if direction not in ("up", "down"):
            logger.debug("Ignoring vote on %s with unknown direction %r", contribution_id, direction)
            return False

        with self._lock:
            contribution = self._contributions.get(contribution_id)
            if contribution is None:
                return False

            votes = contribution.validation.community_votes
            if voter_id in votes.voters:
                return False

            live = self._contributors[contribution.contributor.id]
            if direction == "up":
                votes.up += 1
                live.upvotes += 1
            else:
                votes.down += 1
                live.downvotes += 1
            votes.voters.append(voter_id)

            if contribution.status == ContributionStatus.APPROVED:
                if votes.down >= self._rereview_threshold:
                    contribution.status = ContributionStatus.IN_REVIEW
                    logger.warning(
                        "Contribution %s sent back to review after %d downvote(s)",
                        contribution_id, votes.down,
                    )
                else:
                    base = contribution.validation.approved_confidence
                    if base is None:
                        base = contribution.confidence
                    contribution.confidence = apply_vote_adjustment(base, votes.up, votes.down)

            entry = contribution.data
            if isinstance(entry, KnowledgeEntryBase):
                entry.trust.confidence = contribution.confidence
                entry.trust.upvotes = votes.up
                entry.trust.downvotes = votes.down
                entry.trust.record("voted", voter_id, direction)
            contribution.touch()
            return True
