"""Contribution lifecycle models.

A UserContribution wraps submitted knowledge data together with the
contributor, their cited sources and a ValidationState that accumulates the
auto-check result, conflict findings, the admin review and community votes.

Status transitions:
    pending   -> approved | rejected | pending   (admin review)
    approved  -> in_review                       (downvote threshold reached)
    in_review -> any                             (admin review only)

Contributions are never deleted. ``data`` holds a typed knowledge entry when
the submission parses as one, otherwise the raw mapping as submitted.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from infrakb.conflict.detector import ConflictInfo
from infrakb.knowledge.types import KnowledgeType
from infrakb.trust.scorer import calculate_reputation


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class ContributionStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserSource(BaseModel):
    """Reference supplied by the contributor alongside the data."""

    description: str
    url: str | None = None
    is_firsthand: bool = False


class Contributor(BaseModel):
    """Contributor profile. Reputation is always derived from the counters."""

    id: str
    total_contributions: int = Field(default=0, ge=0)
    approved_count: int = Field(default=0, ge=0)
    rejected_count: int = Field(default=0, ge=0)
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)

    @property
    def reputation(self) -> int:
        return calculate_reputation(self)


class AdminReview(BaseModel):
    reviewer_id: str
    decision: Literal["approved", "rejected", "needs_revision"]
    comment: str = ""
    reviewed_at: datetime.datetime = Field(default_factory=_utcnow)


class CommunityVotes(BaseModel):
    up: int = 0
    down: int = 0
    voters: list[str] = Field(default_factory=list)


class ValidationState(BaseModel):
    auto_check_passed: bool
    auto_check_errors: list[str] = Field(default_factory=list)
    conflicts: list[ConflictInfo] = Field(default_factory=list)
    admin_review: AdminReview | None = None
    community_votes: CommunityVotes = Field(default_factory=CommunityVotes)
    initial_confidence: float = Field(ge=0.0, le=1.0)
    # Confidence at approval time; vote adjustments are applied on top of it
    approved_confidence: float | None = None


class UserContribution(BaseModel):
    id: str
    knowledge_type: KnowledgeType
    status: ContributionStatus
    data: Any
    user_sources: list[UserSource] = Field(default_factory=list)
    # Snapshot as of submission; the store keeps the live counters
    contributor: Contributor
    validation: ValidationState
    confidence: float = Field(ge=0.0, le=1.0)
    created_at: datetime.datetime = Field(default_factory=_utcnow)
    updated_at: datetime.datetime = Field(default_factory=_utcnow)

    def touch(self) -> None:
        self.updated_at = _utcnow()
