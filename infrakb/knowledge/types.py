"""Core knowledge types for InfraKB.

Every knowledge entry carries source attribution and trust metadata so that
each fact stays traceable to the documents it came from.

Entry variants form a discriminated union keyed on the ``type`` field
(KnowledgeEntry). Code that needs per-variant behaviour (summaries, index
tokens, component references) dispatches on the concrete class rather than on
optional fields of one catch-all model.

Referential invariants (unique IDs, resolvable component and pattern
references) are checked when a Catalogue is built, not per operation.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Annotated, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from infrakb.knowledge.infra import InfraSpec

# ---------------------------------------------------------------------------
# Source & Trust
# ---------------------------------------------------------------------------


class SourceType(str, Enum):
    """Knowledge source kind. Determines base confidence."""

    RFC = "rfc"  # IETF RFC documents
    NIST = "nist"  # NIST Special Publications
    CIS = "cis"  # CIS Benchmarks / Controls
    OWASP = "owasp"
    VENDOR = "vendor"  # AWS, Azure, GCP official docs
    ACADEMIC = "academic"
    INDUSTRY = "industry"  # SANS, Gartner, MEF, ...
    USER_VERIFIED = "user_verified"  # admin-verified user contribution
    USER_UNVERIFIED = "user_unverified"


BASE_CONFIDENCE: dict[SourceType, float] = {
    SourceType.RFC: 1.0,
    SourceType.NIST: 0.95,
    SourceType.CIS: 0.95,
    SourceType.OWASP: 0.9,
    SourceType.VENDOR: 0.85,
    SourceType.ACADEMIC: 0.8,
    SourceType.INDUSTRY: 0.7,
    SourceType.USER_VERIFIED: 0.55,
    SourceType.USER_UNVERIFIED: 0.3,
}

# Provenance trail keeps only the most recent changes
MAX_MODIFICATION_HISTORY = 10


class KnowledgeSource(BaseModel):
    """Single citation. Immutable once recorded."""

    model_config = ConfigDict(frozen=True)

    type: SourceType
    title: str = Field(min_length=1)
    url: str | None = None
    section: str | None = None
    published_date: str | None = None  # "2009-09" granularity is common
    accessed_date: datetime.date

    @property
    def base_confidence(self) -> float:
        return BASE_CONFIDENCE[self.type]


class ModificationRecord(BaseModel):
    """One entry of the lightweight provenance trail."""

    action: Literal["created", "updated", "reviewed", "voted"]
    by: str
    at: datetime.datetime
    reason: str | None = None


class TrustMetadata(BaseModel):
    """Trust metadata attached to every knowledge entry."""

    model_config = ConfigDict(validate_assignment=True)

    confidence: float = Field(ge=0.0, le=1.0)
    sources: list[KnowledgeSource] = Field(min_length=1)
    last_reviewed_at: datetime.date
    contributed_by: str | None = None
    contributed_at: datetime.datetime | None = None
    verified_by: str | None = None
    verified_at: datetime.datetime | None = None
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    derived_from: list[str] = Field(default_factory=list)
    last_modified_by: str | None = None
    modification_history: list[ModificationRecord] = Field(default_factory=list)

    def record(self, action: str, by: str, reason: str | None = None) -> ModificationRecord:
        """Append a change record, keeping only the newest MAX_MODIFICATION_HISTORY."""
        entry = ModificationRecord(
            action=action,
            by=by,
            at=datetime.datetime.now(datetime.timezone.utc),
            reason=reason,
        )
        self.modification_history = (self.modification_history + [entry])[-MAX_MODIFICATION_HISTORY:]
        self.last_modified_by = by
        return entry

    def source_types(self) -> list[SourceType]:
        return [s.type for s in self.sources]


# ---------------------------------------------------------------------------
# Knowledge entry variants
# ---------------------------------------------------------------------------


class KnowledgeType(str, Enum):
    RELATIONSHIP = "relationship"
    PATTERN = "pattern"
    ANTIPATTERN = "antipattern"
    FAILURE = "failure"
    TIP = "tip"
    PERFORMANCE = "performance"


RelationshipType = Literal["requires", "recommends", "conflicts", "enhances", "protects"]
RELATIONSHIP_TYPES: tuple[str, ...] = ("requires", "recommends", "conflicts", "enhances", "protects")


class KnowledgeEntryBase(BaseModel):
    """Fields shared by every knowledge entry."""

    id: str = Field(min_length=1)
    tags: list[str] = Field(min_length=1)
    trust: TrustMetadata

    @property
    def confidence(self) -> float:
        return self.trust.confidence


class ComponentRelationship(KnowledgeEntryBase):
    """Layer 2: how two component types relate."""

    type: Literal["relationship"] = "relationship"
    source: str
    target: str
    relationship_type: RelationshipType
    strength: Literal["mandatory", "strong", "weak"]
    direction: Literal["upstream", "downstream", "bidirectional"]
    reason: str
    reason_ko: str


class RequiredComponent(BaseModel):
    type: str
    min_count: int = Field(default=1, ge=1)


class OptionalComponent(BaseModel):
    type: str
    benefit: str
    benefit_ko: str


class ArchitecturePattern(KnowledgeEntryBase):
    """Layer 3: reusable architecture pattern."""

    type: Literal["pattern"] = "pattern"
    name: str
    name_ko: str
    description: str
    description_ko: str
    required_components: list[RequiredComponent]
    optional_components: list[OptionalComponent] = Field(default_factory=list)
    scalability: Literal["low", "medium", "high", "auto"]
    complexity: int = Field(ge=1, le=5)
    best_for_ko: list[str] = Field(default_factory=list)
    not_suitable_for_ko: list[str] = Field(default_factory=list)
    evolves_to: list[str] = Field(default_factory=list)
    evolves_from: list[str] = Field(default_factory=list)


class AntiPattern(KnowledgeEntryBase):
    """Layer 3: known-bad design with a detection predicate over an InfraSpec.

    The predicate is runtime-only and is never serialised.
    """

    type: Literal["antipattern"] = "antipattern"
    name: str
    name_ko: str
    severity: Literal["critical", "high", "medium"]
    detection: Callable[[InfraSpec], bool] = Field(exclude=True, repr=False)
    detection_description_ko: str
    problem_ko: str
    impact_ko: str
    solution_ko: str


FailureImpact = Literal["service-down", "degraded", "data-loss", "security-breach"]


class FailureScenario(KnowledgeEntryBase):
    """Layer 4: how a component fails and what it takes down with it."""

    type: Literal["failure"] = "failure"
    component: str
    title_ko: str
    scenario_ko: str
    impact: FailureImpact
    likelihood: Literal["high", "medium", "low"]
    affected_components: list[str] = Field(default_factory=list)
    prevention_ko: list[str] = Field(min_length=2)
    mitigation_ko: list[str] = Field(min_length=2)
    estimated_mttr: str


class QuickTip(KnowledgeEntryBase):
    """Short practical advice; the easiest kind of user contribution."""

    type: Literal["tip"] = "tip"
    component: str
    category: Literal["gotcha", "performance", "security", "cost", "operations"]
    tip_ko: str


class LatencyRange(BaseModel):
    min: float = Field(ge=0)
    max: float = Field(ge=0)
    unit: Literal["ms", "us"] = "ms"


class ThroughputRange(BaseModel):
    typical: str
    max: str


class PerformanceProfile(KnowledgeEntryBase):
    """Layer 4: expected latency/throughput envelope of a component."""

    type: Literal["performance"] = "performance"
    component: str
    name_ko: str
    latency_range: LatencyRange
    throughput_range: ThroughputRange
    scaling_strategy: Literal["horizontal", "vertical", "both"]
    bottleneck_indicators: list[str] = Field(default_factory=list)
    bottleneck_indicators_ko: list[str] = Field(default_factory=list)
    optimization_tips_ko: list[str] = Field(default_factory=list)


KnowledgeEntry = Annotated[
    Union[
        ComponentRelationship,
        ArchitecturePattern,
        AntiPattern,
        FailureScenario,
        QuickTip,
        PerformanceProfile,
    ],
    Field(discriminator="type"),
]

knowledge_entry_adapter: TypeAdapter = TypeAdapter(KnowledgeEntry)


def referenced_components(entry: KnowledgeEntryBase) -> list[str]:
    """Return the component-type identifiers an entry refers to, de-duplicated in order."""
    if isinstance(entry, ComponentRelationship):
        refs = [entry.source, entry.target]
    elif isinstance(entry, ArchitecturePattern):
        refs = [rc.type for rc in entry.required_components]
        refs += [oc.type for oc in entry.optional_components]
    elif isinstance(entry, FailureScenario):
        refs = [entry.component, *entry.affected_components]
    elif isinstance(entry, (QuickTip, PerformanceProfile)):
        refs = [entry.component]
    else:
        # Anti-patterns reference components only through their predicate
        refs = []
    return list(dict.fromkeys(refs))
