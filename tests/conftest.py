"""Pytest fixtures shared by the InfraKB test suite.

Provides:
- Builders for trust metadata and knowledge entries
- A small hand-built catalogue covering every entry variant
- A search engine and a contribution store over that catalogue
"""

import datetime

import pytest

from infrakb.contributions.models import Contributor, UserSource
from infrakb.contributions.store import ContributionStore
from infrakb.knowledge.catalogue import Catalogue
from infrakb.knowledge.infra import InfraSpec, has_node_type, is_directly_connected
from infrakb.knowledge.types import (
    AntiPattern,
    ArchitecturePattern,
    ComponentRelationship,
    FailureScenario,
    KnowledgeSource,
    LatencyRange,
    PerformanceProfile,
    QuickTip,
    RequiredComponent,
    SourceType,
    ThroughputRange,
    TrustMetadata,
)
from infrakb.search.engine import SearchEngine
from infrakb.trust.scorer import AutoApprovalBands

REVIEWED = datetime.date(2026, 2, 9)


def make_source(source_type=SourceType.NIST, url="https://csrc.nist.gov/pubs/sp/800/41/r1/final", title="NIST SP 800-41"):
    return KnowledgeSource(type=source_type, title=title, url=url, accessed_date=REVIEWED)


def make_trust(confidence=0.9, source_type=SourceType.NIST, **kwargs):
    return TrustMetadata(
        confidence=confidence,
        sources=[make_source(source_type)],
        last_reviewed_at=kwargs.pop("last_reviewed_at", REVIEWED),
        **kwargs,
    )


def make_relationship(
    entry_id,
    source,
    target,
    relationship_type="requires",
    confidence=0.9,
    tags=None,
    direction="downstream",
    reason=None,
):
    return ComponentRelationship(
        id=entry_id,
        source=source,
        target=target,
        relationship_type=relationship_type,
        strength="strong",
        direction=direction,
        reason=reason or f"{source} {relationship_type} {target}",
        reason_ko=f"{source}와 {target}의 관계",
        tags=tags or ["test"],
        trust=make_trust(confidence),
    )


def make_tip(entry_id="TIP-USER-001", component="cache", **overrides):
    fields = dict(
        id=entry_id,
        component=component,
        category="gotcha",
        tip_ko="캐시 TTL에 지터를 추가하세요",
        tags=["cache", "performance"],
        trust=make_trust(0.3, SourceType.USER_UNVERIFIED),
    )
    fields.update(overrides)
    return QuickTip(**fields)


def tip_payload(**overrides):
    """Raw mapping form of a valid tip, as a client would submit it."""
    payload = {
        "id": "TIP-USER-002",
        "type": "tip",
        "component": "cache",
        "category": "operations",
        "tip_ko": "캐시 적중률을 모니터링하세요",
        "tags": ["cache"],
        "trust": {
            "confidence": 0.3,
            "sources": [{"type": "user_unverified", "title": "Ops experience", "accessed_date": "2026-02-09"}],
            "last_reviewed_at": "2026-02-09",
        },
    }
    payload.update(overrides)
    return payload


def _db_exposed(spec: InfraSpec) -> bool:
    return has_node_type(spec, "db-server") and is_directly_connected(spec, "db-server", "internet")


def build_entries():
    return [
        make_relationship(
            "REL-T-001", "firewall", "web-server", "protects",
            confidence=0.95, tags=["security", "firewall"], direction="upstream",
            reason="Firewall filters inbound traffic to web servers",
        ),
        make_relationship(
            "REL-T-002", "web-server", "dns", "requires",
            confidence=0.9, tags=["network", "dns"], direction="upstream",
            reason="Web services need name resolution",
        ),
        make_relationship(
            "REL-T-003", "db-server", "internet", "conflicts",
            confidence=0.95, tags=["security", "database"], direction="bidirectional",
            reason="Databases must not be exposed to the internet",
        ),
        make_relationship(
            "REL-T-004", "web-server", "cdn", "recommends",
            confidence=0.7, tags=["performance", "web"], direction="upstream",
            reason="CDN offloads static content",
        ),
        ArchitecturePattern(
            id="PAT-T-001",
            name="3-Tier Web Architecture",
            name_ko="3티어 웹 아키텍처",
            description="Presentation, application and data layers",
            description_ko="프레젠테이션, 애플리케이션, 데이터 계층 분리",
            required_components=[
                RequiredComponent(type="web-server"),
                RequiredComponent(type="app-server"),
                RequiredComponent(type="db-server"),
            ],
            scalability="medium",
            complexity=2,
            tags=["architecture", "web"],
            trust=make_trust(0.85, SourceType.VENDOR),
        ),
        AntiPattern(
            id="AP-T-001",
            name="DB Direct Internet Exposure",
            name_ko="데이터베이스 인터넷 직접 노출",
            severity="critical",
            detection=_db_exposed,
            detection_description_ko="db-server가 internet과 직접 연결되어 있는지 검사",
            problem_ko="데이터베이스가 인터넷에 직접 노출됩니다",
            impact_ko="데이터 유출",
            solution_ko="방화벽 뒤로 이동하세요",
            tags=["security", "database"],
            trust=make_trust(0.95),
        ),
        FailureScenario(
            id="FAIL-T-001",
            component="firewall",
            title_ko="방화벽 상태 테이블 고갈",
            scenario_ko="동시 연결 폭주로 방화벽 세션 테이블이 가득 찹니다",
            impact="service-down",
            likelihood="medium",
            affected_components=["web-server"],
            prevention_ko=["세션 테이블 모니터링", "DDoS 방어 배치"],
            mitigation_ko=["긴급 차단 정책 적용", "HA 페일오버"],
            estimated_mttr="15분~1시간",
            tags=["firewall", "availability"],
            trust=make_trust(0.95),
        ),
        FailureScenario(
            id="FAIL-T-002",
            component="web-server",
            title_ko="웹 서버 성능 저하",
            scenario_ko="스레드 풀 고갈로 응답 지연이 증가합니다",
            impact="degraded",
            likelihood="high",
            prevention_ko=["스레드 풀 크기 조정", "자동 확장"],
            mitigation_ko=["인스턴스 추가", "트래픽 제한"],
            estimated_mttr="30분",
            tags=["web", "availability"],
            trust=make_trust(0.8, SourceType.VENDOR),
        ),
        make_tip("TIP-T-001", trust=make_trust(0.7, SourceType.VENDOR)),
        PerformanceProfile(
            id="PERF-T-001",
            component="firewall",
            name_ko="방화벽 성능",
            latency_range=LatencyRange(min=0.1, max=5),
            throughput_range=ThroughputRange(typical="1~10 Gbps", max="40 Gbps"),
            scaling_strategy="vertical",
            bottleneck_indicators=["Connection table exhaustion"],
            bottleneck_indicators_ko=["연결 테이블 소진"],
            tags=["firewall", "performance"],
            trust=make_trust(0.85),
        ),
    ]


@pytest.fixture
def entries():
    return build_entries()


@pytest.fixture
def catalogue(entries):
    return Catalogue(entries)


@pytest.fixture
def engine(catalogue):
    return SearchEngine.from_catalogue(catalogue)


@pytest.fixture
def store(catalogue):
    return ContributionStore(
        existing_relationships=catalogue.relationships,
        rereview_threshold=3,
        auto_approval_bands=AutoApprovalBands(),
    )


@pytest.fixture
def trusted_contributor():
    """Reputation 30: approved_count 3."""
    return Contributor(id="alice", approved_count=3, total_contributions=3)


@pytest.fixture
def new_contributor():
    """Reputation 10: approved_count 1."""
    return Contributor(id="bob", approved_count=1, total_contributions=1)


@pytest.fixture
def user_sources():
    return [UserSource(description="Production incident postmortem", url="https://example.com/pm", is_firsthand=True)]
