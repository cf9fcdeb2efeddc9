"""Default knowledge catalogue shipped with InfraKB.

A compact, verified set of entries covering every knowledge variant. It is the
catalogue the CLI searches and the default set of existing relationships the
conflict detector compares against. Larger feeds are built by the caller and
passed in as a Catalogue.
"""

from __future__ import annotations

import datetime
from functools import lru_cache

from infrakb.knowledge.catalogue import Catalogue
from infrakb.knowledge.infra import COMPUTE_TYPES, InfraSpec, count_nodes_by_type, has_any_node_type, has_node_type, is_directly_connected
from infrakb.knowledge.sources import (
    AWS_WAF_PERF,
    AWS_WAF_REL,
    AWS_WAF_SEC,
    CIS_V8,
    CIS_V8_12,
    NIST_800_41,
    NIST_800_44,
    NIST_800_53,
    NIST_800_63B,
    NIST_800_81,
    NIST_800_94,
    NIST_800_123,
    OWASP_TOP10,
    RFC_1034,
    RFC_7230,
    SANS_FIREWALL,
    with_section,
)
from infrakb.knowledge.types import (
    AntiPattern,
    ArchitecturePattern,
    ComponentRelationship,
    FailureScenario,
    KnowledgeSource,
    LatencyRange,
    OptionalComponent,
    PerformanceProfile,
    QuickTip,
    RequiredComponent,
    ThroughputRange,
    TrustMetadata,
)

REVIEWED = datetime.date(2026, 2, 9)


def _trust(confidence: float, *sources: KnowledgeSource) -> TrustMetadata:
    return TrustMetadata(confidence=confidence, sources=list(sources), last_reviewed_at=REVIEWED)


# ---------------------------------------------------------------------------
# Component relationships
# ---------------------------------------------------------------------------

RELATIONSHIPS: list[ComponentRelationship] = [
    ComponentRelationship(
        id="REL-SEC-001",
        source="waf",
        target="web-server",
        relationship_type="protects",
        strength="strong",
        direction="upstream",
        reason="A WAF in front of public web servers filters injection and cross-site scripting attacks",
        reason_ko="공개 웹 서버 앞단의 WAF는 인젝션 및 크로스 사이트 스크립팅 공격을 차단합니다",
        tags=["security", "web", "owasp"],
        trust=_trust(0.9, OWASP_TOP10),
    ),
    ComponentRelationship(
        id="REL-SEC-002",
        source="firewall",
        target="db-server",
        relationship_type="protects",
        strength="mandatory",
        direction="upstream",
        reason="Database servers must sit behind a firewall that only admits application-tier traffic",
        reason_ko="데이터베이스 서버는 애플리케이션 계층 트래픽만 허용하는 방화벽 뒤에 위치해야 합니다",
        tags=["security", "database", "segmentation"],
        trust=_trust(0.95, with_section(NIST_800_41, "Section 2.1 - Network Segmentation")),
    ),
    ComponentRelationship(
        id="REL-NET-001",
        source="load-balancer",
        target="web-server",
        relationship_type="requires",
        strength="mandatory",
        direction="downstream",
        reason="A load balancer needs at least one healthy backend web server pool",
        reason_ko="로드밸런서는 최소 하나 이상의 정상 웹 서버 풀이 필요합니다",
        tags=["network", "availability"],
        trust=_trust(0.9, AWS_WAF_REL),
    ),
    ComponentRelationship(
        id="REL-NET-002",
        source="web-server",
        target="cdn",
        relationship_type="recommends",
        strength="weak",
        direction="upstream",
        reason="A CDN offloads static content and absorbs traffic spikes for web servers",
        reason_ko="CDN은 정적 콘텐츠를 분산하고 웹 서버의 트래픽 급증을 흡수합니다",
        tags=["performance", "web"],
        trust=_trust(0.8, AWS_WAF_PERF),
    ),
    ComponentRelationship(
        id="REL-NET-003",
        source="web-server",
        target="dns",
        relationship_type="requires",
        strength="mandatory",
        direction="upstream",
        reason="Public web services require authoritative DNS resolution",
        reason_ko="공개 웹 서비스는 권한 있는 DNS 질의 응답이 필요합니다",
        tags=["network", "dns"],
        trust=_trust(1.0, RFC_1034, with_section(NIST_800_81, "Section 3 - DNS Components")),
    ),
    ComponentRelationship(
        id="REL-CMP-001",
        source="app-server",
        target="db-server",
        relationship_type="requires",
        strength="mandatory",
        direction="downstream",
        reason="Stateful application servers require a persistent database tier",
        reason_ko="상태를 가지는 애플리케이션 서버는 영속적인 데이터베이스 계층이 필요합니다",
        tags=["compute", "database", "three-tier"],
        trust=_trust(0.85, AWS_WAF_REL),
    ),
    ComponentRelationship(
        id="REL-CMP-002",
        source="cache",
        target="app-server",
        relationship_type="enhances",
        strength="strong",
        direction="bidirectional",
        reason="An in-memory cache reduces read latency and database load for application servers",
        reason_ko="인메모리 캐시는 애플리케이션 서버의 읽기 지연과 데이터베이스 부하를 줄입니다",
        tags=["performance", "cache"],
        trust=_trust(0.8, AWS_WAF_PERF),
    ),
    ComponentRelationship(
        id="REL-AUTH-001",
        source="sso",
        target="ldap-ad",
        relationship_type="requires",
        strength="mandatory",
        direction="downstream",
        reason="Single sign-on requires a directory service as its identity store",
        reason_ko="SSO는 신원 저장소로 디렉터리 서비스가 필요합니다",
        tags=["auth", "identity"],
        trust=_trust(0.9, NIST_800_63B),
    ),
    ComponentRelationship(
        id="REL-AUTH-002",
        source="mfa",
        target="sso",
        relationship_type="enhances",
        strength="strong",
        direction="bidirectional",
        reason="Multi-factor authentication hardens single sign-on against credential theft",
        reason_ko="다중 인증은 자격 증명 탈취에 대비해 SSO를 강화합니다",
        tags=["auth", "security", "identity"],
        trust=_trust(0.95, with_section(NIST_800_63B, "Section 5.1 - Authenticator Types")),
    ),
    ComponentRelationship(
        id="REL-CNF-001",
        source="db-server",
        target="internet",
        relationship_type="conflicts",
        strength="mandatory",
        direction="bidirectional",
        reason="Databases must never be reachable directly from the internet",
        reason_ko="데이터베이스는 인터넷에서 직접 접근 가능해서는 안 됩니다",
        tags=["security", "database", "internet-exposure"],
        trust=_trust(0.95, NIST_800_123, CIS_V8_12),
    ),
    ComponentRelationship(
        id="REL-SEC-003",
        source="ids-ips",
        target="firewall",
        relationship_type="enhances",
        strength="strong",
        direction="bidirectional",
        reason="IDS/IPS inspects traffic the firewall admits and detects intrusions it cannot see",
        reason_ko="IDS/IPS는 방화벽이 허용한 트래픽을 검사하여 방화벽이 보지 못하는 침입을 탐지합니다",
        tags=["security", "detection"],
        trust=_trust(0.9, NIST_800_94),
    ),
]

# ---------------------------------------------------------------------------
# Architecture patterns
# ---------------------------------------------------------------------------

PATTERNS: list[ArchitecturePattern] = [
    ArchitecturePattern(
        id="PAT-001",
        name="3-Tier Web Architecture",
        name_ko="3티어 웹 아키텍처",
        description=(
            "Classic three-tier architecture separating presentation, application logic, "
            "and data storage into distinct layers for maintainability and scalability."
        ),
        description_ko="프레젠테이션, 애플리케이션 로직, 데이터 저장소를 별도 계층으로 분리하는 전통적인 3계층 아키텍처입니다.",
        required_components=[
            RequiredComponent(type="web-server"),
            RequiredComponent(type="app-server"),
            RequiredComponent(type="db-server"),
        ],
        optional_components=[
            OptionalComponent(
                type="load-balancer",
                benefit="Distributes traffic across web servers for high availability",
                benefit_ko="웹 서버 간 트래픽 분산으로 고가용성 확보",
            ),
            OptionalComponent(
                type="cache",
                benefit="Reduces database load with application-level caching",
                benefit_ko="애플리케이션 레벨 캐싱으로 DB 부하 감소",
            ),
        ],
        scalability="medium",
        complexity=2,
        best_for_ko=["전통적인 웹 애플리케이션", "CRUD 기반 비즈니스 애플리케이션"],
        not_suitable_for_ko=["초대규모 트래픽 처리"],
        evolves_to=["PAT-002"],
        tags=["web", "three-tier", "architecture"],
        trust=_trust(0.9, AWS_WAF_REL, with_section(NIST_800_44, "Section 8 - Network Infrastructure")),
    ),
    ArchitecturePattern(
        id="PAT-002",
        name="Container Orchestrated Microservices",
        name_ko="컨테이너 기반 마이크로서비스",
        description=(
            "Independently deployable services running on a Kubernetes cluster behind "
            "a load balancer, scaled horizontally per service."
        ),
        description_ko="로드밸런서 뒤의 쿠버네티스 클러스터에서 서비스별로 독립 배포되고 수평 확장되는 구조입니다.",
        required_components=[
            RequiredComponent(type="kubernetes"),
            RequiredComponent(type="load-balancer"),
            RequiredComponent(type="container", min_count=2),
        ],
        optional_components=[
            OptionalComponent(
                type="cache",
                benefit="Shared session and response caching between services",
                benefit_ko="서비스 간 세션 및 응답 캐싱 공유",
            ),
        ],
        scalability="auto",
        complexity=4,
        best_for_ko=["빠른 배포 주기가 필요한 서비스"],
        not_suitable_for_ko=["소규모 단일 애플리케이션"],
        evolves_from=["PAT-001"],
        tags=["microservices", "kubernetes", "architecture"],
        trust=_trust(0.85, AWS_WAF_PERF),
    ),
    ArchitecturePattern(
        id="PAT-003",
        name="Centralized Identity with MFA",
        name_ko="MFA 기반 중앙 인증",
        description="Single sign-on backed by a directory service with multi-factor authentication for every login.",
        description_ko="디렉터리 서비스 기반 SSO에 모든 로그인마다 다중 인증을 적용하는 구조입니다.",
        required_components=[
            RequiredComponent(type="sso"),
            RequiredComponent(type="ldap-ad"),
            RequiredComponent(type="mfa"),
        ],
        scalability="high",
        complexity=3,
        best_for_ko=["다수의 내부 애플리케이션을 운영하는 조직"],
        tags=["auth", "identity", "security"],
        trust=_trust(0.9, NIST_800_63B),
    ),
]

# ---------------------------------------------------------------------------
# Anti-patterns
# ---------------------------------------------------------------------------


def _db_exposed_to_internet(spec: InfraSpec) -> bool:
    if not has_node_type(spec, "db-server") or not has_node_type(spec, "internet"):
        return False
    return is_directly_connected(spec, "db-server", "internet")


def _no_firewall(spec: InfraSpec) -> bool:
    if not has_any_node_type(spec, COMPUTE_TYPES):
        return False
    return not has_node_type(spec, "firewall")


def _single_load_balancer(spec: InfraSpec) -> bool:
    return count_nodes_by_type(spec, "load-balancer") == 1 and count_nodes_by_type(spec, "web-server") >= 2


ANTI_PATTERNS: list[AntiPattern] = [
    AntiPattern(
        id="AP-SEC-001",
        name="DB Direct Internet Exposure",
        name_ko="데이터베이스 인터넷 직접 노출",
        severity="critical",
        detection=_db_exposed_to_internet,
        detection_description_ko="db-server 노드가 internet 노드와 방화벽 없이 직접 연결되어 있는지 검사합니다.",
        problem_ko="데이터베이스가 인터넷에 직접 노출되면 SQL 인젝션과 데이터 탈취 위협에 노출됩니다.",
        impact_ko="전체 데이터베이스 침해와 고객 개인정보 유출이 발생할 수 있습니다.",
        solution_ko="데이터베이스를 내부 네트워크에 배치하고 방화벽과 애플리케이션 서버를 통해서만 접근하도록 구성하세요.",
        tags=["security", "database", "internet-exposure", "critical"],
        trust=_trust(0.95, with_section(NIST_800_41, "Section 2.1 - Network Segmentation")),
    ),
    AntiPattern(
        id="AP-SEC-002",
        name="No Firewall",
        name_ko="방화벽 부재",
        severity="critical",
        detection=_no_firewall,
        detection_description_ko="컴퓨팅 노드가 있으나 방화벽 노드가 없는지 검사합니다.",
        problem_ko="방화벽이 없으면 모든 서버가 외부 트래픽에 무방비로 노출됩니다.",
        impact_ko="무단 접근, 서비스 거부 공격, 내부 확산이 발생할 수 있습니다.",
        solution_ko="외부 경계와 내부 계층 사이에 상태 기반 방화벽을 배치하세요.",
        tags=["security", "firewall", "critical"],
        trust=_trust(0.95, NIST_800_41, SANS_FIREWALL),
    ),
    AntiPattern(
        id="AP-HA-001",
        name="Single Load Balancer",
        name_ko="단일 로드밸런서",
        severity="high",
        detection=_single_load_balancer,
        detection_description_ko="여러 웹 서버 앞에 로드밸런서가 하나만 있는지 검사합니다.",
        problem_ko="로드밸런서가 단일 장애 지점이 됩니다.",
        impact_ko="로드밸런서 장애 시 모든 웹 서버가 정상이어도 서비스가 중단됩니다.",
        solution_ko="액티브-스탠바이 또는 액티브-액티브 로드밸런서 이중화를 구성하세요.",
        tags=["availability", "load-balancer", "spof"],
        trust=_trust(0.85, AWS_WAF_REL),
    ),
]

# ---------------------------------------------------------------------------
# Failure scenarios
# ---------------------------------------------------------------------------

FAILURES: list[FailureScenario] = [
    FailureScenario(
        id="FAIL-NET-001",
        component="firewall",
        title_ko="방화벽 상태 테이블 고갈",
        scenario_ko="대량의 동시 연결로 방화벽의 세션 테이블이 가득 차 새로운 연결을 수립할 수 없게 되는 장애입니다.",
        impact="service-down",
        likelihood="medium",
        affected_components=["web-server", "app-server", "load-balancer", "dns"],
        prevention_ko=[
            "방화벽 상태 테이블 사용률을 모니터링하고 80% 임계치 경보를 설정합니다",
            "DDoS 방어 솔루션을 방화벽 앞단에 배치합니다",
            "유휴 세션 타임아웃을 짧게 설정합니다",
        ],
        mitigation_ko=[
            "비정상 연결을 식별하여 긴급 차단 정책을 적용합니다",
            "HA 페일오버를 트리거합니다",
        ],
        estimated_mttr="15분~1시간",
        tags=["network", "firewall", "ddos", "state-table", "availability"],
        trust=_trust(0.95, with_section(NIST_800_41, "Section 4.1 - Stateful Inspection Firewalls")),
    ),
    FailureScenario(
        id="FAIL-DAT-001",
        component="db-server",
        title_ko="주 데이터베이스 장애",
        scenario_ko="주 데이터베이스 서버의 디스크 또는 프로세스 장애로 쓰기 요청이 모두 실패합니다.",
        impact="data-loss",
        likelihood="medium",
        affected_components=["app-server", "backup"],
        prevention_ko=[
            "동기식 복제본을 운영합니다",
            "정기적인 백업과 복구 훈련을 수행합니다",
        ],
        mitigation_ko=[
            "복제본을 주 데이터베이스로 승격합니다",
            "최신 백업에서 시점 복구를 수행합니다",
        ],
        estimated_mttr="30분~4시간",
        tags=["database", "availability", "data"],
        trust=_trust(0.9, AWS_WAF_REL),
    ),
    FailureScenario(
        id="FAIL-AUTH-001",
        component="ldap-ad",
        title_ko="디렉터리 서비스 중단",
        scenario_ko="LDAP/AD 서버 중단으로 SSO 로그인이 전면 실패합니다.",
        impact="service-down",
        likelihood="low",
        affected_components=["sso", "app-server"],
        prevention_ko=[
            "도메인 컨트롤러를 최소 2대 이상 운영합니다",
            "디렉터리 복제 상태를 모니터링합니다",
        ],
        mitigation_ko=[
            "보조 도메인 컨트롤러로 인증 요청을 전환합니다",
            "긴급 로컬 관리자 계정을 사용합니다",
        ],
        estimated_mttr="1~2시간",
        tags=["auth", "identity", "availability"],
        trust=_trust(0.85, NIST_800_53),
    ),
]

# ---------------------------------------------------------------------------
# Quick tips
# ---------------------------------------------------------------------------

TIPS: list[QuickTip] = [
    QuickTip(
        id="TIP-CACHE-001",
        component="cache",
        category="gotcha",
        tip_ko="캐시 만료 시간이 동시에 끝나면 캐시 스탬피드가 발생하므로 TTL에 무작위 지터를 추가하세요.",
        tags=["cache", "performance", "stampede"],
        trust=_trust(0.7, AWS_WAF_PERF),
    ),
    QuickTip(
        id="TIP-FW-001",
        component="firewall",
        category="security",
        tip_ko="사용하지 않는 방화벽 규칙은 분기마다 검토하여 제거하세요.",
        tags=["firewall", "security", "operations"],
        trust=_trust(0.75, CIS_V8),
    ),
]

# ---------------------------------------------------------------------------
# Performance profiles
# ---------------------------------------------------------------------------

PROFILES: list[PerformanceProfile] = [
    PerformanceProfile(
        id="PERF-SEC-001",
        component="firewall",
        name_ko="방화벽 성능 프로파일",
        latency_range=LatencyRange(min=0.1, max=5, unit="ms"),
        throughput_range=ThroughputRange(typical="1~10 Gbps", max="40 Gbps"),
        scaling_strategy="vertical",
        bottleneck_indicators=[
            "Connection table exhaustion (>80% concurrent session limit)",
            "Deep packet inspection CPU saturation above 70%",
        ],
        bottleneck_indicators_ko=[
            "연결 테이블 소진 (동시 세션 한계의 80% 초과)",
            "심층 패킷 검사 CPU 포화도 70% 이상",
        ],
        optimization_tips_ko=["불필요한 심층 검사 정책을 비활성화합니다"],
        tags=["firewall", "performance", "security"],
        trust=_trust(0.85, NIST_800_41),
    ),
    PerformanceProfile(
        id="PERF-NET-001",
        component="load-balancer",
        name_ko="로드밸런서 성능 프로파일",
        latency_range=LatencyRange(min=50, max=500, unit="us"),
        throughput_range=ThroughputRange(typical="10~40 Gbps", max="100 Gbps"),
        scaling_strategy="both",
        bottleneck_indicators=[
            "TLS handshake rate saturation",
            "Backend connection pool exhaustion",
        ],
        bottleneck_indicators_ko=["TLS 핸드셰이크 처리율 포화", "백엔드 연결 풀 소진"],
        optimization_tips_ko=["TLS 세션 재사용을 활성화합니다", "HTTP keep-alive를 사용합니다"],
        tags=["network", "performance", "load-balancer"],
        trust=_trust(0.8, RFC_7230, AWS_WAF_SEC),
    ),
]


@lru_cache(maxsize=1)
def default_catalogue() -> Catalogue:
    """Return the validated default catalogue (built once per process)."""
    return Catalogue([*RELATIONSHIPS, *PATTERNS, *ANTI_PATTERNS, *FAILURES, *TIPS, *PROFILES])
