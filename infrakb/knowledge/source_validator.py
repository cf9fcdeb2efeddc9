"""Offline validation and staleness audit of catalogue sources.

Structural checks only; no HTTP requests are made. Every finding is a
SourceIssue with a stable code:

  URL      EMPTY_URL, MISSING_PROTOCOL, INVALID_URL_FORMAT (errors)
           MISSING_TLD, DOUBLE_SLASH_IN_PATH, DEPRECATED_DOMAIN (warnings)
  Source   MISSING_TITLE, FUTURE_ACCESSED_DATE (errors)
           STALE_SOURCE, MISSING_URL (warnings)

Functions that depend on the current date take an optional ``today`` so
audits are reproducible.
"""

from __future__ import annotations

import datetime
import re
from collections import Counter
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, ValidationError

from infrakb.knowledge.catalogue import Catalogue
from infrakb.knowledge.types import KnowledgeSource, SourceType

Severity = Literal["error", "warning", "info"]

_HTTP_URL = TypeAdapter(HttpUrl)
_PROTOCOL_RE = re.compile(r"^https?://", re.IGNORECASE)
_DOUBLE_SLASH_RE = re.compile(r"^https?://[^/]+/.*//")
_MISSING_TLD_RE = re.compile(r"^https?://[^./]+$")

DEPRECATED_DOMAINS: tuple[str, ...] = (
    "docs.oracle.com/cd/",
    "technet.microsoft.com",
    "msdn.microsoft.com",
)

DEFAULT_STALE_DAYS = 365


class SourceIssue(BaseModel):
    severity: Severity
    code: str
    message: str
    message_ko: str


class SourceValidationResult(BaseModel):
    source_title: str
    url: str | None = None
    is_valid: bool
    issues: list[SourceIssue] = Field(default_factory=list)


class EntrySourceIssues(BaseModel):
    entry_id: str
    entry_type: str
    source: SourceValidationResult


class ValidationReport(BaseModel):
    total_sources: int = 0
    valid_count: int = 0
    warning_count: int = 0
    error_count: int = 0
    issues: list[EntrySourceIssues] = Field(default_factory=list)
    generated_at: datetime.datetime


class StaleEntry(BaseModel):
    entry_id: str
    last_reviewed: datetime.date
    days_since_review: int


# ---------------------------------------------------------------------------
# Single URL / source
# ---------------------------------------------------------------------------


def validate_source_url(url: str | None) -> list[SourceIssue]:
    """Check the format of one URL. Hard errors stop further checks."""
    if not url or not url.strip():
        return [SourceIssue(severity="error", code="EMPTY_URL", message="URL is empty", message_ko="URL이 비어 있습니다")]

    if not _PROTOCOL_RE.match(url):
        return [SourceIssue(
            severity="error",
            code="MISSING_PROTOCOL",
            message="URL is missing http:// or https:// protocol",
            message_ko="URL에 http:// 또는 https:// 프로토콜이 없습니다",
        )]

    try:
        _HTTP_URL.validate_python(url)
    except ValidationError:
        return [SourceIssue(
            severity="error",
            code="INVALID_URL_FORMAT",
            message="URL format is invalid",
            message_ko="URL 형식이 유효하지 않습니다",
        )]

    issues: list[SourceIssue] = []
    if _MISSING_TLD_RE.match(url):
        issues.append(SourceIssue(
            severity="warning",
            code="MISSING_TLD",
            message="URL domain appears to be missing a TLD (e.g. .com, .org)",
            message_ko="URL 도메인에 TLD(.com, .org 등)가 누락된 것으로 보입니다",
        ))
    if _DOUBLE_SLASH_RE.match(url):
        issues.append(SourceIssue(
            severity="warning",
            code="DOUBLE_SLASH_IN_PATH",
            message="URL path contains consecutive slashes (//)",
            message_ko="URL 경로에 연속된 슬래시(//)가 포함되어 있습니다",
        ))
    deprecated = next((d for d in DEPRECATED_DOMAINS if d in url), None)
    if deprecated:
        issues.append(SourceIssue(
            severity="warning",
            code="DEPRECATED_DOMAIN",
            message=f"URL references a deprecated domain or path: {deprecated}",
            message_ko=f"URL이 더 이상 사용되지 않는 도메인/경로를 참조합니다: {deprecated}",
        ))
    return issues


def validate_source(
    source: KnowledgeSource,
    today: datetime.date | None = None,
    stale_days: int = DEFAULT_STALE_DAYS,
) -> SourceValidationResult:
    """Validate one citation: title, access date and URL."""
    today = today or datetime.date.today()
    issues: list[SourceIssue] = []

    if not source.title.strip():
        issues.append(SourceIssue(
            severity="error",
            code="MISSING_TITLE",
            message="Source title is missing or empty",
            message_ko="소스 제목이 누락되었거나 비어 있습니다",
        ))

    accessed = source.accessed_date.isoformat()
    if source.accessed_date > today:
        issues.append(SourceIssue(
            severity="error",
            code="FUTURE_ACCESSED_DATE",
            message=f"Source accessed_date is in the future: {accessed}",
            message_ko=f"소스 접근 일자가 미래입니다: {accessed}",
        ))
    elif (today - source.accessed_date).days > stale_days:
        issues.append(SourceIssue(
            severity="warning",
            code="STALE_SOURCE",
            message=f"Source was last accessed over {stale_days} days ago: {accessed}",
            message_ko=f"소스가 {stale_days}일 이상 전에 마지막으로 접근되었습니다: {accessed}",
        ))

    if not source.url or not source.url.strip():
        issues.append(SourceIssue(
            severity="warning",
            code="MISSING_URL",
            message="Source URL is not provided",
            message_ko="소스 URL이 제공되지 않았습니다",
        ))
    else:
        issues.extend(validate_source_url(source.url))

    return SourceValidationResult(
        source_title=source.title or "(untitled)",
        url=source.url,
        is_valid=not any(i.severity == "error" for i in issues),
        issues=issues,
    )


# ---------------------------------------------------------------------------
# Catalogue-wide audits
# ---------------------------------------------------------------------------


def validate_all_sources(
    catalogue: Catalogue,
    today: datetime.date | None = None,
    stale_days: int = DEFAULT_STALE_DAYS,
) -> ValidationReport:
    """Validate every source of every entry and summarise the findings."""
    report = ValidationReport(generated_at=datetime.datetime.now(datetime.timezone.utc))

    for entry in catalogue:
        for source in entry.trust.sources:
            report.total_sources += 1
            result = validate_source(source, today=today, stale_days=stale_days)
            if result.is_valid:
                report.valid_count += 1
            if any(i.severity == "warning" for i in result.issues):
                report.warning_count += 1
            if any(i.severity == "error" for i in result.issues):
                report.error_count += 1
            if result.issues:
                report.issues.append(EntrySourceIssues(entry_id=entry.id, entry_type=entry.type, source=result))

    return report


def get_stale_entries(
    catalogue: Catalogue,
    max_age_days: int = DEFAULT_STALE_DAYS,
    today: datetime.date | None = None,
) -> list[StaleEntry]:
    """Entries whose trust.last_reviewed_at is more than *max_age_days* old."""
    today = today or datetime.date.today()
    stale = []
    for entry in catalogue:
        age = (today - entry.trust.last_reviewed_at).days
        if age > max_age_days:
            stale.append(StaleEntry(
                entry_id=entry.id,
                last_reviewed=entry.trust.last_reviewed_at,
                days_since_review=age,
            ))
    return stale


def get_source_type_coverage(catalogue: Catalogue) -> dict[str, int]:
    """Count cited sources per SourceType; every kind is present, zero included."""
    counts = Counter(source.type.value for entry in catalogue for source in entry.trust.sources)
    return {st.value: counts.get(st.value, 0) for st in SourceType}
