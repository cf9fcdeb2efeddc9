"""Tests for offline source validation and the staleness audit."""

import datetime

import pytest

from infrakb.knowledge.catalogue import Catalogue
from infrakb.knowledge.source_validator import (
    get_source_type_coverage,
    get_stale_entries,
    validate_all_sources,
    validate_source,
    validate_source_url,
)
from infrakb.knowledge.types import KnowledgeSource, SourceType, TrustMetadata

from conftest import REVIEWED, make_relationship

TODAY = datetime.date(2026, 10, 18)


def _codes(issues):
    return [i.code for i in issues]


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------


def test_valid_url_has_no_issues():
    assert validate_source_url("https://csrc.nist.gov/pubs/sp/800/41/r1/final") == []


@pytest.mark.parametrize(
    "url,code",
    [
        ("", "EMPTY_URL"),
        ("   ", "EMPTY_URL"),
        ("csrc.nist.gov/pubs", "MISSING_PROTOCOL"),
        ("ftp://example.com/file", "MISSING_PROTOCOL"),
        ("https://exa mple.com", "INVALID_URL_FORMAT"),
        ("http://exa_mple.com:99999/", "INVALID_URL_FORMAT"),
        ("https://example.com:99999/docs", "INVALID_URL_FORMAT"),
    ],
)
def test_url_errors_stop_further_checks(url, code):
    issues = validate_source_url(url)
    assert _codes(issues) == [code]
    assert issues[0].severity == "error"


def test_url_warnings():
    assert _codes(validate_source_url("https://intranet")) == ["MISSING_TLD"]
    assert _codes(validate_source_url("https://example.com/a//b")) == ["DOUBLE_SLASH_IN_PATH"]

    issues = validate_source_url("https://technet.microsoft.com/en-us/library/cc700845")
    assert _codes(issues) == ["DEPRECATED_DOMAIN"]
    assert issues[0].severity == "warning"
    assert "technet.microsoft.com" in issues[0].message


# ---------------------------------------------------------------------------
# Single source
# ---------------------------------------------------------------------------


def _source(accessed=REVIEWED, url="https://www.cisecurity.org/controls/v8", title="CIS Controls v8"):
    return KnowledgeSource(type=SourceType.CIS, title=title, url=url, accessed_date=accessed)


def test_fresh_source_is_clean():
    result = validate_source(_source(), today=TODAY)
    assert result.is_valid
    assert result.issues == []
    assert result.source_title == "CIS Controls v8"


def test_future_accessed_date_is_error():
    result = validate_source(_source(accessed=TODAY + datetime.timedelta(days=1)), today=TODAY)
    assert not result.is_valid
    assert _codes(result.issues) == ["FUTURE_ACCESSED_DATE"]


def test_stale_source_is_warning():
    result = validate_source(_source(accessed=datetime.date(2024, 1, 1)), today=TODAY)
    assert result.is_valid
    assert _codes(result.issues) == ["STALE_SOURCE"]


def test_stale_threshold_configurable():
    assert validate_source(_source(), today=TODAY, stale_days=30).issues[0].code == "STALE_SOURCE"
    assert validate_source(_source(), today=TODAY, stale_days=365).issues == []


def test_missing_url_is_warning():
    result = validate_source(_source(url=None), today=TODAY)
    assert result.is_valid
    assert _codes(result.issues) == ["MISSING_URL"]


def test_bad_url_invalidates_source():
    result = validate_source(_source(url="www.cisecurity.org"), today=TODAY)
    assert not result.is_valid
    assert _codes(result.issues) == ["MISSING_PROTOCOL"]


# ---------------------------------------------------------------------------
# Catalogue audits
# ---------------------------------------------------------------------------


def test_report_counts(catalogue):
    report = validate_all_sources(catalogue, today=TODAY)

    assert report.total_sources == len(catalogue)
    assert report.valid_count == report.total_sources
    assert report.error_count == 0
    assert report.issues == []


def test_report_lists_offending_entries():
    rel = make_relationship("REL-V-1", "web-server", "dns")
    rel.trust = TrustMetadata(
        confidence=0.9,
        sources=[_source(url=None), _source(url="nist.gov")],
        last_reviewed_at=REVIEWED,
    )

    report = validate_all_sources(Catalogue([rel]), today=TODAY)

    assert report.total_sources == 2
    assert report.valid_count == 1
    assert report.warning_count == 1
    assert report.error_count == 1
    assert [i.entry_id for i in report.issues] == ["REL-V-1", "REL-V-1"]
    assert report.issues[0].entry_type == "relationship"


def test_stale_entries():
    old = make_relationship("REL-O-1", "web-server", "dns")
    old.trust.last_reviewed_at = datetime.date(2025, 1, 1)
    fresh = make_relationship("REL-O-2", "router", "switch-l2")
    catalogue = Catalogue([old, fresh])

    stale = get_stale_entries(catalogue, max_age_days=365, today=TODAY)

    assert [s.entry_id for s in stale] == ["REL-O-1"]
    assert stale[0].days_since_review == (TODAY - datetime.date(2025, 1, 1)).days
    assert get_stale_entries(catalogue, max_age_days=5000, today=TODAY) == []


def test_source_type_coverage_lists_every_kind(catalogue):
    coverage = get_source_type_coverage(catalogue)

    assert set(coverage) == {t.value for t in SourceType}
    assert sum(coverage.values()) == len(catalogue)
    assert coverage["vendor"] == 3
    assert coverage["rfc"] == 0
