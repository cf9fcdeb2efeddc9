"""Source registry: verified reference documents for infrastructure knowledge.

Every catalogue entry cites sources built by the factory helpers below so that
titles, URLs and access dates stay uniform. Use with_section() to point at a
specific section of a shared citation without mutating it.
"""

from __future__ import annotations

import datetime

from infrakb.knowledge.types import KnowledgeSource, SourceType

# Date the shared citations were last checked
ACCESSED = datetime.date(2026, 2, 9)


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------


def nist(doc_id: str, title: str, url: str, published_date: str, section: str | None = None) -> KnowledgeSource:
    return KnowledgeSource(
        type=SourceType.NIST,
        title=f"NIST {doc_id}: {title}",
        url=url,
        section=section,
        published_date=published_date,
        accessed_date=ACCESSED,
    )


def rfc(num: int, title: str, published_date: str, section: str | None = None) -> KnowledgeSource:
    return KnowledgeSource(
        type=SourceType.RFC,
        title=f"RFC {num}: {title}",
        url=f"https://datatracker.ietf.org/doc/html/rfc{num}",
        section=section,
        published_date=published_date,
        accessed_date=ACCESSED,
    )


def cis(title: str, url: str, section: str | None = None) -> KnowledgeSource:
    return KnowledgeSource(type=SourceType.CIS, title=title, url=url, section=section, accessed_date=ACCESSED)


def owasp(title: str, url: str, section: str | None = None) -> KnowledgeSource:
    return KnowledgeSource(type=SourceType.OWASP, title=title, url=url, section=section, accessed_date=ACCESSED)


def vendor(title: str, url: str, section: str | None = None) -> KnowledgeSource:
    return KnowledgeSource(type=SourceType.VENDOR, title=title, url=url, section=section, accessed_date=ACCESSED)


def industry(title: str, url: str, section: str | None = None) -> KnowledgeSource:
    return KnowledgeSource(type=SourceType.INDUSTRY, title=title, url=url, section=section, accessed_date=ACCESSED)


def with_section(source: KnowledgeSource, section: str) -> KnowledgeSource:
    """Return a copy of *source* pointing at *section*."""
    return source.model_copy(update={"section": section})


# ---------------------------------------------------------------------------
# NIST Special Publications
# ---------------------------------------------------------------------------

NIST_800_41 = nist(
    "SP 800-41 Rev.1",
    "Guidelines on Firewalls and Firewall Policy",
    "https://csrc.nist.gov/pubs/sp/800/41/r1/final",
    "2009-09",
)

NIST_800_44 = nist(
    "SP 800-44 Ver.2",
    "Guidelines on Securing Public Web Servers",
    "https://csrc.nist.gov/pubs/sp/800/44/ver2/final",
    "2007-09",
)

NIST_800_53 = nist(
    "SP 800-53 Rev.5",
    "Security and Privacy Controls for Information Systems",
    "https://csrc.nist.gov/pubs/sp/800/53/r5/upd1/final",
    "2020-09",
)

NIST_800_63B = nist(
    "SP 800-63B",
    "Digital Identity Guidelines - Authentication and Lifecycle Management",
    "https://csrc.nist.gov/pubs/sp/800/63b/upd2/final",
    "2017-06",
)

NIST_800_81 = nist(
    "SP 800-81-2",
    "Secure Domain Name System (DNS) Deployment Guide",
    "https://csrc.nist.gov/pubs/sp/800/81/2/final",
    "2013-09",
)

NIST_800_94 = nist(
    "SP 800-94",
    "Guide to Intrusion Detection and Prevention Systems (IDPS)",
    "https://csrc.nist.gov/pubs/sp/800/94/final",
    "2007-02",
)

NIST_800_123 = nist(
    "SP 800-123",
    "Guide to General Server Security",
    "https://csrc.nist.gov/pubs/sp/800/123/final",
    "2008-07",
)

# ---------------------------------------------------------------------------
# IETF RFCs
# ---------------------------------------------------------------------------

RFC_7230 = rfc(7230, "HTTP/1.1 Message Syntax and Routing", "2014-06", "Section 2.3 - Intermediaries")
RFC_8446 = rfc(8446, "The Transport Layer Security (TLS) Protocol Version 1.3", "2018-08")
RFC_1034 = rfc(1034, "Domain Names - Concepts and Facilities", "1987-11")

# ---------------------------------------------------------------------------
# CIS / OWASP
# ---------------------------------------------------------------------------

CIS_V8 = cis("CIS Controls v8", "https://www.cisecurity.org/controls/v8")

CIS_V8_12 = cis(
    "CIS Controls v8 - Control 12: Network Infrastructure Management",
    "https://www.cisecurity.org/controls/v8",
    "12.2 - Establish and Maintain a Secure Network Architecture",
)

OWASP_TOP10 = owasp("OWASP Top 10 (2021)", "https://owasp.org/Top10/")

# ---------------------------------------------------------------------------
# Vendor documentation
# ---------------------------------------------------------------------------

AWS_WAF_REL = vendor(
    "AWS Well-Architected Framework - Reliability Pillar",
    "https://docs.aws.amazon.com/wellarchitected/latest/reliability-pillar/",
)

AWS_WAF_SEC = vendor(
    "AWS Well-Architected Framework - Security Pillar",
    "https://docs.aws.amazon.com/wellarchitected/latest/security-pillar/",
)

AWS_WAF_PERF = vendor(
    "AWS Well-Architected Framework - Performance Efficiency Pillar",
    "https://docs.aws.amazon.com/wellarchitected/latest/performance-efficiency-pillar/",
)

# ---------------------------------------------------------------------------
# Industry guides
# ---------------------------------------------------------------------------

SANS_FIREWALL = industry(
    "SANS Firewall Checklist",
    "https://www.sans.org/media/score/checklists/FirewallChecklist.pdf",
)
