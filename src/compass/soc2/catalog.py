"""SOC 2 Trust Services Criteria catalog (2022)."""

from __future__ import annotations

from ..models.soc2 import MaturityLevel, TrustCriterion

TRUST_CRITERIA: dict[str, list[dict]] = {
    "security": [
        {
            "id": "security-common",
            "principle": "Security",
            "criteria": "Common Criteria",
            "points": [
                "Logical and physical access controls",
                "System operation controls",
                "Change management controls",
                "Risk mitigation controls",
            ],
        },
        {
            "id": "security-ar",
            "principle": "Security",
            "criteria": "Arising from Risk Assessment",
            "points": [
                "Risk assessment methodology",
                "Threat identification",
                "Vulnerability analysis",
                "Risk treatment process",
            ],
        },
        {
            "id": "security-cm",
            "principle": "Security",
            "criteria": "Communication and Management",
            "points": [
                "Information security policies",
                "Security awareness training",
                "Incident response procedures",
                "Vendor management",
            ],
        },
    ],
    "availability": [
        {
            "id": "availability-ao",
            "principle": "Availability",
            "criteria": "Availability Online",
            "points": [
                "System availability monitoring",
                "Performance measurement",
                "Disaster recovery procedures",
                "Business continuity planning",
            ],
        },
    ],
    "processing_integrity": [
        {
            "id": "pi-detection",
            "principle": "Processing Integrity",
            "criteria": "Detection of Processing Errors",
            "points": [
                "Input validation controls",
                "Processing validation controls",
                "Output validation controls",
                "Error logging and monitoring",
            ],
        },
        {
            "id": "pi-correction",
            "principle": "Processing Integrity",
            "criteria": "Correction of Processing Errors",
            "points": [
                "Error correction procedures",
                "Rollback capabilities",
                "Data reconciliation processes",
                "Exception handling procedures",
            ],
        },
        {
            "id": "pi-timeliness",
            "principle": "Processing Integrity",
            "criteria": "Processing in Timely Manner",
            "points": [
                "Processing performance standards",
                "Service level objectives",
                "Throughput monitoring",
                "Latency measurement",
            ],
        },
    ],
    "confidentiality": [
        {
            "id": "confidentiality-data",
            "principle": "Confidentiality",
            "criteria": "Data at Rest",
            "points": [
                "Encryption controls",
                "Access control mechanisms",
                "Data classification procedures",
                "Storage security measures",
            ],
        },
        {
            "id": "confidentiality-transit",
            "principle": "Confidentiality",
            "criteria": "Data in Transit",
            "points": [
                "Transport encryption",
                "Secure transmission protocols",
                "Network security controls",
                "Endpoint protection",
            ],
        },
    ],
    "privacy": [
        {
            "id": "privacy-collection",
            "principle": "Privacy",
            "criteria": "Data Collection and Retention",
            "points": [
                "Data minimization practices",
                "Purpose limitation controls",
                "Retention policy implementation",
                "Data lifecycle management",
            ],
        },
        {
            "id": "privacy-usage",
            "principle": "Privacy",
            "criteria": "Data Usage and Processing",
            "points": [
                "Consent management",
                "Processing purpose controls",
                "Third-party sharing controls",
                "User rights implementation",
            ],
        },
        {
            "id": "privacy-rights",
            "principle": "Privacy",
            "criteria": "Data Subject Rights",
            "points": [
                "Access request procedures",
                "Correction mechanisms",
                "Deletion processes",
                "Portability capabilities",
            ],
        },
    ],
}


def build_initial_criteria() -> list[TrustCriterion]:
    """Blank assessment for every catalog criterion, ids ``{category}-{index}``."""
    criteria: list[TrustCriterion] = []
    for category, entries in TRUST_CRITERIA.items():
        for index, entry in enumerate(entries):
            criteria.append(TrustCriterion(
                id=f"{category}-{index}",
                category=category,
                principle=entry["principle"],
                criteria=entry["criteria"],
                points=list(entry["points"]),
                implemented=False,
                evidence=[],
                maturity=MaturityLevel.NOT_IMPLEMENTED,
                notes="",
            ))
    return criteria
