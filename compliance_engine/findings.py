"""
Finding Builder

Converts comparison discrepancies into detailed findings, and derives the flat
(legacy) view: base findings, recommendations and per-category analysis.
"""

from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List

from compliance_engine.models import (
    CategoryAnalysisStatus,
    CategoryStatus,
    ComparisonResult,
    ComplianceMatrix,
    ComplianceStatus,
    DetailedFinding,
    DocumentLocation,
    Effort,
    FindingCategory,
    RiskLevel,
    Severity,
    Urgency,
)
from compliance_engine.utils import add_days


# severity -> (impact, urgency, effort, risk level, timeline, deadline days)
SEVERITY_PROFILE = {
    Severity.CRITICAL: (RiskLevel.CRITICAL, Urgency.IMMEDIATE, Effort.MAJOR, RiskLevel.CRITICAL, "1-3 days", 3),
    Severity.MAJOR: (RiskLevel.HIGH, Urgency.HIGH, Effort.SIGNIFICANT, RiskLevel.HIGH, "1-2 weeks", 7),
    Severity.MINOR: (RiskLevel.MEDIUM, Urgency.MEDIUM, Effort.MODERATE, RiskLevel.MEDIUM, "2-4 weeks", 14),
    Severity.INFORMATIONAL: (RiskLevel.LOW, Urgency.LOW, Effort.MINIMAL, RiskLevel.LOW, "2-4 weeks", 14),
}

CATEGORY_STATUS_MAP = {
    CategoryStatus.PASS: CategoryAnalysisStatus.PASS,
    CategoryStatus.FAIL: CategoryAnalysisStatus.FAIL,
    CategoryStatus.CONDITIONAL: CategoryAnalysisStatus.PARTIAL,
    CategoryStatus.REVIEW_REQUIRED: CategoryAnalysisStatus.NOT_APPLICABLE,
}

RESPONSIBLE_PARTY = "Submittal Preparer"


def _excerpt(text: str, limit: int = 50) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class FindingBuilder:
    """Builds DetailedFinding records, missing elements first, then correction-required differences"""

    def build(self, comparison: ComparisonResult, reference_time: datetime) -> List[DetailedFinding]:
        findings: List[DetailedFinding] = []

        for missing in comparison.missing_elements:
            impact, urgency, effort, risk, timeline, days = SEVERITY_PROFILE[missing.criticality]
            findings.append(DetailedFinding(
                id=f"finding-{len(findings) + 1}",
                category=missing.category,
                severity=missing.criticality,
                title=f"Missing Required Information: {missing.specification_requirement}",
                description="The submittal does not include required information specified in the project specifications.",
                location=DocumentLocation(
                    excerpt=missing.specification_requirement,
                    section=missing.specification_requirement,
                    line_number=missing.start_line,
                ),
                compliance=ComplianceStatus.NON_COMPLIANT,
                confidence=0.9,
                required_action=missing.suggested_action,
                deadline=add_days(reference_time, days),
                section=missing.specification_requirement,
                context="Required by specification but not provided in submittal",
                impact=impact,
                urgency=urgency,
                effort=effort,
                risk_level=risk,
                compliance_status=ComplianceStatus.NON_COMPLIANT,
                corrective_action=missing.suggested_action,
                timeline=timeline,
                responsible_party=RESPONSIBLE_PARTY,
                verification_method="Document Review",
            ))

        for difference in comparison.differences:
            if not difference.correction_required:
                continue

            impact, urgency, effort, risk, timeline, days = SEVERITY_PROFILE[difference.severity]
            findings.append(DetailedFinding(
                id=f"finding-{len(findings) + 1}",
                category=difference.category,
                severity=difference.severity,
                title=f"Specification Deviation: {difference.category.value}",
                description=f"Submittal content does not match specification requirements. {difference.impact}.",
                location=DocumentLocation(
                    excerpt=difference.submittal_content,
                    section=_excerpt(difference.submittal_content),
                    line_number=difference.start_line,
                ),
                compliance=ComplianceStatus.NON_COMPLIANT,
                confidence=0.8,
                required_action=(
                    "Revise submittal to match specification requirements: "
                    f"{difference.specification_requirement}"
                ),
                deadline=add_days(reference_time, days),
                section=difference.category.value,
                context=(
                    f"Specification requires: {difference.specification_requirement}. "
                    f"Submittal provides: {difference.submittal_content}"
                ),
                impact=impact,
                urgency=urgency,
                effort=effort,
                risk_level=risk,
                compliance_status=ComplianceStatus.NON_COMPLIANT,
                corrective_action="Revise to match specification requirements",
                timeline=timeline,
                responsible_party=RESPONSIBLE_PARTY,
                verification_method="Document Review and Comparison",
            ))

        self._link_related(findings)
        return findings

    @staticmethod
    def _link_related(findings: List[DetailedFinding]) -> None:
        by_category: Dict[FindingCategory, List[str]] = defaultdict(list)
        for finding in findings:
            by_category[finding.category].append(finding.id)

        for finding in findings:
            finding.related_findings = [
                fid for fid in by_category[finding.category] if fid != finding.id
            ]


# ==========================
# Flat view helpers
# ==========================

def to_base_findings(findings: List[DetailedFinding]) -> List[Dict[str, Any]]:
    """Legacy finding shape, without the enhanced fields"""
    base = []
    for finding in findings:
        if finding.compliance_status in (ComplianceStatus.COMPLIANT, ComplianceStatus.NON_COMPLIANT):
            compliance = finding.compliance_status
        else:
            compliance = ComplianceStatus.UNCLEAR

        base.append({
            'id': finding.id,
            'category': finding.category.value,
            'severity': finding.severity.value,
            'title': finding.title,
            'description': finding.description,
            'location': {
                'section': finding.location.section,
                'line_number': finding.location.line_number,
                'excerpt': finding.location.excerpt,
            },
            'compliance': compliance.value,
            'required_action': finding.corrective_action,
            'deadline': finding.deadline,
            'confidence': finding.confidence,
        })
    return base


def build_recommendations(findings: List[DetailedFinding]) -> List[Dict[str, Any]]:
    recommendations = []

    if any(f.severity == Severity.CRITICAL for f in findings):
        recommendations.append({
            'id': 'critical-issues',
            'priority': 'high',
            'title': 'Address Critical Compliance Issues',
            'description': 'Immediately address all critical compliance issues identified in the analysis',
            'action_items': [
                'Review all critical findings',
                'Revise submittal documentation',
                'Obtain required approvals',
                'Resubmit for review',
            ],
            'estimated_effort': 'high',
            'category': FindingCategory.REGULATORY_COMPLIANCE.value,
        })

    major = [f for f in findings if f.severity == Severity.MAJOR]
    if major:
        # Recommend against the category with the most major findings
        counts: Dict[FindingCategory, int] = defaultdict(int)
        for finding in major:
            counts[finding.category] += 1
        top_category = max(counts, key=lambda c: (counts[c], -list(FindingCategory).index(c)))

        recommendations.append({
            'id': 'major-issues',
            'priority': 'medium',
            'title': 'Resolve Major Specification Deviations',
            'description': f'Resolve {len(major)} major deviation(s) before resubmission',
            'action_items': [
                'Compare submittal values against specified values',
                'Document any proposed substitutions for approval',
                'Update product data and shop drawings',
            ],
            'estimated_effort': 'medium',
            'category': top_category.value,
        })

    return recommendations


def build_category_analysis(
    matrix: ComplianceMatrix,
    findings: List[DetailedFinding]
) -> List[Dict[str, Any]]:
    finding_counts: Dict[FindingCategory, int] = defaultdict(int)
    for finding in findings:
        finding_counts[finding.category] += 1

    return [
        {
            'category': record.category.value,
            'score': record.score,
            'status': CATEGORY_STATUS_MAP[record.status].value,
            'finding_count': finding_counts[record.category],
            'summary': f"{record.items_passed}/{record.items_checked} items compliant",
        }
        for record in matrix.categories
    ]
