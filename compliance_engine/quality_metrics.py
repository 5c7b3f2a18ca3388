"""
Quality Metrics Calculator

Six 0-100 sub-scores of submittal quality plus their mean.
"""

from typing import List

from compliance_engine.models import (
    DetailedFinding,
    FindingCategory,
    QualityMetrics,
    Severity,
)
from compliance_engine.utils import round_score


IMPROVEMENT_THRESHOLD = 70


def completeness_score(submittal_section_count: int, spec_section_count: int) -> float:
    """Provided sections as a percentage of required sections, capped at 100"""
    if spec_section_count == 0:
        return 100.0
    return min(100.0, submittal_section_count / spec_section_count * 100)


class QualityMetricsCalculator:

    def calculate(
        self,
        findings: List[DetailedFinding],
        submittal_section_count: int,
        spec_section_count: int
    ) -> QualityMetrics:
        critical = sum(1 for f in findings if f.severity == Severity.CRITICAL)
        major = sum(1 for f in findings if f.severity == Severity.MAJOR)
        inconsistent = sum(
            1 for f in findings
            if f.category == FindingCategory.DOCUMENTATION or "inconsistent" in f.description
        )

        documentation_quality = max(0, 100 - (critical * 20 + major * 10))
        technical_accuracy = max(0, 100 - (critical * 15 + major * 8))
        completeness = completeness_score(submittal_section_count, spec_section_count)
        clarity = min(100, max(50, 100 - len(findings) * 5))
        consistency = max(0, 100 - inconsistent * 10)
        compliance_readiness = documentation_quality * 0.6 + technical_accuracy * 0.4

        named = [
            ("Documentation Quality", documentation_quality),
            ("Technical Accuracy", technical_accuracy),
            ("Completeness", completeness),
            ("Clarity", clarity),
            ("Consistency", consistency),
            ("Compliance Readiness", compliance_readiness),
        ]

        return QualityMetrics(
            documentation_quality=round_score(documentation_quality),
            technical_accuracy=round_score(technical_accuracy),
            completeness=round_score(completeness),
            clarity=round_score(clarity),
            consistency=round_score(consistency),
            compliance_readiness=round_score(compliance_readiness),
            overall_quality=round_score(sum(value for _, value in named) / len(named)),
            improvement_areas=[name for name, value in named if value < IMPROVEMENT_THRESHOLD],
        )
