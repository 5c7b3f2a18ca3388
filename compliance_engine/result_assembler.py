"""
Result Assembler

Combines the stage outputs into the report payload: the flat (legacy) view
and the enhanced view with metadata, matrix, risk, quality and actions.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from compliance_engine.config import DEFAULT_CONFIG, EngineConfig
from compliance_engine.findings import (
    build_category_analysis,
    build_recommendations,
    to_base_findings,
)
from compliance_engine.models import (
    ActionItem,
    ComparisonResult,
    ComplianceMatrix,
    DetailedFinding,
    OverallAssessment,
    QualityMetrics,
    RiskAssessment,
    RiskLevel,
    Severity,
)


MODEL_USED = "rule-based-comparison"

FAIL_SAFE_SUMMARY = "Analysis engine encountered an error. Manual review required."


def overall_assessment(matrix: ComplianceMatrix) -> OverallAssessment:
    if matrix.critical_issues > 0:
        return OverallAssessment.NON_COMPLIANT
    if matrix.overall_score >= 90:
        return OverallAssessment.COMPLIANT
    if matrix.overall_score >= 70:
        return OverallAssessment.PARTIALLY_COMPLIANT
    return OverallAssessment.REQUIRES_REVIEW


def _plain(items: List[Any]) -> List[Dict[str, Any]]:
    return [asdict(item) for item in items]


class ResultAssembler:

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def assemble(
        self,
        analysis_id: str,
        comparison: ComparisonResult,
        matrix: ComplianceMatrix,
        findings: List[DetailedFinding],
        risk: RiskAssessment,
        quality: QualityMetrics,
        actions: List[ActionItem],
        reference_time: datetime,
        processing_time_ms: float = 0.0,
        file_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """Build the report payload; schema validation happens afterwards."""
        return {
            'compliance_score': matrix.overall_score,
            'overall_assessment': overall_assessment(matrix).value,
            'summary': self.summary(matrix, findings, risk),
            'findings': to_base_findings(findings),
            'recommendations': build_recommendations(findings),
            'categories': build_category_analysis(matrix, findings),
            'confidence': comparison.confidence,

            'metadata': {
                'analysis_id': analysis_id,
                'timestamp': reference_time.isoformat(),
                'model_used': MODEL_USED,
                'analysis_type': 'comparison',
                'complexity': 'comprehensive',
                'processing_time_ms': processing_time_ms,
                'confidence_score': comparison.confidence,
                'completeness_score': quality.completeness / 100,
                'reviewer_notes': self.reviewer_notes(comparison),
                'file_name': file_name,
            },
            'detailed_findings': _plain(findings),
            'compliance_matrix': asdict(matrix),
            'risk_assessment': asdict(risk),
            'quality_metrics': asdict(quality),
            'action_items': _plain(actions),
            'comparison': {
                'matches': _plain(comparison.matches),
                'differences': _plain(comparison.differences),
                'missing_elements': _plain(comparison.missing_elements),
                'excess_elements': _plain(comparison.excess_elements),
                'confidence': comparison.confidence,
            },
        }

    def summary(
        self,
        matrix: ComplianceMatrix,
        findings: List[DetailedFinding],
        risk: RiskAssessment
    ) -> str:
        text = (
            f"Analysis completed with {matrix.overall_score}% compliance score. "
            f"{matrix.critical_issues} critical issues, {matrix.major_issues} major issues identified. "
            f"Overall risk level: {risk.overall_risk.value}."
        )

        critical_findings = sum(1 for f in findings if f.severity == Severity.CRITICAL)
        if critical_findings > self.config.max_critical_issues:
            text += (
                f" Critical findings ({critical_findings}) exceed the review limit of "
                f"{self.config.max_critical_issues}; escalate before resubmission."
            )
        return text

    def reviewer_notes(self, comparison: ComparisonResult) -> Optional[str]:
        if comparison.confidence < self.config.confidence_threshold:
            return (
                f"Comparison confidence {comparison.confidence:.2f} is below the "
                f"threshold of {self.config.confidence_threshold:.2f}; manual verification recommended."
            )
        return None


def fail_safe_result(analysis_id: str, error: Any, reference_time: datetime) -> Dict[str, Any]:
    """Report payload returned when the pipeline raised"""
    return {
        'compliance_score': 0,
        'overall_assessment': OverallAssessment.REQUIRES_REVIEW.value,
        'summary': FAIL_SAFE_SUMMARY,
        'findings': [],
        'recommendations': [],
        'categories': [],
        'confidence': 0.0,
        'metadata': {
            'analysis_id': analysis_id,
            'timestamp': reference_time.isoformat(),
            'model_used': MODEL_USED,
            'analysis_type': 'comparison',
            'complexity': 'comprehensive',
            'processing_time_ms': 0,
            'confidence_score': 0.0,
            'completeness_score': 0.0,
            'reviewer_notes': f"Error: {error}",
            'file_name': None,
        },
        'detailed_findings': [],
        'compliance_matrix': {
            'overall_score': 0,
            'categories': [],
            'summary': 'Analysis failed',
            'critical_issues': 0,
            'major_issues': 0,
            'minor_issues': 0,
            'compliant_items': 0,
        },
        'risk_assessment': {
            'overall_risk': RiskLevel.HIGH.value,
            'risk_factors': [],
            'mitigation_strategies': [],
            'residual_risk': RiskLevel.HIGH.value,
        },
        'quality_metrics': {
            'documentation_quality': 0,
            'technical_accuracy': 0,
            'completeness': 0,
            'clarity': 0,
            'consistency': 0,
            'compliance_readiness': 0,
            'overall_quality': 0,
            'improvement_areas': ['Analysis failed - manual review required'],
        },
        'action_items': [],
        'comparison': {},
    }
