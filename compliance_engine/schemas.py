"""
Report Schema & Validator

Pydantic schemas for the assembled analysis report, plus field-level
sanitization for payloads that fail validation.

Features:
1. Strict re-check of every report field (ranges, enums, nested shapes)
2. Sanitization with documented per-field defaults
3. Idempotent: a valid report is returned unchanged
"""

import math
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Type

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from compliance_engine.error_handler import SchemaValidationError
from compliance_engine.models import (
    ActionStatus,
    CategoryAnalysisStatus,
    CategoryStatus,
    ComplianceStatus,
    Effort,
    ExcessAction,
    FindingCategory,
    Level,
    MatchType,
    OverallAssessment,
    Priority,
    Relevance,
    RiskLevel,
    Severity,
    Urgency,
)
from compliance_engine.utils import round_score


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")


Score = Annotated[int, Field(ge=0, le=100)]
Unit = Annotated[float, Field(ge=0.0, le=1.0)]
Count = Annotated[int, Field(ge=0)]


class DocumentLocationSchema(_Schema):
    excerpt: str
    section: Optional[str] = None
    line_number: Optional[int] = None


class FindingSchema(_Schema):
    id: str
    category: FindingCategory
    severity: Severity
    title: str
    description: str
    location: DocumentLocationSchema
    compliance: ComplianceStatus
    required_action: Optional[str] = None
    deadline: Optional[str] = None
    confidence: Unit


class DetailedFindingSchema(FindingSchema):
    section: str
    context: str
    impact: RiskLevel
    urgency: Urgency
    effort: Effort
    risk_level: RiskLevel
    compliance_status: ComplianceStatus
    corrective_action: str
    timeline: str
    responsible_party: str
    verification_method: str
    related_findings: List[str] = Field(default_factory=list)
    attachments: List[str] = Field(default_factory=list)


class RecommendationSchema(_Schema):
    id: str
    priority: Literal["high", "medium", "low"]
    title: str
    description: str
    action_items: List[str]
    estimated_effort: Literal["low", "medium", "high"]
    category: FindingCategory


class CategoryAnalysisSchema(_Schema):
    category: FindingCategory
    score: Score
    status: CategoryAnalysisStatus
    finding_count: Count
    summary: str


class ComplianceCategorySchema(_Schema):
    category: FindingCategory
    name: str
    score: Score
    weight: Unit
    status: CategoryStatus
    items_checked: Count
    items_passed: Count
    critical_failures: List[str]
    recommendations: List[str] = Field(default_factory=list)


class ComplianceMatrixSchema(_Schema):
    overall_score: Score
    categories: List[ComplianceCategorySchema]
    summary: str
    critical_issues: Count
    major_issues: Count
    minor_issues: Count
    compliant_items: Count


class RiskFactorSchema(_Schema):
    id: str = ""
    category: str
    description: str
    probability: Level
    impact: RiskLevel
    risk_score: int = Field(ge=0, le=10)
    mitigation_required: bool


class MitigationStrategySchema(_Schema):
    risk_id: str
    strategy: str
    implementation_effort: Level
    effectiveness: Level
    timeline: str
    responsible_party: str


class RiskAssessmentSchema(_Schema):
    overall_risk: RiskLevel
    risk_factors: List[RiskFactorSchema]
    mitigation_strategies: List[MitigationStrategySchema]
    residual_risk: RiskLevel


class QualityMetricsSchema(_Schema):
    documentation_quality: Score
    technical_accuracy: Score
    completeness: Score
    clarity: Score
    consistency: Score
    compliance_readiness: Score
    overall_quality: Score
    improvement_areas: List[str]


class ActionItemSchema(_Schema):
    id: str
    title: str
    description: str
    priority: Priority
    category: str
    assigned_to: str
    due_date: Optional[str] = None
    estimated_hours: Optional[int] = Field(default=None, ge=0)
    dependencies: List[str] = Field(default_factory=list)
    status: ActionStatus
    related_findings: List[str]


class AnalysisMetadataSchema(_Schema):
    analysis_id: str
    timestamp: str
    model_used: str
    analysis_type: Literal["compliance", "review", "comparison"]
    complexity: Literal["basic", "standard", "comprehensive", "detailed"]
    processing_time_ms: float = Field(ge=0)
    confidence_score: Unit
    completeness_score: Unit
    reviewer_notes: Optional[str] = None
    file_name: Optional[str] = None


class ComparisonMatchSchema(_Schema):
    submittal_section_id: str
    spec_section_id: str
    match_score: Unit
    match_type: MatchType
    confidence: Unit


class ComparisonDifferenceSchema(_Schema):
    id: str
    spec_section_id: str
    submittal_section_id: str
    submittal_content: str
    specification_requirement: str
    severity: Severity
    category: FindingCategory
    impact: str
    correction_required: bool


class MissingElementSchema(_Schema):
    id: str
    spec_section_id: str
    specification_requirement: str
    category: FindingCategory
    criticality: Severity
    suggested_action: str
    correction_required: bool = True


class ExcessElementSchema(_Schema):
    id: str
    submittal_section_id: str
    submittal_content: str
    category: FindingCategory
    relevance: Relevance
    action: ExcessAction


class ComparisonSchema(_Schema):
    matches: List[ComparisonMatchSchema] = Field(default_factory=list)
    differences: List[ComparisonDifferenceSchema] = Field(default_factory=list)
    missing_elements: List[MissingElementSchema] = Field(default_factory=list)
    excess_elements: List[ExcessElementSchema] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class AnalysisReport(_Schema):
    """Validated analysis result: flat (legacy) fields plus the enhanced view"""

    # Flat view
    compliance_score: Score
    overall_assessment: OverallAssessment
    summary: str
    findings: List[FindingSchema]
    recommendations: List[RecommendationSchema]
    categories: List[CategoryAnalysisSchema]
    confidence: Unit

    # Enhanced view
    metadata: AnalysisMetadataSchema
    detailed_findings: List[DetailedFindingSchema]
    compliance_matrix: ComplianceMatrixSchema
    risk_assessment: RiskAssessmentSchema
    quality_metrics: QualityMetricsSchema
    action_items: List[ActionItemSchema]
    comparison: ComparisonSchema = Field(default_factory=ComparisonSchema)


# ==========================
# Sanitization helpers
# ==========================

def _number(value: Any, low: Optional[float] = None, high: Optional[float] = None) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    if low is not None and number < low:
        return low
    if high is not None and number > high:
        return high
    return number


def _int(value: Any, default: int, low: Optional[float] = 0, high: Optional[float] = None) -> int:
    number = _number(value, low, high)
    return default if number is None or math.isinf(number) else round_score(number)


def _float(value: Any, default: float, low: Optional[float] = None, high: Optional[float] = None) -> float:
    number = _number(value, low, high)
    return default if number is None or math.isinf(number) else number


def _string(value: Any, default: Optional[str]) -> Optional[str]:
    return value if isinstance(value, str) else default


def _choice(value: Any, choices, default: str) -> str:
    allowed = {c.value if hasattr(c, "value") else c for c in choices}
    raw = value.value if hasattr(value, "value") else value
    return raw if isinstance(raw, str) and raw in allowed else default


def _items(value: Any, schema: Type[BaseModel]) -> List[Any]:
    """Keep list items that validate on their own, drop the rest"""
    if not isinstance(value, list):
        return []
    kept = []
    for item in value:
        try:
            schema.model_validate(item)
        except ValidationError:
            logger.debug(f"Dropping invalid {schema.__name__} item")
            continue
        kept.append(item)
    return kept


def _mapping(value: Any) -> Mapping:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return value if isinstance(value, Mapping) else {}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def default_report_payload() -> Dict[str, Any]:
    """Fixed, fully-populated payload used when there is nothing to sanitize"""
    return {
        'compliance_score': 0,
        'overall_assessment': OverallAssessment.REQUIRES_REVIEW.value,
        'summary': 'Analysis failed - default result provided',
        'findings': [],
        'recommendations': [],
        'categories': [],
        'confidence': 0.0,
        'metadata': {
            'analysis_id': f"fallback-{int(time.time() * 1000)}",
            'timestamp': _now_iso(),
            'model_used': 'fallback',
            'analysis_type': 'review',
            'complexity': 'basic',
            'processing_time_ms': 0,
            'confidence_score': 0.0,
            'completeness_score': 0.0,
            'reviewer_notes': None,
        },
        'detailed_findings': [],
        'compliance_matrix': {
            'overall_score': 0,
            'categories': [],
            'summary': 'Default compliance matrix',
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
            'improvement_areas': ['Analysis failed'],
        },
        'action_items': [],
        'comparison': {},
    }


QUALITY_FIELDS = (
    'documentation_quality', 'technical_accuracy', 'completeness', 'clarity',
    'consistency', 'compliance_readiness', 'overall_quality',
)


class SchemaValidator:
    """Validates assembled reports and repairs invalid fields with defaults"""

    def validate(self, data: Any) -> AnalysisReport:
        try:
            return AnalysisReport.model_validate(data)
        except ValidationError as e:
            raise SchemaValidationError(
                f"Invalid analysis report format: {e.error_count()} error(s)",
                details={'errors': e.errors(include_url=False)}
            ) from e

    def sanitize_and_validate(self, data: Any) -> Tuple[AnalysisReport, bool]:
        """
        Validate, falling back to sanitization

        Returns:
            (report, sanitized) where sanitized is True when defaults were applied

        Raises:
            SchemaValidationError: If even the sanitized payload is invalid
        """
        try:
            return self.validate(data), False
        except SchemaValidationError as e:
            logger.warning(f"⚠️ Direct validation failed, attempting sanitization... ({e})")

        sanitized = self.sanitize(data)
        report = self.validate(sanitized)
        logger.info("🧹 Report sanitized with default values")
        return report, True

    def sanitize(self, data: Any) -> Dict[str, Any]:
        if isinstance(data, BaseModel):
            data = data.model_dump()
        if not isinstance(data, Mapping):
            return default_report_payload()

        return {
            'compliance_score': _int(data.get('compliance_score'), 0, 0, 100),
            'overall_assessment': _choice(
                data.get('overall_assessment'), OverallAssessment,
                OverallAssessment.REQUIRES_REVIEW.value
            ),
            'summary': _string(data.get('summary'), 'Analysis completed'),
            'findings': _items(data.get('findings'), FindingSchema),
            'recommendations': _items(data.get('recommendations'), RecommendationSchema),
            'categories': _items(data.get('categories'), CategoryAnalysisSchema),
            'confidence': _float(data.get('confidence'), 0.5, 0.0, 1.0),
            'metadata': self._sanitize_metadata(_mapping(data.get('metadata'))),
            'detailed_findings': _items(data.get('detailed_findings'), DetailedFindingSchema),
            'compliance_matrix': self._sanitize_matrix(_mapping(data.get('compliance_matrix'))),
            'risk_assessment': self._sanitize_risk(_mapping(data.get('risk_assessment'))),
            'quality_metrics': self._sanitize_quality(_mapping(data.get('quality_metrics'))),
            'action_items': _items(data.get('action_items'), ActionItemSchema),
            'comparison': self._sanitize_comparison(_mapping(data.get('comparison'))),
        }

    @staticmethod
    def _sanitize_metadata(data: Mapping) -> Dict[str, Any]:
        return {
            'analysis_id': _string(data.get('analysis_id'), f"analysis-{int(time.time() * 1000)}"),
            'timestamp': _string(data.get('timestamp'), None) or _now_iso(),
            'model_used': _string(data.get('model_used'), 'unknown'),
            'analysis_type': _choice(data.get('analysis_type'), ('compliance', 'review', 'comparison'), 'review'),
            'complexity': _choice(
                data.get('complexity'), ('basic', 'standard', 'comprehensive', 'detailed'), 'standard'
            ),
            'processing_time_ms': _float(data.get('processing_time_ms'), 0.0, 0.0),
            'confidence_score': _float(data.get('confidence_score'), 0.5, 0.0, 1.0),
            'completeness_score': _float(data.get('completeness_score'), 0.5, 0.0, 1.0),
            'reviewer_notes': _string(data.get('reviewer_notes'), None) or None,
            'file_name': _string(data.get('file_name'), None),
        }

    @staticmethod
    def _sanitize_matrix(data: Mapping) -> Dict[str, Any]:
        return {
            'overall_score': _int(data.get('overall_score'), 0, 0, 100),
            'categories': _items(data.get('categories'), ComplianceCategorySchema),
            'summary': _string(data.get('summary'), 'Analysis completed'),
            'critical_issues': _int(data.get('critical_issues'), 0),
            'major_issues': _int(data.get('major_issues'), 0),
            'minor_issues': _int(data.get('minor_issues'), 0),
            'compliant_items': _int(data.get('compliant_items'), 0),
        }

    @staticmethod
    def _sanitize_risk(data: Mapping) -> Dict[str, Any]:
        return {
            'overall_risk': _choice(data.get('overall_risk'), RiskLevel, RiskLevel.MEDIUM.value),
            'risk_factors': _items(data.get('risk_factors'), RiskFactorSchema),
            'mitigation_strategies': _items(data.get('mitigation_strategies'), MitigationStrategySchema),
            'residual_risk': _choice(data.get('residual_risk'), RiskLevel, RiskLevel.MEDIUM.value),
        }

    @staticmethod
    def _sanitize_quality(data: Mapping) -> Dict[str, Any]:
        sanitized: Dict[str, Any] = {
            name: _int(data.get(name), 70, 0, 100) for name in QUALITY_FIELDS
        }
        areas = data.get('improvement_areas')
        sanitized['improvement_areas'] = (
            [a for a in areas if isinstance(a, str)] if isinstance(areas, list) else []
        )
        return sanitized

    @staticmethod
    def _sanitize_comparison(data: Mapping) -> Dict[str, Any]:
        return {
            'matches': _items(data.get('matches'), ComparisonMatchSchema),
            'differences': _items(data.get('differences'), ComparisonDifferenceSchema),
            'missing_elements': _items(data.get('missing_elements'), MissingElementSchema),
            'excess_elements': _items(data.get('excess_elements'), ExcessElementSchema),
            'confidence': _float(data.get('confidence'), 0.0, 0.0, 1.0),
        }
