"""
Data structures for the submittal compliance pipeline.
Contains the core data models shared across the engine stages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class FindingCategory(str, Enum):
    """The ten fixed buckets used to group, weight and score findings"""
    MATERIAL_SPECIFICATIONS = "material-specifications"
    DIMENSIONAL_REQUIREMENTS = "dimensional-requirements"
    PERFORMANCE_STANDARDS = "performance-standards"
    TESTING_REQUIREMENTS = "testing-requirements"
    INSTALLATION_PROCEDURES = "installation-procedures"
    QUALITY_CONTROL = "quality-control"
    DOCUMENTATION = "documentation"
    REGULATORY_COMPLIANCE = "regulatory-compliance"
    SAFETY_REQUIREMENTS = "safety-requirements"
    ENVIRONMENTAL_CONSIDERATIONS = "environmental-considerations"

    @property
    def display_name(self) -> str:
        return self.value.replace("-", " ").title()


class Severity(str, Enum):
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"
    INFORMATIONAL = "informational"


class MatchType(str, Enum):
    EXACT = "exact"
    PARTIAL = "partial"
    SEMANTIC = "semantic"


class Relevance(str, Enum):
    RELEVANT = "relevant"
    IRRELEVANT = "irrelevant"
    UNCLEAR = "unclear"


class ExcessAction(str, Enum):
    ACCEPT = "accept"
    CLARIFY = "clarify"
    REMOVE = "remove"


class CategoryStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    CONDITIONAL = "conditional"
    REVIEW_REQUIRED = "review-required"


class CategoryAnalysisStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    PARTIAL = "partial"
    NOT_APPLICABLE = "not-applicable"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Level(str, Enum):
    """Three-step scale for probability, effort and effectiveness"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    IMMEDIATE = "immediate"


class Effort(str, Enum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    MAJOR = "major"


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non-compliant"
    PARTIALLY_COMPLIANT = "partially-compliant"
    UNCLEAR = "unclear"


class OverallAssessment(str, Enum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non-compliant"
    PARTIALLY_COMPLIANT = "partially-compliant"
    REQUIRES_REVIEW = "requires-review"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ActionStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


# Relative importance of each category in the overall score
CATEGORY_WEIGHTS: Dict[FindingCategory, float] = {
    FindingCategory.SAFETY_REQUIREMENTS: 1.0,
    FindingCategory.REGULATORY_COMPLIANCE: 0.9,
    FindingCategory.MATERIAL_SPECIFICATIONS: 0.8,
    FindingCategory.PERFORMANCE_STANDARDS: 0.8,
    FindingCategory.DIMENSIONAL_REQUIREMENTS: 0.7,
    FindingCategory.TESTING_REQUIREMENTS: 0.7,
    FindingCategory.QUALITY_CONTROL: 0.6,
    FindingCategory.INSTALLATION_PROCEDURES: 0.6,
    FindingCategory.DOCUMENTATION: 0.5,
    FindingCategory.ENVIRONMENTAL_CONSIDERATIONS: 0.5,
}


def validate_category_weights(weights: Dict[FindingCategory, float]) -> None:
    """Raise if any category lacks a weight or a weight is outside (0, 1]."""
    missing = [c.value for c in FindingCategory if c not in weights]
    if missing:
        raise ValueError(f"Missing category weights: {missing}")
    for category, weight in weights.items():
        if not 0 < weight <= 1:
            raise ValueError(f"Weight for {category.value} out of range: {weight}")


validate_category_weights(CATEGORY_WEIGHTS)


# ==========================
# Comparison entities
# ==========================

@dataclass(frozen=True)
class DocumentSection:
    """A titled block of a document, created once per extraction pass."""
    id: str
    title: str
    body: str
    start_line: int
    end_line: int
    level: int
    category: FindingCategory


@dataclass
class ComparisonMatch:
    submittal_section_id: str
    spec_section_id: str
    match_score: float
    match_type: MatchType
    confidence: float


@dataclass
class ComparisonDifference:
    id: str
    spec_section_id: str
    submittal_section_id: str
    submittal_content: str
    specification_requirement: str
    severity: Severity
    category: FindingCategory
    impact: str
    correction_required: bool
    start_line: Optional[int] = None


@dataclass
class MissingElement:
    """Specification requirement with no accepted match in the submittal"""
    id: str
    spec_section_id: str
    specification_requirement: str
    category: FindingCategory
    criticality: Severity
    suggested_action: str
    start_line: Optional[int] = None
    correction_required: bool = True


@dataclass
class ExcessElement:
    """Submittal content that matched no specification section"""
    id: str
    submittal_section_id: str
    submittal_content: str
    category: FindingCategory
    relevance: Relevance
    action: ExcessAction


@dataclass
class ComparisonResult:
    matches: List[ComparisonMatch] = field(default_factory=list)
    differences: List[ComparisonDifference] = field(default_factory=list)
    missing_elements: List[MissingElement] = field(default_factory=list)
    excess_elements: List[ExcessElement] = field(default_factory=list)
    confidence: float = 0.1


# ==========================
# Scoring entities
# ==========================

@dataclass
class ComplianceCategory:
    category: FindingCategory
    name: str
    weight: float
    score: int = 100
    status: CategoryStatus = CategoryStatus.REVIEW_REQUIRED
    items_checked: int = 0
    items_passed: int = 0
    critical_failures: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class ComplianceMatrix:
    overall_score: int
    categories: List[ComplianceCategory]
    summary: str
    critical_issues: int = 0
    major_issues: int = 0
    minor_issues: int = 0
    compliant_items: int = 0


@dataclass
class DocumentLocation:
    excerpt: str
    section: Optional[str] = None
    line_number: Optional[int] = None


@dataclass
class DetailedFinding:
    id: str
    category: FindingCategory
    severity: Severity
    title: str
    description: str
    location: DocumentLocation
    compliance: ComplianceStatus
    confidence: float
    required_action: str
    deadline: str
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
    related_findings: List[str] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)


@dataclass
class RiskFactor:
    id: str
    category: str
    description: str
    probability: Level
    impact: RiskLevel
    risk_score: int
    mitigation_required: bool


@dataclass
class MitigationStrategy:
    risk_id: str
    strategy: str
    implementation_effort: Level
    effectiveness: Level
    timeline: str
    responsible_party: str


@dataclass
class RiskAssessment:
    overall_risk: RiskLevel
    risk_factors: List[RiskFactor]
    mitigation_strategies: List[MitigationStrategy]
    residual_risk: RiskLevel


@dataclass
class QualityMetrics:
    documentation_quality: int
    technical_accuracy: int
    completeness: int
    clarity: int
    consistency: int
    compliance_readiness: int
    overall_quality: int
    improvement_areas: List[str] = field(default_factory=list)


@dataclass
class ActionItem:
    id: str
    title: str
    description: str
    priority: Priority
    category: str
    assigned_to: str
    due_date: str
    estimated_hours: int
    dependencies: List[str] = field(default_factory=list)
    status: ActionStatus = ActionStatus.PENDING
    related_findings: List[str] = field(default_factory=list)
