"""
Compliance Scorer

Aggregates per-requirement pass/fail into the weighted compliance matrix.
"""

from typing import Dict, List, Optional

from loguru import logger

from compliance_engine.config import DEFAULT_CONFIG, EngineConfig
from compliance_engine.models import (
    CATEGORY_WEIGHTS,
    CategoryStatus,
    ComparisonDifference,
    ComparisonResult,
    ComplianceCategory,
    ComplianceMatrix,
    DocumentSection,
    FindingCategory,
    MissingElement,
    Severity,
)
from compliance_engine.utils import round_score


class ComplianceScorer:
    """Builds one ComplianceCategory per fixed category and the weighted overall score"""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def score(
        self,
        comparison: ComparisonResult,
        spec_sections: List[DocumentSection]
    ) -> ComplianceMatrix:
        categories: Dict[FindingCategory, ComplianceCategory] = {
            category: ComplianceCategory(
                category=category,
                name=category.display_name,
                weight=CATEGORY_WEIGHTS[category],
            )
            for category in FindingCategory
        }

        differences_by_spec = index_differences(comparison.differences)
        missing = missing_by_spec(comparison.missing_elements)
        best_match = {}
        for match in comparison.matches:
            # matches arrive best-first per specification section
            best_match.setdefault(match.spec_section_id, match)

        for section in spec_sections:
            record = categories[section.category]
            record.items_checked += 1

            match = best_match.get(section.id)
            if match is not None:
                judged = [
                    d for d in differences_by_spec.get(section.id, [])
                    if d.submittal_section_id == match.submittal_section_id
                ]
                if not any(d.correction_required for d in judged):
                    record.items_passed += 1
                record.critical_failures.extend(
                    d.impact for d in judged if d.severity == Severity.CRITICAL
                )

            element = missing.get(section.id)
            if element is not None and element.criticality == Severity.CRITICAL:
                record.critical_failures.append(
                    f"Missing required section: {element.specification_requirement}"
                )

        for record in categories.values():
            self._finalize(record)

        ordered = list(categories.values())
        total_weight = sum(c.weight for c in ordered)
        overall = round_score(sum(c.score * c.weight for c in ordered) / total_weight)

        severities = [d.severity for d in comparison.differences]

        matrix = ComplianceMatrix(
            overall_score=overall,
            categories=ordered,
            summary=self._summary(ordered, comparison),
            critical_issues=severities.count(Severity.CRITICAL),
            major_issues=severities.count(Severity.MAJOR),
            minor_issues=severities.count(Severity.MINOR),
            compliant_items=sum(
                1 for m in comparison.matches
                if m.match_score > self.config.compliant_match_threshold
            ),
        )

        logger.info(
            f"📊 Compliance matrix: overall {matrix.overall_score}%, "
            f"{matrix.critical_issues} critical / {matrix.major_issues} major / {matrix.minor_issues} minor"
        )
        return matrix

    def _finalize(self, record: ComplianceCategory) -> None:
        if record.items_checked == 0:
            # Unexercised categories never depress the overall score
            record.score = 100
            record.status = CategoryStatus.REVIEW_REQUIRED
            return

        record.score = round_score(record.items_passed / record.items_checked * 100)

        if record.critical_failures:
            record.status = CategoryStatus.FAIL
        elif record.score >= self.config.compliance_pass_score:
            record.status = CategoryStatus.PASS
        elif record.score >= self.config.conditional_pass_score:
            record.status = CategoryStatus.CONDITIONAL
        else:
            record.status = CategoryStatus.FAIL

        if record.status in (CategoryStatus.FAIL, CategoryStatus.CONDITIONAL):
            unmet = record.items_checked - record.items_passed
            if unmet:
                record.recommendations.append(
                    f"Resolve {unmet} unmet requirement(s) in {record.name}"
                )
            if record.critical_failures:
                record.recommendations.append(
                    f"Address {len(record.critical_failures)} critical failure(s) before resubmission"
                )

    @staticmethod
    def _summary(categories: List[ComplianceCategory], comparison: ComparisonResult) -> str:
        passed = sum(1 for c in categories if c.status == CategoryStatus.PASS)
        return (
            f"{passed}/{len(categories)} categories passed. "
            f"{len(comparison.missing_elements)} missing elements identified."
        )


def index_differences(differences: List[ComparisonDifference]) -> Dict[str, List[ComparisonDifference]]:
    """Group differences by specification section id."""
    grouped: Dict[str, List[ComparisonDifference]] = {}
    for difference in differences:
        grouped.setdefault(difference.spec_section_id, []).append(difference)
    return grouped


def missing_by_spec(missing: List[MissingElement]) -> Dict[str, MissingElement]:
    return {m.spec_section_id: m for m in missing}
