"""
Test Compliance Scorer
"""

import sys
from pathlib import Path

from loguru import logger

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from compliance_engine.compliance_scorer import ComplianceScorer, index_differences, missing_by_spec
from compliance_engine.config import EngineConfig
from compliance_engine.models import (
    CATEGORY_WEIGHTS,
    CategoryStatus,
    ComparisonDifference,
    ComparisonMatch,
    ComparisonResult,
    DocumentSection,
    FindingCategory,
    MatchType,
    MissingElement,
    Severity,
    validate_category_weights,
)


def make_section(section_id, category):
    return DocumentSection(section_id, section_id.upper(), "body", 1, 2, 1, category)


def make_match(spec_id, score=1.0):
    return ComparisonMatch(f"sub-{spec_id}", spec_id, score, MatchType.EXACT, score)


def make_missing(spec_id, category, criticality=Severity.MAJOR):
    return MissingElement(
        id=f"missing-{spec_id}",
        spec_section_id=spec_id,
        specification_requirement=spec_id.upper(),
        category=category,
        criticality=criticality,
        suggested_action=f"Provide information for: {spec_id.upper()}",
    )


def category_record(matrix, category):
    return next(c for c in matrix.categories if c.category == category)


def test_all_categories_always_present():
    matrix = ComplianceScorer().score(ComparisonResult(), [])

    assert len(matrix.categories) == len(FindingCategory)
    for record in matrix.categories:
        assert record.items_checked == 0
        assert record.score == 100
        assert record.status == CategoryStatus.REVIEW_REQUIRED
    assert matrix.overall_score == 100


def test_score_rounds_half_up_to_conditional():
    logger.info("📊 Test: 5 of 8 requirements met")
    category = FindingCategory.MATERIAL_SPECIFICATIONS
    sections = [make_section(f"req-{n}", category) for n in range(8)]
    comparison = ComparisonResult(
        matches=[make_match(s.id) for s in sections[:5]],
        missing_elements=[make_missing(s.id, category) for s in sections[5:]],
    )

    matrix = ComplianceScorer().score(comparison, sections)
    record = category_record(matrix, category)

    assert record.items_checked == 8
    assert record.items_passed == 5
    assert record.score == 63
    assert record.status == CategoryStatus.CONDITIONAL
    assert record.recommendations
    assert matrix.major_issues == 0
    assert matrix.compliant_items == 5
    assert matrix.summary == "0/10 categories passed. 3 missing elements identified."


def test_lower_pass_score_turns_conditional_into_pass():
    category = FindingCategory.MATERIAL_SPECIFICATIONS
    sections = [make_section(f"req-{n}", category) for n in range(4)]
    comparison = ComparisonResult(
        matches=[make_match(s.id) for s in sections[:3]],
        missing_elements=[make_missing(sections[3].id, category)],
    )

    default = category_record(ComplianceScorer().score(comparison, sections), category)
    relaxed = category_record(
        ComplianceScorer(EngineConfig(compliance_pass_score=75)).score(comparison, sections),
        category,
    )

    assert default.status == CategoryStatus.CONDITIONAL
    assert relaxed.status == CategoryStatus.PASS


def test_critical_failure_fails_category():
    category = FindingCategory.SAFETY_REQUIREMENTS
    sections = [make_section("fire", category), make_section("egress", category)]
    comparison = ComparisonResult(
        matches=[make_match("fire"), make_match("egress")],
        differences=[ComparisonDifference(
            id="diff-fire-sub-fire-values",
            spec_section_id="fire",
            submittal_section_id="sub-fire",
            submittal_content="60 minute",
            specification_requirement="90 minute",
            severity=Severity.CRITICAL,
            category=category,
            impact="Specified value(s) 90 not found in submittal for FIRE",
            correction_required=True,
        )],
    )

    matrix = ComplianceScorer().score(comparison, sections)
    record = category_record(matrix, category)

    assert record.items_passed == 1
    assert record.score == 50
    assert record.status == CategoryStatus.FAIL
    assert record.critical_failures == ["Specified value(s) 90 not found in submittal for FIRE"]
    assert matrix.critical_issues == 1


def test_missing_critical_section_is_a_critical_failure():
    category = FindingCategory.REGULATORY_COMPLIANCE
    sections = [make_section("code", category)]
    comparison = ComparisonResult(
        missing_elements=[make_missing("code", category, Severity.CRITICAL)],
    )

    matrix = ComplianceScorer().score(comparison, sections)
    record = category_record(matrix, category)

    assert record.status == CategoryStatus.FAIL
    assert record.critical_failures == ["Missing required section: CODE"]
    assert matrix.critical_issues == 0


def test_only_best_match_differences_are_judged():
    category = FindingCategory.SAFETY_REQUIREMENTS
    sections = [make_section("fire", category)]
    secondary = ComparisonDifference(
        id="diff-fire-sub-notes-values",
        spec_section_id="fire",
        submittal_section_id="sub-notes",
        submittal_content="a minute",
        specification_requirement="90 minute",
        severity=Severity.CRITICAL,
        category=category,
        impact="Specified value(s) 90 not found in submittal for FIRE",
        correction_required=True,
    )
    comparison = ComparisonResult(
        matches=[
            make_match("fire"),
            ComparisonMatch("sub-notes", "fire", 0.4, MatchType.SEMANTIC, 0.4),
        ],
        differences=[secondary],
    )

    record = category_record(ComplianceScorer().score(comparison, sections), category)

    assert record.items_passed == 1
    assert record.critical_failures == []
    assert record.status == CategoryStatus.PASS


def test_difference_and_missing_indexes():
    category = FindingCategory.DOCUMENTATION
    missing = make_missing("closeout", category)

    assert index_differences([]) == {}
    assert missing_by_spec([missing]) == {"closeout": missing}


def test_overall_score_is_weighted():
    # Safety (1.0) fails completely, everything else unexercised at 100
    category = FindingCategory.SAFETY_REQUIREMENTS
    sections = [make_section("hazard", category)]
    comparison = ComparisonResult(missing_elements=[make_missing("hazard", category)])

    matrix = ComplianceScorer().score(comparison, sections)

    total = sum(CATEGORY_WEIGHTS.values())
    expected = (total - CATEGORY_WEIGHTS[category]) * 100 / total
    assert matrix.overall_score == int(expected + 0.5)


def test_category_weights_table_is_exhaustive():
    validate_category_weights(CATEGORY_WEIGHTS)

    partial = dict(CATEGORY_WEIGHTS)
    partial.pop(FindingCategory.DOCUMENTATION)
    try:
        validate_category_weights(partial)
    except ValueError as e:
        assert "documentation" in str(e)
    else:
        raise AssertionError("incomplete weight table accepted")


if __name__ == "__main__":
    test_all_categories_always_present()
    test_score_rounds_half_up_to_conditional()
    test_lower_pass_score_turns_conditional_into_pass()
    test_critical_failure_fails_category()
    test_missing_critical_section_is_a_critical_failure()
    test_only_best_match_differences_are_judged()
    test_difference_and_missing_indexes()
    test_overall_score_is_weighted()
    test_category_weights_table_is_exhaustive()
