"""
Test Report Schema Validation & Sanitization
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from compliance_engine.engine import AnalysisEngine
from compliance_engine.error_handler import SchemaValidationError
from compliance_engine.models import OverallAssessment, RiskLevel
from compliance_engine.result_assembler import fail_safe_result
from compliance_engine.schemas import SchemaValidator


REFERENCE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

VALID_FINDING = {
    "id": "f1",
    "category": "safety-requirements",
    "severity": "major",
    "title": "Fire rating",
    "description": "Rating not stated",
    "location": {"excerpt": "Door has fire rating"},
    "compliance": "non-compliant",
    "confidence": 0.8,
}


@pytest.fixture
def validator():
    return SchemaValidator()


@pytest.fixture
def report():
    outcome = AnalysisEngine().analyze(
        "1. FIRE RATING\nDoor has 60 minute fire rating. UL Listed.",
        "1. FIRE RATING\nDoor shall have 90 minute fire rating.",
        "schema-test",
        reference_time=REFERENCE_TIME,
    )
    return outcome.report


def test_valid_report_is_returned_unchanged(validator, report):
    validated, sanitized = validator.sanitize_and_validate(report)

    assert validated is report
    assert sanitized is False


def test_sanitizing_a_valid_payload_is_idempotent(validator, report):
    dump = report.model_dump(mode="json")

    resanitized = validator.validate(validator.sanitize(dump)).model_dump(mode="json")
    assert resanitized == dump

    again, sanitized = validator.sanitize_and_validate(dump)
    assert sanitized is False
    assert again.model_dump(mode="json") == dump


def test_fail_safe_payload_is_valid(validator):
    validated, sanitized = validator.sanitize_and_validate(
        fail_safe_result("broken", RuntimeError("boom"), REFERENCE_TIME)
    )

    assert sanitized is False
    assert validated.metadata.reviewer_notes == "Error: boom"
    assert validated.compliance_matrix.categories == []


def test_invalid_fields_get_defaults(validator):
    payload = {
        "compliance_score": 150,
        "overall_assessment": "bogus",
        "summary": None,
        "findings": [VALID_FINDING, {"id": "incomplete"}],
        "recommendations": "not a list",
        "confidence": "high",
        "quality_metrics": {"clarity": -5, "completeness": "n/a"},
    }

    report, sanitized = validator.sanitize_and_validate(payload)

    assert sanitized is True
    assert report.compliance_score == 100
    assert report.overall_assessment == OverallAssessment.REQUIRES_REVIEW
    assert report.summary == "Analysis completed"
    assert [f.id for f in report.findings] == ["f1"]
    assert report.recommendations == []
    assert report.confidence == 0.5

    assert report.metadata.analysis_id.startswith("analysis-")
    assert report.metadata.model_used == "unknown"
    assert report.metadata.analysis_type == "review"
    assert report.metadata.complexity == "standard"
    assert report.metadata.confidence_score == 0.5

    assert report.compliance_matrix.summary == "Analysis completed"
    assert report.compliance_matrix.overall_score == 0
    assert report.risk_assessment.overall_risk == RiskLevel.MEDIUM
    assert report.risk_assessment.residual_risk == RiskLevel.MEDIUM

    assert report.quality_metrics.clarity == 0
    assert report.quality_metrics.completeness == 70
    assert report.quality_metrics.overall_quality == 70


def test_out_of_range_confidence_is_clamped(validator):
    report, _ = validator.sanitize_and_validate({"confidence": 3.5, "compliance_score": -4.6})

    assert report.confidence == 1.0
    assert report.compliance_score == 0


def test_non_mapping_payload_uses_default_result(validator):
    report, sanitized = validator.sanitize_and_validate(["not", "a", "report"])

    assert sanitized is True
    assert report.summary == "Analysis failed - default result provided"
    assert report.compliance_score == 0
    assert report.risk_assessment.overall_risk == RiskLevel.HIGH


def test_validate_raises_schema_validation_error(validator):
    with pytest.raises(SchemaValidationError) as exc_info:
        validator.validate({"compliance_score": 10})

    assert exc_info.value.details['errors']


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
