"""
Test Error Handling & Configuration
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest
from loguru import logger
from pydantic import ValidationError

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from compliance_engine.classifiers import CATEGORY_KEYWORDS, validate_category_keywords
from compliance_engine.config import EngineConfig
from compliance_engine.engine import resolve_config
from compliance_engine.error_handler import (
    EngineError,
    ErrorSeverity,
    ErrorStage,
    SchemaValidationError,
    log_error,
    normalize_text,
)
from compliance_engine.models import FindingCategory
from compliance_engine.utils import Settings, add_days, round_score, slugify


def test_log_error_returns_error_info():
    logger.info("📝 Test: logging errors...")

    try:
        raise ValueError("Test extraction error")
    except ValueError as e:
        info = log_error(e, ErrorStage.EXTRACTION, ErrorSeverity.HIGH, {'analysis_id': 'a-1'})

    assert info['error_type'] == "ValueError"
    assert info['error_message'] == "Test extraction error"
    assert info['stage'] == "extraction"
    assert info['severity'] == "high"
    assert info['context'] == {'analysis_id': 'a-1'}
    assert "Test extraction error" in info['traceback']


def test_normalize_text():
    assert normalize_text(None) == ""
    assert normalize_text("PART 1") == "PART 1"
    assert normalize_text("Größe".encode("utf-8")) == "Größe"

    with pytest.raises(EngineError) as exc_info:
        normalize_text(42, "submittal_text")
    assert exc_info.value.stage == ErrorStage.INPUT
    assert exc_info.value.details == {'field': 'submittal_text'}


def test_schema_validation_error_stage():
    error = SchemaValidationError("bad report", {'errors': []})

    assert isinstance(error, EngineError)
    assert error.stage == ErrorStage.VALIDATION


def test_engine_config_aliases_and_ranges():
    config = EngineConfig(strictMode=False, compliancePassScore=85)
    assert config.strict_mode is False
    assert config.compliance_pass_score == 85

    with pytest.raises(ValidationError):
        EngineConfig(confidence_threshold=1.5)

    with pytest.raises(ValidationError):
        EngineConfig(compliance_pass_score=50, conditional_pass_score=70)

    with pytest.raises(ValidationError):
        EngineConfig(match_threshold=0.7)


def test_lowered_pass_score_lowers_conditional_score():
    assert EngineConfig(compliance_pass_score=50).conditional_pass_score == 50
    assert EngineConfig(compliancePassScore=70).conditional_pass_score == 60

    config = resolve_config({"compliancePassScore": 50})
    assert config.compliance_pass_score == 50
    assert config.conditional_pass_score == 50

    base = EngineConfig(conditional_pass_score=40)
    assert resolve_config({"compliancePassScore": 70}, base).conditional_pass_score == 40

    settings = Settings(compliance_pass_score=50, _env_file=None)
    assert EngineConfig.from_settings(settings).conditional_pass_score == 50


def test_engine_config_is_frozen():
    config = EngineConfig()
    with pytest.raises(ValidationError):
        config.strict_mode = False


def test_engine_config_from_settings():
    settings = Settings(strict_mode=False, max_critical_issues=9, _env_file=None)
    config = EngineConfig.from_settings(settings)

    assert config.strict_mode is False
    assert config.max_critical_issues == 9
    assert config.match_threshold == 0.30


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("COMPLIANCE_CONFIDENCE_THRESHOLD", "0.55")
    monkeypatch.setenv("COMPLIANCE_API_PORT", "9100")

    settings = Settings(_env_file=None)
    assert settings.confidence_threshold == 0.55
    assert settings.api_port == 9100


def test_category_keywords_reach_every_category():
    validate_category_keywords(CATEGORY_KEYWORDS)

    reduced = [entry for entry in CATEGORY_KEYWORDS if entry[0] != FindingCategory.SAFETY_REQUIREMENTS]
    with pytest.raises(ValueError):
        validate_category_keywords(reduced)


def test_utility_helpers():
    assert slugify("2.1 Materials & Finishes") == "21-materials-finishes"
    assert slugify("!!!") == "section"
    assert len(slugify("X" * 80)) == 50
    assert round_score(62.5) == 63
    assert round_score(62.49) == 62
    assert add_days(datetime(2024, 2, 27), 3) == "2024-03-01"


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
