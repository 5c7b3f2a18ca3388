"""
Submittal Compliance Engine

Rule-based comparison of construction submittals against project specifications.
"""

__version__ = "1.0.0"

from compliance_engine.config import DEFAULT_CONFIG, EngineConfig
from compliance_engine.engine import (
    AnalysisEngine,
    AnalysisOutcome,
    OutcomeStatus,
    analyze_submittal_compliance,
    get_analysis_engine,
)
from compliance_engine.error_handler import EngineError, SchemaValidationError
from compliance_engine.schemas import AnalysisReport, SchemaValidator

__all__ = [
    "AnalysisEngine",
    "AnalysisOutcome",
    "AnalysisReport",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "EngineError",
    "OutcomeStatus",
    "SchemaValidationError",
    "SchemaValidator",
    "analyze_submittal_compliance",
    "get_analysis_engine",
]
