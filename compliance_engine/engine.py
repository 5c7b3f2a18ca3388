"""
Submittal Compliance Engine - Analysis Orchestrator

Runs the full comparison pipeline:
    extract -> match/compare -> score -> findings -> risk -> quality
    -> actions -> assemble -> validate

Any failure inside the pipeline is logged and converted into a fail-safe
report; callers always receive a schema-valid result.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from loguru import logger

from compliance_engine.action_items import ActionItemGenerator
from compliance_engine.classifiers import DEFAULT_CLASSIFIER, SectionClassifier
from compliance_engine.compliance_scorer import ComplianceScorer
from compliance_engine.config import DEFAULT_CONFIG, EngineConfig, lowered_conditional_score
from compliance_engine.difference_analyzer import DifferenceAnalyzer
from compliance_engine.error_handler import ErrorSeverity, ErrorStage, log_error, normalize_text
from compliance_engine.findings import FindingBuilder
from compliance_engine.quality_metrics import QualityMetricsCalculator
from compliance_engine.result_assembler import ResultAssembler, fail_safe_result
from compliance_engine.risk_assessor import RiskAssessor
from compliance_engine.schemas import AnalysisReport, SchemaValidator
from compliance_engine.section_extractor import SectionExtractor


class OutcomeStatus(str, Enum):
    COMPLETED = "completed"
    DEGRADED = "degraded"


@dataclass
class AnalysisOutcome:
    """Result of one analysis: a validated report plus how it was produced"""
    status: OutcomeStatus
    report: AnalysisReport
    error: Optional[str] = None
    sanitized: bool = False

    @property
    def degraded(self) -> bool:
        return self.status == OutcomeStatus.DEGRADED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'error': self.error,
            'sanitized': self.sanitized,
            'report': self.report.model_dump(mode="json"),
        }


ConfigInput = Union[EngineConfig, Dict[str, Any], None]


def resolve_config(config: ConfigInput, base: EngineConfig = DEFAULT_CONFIG) -> EngineConfig:
    """Overlay a partial option dict (snake_case or camelCase) on a base config."""
    if config is None:
        return base
    if isinstance(config, EngineConfig):
        return config
    aliases = {f.alias: name for name, f in EngineConfig.model_fields.items() if f.alias}
    overrides = {aliases.get(key, key): value for key, value in config.items()}
    overrides = lowered_conditional_score(base, overrides)
    return EngineConfig(**{**base.model_dump(), **overrides})


class AnalysisEngine:
    """
    Deterministic submittal-vs-specification analysis

    Holds only an immutable config and a stateless classifier, so a single
    instance can be shared between threads.
    """

    def __init__(
        self,
        config: ConfigInput = None,
        classifier: Optional[SectionClassifier] = None
    ):
        self.config = resolve_config(config)
        self.classifier = classifier or DEFAULT_CLASSIFIER
        self.validator = SchemaValidator()

        logger.info(
            f"✅ Analysis engine ready (classifier: {self.classifier.name}, "
            f"strict: {self.config.strict_mode})"
        )

    def analyze(
        self,
        submittal_text: Any,
        specification_text: Any,
        analysis_id: str,
        file_name: Optional[str] = None,
        reference_time: Optional[datetime] = None,
        config: ConfigInput = None
    ) -> AnalysisOutcome:
        """
        Analyze a submittal against its specification

        Args:
            submittal_text: Plain text of the submittal (None / bytes accepted)
            specification_text: Plain text of the governing specification
            analysis_id: Caller-supplied identifier, echoed in the metadata
            file_name: Optional source file name for the metadata
            reference_time: Clock used for timestamps and due dates (default: now)
            config: Per-call overrides on top of the engine config

        Returns:
            AnalysisOutcome (degraded when the fail-safe report was used)
        """
        reference_time = reference_time or datetime.now(timezone.utc)
        started = time.perf_counter()

        logger.info(f"🔍 Starting analysis {analysis_id}")

        stage = ErrorStage.INPUT
        error_message = None
        try:
            config = resolve_config(config, self.config)
            submittal = normalize_text(submittal_text, "submittal_text")
            specification = normalize_text(specification_text, "specification_text")

            stage = ErrorStage.EXTRACTION
            extractor = SectionExtractor(self.classifier)
            submittal_sections = extractor.extract(submittal)
            spec_sections = extractor.extract(specification)
            logger.info(
                f"📑 {len(submittal_sections)} submittal / {len(spec_sections)} specification sections"
            )

            stage = ErrorStage.MATCHING
            comparison = DifferenceAnalyzer(config, self.classifier).compare(
                submittal_sections, spec_sections
            )

            stage = ErrorStage.ANALYSIS
            matrix = ComplianceScorer(config).score(comparison, spec_sections)
            findings = FindingBuilder().build(comparison, reference_time)
            risk = RiskAssessor().assess(findings)
            quality = QualityMetricsCalculator().calculate(
                findings, len(submittal_sections), len(spec_sections)
            )
            actions = ActionItemGenerator().generate(findings, reference_time)

            stage = ErrorStage.ASSEMBLY
            payload = ResultAssembler(config).assemble(
                analysis_id=analysis_id,
                comparison=comparison,
                matrix=matrix,
                findings=findings,
                risk=risk,
                quality=quality,
                actions=actions,
                reference_time=reference_time,
                processing_time_ms=(time.perf_counter() - started) * 1000,
                file_name=file_name,
            )
            status = OutcomeStatus.COMPLETED

        except Exception as e:
            log_error(
                e, stage, ErrorSeverity.HIGH,
                context={'analysis_id': analysis_id, 'file_name': file_name}
            )
            error_message = str(e)
            payload = fail_safe_result(analysis_id, e, reference_time)
            status = OutcomeStatus.DEGRADED

        report, sanitized = self.validator.sanitize_and_validate(payload)

        if status == OutcomeStatus.COMPLETED:
            logger.success(
                f"✅ Analysis {analysis_id} complete: {report.compliance_score}% "
                f"({report.overall_assessment.value})"
            )
        else:
            logger.warning(f"⚠️ Analysis {analysis_id} degraded to fail-safe report")

        return AnalysisOutcome(
            status=status,
            report=report,
            error=error_message,
            sanitized=sanitized,
        )


_engine: Optional[AnalysisEngine] = None


def get_analysis_engine() -> AnalysisEngine:
    """Shared engine built from environment settings."""
    global _engine
    if _engine is None:
        _engine = AnalysisEngine(EngineConfig.from_settings())
    return _engine


def analyze_submittal_compliance(
    submittal_text: Any,
    specification_text: Any,
    analysis_id: str,
    file_name: Optional[str] = None,
    config: ConfigInput = None,
    reference_time: Optional[datetime] = None
) -> AnalysisOutcome:
    """Convenience wrapper around the shared engine."""
    return get_analysis_engine().analyze(
        submittal_text,
        specification_text,
        analysis_id,
        file_name=file_name,
        reference_time=reference_time,
        config=config,
    )
