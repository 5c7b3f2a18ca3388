"""
Engine configuration

Thresholds used by matching and scoring. All of them are overridable per
call or through COMPLIANCE_* environment variables.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from compliance_engine.utils import Settings


CONDITIONAL_PASS_SCORE = 60


class EngineConfig(BaseModel):
    """Per-analysis configuration (accepts camelCase aliases)"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    strict_mode: bool = Field(True, alias="strictMode")
    confidence_threshold: float = Field(0.7, ge=0.0, le=1.0, alias="confidenceThreshold")
    max_critical_issues: int = Field(5, ge=0, alias="maxCriticalIssues")
    compliance_pass_score: int = Field(80, ge=0, le=100, alias="compliancePassScore")
    conditional_pass_score: int = Field(CONDITIONAL_PASS_SCORE, ge=0, le=100, alias="conditionalPassScore")

    # Section matching
    match_threshold: float = Field(0.30, ge=0.0, le=1.0, alias="matchThreshold")
    partial_match_threshold: float = Field(0.6, ge=0.0, le=1.0, alias="partialMatchThreshold")
    exact_match_threshold: float = Field(0.8, ge=0.0, le=1.0, alias="exactMatchThreshold")
    compliant_match_threshold: float = Field(0.8, ge=0.0, le=1.0, alias="compliantMatchThreshold")

    @model_validator(mode="before")
    @classmethod
    def _follow_pass_score(cls, data: Any) -> Any:
        # a lowered pass score drags the default conditional score down with it
        if not isinstance(data, dict):
            return data
        if "conditional_pass_score" in data or "conditionalPassScore" in data:
            return data
        pass_score = data.get("compliance_pass_score", data.get("compliancePassScore"))
        if _is_score(pass_score) and pass_score < CONDITIONAL_PASS_SCORE:
            return {**data, "conditional_pass_score": max(pass_score, 0)}
        return data

    @model_validator(mode="after")
    def _check_ordering(self) -> "EngineConfig":
        if self.conditional_pass_score > self.compliance_pass_score:
            raise ValueError("conditional_pass_score must not exceed compliance_pass_score")
        if not self.match_threshold <= self.partial_match_threshold <= self.exact_match_threshold:
            raise ValueError("match thresholds must satisfy match <= partial <= exact")
        return self

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "EngineConfig":
        """Build the defaults from environment-backed settings."""
        settings = settings or Settings()
        return cls(
            strict_mode=settings.strict_mode,
            confidence_threshold=settings.confidence_threshold,
            max_critical_issues=settings.max_critical_issues,
            compliance_pass_score=settings.compliance_pass_score,
            conditional_pass_score=min(settings.conditional_pass_score, settings.compliance_pass_score),
            match_threshold=settings.match_threshold,
        )


def _is_score(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def lowered_conditional_score(base: EngineConfig, overrides: dict) -> dict:
    """Keep the conditional score at or below an overridden pass score unless it is set too."""
    pass_score = overrides.get("compliance_pass_score")
    if "conditional_pass_score" in overrides or not _is_score(pass_score):
        return overrides
    return {**overrides, "conditional_pass_score": max(0, min(base.conditional_pass_score, pass_score))}


DEFAULT_CONFIG = EngineConfig()
