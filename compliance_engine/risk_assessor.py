"""
Risk Assessor

Derives risk factors and paired mitigation strategies from finding severities.
"""

from typing import List

from loguru import logger

from compliance_engine.models import (
    DetailedFinding,
    Level,
    MitigationStrategy,
    RiskAssessment,
    RiskFactor,
    RiskLevel,
    Severity,
)


# Post-mitigation risk is not derived from the strategies yet
RESIDUAL_RISK = RiskLevel.MEDIUM

# More than this many major findings raises a schedule risk
MAJOR_FINDINGS_DELAY_LIMIT = 2


def overall_risk_level(max_score: int) -> RiskLevel:
    if max_score >= 8:
        return RiskLevel.CRITICAL
    if max_score >= 6:
        return RiskLevel.HIGH
    if max_score >= 4:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


class RiskAssessor:

    def assess(self, findings: List[DetailedFinding]) -> RiskAssessment:
        risk_factors: List[RiskFactor] = []
        mitigation_strategies: List[MitigationStrategy] = []

        critical = [f for f in findings if f.severity == Severity.CRITICAL]
        major = [f for f in findings if f.severity == Severity.MAJOR]

        if critical:
            risk_factors.append(RiskFactor(
                id="compliance-risk",
                category="Compliance Risk",
                description=f"{len(critical)} critical compliance issues identified",
                probability=Level.HIGH,
                impact=RiskLevel.CRITICAL,
                risk_score=9,
                mitigation_required=True,
            ))
            mitigation_strategies.append(MitigationStrategy(
                risk_id="compliance-risk",
                strategy="Immediate revision of submittal to address critical issues",
                implementation_effort=Level.HIGH,
                effectiveness=Level.HIGH,
                timeline="1-2 weeks",
                responsible_party="Design Team",
            ))

        if len(major) > MAJOR_FINDINGS_DELAY_LIMIT:
            risk_factors.append(RiskFactor(
                id="project-delay-risk",
                category="Project Delay Risk",
                description="Multiple major issues may cause project delays",
                probability=Level.MEDIUM,
                impact=RiskLevel.HIGH,
                risk_score=6,
                mitigation_required=True,
            ))
            mitigation_strategies.append(MitigationStrategy(
                risk_id="project-delay-risk",
                strategy="Sequence major revisions and hold a coordination review before resubmission",
                implementation_effort=Level.MEDIUM,
                effectiveness=Level.MEDIUM,
                timeline="2-3 weeks",
                responsible_party="Project Manager",
            ))

        max_score = max((rf.risk_score for rf in risk_factors), default=0)
        assessment = RiskAssessment(
            overall_risk=overall_risk_level(max_score),
            risk_factors=risk_factors,
            mitigation_strategies=mitigation_strategies,
            residual_risk=RESIDUAL_RISK,
        )

        logger.debug(f"⚠️ Overall risk: {assessment.overall_risk.value} ({len(risk_factors)} factors)")
        return assessment
