"""
Difference Analyzer

Turns section matches into differences, missing elements and excess elements.
"""

import re
from typing import List, Optional

from loguru import logger

from compliance_engine.classifiers import DEFAULT_CLASSIFIER, SectionClassifier
from compliance_engine.config import DEFAULT_CONFIG, EngineConfig
from compliance_engine.models import (
    ComparisonDifference,
    ComparisonMatch,
    ComparisonResult,
    DocumentSection,
    ExcessElement,
    MatchType,
    Severity,
)
from compliance_engine.section_matcher import SectionMatcher


NUMBER_PATTERN = re.compile(r'\d+(?:\.\d+)?')

DEVIATION_KEYWORDS = (
    "exception", "deviation", "substitute", "substitution", "alternate", "in lieu",
)


class DifferenceAnalyzer:
    """
    Rule-based comparison of paired sections

    Rules applied to the best match of each specification section:
    - value check: specified numbers absent from the submittal
    - deviation check: submittal declares an exception or substitution
    - coverage check: weak (semantic) overlap is a minor, non-blocking deviation
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        classifier: Optional[SectionClassifier] = None,
        matcher: Optional[SectionMatcher] = None
    ):
        self.config = config or DEFAULT_CONFIG
        self.classifier = classifier or DEFAULT_CLASSIFIER
        self.matcher = matcher or SectionMatcher(self.config, self.classifier)

    def compare(
        self,
        submittal_sections: List[DocumentSection],
        spec_sections: List[DocumentSection]
    ) -> ComparisonResult:
        """Run matching and difference analysis over both section lists."""
        submittal_by_id = {s.id: s for s in submittal_sections}
        matches_by_spec, missing = self.matcher.match_all(spec_sections, submittal_sections)

        matches: List[ComparisonMatch] = []
        differences: List[ComparisonDifference] = []

        for spec_section in spec_sections:
            section_matches = matches_by_spec.get(spec_section.id, [])
            matches.extend(section_matches)
            if not section_matches:
                continue

            # secondary matches are recorded but never judged
            best = section_matches[0]
            differences.extend(
                self.analyze_pair(spec_section, submittal_by_id[best.submittal_section_id], best)
            )

        excess = self._excess_elements(submittal_sections, spec_sections, matches)

        result = ComparisonResult(
            matches=matches,
            differences=differences,
            missing_elements=missing,
            excess_elements=excess,
            confidence=self.comparison_confidence(matches, differences),
        )

        logger.info(
            f"🔍 Comparison: {len(matches)} matches, {len(differences)} differences, "
            f"{len(missing)} missing, {len(excess)} excess (confidence {result.confidence:.2f})"
        )
        return result

    def analyze_pair(
        self,
        spec_section: DocumentSection,
        submittal_section: DocumentSection,
        match: ComparisonMatch
    ) -> List[ComparisonDifference]:
        differences = []
        base_id = f"diff-{spec_section.id}-{submittal_section.id}"

        def _difference(suffix: str, severity: Severity, impact: str, correction_required: bool):
            return ComparisonDifference(
                id=f"{base_id}-{suffix}",
                spec_section_id=spec_section.id,
                submittal_section_id=submittal_section.id,
                submittal_content=submittal_section.body,
                specification_requirement=spec_section.body,
                severity=severity,
                category=spec_section.category,
                impact=impact,
                correction_required=correction_required,
                start_line=submittal_section.start_line,
            )

        missing_values = self._missing_values(spec_section.body, submittal_section.body)
        if missing_values:
            if self.config.strict_mode and self.classifier.is_critical(spec_section):
                severity = Severity.CRITICAL
            else:
                severity = Severity.MAJOR
            differences.append(_difference(
                "values",
                severity,
                f"Specified value(s) {', '.join(missing_values)} not found in submittal "
                f"for {spec_section.title}",
                True,
            ))

        submittal_lower = submittal_section.body.lower()
        deviations = [kw for kw in DEVIATION_KEYWORDS if kw in submittal_lower]
        if deviations:
            differences.append(_difference(
                "deviation",
                Severity.MAJOR,
                f"Submittal proposes a deviation ({', '.join(deviations)}) from {spec_section.title}",
                True,
            ))

        if match.match_type == MatchType.SEMANTIC:
            differences.append(_difference(
                "coverage",
                Severity.MINOR,
                "Minor compliance deviation",
                False,
            ))

        return differences

    @staticmethod
    def _missing_values(spec_text: str, submittal_text: str) -> List[str]:
        spec_values = set(NUMBER_PATTERN.findall(spec_text))
        submittal_values = set(NUMBER_PATTERN.findall(submittal_text))
        return sorted(spec_values - submittal_values, key=lambda v: (float(v), v))

    def _excess_elements(
        self,
        submittal_sections: List[DocumentSection],
        spec_sections: List[DocumentSection],
        matches: List[ComparisonMatch]
    ) -> List[ExcessElement]:
        matched_ids = {m.submittal_section_id for m in matches}
        excess = []

        for section in submittal_sections:
            if section.id in matched_ids:
                continue

            relevance = self.classifier.assess_relevance(
                section, self.matcher.best_similarity(section, spec_sections)
            )
            excess.append(ExcessElement(
                id=f"excess-{section.id}",
                submittal_section_id=section.id,
                submittal_content=section.title,
                category=section.category,
                relevance=relevance,
                action=self.classifier.excess_action(relevance),
            ))

        return excess

    @staticmethod
    def comparison_confidence(
        matches: List[ComparisonMatch],
        differences: List[ComparisonDifference]
    ) -> float:
        """Mean match score minus a 0.1 penalty per difference (at most 0.5), floored at 0.1"""
        if not matches:
            return 0.1

        average = sum(m.match_score for m in matches) / len(matches)
        penalty = min(0.5, len(differences) * 0.1)

        return min(1.0, max(0.1, average - penalty))

