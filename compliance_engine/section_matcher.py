"""
Section Matcher

Pairs specification sections with submittal sections by token overlap.
"""

from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger

from compliance_engine.classifiers import DEFAULT_CLASSIFIER, SectionClassifier
from compliance_engine.config import DEFAULT_CONFIG, EngineConfig
from compliance_engine.models import (
    ComparisonMatch,
    DocumentSection,
    MatchType,
    MissingElement,
)
from compliance_engine.utils import tokenize


SimilarityFunc = Callable[[DocumentSection, DocumentSection], float]


def jaccard_similarity(spec_section: DocumentSection, submittal_section: DocumentSection) -> float:
    """
    |intersection| / |union| of lowercase whitespace tokens of both bodies

    Two empty bodies share nothing and score 0.
    """
    spec_words = tokenize(spec_section.body)
    submittal_words = tokenize(submittal_section.body)

    union = spec_words | submittal_words
    if not union:
        return 0.0

    return len(spec_words & submittal_words) / len(union)


class SectionMatcher:
    """Scores every (specification, submittal) pair and keeps those above threshold"""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        classifier: Optional[SectionClassifier] = None,
        similarity: Optional[SimilarityFunc] = None
    ):
        self.config = config or DEFAULT_CONFIG
        self.classifier = classifier or DEFAULT_CLASSIFIER
        self.similarity = similarity or jaccard_similarity

    def match_type(self, score: float) -> MatchType:
        if score > self.config.exact_match_threshold:
            return MatchType.EXACT
        if score > self.config.partial_match_threshold:
            return MatchType.PARTIAL
        return MatchType.SEMANTIC

    def find_matches(
        self,
        spec_section: DocumentSection,
        submittal_sections: List[DocumentSection]
    ) -> List[ComparisonMatch]:
        """Accepted matches for one specification section, best first."""
        matches = []

        for submittal_section in submittal_sections:
            score = self.similarity(spec_section, submittal_section)

            if score > self.config.match_threshold:
                matches.append(ComparisonMatch(
                    submittal_section_id=submittal_section.id,
                    spec_section_id=spec_section.id,
                    match_score=score,
                    match_type=self.match_type(score),
                    confidence=score,
                ))

        # sorted() is stable, ties keep submittal order
        return sorted(matches, key=lambda m: m.match_score, reverse=True)

    def missing_element(self, spec_section: DocumentSection) -> MissingElement:
        return MissingElement(
            id=f"missing-{spec_section.id}",
            spec_section_id=spec_section.id,
            specification_requirement=spec_section.title,
            category=spec_section.category,
            criticality=self.classifier.criticality(spec_section),
            suggested_action=f"Provide information for: {spec_section.title}",
            start_line=spec_section.start_line,
        )

    def match_all(
        self,
        spec_sections: List[DocumentSection],
        submittal_sections: List[DocumentSection]
    ) -> Tuple[Dict[str, List[ComparisonMatch]], List[MissingElement]]:
        """
        Match every specification section

        Returns:
            (matches keyed by specification section id, missing elements)
        """
        matches_by_spec: Dict[str, List[ComparisonMatch]] = {}
        missing: List[MissingElement] = []

        for spec_section in spec_sections:
            matches = self.find_matches(spec_section, submittal_sections)
            if matches:
                matches_by_spec[spec_section.id] = matches
            else:
                missing.append(self.missing_element(spec_section))

        logger.debug(
            f"🔗 Matched {len(matches_by_spec)}/{len(spec_sections)} specification sections, "
            f"{len(missing)} missing"
        )
        return matches_by_spec, missing

    def best_similarity(
        self,
        submittal_section: DocumentSection,
        spec_sections: List[DocumentSection]
    ) -> float:
        """Highest similarity of a submittal section against any requirement."""
        scores = [self.similarity(spec, submittal_section) for spec in spec_sections]
        return max(scores, default=0.0)
