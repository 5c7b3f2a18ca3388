"""
Section classification strategies

Header detection, hierarchy level, category assignment, criticality and
relevance are delegated to a SectionClassifier so that scoring and aggregation
never depend on a particular heuristic. KeywordSectionClassifier is the default
keyword/regex strategy.
"""

import re
from abc import ABC, abstractmethod
from typing import List, Tuple

from compliance_engine.models import (
    DocumentSection,
    ExcessAction,
    FindingCategory,
    Relevance,
    Severity,
)


# Ordered: the first category whose keyword occurs in the title wins
CATEGORY_KEYWORDS: List[Tuple[FindingCategory, Tuple[str, ...]]] = [
    (FindingCategory.MATERIAL_SPECIFICATIONS, ("material", "product")),
    (FindingCategory.DIMENSIONAL_REQUIREMENTS, ("dimension", "size")),
    (FindingCategory.PERFORMANCE_STANDARDS, ("performance", "standard")),
    (FindingCategory.TESTING_REQUIREMENTS, ("test", "verification")),
    (FindingCategory.INSTALLATION_PROCEDURES, ("install", "application")),
    (FindingCategory.QUALITY_CONTROL, ("quality", "control")),
    (FindingCategory.SAFETY_REQUIREMENTS, ("safety", "hazard", "fire")),
    (FindingCategory.REGULATORY_COMPLIANCE, ("code", "regulation")),
    (FindingCategory.ENVIRONMENTAL_CONSIDERATIONS, ("environment", "green")),
]

DEFAULT_CATEGORY = FindingCategory.DOCUMENTATION

CRITICAL_KEYWORDS = ("safety", "structural", "fire", "code", "required", "shall")

HEADER_KEYWORDS = ("SECTION", "PART", "SPECIFICATION")

RELEVANCE_ACTIONS = {
    Relevance.RELEVANT: ExcessAction.ACCEPT,
    Relevance.UNCLEAR: ExcessAction.CLARIFY,
    Relevance.IRRELEVANT: ExcessAction.REMOVE,
}


def validate_category_keywords(table: List[Tuple[FindingCategory, Tuple[str, ...]]]) -> None:
    """Raise unless every category is reachable, either by keyword or as the default."""
    reachable = {category for category, _ in table} | {DEFAULT_CATEGORY}
    unreachable = [c.value for c in FindingCategory if c not in reachable]
    if unreachable:
        raise ValueError(f"Unreachable categories: {unreachable}")


validate_category_keywords(CATEGORY_KEYWORDS)


class SectionClassifier(ABC):
    """Strategy interface for section-level heuristics"""

    name = "abstract"

    @abstractmethod
    def is_header(self, line: str) -> bool:
        """Whether a trimmed line starts a new section."""

    @abstractmethod
    def header_level(self, title: str) -> int:
        """Hierarchy level (1-3) of a header line."""

    @abstractmethod
    def categorize(self, title: str) -> FindingCategory:
        """Category of a section from its title."""

    @abstractmethod
    def is_critical(self, section: DocumentSection) -> bool:
        """Whether a requirement is safety or code critical."""

    @abstractmethod
    def assess_relevance(self, section: DocumentSection, best_similarity: float) -> Relevance:
        """Relevance of submittal content that matched no requirement."""

    def criticality(self, section: DocumentSection) -> Severity:
        return Severity.CRITICAL if self.is_critical(section) else Severity.MAJOR

    def excess_action(self, relevance: Relevance) -> ExcessAction:
        return RELEVANCE_ACTIONS[relevance]


class KeywordSectionClassifier(SectionClassifier):
    """
    Keyword and numbering based classifier

    Headers:
    - ALL-CAPS lines ("FIRE RATING", "PART 2 - PRODUCTS:")
    - Numbered headings ("1. General", "2.1 Submittals", "2.1.3 Hardware")
    - Lines containing SECTION / PART / SPECIFICATION
    """

    name = "keyword"

    def __init__(self):
        self.numbered_pattern = re.compile(r'^\d+\.(?:\d+\.?){0,2}\s+[A-Z]')
        self.level_patterns = [
            (3, re.compile(r'^\d+\.\d+\.\d+')),
            (2, re.compile(r'^\d+\.\d+')),
            (1, re.compile(r'^\d+\.')),
        ]

    def is_header(self, line: str) -> bool:
        if not line:
            return False

        if self._is_all_caps(line):
            return True

        if self.numbered_pattern.match(line):
            return True

        return any(keyword in line for keyword in HEADER_KEYWORDS)

    @staticmethod
    def _is_all_caps(line: str) -> bool:
        letters = [ch for ch in line if ch.isalpha()]
        if len(letters) < 2:
            return False
        return not any(ch.islower() for ch in letters)

    def header_level(self, title: str) -> int:
        for level, pattern in self.level_patterns:
            if pattern.match(title):
                return level
        return 1

    def categorize(self, title: str) -> FindingCategory:
        title_lower = title.lower()
        for category, keywords in CATEGORY_KEYWORDS:
            if any(keyword in title_lower for keyword in keywords):
                return category
        return DEFAULT_CATEGORY

    def is_critical(self, section: DocumentSection) -> bool:
        body = section.body.lower()
        return any(keyword in body for keyword in CRITICAL_KEYWORDS)

    def assess_relevance(self, section: DocumentSection, best_similarity: float) -> Relevance:
        if not section.body.strip():
            return Relevance.UNCLEAR
        if section.category != DEFAULT_CATEGORY or best_similarity > 0:
            return Relevance.RELEVANT
        return Relevance.IRRELEVANT


DEFAULT_CLASSIFIER = KeywordSectionClassifier()
