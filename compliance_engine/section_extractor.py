"""
Section Extractor

Splits raw document text into titled, categorized sections.
"""

from typing import Dict, List, Optional

from loguru import logger

from compliance_engine.classifiers import DEFAULT_CLASSIFIER, SectionClassifier
from compliance_engine.models import DocumentSection
from compliance_engine.utils import slugify


FALLBACK_TITLE = "Document"


class SectionExtractor:
    """
    Line-oriented section parser

    Every header line opens a new section, so a header followed directly by
    another header still yields an (empty) requirement slot. Text without any
    header becomes a single section covering all content.
    """

    def __init__(self, classifier: Optional[SectionClassifier] = None):
        self.classifier = classifier or DEFAULT_CLASSIFIER

    def extract(self, text: str) -> List[DocumentSection]:
        """Parse text into an ordered list of sections."""
        lines = (text or "").split("\n")
        used_ids: Dict[str, int] = {}

        sections: List[DocumentSection] = []
        current: Optional[dict] = None
        body_lines: List[str] = []

        for line_number, raw_line in enumerate(lines, 1):
            line = raw_line.strip()

            if self.classifier.is_header(line):
                # Save previous section
                if current:
                    sections.append(self._build(current, body_lines))
                    body_lines = []

                current = {
                    'id': self._unique_id(line, used_ids),
                    'title': line,
                    'start_line': line_number,
                    'end_line': line_number,
                }
            elif current and line:
                body_lines.append(line)
                current['end_line'] = line_number

        # Save last section
        if current:
            sections.append(self._build(current, body_lines))

        if not sections:
            logger.debug("No section headers detected, using single-section fallback")
            return [self._fallback_section(lines)]

        logger.debug(f"📑 Extracted {len(sections)} sections")
        return sections

    def _build(self, current: dict, body_lines: List[str]) -> DocumentSection:
        title = current['title']
        return DocumentSection(
            id=current['id'],
            title=title,
            body="\n".join(body_lines),
            start_line=current['start_line'],
            end_line=current['end_line'],
            level=self.classifier.header_level(title),
            category=self.classifier.categorize(title),
        )

    def _fallback_section(self, lines: List[str]) -> DocumentSection:
        content = [(i, line.strip()) for i, line in enumerate(lines, 1) if line.strip()]
        return DocumentSection(
            id=slugify(FALLBACK_TITLE),
            title=FALLBACK_TITLE,
            body="\n".join(text for _, text in content),
            start_line=content[0][0] if content else 1,
            end_line=content[-1][0] if content else 1,
            level=1,
            category=self.classifier.categorize(FALLBACK_TITLE),
        )

    @staticmethod
    def _unique_id(title: str, used_ids: Dict[str, int]) -> str:
        base = slugify(title)
        candidate = base
        count = used_ids.get(base, 1)
        while candidate in used_ids:
            count += 1
            candidate = f"{base}-{count}"
        used_ids[base] = count
        used_ids[candidate] = 1
        return candidate
