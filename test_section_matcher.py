"""
Test Section Matcher
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from compliance_engine.config import EngineConfig
from compliance_engine.models import DocumentSection, FindingCategory, MatchType, Severity
from compliance_engine.section_matcher import SectionMatcher, jaccard_similarity


def make_section(section_id, body, title=None, category=FindingCategory.DOCUMENTATION):
    return DocumentSection(
        id=section_id,
        title=title or section_id.upper(),
        body=body,
        start_line=1,
        end_line=2,
        level=1,
        category=category,
    )


def fixed_scores(scores):
    """Similarity stub keyed by submittal section id"""
    return lambda spec, submittal: scores[submittal.id]


def test_jaccard_similarity():
    spec = make_section("spec", "a b c")
    submittal = make_section("sub", "B c D")

    assert jaccard_similarity(spec, submittal) == 0.5
    assert jaccard_similarity(spec, spec) == 1.0
    assert jaccard_similarity(make_section("x", ""), make_section("y", "")) == 0.0
    assert jaccard_similarity(spec, make_section("z", "")) == 0.0


def test_fire_rating_pair_scores_half():
    spec = make_section("fire", "Door shall have 90 minute fire rating.")
    submittal = make_section("fire", "Door has 90 minute fire rating. UL Listed.")

    # 5 shared tokens out of 10 distinct
    assert jaccard_similarity(spec, submittal) == 0.5


def test_match_type_boundaries():
    matcher = SectionMatcher()

    assert matcher.match_type(0.95) == MatchType.EXACT
    assert matcher.match_type(0.8) == MatchType.PARTIAL
    assert matcher.match_type(0.7) == MatchType.PARTIAL
    assert matcher.match_type(0.6) == MatchType.SEMANTIC
    assert matcher.match_type(0.31) == MatchType.SEMANTIC


def test_find_matches_threshold_and_order():
    submittals = [make_section(name, "") for name in ("low", "edge", "mid", "tie", "top")]
    matcher = SectionMatcher(similarity=fixed_scores({
        "low": 0.1, "edge": 0.30, "mid": 0.5, "tie": 0.5, "top": 0.9,
    }))

    matches = matcher.find_matches(make_section("req", "anything"), submittals)

    # 0.30 itself is not accepted; equal scores keep submittal order
    assert [m.submittal_section_id for m in matches] == ["top", "mid", "tie"]
    assert matches[0].match_type == MatchType.EXACT
    assert all(m.confidence == m.match_score for m in matches)


def test_threshold_is_configurable():
    submittals = [make_section("weak", "")]
    scores = fixed_scores({"weak": 0.2})

    assert SectionMatcher(similarity=scores).find_matches(make_section("req", ""), submittals) == []

    relaxed = EngineConfig(match_threshold=0.1)
    matches = SectionMatcher(relaxed, similarity=scores).find_matches(make_section("req", ""), submittals)
    assert len(matches) == 1


def test_missing_element_criticality():
    matcher = SectionMatcher()

    critical = matcher.missing_element(make_section("anchors", "Anchors shall be embedded 4 inches."))
    assert critical.criticality == Severity.CRITICAL
    assert critical.id == "missing-anchors"
    assert critical.suggested_action == "Provide information for: ANCHORS"
    assert critical.correction_required is True

    major = matcher.missing_element(make_section("closers", "Provide closers at all doors."))
    assert major.criticality == Severity.MAJOR


def test_match_all_splits_matches_and_missing():
    spec_sections = [
        make_section("frames", "galvanized steel frames"),
        make_section("warranty", "two year warranty"),
    ]
    submittal_sections = [make_section("frames", "galvanized steel frames")]

    matches, missing = SectionMatcher().match_all(spec_sections, submittal_sections)

    assert list(matches) == ["frames"]
    assert matches["frames"][0].match_score == 1.0
    assert [m.spec_section_id for m in missing] == ["warranty"]


if __name__ == "__main__":
    test_jaccard_similarity()
    test_fire_rating_pair_scores_half()
    test_match_type_boundaries()
    test_find_matches_threshold_and_order()
    test_threshold_is_configurable()
    test_missing_element_criticality()
    test_match_all_splits_matches_and_missing()
    print("✅ Section matcher tests passed")
