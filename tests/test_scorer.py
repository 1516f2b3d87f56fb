import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tailor_engine.normalize.text import normalize_text  # noqa: E402
from tailor_engine.schemas import EnhancementSuggestion, MatchResult, Requirement  # noqa: E402
from tailor_engine.scoring.feedback import build_feedback, build_keyword_matches  # noqa: E402
from tailor_engine.scoring.scorer import compute_score, project_score  # noqa: E402


def _requirement(rid, text, weight=1.0, category="skill"):
    return Requirement(id=rid, text=text, key=text.lower(), category=category, weight=weight, source_text=text)


def _match(rid, confidence, status):
    return MatchResult(requirement_id=rid, confidence=confidence, status=status)


class ScorerTests(unittest.TestCase):
    def test_no_requirements_scores_full_marks(self):
        score, breakdown = compute_score([], [])
        self.assertEqual(score, 100.0)
        self.assertEqual(breakdown.total_weight, 0.0)

    def test_weighted_average_of_confidence(self):
        requirements = [_requirement("r1", "python"), _requirement("r2", "docker", weight=0.5)]
        matches = [_match("r1", 1.0, "matched"), _match("r2", 0.4, "partial")]
        score, breakdown = compute_score(requirements, matches)
        self.assertEqual(score, 80.0)
        self.assertAlmostEqual(breakdown.earned_weight + breakdown.missing_weight, breakdown.total_weight)

    def test_breakdown_scores_each_category(self):
        requirements = [
            _requirement("r1", "python"),
            _requirement("r2", "docker", weight=0.5, category="tool"),
            _requirement("r3", "terraform", category="tool"),
            _requirement("r4", "pmp", category="certification"),
        ]
        matches = [
            _match("r1", 1.0, "matched"),
            _match("r2", 1.0, "matched"),
            _match("r3", 0.4, "partial"),
            _match("r4", 0.0, "unmatched"),
        ]
        _, breakdown = compute_score(requirements, matches)
        self.assertEqual(breakdown.category_scores, {"skill": 100.0, "tool": 60.0, "certification": 0.0})
        self.assertEqual(compute_score([], [])[1].category_scores, {})

    def test_projected_score_ignores_acknowledge_gap(self):
        requirements = [_requirement("r1", "python"), _requirement("r2", "pmp", category="certification")]
        matches = [_match("r1", 0.0, "unmatched"), _match("r2", 0.0, "unmatched")]
        suggestions = [
            EnhancementSuggestion(id="s1", requirement_id="r1", kind="add-skill", proposed_text="Python", delta=50.0, rationale="x"),
            EnhancementSuggestion(id="s2", requirement_id="r2", kind="acknowledge-gap", delta=50.0, rationale="x"),
        ]
        self.assertEqual(project_score(requirements, matches, suggestions), 50.0)
        self.assertEqual(project_score(requirements, matches, []), 0.0)


class FeedbackTests(unittest.TestCase):
    def test_keywords_report_found_importance_and_frequency(self):
        requirements = [_requirement("r1", "python"), _requirement("r2", "docker", weight=0.5)]
        matches = [_match("r1", 1.0, "matched"), _match("r2", 0.0, "unmatched")]
        normalized = normalize_text("Python and Docker. More Python please.")
        keywords = build_keyword_matches(requirements, matches, normalized)
        self.assertEqual([(item.keyword, item.found, item.importance) for item in keywords], [
            ("python", True, "high"),
            ("docker", False, "low"),
        ])
        self.assertEqual(keywords[0].frequency, 2)

    def test_feedback_flags_missing_credentials(self):
        requirements = [_requirement("r1", "PMP", category="certification"), _requirement("r2", "python")]
        matches = [_match("r1", 0.0, "unmatched"), _match("r2", 0.0, "unmatched")]
        items = build_feedback(0.0, requirements, matches)
        self.assertEqual(items[0].category, "Overall")
        self.assertEqual(items[0].severity, "high")
        self.assertEqual([item.category for item in items[1:]], ["Qualifications", "Keywords"])


if __name__ == "__main__":
    unittest.main()
