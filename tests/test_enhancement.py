import sys
import unittest
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tailor_engine.enhance.apply import build_tailored_resume  # noqa: E402
from tailor_engine.enhance.diff import word_diff  # noqa: E402
from tailor_engine.enhance.generator import (  # noqa: E402
    append_clause,
    combine_clauses,
    generate_suggestions,
    suggestion_delta,
)
from tailor_engine.features.requirement_extractor import extract_requirements  # noqa: E402
from tailor_engine.features.resume_index import build_resume_index  # noqa: E402
from tailor_engine.normalize.text import normalize_text  # noqa: E402
from tailor_engine.schemas import ResumeDocument, TailoringOptions  # noqa: E402
from tailor_engine.semantic.matcher import match_requirements  # noqa: E402


def _resume(bullets, skills=None, summary=None):
    sections = []
    if summary is not None:
        sections.append({"kind": "summary", "content": summary})
    if bullets is not None:
        sections.append(
            {
                "kind": "experience",
                "entries": [{"title": "Platform Engineer", "start_date": "2021-01", "end_date": "2024-01", "bullets": bullets}],
            }
        )
    if skills is not None:
        sections.append({"kind": "skills", "items": skills})
    return ResumeDocument.model_validate({"sections": sections})


def _suggest(posting, resume, options=None):
    requirements = extract_requirements(normalize_text(posting))
    index = build_resume_index(resume, reference_date=date(2026, 1, 1))
    matches = match_requirements(requirements, index)
    return requirements, generate_suggestions(requirements, matches, resume, index, options=options)


def _rebuilt(segments):
    return "".join(segment.text for segment in segments if segment.op != "delete")


class GeneratorTests(unittest.TestCase):
    def test_delta_formula(self):
        self.assertEqual(suggestion_delta(1.0, 0.0, 3.0), 33.3333)
        self.assertEqual(suggestion_delta(0.5, 0.5, 2.0), 12.5)
        self.assertEqual(suggestion_delta(1.0, 0.0, 0.0), 0.0)

    def test_clause_helpers_keep_original_wording(self):
        self.assertEqual(
            append_clause("Deployed services on Kubernetes.", "using Docker"),
            "Deployed services on Kubernetes, using Docker.",
        )
        self.assertEqual(
            combine_clauses(["using Docker", "using Terraform", "demonstrating leadership"]),
            "using Docker and Terraform, demonstrating leadership",
        )

    def test_certification_gets_acknowledge_gap_only(self):
        _, suggestions = _suggest("Requirements: AWS Certified", _resume(["Deployed Python services on Kubernetes"]))
        self.assertEqual(len(suggestions), 1)
        self.assertEqual(suggestions[0].kind, "acknowledge-gap")
        self.assertIsNone(suggestions[0].proposed_text)
        self.assertEqual(suggestions[0].delta, 100.0)

    def test_adjacent_bullet_is_rewritten_for_missing_tool(self):
        resume = _resume(["Wrote onboarding guides", "Deployed Python services on Kubernetes."])
        _, suggestions = _suggest("Requirements: Docker", resume)
        suggestion = suggestions[0]
        self.assertEqual(suggestion.kind, "rewrite")
        self.assertEqual(suggestion.location.bullet_index, 1)
        self.assertEqual(suggestion.original_text, "Deployed Python services on Kubernetes.")
        self.assertEqual(suggestion.proposed_text, "Deployed Python services on Kubernetes, using Docker.")
        self.assertEqual(_rebuilt(suggestion.diff), suggestion.proposed_text)

    def test_near_miss_bullet_is_preferred(self):
        resume = _resume(["Created visualization dashboards for sales", "Deployed Python services on Kubernetes"])
        _, suggestions = _suggest("Requirements: data visualization", resume)
        self.assertEqual(suggestions[0].kind, "rewrite")
        self.assertEqual(suggestions[0].location.bullet_index, 0)

    def test_skill_is_added_to_skills_section_without_adjacent_bullet(self):
        resume = _resume(["Wrote onboarding guides"], skills=["Python"])
        _, suggestions = _suggest("Requirements: Terraform", resume)
        self.assertEqual(suggestions[0].kind, "add-skill")
        self.assertEqual(suggestions[0].location.section, "skills")
        self.assertEqual(suggestions[0].location.bullet_index, 1)
        self.assertTrue(suggestions[0].location.is_new)

    def test_soft_skill_without_cues_adds_a_bullet(self):
        resume = _resume(["Wrote onboarding guides"], skills=["Python"])
        _, suggestions = _suggest("Requirements: leadership", resume)
        self.assertEqual(suggestions[0].kind, "add-bullet")
        self.assertEqual(suggestions[0].location.section, "experience")
        self.assertEqual(suggestions[0].location.entry_index, 0)
        self.assertIn("leadership", suggestions[0].proposed_text)

    def test_ordering_by_delta_then_extraction_order(self):
        resume = _resume(["Deployed Python services on Kubernetes"])
        requirements, suggestions = _suggest(
            "Kafka is a plus.\nRequirements: Docker, Terraform",
            resume,
        )
        by_id = {requirement.id: requirement.text for requirement in requirements}
        self.assertEqual([by_id[item.requirement_id] for item in suggestions], ["Docker", "Terraform", "Kafka"])
        self.assertEqual([item.id for item in suggestions], ["s1", "s2", "s3"])
        deltas = [item.delta for item in suggestions]
        self.assertEqual(deltas, sorted(deltas, reverse=True))

    def test_matched_requirements_get_no_suggestion(self):
        _, suggestions = _suggest("Requirements: Python", _resume(["Deployed Python services"]))
        self.assertEqual(suggestions, [])

    def test_intensity_keeps_top_share_and_all_gap_flags(self):
        resume = _resume(["Deployed Python services on Kubernetes"])
        posting = "Requirements: Docker, Terraform, Kafka, PMP"
        _, full = _suggest(posting, resume)
        _, none = _suggest(posting, resume, TailoringOptions(intensity=0))
        _, half = _suggest(posting, resume, TailoringOptions(intensity=50))
        self.assertEqual(len(full), 4)
        self.assertEqual([item.kind for item in none], ["acknowledge-gap"])
        self.assertEqual(sum(1 for item in half if item.kind != "acknowledge-gap"), 2)


class TailoredResumeTests(unittest.TestCase):
    def test_rewrites_of_one_bullet_combine_and_keep_provenance(self):
        resume = _resume(["Deployed Python services on Kubernetes."])
        requirements, suggestions = _suggest("Requirements: Docker, Terraform", resume)
        tailored = build_tailored_resume(resume, suggestions)

        bullets = tailored.resume.sections[0].entries[0].bullets
        self.assertEqual(bullets, ["Deployed Python services on Kubernetes, using Docker and Terraform."])
        self.assertEqual(len(tailored.modifications), 1)
        modification = tailored.modifications[0]
        self.assertEqual(modification.requirement_ids, [requirement.id for requirement in requirements])
        self.assertEqual(modification.suggestion_ids, ["s1", "s2"])
        self.assertEqual(_rebuilt(modification.diff), modification.text)
        self.assertEqual(resume.sections[0].entries[0].bullets, ["Deployed Python services on Kubernetes."])

    def test_additions_append_and_gap_flags_change_nothing(self):
        resume = _resume(["Wrote onboarding guides"], skills=["Python"])
        _, suggestions = _suggest("Requirements: Terraform, Ansible, PMP", resume)
        tailored = build_tailored_resume(resume, suggestions)
        self.assertEqual(tailored.resume.sections[1].items, ["Python", "Terraform", "Ansible"])
        self.assertEqual(len(tailored.modifications), 2)
        self.assertEqual([item.location.bullet_index for item in tailored.modifications], [1, 2])

    def test_new_skills_section_is_created_when_resume_has_none(self):
        resume = ResumeDocument.model_validate({"sections": [{"kind": "certifications", "items": ["CPA"]}]})
        _, suggestions = _suggest("Requirements: Terraform", resume)
        tailored = build_tailored_resume(resume, suggestions)
        self.assertEqual(tailored.resume.sections[-1].kind, "skills")
        self.assertEqual(tailored.resume.sections[-1].items, ["Terraform"])
        self.assertEqual(tailored.modifications[0].location.section_position, 1)

    def test_word_diff_marks_insertions(self):
        segments = word_diff("Led a team", "Led a large team")
        self.assertEqual([segment.op for segment in segments], ["equal", "insert", "equal"])
        self.assertEqual(word_diff(None, "New bullet")[0].op, "insert")


if __name__ == "__main__":
    unittest.main()
