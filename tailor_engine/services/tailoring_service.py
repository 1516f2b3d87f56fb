from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from tailor_engine.core.config import settings
from tailor_engine.enhance.apply import build_tailored_resume
from tailor_engine.enhance.generator import generate_suggestions
from tailor_engine.features.posting_profile import build_posting_profile
from tailor_engine.features.requirement_extractor import extract_requirements
from tailor_engine.features.resume_index import build_resume_index
from tailor_engine.normalize.text import normalize_text, validate_text
from tailor_engine.schemas import (
    AnalysisNote,
    AnalysisResult,
    JobPosting,
    ResumeDocument,
    TailoringOptions,
)
from tailor_engine.scoring.feedback import build_feedback, build_keyword_matches
from tailor_engine.scoring.scorer import compute_score, project_score
from tailor_engine.semantic.matcher import match_requirements
from tailor_engine.taxonomy import LexiconProvider, get_default_lexicon

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[dict[str, Any]], None]
CancelCheck = Callable[[], bool]

_STAGE_FLOW: dict[str | None, set[str]] = {
    None: {"validating"},
    "validating": {"normalizing", "failed"},
    "normalizing": {"extracting"},
    "extracting": {"indexing"},
    "indexing": {"matching"},
    "matching": {"scoring"},
    "scoring": {"enhancing"},
    "enhancing": {"complete"},
    "complete": set(),
    "failed": set(),
}

_STAGE_LABELS = {
    "validating": ("Checking your inputs", 5),
    "normalizing": ("Reading the job posting", 15),
    "extracting": ("Finding the posting's requirements", 30),
    "indexing": ("Indexing your resume", 45),
    "matching": ("Matching requirements to your experience", 60),
    "scoring": ("Scoring ATS compatibility", 75),
    "enhancing": ("Drafting improvements", 90),
    "complete": ("Analysis ready", 100),
    "failed": ("Analysis stopped", 100),
}


class TailoringValidationError(ValueError):
    def __init__(self, message: str, *, field: str):
        super().__init__(message)
        self.field = field
        self.message = message


class InsufficientInputError(TailoringValidationError):
    def __init__(self, message: str, *, field: str, length: int = 0, min_chars: int = 0):
        super().__init__(message, field=field)
        self.length = length
        self.min_chars = min_chars


class AnalysisCancelled(RuntimeError):
    def __init__(self, stage: str | None):
        super().__init__(f"Analysis cancelled before stage '{stage}'.")
        self.stage = stage


class _StageTrace:
    def __init__(self, on_progress: ProgressCallback | None, should_cancel: CancelCheck | None) -> None:
        self.on_progress = on_progress
        self.should_cancel = should_cancel
        self.current: str | None = None
        self.stages: list[str] = []

    def advance(self, stage: str) -> None:
        if stage not in _STAGE_FLOW.get(self.current, set()):
            raise RuntimeError(f"Illegal stage transition {self.current!r} -> {stage!r}.")
        if stage != "failed" and self.should_cancel is not None and self.should_cancel():
            logger.info("tailoring_cancelled before=%s", stage)
            raise AnalysisCancelled(stage)

        self.current = stage
        self.stages.append(stage)
        logger.info("tailoring_stage stage=%s", stage)
        if self.on_progress is None:
            return
        label, percent = _STAGE_LABELS[stage]
        self.on_progress({"stage": stage, "label": label, "percent": percent})


def _resume_has_content(resume: ResumeDocument) -> bool:
    for section in resume.sections:
        if section.kind == "summary" and section.content.strip():
            return True
        if section.kind in {"skills", "certifications"} and any(item.strip() for item in section.items):
            return True
        if section.kind == "experience" and any(
            entry.title.strip() or any(bullet.strip() for bullet in entry.bullets) for entry in section.entries
        ):
            return True
        if section.kind == "education" and any(
            entry.degree.strip() or entry.institution.strip() for entry in section.entries
        ):
            return True
        if section.kind == "projects" and any(
            entry.name.strip() or any(bullet.strip() for bullet in entry.bullets) for entry in section.entries
        ):
            return True
    return False


def _validate(resume: ResumeDocument, posting: JobPosting) -> None:
    problem = validate_text(posting.text, min_chars=settings.min_posting_chars, field="job posting")
    if problem is not None:
        raise InsufficientInputError(
            problem.message,
            field="posting",
            length=problem.length,
            min_chars=problem.min_chars,
        )
    if not _resume_has_content(resume):
        raise InsufficientInputError("The resume has no content to analyze.", field="resume")


def analyze(
    resume: ResumeDocument,
    posting: JobPosting | str,
    *,
    options: TailoringOptions | None = None,
    lexicon: LexiconProvider | None = None,
    on_progress: ProgressCallback | None = None,
    should_cancel: CancelCheck | None = None,
    reference_date: date | None = None,
    max_workers: int | None = None,
) -> AnalysisResult:
    """Analyze ``resume`` against ``posting`` and draft tailoring suggestions.

    Raises InsufficientInputError when the posting is empty or too short, or
    the resume has no content. The inputs are never mutated; the tailored
    resume in the result is a separate copy.
    """
    if isinstance(posting, str):
        posting = JobPosting(text=posting)
    lexicon = lexicon or get_default_lexicon()
    workers = max_workers if max_workers is not None else settings.max_workers
    trace = _StageTrace(on_progress, should_cancel)

    trace.advance("validating")
    try:
        _validate(resume, posting)
    except TailoringValidationError as exc:
        logger.warning("tailoring_validation_failed field=%s message=%s", exc.field, exc.message)
        trace.advance("failed")
        raise

    trace.advance("normalizing")
    normalized = normalize_text(posting.text, lexicon)

    trace.advance("extracting")
    requirements = extract_requirements(normalized, lexicon)
    profile = build_posting_profile(posting, normalized, lexicon)
    notes: list[AnalysisNote] = []
    if not requirements:
        logger.warning("ambiguous_extraction lines=%s", len(normalized.lines))
        notes.append(
            AnalysisNote(
                code="ambiguous_extraction",
                message="No specific requirements were found in the job posting, so the score defaults to 100.",
            )
        )

    trace.advance("indexing")
    index = build_resume_index(resume, lexicon, reference_date=reference_date)

    trace.advance("matching")
    matches = match_requirements(requirements, index, lexicon, max_workers=workers)

    trace.advance("scoring")
    score, breakdown = compute_score(requirements, matches)

    trace.advance("enhancing")
    suggestions = generate_suggestions(
        requirements,
        matches,
        resume,
        index,
        lexicon,
        options=options,
        max_workers=workers,
    )
    projected = project_score(requirements, matches, suggestions)
    tailored = build_tailored_resume(resume, suggestions)

    by_id = {requirement.id: requirement for requirement in requirements}
    buckets: dict[str, list] = {"matched": [], "partial": [], "unmatched": []}
    for match in matches:
        buckets[match.status].append(by_id[match.requirement_id])

    trace.advance("complete")
    logger.info(
        "tailoring_complete requirements=%s score=%s projected=%s suggestions=%s",
        len(requirements),
        score,
        projected,
        len(suggestions),
    )
    return AnalysisResult(
        score=score,
        projected_score=projected,
        breakdown=breakdown,
        requirements=requirements,
        matches=matches,
        matched=buckets["matched"],
        partial=buckets["partial"],
        unmatched=buckets["unmatched"],
        suggestions=suggestions,
        tailored_resume=tailored,
        keywords=build_keyword_matches(requirements, matches, normalized),
        feedback=build_feedback(score, requirements, matches),
        posting_profile=profile,
        notes=notes,
        stages=trace.stages,
        lexicon_version=getattr(lexicon, "version", None),
    )
