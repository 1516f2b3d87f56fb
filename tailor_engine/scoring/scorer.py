"""ATS compatibility scoring.

score = 100 * sum(weight * confidence) / sum(weight), clamped to [0, 100].
With no requirements there is nothing to fail and the score is 100.

The breakdown repeats the formula per requirement category so callers can
show which kind of requirement drags the score down.

The projected score is an estimate, not a second matching pass: every
requirement targeted by a text-producing suggestion is assumed to land at
confidence 1.0. Acknowledge-gap flags change nothing in the resume and are
left out. The estimate overshoots when two suggestions lean on overlapping
evidence.
"""

from __future__ import annotations

from collections.abc import Iterable

from tailor_engine.schemas import EnhancementSuggestion, MatchResult, Requirement, ScoreBreakdown

_PERFECT_SCORE = 100.0


def _clamp(value: float) -> float:
    return max(0.0, min(_PERFECT_SCORE, value))


def score_breakdown(requirements: list[Requirement], confidences: dict[str, float]) -> ScoreBreakdown:
    total = sum(requirement.weight for requirement in requirements)
    earned = sum(requirement.weight * confidences.get(requirement.id, 0.0) for requirement in requirements)

    by_category: dict[str, list[Requirement]] = {}
    for requirement in requirements:
        by_category.setdefault(requirement.category, []).append(requirement)

    return ScoreBreakdown(
        total_weight=round(total, 6),
        earned_weight=round(earned, 6),
        missing_weight=round(total - earned, 6),
        category_scores={
            category: _score_from(members, confidences) for category, members in by_category.items()
        },
    )


def _score_from(requirements: list[Requirement], confidences: dict[str, float]) -> float:
    total = sum(requirement.weight for requirement in requirements)
    if total <= 0:
        return _PERFECT_SCORE
    earned = sum(requirement.weight * confidences.get(requirement.id, 0.0) for requirement in requirements)
    return round(_clamp(_PERFECT_SCORE * earned / total), 2)


def compute_score(requirements: list[Requirement], matches: list[MatchResult]) -> tuple[float, ScoreBreakdown]:
    confidences = {match.requirement_id: match.confidence for match in matches}
    return _score_from(requirements, confidences), score_breakdown(requirements, confidences)


def project_score(
    requirements: list[Requirement],
    matches: list[MatchResult],
    suggestions: Iterable[EnhancementSuggestion],
) -> float:
    confidences = {match.requirement_id: match.confidence for match in matches}
    for suggestion in suggestions:
        if suggestion.kind == "acknowledge-gap":
            continue
        confidences[suggestion.requirement_id] = 1.0
    return _score_from(requirements, confidences)
