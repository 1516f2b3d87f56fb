from __future__ import annotations

from tailor_engine.core.config.scoring import get_scoring_value
from tailor_engine.normalize.text import NormalizedText
from tailor_engine.normalize.utils import canonical_tokens, stem_token
from tailor_engine.schemas import FeedbackItem, KeywordMatch, MatchResult, Requirement

_CREDENTIAL_CATEGORIES = {"certification", "experience-level"}


def _importance(weight: float) -> str:
    if weight >= 1.0:
        return "high"
    if weight >= 0.7:
        return "medium"
    return "low"


def _count_occurrences(needle: tuple[str, ...], haystack: list[str]) -> int:
    size = len(needle)
    if size == 0:
        return 0
    return sum(1 for start in range(0, len(haystack) - size + 1) if tuple(haystack[start : start + size]) == needle)


def build_keyword_matches(
    requirements: list[Requirement],
    matches: list[MatchResult],
    normalized: NormalizedText,
) -> list[KeywordMatch]:
    by_id = {match.requirement_id: match for match in matches}
    posting_stems = [stem_token(token) for token in normalized.tokens]

    keywords: list[KeywordMatch] = []
    for requirement in requirements:
        match = by_id.get(requirement.id)
        forms = [tuple(requirement.key.split())] + [canonical_tokens(alias) for alias in requirement.aliases]
        frequency = sum(_count_occurrences(form, posting_stems) for form in forms)
        keywords.append(
            KeywordMatch(
                keyword=requirement.text,
                requirement_id=requirement.id,
                found=bool(match and match.status == "matched"),
                importance=_importance(requirement.weight),
                frequency=max(frequency, 1),
                context=requirement.source_text,
            )
        )
    return keywords


def build_feedback(
    score: float,
    requirements: list[Requirement],
    matches: list[MatchResult],
) -> list[FeedbackItem]:
    low_score = float(get_scoring_value("feedback.low_score", 50))
    good_score = float(get_scoring_value("feedback.good_score", 80))
    by_id = {match.requirement_id: match for match in matches}

    items: list[FeedbackItem] = []
    if not requirements:
        items.append(
            FeedbackItem(
                category="Overall",
                message="No specific requirements were detected in the job posting; the score defaults to 100.",
                severity="low",
            )
        )
        return items

    if score < low_score:
        items.append(
            FeedbackItem(
                category="Overall",
                message=f"Low match ({score:.0f}%). Most of the posting's requirements are not evidenced in the resume.",
                severity="high",
            )
        )
    elif score < good_score:
        items.append(
            FeedbackItem(
                category="Overall",
                message=f"Moderate match ({score:.0f}%). Address the missing keywords below to improve it.",
                severity="medium",
            )
        )
    else:
        items.append(
            FeedbackItem(category="Overall", message=f"Strong match ({score:.0f}%).", severity="low")
        )

    for requirement in requirements:
        match = by_id.get(requirement.id)
        if match is None or match.status == "matched":
            continue
        if requirement.category in _CREDENTIAL_CATEGORIES:
            if match.status == "unmatched":
                items.append(
                    FeedbackItem(
                        category="Qualifications",
                        message=(
                            f"'{requirement.text}' is not shown in the resume. Add it only if you actually hold it."
                        ),
                        severity="high" if requirement.importance == "required" else "medium",
                    )
                )
            else:
                items.append(
                    FeedbackItem(
                        category="Qualifications",
                        message=f"'{requirement.text}' is only partly covered by the resume.",
                        severity="medium",
                    )
                )
            continue
        if match.status == "partial":
            items.append(
                FeedbackItem(
                    category="Keywords",
                    message=f"'{requirement.text}' is only loosely evidenced; use the exact term where it applies.",
                    severity="medium",
                )
            )
            continue
        items.append(
            FeedbackItem(
                category="Keywords",
                message=f"Missing keyword '{requirement.text}'.",
                severity="high" if requirement.importance == "required" else "low",
            )
        )
    return items
