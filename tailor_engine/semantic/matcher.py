from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from tailor_engine.core.config.scoring import get_scoring_value
from tailor_engine.features.resume_index import EvidenceUnit, ResumeIndex
from tailor_engine.normalize.utils import canonical_tokens, contains_sequence, content_stems, tokenize
from tailor_engine.schemas import EvidenceRef, MatchResult, Requirement
from tailor_engine.taxonomy import LexiconProvider, get_default_lexicon

from .similarity import best_window_jaccard


@dataclass(frozen=True, slots=True)
class MatchThresholds:
    fuzzy: float = 0.6
    partial: float = 0.3
    strong: float = 0.85
    exact_confidence: float = 1.0
    synonym_confidence: float = 0.9
    fuzzy_cap: float = 0.99
    experience_partial_confidence: float = 0.45
    experience_partial_ratio: float = 0.5
    max_secondary: int = 5


def load_match_thresholds() -> MatchThresholds:
    return MatchThresholds(
        fuzzy=float(get_scoring_value("matching.thresholds.fuzzy", 0.6)),
        partial=float(get_scoring_value("matching.thresholds.partial", 0.3)),
        strong=float(get_scoring_value("matching.thresholds.strong", 0.85)),
        exact_confidence=float(get_scoring_value("matching.confidence.exact", 1.0)),
        synonym_confidence=float(get_scoring_value("matching.confidence.synonym", 0.9)),
        fuzzy_cap=float(get_scoring_value("matching.confidence.fuzzy_cap", 0.99)),
        experience_partial_confidence=float(get_scoring_value("matching.confidence.experience_partial", 0.45)),
        experience_partial_ratio=float(get_scoring_value("matching.experience_partial_ratio", 0.5)),
        max_secondary=int(get_scoring_value("matching.max_secondary_evidence", 5)),
    )


def status_for(confidence: float, thresholds: MatchThresholds) -> str:
    if confidence >= thresholds.fuzzy:
        return "matched"
    if confidence >= thresholds.partial:
        return "partial"
    return "unmatched"


def _evidence_ref(unit: EvidenceUnit, confidence: float, match_type: str) -> EvidenceRef:
    return EvidenceRef(
        unit_id=unit.unit_id,
        section=unit.section,
        section_position=unit.section_position,
        entry_index=unit.entry_index,
        index=unit.index,
        text=unit.original,
        confidence=round(confidence, 4),
        match_type=match_type,
    )


class _RequirementMatcher:
    def __init__(self, requirement: Requirement, lexicon: LexiconProvider, thresholds: MatchThresholds) -> None:
        self.requirement = requirement
        self.thresholds = thresholds
        self.tokens = tuple(requirement.key.split())
        self.alias_tokens = [canonical_tokens(alias) for alias in requirement.aliases]
        self.content = content_stems(tokenize(requirement.text), lexicon.stoplist)

    def score_unit(self, unit: EvidenceUnit) -> tuple[float, str]:
        if contains_sequence(unit.tokens, self.tokens):
            return self.thresholds.exact_confidence, "exact"
        if any(contains_sequence(unit.tokens, alias) for alias in self.alias_tokens if alias):
            return self.thresholds.synonym_confidence, "synonym"
        similarity = best_window_jaccard(self.content, unit.content)
        if similarity >= self.thresholds.fuzzy:
            return min(similarity, self.thresholds.fuzzy_cap), "fuzzy"
        if similarity >= self.thresholds.partial:
            return similarity, "near-miss"
        return 0.0, "none"


def _match_experience_level(
    requirement: Requirement,
    index: ResumeIndex,
    thresholds: MatchThresholds,
) -> MatchResult:
    required = requirement.min_years or 0
    stated = max(index.stated_years, key=lambda item: item[0], default=None)
    best_years = max(stated[0] if stated else 0, index.total_years)
    anchor = index.by_id(stated[1]) if stated and stated[0] >= index.total_years else None
    if anchor is None:
        anchor = next((unit for unit in index.units if unit.section == "experience_title"), None)

    if required <= 0 or best_years >= required:
        confidence, match_type = thresholds.exact_confidence, "exact"
    elif best_years / required >= thresholds.experience_partial_ratio:
        confidence, match_type = thresholds.experience_partial_confidence, "near-miss"
    else:
        confidence, match_type = 0.0, "none"

    primary = _evidence_ref(anchor, confidence, match_type) if anchor is not None and confidence > 0 else None
    return MatchResult(
        requirement_id=requirement.id,
        confidence=round(confidence, 4),
        status=status_for(confidence, thresholds),
        match_type=match_type,
        primary=primary,
        strong=confidence >= thresholds.strong,
    )


def match_requirement(
    requirement: Requirement,
    index: ResumeIndex,
    lexicon: LexiconProvider | None = None,
    thresholds: MatchThresholds | None = None,
) -> MatchResult:
    lexicon = lexicon or get_default_lexicon()
    thresholds = thresholds or load_match_thresholds()

    if requirement.category == "experience-level":
        return _match_experience_level(requirement, index, thresholds)

    matcher = _RequirementMatcher(requirement, lexicon, thresholds)
    hits: list[tuple[float, int, EvidenceUnit, str]] = []
    for order, unit in enumerate(index.units):
        confidence, match_type = matcher.score_unit(unit)
        if confidence >= thresholds.partial:
            hits.append((confidence, order, unit, match_type))

    if not hits:
        return MatchResult(requirement_id=requirement.id, confidence=0.0, status="unmatched")

    hits.sort(key=lambda item: (-item[0], item[1]))
    best_confidence, _, best_unit, best_type = hits[0]
    confidence = round(best_confidence, 4)
    return MatchResult(
        requirement_id=requirement.id,
        confidence=confidence,
        status=status_for(confidence, thresholds),
        match_type=best_type,
        primary=_evidence_ref(best_unit, best_confidence, best_type),
        secondary=[
            _evidence_ref(unit, value, match_type)
            for value, _, unit, match_type in hits[1 : 1 + thresholds.max_secondary]
        ],
        strong=confidence >= thresholds.strong,
    )


def match_requirements(
    requirements: list[Requirement],
    index: ResumeIndex,
    lexicon: LexiconProvider | None = None,
    max_workers: int = 1,
) -> list[MatchResult]:
    """Match every requirement; output order always follows ``requirements``."""
    lexicon = lexicon or get_default_lexicon()
    thresholds = load_match_thresholds()

    def _run(requirement: Requirement) -> MatchResult:
        return match_requirement(requirement, index, lexicon, thresholds)

    if max_workers <= 1 or len(requirements) <= 1:
        return [_run(requirement) for requirement in requirements]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(_run, requirements))
