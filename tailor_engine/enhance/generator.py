from __future__ import annotations

import logging
import math
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from tailor_engine.core.config.scoring import get_scoring_value
from tailor_engine.features.resume_index import EvidenceUnit, ResumeIndex
from tailor_engine.schemas import (
    EnhancementSuggestion,
    MatchResult,
    Requirement,
    ResumeDocument,
    SuggestionLocation,
    TailoringOptions,
)
from tailor_engine.taxonomy import LexiconProvider, get_default_lexicon

from .diff import word_diff

logger = logging.getLogger(__name__)

_CREDENTIAL_CATEGORIES = {"certification", "experience-level"}
_BULLET_SECTIONS = {"experience_bullet": "experience", "project_bullet": "projects"}
_OPEN_STATUSES = {"unmatched", "partial"}

_CLAUSE_VERBS = {
    "skill": "using",
    "tool": "using",
    "soft-skill": "demonstrating",
}
_NEW_BULLETS = {
    "skill": "Applied {term} in day-to-day delivery work.",
    "tool": "Used {term} in day-to-day delivery work.",
    "soft-skill": "Demonstrated {term} while working with colleagues and stakeholders.",
}
_SUMMARY_SENTENCES = {
    "skill": "Experienced with {term}.",
    "tool": "Experienced with {term}.",
    "soft-skill": "Known for {term}.",
}


@dataclass(slots=True)
class _Draft:
    order: int
    requirement: Requirement
    kind: str
    location: SuggestionLocation | None
    original_text: str | None
    proposed_text: str | None
    insertion: str | None
    delta: float
    rationale: str


def suggestion_delta(weight: float, confidence: float, total_weight: float) -> float:
    """Score points recovered if the requirement moves from ``confidence`` to a full match."""
    if total_weight <= 0:
        return 0.0
    return round(weight * (1.0 - confidence) / total_weight * 100.0, 4)


def _join_terms(terms: list[str]) -> str:
    if len(terms) <= 1:
        return "".join(terms)
    return f"{', '.join(terms[:-1])} and {terms[-1]}"


def combine_clauses(clauses: list[str]) -> str:
    """Merge clauses sharing a leading verb: ["using A", "using B"] -> "using A and B"."""
    grouped: dict[str, list[str]] = {}
    for clause in clauses:
        verb, _, term = clause.partition(" ")
        grouped.setdefault(verb, []).append(term)
    return ", ".join(f"{verb} {_join_terms(terms)}" for verb, terms in grouped.items())


def append_clause(text: str, clause: str) -> str:
    """Append ``clause`` to ``text`` ahead of any terminal punctuation; the original wording is kept."""
    base = text.rstrip()
    terminal = ""
    if base and base[-1] in ".!;":
        terminal = base[-1]
        base = base[:-1].rstrip()
    return f"{base}, {clause}{terminal}"


def _clause_for(requirement: Requirement) -> str:
    verb = _CLAUSE_VERBS.get(requirement.category, "using")
    return f"{verb} {requirement.text}"


def _unit_categories(unit: EvidenceUnit, lexicon: LexiconProvider) -> list[str]:
    found: list[str] = []
    tokens = unit.tokens
    for size in range(1, lexicon.max_phrase_tokens + 1):
        for start in range(0, len(tokens) - size + 1):
            entry = lexicon.lookup(" ".join(tokens[start : start + size]))
            if entry is not None:
                found.append(entry.category)
    return found


def _soft_skill_cue_count(unit: EvidenceUnit, lexicon: LexiconProvider) -> int:
    return sum(1 for cue in lexicon.soft_skill_cues if re.search(rf"\b{re.escape(cue)}\b", unit.text))


class _SuggestionPlanner:
    def __init__(
        self,
        requirements: list[Requirement],
        resume: ResumeDocument,
        index: ResumeIndex,
        lexicon: LexiconProvider,
    ) -> None:
        self.resume = resume
        self.index = index
        self.lexicon = lexicon
        self.total_weight = sum(requirement.weight for requirement in requirements)
        self.order = {requirement.id: position for position, requirement in enumerate(requirements)}
        self.bullets = [unit for unit in index.units if unit.section in _BULLET_SECTIONS]
        self.categories = {unit.unit_id: _unit_categories(unit, lexicon) for unit in self.bullets}
        self.soft_cues = {unit.unit_id: _soft_skill_cue_count(unit, lexicon) for unit in self.bullets}

    def plan(self, requirement: Requirement, match: MatchResult) -> _Draft | None:
        if match.status not in _OPEN_STATUSES:
            return None
        delta = suggestion_delta(requirement.weight, match.confidence, self.total_weight)
        if requirement.category in _CREDENTIAL_CATEGORIES:
            return self._acknowledge_gap(requirement, match, delta)

        target = self._rewrite_target(requirement, match)
        if target is not None:
            return self._rewrite(requirement, match, target, delta)
        return self._addition(requirement, delta)

    def _draft(self, requirement: Requirement, **fields) -> _Draft:
        return _Draft(order=self.order[requirement.id], requirement=requirement, **fields)

    def _acknowledge_gap(self, requirement: Requirement, match: MatchResult, delta: float) -> _Draft:
        location = None
        if requirement.category == "certification":
            found = self.resume.first_section("certifications")
            if found is not None:
                location = SuggestionLocation(section="certifications", section_position=found[0])
            rationale = (
                f"The posting asks for '{requirement.text}', which the resume does not show. "
                "List it only if you actually hold it."
            )
        else:
            years = self.index.total_years
            rationale = (
                f"The posting asks for {requirement.min_years or 0}+ years of experience; "
                f"the resume shows about {years:g}. Address the gap in a cover letter rather than the resume."
            )
        if match.status == "partial":
            rationale = f"{rationale} Partial evidence was found ({match.confidence:.2f})."
        return self._draft(
            requirement,
            kind="acknowledge-gap",
            location=location,
            original_text=None,
            proposed_text=None,
            insertion=None,
            delta=delta,
            rationale=rationale,
        )

    def _rewrite_target(self, requirement: Requirement, match: MatchResult) -> EvidenceUnit | None:
        primary = match.primary
        if primary is not None and primary.section in _BULLET_SECTIONS:
            unit = self.index.by_id(primary.unit_id)
            if unit is not None:
                return unit

        wanted = set(self.lexicon.adjacent_categories(requirement.category))
        ranked: list[tuple[tuple[int, int, int, int], EvidenceUnit]] = []
        for unit in self.bullets:
            hits = sum(1 for category in self.categories[unit.unit_id] if category in wanted)
            if requirement.category == "soft-skill":
                hits += self.soft_cues[unit.unit_id]
            if hits <= 0:
                continue
            section_rank = 0 if unit.section == "experience_bullet" else 1
            ranked.append(((-hits, section_rank, unit.entry_index or 0, unit.index), unit))
        if not ranked:
            return None
        ranked.sort(key=lambda item: item[0])
        return ranked[0][1]

    def _rewrite(self, requirement: Requirement, match: MatchResult, unit: EvidenceUnit, delta: float) -> _Draft:
        clause = _clause_for(requirement)
        if match.primary is not None and match.primary.unit_id == unit.unit_id:
            rationale = (
                f"This bullet already points toward '{requirement.text}'; naming it explicitly "
                "lets an ATS recognise the match."
            )
        else:
            rationale = (
                f"This bullet describes related {requirement.category} work; mentioning "
                f"'{requirement.text}' ties the requirement to existing experience. Keep it only if accurate."
            )
        return self._draft(
            requirement,
            kind="rewrite",
            location=SuggestionLocation(
                section=_BULLET_SECTIONS[unit.section],
                section_position=unit.section_position,
                entry_index=unit.entry_index,
                bullet_index=unit.index,
            ),
            original_text=unit.original,
            proposed_text=append_clause(unit.original, clause),
            insertion=clause,
            delta=delta,
            rationale=rationale,
        )

    def _addition(self, requirement: Requirement, delta: float) -> _Draft:
        term = requirement.text
        category = requirement.category

        skills = self.resume.first_section("skills")
        if category in {"skill", "tool"} and skills is not None:
            position, section = skills
            return self._draft(
                requirement,
                kind="add-skill",
                location=SuggestionLocation(
                    section="skills",
                    section_position=position,
                    bullet_index=len(section.items),
                    is_new=True,
                ),
                original_text=None,
                proposed_text=term,
                insertion=term,
                delta=delta,
                rationale=f"The posting lists '{term}'. Add it to your skills if you use it.",
            )

        experience = self.resume.first_section("experience")
        if experience is not None and experience[1].entries:
            position, section = experience
            text = _NEW_BULLETS.get(category, _NEW_BULLETS["skill"]).format(term=term)
            return self._draft(
                requirement,
                kind="add-bullet",
                location=SuggestionLocation(
                    section="experience",
                    section_position=position,
                    entry_index=0,
                    bullet_index=len(section.entries[0].bullets),
                    is_new=True,
                ),
                original_text=None,
                proposed_text=text,
                insertion=text,
                delta=delta,
                rationale=(
                    f"No existing bullet relates to '{term}'. Describe where you applied it in your most "
                    "recent role, or drop this suggestion."
                ),
            )

        summary = self.resume.first_section("summary")
        if summary is not None:
            text = _SUMMARY_SENTENCES.get(category, _SUMMARY_SENTENCES["skill"]).format(term=term)
            return self._draft(
                requirement,
                kind="add-bullet",
                location=SuggestionLocation(section="summary", section_position=summary[0], is_new=True),
                original_text=None,
                proposed_text=text,
                insertion=text,
                delta=delta,
                rationale=f"The resume has no experience bullets to extend; mention '{term}' in the summary.",
            )

        return self._draft(
            requirement,
            kind="add-skill",
            location=SuggestionLocation(section="skills", bullet_index=0, is_new=True),
            original_text=None,
            proposed_text=term,
            insertion=term,
            delta=delta,
            rationale=f"The posting lists '{term}'. A skills section listing it gives an ATS something to match.",
        )


def _apply_intensity(drafts: list[_Draft], intensity: int) -> list[_Draft]:
    producing = [draft for draft in drafts if draft.kind != "acknowledge-gap"]
    keep = math.ceil(len(producing) * intensity / 100)
    kept = {id(draft) for draft in producing[:keep]}
    return [draft for draft in drafts if draft.kind == "acknowledge-gap" or id(draft) in kept]


def _renumber_appends(drafts: list[_Draft]) -> None:
    """Appended bullets and skills at the same spot get consecutive indices in suggestion order."""
    next_index: dict[tuple, int] = {}
    for draft in drafts:
        location = draft.location
        if location is None or not location.is_new or location.bullet_index is None:
            continue
        slot = (location.section, location.section_position, location.entry_index)
        index = next_index.get(slot, location.bullet_index)
        draft.location = location.model_copy(update={"bullet_index": index})
        next_index[slot] = index + 1


def generate_suggestions(
    requirements: list[Requirement],
    matches: list[MatchResult],
    resume: ResumeDocument,
    index: ResumeIndex,
    lexicon: LexiconProvider | None = None,
    options: TailoringOptions | None = None,
    max_workers: int = 1,
) -> list[EnhancementSuggestion]:
    """One suggestion per unmatched or partial requirement, sorted by delta descending."""
    lexicon = lexicon or get_default_lexicon()
    if options is not None:
        intensity = options.intensity
    else:
        intensity = int(get_scoring_value("enhancement.default_intensity", 100))
    strong = float(get_scoring_value("matching.thresholds.strong", 0.85))

    planner = _SuggestionPlanner(requirements, resume, index, lexicon)
    by_id = {match.requirement_id: match for match in matches}
    pairs = [
        (requirement, by_id[requirement.id])
        for requirement in requirements
        if requirement.id in by_id and by_id[requirement.id].confidence <= strong
    ]

    def _run(pair: tuple[Requirement, MatchResult]) -> _Draft | None:
        return planner.plan(*pair)

    if max_workers <= 1 or len(pairs) <= 1:
        planned = [_run(pair) for pair in pairs]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            planned = list(executor.map(_run, pairs))

    drafts = [draft for draft in planned if draft is not None]
    drafts.sort(key=lambda draft: (-draft.delta, draft.order))
    drafts = _apply_intensity(drafts, intensity)
    _renumber_appends(drafts)

    suggestions: list[EnhancementSuggestion] = []
    for position, draft in enumerate(drafts, start=1):
        diff = word_diff(draft.original_text, draft.proposed_text) if draft.proposed_text else []
        suggestions.append(
            EnhancementSuggestion(
                id=f"s{position}",
                requirement_id=draft.requirement.id,
                kind=draft.kind,
                location=draft.location,
                original_text=draft.original_text,
                proposed_text=draft.proposed_text,
                insertion=draft.insertion,
                delta=draft.delta,
                rationale=draft.rationale,
                diff=diff,
            )
        )
    logger.info(
        "suggestions_generated count=%s intensity=%s gaps=%s",
        len(suggestions),
        intensity,
        sum(1 for suggestion in suggestions if suggestion.kind == "acknowledge-gap"),
    )
    return suggestions
