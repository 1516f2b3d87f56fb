from __future__ import annotations

from dataclasses import dataclass, field

from tailor_engine.schemas import (
    EnhancementSuggestion,
    ResumeDocument,
    ResumeModification,
    SkillsSection,
    SuggestionLocation,
    TailoredResume,
)

from .diff import word_diff
from .generator import append_clause, combine_clauses


@dataclass(slots=True)
class _Group:
    location: SuggestionLocation
    original_text: str | None
    insertions: list[str] = field(default_factory=list)
    requirement_ids: list[str] = field(default_factory=list)
    suggestion_ids: list[str] = field(default_factory=list)

    def add(self, suggestion: EnhancementSuggestion) -> None:
        self.insertions.append(suggestion.insertion or suggestion.proposed_text or "")
        if suggestion.requirement_id not in self.requirement_ids:
            self.requirement_ids.append(suggestion.requirement_id)
        self.suggestion_ids.append(suggestion.id)


def _entries_for(document: ResumeDocument, location: SuggestionLocation):
    section = document.sections[location.section_position]
    return section.entries


def _group_key(suggestion: EnhancementSuggestion) -> tuple:
    location = suggestion.location
    if suggestion.kind == "rewrite":
        return ("rewrite", location.section_position, location.entry_index, location.bullet_index)
    if location.section == "summary":
        return ("summary", location.section_position)
    return ("append", suggestion.id)


def build_tailored_resume(resume: ResumeDocument, suggestions: list[EnhancementSuggestion]) -> TailoredResume:
    """Apply text-producing suggestions to a copy of ``resume``.

    Rewrites of the same bullet merge into one appended clause. Additions only
    append, so bullet indices from the original resume stay valid throughout.
    """
    document = resume.model_copy(deep=True)
    groups: dict[tuple, _Group] = {}

    for suggestion in suggestions:
        if suggestion.kind == "acknowledge-gap" or suggestion.location is None or not suggestion.proposed_text:
            continue
        key = _group_key(suggestion)
        group = groups.get(key)
        if group is None:
            original = suggestion.original_text if suggestion.kind == "rewrite" else None
            if key[0] == "summary":
                original = document.sections[suggestion.location.section_position].content or None
            group = _Group(location=suggestion.location, original_text=original)
            groups[key] = group
        group.add(suggestion)

    new_skills_position: int | None = None
    modifications: list[ResumeModification] = []
    for key, group in groups.items():
        location = group.location
        if key[0] == "rewrite":
            entry = _entries_for(document, location)[location.entry_index]
            current = entry.bullets[location.bullet_index]
            text = append_clause(current, combine_clauses(group.insertions))
            entry.bullets[location.bullet_index] = text
        elif key[0] == "summary":
            section = document.sections[location.section_position]
            added = " ".join(group.insertions)
            text = f"{section.content.rstrip()} {added}" if section.content.strip() else added
            section.content = text
        elif location.section == "skills":
            text = group.insertions[0]
            if location.section_position is None:
                if new_skills_position is None:
                    document.sections.append(SkillsSection(items=[]))
                    new_skills_position = len(document.sections) - 1
                location = location.model_copy(update={"section_position": new_skills_position})
            section = document.sections[location.section_position]
            section.items.append(text)
            location = location.model_copy(update={"bullet_index": len(section.items) - 1})
        else:
            text = group.insertions[0]
            entry = _entries_for(document, location)[location.entry_index]
            entry.bullets.append(text)
            location = location.model_copy(update={"bullet_index": len(entry.bullets) - 1})

        modifications.append(
            ResumeModification(
                location=location,
                requirement_ids=group.requirement_ids,
                suggestion_ids=group.suggestion_ids,
                original_text=group.original_text,
                text=text,
                diff=word_diff(group.original_text, text),
            )
        )

    return TailoredResume(resume=document, modifications=modifications)
