from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime

from dateutil import parser as date_parser

from tailor_engine.normalize.text import normalize_field
from tailor_engine.normalize.utils import content_stems, split_sentences, stem_token, tokenize
from tailor_engine.schemas import ResumeDocument
from tailor_engine.taxonomy import LexiconProvider, get_default_lexicon

_ONGOING = {"present", "current", "now", "today", "ongoing"}
_SHORT_YEAR_RE = re.compile(r"[‘’']\s*(\d{2})\b")


@dataclass(frozen=True, slots=True)
class EvidenceUnit:
    unit_id: str
    section: str
    section_position: int
    entry_index: int | None
    index: int
    text: str
    original: str
    tokens: tuple[str, ...]
    content: tuple[str, ...]


@dataclass(slots=True)
class ResumeIndex:
    units: list[EvidenceUnit] = field(default_factory=list)
    total_years: float = 0.0
    stated_years: list[tuple[int, str]] = field(default_factory=list)

    def by_id(self, unit_id: str) -> EvidenceUnit | None:
        for unit in self.units:
            if unit.unit_id == unit_id:
                return unit
        return None


def _expand_short_year(value: str, reference: date) -> str:
    """Rewrite "Mar '19" as "Mar 2019", never past the reference year."""

    def _replace(match: re.Match[str]) -> str:
        century = reference.year // 100 * 100
        year = century + int(match.group(1))
        if year > reference.year:
            year -= 100
        return f" {year}"

    return _SHORT_YEAR_RE.sub(_replace, value)


def parse_resume_date(raw: str | None, reference: date) -> date | None:
    """Parse a free-form resume date; missing month or day fall back to January 1st."""
    value = (raw or "").strip()
    if not value:
        return None
    if value.lower() in _ONGOING:
        return reference
    try:
        parsed = date_parser.parse(
            _expand_short_year(value, reference),
            default=datetime(reference.year, 1, 1),
            fuzzy=True,
        )
    except (ValueError, OverflowError):
        return None
    return parsed.date()


def _total_years(intervals: list[tuple[date, date]]) -> float:
    if not intervals:
        return 0.0
    merged: list[list[date]] = []
    for start, end in sorted(intervals):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])
    days = sum((end - start).days for start, end in merged)
    return round(days / 365.25, 2)


class _IndexBuilder:
    def __init__(self, lexicon: LexiconProvider) -> None:
        self.lexicon = lexicon
        self.units: list[EvidenceUnit] = []

    def add(self, section: str, section_position: int, entry_index: int | None, index: int, raw: str | None) -> None:
        original, text = normalize_field(raw)
        if not original:
            return
        tokens = tokenize(text)
        if not tokens:
            return
        self.units.append(
            EvidenceUnit(
                unit_id=f"u{len(self.units) + 1}",
                section=section,
                section_position=section_position,
                entry_index=entry_index,
                index=index,
                text=text,
                original=original,
                tokens=tuple(stem_token(token) for token in tokens),
                content=content_stems(tokens, self.lexicon.stoplist),
            )
        )


def build_resume_index(
    resume: ResumeDocument,
    lexicon: LexiconProvider | None = None,
    reference_date: date | None = None,
) -> ResumeIndex:
    lexicon = lexicon or get_default_lexicon()
    reference = reference_date or date.today()
    builder = _IndexBuilder(lexicon)
    intervals: list[tuple[date, date]] = []

    for position, section in enumerate(resume.sections):
        if section.kind == "summary":
            for index, sentence in enumerate(split_sentences(section.content)):
                builder.add("summary", position, None, index, sentence)
        elif section.kind == "experience":
            for entry_index, entry in enumerate(section.entries):
                builder.add("experience_title", position, entry_index, 0, entry.title)
                for bullet_index, bullet in enumerate(entry.bullets):
                    builder.add("experience_bullet", position, entry_index, bullet_index, bullet)
                start = parse_resume_date(entry.start_date, reference)
                end = reference if entry.current else parse_resume_date(entry.end_date, reference)
                if start is not None and end is not None and end >= start:
                    intervals.append((start, end))
        elif section.kind == "education":
            for entry_index, entry in enumerate(section.entries):
                heading = " ".join(part for part in (entry.degree, entry.field or "", entry.institution) if part)
                builder.add("education", position, entry_index, 0, heading)
                for offset, highlight in enumerate(entry.highlights, start=1):
                    builder.add("education", position, entry_index, offset, highlight)
        elif section.kind == "skills":
            for index, item in enumerate(section.items):
                builder.add("skills", position, None, index, item)
        elif section.kind == "projects":
            for entry_index, entry in enumerate(section.entries):
                heading = " ".join(part for part in (entry.name, entry.description or "") if part)
                builder.add("project", position, entry_index, 0, heading)
                for offset, technology in enumerate(entry.technologies, start=1):
                    builder.add("project", position, entry_index, offset, technology)
                for bullet_index, bullet in enumerate(entry.bullets):
                    builder.add("project_bullet", position, entry_index, bullet_index, bullet)
        elif section.kind == "certifications":
            for index, item in enumerate(section.items):
                builder.add("certifications", position, None, index, item)

    stated: list[tuple[int, str]] = []
    for unit in builder.units:
        for pattern in lexicon.experience_patterns:
            for match in pattern.finditer(unit.text):
                try:
                    stated.append((int(match.group("years")), unit.unit_id))
                except (IndexError, TypeError, ValueError):
                    continue

    return ResumeIndex(units=builder.units, total_years=_total_years(intervals), stated_years=stated)
