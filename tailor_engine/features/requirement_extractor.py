"""Requirement extraction from normalized job-posting lines.

Candidates come from five sources, claimed in this order so that longer,
more specific spans win: certification patterns and acronyms, experience-level
patterns ("5+ years"), lexicon n-grams (looked up by stemmed key, longest
first), a fallback for unknown technical tokens, and, in requirement-bearing
sections only, stoplist-filtered phrases of up to three plain words. Lines
under "About" and "Benefits" headers, and an untitled first line that reads
like a job title, are not mined.

Each candidate is weighted from the nearest weight marker in its line or,
failing that, from the section the line sits in. Candidates collapse by stemmed
key, keeping the highest weight.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from tailor_engine.core.config.scoring import get_scoring_value
from tailor_engine.normalize.text import NormalizedLine, NormalizedText
from tailor_engine.normalize.utils import canonical_key, stem_token, tokenize_with_spans
from tailor_engine.schemas import Requirement
from tailor_engine.taxonomy import LexiconProvider, get_default_lexicon

logger = logging.getLogger(__name__)

_CLAUSE_BREAK_RE = re.compile(r"[,;:.()]|\band\b|\bor\b")
_TECH_PUNCT_RE = re.compile(r"[a-z][+#]|[a-z]\.[a-z]")
_PHRASE_BREAK_RE = re.compile(r"[,;:.()/!?&|]|\s-+\s")

_SKIPPED_SECTIONS = {"about", "benefits"}
_PHRASE_SECTIONS = {"requirements", "preferred", "responsibilities"}


@dataclass(slots=True)
class _Candidate:
    start: int
    end: int
    text: str
    key: str
    category: str
    aliases: tuple[str, ...] = ()
    years: int | None = None


def _overlaps(start: int, end: int, claimed: list[tuple[int, int]]) -> bool:
    return any(start < taken_end and taken_start < end for taken_start, taken_end in claimed)


def _certification_candidates(
    line: NormalizedLine,
    lexicon: LexiconProvider,
    claimed: list[tuple[int, int]],
) -> list[_Candidate]:
    found: list[_Candidate] = []
    original = line.original

    for pattern in lexicon.certification_patterns:
        for match in pattern.finditer(original):
            text = match.group(0).strip(" ,.;:-")
            if not text:
                continue
            start = match.start() + match.group(0).find(text)
            end = start + len(text)
            if _overlaps(start, end, claimed):
                continue
            entry = lexicon.lookup(canonical_key(text))
            if entry is not None and entry.category == "certification":
                found.append(_Candidate(start, end, entry.text, entry.key, "certification", entry.aliases))
            else:
                found.append(_Candidate(start, end, text, canonical_key(text), "certification"))
            claimed.append((start, end))

    for acronym in lexicon.certification_acronyms:
        pattern = re.compile(rf"(?<![A-Za-z0-9-]){re.escape(acronym)}(?![A-Za-z0-9-])")
        for match in pattern.finditer(original):
            if _overlaps(match.start(), match.end(), claimed):
                continue
            entry = lexicon.lookup(canonical_key(acronym))
            aliases = entry.aliases if entry is not None else ()
            found.append(
                _Candidate(match.start(), match.end(), acronym, canonical_key(acronym), "certification", aliases)
            )
            claimed.append((match.start(), match.end()))
    return found


def _experience_candidates(
    line: NormalizedLine,
    lexicon: LexiconProvider,
    claimed: list[tuple[int, int]],
) -> list[_Candidate]:
    found: list[_Candidate] = []
    for pattern in lexicon.experience_patterns:
        for match in pattern.finditer(line.text):
            if _overlaps(match.start(), match.end(), claimed):
                continue
            try:
                years = int(match.group("years"))
            except (IndexError, TypeError, ValueError):
                continue
            if years <= 0:
                continue
            text = f"{years}+ years of experience"
            found.append(
                _Candidate(match.start(), match.end(), text, canonical_key(text), "experience-level", years=years)
            )
            claimed.append((match.start(), match.end()))
    return found


def _is_mostly_upper(original: str) -> bool:
    words = [word for word in re.findall(r"[A-Za-z]+", original) if len(word) > 1]
    if not words:
        return False
    return sum(1 for word in words if word.isupper()) / len(words) > 0.5


def _lexicon_candidates(
    line: NormalizedLine,
    lexicon: LexiconProvider,
    claimed: list[tuple[int, int]],
    max_ngram: int,
    acronym_max_len: int,
) -> list[_Candidate]:
    found: list[_Candidate] = []
    spans = tokenize_with_spans(line.text)
    taken = [_overlaps(start, end, claimed) for _, start, end in spans]
    stems = [stem_token(token) for token, _, _ in spans]
    same_length = len(line.original) == len(line.text)
    upper_line = _is_mostly_upper(line.original)
    longest = max(1, min(max_ngram, lexicon.max_phrase_tokens))

    index = 0
    while index < len(spans):
        if taken[index]:
            index += 1
            continue
        hit = None
        for size in range(min(longest, len(spans) - index), 0, -1):
            window = spans[index : index + size]
            # n-grams never bridge a claimed span or a clause break
            if any(taken[index : index + size]):
                continue
            if size > 1 and _CLAUSE_BREAK_RE.search(line.text[window[0][2] : window[-1][1]]):
                continue
            entry = lexicon.lookup(" ".join(stems[index : index + size]))
            if entry is not None:
                hit = (entry, size)
                break

        if hit is not None:
            entry, size = hit
            start, end = spans[index][1], spans[index + size - 1][2]
            found.append(_Candidate(start, end, entry.text, entry.key, entry.category, entry.aliases))
            claimed.append((start, end))
            index += size
            continue

        token, start, end = spans[index]
        index += 1
        if token in lexicon.stoplist or token.replace(".", "").isdigit():
            continue
        surface = line.original[start:end] if same_length else token
        is_tech = bool(_TECH_PUNCT_RE.search(token))
        is_acronym = (
            not upper_line
            and surface.isalpha()
            and surface.isupper()
            and 2 <= len(surface) <= acronym_max_len
        )
        if is_tech or is_acronym:
            display = surface if is_acronym else token
            found.append(_Candidate(start, end, display, canonical_key(display), "skill"))
            claimed.append((start, end))
    return found


def _phrase_display(surface: str) -> str:
    words = surface.split()
    return " ".join(word if len(word) > 1 and word.isupper() else word.lower() for word in words)


def _phrase_candidates(
    line: NormalizedLine,
    lexicon: LexiconProvider,
    claimed: list[tuple[int, int]],
    max_ngram: int,
) -> list[_Candidate]:
    """Runs of plain words left over after the lexicon pass.

    A run ends at punctuation, a stoplisted word, a claimed span or a token that
    does not start with a letter. Runs longer than ``max_ngram`` keep their
    leading words.
    """
    runs: list[list[tuple[str, int, int]]] = []
    current: list[tuple[str, int, int]] = []
    previous_end: int | None = None
    for token, start, end in tokenize_with_spans(line.text):
        if current and previous_end is not None and _PHRASE_BREAK_RE.search(line.text[previous_end:start]):
            runs.append(current)
            current = []
        previous_end = end
        if (
            token in lexicon.phrase_stoplist
            or len(token) < 2
            or not token[0].isalpha()
            or _overlaps(start, end, claimed)
        ):
            if current:
                runs.append(current)
                current = []
            continue
        current.append((token, start, end))
    if current:
        runs.append(current)

    same_length = len(line.original) == len(line.text)
    found: list[_Candidate] = []
    for run in runs:
        words = run[:max_ngram]
        start, end = words[0][1], words[-1][2]
        if len(words) == 1 and len(words[0][0]) < 3:
            continue
        surface = line.original[start:end] if same_length else line.text[start:end]
        display = _phrase_display(surface)
        found.append(_Candidate(start, end, display, canonical_key(display), "skill"))
        claimed.append((start, end))
    return found


def _attach_years(candidates: list[_Candidate], line: NormalizedLine) -> list[_Candidate]:
    """Fold "5+ years <skill>" into the skill as a years qualifier."""
    ordered = sorted(candidates, key=lambda item: item.start)
    attached: set[int] = set()
    for position, candidate in enumerate(ordered):
        if candidate.category != "experience-level":
            continue
        for follower in ordered[position + 1 :]:
            gap = line.text[candidate.end : follower.start]
            if re.search(r"[,;:.]", gap):
                break
            if follower.category in {"skill", "tool"}:
                follower.years = max(follower.years or 0, candidate.years or 0)
                attached.add(id(candidate))
                break
    return [candidate for candidate in ordered if id(candidate) not in attached]


def _find_markers(text: str, markers: tuple[str, ...]) -> list[tuple[int, int]]:
    positions: list[tuple[int, int]] = []
    for marker in markers:
        for match in re.finditer(rf"(?<![A-Za-z]){re.escape(marker)}(?![A-Za-z])", text):
            positions.append((match.start(), match.end()))
    return positions


def _weigh(candidate: _Candidate, line: NormalizedLine, lexicon: LexiconProvider) -> tuple[float, str]:
    weights = get_scoring_value("extraction.weights", {}) or {}
    required_weight = float(weights.get("required", 1.0))
    preferred_weight = float(weights.get("preferred", 0.5))

    markers = [
        (start, end, "required") for start, end in _find_markers(line.text, lexicon.markers("required"))
    ] + [(start, end, "preferred") for start, end in _find_markers(line.text, lexicon.markers("preferred"))]
    markers = [item for item in markers if not (candidate.start <= item[0] < candidate.end)]

    preceding = [item for item in markers if item[1] <= candidate.start]
    following = [item for item in markers if item[0] >= candidate.end]
    chosen = None
    if preceding:
        chosen = max(preceding, key=lambda item: (item[1], item[1] - item[0]))
    elif following:
        chosen = min(following, key=lambda item: (item[0], -(item[1] - item[0])))

    if chosen is not None:
        if chosen[2] == "required":
            return required_weight, "required"
        return preferred_weight, "preferred"

    if line.section == "requirements":
        return float(weights.get("requirements_section", 1.0)), "required"
    if line.section == "preferred":
        return float(weights.get("preferred_section", 0.5)), "preferred"
    return float(weights.get("default", 0.7)), "default"


def _is_title_line(line: NormalizedLine, normalized: NormalizedText, lexicon: LexiconProvider) -> bool:
    """An untitled first line with no sentence punctuation or weight marker ("Product Manager at Initech")."""
    if line.index != 0 or line.section is not None or len(normalized.lines) < 2:
        return False
    if line.original.rstrip().endswith((".", "!", "?")):
        return False
    return not _find_markers(line.text, lexicon.markers("required") + lexicon.markers("preferred"))


def extract_requirements(
    normalized: NormalizedText,
    lexicon: LexiconProvider | None = None,
) -> list[Requirement]:
    lexicon = lexicon or get_default_lexicon()
    max_ngram = int(get_scoring_value("extraction.max_ngram", 3))
    acronym_max_len = int(get_scoring_value("extraction.fallback_acronym_max_len", 5))

    by_key: dict[str, dict] = {}
    for line in normalized.lines:
        if line.section in _SKIPPED_SECTIONS or _is_title_line(line, normalized, lexicon):
            continue
        claimed: list[tuple[int, int]] = []
        candidates = _certification_candidates(line, lexicon, claimed)
        candidates += _experience_candidates(line, lexicon, claimed)
        candidates += _lexicon_candidates(line, lexicon, claimed, max_ngram, acronym_max_len)
        if line.section in _PHRASE_SECTIONS:
            candidates += _phrase_candidates(line, lexicon, claimed, max_ngram)

        for candidate in _attach_years(candidates, line):
            if not candidate.key:
                continue
            weight, importance = _weigh(candidate, line, lexicon)
            existing = by_key.get(candidate.key)
            if existing is None:
                by_key[candidate.key] = {
                    "text": candidate.text,
                    "key": candidate.key,
                    "category": candidate.category,
                    "weight": weight,
                    "importance": importance,
                    "source_line": line.line_no,
                    "source_text": line.original,
                    "aliases": list(candidate.aliases),
                    "min_years": candidate.years,
                }
                continue
            if weight > existing["weight"]:
                existing["weight"] = weight
                existing["importance"] = importance
            if candidate.years is not None:
                existing["min_years"] = max(existing["min_years"] or 0, candidate.years)

    requirements = [
        Requirement(id=f"r{position}", **fields) for position, fields in enumerate(by_key.values(), start=1)
    ]
    if not requirements:
        logger.info("requirement_extraction_empty lines=%s", len(normalized.lines))
    return requirements
