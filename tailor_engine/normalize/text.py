"""Text normalizer for job postings and resume fields.

Lines keep their original casing for display and carry a lower-cased copy plus
surface tokens for matching. Boilerplate headers ("Requirements:",
"Responsibilities:") are stripped and turned into section labels for the lines
that follow them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tailor_engine.taxonomy import LexiconProvider, get_default_lexicon

from .utils import enumerate_lines, normalize_line, split_inline_bullets, strip_bullet_prefix, tokenize

_MAX_HEADER_WORDS = 6


@dataclass(slots=True)
class NormalizedLine:
    index: int
    line_no: int
    original: str
    text: str
    section: str | None
    tokens: list[str] = field(default_factory=list)


@dataclass(slots=True)
class NormalizedText:
    lines: list[NormalizedLine] = field(default_factory=list)
    tokens: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class InsufficientInput:
    field: str
    length: int
    min_chars: int
    message: str


def validate_text(text: str | None, *, min_chars: int, field: str) -> InsufficientInput | None:
    stripped = (text or "").strip()
    if not stripped:
        return InsufficientInput(
            field=field,
            length=0,
            min_chars=min_chars,
            message=f"The {field} is empty.",
        )
    if len(stripped) < min_chars:
        return InsufficientInput(
            field=field,
            length=len(stripped),
            min_chars=min_chars,
            message=(
                f"The {field} is too short ({len(stripped)} characters); "
                f"please provide at least {min_chars} characters."
            ),
        )
    return None


def normalize_field(text: str | None) -> tuple[str, str]:
    """Return (display text, matching text) for a single resume field."""
    display = strip_bullet_prefix(normalize_line(text or ""))
    return display, display.lower()


def _split_header(line: str, lexicon: LexiconProvider) -> tuple[str | None, str]:
    head, sep, rest = line.partition(":")
    if sep:
        section = lexicon.section_for_header(head)
        if section is not None:
            return section, rest.strip()
        return None, line
    if len(line.split()) <= _MAX_HEADER_WORDS:
        section = lexicon.section_for_header(line)
        if section is not None:
            return section, ""
    return None, line


def normalize_text(text: str | None, lexicon: LexiconProvider | None = None) -> NormalizedText:
    lexicon = lexicon or get_default_lexicon()
    result = NormalizedText()
    current_section: str | None = None

    for line_no, raw_line in enumerate_lines(text or ""):
        collapsed = normalize_line(raw_line)
        if not collapsed:
            continue
        for piece in split_inline_bullets(collapsed):
            cleaned = strip_bullet_prefix(piece)
            if not cleaned:
                continue
            section, content = _split_header(cleaned, lexicon)
            if section is not None:
                current_section = section
            if not content:
                continue
            content = strip_bullet_prefix(content)
            tokens = tokenize(content)
            if not tokens:
                continue
            result.lines.append(
                NormalizedLine(
                    index=len(result.lines),
                    line_no=line_no,
                    original=content,
                    text=content.lower(),
                    section=current_section,
                    tokens=tokens,
                )
            )
            result.tokens.extend(tokens)

    return result
