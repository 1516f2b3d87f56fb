from __future__ import annotations

import re

from tailor_engine.normalize.text import NormalizedText
from tailor_engine.schemas import JobPosting, PostingProfile
from tailor_engine.taxonomy import LexiconProvider, get_default_lexicon

_LEVEL_ORDER = ("executive", "senior", "mid", "junior", "entry")
_MAX_RESPONSIBILITIES = 20


def _detect_level(text: str, lexicon: LexiconProvider) -> str | None:
    lowered = text.lower()
    cues = lexicon.experience_levels()
    for level in _LEVEL_ORDER:
        for cue in cues.get(level, ()):
            if re.search(rf"(?<![a-z]){re.escape(cue)}(?![a-z])", lowered):
                return level
    return None


def build_posting_profile(
    posting: JobPosting,
    normalized: NormalizedText,
    lexicon: LexiconProvider | None = None,
) -> PostingProfile:
    lexicon = lexicon or get_default_lexicon()
    title = posting.title or (normalized.lines[0].original if normalized.lines else None)

    level = _detect_level(title or "", lexicon)
    if level is None:
        for line in normalized.lines[:5]:
            level = _detect_level(line.original, lexicon)
            if level is not None:
                break

    responsibilities = [
        line.original for line in normalized.lines if line.section == "responsibilities"
    ][:_MAX_RESPONSIBILITIES]

    return PostingProfile(
        title=title,
        company=posting.company,
        experience_level=level or "unspecified",
        responsibilities=responsibilities,
    )
