from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class LexiconEntry:
    text: str
    key: str
    category: str
    tokens: tuple[str, ...]
    aliases: tuple[str, ...] = ()
    alias_tokens: tuple[tuple[str, ...], ...] = ()


class LexiconProvider(Protocol):
    version: str
    stoplist: frozenset[str]
    phrase_stoplist: frozenset[str]
    max_phrase_tokens: int
    certification_acronyms: tuple[str, ...]
    certification_patterns: tuple[re.Pattern[str], ...]
    experience_patterns: tuple[re.Pattern[str], ...]
    soft_skill_cues: frozenset[str]

    def lookup(self, key: str) -> LexiconEntry | None:
        """Return the entry whose canonical or alias key equals ``key``."""

    def normalize_skill(self, raw: str) -> tuple[str, str | None]:
        """Return normalized text and optional canonical display text."""

    def markers(self, kind: str) -> tuple[str, ...]:
        """Return weight markers for 'required' or 'preferred'."""

    def section_for_header(self, header: str) -> str | None:
        """Map a posting header line to a section label."""

    def adjacent_categories(self, category: str) -> tuple[str, ...]:
        """Categories considered topically adjacent to ``category``."""

    def experience_levels(self) -> dict[str, tuple[str, ...]]:
        """Experience level label to cue phrases, most senior first."""
