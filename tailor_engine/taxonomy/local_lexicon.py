from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from tailor_engine.normalize.utils import canonical_key, canonical_tokens

from .provider import LexiconEntry, LexiconProvider

_CATEGORY_BY_LIST = {
    "skills": "skill",
    "tools": "tool",
    "soft_skills": "soft-skill",
}


class LocalLexicon(LexiconProvider):
    """Lexicon tables loaded from a versioned JSON file next to this module."""

    def __init__(self, lexicon_path: str | Path | None = None) -> None:
        path = Path(lexicon_path) if lexicon_path else Path(__file__).with_name("lexicon.json")
        raw = self._load(path)

        self.version = str(raw.get("version") or "unversioned")
        self.stoplist = frozenset(str(word).strip().lower() for word in raw.get("stoplist", []))
        self.phrase_stoplist = self.stoplist | frozenset(
            str(word).strip().lower() for word in raw.get("phrase_stoplist", [])
        )
        self.soft_skill_cues = frozenset(str(word).strip().lower() for word in raw.get("soft_skill_cues", []))

        certifications = raw.get("certifications") or {}
        self.certification_acronyms = tuple(str(item) for item in certifications.get("acronyms", []))
        self.certification_patterns = tuple(re.compile(pattern) for pattern in certifications.get("patterns", []))
        self.experience_patterns = tuple(
            re.compile(pattern, re.IGNORECASE) for pattern in raw.get("experience_patterns", [])
        )

        markers = raw.get("weight_markers") or {}
        self._markers = {
            kind: tuple(sorted((str(item).lower() for item in markers.get(kind, [])), key=len, reverse=True))
            for kind in ("required", "preferred")
        }

        self._headers: dict[str, str] = {}
        for section, headers in (raw.get("section_headers") or {}).items():
            for header in headers:
                self._headers[str(header).strip().lower()] = str(section)

        self._adjacency = {
            str(category): tuple(str(item) for item in adjacent)
            for category, adjacent in (raw.get("adjacency") or {}).items()
        }
        self._experience_levels = {
            str(level): tuple(str(cue).lower() for cue in cues)
            for level, cues in (raw.get("experience_levels") or {}).items()
        }

        self._entries: dict[str, LexiconEntry] = {}
        self._lookup: dict[str, LexiconEntry] = {}
        self._build_entries(raw)
        self.max_phrase_tokens = max((len(key.split()) for key in self._lookup), default=1)

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        try:
            with path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except OSError as exc:
            raise RuntimeError(f"Failed to read lexicon '{path}': {exc}") from exc
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"Invalid JSON in lexicon '{path}': {exc}") from exc
        if not isinstance(raw, dict):
            raise RuntimeError(f"Invalid lexicon '{path}': expected a top-level object.")
        return raw

    def _build_entries(self, raw: dict[str, Any]) -> None:
        synonyms = {str(key): [str(alias) for alias in value] for key, value in (raw.get("synonyms") or {}).items()}

        terms: list[tuple[str, str]] = []
        for list_name, category in _CATEGORY_BY_LIST.items():
            terms.extend((str(term), category) for term in raw.get(list_name, []))
        terms.extend((acronym, "certification") for acronym in self.certification_acronyms)

        for text, category in terms:
            key = canonical_key(text)
            if not key or key in self._entries:
                continue
            aliases = tuple(synonyms.get(text, ()))
            entry = LexiconEntry(
                text=text,
                key=key,
                category=category,
                tokens=canonical_tokens(text),
                aliases=aliases,
                alias_tokens=tuple(canonical_tokens(alias) for alias in aliases),
            )
            self._entries[key] = entry
            self._lookup[key] = entry

        for entry in self._entries.values():
            for alias in entry.aliases:
                alias_key = canonical_key(alias)
                if alias_key and alias_key not in self._lookup:
                    self._lookup[alias_key] = entry

    def lookup(self, key: str) -> LexiconEntry | None:
        return self._lookup.get(key)

    def normalize_skill(self, raw: str) -> tuple[str, str | None]:
        normalized = re.sub(r"\s+", " ", raw.strip().lower())
        entry = self._lookup.get(canonical_key(raw))
        return normalized, entry.text if entry else None

    def entries(self) -> list[LexiconEntry]:
        return list(self._entries.values())

    def markers(self, kind: str) -> tuple[str, ...]:
        return self._markers.get(kind, ())

    def section_for_header(self, header: str) -> str | None:
        return self._headers.get(header.strip().lower().rstrip(":").strip())

    def adjacent_categories(self, category: str) -> tuple[str, ...]:
        return self._adjacency.get(category, (category,))

    def experience_levels(self) -> dict[str, tuple[str, ...]]:
        return dict(self._experience_levels)
