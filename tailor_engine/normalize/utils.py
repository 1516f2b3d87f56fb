from __future__ import annotations

import re
from functools import lru_cache

from nltk.stem import PorterStemmer

_BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_BULLET_PATTERN = re.compile(rf"^\s*(?:[{re.escape(_BULLET_CHARS)}]|(?:\d+[\.\)]))\s+")
_INLINE_BULLET_PATTERN = re.compile(r"\s*[•◦▪▫●○■□◆◇▶►·]\s+")
_TOKEN_PATTERN = re.compile(r"[a-z0-9][a-z0-9+#./]*[a-z0-9+#]|[a-z0-9]")
_SENTENCE_PATTERN = re.compile(r"(?<=[.!?])\s+(?=[A-Z0-9])")
_SHORT_SLASH_TOKEN_MAX = 7

_stemmer = PorterStemmer()


def enumerate_lines(text: str) -> list[tuple[int, str]]:
    return [(index + 1, line) for index, line in enumerate(text.splitlines())]


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line).strip()


def is_bullet_like(line: str) -> bool:
    return bool(_BULLET_PATTERN.match(line))


def strip_bullet_prefix(line: str) -> str:
    return _BULLET_PATTERN.sub("", line).strip()


def split_inline_bullets(line: str) -> list[str]:
    parts = [part.strip() for part in _INLINE_BULLET_PATTERN.split(line)]
    return [part for part in parts if part]


def split_sentences(text: str) -> list[str]:
    parts = [normalize_line(part) for part in _SENTENCE_PATTERN.split(text or "")]
    return [part for part in parts if part]


def contains_any(text: str, markers: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def tokenize_with_spans(text: str) -> list[tuple[str, int, int]]:
    """Lower-case surface tokens with character offsets into ``text``.

    Keeps c++, c#, node.js and short slash terms such as ci/cd intact; longer
    slash-joined words ("python/django") are split.
    """
    spans: list[tuple[str, int, int]] = []
    for match in _TOKEN_PATTERN.finditer((text or "").lower()):
        token = match.group(0)
        if "/" in token and len(token) > _SHORT_SLASH_TOKEN_MAX:
            offset = match.start()
            for part in token.split("/"):
                if part:
                    spans.append((part, offset, offset + len(part)))
                offset += len(part) + 1
            continue
        spans.append((token, match.start(), match.end()))
    return spans


def tokenize(text: str) -> list[str]:
    return [token for token, _, _ in tokenize_with_spans(text)]


@lru_cache(maxsize=8192)
def stem_token(token: str) -> str:
    if len(token) <= 3 or not token.isalpha():
        return token
    return _stemmer.stem(token)


def canonical_tokens(text: str) -> tuple[str, ...]:
    return tuple(stem_token(token) for token in tokenize(text))


def canonical_key(text: str) -> str:
    """Stemmed base form used to deduplicate and look up phrases."""
    return " ".join(canonical_tokens(text))


def content_stems(tokens: list[str] | tuple[str, ...], stoplist: frozenset[str]) -> tuple[str, ...]:
    """Stems of non-stoplisted tokens; falls back to all stems when everything is stoplisted."""
    kept = tuple(stem_token(token) for token in tokens if token not in stoplist)
    if kept:
        return kept
    return tuple(stem_token(token) for token in tokens)


def contains_sequence(haystack: tuple[str, ...] | list[str], needle: tuple[str, ...]) -> bool:
    size = len(needle)
    if size == 0 or size > len(haystack):
        return False
    for start in range(0, len(haystack) - size + 1):
        if tuple(haystack[start : start + size]) == needle:
            return True
    return False
