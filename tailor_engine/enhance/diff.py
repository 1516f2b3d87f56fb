from __future__ import annotations

import re
from difflib import SequenceMatcher

from tailor_engine.schemas import DiffSegment

_WORD_RE = re.compile(r"\S+\s*")


def _words(text: str) -> list[str]:
    return _WORD_RE.findall(text or "")


def word_diff(old_text: str | None, new_text: str) -> list[DiffSegment]:
    """Word-level diff of ``old_text`` against ``new_text``; adjacent ops are merged."""
    if not old_text:
        return [DiffSegment(op="insert", text=new_text)] if new_text else []

    old_words = _words(old_text)
    new_words = _words(new_text)
    segments: list[DiffSegment] = []

    def push(op: str, words: list[str]) -> None:
        text = "".join(words)
        if not text:
            return
        if segments and segments[-1].op == op:
            segments[-1] = DiffSegment(op=op, text=segments[-1].text + text)
        else:
            segments.append(DiffSegment(op=op, text=text))

    matcher = SequenceMatcher(a=old_words, b=new_words, autojunk=False)
    for tag, old_start, old_end, new_start, new_end in matcher.get_opcodes():
        if tag == "equal":
            push("equal", new_words[new_start:new_end])
            continue
        if tag in {"delete", "replace"}:
            push("delete", old_words[old_start:old_end])
        if tag in {"insert", "replace"}:
            push("insert", new_words[new_start:new_end])
    return segments
