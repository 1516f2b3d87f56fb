from __future__ import annotations


def jaccard_similarity(left: set[str], right: set[str]) -> float:
    if not left and not right:
        return 0.0
    union = left | right
    if not union:
        return 0.0
    return len(left & right) / len(union)


def best_window_jaccard(needle: tuple[str, ...], haystack: tuple[str, ...]) -> float:
    """Highest Jaccard between ``needle`` and any window of ``haystack`` of similar length.

    Windows span len(needle) - 1 to len(needle) + 1 tokens, so a long bullet is
    compared phrase-to-phrase instead of diluting the overlap.
    """
    if not needle or not haystack:
        return 0.0
    target = set(needle)
    size = len(needle)
    best = 0.0
    for width in range(max(1, size - 1), size + 2):
        if width > len(haystack):
            width = len(haystack)
        for start in range(0, len(haystack) - width + 1):
            score = jaccard_similarity(target, set(haystack[start : start + width]))
            if score > best:
                best = score
        if width == len(haystack):
            break
    return best
