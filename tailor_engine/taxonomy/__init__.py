from functools import lru_cache

from tailor_engine.core.config import settings

from .local_lexicon import LocalLexicon
from .provider import LexiconEntry, LexiconProvider


@lru_cache(maxsize=1)
def get_default_lexicon() -> LexiconProvider:
    return LocalLexicon(settings.lexicon_path)


__all__ = ["LexiconEntry", "LexiconProvider", "LocalLexicon", "get_default_lexicon"]
