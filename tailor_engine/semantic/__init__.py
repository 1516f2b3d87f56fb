from .matcher import MatchThresholds, load_match_thresholds, match_requirement, match_requirements
from .similarity import best_window_jaccard, jaccard_similarity

__all__ = [
    "MatchThresholds",
    "load_match_thresholds",
    "match_requirement",
    "match_requirements",
    "best_window_jaccard",
    "jaccard_similarity",
]
