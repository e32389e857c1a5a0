"""Term matching against a target job description.

Public API:
    - TermMatchingService: tiered exact/lexical/semantic matcher
    - Match, MatchKind, SemanticJudgement: data models
    - MatchingConfig / get_matching_config: MATCHING_-prefixed settings
"""

from src.matching.config import MatchingConfig, get_matching_config
from src.matching.models import Match, MatchKind, SemanticJudgement, sort_matches
from src.matching.service import TermMatchingService

__all__ = [
    "TermMatchingService",
    "Match",
    "MatchKind",
    "SemanticJudgement",
    "sort_matches",
    "MatchingConfig",
    "get_matching_config",
]
