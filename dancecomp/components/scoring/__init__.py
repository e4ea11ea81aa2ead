"""
Scoring component - Score totals, medal tiers and rankings.
"""

from .component import (
    average_score,
    build_score_sheet,
    classify_medal,
    rank_sheets,
    score_total,
)
from .models import MEDAL_THRESHOLDS, MedalTier, RankedSheet, ScoreSheet

__all__ = [
    # Functions
    "average_score",
    "build_score_sheet",
    "classify_medal",
    "rank_sheets",
    "score_total",
    # Models
    "MEDAL_THRESHOLDS",
    "MedalTier",
    "RankedSheet",
    "ScoreSheet",
]
