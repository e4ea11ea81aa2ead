"""
Scoring component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class MedalTier(str, Enum):
    """Medal tiers by total score, lowest first."""

    BRONZE = "Bronze"
    SILVER = "Silver"
    SILVER_PLUS = "Silver+"
    GOLD = "Gold"
    LEGEND = "Legend"
    OPUS = "Opus"
    ELITE = "Elite"


# Lower bound (inclusive) of each tier; each band runs to the next bound.
MEDAL_THRESHOLDS: tuple[tuple[Decimal, MedalTier], ...] = (
    (Decimal("95"), MedalTier.ELITE),
    (Decimal("90"), MedalTier.OPUS),
    (Decimal("85"), MedalTier.LEGEND),
    (Decimal("80"), MedalTier.GOLD),
    (Decimal("75"), MedalTier.SILVER_PLUS),
    (Decimal("70"), MedalTier.SILVER),
    (Decimal("0"), MedalTier.BRONZE),
)


@dataclass(frozen=True)
class ScoreSheet:
    """All judges' totals for one performance."""

    performance_id: str
    judge_totals: dict[str, Decimal]
    average: Decimal | None
    medal: MedalTier | None

    @property
    def judge_count(self) -> int:
        return len(self.judge_totals)


@dataclass(frozen=True)
class RankedSheet:
    rank: int
    sheet: ScoreSheet
