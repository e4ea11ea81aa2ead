"""
Scoring component - Medal classification and score sheets.

A judge scores five categories out of 20, for a total out of 100. The
performance average across judges decides its medal tier.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from dancecomp.domain.entities import Score
from dancecomp.domain.money import quantize, to_decimal

from .models import MEDAL_THRESHOLDS, MedalTier, RankedSheet, ScoreSheet

MAX_TOTAL = Decimal("100")


def score_total(score: Score) -> Decimal:
    return score.total


def classify_medal(total: Decimal | int | float | str) -> MedalTier:
    """
    Medal tier for a total in [0, 100].

    Bands are half-open: 69.99 is Bronze, 70.00 is Silver.

    Raises:
        ValueError: total outside [0, 100]
    """
    value = to_decimal(total)
    if not value.is_finite() or value < 0 or value > MAX_TOTAL:
        raise ValueError(f"Score total must be between 0 and 100, got {value}")
    for lower, tier in MEDAL_THRESHOLDS:
        if value >= lower:
            return tier
    return MedalTier.BRONZE


def average_score(
    scores: Iterable[Score],
    decimal_places: int = 2,
) -> Decimal | None:
    """Mean judge total, rounded half-up; None if nobody has scored."""
    totals = [score_total(s) for s in scores]
    if not totals:
        return None
    return quantize(sum(totals) / len(totals), decimal_places)


def build_score_sheet(
    performance_id: str,
    scores: Sequence[Score],
    decimal_places: int = 2,
) -> ScoreSheet:
    """
    Collect one performance's scores into a sheet.

    Raises:
        ValueError: a judge scored twice, or a score is for another performance
    """
    judge_totals: dict[str, Decimal] = {}
    for score in scores:
        if score.performance_id != performance_id:
            raise ValueError(
                f"Score for performance {score.performance_id} "
                f"passed for {performance_id}"
            )
        if score.judge_id in judge_totals:
            raise ValueError(
                f"Judge {score.judge_id} scored performance {performance_id} twice"
            )
        judge_totals[score.judge_id] = score_total(score)

    average = average_score(scores, decimal_places)
    return ScoreSheet(
        performance_id=performance_id,
        judge_totals=judge_totals,
        average=average,
        medal=classify_medal(average) if average is not None else None,
    )


def rank_sheets(sheets: Iterable[ScoreSheet]) -> list[RankedSheet]:
    """
    Competition ranking by average, highest first.

    Ties share a rank and the next rank is skipped (1, 2, 2, 4).
    Unscored sheets are left out.
    """
    scored = sorted(
        (s for s in sheets if s.average is not None),
        key=lambda s: s.average,
        reverse=True,
    )
    ranked: list[RankedSheet] = []
    for position, sheet in enumerate(scored, start=1):
        if ranked and ranked[-1].sheet.average == sheet.average:
            rank = ranked[-1].rank
        else:
            rank = position
        ranked.append(RankedSheet(rank=rank, sheet=sheet))
    return ranked
