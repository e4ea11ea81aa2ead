"""
Scoring component unit tests.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from dancecomp.components.scoring import (
    MedalTier,
    average_score,
    build_score_sheet,
    classify_medal,
    rank_sheets,
    score_total,
)
from dancecomp.domain.entities import Score


def make_score(judge_id: str, each: str, performance_id: str = "p1") -> Score:
    value = Decimal(each)
    return Score(
        performance_id=performance_id,
        judge_id=judge_id,
        technical=value,
        musical=value,
        performance=value,
        styling=value,
        overall_impression=value,
    )


class TestClassifyMedal:
    """Test medal bands."""

    @pytest.mark.parametrize(
        ("total", "expected"),
        [
            ("0", MedalTier.BRONZE),
            ("69.99", MedalTier.BRONZE),
            ("70.00", MedalTier.SILVER),
            ("74.99", MedalTier.SILVER),
            ("75", MedalTier.SILVER_PLUS),
            ("80", MedalTier.GOLD),
            ("85", MedalTier.LEGEND),
            ("89.99", MedalTier.LEGEND),
            ("90", MedalTier.OPUS),
            ("94.99", MedalTier.OPUS),
            ("95.00", MedalTier.ELITE),
            ("100", MedalTier.ELITE),
        ],
    )
    def test_bands(self, total: str, expected: MedalTier) -> None:
        assert classify_medal(Decimal(total)) == expected

    @pytest.mark.parametrize("total", ["-0.01", "100.01", "NaN"])
    def test_out_of_range(self, total: str) -> None:
        with pytest.raises(ValueError):
            classify_medal(Decimal(total))

    def test_tier_values(self) -> None:
        assert MedalTier.SILVER_PLUS.value == "Silver+"


class TestScores:
    """Test totals and averages."""

    def test_total(self) -> None:
        assert score_total(make_score("j1", "17.5")) == Decimal("87.5")

    def test_subscore_range_enforced(self) -> None:
        with pytest.raises(ValueError):
            make_score("j1", "20.5")

    def test_average_rounds_half_up(self) -> None:
        scores = [make_score("j1", "17"), make_score("j2", "17"), make_score("j3", "16.001")]
        # totals 85, 85, 80.005 -> mean 83.335
        assert average_score(scores) == Decimal("83.34")

    def test_average_of_nothing(self) -> None:
        assert average_score([]) is None


class TestScoreSheets:
    """Test sheets and rankings."""

    def test_build_sheet(self) -> None:
        sheet = build_score_sheet("p1", [make_score("j1", "18"), make_score("j2", "19")])

        assert sheet.judge_count == 2
        assert sheet.average == Decimal("92.50")
        assert sheet.medal == MedalTier.OPUS

    def test_empty_sheet(self) -> None:
        sheet = build_score_sheet("p1", [])

        assert sheet.average is None
        assert sheet.medal is None

    def test_duplicate_judge_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_score_sheet("p1", [make_score("j1", "18"), make_score("j1", "17")])

    def test_foreign_score_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_score_sheet("p1", [make_score("j1", "18", performance_id="p2")])

    def test_competition_ranking(self) -> None:
        sheets = [
            build_score_sheet("a", [make_score("j1", "15", "a")]),
            build_score_sheet("b", [make_score("j1", "18", "b")]),
            build_score_sheet("c", [make_score("j1", "18", "c")]),
            build_score_sheet("d", []),
            build_score_sheet("e", [make_score("j1", "14", "e")]),
        ]
        ranked = rank_sheets(sheets)

        assert [(r.rank, r.sheet.performance_id) for r in ranked] == [
            (1, "b"),
            (1, "c"),
            (3, "a"),
            (4, "e"),
        ]
