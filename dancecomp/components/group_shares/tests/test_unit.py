"""
Group share component unit tests.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from dancecomp.components.group_shares import (
    AllocationInput,
    allocate_shares,
    run,
    share_for,
    split_minor_units,
)
from dancecomp.domain.errors import (
    AllocationError,
    EngineError,
    InvalidParticipantCountError,
)


class TestSplitMinorUnits:
    """Test integer splitting."""

    def test_remainder_goes_to_front(self) -> None:
        assert split_minor_units(22100, 3) == [7367, 7367, 7366]

    def test_even_split(self) -> None:
        assert split_minor_units(60000, 4) == [15000, 15000, 15000, 15000]

    def test_fewer_units_than_participants(self) -> None:
        assert split_minor_units(2, 3) == [1, 1, 0]


class TestAllocateShares:
    """Test per-participant allocation."""

    def test_three_way_split_sums_exactly(self) -> None:
        result = allocate_shares(Decimal("221.00"), ["a", "b", "c"])

        assert [s.share for s in result.shares] == [
            Decimal("73.67"),
            Decimal("73.67"),
            Decimal("73.66"),
        ]
        assert sum(s.share for s in result.shares) == Decimal("221.00")
        assert result.total == Decimal("221.00")

    def test_owner_obligation_is_full_fee(self) -> None:
        result = allocate_shares(Decimal("400.00"), ["a", "b"], owner_id="a")
        owner = result.share_of("a")
        other = result.share_of("b")

        assert owner.is_main_contestant is True
        assert owner.obligation == Decimal("400.00")
        assert other.is_main_contestant is False
        assert other.obligation == Decimal("200.00")

    @pytest.mark.parametrize("count", [1, 2, 3, 7, 11])
    @pytest.mark.parametrize("fee", ["0.00", "0.01", "100.00", "999.99", "1234.57"])
    def test_shares_always_sum_to_fee(self, fee: str, count: int) -> None:
        ids = [f"d{i}" for i in range(count)]
        shares = [s.share for s in allocate_shares(Decimal(fee), ids).shares]

        assert sum(shares) == Decimal(fee)
        assert max(shares) - min(shares) <= Decimal("0.01")

    def test_empty_participants_rejected(self) -> None:
        with pytest.raises(InvalidParticipantCountError):
            allocate_shares(Decimal("100"), [])

    def test_duplicate_participants_rejected(self) -> None:
        with pytest.raises(AllocationError):
            allocate_shares(Decimal("100"), ["a", "a"])

    def test_negative_fee_rejected(self) -> None:
        with pytest.raises(AllocationError):
            allocate_shares(Decimal("-1"), ["a"])

    def test_sub_minor_unit_fee_rejected(self) -> None:
        with pytest.raises(AllocationError):
            allocate_shares(Decimal("10.005"), ["a", "b"])

    def test_run(self) -> None:
        result = run(AllocationInput(Decimal("10.00"), ("a", "b", "c"), owner_id="c"))

        assert [s.share for s in result.shares] == [
            Decimal("3.34"),
            Decimal("3.33"),
            Decimal("3.33"),
        ]
        assert result.share_of("c").obligation == Decimal("10.00")


class TestShareFor:
    """Test single-participant lookups."""

    def test_share_for_participant(self) -> None:
        assert share_for(Decimal("221.00"), ["a", "b", "c"], "c") == Decimal("73.66")

    def test_unknown_dancer_rejected(self) -> None:
        with pytest.raises(AllocationError):
            share_for(Decimal("221.00"), ["a", "b"], "z")

    def test_unknown_dancer_error_is_engine_error(self) -> None:
        with pytest.raises(EngineError, match="z is not a participant"):
            share_for(Decimal("0.01"), ["a", "b", "c"], "z")
