"""
Financials component unit tests.

Tests for per-dancer outstanding/paid aggregation and event totals.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from dancecomp.components.financials import (
    AggregationInput,
    summarize_dancer,
    summarize_event,
)
from dancecomp.domain.entities import DancerRegistrationState, Entry
from dancecomp.domain.errors import AGGREGATION_FALLBACK, EntityNotFoundError


def make_entry(
    entry_id: str,
    participants: list[str],
    fee: str,
    owner: str | None = None,
    status: str = "unpaid",
    performance_type: str | None = None,
    registration: str = "0",
    registered: list[str] | None = None,
) -> Entry:
    types = {1: "Solo", 2: "Duet", 3: "Trio"}
    return Entry(
        id=entry_id,
        event_id="ev1",
        owner_id=owner or participants[0],
        participant_ids=participants,
        performance_type=performance_type or types.get(len(participants), "Group"),
        calculated_fee=Decimal(fee),
        registration_fee=Decimal(registration),
        registration_dancer_ids=registered or [],
        payment_status=status,
    )


# --- Mock Loader ---


class MockEntryLoader:
    def __init__(self, entries: list[Entry]) -> None:
        self.entries = {e.id: e for e in entries}

    def load_entry(self, entry_id: str) -> Entry:
        if entry_id not in self.entries:
            raise EntityNotFoundError("Entry", entry_id)
        return self.entries[entry_id]


@pytest.fixture
def charged_state() -> DancerRegistrationState:
    return DancerRegistrationState(dancer_id="d1", event_id="ev1", registration_charged=True)


class TestSummarizeDancer:
    """Test per-dancer aggregation."""

    def test_mixed_entries(self, charged_state: DancerRegistrationState) -> None:
        entries = (
            make_entry("s1", ["d1"], "400.00"),
            make_entry("s2", ["d1"], "350.00", status="paid"),
            make_entry("g1", ["d1", "d2", "d3"], "221.00", owner="d2"),
            make_entry("g2", ["d2", "d1"], "400.00", status="paid"),
        )
        result = summarize_dancer(
            AggregationInput(
                dancer_id="d1",
                entries=entries,
                registration_state=charged_state,
                registration_fee_amount=Decimal("300.00"),
            )
        )

        assert result.solo_outstanding == Decimal("400.00")
        assert result.solo_paid == Decimal("350.00")
        assert result.group_outstanding == Decimal("73.67")
        assert result.group_paid == Decimal("200.00")
        assert result.registration_fee_outstanding == Decimal("300.00")
        assert result.total_entry_outstanding == Decimal("473.67")
        assert result.total_outstanding == Decimal("773.67")
        assert result.total_paid == Decimal("550.00")
        assert result.entry_count == 4
        assert result.warnings == ()

    def test_paid_solo_settles_carried_registration(
        self, charged_state: DancerRegistrationState
    ) -> None:
        solo = make_entry("s1", ["d1"], "700.00", status="paid", registration="300.00", registered=["d1"])
        result = summarize_dancer(
            AggregationInput(
                dancer_id="d1",
                entries=(solo,),
                registration_state=charged_state,
                registration_fee_amount=Decimal("300.00"),
            )
        )

        assert result.registration_fee_outstanding == Decimal("0")
        assert result.registration_fee_paid_amount == Decimal("0")
        assert result.total_outstanding == Decimal("0")
        assert result.total_paid == Decimal("700.00")

    def test_unpaid_solo_owes_carried_registration_once(
        self, charged_state: DancerRegistrationState
    ) -> None:
        solo = make_entry("s1", ["d1"], "700.00", registration="300.00", registered=["d1"])
        result = summarize_dancer(
            AggregationInput(
                dancer_id="d1",
                entries=(solo,),
                registration_state=charged_state,
                registration_fee_amount=Decimal("300.00"),
            )
        )

        assert result.solo_outstanding == Decimal("700.00")
        assert result.registration_fee_outstanding == Decimal("0")
        assert result.total_outstanding == Decimal("700.00")

    def test_group_registration_charged_to_covered_dancers(self) -> None:
        trio = make_entry(
            "g1",
            ["d1", "d2", "d3"],
            "1200.00",
            owner="d2",
            registration="600.00",
            registered=["d2", "d3"],
        )

        def outstanding(dancer_id: str) -> Decimal:
            return summarize_dancer(
                AggregationInput(
                    dancer_id=dancer_id,
                    entries=(trio,),
                    registration_fee_amount=Decimal("300.00"),
                )
            ).total_outstanding

        assert outstanding("d1") == Decimal("500.00")
        assert outstanding("d2") == Decimal("500.00")
        assert outstanding("d3") == Decimal("500.00")
        # d1 carries no registration on this entry, so it is owed separately
        assert summarize_dancer(
            AggregationInput(dancer_id="d1", entries=(trio,), registration_fee_amount=Decimal("300.00"))
        ).group_outstanding == Decimal("200.00")

    def test_no_entries_is_all_zero(self) -> None:
        result = summarize_dancer(
            AggregationInput(dancer_id="d1", registration_fee_amount=Decimal("300"))
        )

        assert result.total_outstanding == Decimal("0")
        assert result.total_paid == Decimal("0")
        assert result.registration_fee_outstanding == Decimal("0")
        assert result.entry_count == 0

    def test_paid_registration(self) -> None:
        state = DancerRegistrationState(
            dancer_id="d1", event_id="ev1", registration_fee_paid=True
        )
        result = summarize_dancer(
            AggregationInput(
                dancer_id="d1",
                entries=(make_entry("s1", ["d1"], "400.00"),),
                registration_state=state,
                registration_fee_amount=Decimal("300.00"),
            )
        )

        assert result.registration_fee_outstanding == Decimal("0")
        assert result.registration_fee_paid_amount == Decimal("300.00")
        assert result.total_paid == Decimal("300.00")

    def test_other_dancers_solo_ignored(self) -> None:
        result = summarize_dancer(
            AggregationInput(dancer_id="d1", entries=(make_entry("s1", ["d2"], "400.00"),))
        )

        assert result.entry_count == 0
        assert result.solo_outstanding == Decimal("0")

    def test_duplicate_entries_counted_once(self) -> None:
        entry = make_entry("s1", ["d1"], "400.00")
        result = summarize_dancer(AggregationInput(dancer_id="d1", entries=(entry, entry)))

        assert result.solo_outstanding == Decimal("400.00")

    def test_listing_entry_loads_participants(self) -> None:
        full = make_entry("g1", ["d1", "d2", "d3"], "221.00", owner="d2")
        listed = full.model_copy(update={"participant_ids": []})
        result = summarize_dancer(
            AggregationInput(dancer_id="d3", entries=(listed,)),
            loader=MockEntryLoader([full]),
        )

        assert result.group_outstanding == Decimal("73.66")
        assert result.warnings == ()

    def test_failed_load_falls_back_to_snapshot(self) -> None:
        listed = Entry(
            id="g1",
            event_id="ev1",
            owner_id="d2",
            performance_type="Group",
            calculated_fee=Decimal("600.00"),
        )
        result = summarize_dancer(
            AggregationInput(dancer_id="d1", entries=(listed,)),
            loader=MockEntryLoader([]),
        )

        assert result.group_outstanding == Decimal("600.00")
        assert [w.code for w in result.warnings] == [AGGREGATION_FALLBACK]

    def test_missing_loader_falls_back_to_snapshot(self) -> None:
        listed = Entry(
            id="g1",
            event_id="ev1",
            owner_id="d2",
            performance_type="Duet",
            calculated_fee=Decimal("400.00"),
        )
        result = summarize_dancer(AggregationInput(dancer_id="d1", entries=(listed,)))

        assert result.group_outstanding == Decimal("400.00")
        assert len(result.warnings) == 1

    def test_non_participant_skipped_with_warning(self) -> None:
        result = summarize_dancer(
            AggregationInput(
                dancer_id="d9",
                entries=(make_entry("g1", ["d1", "d2"], "400.00"),),
            )
        )

        assert result.entry_count == 0
        assert result.group_outstanding == Decimal("0")
        assert len(result.warnings) == 1


class TestSummarizeEvent:
    """Test event-wide totals."""

    def test_totals(self) -> None:
        entries = [
            make_entry("s1", ["d1"], "400.00", status="paid"),
            make_entry("g1", ["d1", "d2"], "400.00"),
            make_entry("g1", ["d1", "d2"], "400.00"),
        ]
        result = summarize_event(entries)

        assert result.invoiced == Decimal("800.00")
        assert result.paid == Decimal("400.00")
        assert result.outstanding == Decimal("400.00")
        assert result.entry_count == 2
        assert result.paid_entry_count == 1
