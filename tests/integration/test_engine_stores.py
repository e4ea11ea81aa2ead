"""
Engine store integration tests.

Every test runs against both the in-memory store and the SQLite store,
through the component services that consume their ports.
"""

from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal

import pytest

from dancecomp.components.entry_fees import (
    EntryFeeInput,
    EntryFeeService,
    entry_from_submission,
)
from dancecomp.components.event_safety import EventChangeSet, apply_event_update
from dancecomp.components.financials import AggregationInput, summarize_dancer
from dancecomp.components.item_numbers import assign_item_number
from dancecomp.components.scoring import build_score_sheet
from dancecomp.domain.entities import Payment, Score
from dancecomp.domain.errors import (
    EntityNotFoundError,
    ItemNumberConflictError,
    SafetyCheckBlockedError,
)


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def service(store, rules) -> EntryFeeService:
    return EntryFeeService(schedules=store, registrations=store, tiers=store, rules=rules)


def submit_and_save(
    service, store, participants, entry_id, owner=None, entry_type="live", **fields
):
    inp = EntryFeeInput(
        event_id="ev1",
        owner_id=owner or participants[0],
        participant_ids=tuple(participants),
        entry_id=entry_id,
        entry_type=entry_type,
    )
    submission = service.submit(inp)
    entry = entry_from_submission(inp, submission, **fields)
    store.save_entry(entry)
    return submission, entry


class TestEvents:
    def test_round_trip(self, store, event) -> None:
        loaded = store.get_event("ev1")

        assert loaded.fee_schedule == event.fee_schedule
        assert loaded.judge_count == event.judge_count

    def test_unknown_event(self, store) -> None:
        with pytest.raises(EntityNotFoundError):
            store.get_fee_schedule("missing")


class TestSubmissions:
    def test_solo_sequence_and_registration(self, service, store) -> None:
        fees = [submit_and_save(service, store, ["d1"], f"e{i}")[0] for i in range(5)]

        assert [s.tier for s in fees] == [1, 2, 3, 4, 5]
        assert [s.calculated_fee for s in fees] == [
            Decimal("700.00"),
            Decimal("350.00"),
            Decimal("300.00"),
            Decimal("100.00"),
            Decimal("100.00"),
        ]
        state = store.get_registration_states("ev1", ["d1"])["d1"]
        assert state.registration_charged is True
        assert state.registration_fee_paid is False

    def test_resubmitting_same_entry_keeps_tier(self, service, store) -> None:
        first, _ = submit_and_save(service, store, ["d1"], "e1")
        again = service.submit(
            EntryFeeInput(event_id="ev1", owner_id="d1", participant_ids=("d1",), entry_id="e1")
        )

        assert again.tier == first.tier == 1
        assert store.count_solo_slots("ev1", "d1") == 1

    def test_paid_registration_not_recharged(self, service, store) -> None:
        store.mark_registration_paid("ev1", "d2")
        submission, _ = submit_and_save(service, store, ["d2"], "e1")

        assert submission.calculated_fee == Decimal("400.00")
        assert submission.registration_claimed_ids == ()

    def test_concurrent_solo_claims_get_distinct_tiers(self, service, store) -> None:
        results: list[int] = []
        errors: list[BaseException] = []
        lock = threading.Lock()

        def worker(n: int) -> None:
            try:
                sub = service.submit(
                    EntryFeeInput(
                        event_id="ev1",
                        owner_id="d1",
                        participant_ids=("d1",),
                        entry_id=f"t{n}",
                    )
                )
                with lock:
                    results.append(sub.tier)
            except BaseException as e:  # noqa: BLE001
                with lock:
                    errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(results) == list(range(1, 9))
        states = store.get_registration_states("ev1", ["d1"])
        assert states["d1"].registration_charged is True

    def test_list_entries_for_dancer(self, service, store) -> None:
        submit_and_save(service, store, ["d1"], "e1")
        submit_and_save(service, store, ["d2", "d1", "d3"], "e2", owner="d2")
        submit_and_save(service, store, ["d4"], "e3")

        ids = {e.id for e in store.list_entries("ev1", "d1")}
        assert ids == {"e1", "e2"}
        assert len(store.list_entries("ev1")) == 3


class TestFinancials:
    def test_summary_from_stored_entries(self, service, store) -> None:
        submit_and_save(service, store, ["d1"], "e1")
        _, group = submit_and_save(service, store, ["d2", "d1", "d3"], "e2", owner="d2")

        summary = summarize_dancer(
            AggregationInput(
                dancer_id="d1",
                entries=tuple(store.list_entries("ev1", "d1")),
                registration_state=store.get_registration_states("ev1", ["d1"])["d1"],
                registration_fee_amount=Decimal("300.00"),
            ),
            loader=store,
        )

        # Trio: 3 x 200 plus registration for d2 and d3; d1 registered on e1
        assert group.calculated_fee == Decimal("1200.00")
        assert group.registration_dancer_ids == ["d2", "d3"]
        assert summary.solo_outstanding == Decimal("700.00")
        assert summary.group_outstanding == Decimal("200.00")
        assert summary.registration_fee_outstanding == Decimal("0")
        assert summary.total_outstanding == Decimal("900.00")
        assert summary.entry_count == 2

    def test_paid_entry_settles_its_registration(self, service, store) -> None:
        submit_and_save(service, store, ["d1"], "e1", payment_status="paid")

        state = store.get_registration_states("ev1", ["d1"])["d1"]
        summary = summarize_dancer(
            AggregationInput(
                dancer_id="d1",
                entries=tuple(store.list_entries("ev1", "d1")),
                registration_state=state,
                registration_fee_amount=Decimal("300.00"),
            ),
            loader=store,
        )

        assert state.registration_fee_paid is True
        assert summary.total_outstanding == Decimal("0")
        assert summary.total_paid == Decimal("700.00")


class TestReleases:
    def test_unsaved_claims_released(self, store) -> None:
        assert store.claim_solo_slot("ev1", "d1", "e1") == 1
        assert store.claim_registration("ev1", "d1", None, entry_id="e1") is True

        assert store.release_registration("ev1", "d1", "e1") is True
        assert store.release_solo_slot("ev1", "d1", "e1") is True

        assert store.count_solo_slots("ev1", "d1") == 0
        assert store.get_registration_states("ev1", ["d1"])["d1"].registration_charged is False
        assert store.claim_solo_slot("ev1", "d1", "e2") == 1

    def test_saved_entry_keeps_claims(self, service, store) -> None:
        submit_and_save(service, store, ["d1"], "e1")

        assert store.release_registration("ev1", "d1", "e1") is False
        assert store.release_solo_slot("ev1", "d1", "e1") is False
        assert store.count_solo_slots("ev1", "d1") == 1
        assert store.get_registration_states("ev1", ["d1"])["d1"].registration_charged is True

    def test_other_entry_cannot_release_registration(self, store) -> None:
        store.claim_registration("ev1", "d1", None, entry_id="e1")

        assert store.release_registration("ev1", "d1", "e2") is False
        assert store.get_registration_states("ev1", ["d1"])["d1"].registration_charged is True


class TestGuardedUpdates:
    def test_fee_change_blocked_after_payment(self, service, store) -> None:
        _, entry = submit_and_save(service, store, ["d1"], "e1")
        changes = EventChangeSet(fee_changes={"solo_1_fee": Decimal("500")})

        store.save_payment(
            Payment(id="p1", entry_id=entry.id, event_id="ev1", status="paid", amount=Decimal("700"))
        )
        with pytest.raises(SafetyCheckBlockedError):
            apply_event_update("ev1", changes, store=store)
        assert store.get_fee_schedule("ev1").solo_1_fee == Decimal("400")

    def test_failed_payment_does_not_block(self, service, store) -> None:
        _, entry = submit_and_save(service, store, ["d1"], "e1")
        store.save_payment(Payment(id="p1", entry_id=entry.id, event_id="ev1", status="failed"))

        result = apply_event_update(
            "ev1", EventChangeSet(fee_changes={"solo_1_fee": Decimal("500")}), store=store
        )

        assert result.applied is True
        assert store.get_fee_schedule("ev1").solo_1_fee == Decimal("500")

    def test_judge_count_blocked_once_scored(self, store) -> None:
        store.add_performance("perf1", "ev1")
        store.save_score(
            Score(
                performance_id="perf1",
                judge_id="j1",
                technical=Decimal("18"),
                musical=Decimal("18"),
                performance=Decimal("18"),
                styling=Decimal("18"),
                overall_impression=Decimal("18"),
            )
        )

        assert store.safety_stats("ev1").score_count == 1
        with pytest.raises(SafetyCheckBlockedError):
            apply_event_update("ev1", EventChangeSet(judge_count=5), store=store)
        assert store.get_event("ev1").judge_count == 3
        assert build_score_sheet("perf1", store.list_scores("perf1")).average == Decimal("90.00")

    def test_applies_mode_and_date(self, service, store) -> None:
        submit_and_save(service, store, ["d1"], "e1", entry_type="virtual")
        changes = EventChangeSet(participation_mode="live", event_date=date(2026, 11, 20))

        result = apply_event_update("ev1", changes, store=store, confirmed=True)

        assert result.result.status == "risky"
        event = store.get_event("ev1")
        assert event.participation_mode == "live"
        assert event.event_date == date(2026, 11, 20)

    def test_stats_counts(self, service, store) -> None:
        submit_and_save(service, store, ["d1"], "e1")
        submit_and_save(service, store, ["d2"], "e2", entry_type="virtual")

        stats = store.safety_stats("ev1")
        assert stats.entry_count == 2
        assert stats.live_entry_count == 1
        assert stats.virtual_entry_count == 1
        assert stats.payment_count == 0
        assert stats.current_judge_count == 3


class TestItemNumbers:
    def test_assign_and_conflict(self, service, store) -> None:
        _, first = submit_and_save(service, store, ["d1"], "e1")
        _, second = submit_and_save(service, store, ["d2"], "e2")
        first = first.model_copy(update={"approved": True})
        second = second.model_copy(update={"approved": True})
        store.save_entry(first)
        store.save_entry(second)

        assert assign_item_number(first, 1, store=store).success is True
        assert assign_item_number(second, 1, store=store).success is False
        assert store.assigned_item_numbers("ev1") == {1: "e1"}

    def test_store_enforces_uniqueness(self, service, store) -> None:
        _, first = submit_and_save(service, store, ["d1"], "e1")
        _, second = submit_and_save(service, store, ["d2"], "e2")
        store.set_item_number(first.id, 7)

        with pytest.raises(ItemNumberConflictError):
            store.set_item_number(second.id, 7)
