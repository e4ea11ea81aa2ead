"""
In-memory engine store.

Implements every component port over plain dicts guarded by one
re-entrant lock. Used by tests and by callers that hold state elsewhere
and only need the engine's atomicity contracts within one process.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime

from dancecomp.components.event_safety import EventChangeSet, SafetyStats
from dancecomp.domain.entities import (
    DancerRegistrationState,
    Entry,
    EventRecord,
    FeeSchedule,
    Payment,
    Score,
)
from dancecomp.domain.errors import EntityNotFoundError, ItemNumberConflictError

# Payment records in these states do not count as money against an entry
INACTIVE_PAYMENT_STATUSES = frozenset({"failed", "cancelled"})


class _MemoryUnitOfWork:
    def __init__(self, store: InMemoryEngineStore, event_id: str) -> None:
        self._store = store
        self._event_id = event_id
        self.updated: EventRecord | None = None

    def load_stats(self) -> SafetyStats:
        return self._store.safety_stats(self._event_id)

    def apply(self, changes: EventChangeSet) -> None:
        event = self.updated or self._store.get_event(self._event_id)
        update: dict[str, object] = {}
        if changes.judge_count is not None:
            update["judge_count"] = changes.judge_count
        if changes.participation_mode is not None:
            update["participation_mode"] = changes.participation_mode
        if changes.event_date is not None:
            update["event_date"] = changes.event_date
        if changes.fee_changes:
            update["fee_schedule"] = FeeSchedule.model_validate(
                {**event.fee_schedule.model_dump(), **changes.fee_changes}
            )
        self.updated = event.model_copy(update=update)


class InMemoryEngineStore:
    """Thread-safe in-memory implementation of the engine's storage ports."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._events: dict[str, EventRecord] = {}
        self._entries: dict[str, Entry] = {}
        self._registrations: dict[tuple[str, str], DancerRegistrationState] = {}
        # (event_id, dancer_id) -> entry_id -> tier
        self._solo_slots: dict[tuple[str, str], dict[str, int]] = {}
        self._payments: dict[str, Payment] = {}
        self._performances: dict[str, tuple[str, bool]] = {}
        self._scores: dict[tuple[str, str], Score] = {}

    # --- Events / fee schedules ---

    def save_event(self, event: EventRecord) -> EventRecord:
        with self._lock:
            self._events[event.id] = event
            return event

    def get_event(self, event_id: str) -> EventRecord:
        with self._lock:
            event = self._events.get(event_id)
            if event is None:
                raise EntityNotFoundError("Event", event_id)
            return event

    def get_fee_schedule(self, event_id: str) -> FeeSchedule:
        return self.get_event(event_id).fee_schedule

    # --- Registration state ---

    def get_registration_states(
        self,
        event_id: str,
        dancer_ids: Sequence[str],
    ) -> dict[str, DancerRegistrationState]:
        with self._lock:
            return {
                dancer_id: self._registrations[(event_id, dancer_id)]
                for dancer_id in dancer_ids
                if (event_id, dancer_id) in self._registrations
            }

    def claim_registration(
        self,
        event_id: str,
        dancer_id: str,
        mastery_level: str,
        entry_id: str | None = None,
    ) -> bool:
        with self._lock:
            state = self._registrations.get((event_id, dancer_id))
            if state is not None and not state.needs_registration_fee:
                return False
            self._registrations[(event_id, dancer_id)] = DancerRegistrationState(
                dancer_id=dancer_id,
                event_id=event_id,
                registration_fee_paid=False,
                registration_charged=True,
                mastery_level=mastery_level,
                charged_at=datetime.now(UTC),
                charged_entry_id=entry_id,
            )
            return True

    def release_registration(self, event_id: str, dancer_id: str, entry_id: str) -> bool:
        with self._lock:
            state = self._registrations.get((event_id, dancer_id))
            if (
                state is None
                or state.charged_entry_id != entry_id
                or state.registration_fee_paid
                or entry_id in self._entries
            ):
                return False
            self._registrations[(event_id, dancer_id)] = state.model_copy(
                update={
                    "registration_charged": False,
                    "charged_entry_id": None,
                    "charged_at": None,
                }
            )
            return True

    def mark_registration_paid(self, event_id: str, dancer_id: str) -> DancerRegistrationState:
        with self._lock:
            state = self._registrations.get((event_id, dancer_id)) or DancerRegistrationState(
                dancer_id=dancer_id, event_id=event_id
            )
            state = state.model_copy(update={"registration_fee_paid": True})
            self._registrations[(event_id, dancer_id)] = state
            return state

    # --- Solo tier slots ---

    def count_solo_slots(self, event_id: str, dancer_id: str) -> int:
        with self._lock:
            return max(self._solo_slots.get((event_id, dancer_id), {}).values(), default=0)

    def claim_solo_slot(self, event_id: str, dancer_id: str, entry_id: str) -> int:
        with self._lock:
            slots = self._solo_slots.setdefault((event_id, dancer_id), {})
            if entry_id in slots:
                return slots[entry_id]
            tier = max(slots.values(), default=0) + 1
            slots[entry_id] = tier
            return tier

    def release_solo_slot(self, event_id: str, dancer_id: str, entry_id: str) -> bool:
        with self._lock:
            if entry_id in self._entries:
                return False
            slots = self._solo_slots.get((event_id, dancer_id), {})
            return slots.pop(entry_id, None) is not None

    # --- Entries ---

    def save_entry(self, entry: Entry) -> Entry:
        with self._lock:
            if entry.item_number is not None:
                holder = self.assigned_item_numbers(entry.event_id).get(entry.item_number)
                if holder is not None and holder != entry.id:
                    raise ItemNumberConflictError(entry.event_id, entry.item_number)
            self._entries[entry.id] = entry
            if entry.payment_status == "paid":
                self._settle_registrations(entry)
            return entry

    def _settle_registrations(self, entry: Entry) -> None:
        for dancer_id in entry.registration_dancer_ids:
            state = self._registrations.get((entry.event_id, dancer_id))
            if state is not None and state.charged_entry_id == entry.id:
                self._registrations[(entry.event_id, dancer_id)] = state.model_copy(
                    update={"registration_fee_paid": True}
                )

    def load_entry(self, entry_id: str) -> Entry:
        with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                raise EntityNotFoundError("Entry", entry_id)
            return entry

    def list_entries(self, event_id: str, dancer_id: str | None = None) -> list[Entry]:
        """Entries in the event, optionally those the dancer owns or dances in."""
        with self._lock:
            entries = [e for e in self._entries.values() if e.event_id == event_id]
        if dancer_id is None:
            return entries
        return [
            e for e in entries if e.owner_id == dancer_id or dancer_id in e.participant_ids
        ]

    # --- Payments ---

    def save_payment(self, payment: Payment) -> Payment:
        with self._lock:
            self._payments[payment.id] = payment
            return payment

    # --- Performances / scores ---

    def add_performance(self, performance_id: str, event_id: str, published: bool = False) -> None:
        with self._lock:
            self._performances[performance_id] = (event_id, published)

    def save_score(self, score: Score) -> Score:
        with self._lock:
            if score.performance_id not in self._performances:
                raise EntityNotFoundError("Performance", score.performance_id)
            self._scores[(score.performance_id, score.judge_id)] = score
            return score

    def list_scores(self, performance_id: str) -> list[Score]:
        with self._lock:
            return [s for (pid, _), s in self._scores.items() if pid == performance_id]

    # --- Safety stats / guarded updates ---

    def safety_stats(self, event_id: str) -> SafetyStats:
        with self._lock:
            event = self.get_event(event_id)
            entries = [e for e in self._entries.values() if e.event_id == event_id]
            active_payments = {
                p.entry_id
                for p in self._payments.values()
                if p.event_id == event_id and p.status not in INACTIVE_PAYMENT_STATUSES
            }
            performances = {
                pid: published
                for pid, (eid, published) in self._performances.items()
                if eid == event_id
            }
            scores = [s for (pid, _), s in self._scores.items() if pid in performances]
            return SafetyStats(
                entry_count=len(entries),
                live_entry_count=sum(1 for e in entries if e.entry_type == "live"),
                virtual_entry_count=sum(1 for e in entries if e.entry_type == "virtual"),
                payment_count=sum(
                    1 for e in entries if e.payment_status == "paid" or e.id in active_payments
                ),
                score_count=len(scores),
                published_score_count=sum(1 for s in scores if performances[s.performance_id]),
                performance_count=len(performances),
                current_judge_count=event.judge_count,
                event_status=event.status,
                participation_mode=event.participation_mode,
            )

    @contextmanager
    def transaction(self, event_id: str) -> Iterator[_MemoryUnitOfWork]:
        with self._lock:
            self.get_event(event_id)
            uow = _MemoryUnitOfWork(self, event_id)
            yield uow
            if uow.updated is not None:
                self._events[event_id] = uow.updated

    # --- Item numbers ---

    def assigned_item_numbers(self, event_id: str) -> dict[int, str]:
        with self._lock:
            return {
                e.item_number: e.id
                for e in self._entries.values()
                if e.event_id == event_id and e.item_number is not None
            }

    def set_item_number(self, entry_id: str, item_number: int) -> None:
        with self._lock:
            entry = self.load_entry(entry_id)
            self.save_entry(entry.model_copy(update={"item_number": item_number}))
