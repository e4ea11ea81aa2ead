"""
Item number component unit tests.
"""

from __future__ import annotations

import pytest

from dancecomp.components.item_numbers import (
    assign_item_number,
    next_item_number,
    validate_item_number,
)
from dancecomp.domain.entities import Entry
from dancecomp.domain.errors import ItemNumberConflictError

# --- Mock Store ---


class MockItemNumberStore:
    def __init__(self, entries: list[Entry]) -> None:
        self.entries = {e.id: e for e in entries}
        # Simulates another writer taking the number after validation
        self.race_with: str | None = None

    def assigned_item_numbers(self, event_id: str) -> dict[int, str]:
        return {
            e.item_number: e.id
            for e in self.entries.values()
            if e.event_id == event_id and e.item_number is not None
        }

    def set_item_number(self, entry_id: str, item_number: int) -> None:
        entry = self.entries[entry_id]
        if self.race_with is not None:
            raise ItemNumberConflictError(entry.event_id, item_number)
        self.entries[entry_id] = entry.model_copy(update={"item_number": item_number})


def make_entry(entry_id: str, approved: bool = True, item_number: int | None = None) -> Entry:
    return Entry(
        id=entry_id,
        event_id="ev1",
        owner_id="d1",
        participant_ids=["d1"],
        performance_type="Solo",
        approved=approved,
        item_number=item_number,
    )


@pytest.fixture
def store() -> MockItemNumberStore:
    return MockItemNumberStore([make_entry("e1", item_number=1), make_entry("e2")])


class TestValidateItemNumber:
    """Test item number validation."""

    def test_valid(self) -> None:
        assert validate_item_number(make_entry("e2"), 2, {1: "e1"}) == []

    def test_reassigning_own_number_is_valid(self) -> None:
        assert validate_item_number(make_entry("e1"), 1, {1: "e1"}) == []

    def test_taken(self) -> None:
        errors = validate_item_number(make_entry("e2"), 1, {1: "e1"})

        assert [e.code for e in errors] == ["item_number_taken"]

    def test_not_positive(self) -> None:
        errors = validate_item_number(make_entry("e2"), 0, {})

        assert [e.code for e in errors] == ["invalid_item_number"]

    def test_unapproved(self) -> None:
        errors = validate_item_number(make_entry("e2", approved=False), 5, {})

        assert [e.code for e in errors] == ["entry_not_approved"]


class TestNextItemNumber:
    def test_empty_event(self) -> None:
        assert next_item_number([]) == 1

    def test_after_maximum(self) -> None:
        assert next_item_number([3, 1, 7]) == 8


class TestAssignItemNumber:
    """Test assignment through the store."""

    def test_assigns(self, store: MockItemNumberStore) -> None:
        result = assign_item_number(store.entries["e2"], 2, store=store)

        assert result.success is True
        assert result.item_number == 2
        assert store.entries["e2"].item_number == 2

    def test_duplicate_rejected(self, store: MockItemNumberStore) -> None:
        result = assign_item_number(store.entries["e2"], 1, store=store)

        assert result.success is False
        assert store.entries["e2"].item_number is None

    def test_lost_race_surfaces_as_error(self, store: MockItemNumberStore) -> None:
        store.race_with = "e3"
        result = assign_item_number(store.entries["e2"], 2, store=store)

        assert result.success is False
        assert result.errors[0].code == "item_number_taken"
