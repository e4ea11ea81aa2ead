"""
Item number component - Running-order numbers for approved entries.

Invariants:
- Item numbers are unique per event among assigned entries
- Only approved entries receive numbers
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from dancecomp.domain.entities import Entry
from dancecomp.domain.errors import ItemNumberConflictError

from .models import AssignItemNumberOutput, ItemNumberError
from .ports import ItemNumberPort

logger = logging.getLogger(__name__)


def validate_item_number(
    entry: Entry,
    item_number: int,
    assigned: Mapping[int, str],
) -> list[ItemNumberError]:
    """
    Check a proposed item number for an entry.

    Args:
        entry: Entry receiving the number
        item_number: Proposed number
        assigned: Item number to entry id for the entry's event
    """
    errors: list[ItemNumberError] = []

    if item_number < 1:
        errors.append(
            ItemNumberError(
                code="invalid_item_number",
                message="Item number must be a positive integer",
            )
        )
    if not entry.approved:
        errors.append(
            ItemNumberError(
                code="entry_not_approved",
                message=f"Entry {entry.id} must be approved before numbering",
            )
        )
    holder = assigned.get(item_number)
    if holder is not None and holder != entry.id:
        errors.append(
            ItemNumberError(
                code="item_number_taken",
                message=f"Item number {item_number} is already assigned to another entry",
            )
        )

    return errors


def next_item_number(assigned: Iterable[int]) -> int:
    """One past the highest assigned number; 1 for an empty event."""
    return max(assigned, default=0) + 1


def assign_item_number(
    entry: Entry,
    item_number: int,
    *,
    store: ItemNumberPort,
) -> AssignItemNumberOutput:
    """Validate and store an item number; a lost race surfaces as an error."""
    errors = validate_item_number(
        entry, item_number, store.assigned_item_numbers(entry.event_id)
    )
    if errors:
        return AssignItemNumberOutput(item_number=None, errors=errors, success=False)

    try:
        store.set_item_number(entry.id, item_number)
    except ItemNumberConflictError as e:
        return AssignItemNumberOutput(
            item_number=None,
            errors=[ItemNumberError(code="item_number_taken", message=str(e))],
            success=False,
        )

    logger.info("Assigned item number %d to entry %s", item_number, entry.id)
    return AssignItemNumberOutput(item_number=item_number)
