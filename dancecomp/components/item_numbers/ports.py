"""
Item number component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class ItemNumberPort(Protocol):
    """Storage interface for per-event item numbers."""

    def assigned_item_numbers(self, event_id: str) -> dict[int, str]:
        """Map of assigned item number to entry id for the event."""
        ...

    def set_item_number(self, entry_id: str, item_number: int) -> None:
        """
        Store the entry's item number.

        Raises ItemNumberConflictError if another entry in the same event
        already holds it.
        """
        ...
