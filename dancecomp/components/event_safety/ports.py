"""
Event safety component port definitions.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from .models import EventChangeSet, SafetyStats


class EventUnitOfWork(Protocol):
    """Reads and writes inside one event transaction."""

    def load_stats(self) -> SafetyStats:
        """Stats as seen by this transaction."""
        ...

    def apply(self, changes: EventChangeSet) -> None:
        """Write the changes; committed when the transaction exits cleanly."""
        ...


class EventUpdatePort(Protocol):
    """Storage interface for guarded event updates."""

    def transaction(self, event_id: str) -> AbstractContextManager[EventUnitOfWork]:
        """
        Open a transaction on the event.

        No entry, payment or score for the event may be written by others
        between load_stats and commit. An exception inside the block
        rolls back. Raises EntityNotFoundError for unknown events.
        """
        ...
