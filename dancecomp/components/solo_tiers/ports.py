"""
Solo tier component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class SoloTierClaimPort(Protocol):
    """Storage interface for per-(dancer, event) solo slots."""

    def count_solo_slots(self, event_id: str, dancer_id: str) -> int:
        """Number of solo tiers already claimed by the dancer in the event."""
        ...

    def claim_solo_slot(self, event_id: str, dancer_id: str, entry_id: str) -> int:
        """
        Atomically count prior slots and record the next one.

        Returns the 1-based tier claimed for entry_id. Claiming again for
        the same entry returns its existing tier. Raises
        ConcurrentTierConflictError if another writer took the tier.
        """
        ...

    def release_solo_slot(self, event_id: str, dancer_id: str, entry_id: str) -> bool:
        """
        Drop the slot claimed for entry_id while no such entry is stored.

        Returns True if a slot was removed.
        """
        ...
