"""
Entry fee component port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from dancecomp.domain.entities import DancerRegistrationState, FeeSchedule


class FeeSchedulePort(Protocol):
    """Read access to event fee schedules."""

    def get_fee_schedule(self, event_id: str) -> FeeSchedule:
        """Get the event's fee schedule. Raises EntityNotFoundError."""
        ...


class RegistrationPort(Protocol):
    """Authoritative per-(dancer, event) registration state."""

    def get_registration_states(
        self,
        event_id: str,
        dancer_ids: Sequence[str],
    ) -> dict[str, DancerRegistrationState]:
        """States for the given dancers; dancers without a row are omitted."""
        ...

    def claim_registration(
        self,
        event_id: str,
        dancer_id: str,
        mastery_level: str,
        entry_id: str | None = None,
    ) -> bool:
        """
        Atomically mark the registration fee as charged onto entry_id.

        Returns True only if this call made the charge, i.e. the dancer
        was neither paid nor already charged for the event.
        """
        ...

    def release_registration(self, event_id: str, dancer_id: str, entry_id: str) -> bool:
        """
        Undo a charge made onto entry_id while no such entry is stored.

        Returns True if the charge was removed.
        """
        ...
