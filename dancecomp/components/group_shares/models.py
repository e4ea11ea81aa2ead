"""
Group share component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class AllocationInput:
    """Input for splitting an entry fee across its participants."""

    calculated_fee: Decimal
    participant_ids: tuple[str, ...]
    owner_id: str | None = None


@dataclass(frozen=True)
class ParticipantShare:
    """
    One dancer's portion of an entry fee.

    obligation is informational: the owner is liable for the whole fee,
    everyone else for their share. Payment is collected per entry.
    """

    dancer_id: str
    share: Decimal
    is_main_contestant: bool
    obligation: Decimal


@dataclass(frozen=True)
class GroupShareOutput:
    """Shares in participant order; shares sum exactly to total."""

    total: Decimal
    shares: tuple[ParticipantShare, ...]

    def share_of(self, dancer_id: str) -> ParticipantShare | None:
        return next((s for s in self.shares if s.dancer_id == dancer_id), None)
