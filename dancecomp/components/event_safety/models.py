"""
Event safety component models.

Verdicts are tagged per dimension: Allowed, Risky (needs confirmation)
or Blocked (rejected).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Literal, Union

from dancecomp.domain.entities import SCHEDULE_FIELDS, EventStatus, ParticipationMode
from dancecomp.domain.errors import SafetyCheckBlockedError

SafetyStatus = Literal["allowed", "risky", "blocked"]
Dimension = Literal["judge_count", "participation_mode", "fees", "dates"]

# --- Inputs ---


@dataclass(frozen=True)
class SafetyStats:
    """Counts that decide which event changes are safe."""

    entry_count: int = 0
    live_entry_count: int = 0
    virtual_entry_count: int = 0
    payment_count: int = 0
    score_count: int = 0
    published_score_count: int = 0
    performance_count: int = 0
    current_judge_count: int = 0
    event_status: EventStatus = "upcoming"
    participation_mode: ParticipationMode | None = None


@dataclass(frozen=True)
class EventChangeSet:
    """
    Proposed structural changes to an event.

    None means the dimension is not being changed. fee_changes maps
    schedule field names to their proposed values.
    """

    judge_count: int | None = None
    participation_mode: ParticipationMode | None = None
    fee_changes: Mapping[str, Decimal | str | None] = field(default_factory=dict)
    event_date: date | None = None

    def __post_init__(self) -> None:
        unknown = sorted(set(self.fee_changes) - set(SCHEDULE_FIELDS))
        if unknown:
            raise ValueError(f"Unknown fee schedule fields: {', '.join(unknown)}")
        if self.judge_count is not None and self.judge_count < 0:
            raise ValueError(f"Judge count cannot be negative: {self.judge_count}")

    @property
    def dates_changed(self) -> bool:
        return self.event_date is not None

    @property
    def is_empty(self) -> bool:
        return (
            self.judge_count is None
            and self.participation_mode is None
            and not self.fee_changes
            and self.event_date is None
        )


# --- Verdicts ---


@dataclass(frozen=True)
class Allowed:
    dimension: Dimension


@dataclass(frozen=True)
class Risky:
    dimension: Dimension
    reason: str


@dataclass(frozen=True)
class Blocked:
    dimension: Dimension
    reason: str


Verdict = Union[Allowed, Risky, Blocked]


@dataclass(frozen=True)
class CombinedVerdict:
    status: SafetyStatus
    warnings: tuple[str, ...] = ()
    blocks: tuple[str, ...] = ()


# --- Outputs ---


@dataclass(frozen=True)
class SafetyCheckResult:
    """Outcome of checking a change set against current event stats."""

    stats: SafetyStats
    changes: EventChangeSet
    verdicts: tuple[Verdict, ...]
    status: SafetyStatus
    warnings: tuple[str, ...] = ()
    blocks: tuple[str, ...] = ()

    @property
    def requires_confirmation(self) -> bool:
        return self.status == "risky"

    def can_proceed(self, confirmed: bool = False) -> bool:
        if self.status == "blocked":
            return False
        if self.status == "risky":
            return confirmed
        return True

    def raise_for_blocks(self) -> None:
        if self.blocks:
            raise SafetyCheckBlockedError(self.blocks)


@dataclass(frozen=True)
class EventRestrictions:
    """What may change given current stats, before any change is proposed."""

    can_change_judge_count: bool
    can_change_participation_mode: bool
    can_change_fees: bool
    can_change_dates: bool
    warnings: tuple[str, ...] = ()
    blocked_dimensions: tuple[Dimension, ...] = ()


@dataclass(frozen=True)
class ApplyEventUpdateOutput:
    """Result of a guarded event update."""

    result: SafetyCheckResult
    applied: bool
