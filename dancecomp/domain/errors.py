"""
Engine errors and warning records.

Errors are raised where a computation must not proceed. Warnings are
returned alongside a result when the engine chose to proceed anyway
(e.g. an unconfigured fee tier read as zero).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# --- Warning codes ---

INCOMPLETE_SCHEDULE = "incomplete_schedule"
NEGATIVE_INCREMENT = "negative_increment"
REGISTRATION_HINT_IGNORED = "registration_hint_ignored"
AGGREGATION_FALLBACK = "aggregation_fallback"


@dataclass(frozen=True)
class FeeWarning:
    """Non-fatal condition surfaced with a computed result."""

    code: str
    message: str
    field: str | None = None


def incomplete_schedule_warning(field: str) -> FeeWarning:
    return FeeWarning(
        code=INCOMPLETE_SCHEDULE,
        message=f"Fee schedule field '{field}' is not configured; charged as 0",
        field=field,
    )


# --- Errors ---


class EngineError(Exception):
    """Base class for engine errors."""


class InvalidParticipantCountError(EngineError, ValueError):
    """Participant count below 1 or inconsistent with the performance type."""

    def __init__(self, participant_count: int, message: str | None = None) -> None:
        self.participant_count = participant_count
        super().__init__(
            message or f"Participant count must be at least 1, got {participant_count}"
        )


class ConcurrentTierConflictError(EngineError):
    """Another submission claimed the same solo tier first."""

    def __init__(self, event_id: str, dancer_id: str, tier: int | None = None) -> None:
        self.event_id = event_id
        self.dancer_id = dancer_id
        self.tier = tier
        where = f" tier {tier}" if tier is not None else ""
        super().__init__(
            f"Solo{where} claim conflict for dancer {dancer_id} in event {event_id}"
        )


class SafetyCheckBlockedError(EngineError):
    """An event update was rejected; carries every blocking reason."""

    def __init__(self, reasons: Sequence[str]) -> None:
        self.reasons = tuple(reasons)
        super().__init__("Event update blocked: " + "; ".join(self.reasons))


class ConfirmationRequiredError(EngineError):
    """A risky event update was attempted without explicit confirmation."""

    def __init__(self, reasons: Sequence[str]) -> None:
        self.reasons = tuple(reasons)
        super().__init__("Confirmation required: " + "; ".join(self.reasons))


class AllocationError(EngineError, ValueError):
    """A group fee could not be split into participant shares."""


class ItemNumberConflictError(EngineError):
    def __init__(self, event_id: str, item_number: int) -> None:
        self.event_id = event_id
        self.item_number = item_number
        super().__init__(
            f"Item number {item_number} is already assigned in event {event_id}"
        )


class EntityNotFoundError(EngineError, LookupError):
    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")
