"""
Entry fee component models.

Inputs and outputs for fee breakdowns, submissions and batch validation.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from dancecomp.domain.entities import EntryType, PerformanceType
from dancecomp.domain.errors import FeeWarning

# --- Fee Calculation ---


@dataclass(frozen=True)
class EntryFeeInput:
    """
    A new entry to be priced.

    charge_registration is the caller's intent flag. It is a hint only;
    stored registration state decides whether the fee is charged.
    """

    event_id: str
    owner_id: str
    participant_ids: tuple[str, ...]
    mastery_level: str = ""
    entry_id: str | None = None
    performance_type: PerformanceType | None = None
    entry_type: EntryType = "live"
    charge_registration: bool | None = None


@dataclass(frozen=True)
class FeeBreakdown:
    """
    Full fee for one entry.

    breakdown and registration_breakdown are rebuilt purely from inputs,
    so identical inputs always give identical text.
    """

    performance_fee: Decimal
    registration_fee: Decimal
    total_fee: Decimal
    breakdown: str
    registration_breakdown: str
    currency: str
    performance_type: PerformanceType
    solo_count: int | None = None  # Tier number for solos
    registration_dancer_ids: tuple[str, ...] = ()
    warnings: tuple[FeeWarning, ...] = ()


@dataclass(frozen=True)
class SubmissionOutput:
    """Fee snapshot produced when an entry is submitted."""

    entry_id: str
    breakdown: FeeBreakdown
    tier: int | None = None
    registration_claimed_ids: tuple[str, ...] = ()

    @property
    def calculated_fee(self) -> Decimal:
        return self.breakdown.total_fee


# --- Fee Validation ---


@dataclass(frozen=True)
class FeeValidation:
    """Comparison of a client-sent fee against the computed fee."""

    is_valid: bool
    submitted_fee: Decimal
    computed_fee: Decimal
    difference: Decimal
    mismatch_reason: str | None = None


@dataclass(frozen=True)
class BatchItem:
    """One entry in a cart, with the fee the client displayed for it."""

    entry: EntryFeeInput
    client_fee: Decimal


@dataclass(frozen=True)
class BatchEntryValidation:
    """Validation of a single batch entry."""

    index: int
    entry: EntryFeeInput
    client_fee: Decimal
    computed_fee: Decimal
    breakdown: FeeBreakdown | None
    is_valid: bool
    mismatch_detected: bool
    mismatch_reason: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class BatchValidationOutput:
    """Validation of a whole cart of new entries."""

    total_computed_fee: Decimal
    total_client_fee: Decimal | None
    validations: tuple[BatchEntryValidation, ...]
    all_valid: bool
    mismatch_detected: bool
    mismatch_reason: str | None = None
