"""
Entry fee component - Entry fee calculation and validation.

Public API for pricing new entries, validating client-sent fees and
submitting entries against stored tier and registration state.
"""

from ._impl import EntryFeeService
from .component import (
    calculate_entry_fee,
    entry_from_submission,
    registration_due,
    run,
    unique_participants,
    validate_batch,
    validate_submitted_fee,
)
from .models import (
    BatchEntryValidation,
    BatchItem,
    BatchValidationOutput,
    EntryFeeInput,
    FeeBreakdown,
    FeeValidation,
    SubmissionOutput,
)
from .ports import FeeSchedulePort, RegistrationPort

__all__ = [
    # Functions
    "calculate_entry_fee",
    "entry_from_submission",
    "registration_due",
    "run",
    "unique_participants",
    "validate_batch",
    "validate_submitted_fee",
    # Service
    "EntryFeeService",
    # Models
    "BatchEntryValidation",
    "BatchItem",
    "BatchValidationOutput",
    "EntryFeeInput",
    "FeeBreakdown",
    "FeeValidation",
    "SubmissionOutput",
    # Ports
    "FeeSchedulePort",
    "RegistrationPort",
]
