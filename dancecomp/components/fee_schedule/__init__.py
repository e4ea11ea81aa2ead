"""
Fee schedule component - Performance fee resolution.

Public API for mapping an event fee schedule, performance type and
participant count to a base performance fee.
"""

from .component import (
    load_schedule_from_record,
    performance_type_for,
    resolve_performance_fee,
    run,
    validate_fee_schedule,
)
from .models import FeeScheduleIssue, PerformanceFeeInput, PerformanceFeeOutput

__all__ = [
    # Functions
    "load_schedule_from_record",
    "performance_type_for",
    "resolve_performance_fee",
    "run",
    "validate_fee_schedule",
    # Models
    "FeeScheduleIssue",
    "PerformanceFeeInput",
    "PerformanceFeeOutput",
]
