"""
Fee schedule component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from dancecomp.domain.entities import PerformanceType
from dancecomp.domain.errors import FeeWarning

IssueSeverity = Literal["warning", "error"]


@dataclass(frozen=True)
class PerformanceFeeInput:
    """Input for resolving a performance fee."""

    participant_count: int
    performance_type: PerformanceType | None = None  # Derived from count if None
    prior_solo_count: int = 0


@dataclass(frozen=True)
class PerformanceFeeOutput:
    """
    Resolved base performance fee.

    rate is the per-dancer rate for non-solo entries; tier and the package
    totals are set for solos only.
    """

    amount: Decimal
    performance_type: PerformanceType
    participant_count: int
    rate: Decimal | None = None
    tier: int | None = None
    package_total: Decimal | None = None
    previous_package_total: Decimal | None = None
    is_large_group: bool = False
    warnings: tuple[FeeWarning, ...] = ()


@dataclass(frozen=True)
class FeeScheduleIssue:
    """Problem found when validating a fee schedule at event creation."""

    field: str | None
    code: str
    message: str
    severity: IssueSeverity = "warning"
