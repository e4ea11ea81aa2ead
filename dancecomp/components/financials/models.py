"""
Financial aggregation models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from dancecomp.domain.entities import DancerRegistrationState, Entry
from dancecomp.domain.errors import FeeWarning
from dancecomp.domain.money import ZERO


@dataclass(frozen=True)
class AggregationInput:
    """
    A dancer's entries and registration state within one event.

    registration_fee_amount is the event's per-dancer registration fee.
    """

    dancer_id: str
    entries: tuple[Entry, ...] = ()
    registration_state: DancerRegistrationState | None = None
    registration_fee_amount: Decimal = ZERO


@dataclass(frozen=True)
class FinancialSummary:
    """Outstanding and paid balances for one dancer."""

    registration_fee_amount: Decimal = ZERO
    registration_fee_outstanding: Decimal = ZERO
    solo_outstanding: Decimal = ZERO
    group_outstanding: Decimal = ZERO
    total_entry_outstanding: Decimal = ZERO
    total_outstanding: Decimal = ZERO
    solo_paid: Decimal = ZERO
    group_paid: Decimal = ZERO
    registration_fee_paid_amount: Decimal = ZERO
    total_paid: Decimal = ZERO
    entry_count: int = 0
    warnings: tuple[FeeWarning, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EventFinancials:
    """Invoiced, paid and outstanding totals across a set of entries."""

    invoiced: Decimal = ZERO
    paid: Decimal = ZERO
    outstanding: Decimal = ZERO
    entry_count: int = 0
    paid_entry_count: int = 0
