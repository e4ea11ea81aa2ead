"""
Solo tier component models.

Inputs and outputs for cumulative solo package pricing and tier claims.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from dancecomp.domain.errors import FeeWarning

# --- Pricing ---


@dataclass(frozen=True)
class SoloTierInput:
    """Input for pricing a dancer's next solo."""

    prior_solo_count: int


@dataclass(frozen=True)
class SoloTierOutput:
    """
    Incremental fee for the Nth solo.

    amount = package_total - previous_package_total, never negative.
    """

    tier: int
    package_total: Decimal
    previous_package_total: Decimal
    amount: Decimal
    warnings: tuple[FeeWarning, ...] = ()


# --- Claims ---


@dataclass(frozen=True)
class ClaimTierInput:
    """Input for atomically claiming a solo tier slot."""

    event_id: str
    dancer_id: str
    entry_id: str


@dataclass(frozen=True)
class ClaimTierOutput:
    """Result of a tier claim."""

    tier: int
    attempts: int
    conflicts: list[str] = field(default_factory=list)

    @property
    def prior_solo_count(self) -> int:
        return self.tier - 1
