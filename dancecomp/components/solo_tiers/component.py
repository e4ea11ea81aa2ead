"""
Solo tier component - Cumulative solo package pricing.

solo_1_fee, solo_2_fee and solo_3_fee are cumulative package totals for
one, two and three solos. Beyond three, each solo adds
solo_additional_fee. The fee charged for the Nth solo is the difference
between the N and N-1 package totals.

Invariants:
- Only prior solo entries count towards the tier
- A tier is claimed atomically; duplicates are never assigned
- Charged amounts are never negative
"""

from __future__ import annotations

import logging
from decimal import Decimal

from dancecomp.domain.entities import FeeSchedule
from dancecomp.domain.errors import (
    NEGATIVE_INCREMENT,
    ConcurrentTierConflictError,
    FeeWarning,
)
from dancecomp.domain.money import ZERO
from dancecomp.domain.schedule import read_fee

from .models import ClaimTierInput, ClaimTierOutput, SoloTierInput, SoloTierOutput
from .ports import SoloTierClaimPort

logger = logging.getLogger(__name__)

# --- Pure Functions ---


def package_price(
    tier: int,
    schedule: FeeSchedule,
    warnings: list[FeeWarning] | None = None,
) -> Decimal:
    """
    Cumulative package price for `tier` solos.

    Args:
        tier: Number of solos in the package (0 allowed)
        schedule: Event fee schedule
        warnings: Optional sink for incomplete-schedule warnings

    Returns:
        Package total; 0 for tier 0
    """
    if tier < 0:
        raise ValueError(f"Solo tier cannot be negative: {tier}")

    sink = warnings if warnings is not None else []

    if tier == 0:
        return ZERO
    if tier == 1:
        return read_fee(schedule, "solo_1_fee", sink)
    if tier == 2:
        return read_fee(schedule, "solo_2_fee", sink)

    base = read_fee(schedule, "solo_3_fee", sink)
    if tier == 3:
        return base
    additional = read_fee(schedule, "solo_additional_fee", sink)
    return base + (tier - 3) * additional


def incremental_solo_fee(prior_solo_count: int, schedule: FeeSchedule) -> SoloTierOutput:
    """
    Fee charged for the dancer's next solo.

    Args:
        prior_solo_count: Solo entries the dancer already has in the event
        schedule: Event fee schedule

    Returns:
        SoloTierOutput with tier = prior_solo_count + 1
    """
    if prior_solo_count < 0:
        raise ValueError(f"Prior solo count cannot be negative: {prior_solo_count}")

    warnings: list[FeeWarning] = []
    tier = prior_solo_count + 1
    package_total = package_price(tier, schedule, warnings)
    previous_total = package_price(prior_solo_count, schedule, warnings)
    amount = package_total - previous_total

    if amount < 0:
        warnings.append(
            FeeWarning(
                code=NEGATIVE_INCREMENT,
                message=(
                    f"Solo package for {tier} solos ({package_total}) is below the "
                    f"{prior_solo_count}-solo package ({previous_total}); charged as 0"
                ),
            )
        )
        logger.warning(
            "Negative solo increment for tier %d (%s - %s); clamped to 0",
            tier,
            package_total,
            previous_total,
        )
        amount = ZERO

    return SoloTierOutput(
        tier=tier,
        package_total=package_total,
        previous_package_total=previous_total,
        amount=amount,
        warnings=tuple(warnings),
    )


def solo_fee_sequence(count: int, schedule: FeeSchedule) -> tuple[Decimal, ...]:
    """Charged fees for solos 1..count submitted one after another."""
    return tuple(incremental_solo_fee(prior, schedule).amount for prior in range(count))


def cumulative_solo_total(count: int, schedule: FeeSchedule) -> Decimal:
    """Total a dancer has been charged for `count` solos."""
    return sum(solo_fee_sequence(count, schedule), ZERO)


# --- Tier Claim (Imperative Shell) ---


def _claimed(
    inp: ClaimTierInput, tier: int, attempts: int, conflicts: list[str]
) -> ClaimTierOutput:
    logger.info(
        "Claimed solo tier %d for dancer %s in event %s (entry %s)",
        tier,
        inp.dancer_id,
        inp.event_id,
        inp.entry_id,
    )
    return ClaimTierOutput(tier=tier, attempts=attempts, conflicts=conflicts)


def claim_solo_tier(
    inp: ClaimTierInput,
    *,
    claims: SoloTierClaimPort,
    max_attempts: int = 3,
) -> ClaimTierOutput:
    """
    Claim the dancer's next solo tier through the storage port.

    Conflicts are retried against fresh state; a conflict on the last
    attempt propagates as ConcurrentTierConflictError.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    conflicts: list[str] = []
    for attempt in range(1, max_attempts):
        try:
            tier = claims.claim_solo_slot(inp.event_id, inp.dancer_id, inp.entry_id)
        except ConcurrentTierConflictError as e:
            conflicts.append(str(e))
            logger.info(
                "Solo tier conflict for dancer %s in event %s (attempt %d/%d)",
                inp.dancer_id,
                inp.event_id,
                attempt,
                max_attempts,
            )
            continue
        return _claimed(inp, tier, attempt, conflicts)

    tier = claims.claim_solo_slot(inp.event_id, inp.dancer_id, inp.entry_id)
    return _claimed(inp, tier, max_attempts, conflicts)


# --- Run Function (Atomic Component Pattern) ---


def run(inp: SoloTierInput, schedule: FeeSchedule) -> SoloTierOutput:
    """Price the next solo for the given prior count."""
    return incremental_solo_fee(inp.prior_solo_count, schedule)
