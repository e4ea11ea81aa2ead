"""
Entry fee component - Full fee for a new entry.

Combines the base performance fee with any registration fee owed by the
entry's participants and renders a human-readable breakdown.

Invariants:
- Registration is charged at most once per (dancer, event)
- Stored registration state wins over the caller's hint
- The fee returned here is the snapshot persisted on the entry
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal

from dancecomp.components.fee_schedule import resolve_performance_fee
from dancecomp.domain.entities import DancerRegistrationState, Entry, FeeSchedule
from dancecomp.domain.errors import (
    REGISTRATION_HINT_IGNORED,
    EngineError,
    FeeWarning,
)
from dancecomp.domain.money import ZERO, format_amount, quantize, to_decimal
from dancecomp.domain.schedule import read_fee
from dancecomp.rules.models import DEFAULT_RULES, Rules

from .models import (
    BatchEntryValidation,
    BatchItem,
    BatchValidationOutput,
    EntryFeeInput,
    FeeBreakdown,
    FeeValidation,
    SubmissionOutput,
)

logger = logging.getLogger(__name__)


def _formatter(currency: str, rules: Rules):
    def fmt(amount: Decimal) -> str:
        return format_amount(
            amount, currency, rules.currency.symbols, rules.currency.minor_units
        )

    return fmt


def unique_participants(participant_ids: Sequence[str]) -> tuple[str, ...]:
    """Participant ids in order with duplicates removed."""
    return tuple(dict.fromkeys(participant_ids))


def registration_due(
    participant_ids: Sequence[str],
    registration_states: Mapping[str, DancerRegistrationState],
) -> tuple[str, ...]:
    """Participants who still owe the event registration fee."""
    due = []
    for dancer_id in unique_participants(participant_ids):
        state = registration_states.get(dancer_id)
        if state is None or state.needs_registration_fee:
            due.append(dancer_id)
    return tuple(due)


# --- Pure Functions ---


def calculate_entry_fee(
    inp: EntryFeeInput,
    schedule: FeeSchedule,
    registration_states: Mapping[str, DancerRegistrationState] | None = None,
    prior_solo_count: int = 0,
    *,
    rules: Rules | None = None,
) -> FeeBreakdown:
    """
    Compute the full fee breakdown for a new entry.

    Args:
        inp: Entry being priced
        schedule: Event fee schedule
        registration_states: Stored state per dancer; a missing dancer has
            not been charged yet
        prior_solo_count: Dancer's prior solos in the event (solo only)
        rules: Engine rules; defaults apply if None

    Returns:
        FeeBreakdown with amounts quantized to the currency's minor units
    """
    rules = rules or DEFAULT_RULES
    states = registration_states or {}
    minor_units = rules.currency.minor_units
    fmt = _formatter(schedule.currency, rules)

    perf = resolve_performance_fee(
        schedule,
        inp.performance_type,
        len(inp.participant_ids),
        prior_solo_count,
        large_group_min_size=rules.fees.large_group_min_size,
    )
    warnings: list[FeeWarning] = list(perf.warnings)
    performance_fee = quantize(perf.amount, minor_units)

    if perf.performance_type == "Solo":
        breakdown = (
            f"Solo #{perf.tier}: package {fmt(perf.package_total)} - "
            f"previous {fmt(perf.previous_package_total)} = {fmt(performance_fee)}"
        )
    else:
        label = "Large Group" if perf.is_large_group else perf.performance_type
        breakdown = (
            f"{label} ({fmt(perf.rate)} x {perf.participant_count} dancers) "
            f"= {fmt(performance_fee)}"
        )

    # Registration
    participants = unique_participants(inp.participant_ids)
    due = registration_due(participants, states)
    if due:
        rate = read_fee(schedule, "registration_fee_per_dancer", warnings)
        registration_fee = quantize(rate * len(due), minor_units)
        plural = "dancer" if len(due) == 1 else "dancers"
        registration_breakdown = (
            f"Registration fee: {fmt(rate)} x {len(due)} {plural} "
            f"= {fmt(registration_fee)}"
        )
        already = len(participants) - len(due)
        if already:
            registration_breakdown += f" ({already} already registered)"
    else:
        registration_fee = quantize(ZERO, minor_units)
        if len(participants) == 1:
            registration_breakdown = "Registration fee already charged"
        else:
            registration_breakdown = (
                f"Registration fee already charged for all {len(participants)} dancers"
            )

    if inp.charge_registration is not None and inp.charge_registration != bool(due):
        warnings.append(
            FeeWarning(
                code=REGISTRATION_HINT_IGNORED,
                message=(
                    f"charge_registration={inp.charge_registration} disagrees with "
                    f"stored registration state; {len(due)} dancer(s) charged"
                ),
            )
        )
        logger.warning(
            "Registration hint %s ignored for entry %s in event %s (stored state: %d due)",
            inp.charge_registration,
            inp.entry_id,
            inp.event_id,
            len(due),
        )

    return FeeBreakdown(
        performance_fee=performance_fee,
        registration_fee=registration_fee,
        total_fee=performance_fee + registration_fee,
        breakdown=breakdown,
        registration_breakdown=registration_breakdown,
        currency=schedule.currency,
        performance_type=perf.performance_type,
        solo_count=perf.tier,
        registration_dancer_ids=due,
        warnings=tuple(warnings),
    )


def entry_from_submission(
    inp: EntryFeeInput,
    submission: SubmissionOutput,
    **fields: object,
) -> Entry:
    """
    Entry record carrying a submission's fee snapshot.

    The registration part of the fee and the dancers it covers are kept on
    the entry so balances can attribute it to those dancers.
    """
    breakdown = submission.breakdown
    return Entry(
        id=submission.entry_id,
        event_id=inp.event_id,
        owner_id=inp.owner_id,
        participant_ids=list(inp.participant_ids),
        performance_type=breakdown.performance_type,
        mastery_level=inp.mastery_level,
        entry_type=inp.entry_type,
        calculated_fee=breakdown.total_fee,
        registration_fee=breakdown.registration_fee,
        registration_dancer_ids=list(breakdown.registration_dancer_ids),
        **fields,
    )


def validate_submitted_fee(
    submitted: Decimal | int | float | str,
    computed_fee: Decimal,
    tolerance: Decimal = DEFAULT_RULES.fees.mismatch_tolerance,
) -> FeeValidation:
    """
    Compare a client-sent fee to the server-computed fee.

    The computed fee is authoritative; a difference above tolerance is a
    mismatch.
    """
    submitted_fee = to_decimal(submitted)
    difference = abs(submitted_fee - computed_fee)
    if difference > tolerance:
        return FeeValidation(
            is_valid=False,
            submitted_fee=submitted_fee,
            computed_fee=computed_fee,
            difference=difference,
            mismatch_reason=(
                f"Submitted fee {submitted_fee} does not match computed fee "
                f"{computed_fee} (difference {difference})"
            ),
        )
    return FeeValidation(
        is_valid=True,
        submitted_fee=submitted_fee,
        computed_fee=computed_fee,
        difference=difference,
    )


def validate_batch(
    items: Sequence[BatchItem],
    schedule: FeeSchedule,
    registration_states: Mapping[str, DancerRegistrationState] | None = None,
    prior_solo_counts: Mapping[str, int] | None = None,
    client_total: Decimal | None = None,
    *,
    rules: Rules | None = None,
) -> BatchValidationOutput:
    """
    Validate a cart of new entries against server-computed fees.

    Entries are priced in order. Solo counts and registration charges made
    earlier in the batch apply to later entries, so three new solos for
    one dancer get tiers 1, 2 and 3 and registration is charged once.
    An entry that cannot be priced records its error and the batch
    continues.
    """
    rules = rules or DEFAULT_RULES
    tolerance = rules.fees.mismatch_tolerance
    states: dict[str, DancerRegistrationState] = dict(registration_states or {})
    solo_counts: dict[str, int] = dict(prior_solo_counts or {})

    validations: list[BatchEntryValidation] = []
    total_computed = ZERO

    for index, item in enumerate(items):
        entry = item.entry
        client_fee = to_decimal(item.client_fee)
        dancer_id = entry.participant_ids[0] if len(entry.participant_ids) == 1 else None
        prior = solo_counts.get(dancer_id, 0) if dancer_id else 0

        try:
            breakdown = calculate_entry_fee(entry, schedule, states, prior, rules=rules)
        except EngineError as e:
            logger.error("Error computing fee for batch entry %d: %s", index + 1, e)
            validations.append(
                BatchEntryValidation(
                    index=index,
                    entry=entry,
                    client_fee=client_fee,
                    computed_fee=ZERO,
                    breakdown=None,
                    is_valid=False,
                    mismatch_detected=False,
                    mismatch_reason=f"Error computing fee for entry {index + 1}: {e}",
                    error=str(e),
                )
            )
            continue

        if breakdown.performance_type == "Solo" and dancer_id is not None:
            solo_counts[dancer_id] = prior + 1
        for charged_id in breakdown.registration_dancer_ids:
            states[charged_id] = DancerRegistrationState(
                dancer_id=charged_id,
                event_id=entry.event_id,
                registration_charged=True,
                mastery_level=entry.mastery_level,
            )

        check = validate_submitted_fee(client_fee, breakdown.total_fee, tolerance)
        if not check.is_valid:
            logger.error(
                "Fee mismatch for batch entry %d: client %s, computed %s",
                index + 1,
                client_fee,
                breakdown.total_fee,
            )
        total_computed += breakdown.total_fee
        validations.append(
            BatchEntryValidation(
                index=index,
                entry=entry,
                client_fee=client_fee,
                computed_fee=breakdown.total_fee,
                breakdown=breakdown,
                is_valid=check.is_valid,
                mismatch_detected=not check.is_valid,
                mismatch_reason=check.mismatch_reason,
            )
        )

    reasons = [v.mismatch_reason for v in validations if v.mismatch_detected]
    total_client = to_decimal(client_total) if client_total is not None else None
    if total_client is not None and abs(total_client - total_computed) > tolerance:
        reasons.insert(
            0,
            f"Client total {total_client} does not match computed total {total_computed}",
        )
        logger.error(
            "Batch total mismatch: client %s, computed %s", total_client, total_computed
        )

    return BatchValidationOutput(
        total_computed_fee=total_computed,
        total_client_fee=total_client,
        validations=tuple(validations),
        all_valid=not reasons and all(v.is_valid for v in validations),
        mismatch_detected=bool(reasons),
        mismatch_reason=reasons[0] if reasons else None,
    )


# --- Run Function (Atomic Component Pattern) ---


def run(
    inp: EntryFeeInput,
    schedule: FeeSchedule,
    registration_states: Mapping[str, DancerRegistrationState] | None = None,
    prior_solo_count: int = 0,
    rules: Rules | None = None,
) -> FeeBreakdown:
    """Price a new entry from already-loaded state."""
    return calculate_entry_fee(
        inp, schedule, registration_states, prior_solo_count, rules=rules
    )
