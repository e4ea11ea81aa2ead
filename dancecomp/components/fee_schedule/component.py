"""
Fee schedule component - Base performance fee resolution.

Maps an event's fee schedule plus performance type and participant count
to a base performance fee. Solos delegate to the solo tier component.

Invariants:
- Unconfigured fields read as 0 with a warning, never an error
- Participant count below 1 is rejected
"""

from __future__ import annotations

from dancecomp.components.solo_tiers import incremental_solo_fee, package_price
from dancecomp.domain.entities import (
    FEE_FIELDS,
    FeeSchedule,
    PerformanceType,
    performance_type_from_count,
)
from dancecomp.domain.errors import FeeWarning, InvalidParticipantCountError
from dancecomp.domain.schedule import read_fee
from dancecomp.rules.models import DEFAULT_RULES, Rules

from .models import FeeScheduleIssue, PerformanceFeeInput, PerformanceFeeOutput

# --- Pure Functions ---


def performance_type_for(participant_count: int) -> PerformanceType:
    """Derive the performance type; raises InvalidParticipantCountError below 1."""
    if participant_count < 1:
        raise InvalidParticipantCountError(participant_count)
    return performance_type_from_count(participant_count)


def resolve_performance_fee(
    schedule: FeeSchedule,
    performance_type: PerformanceType | None,
    participant_count: int,
    prior_solo_count: int = 0,
    *,
    large_group_min_size: int = DEFAULT_RULES.fees.large_group_min_size,
) -> PerformanceFeeOutput:
    """
    Resolve the base performance fee for an entry.

    Args:
        schedule: Event fee schedule
        performance_type: Declared type, or None to derive from the count
        participant_count: Number of dancers (>= 1)
        prior_solo_count: Dancer's prior solos in the event (solo only)
        large_group_min_size: Size at which the large-group rate applies

    Returns:
        PerformanceFeeOutput with amount and any incomplete-schedule warnings
    """
    derived = performance_type_for(participant_count)
    if performance_type is not None and performance_type != derived:
        raise InvalidParticipantCountError(
            participant_count,
            f"{performance_type} cannot have {participant_count} participant(s)",
        )

    if derived == "Solo":
        solo = incremental_solo_fee(prior_solo_count, schedule)
        return PerformanceFeeOutput(
            amount=solo.amount,
            performance_type=derived,
            participant_count=participant_count,
            tier=solo.tier,
            package_total=solo.package_total,
            previous_package_total=solo.previous_package_total,
            warnings=solo.warnings,
        )

    warnings: list[FeeWarning] = []
    is_large = derived == "Group" and participant_count >= large_group_min_size

    if derived in ("Duet", "Trio"):
        rate = read_fee(schedule, "duo_trio_fee_per_dancer", warnings)
    elif is_large:
        rate = read_fee(schedule, "large_group_fee_per_dancer", warnings)
    else:
        rate = read_fee(schedule, "group_fee_per_dancer", warnings)

    return PerformanceFeeOutput(
        amount=rate * participant_count,
        performance_type=derived,
        participant_count=participant_count,
        rate=rate,
        is_large_group=is_large,
        warnings=tuple(warnings),
    )


def validate_fee_schedule(schedule: FeeSchedule) -> list[FeeScheduleIssue]:
    """
    Validate a fee schedule at event-creation time.

    Nothing here blocks registration; issues are surfaced so an admin can
    fix the configuration before entries arrive.
    """
    issues = [
        FeeScheduleIssue(
            field=name,
            code="unconfigured",
            message=f"'{name}' is not configured and will be charged as 0",
        )
        for name in schedule.missing_fields()
    ]

    # Package totals must not decrease or the increment goes negative
    previous = package_price(0, schedule)
    for tier in (1, 2, 3):
        current = package_price(tier, schedule)
        if current < previous:
            issues.append(
                FeeScheduleIssue(
                    field=f"solo_{tier}_fee",
                    code="decreasing_package",
                    message=(
                        f"{tier}-solo package ({current}) is below the "
                        f"{tier - 1}-solo package ({previous})"
                    ),
                )
            )
        previous = current

    return issues


# --- Run Function (Atomic Component Pattern) ---


def run(
    inp: PerformanceFeeInput,
    schedule: FeeSchedule,
    rules: Rules | None = None,
) -> PerformanceFeeOutput:
    """Resolve a performance fee using rules-driven group thresholds."""
    rules = rules or DEFAULT_RULES
    return resolve_performance_fee(
        schedule,
        inp.performance_type,
        inp.participant_count,
        inp.prior_solo_count,
        large_group_min_size=rules.fees.large_group_min_size,
    )


def load_schedule_from_record(record: dict[str, object]) -> FeeSchedule:
    """
    Build a FeeSchedule from an event record.

    Accepts snake_case columns or camelCase API keys; unknown keys are
    ignored. Blank strings read as unconfigured.
    """
    data = {}
    for key, value in record.items():
        if value == "":
            value = None
        data[key] = value
    known = set(FEE_FIELDS) | {"currency"}
    aliases = {
        field.alias
        for name, field in FeeSchedule.model_fields.items()
        if field.alias and name in known
    }
    filtered = {k: v for k, v in data.items() if k in known or k in aliases}
    if filtered.get("currency") is None:
        filtered.pop("currency", None)
    return FeeSchedule.model_validate(filtered)
