"""
Event safety component - Which structural event changes are safe.

Once money or scores exist, some changes would corrupt them. Each changed
dimension gets a tagged verdict and a pure reducer combines them.

Invariants:
- Fee changes are blocked once any payment exists
- Judge-count changes are blocked once any score exists
- Updates re-check stats inside the write transaction
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dancecomp.domain.entities import SCHEDULE_FIELDS, FeeSchedule
from dancecomp.domain.errors import ConfirmationRequiredError, SafetyCheckBlockedError

from .models import (
    Allowed,
    ApplyEventUpdateOutput,
    Blocked,
    CombinedVerdict,
    Dimension,
    EventChangeSet,
    EventRestrictions,
    Risky,
    SafetyCheckResult,
    SafetyStats,
    Verdict,
)
from .ports import EventUpdatePort

logger = logging.getLogger(__name__)

# --- Rules (Pure) ---


def _judge_count_verdict(stats: SafetyStats, changes: EventChangeSet) -> Verdict | None:
    if changes.judge_count is None or changes.judge_count == stats.current_judge_count:
        return None
    if stats.score_count > 0:
        published = (
            f", {stats.published_score_count} published"
            if stats.published_score_count
            else ""
        )
        return Blocked(
            "judge_count",
            f"Cannot change judge count: event has {stats.score_count} score(s){published}",
        )
    return Allowed("judge_count")


def _participation_mode_verdict(
    stats: SafetyStats, changes: EventChangeSet
) -> Verdict | None:
    mode = changes.participation_mode
    if mode is None or mode == stats.participation_mode:
        return None
    if mode == "live" and stats.virtual_entry_count > 0:
        return Risky(
            "participation_mode",
            f"Event has {stats.virtual_entry_count} virtual entry/entries; "
            "changing to live only would invalidate them",
        )
    if mode == "virtual" and stats.live_entry_count > 0:
        return Risky(
            "participation_mode",
            f"Event has {stats.live_entry_count} live entry/entries; "
            "changing to virtual only would invalidate them",
        )
    return Allowed("participation_mode")


def _fees_verdict(stats: SafetyStats, changes: EventChangeSet) -> Verdict | None:
    if not changes.fee_changes:
        return None
    if stats.payment_count > 0:
        fields = ", ".join(sorted(changes.fee_changes))
        return Blocked(
            "fees",
            f"Cannot change fees ({fields}): event has {stats.payment_count} payment(s)",
        )
    return Allowed("fees")


def _dates_verdict(stats: SafetyStats, changes: EventChangeSet) -> Verdict | None:
    if not changes.dates_changed:
        return None
    if stats.event_status == "completed":
        return Blocked("dates", "Cannot change dates: event is completed")
    if stats.event_status == "in_progress":
        return Risky(
            "dates",
            f"Event is in progress with {stats.performance_count} performance(s); "
            "changing dates may affect active performances",
        )
    return Allowed("dates")


RULES = (
    _judge_count_verdict,
    _participation_mode_verdict,
    _fees_verdict,
    _dates_verdict,
)


def evaluate_rules(stats: SafetyStats, changes: EventChangeSet) -> tuple[Verdict, ...]:
    """One verdict per dimension the change set actually changes."""
    verdicts = (rule(stats, changes) for rule in RULES)
    return tuple(v for v in verdicts if v is not None)


def combine_verdicts(verdicts: Iterable[Verdict]) -> CombinedVerdict:
    """Reduce verdicts: blocked beats risky beats allowed."""
    warnings: list[str] = []
    blocks: list[str] = []
    for verdict in verdicts:
        if isinstance(verdict, Blocked):
            blocks.append(verdict.reason)
        elif isinstance(verdict, Risky):
            warnings.append(verdict.reason)

    if blocks:
        status = "blocked"
    elif warnings:
        status = "risky"
    else:
        status = "allowed"
    return CombinedVerdict(status=status, warnings=tuple(warnings), blocks=tuple(blocks))


def check_event_changes(stats: SafetyStats, changes: EventChangeSet) -> SafetyCheckResult:
    """
    Classify a proposed change set.

    Args:
        stats: Current event stats
        changes: Proposed changes

    Returns:
        SafetyCheckResult with per-dimension verdicts and overall status
    """
    verdicts = evaluate_rules(stats, changes)
    combined = combine_verdicts(verdicts)
    return SafetyCheckResult(
        stats=stats,
        changes=changes,
        verdicts=verdicts,
        status=combined.status,
        warnings=combined.warnings,
        blocks=combined.blocks,
    )


def event_restrictions(stats: SafetyStats) -> EventRestrictions:
    """Summarize what may be changed before any change is proposed."""
    warnings: list[str] = []
    blocked: list[Dimension] = []

    if stats.score_count > 0:
        kind = "published scores" if stats.published_score_count else "scores"
        warnings.append(f"Event has {kind}; changing judge count could break score totals")
        blocked.append("judge_count")
    if stats.payment_count > 0:
        warnings.append("Event has payments; changing fees could cause payment discrepancies")
        blocked.append("fees")
    if stats.live_entry_count > 0 and stats.participation_mode == "virtual":
        warnings.append(f"Event has {stats.live_entry_count} live entry/entries")
    if stats.virtual_entry_count > 0 and stats.participation_mode == "live":
        warnings.append(f"Event has {stats.virtual_entry_count} virtual entry/entries")
    if stats.performance_count > 0 and stats.event_status == "in_progress":
        warnings.append("Event is in progress; some changes may affect active performances")
    if stats.event_status == "completed":
        warnings.append("Event is completed; most changes are not recommended")
        blocked.append("dates")

    return EventRestrictions(
        can_change_judge_count="judge_count" not in blocked,
        can_change_participation_mode=True,
        can_change_fees="fees" not in blocked,
        can_change_dates=stats.event_status not in ("completed", "in_progress"),
        warnings=tuple(warnings),
        blocked_dimensions=tuple(blocked),
    )


def changed_fee_fields(
    current: FeeSchedule,
    proposed: FeeSchedule,
) -> dict[str, object]:
    """Schedule fields whose proposed value differs from the current one."""
    return {
        name: getattr(proposed, name)
        for name in SCHEDULE_FIELDS
        if getattr(current, name) != getattr(proposed, name)
    }


# --- Guarded Update (Imperative Shell) ---


def apply_event_update(
    event_id: str,
    changes: EventChangeSet,
    *,
    store: EventUpdatePort,
    confirmed: bool = False,
) -> ApplyEventUpdateOutput:
    """
    Re-check and apply an event update in one transaction.

    An earlier check is never trusted: stats are reloaded under the
    store's transaction so a payment or score written since then is seen.

    Raises:
        SafetyCheckBlockedError: any dimension is blocked
        ConfirmationRequiredError: risky change without confirmation
    """
    with store.transaction(event_id) as uow:
        result = check_event_changes(uow.load_stats(), changes)
        if result.status == "blocked":
            logger.info("Event %s update blocked: %s", event_id, "; ".join(result.blocks))
            raise SafetyCheckBlockedError(result.blocks)
        if result.status == "risky" and not confirmed:
            raise ConfirmationRequiredError(result.warnings)
        if not changes.is_empty:
            uow.apply(changes)

    logger.info("Applied update to event %s (status %s)", event_id, result.status)
    return ApplyEventUpdateOutput(result=result, applied=not changes.is_empty)
