"""
Financial aggregation component - Per-dancer and per-event balances.

Solo entries count in full for the dancer who owns them. Shared entries
count at the dancer's allocated share, whoever registered them.

Invariants:
- A dancer with no entries and no charge owes nothing
- A registration fee carried on an entry is counted through that entry
  only, against the dancers it covers
- A failed participant load or share computation degrades to the
  stored fee snapshot with a warning; aggregation never aborts
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from dancecomp.components.group_shares import share_for
from dancecomp.domain.entities import Entry
from dancecomp.domain.errors import AGGREGATION_FALLBACK, EngineError, FeeWarning
from dancecomp.domain.money import ZERO

from .models import AggregationInput, EventFinancials, FinancialSummary
from .ports import EntryLoaderPort

logger = logging.getLogger(__name__)


def _fallback_warning(entry: Entry, reason: str) -> FeeWarning:
    logger.warning(
        "Using stored fee %s for entry %s: %s", entry.calculated_fee, entry.id, reason
    )
    return FeeWarning(
        code=AGGREGATION_FALLBACK,
        message=f"Entry {entry.id}: {reason}; using stored fee {entry.calculated_fee}",
    )


def owns_solo(entry: Entry, dancer_id: str) -> bool:
    """A solo belongs to its owner or its only participant."""
    if entry.participant_ids:
        return entry.participant_ids == [dancer_id]
    return entry.owner_id == dancer_id


def _shared_amount(
    entry: Entry,
    dancer_id: str,
    loader: EntryLoaderPort | None,
    warnings: list[FeeWarning],
) -> Decimal | None:
    """
    Dancer's part of a multi-participant entry; None if not a participant.

    The performance fee is split across participants. Registration fees
    carried on the entry go only to the dancers they cover.
    """
    participants = entry.participant_ids
    if not participants:
        if loader is None:
            warnings.append(_fallback_warning(entry, "participants not loaded"))
            return entry.calculated_fee
        try:
            participants = loader.load_entry(entry.id).participant_ids
        except Exception as e:
            warnings.append(_fallback_warning(entry, f"participant load failed ({e})"))
            return entry.calculated_fee

    if dancer_id not in participants:
        logger.warning("Dancer %s is not a participant of entry %s", dancer_id, entry.id)
        warnings.append(
            FeeWarning(
                code=AGGREGATION_FALLBACK,
                message=f"Dancer {dancer_id} is not a participant of entry {entry.id}; skipped",
            )
        )
        return None

    try:
        amount = share_for(entry.performance_fee, participants, dancer_id)
        if dancer_id in entry.registration_dancer_ids:
            amount += share_for(
                entry.registration_fee, entry.registration_dancer_ids, dancer_id
            )
        return amount
    except EngineError as e:
        warnings.append(_fallback_warning(entry, f"share computation failed ({e})"))
        return entry.calculated_fee


# --- Pure Functions ---


def summarize_dancer(
    inp: AggregationInput,
    loader: EntryLoaderPort | None = None,
) -> FinancialSummary:
    """
    Aggregate a dancer's outstanding and paid balances in one event.

    Args:
        inp: The dancer's entries, registration state and registration fee
        loader: Loads participants for entries listed without them

    Returns:
        FinancialSummary; all zeros for a dancer with no entries
    """
    warnings: list[FeeWarning] = []
    solo_outstanding = solo_paid = group_outstanding = group_paid = ZERO
    entry_count = 0
    carried = False

    for entry in {e.id: e for e in inp.entries}.values():
        if entry.is_solo:
            if not owns_solo(entry, inp.dancer_id):
                continue
            amount: Decimal | None = entry.calculated_fee
        else:
            amount = _shared_amount(entry, inp.dancer_id, loader, warnings)
            if amount is None:
                continue

        entry_count += 1
        if inp.dancer_id in entry.registration_dancer_ids:
            carried = True
        paid = entry.payment_status == "paid"
        if entry.is_solo:
            if paid:
                solo_paid += amount
            else:
                solo_outstanding += amount
        elif paid:
            group_paid += amount
        else:
            group_outstanding += amount

    # A registration fee carried on a counted entry is settled with that entry
    state = inp.registration_state
    fee_paid = state is not None and state.registration_fee_paid
    charged = state is not None and state.registration_charged
    registration_paid = registration_outstanding = ZERO
    if not carried:
        if fee_paid:
            registration_paid = inp.registration_fee_amount
        elif entry_count or charged:
            registration_outstanding = inp.registration_fee_amount

    total_entry_outstanding = solo_outstanding + group_outstanding
    return FinancialSummary(
        registration_fee_amount=inp.registration_fee_amount,
        registration_fee_outstanding=registration_outstanding,
        solo_outstanding=solo_outstanding,
        group_outstanding=group_outstanding,
        total_entry_outstanding=total_entry_outstanding,
        total_outstanding=total_entry_outstanding + registration_outstanding,
        solo_paid=solo_paid,
        group_paid=group_paid,
        registration_fee_paid_amount=registration_paid,
        total_paid=solo_paid + group_paid + registration_paid,
        entry_count=entry_count,
        warnings=tuple(warnings),
    )


def summarize_event(entries: Iterable[Entry]) -> EventFinancials:
    """Invoiced, paid and outstanding totals; entries de-duplicated by id."""
    unique = {e.id: e for e in entries}.values()
    invoiced = paid = ZERO
    paid_count = 0
    for entry in unique:
        invoiced += entry.calculated_fee
        if entry.payment_status == "paid":
            paid += entry.calculated_fee
            paid_count += 1
    return EventFinancials(
        invoiced=invoiced,
        paid=paid,
        outstanding=invoiced - paid,
        entry_count=len(unique),
        paid_entry_count=paid_count,
    )


# --- Run Function (Atomic Component Pattern) ---


def run(inp: AggregationInput, loader: EntryLoaderPort | None = None) -> FinancialSummary:
    return summarize_dancer(inp, loader)
