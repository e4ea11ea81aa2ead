"""
EntryFeeService - Quotes and submissions against stored state.

Imperative shell around calculate_entry_fee. Quotes only read; submit
claims the solo tier and registration charges through the ports before
pricing, so concurrent submissions never share a tier or a first charge.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import uuid4

from dancecomp.components.fee_schedule import performance_type_for
from dancecomp.components.solo_tiers import (
    ClaimTierInput,
    SoloTierClaimPort,
    claim_solo_tier,
)
from dancecomp.domain.entities import DancerRegistrationState
from dancecomp.domain.errors import InvalidParticipantCountError
from dancecomp.rules.models import DEFAULT_RULES, Rules

from .component import calculate_entry_fee, unique_participants
from .models import EntryFeeInput, FeeBreakdown, SubmissionOutput
from .ports import FeeSchedulePort, RegistrationPort

logger = logging.getLogger(__name__)


def _check_participants(inp: EntryFeeInput) -> None:
    derived = performance_type_for(len(inp.participant_ids))
    if inp.performance_type is not None and inp.performance_type != derived:
        raise InvalidParticipantCountError(
            len(inp.participant_ids),
            f"{inp.performance_type} cannot have {len(inp.participant_ids)} participant(s)",
        )


class EntryFeeService:
    """
    Entry fee service.

    Prices entries using fee schedules, registration state and solo tier
    slots held by the storage collaborator.
    """

    def __init__(
        self,
        schedules: FeeSchedulePort,
        registrations: RegistrationPort,
        tiers: SoloTierClaimPort,
        rules: Rules | None = None,
    ) -> None:
        self._schedules = schedules
        self._registrations = registrations
        self._tiers = tiers
        self._rules = rules or DEFAULT_RULES

    def quote(self, inp: EntryFeeInput) -> FeeBreakdown:
        """Price an entry without claiming anything."""
        _check_participants(inp)
        schedule = self._schedules.get_fee_schedule(inp.event_id)
        states = self._registrations.get_registration_states(
            inp.event_id, unique_participants(inp.participant_ids)
        )
        prior = 0
        if len(inp.participant_ids) == 1:
            prior = self._tiers.count_solo_slots(inp.event_id, inp.participant_ids[0])
        return calculate_entry_fee(inp, schedule, states, prior, rules=self._rules)

    def submit(self, inp: EntryFeeInput) -> SubmissionOutput:
        """
        Claim tier and registration slots, then price the entry.

        Claims made by this call are released again if a later step
        fails, so an entry that was never stored holds no tier or charge.

        Returns:
            SubmissionOutput carrying the fee snapshot to persist on the entry
        """
        # Reject bad counts before anything is claimed
        _check_participants(inp)
        entry_id = inp.entry_id or str(uuid4())
        inp = replace(inp, entry_id=entry_id)
        schedule = self._schedules.get_fee_schedule(inp.event_id)

        solo_dancer = inp.participant_ids[0] if len(inp.participant_ids) == 1 else None
        tier = None
        prior = 0
        claimed: list[str] = []
        try:
            if solo_dancer is not None:
                claim = claim_solo_tier(
                    ClaimTierInput(
                        event_id=inp.event_id,
                        dancer_id=solo_dancer,
                        entry_id=entry_id,
                    ),
                    claims=self._tiers,
                    max_attempts=self._rules.tiers.max_claim_attempts,
                )
                tier = claim.tier
                prior = claim.prior_solo_count

            participants = unique_participants(inp.participant_ids)
            for dancer_id in participants:
                if self._registrations.claim_registration(
                    inp.event_id, dancer_id, inp.mastery_level, entry_id
                ):
                    claimed.append(dancer_id)

            # Dancers claimed by this call owe the fee; everyone else already does
            states = {
                dancer_id: DancerRegistrationState(
                    dancer_id=dancer_id,
                    event_id=inp.event_id,
                    registration_charged=dancer_id not in claimed,
                )
                for dancer_id in participants
            }
            breakdown = calculate_entry_fee(inp, schedule, states, prior, rules=self._rules)
        except Exception:
            logger.warning("Submission of entry %s failed; releasing claims", entry_id)
            self._release(inp.event_id, entry_id, solo_dancer if tier else None, claimed)
            raise

        if claimed:
            logger.info(
                "Registration fee claimed for %d dancer(s) in event %s (entry %s)",
                len(claimed),
                inp.event_id,
                entry_id,
            )
        return SubmissionOutput(
            entry_id=entry_id,
            breakdown=breakdown,
            tier=tier,
            registration_claimed_ids=tuple(claimed),
        )

    def _release(
        self,
        event_id: str,
        entry_id: str,
        solo_dancer: str | None,
        claimed: list[str],
    ) -> None:
        for dancer_id in claimed:
            self._registrations.release_registration(event_id, dancer_id, entry_id)
        if solo_dancer is not None:
            self._tiers.release_solo_slot(event_id, solo_dancer, entry_id)
