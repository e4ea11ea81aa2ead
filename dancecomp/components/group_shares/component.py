"""
Group share component - Exact per-participant fee splits.

Splits an entry's calculated fee in minor units with the largest
remainder method: every participant gets the floor share and the first
`remainder` participants in list order get one extra unit.

Invariants:
- Shares sum exactly to the calculated fee
- No share differs from another by more than one minor unit
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from dancecomp.domain.errors import AllocationError, InvalidParticipantCountError
from dancecomp.domain.money import from_minor_units, is_exact, to_decimal, to_minor_units

from .models import AllocationInput, GroupShareOutput, ParticipantShare

# --- Pure Functions ---


def split_minor_units(total_units: int, count: int) -> list[int]:
    """Split an integer amount into `count` parts, remainder to the front."""
    if count < 1:
        raise InvalidParticipantCountError(count)
    base, remainder = divmod(total_units, count)
    return [base + 1 if i < remainder else base for i in range(count)]


def allocate_shares(
    calculated_fee: Decimal | int | str,
    participant_ids: Sequence[str],
    owner_id: str | None = None,
    *,
    minor_units: int = 2,
) -> GroupShareOutput:
    """
    Split a calculated fee across an entry's participants.

    Args:
        calculated_fee: The entry's fee snapshot
        participant_ids: Ordered participant list
        owner_id: Registrant / main contestant, if known
        minor_units: Currency minor units

    Returns:
        GroupShareOutput with one share per participant, in list order

    Raises:
        InvalidParticipantCountError: participant list is empty
        AllocationError: duplicate ids, negative fee, or sub-minor-unit fee
    """
    fee = to_decimal(calculated_fee)
    if not participant_ids:
        raise InvalidParticipantCountError(0, "Cannot allocate a fee across 0 participants")
    if len(set(participant_ids)) != len(participant_ids):
        raise AllocationError(f"Duplicate participant ids: {list(participant_ids)}")
    if fee < 0:
        raise AllocationError(f"Calculated fee cannot be negative: {fee}")
    if not is_exact(fee, minor_units):
        raise AllocationError(
            f"Calculated fee {fee} has precision below {minor_units} minor units"
        )

    units = split_minor_units(to_minor_units(fee, minor_units), len(participant_ids))
    total = from_minor_units(sum(units), minor_units)

    shares = []
    for dancer_id, part in zip(participant_ids, units):
        share = from_minor_units(part, minor_units)
        is_owner = dancer_id == owner_id
        shares.append(
            ParticipantShare(
                dancer_id=dancer_id,
                share=share,
                is_main_contestant=is_owner,
                obligation=total if is_owner else share,
            )
        )

    return GroupShareOutput(total=total, shares=tuple(shares))


def share_for(
    calculated_fee: Decimal | int | str,
    participant_ids: Sequence[str],
    dancer_id: str,
    *,
    minor_units: int = 2,
) -> Decimal:
    """One participant's share; raises AllocationError if not a participant."""
    output = allocate_shares(calculated_fee, participant_ids, minor_units=minor_units)
    share = output.share_of(dancer_id)
    if share is None:
        raise AllocationError(f"Dancer {dancer_id} is not a participant of this entry")
    return share.share


# --- Run Function (Atomic Component Pattern) ---


def run(inp: AllocationInput, minor_units: int = 2) -> GroupShareOutput:
    return allocate_shares(
        inp.calculated_fee, inp.participant_ids, inp.owner_id, minor_units=minor_units
    )
