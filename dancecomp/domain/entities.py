from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# --- Enums / Literals ---
PerformanceType = Literal["Solo", "Duet", "Trio", "Group"]
EntryType = Literal["live", "virtual"]
ParticipationMode = Literal["live", "virtual", "hybrid"]
PaymentStatus = Literal["unpaid", "pending", "paid", "failed"]
PaymentRecordStatus = Literal["pending", "paid", "failed", "cancelled", "refunded"]
PaymentMethod = Literal["payfast", "eft", "credit_card", "bank_transfer", "invoice"]
EventStatus = Literal[
    "upcoming", "registration_open", "registration_closed", "in_progress", "completed"
]

# Fee-schedule fields in declaration order; currency is part of the schedule too.
FEE_FIELDS: tuple[str, ...] = (
    "registration_fee_per_dancer",
    "solo_1_fee",
    "solo_2_fee",
    "solo_3_fee",
    "solo_additional_fee",
    "duo_trio_fee_per_dancer",
    "group_fee_per_dancer",
    "large_group_fee_per_dancer",
)
SCHEDULE_FIELDS: tuple[str, ...] = (*FEE_FIELDS, "currency")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def performance_type_from_count(participant_count: int) -> PerformanceType:
    """Map a participant count (>= 1) to its performance type."""
    if participant_count < 1:
        raise ValueError(f"participant count must be at least 1, got {participant_count}")
    if participant_count == 1:
        return "Solo"
    if participant_count == 2:
        return "Duet"
    if participant_count == 3:
        return "Trio"
    return "Group"


# --- Fee Schedule ---

class FeeSchedule(BaseModel):
    """
    Per-event fee configuration.

    Every fee is optional: None means the tier was never configured and is
    read as zero (with a warning) by the resolver.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    registration_fee_per_dancer: Decimal | None = Field(
        default=None, ge=0, alias="registrationFeePerDancer"
    )
    solo_1_fee: Decimal | None = Field(default=None, ge=0, alias="solo1Fee")
    solo_2_fee: Decimal | None = Field(default=None, ge=0, alias="solo2Fee")
    solo_3_fee: Decimal | None = Field(default=None, ge=0, alias="solo3Fee")
    solo_additional_fee: Decimal | None = Field(
        default=None, ge=0, alias="soloAdditionalFee"
    )
    duo_trio_fee_per_dancer: Decimal | None = Field(
        default=None, ge=0, alias="duoTrioFeePerDancer"
    )
    group_fee_per_dancer: Decimal | None = Field(
        default=None, ge=0, alias="groupFeePerDancer"
    )
    large_group_fee_per_dancer: Decimal | None = Field(
        default=None, ge=0, alias="largeGroupFeePerDancer"
    )
    currency: str = "ZAR"

    def missing_fields(self) -> tuple[str, ...]:
        return tuple(name for name in FEE_FIELDS if getattr(self, name) is None)


# --- Events ---

class EventRecord(BaseModel):
    id: str
    name: str = ""
    fee_schedule: FeeSchedule = Field(default_factory=FeeSchedule)
    participation_mode: ParticipationMode = "hybrid"
    judge_count: int = Field(default=3, ge=0)
    status: EventStatus = "upcoming"
    event_date: date | None = None


# --- Entries ---

class Entry(BaseModel):
    """
    A submitted competitive item.

    participant_ids may be empty when the record came from a listing query
    that did not load participants; performance_type is then authoritative.

    calculated_fee is the full snapshot charged on submission. When it
    includes registration fees, registration_fee holds that part and
    registration_dancer_ids names the dancers it covers.
    """

    id: str
    event_id: str
    owner_id: str
    participant_ids: list[str] = Field(default_factory=list)
    performance_type: PerformanceType
    mastery_level: str = ""
    entry_type: EntryType = "live"
    calculated_fee: Decimal = Field(default=Decimal("0"), ge=0)
    registration_fee: Decimal = Field(default=Decimal("0"), ge=0)
    registration_dancer_ids: list[str] = Field(default_factory=list)
    payment_status: PaymentStatus = "unpaid"
    approved: bool = False
    item_number: int | None = Field(default=None, ge=1)
    submitted_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_consistency(self) -> "Entry":
        if self.participant_ids:
            derived = performance_type_from_count(len(self.participant_ids))
            if derived != self.performance_type:
                raise ValueError(
                    f"performance_type {self.performance_type} does not match "
                    f"{len(self.participant_ids)} participant(s) ({derived})"
                )
        if self.registration_fee > self.calculated_fee:
            raise ValueError(
                f"registration_fee {self.registration_fee} exceeds calculated_fee "
                f"{self.calculated_fee}"
            )
        if self.registration_fee and not self.registration_dancer_ids:
            raise ValueError("registration_fee needs registration_dancer_ids")
        return self

    @property
    def is_solo(self) -> bool:
        return self.performance_type == "Solo"

    @property
    def performance_fee(self) -> Decimal:
        return self.calculated_fee - self.registration_fee


class DancerRegistrationState(BaseModel):
    dancer_id: str
    event_id: str
    registration_fee_paid: bool = False
    registration_charged: bool = False
    mastery_level: str | None = None
    charged_at: datetime | None = None
    # Entry whose calculated_fee carries the charge
    charged_entry_id: str | None = None

    @property
    def needs_registration_fee(self) -> bool:
        return not (self.registration_fee_paid or self.registration_charged)


# --- Payments ---

class Payment(BaseModel):
    id: str
    entry_id: str
    event_id: str
    status: PaymentRecordStatus = "pending"
    reference: str | None = None
    method: PaymentMethod = "eft"
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    date: datetime = Field(default_factory=_utcnow)


# --- Scores ---

class Score(BaseModel):
    performance_id: str
    judge_id: str
    technical: Decimal = Field(ge=0, le=20)
    musical: Decimal = Field(ge=0, le=20)
    performance: Decimal = Field(ge=0, le=20)
    styling: Decimal = Field(ge=0, le=20)
    overall_impression: Decimal = Field(ge=0, le=20)
    comments: str = ""
    submitted_at: datetime = Field(default_factory=_utcnow)

    @property
    def total(self) -> Decimal:
        return (
            self.technical
            + self.musical
            + self.performance
            + self.styling
            + self.overall_impression
        )
