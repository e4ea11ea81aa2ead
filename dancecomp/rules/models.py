from decimal import Decimal

from pydantic import BaseModel, Field

from dancecomp.domain.money import DEFAULT_SYMBOLS


class ProjectRules(BaseModel):
    slug: str = "dancecomp"
    rules_version: str = "1"

class CurrencyRules(BaseModel):
    default: str = "ZAR"
    minor_units: int = Field(default=2, ge=0, le=4)
    symbols: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_SYMBOLS))

class FeeRules(BaseModel):
    large_group_min_size: int = Field(default=10, ge=5)
    mismatch_tolerance: Decimal = Field(default=Decimal("0.01"), ge=0)

class TierRules(BaseModel):
    max_claim_attempts: int = Field(default=3, ge=1)

class ScoringRules(BaseModel):
    decimal_places: int = Field(default=2, ge=0, le=4)

class Rules(BaseModel):
    project: ProjectRules = Field(default_factory=ProjectRules)
    currency: CurrencyRules = Field(default_factory=CurrencyRules)
    fees: FeeRules = Field(default_factory=FeeRules)
    tiers: TierRules = Field(default_factory=TierRules)
    scoring: ScoringRules = Field(default_factory=ScoringRules)


DEFAULT_RULES = Rules()
