"""
Solo tier component - Solo package tier tracking and pricing.
"""

from .component import (
    claim_solo_tier,
    cumulative_solo_total,
    incremental_solo_fee,
    package_price,
    run,
    solo_fee_sequence,
)
from .models import ClaimTierInput, ClaimTierOutput, SoloTierInput, SoloTierOutput
from .ports import SoloTierClaimPort

__all__ = [
    # Functions
    "claim_solo_tier",
    "cumulative_solo_total",
    "incremental_solo_fee",
    "package_price",
    "run",
    "solo_fee_sequence",
    # Models
    "ClaimTierInput",
    "ClaimTierOutput",
    "SoloTierInput",
    "SoloTierOutput",
    # Ports
    "SoloTierClaimPort",
]
