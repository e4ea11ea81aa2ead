"""
Group share component - Per-participant splits of shared entry fees.
"""

from .component import allocate_shares, run, share_for, split_minor_units
from .models import AllocationInput, GroupShareOutput, ParticipantShare

__all__ = [
    # Functions
    "allocate_shares",
    "run",
    "share_for",
    "split_minor_units",
    # Models
    "AllocationInput",
    "GroupShareOutput",
    "ParticipantShare",
]
