"""
Event safety component - Guarded structural changes to live events.
"""

from .component import (
    apply_event_update,
    changed_fee_fields,
    check_event_changes,
    combine_verdicts,
    evaluate_rules,
    event_restrictions,
)
from .models import (
    Allowed,
    ApplyEventUpdateOutput,
    Blocked,
    CombinedVerdict,
    EventChangeSet,
    EventRestrictions,
    Risky,
    SafetyCheckResult,
    SafetyStats,
    SafetyStatus,
    Verdict,
)
from .ports import EventUnitOfWork, EventUpdatePort

__all__ = [
    # Functions
    "apply_event_update",
    "changed_fee_fields",
    "check_event_changes",
    "combine_verdicts",
    "evaluate_rules",
    "event_restrictions",
    # Models
    "Allowed",
    "ApplyEventUpdateOutput",
    "Blocked",
    "CombinedVerdict",
    "EventChangeSet",
    "EventRestrictions",
    "Risky",
    "SafetyCheckResult",
    "SafetyStats",
    "SafetyStatus",
    "Verdict",
    # Ports
    "EventUnitOfWork",
    "EventUpdatePort",
]
