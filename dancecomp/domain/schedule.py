"""
Fee schedule field access with the zero-default rule.

Registration must never be blocked by incomplete configuration, so an
unconfigured field reads as zero. The caller receives a warning instead.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from dancecomp.domain.entities import FEE_FIELDS, FeeSchedule
from dancecomp.domain.errors import FeeWarning, incomplete_schedule_warning
from dancecomp.domain.money import ZERO

logger = logging.getLogger(__name__)


def read_fee(schedule: FeeSchedule, field: str, warnings: list[FeeWarning]) -> Decimal:
    """
    Read a fee field, appending an incomplete-schedule warning if unset.

    A field is warned about at most once per warnings list.
    """
    if field not in FEE_FIELDS:
        raise KeyError(f"Unknown fee schedule field: {field}")

    value: Decimal | None = getattr(schedule, field)
    if value is not None:
        return value

    if not any(w.field == field for w in warnings):
        warnings.append(incomplete_schedule_warning(field))
        logger.warning("Fee schedule field %s unset; using 0", field)
    return ZERO
