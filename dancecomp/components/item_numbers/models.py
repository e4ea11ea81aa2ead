"""
Item number component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ItemNumberError:
    code: str
    message: str


@dataclass(frozen=True)
class AssignItemNumberOutput:
    """Result of assigning a running-order number to an entry."""

    item_number: int | None
    errors: list[ItemNumberError] = field(default_factory=list)
    success: bool = True
