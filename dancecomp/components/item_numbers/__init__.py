"""
Item number component - Per-event running order numbers.
"""

from .component import assign_item_number, next_item_number, validate_item_number
from .models import AssignItemNumberOutput, ItemNumberError
from .ports import ItemNumberPort

__all__ = [
    # Functions
    "assign_item_number",
    "next_item_number",
    "validate_item_number",
    # Models
    "AssignItemNumberOutput",
    "ItemNumberError",
    # Ports
    "ItemNumberPort",
]
