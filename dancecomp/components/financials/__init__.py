"""
Financials component - Outstanding and paid balance aggregation.
"""

from .component import owns_solo, run, summarize_dancer, summarize_event
from .models import AggregationInput, EventFinancials, FinancialSummary
from .ports import EntryLoaderPort

__all__ = [
    # Functions
    "owns_solo",
    "run",
    "summarize_dancer",
    "summarize_event",
    # Models
    "AggregationInput",
    "EventFinancials",
    "FinancialSummary",
    # Ports
    "EntryLoaderPort",
]
